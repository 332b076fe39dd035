"""apidiff/japicmp/report.py

Report emission: promote staged japicmp output to the final report path.

The HTML is copied with its ``<title>`` (and japicmp's default heading text)
replaced by the configured report title. When ``create_schema_file`` is set the
XML companion and any XSD written by japicmp are copied next to the report,
overwriting previous runs.
"""

from __future__ import annotations

import html
import re
import shutil
from pathlib import Path

from apidiff.models import ComparisonConfig, DiffResult


JAPICMP_DEFAULT_TITLE = "JApiCmp-Report"

_TITLE_RE = re.compile(r"<title>.*?</title>", re.IGNORECASE | re.DOTALL)


def retitle(text: str, title: str) -> str:
    escaped = html.escape(title, quote=False)
    text = _TITLE_RE.sub(lambda _m: f"<title>{escaped}</title>", text, count=1)
    return text.replace(JAPICMP_DEFAULT_TITLE, escaped)


def write_report(result: DiffResult, config: ComparisonConfig) -> Path:
    """Write the final HTML report (and companions); return its path."""
    if not result.exists():
        raise FileNotFoundError(f"No staged report to emit: {result.html_path}")

    out = config.output_file
    out.parent.mkdir(parents=True, exist_ok=True)

    # newline="" keeps the engine's line endings untouched.
    with result.html_path.open("r", encoding="utf-8", newline="") as src:
        text = src.read()
    with out.open("w", encoding="utf-8", newline="") as dst:
        dst.write(retitle(text, config.title))

    if config.create_schema_file:
        if result.xml_path.exists():
            shutil.copyfile(result.xml_path, out.with_suffix(".xml"))
        for xsd in sorted(result.html_path.parent.glob("*.xsd")):
            shutil.copyfile(xsd, out.parent / xsd.name)

    return out
