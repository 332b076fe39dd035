"""apidiff.cleanup

Post-processing of the emitted HTML report.

japicmp embeds the absolute paths of every compared jar, joined with ``;``
(or ``:``), into the report. Cleanup makes the report portable and readable:

1. the OLD release's dependency directory -> placeholder (``${maven.repo}``)
2. the NEW release's dependency directory -> placeholder
3. ``.jar;`` / ``.jar:`` -> ``.jar<br/>`` + newline

All replacements are literal substring replacements; paths may contain regex
metacharacters.

The report is first moved to ``copy-of-<name>`` and then rebuilt line by line
from that copy, so the same path is never read and written at once. The copy
is left behind for inspection unless ``keep_copy=False``.
"""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Callable, Optional, Union


LineFn = Callable[[str], str]

BREAK = ".jar<br/>\n"
SEPARATORS = (".jar;", ".jar:")


def build_line_rewriter(
    old_dependency_dir: Union[str, Path],
    new_dependency_dir: Union[str, Path],
    placeholder: str = "${maven.repo}",
) -> LineFn:
    """Return the per-line rewrite function for one release pair."""
    old_root = str(old_dependency_dir).rstrip("/\\")
    new_root = str(new_dependency_dir).rstrip("/\\")

    def rewrite(line: str) -> str:
        if old_root:
            line = line.replace(old_root, placeholder)
        if new_root:
            line = line.replace(new_root, placeholder)
        for sep in SEPARATORS:
            line = line.replace(sep, BREAK)
        return line

    return rewrite


def copy_path_for(report: Path, copy_dir: Optional[Path] = None) -> Path:
    return Path(copy_dir or report.parent) / f"copy-of-{report.name}"


def cleanup_report(
    report: Path,
    line_fn: LineFn,
    *,
    copy_dir: Optional[Path] = None,
    keep_copy: bool = True,
) -> Path:
    """Rewrite ``report`` in place through ``line_fn``; return the copy path."""
    report = Path(report)
    copy_of = copy_path_for(report, copy_dir)
    copy_of.parent.mkdir(parents=True, exist_ok=True)

    if copy_of.exists():
        copy_of.unlink()
    shutil.move(str(report), str(copy_of))

    with copy_of.open("r", encoding="utf-8") as reader, report.open(
        "w", encoding="utf-8", newline=""
    ) as writer:
        for raw in reader:
            line = raw[:-1] if raw.endswith("\n") else raw
            writer.write(line_fn(line))
            writer.write("\n")

    if not keep_copy:
        copy_of.unlink()
    return copy_of
