"""apidiff/io.py

Small filesystem helpers shared across the pipeline.

- :func:`write_json` - atomic, stable JSON writer (per-pair metadata).
- :func:`read_properties` - Java ``.properties`` reader (build.properties).

Normalization/cleanup policy does not belong here; see :mod:`apidiff.cleanup`.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Iterator, List


def write_json(path: Path, data: Any) -> None:
    """Write pretty JSON to disk (UTF-8) via temp file + ``os.replace``."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(prefix=f"{p.name}.", suffix=".tmp", dir=str(p.parent))
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, sort_keys=True, ensure_ascii=False, default=str)
            f.write("\n")
        os.replace(tmp_path, p)
    finally:
        if tmp_path.exists():
            tmp_path.unlink()


# ---------------------------------------------------------------------------
# Java properties
# ---------------------------------------------------------------------------

_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}
_WHITESPACE = " \t\f"


def _logical_lines(text: str) -> Iterator[str]:
    """Join backslash-continued natural lines into logical lines."""
    buf: List[str] = []
    for raw in text.splitlines():
        line = raw.lstrip(_WHITESPACE) if buf else raw
        if not buf and (not line.strip(_WHITESPACE) or line.lstrip(_WHITESPACE)[:1] in ("#", "!")):
            continue

        # An odd number of trailing backslashes continues the line.
        trailing = len(line) - len(line.rstrip("\\"))
        if trailing % 2 == 1:
            buf.append(line[:-1])
            continue

        buf.append(line)
        yield "".join(buf)
        buf = []

    if buf:
        yield "".join(buf)


def _unescape(s: str) -> str:
    out: List[str] = []
    i = 0
    while i < len(s):
        ch = s[i]
        if ch != "\\" or i + 1 >= len(s):
            out.append(ch)
            i += 1
            continue
        nxt = s[i + 1]
        if nxt == "u" and i + 6 <= len(s):
            try:
                out.append(chr(int(s[i + 2 : i + 6], 16)))
                i += 6
                continue
            except ValueError:
                pass
        out.append(_ESCAPES.get(nxt, nxt))
        i += 2
    return "".join(out)


def _split_key_value(line: str) -> tuple[str, str]:
    line = line.lstrip(_WHITESPACE)
    i = 0
    while i < len(line):
        ch = line[i]
        if ch == "\\":
            i += 2
            continue
        if ch in "=:" or ch in _WHITESPACE:
            break
        i += 1

    key = line[:i]
    rest = line[i:].lstrip(_WHITESPACE)
    if rest[:1] in ("=", ":"):
        rest = rest[1:].lstrip(_WHITESPACE)
    return _unescape(key), _unescape(rest)


def parse_properties(text: str) -> Dict[str, str]:
    """Parse Java ``.properties`` text. Later keys win, as in ``Properties.load``."""
    props: Dict[str, str] = {}
    for line in _logical_lines(text):
        key, value = _split_key_value(line)
        props[key] = value
    return props


def read_properties(path: Path) -> Dict[str, str]:
    """Read a ``.properties`` file (ISO-8859-1, like ``Properties.load``).

    Raises ``FileNotFoundError`` (an ``OSError``) when the file is absent.
    """
    text = Path(path).read_text(encoding="latin-1")
    return parse_properties(text)
