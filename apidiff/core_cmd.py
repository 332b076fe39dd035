"""apidiff/core_cmd.py

Command-execution helpers used by the engine adapter.

This module deliberately avoids engine-specific knowledge. It provides:

* :func:`which_or_raise` - resolve executables (``java``) across environments.
* :func:`run_cmd` - run subprocesses (no shell=True) and capture output.
"""

from __future__ import annotations

import os
import shutil
import subprocess
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional


JAVA_FALLBACKS = ["/usr/bin/java", "/usr/local/bin/java", "/opt/homebrew/opt/openjdk/bin/java"]


@dataclass(frozen=True)
class CmdResult:
    exit_code: int
    elapsed_seconds: float
    command_str: str
    stdout: str
    stderr: str

    def stderr_tail(self, lines: int = 5) -> List[str]:
        """Last non-blank stderr lines, for error messages."""
        return [ln for ln in self.stderr.splitlines() if ln.strip()][-lines:]


def which_or_raise(bin_name: str, fallbacks: Optional[List[str]] = None) -> str:
    """Locate an executable and return its absolute path.

    ``bin_name`` may itself be a path (e.g. ``$JAVA_HOME/bin/java``); it is
    accepted as-is when it points at an executable file.
    """
    direct = Path(bin_name)
    if direct.is_absolute() and direct.is_file() and os.access(str(direct), os.X_OK):
        return str(direct)

    found = shutil.which(bin_name)
    if found:
        return found

    for candidate in fallbacks or []:
        p = Path(candidate)
        if p.exists() and os.access(str(p), os.X_OK):
            return str(p)

    raise FileNotFoundError(
        f"Executable '{bin_name}' not found on PATH.\n"
        f"Install it and ensure it's available to this Python process.\n"
        f"Tried fallbacks: {fallbacks or []}"
    )


def java_from_env() -> str:
    """Return ``$JAVA_HOME/bin/java`` when JAVA_HOME is set, else ``java``."""
    java_home = os.environ.get("JAVA_HOME")
    if java_home:
        return str(Path(java_home) / "bin" / "java")
    return "java"


def run_cmd(
    cmd: List[str],
    *,
    cwd: Optional[Path] = None,
    timeout_seconds: int = 0,
    echo_stderr: bool = True,
) -> CmdResult:
    """Run ``cmd`` without a shell and capture both streams.

    A non-zero exit is returned, not raised; callers decide what it means.
    ``subprocess.TimeoutExpired`` and ``OSError`` still propagate.
    """
    started = time.monotonic()
    proc = subprocess.run(
        cmd,
        cwd=str(cwd) if cwd else None,
        text=True,
        capture_output=True,
        timeout=timeout_seconds if timeout_seconds > 0 else None,
    )
    elapsed = time.monotonic() - started

    # The JVM writes warnings to stderr even when the run succeeds.
    if echo_stderr and proc.stderr:
        print(proc.stderr.rstrip("\n"), file=sys.stderr)

    return CmdResult(
        exit_code=proc.returncode,
        elapsed_seconds=elapsed,
        command_str=" ".join(cmd),
        stdout=proc.stdout or "",
        stderr=proc.stderr or "",
    )
