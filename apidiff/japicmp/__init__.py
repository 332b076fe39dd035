"""apidiff.japicmp

japicmp engine adapter.

`runner` builds and runs the japicmp command line; `report` promotes the
staged output to the final report. :class:`JapicmpComparator` bundles both
behind the two calls the pipeline needs (``compare`` / ``write_report``).
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from apidiff.models import ArtifactReference, ComparisonConfig, DiffResult
from apidiff.settings import Settings

from .report import write_report
from .runner import (
    JapicmpRunner,
    build_comparison_config,
    build_japicmp_command,
    check_sides,
)


class JapicmpComparator:
    """Comparator used by :mod:`apidiff.pipeline` for real runs."""

    def __init__(self, runner: JapicmpRunner) -> None:
        self.runner = runner

    @classmethod
    def from_settings(cls, settings: Settings) -> "JapicmpComparator":
        return cls(JapicmpRunner.from_settings(settings))

    def describe(
        self,
        old: Sequence[ArtifactReference],
        new: Sequence[ArtifactReference],
        config: ComparisonConfig,
    ) -> str:
        return " ".join(self.runner.command_for(old, new, config))

    def compare(
        self,
        old: Sequence[ArtifactReference],
        new: Sequence[ArtifactReference],
        config: ComparisonConfig,
    ) -> DiffResult:
        return self.runner.compare(old, new, config)

    def write_report(self, result: DiffResult, config: ComparisonConfig) -> Path:
        return write_report(result, config)


__all__ = [
    "JapicmpComparator",
    "JapicmpRunner",
    "build_comparison_config",
    "build_japicmp_command",
    "check_sides",
    "write_report",
]
