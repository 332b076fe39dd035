"""apidiff/japicmp/runner.py

japicmp invocation.

japicmp is run as ``java -jar japicmp.jar ...``. Its output (HTML + XML) is
written into a per-pair staging directory; :mod:`apidiff.japicmp.report`
promotes it to the final report location.

Fixed options
-------------
* missing classes on either side are ignored (modules move between releases)
* a side with zero artifacts is fatal unless explicitly tolerated
* only modifications are reported
* protected and public members only
* semantic-version inference is off
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Sequence

from apidiff.core_cmd import JAVA_FALLBACKS, run_cmd, which_or_raise
from apidiff.errors import ComparatorError, MissingArtifactsError
from apidiff.models import (
    AccessModifier,
    ArtifactReference,
    ComparisonConfig,
    DiffResult,
    PairRequest,
)
from apidiff.settings import Settings


logger = logging.getLogger(__name__)

# japicmp splits --old/--new values on ';'.
ARCHIVE_SEPARATOR = ";"


def build_comparison_config(
    request: PairRequest,
    *,
    old_version: str,
    new_version: str,
    settings: Settings,
) -> ComparisonConfig:
    output_dir = settings.resolved_output_dir()
    return ComparisonConfig(
        output_file=output_dir / request.report_filename,
        title=settings.title_for(old_version, new_version),
        work_dir=output_dir / "work" / request.name,
        access_modifier=AccessModifier.parse(settings.access_modifier),
        html_stylesheet=Path(settings.html_stylesheet).absolute() if settings.html_stylesheet else None,
    )


def join_archives(refs: Sequence[ArtifactReference]) -> str:
    return ARCHIVE_SEPARATOR.join(str(ref.path) for ref in refs)


def build_japicmp_command(
    *,
    java_bin: str,
    jar: Path,
    old: Sequence[ArtifactReference],
    new: Sequence[ArtifactReference],
    config: ComparisonConfig,
) -> List[str]:
    cmd = [
        java_bin,
        "-jar",
        str(jar),
        "--old",
        join_archives(old),
        "--new",
        join_archives(new),
        "--access-modifier",
        config.access_modifier.cli_value,
    ]
    if config.only_modifications:
        cmd.append("--only-modified")
    if config.only_binary_incompatible:
        cmd.append("--only-incompatible")
    if config.ignore_missing_classes:
        cmd.append("--ignore-missing-classes")
    if config.semantic_versioning:
        cmd.append("--semantic-versioning")

    cmd += ["--html-file", str(config.staged_html), "--xml-file", str(config.staged_xml)]

    if config.html_stylesheet:
        cmd += ["--html-stylesheet", str(config.html_stylesheet)]
    return cmd


def check_sides(
    old: Sequence[ArtifactReference],
    new: Sequence[ArtifactReference],
    config: ComparisonConfig,
) -> None:
    """Fail when a whole release side is empty and that is not tolerated."""
    if not old and not config.ignore_missing_old_version:
        raise MissingArtifactsError("No artifacts found for the OLD release (has it been built?)")
    if not new and not config.ignore_missing_new_version:
        raise MissingArtifactsError("No artifacts found for the NEW release (has it been built?)")


class JapicmpRunner:
    """Runs japicmp for one comparison and returns the staged output."""

    def __init__(
        self,
        *,
        jar: Optional[Path],
        java_bin: str = "java",
        timeout_seconds: int = 0,
        quiet: bool = False,
    ) -> None:
        # japicmp runs inside the staging dir, so relative paths are pinned here.
        self.jar = Path(jar).expanduser().absolute() if jar else None
        self.java_bin = java_bin
        self.timeout_seconds = timeout_seconds
        self.quiet = quiet

    @classmethod
    def from_settings(cls, settings: Settings) -> "JapicmpRunner":
        return cls(
            jar=settings.japicmp_jar,
            java_bin=settings.java_bin,
            timeout_seconds=settings.engine_timeout_seconds,
            quiet=settings.quiet,
        )

    def require_jar(self) -> Path:
        if self.jar is None:
            raise FileNotFoundError(
                "japicmp jar not configured.\n"
                "Set APIDIFF_JAPICMP_JAR (or JAPICMP_JAR) in .env, "
                "'japicmp_jar' in the config file, or pass --japicmp-jar."
            )
        if not self.jar.is_file():
            raise FileNotFoundError(f"japicmp jar not found: {self.jar}")
        return self.jar

    def command_for(
        self,
        old: Sequence[ArtifactReference],
        new: Sequence[ArtifactReference],
        config: ComparisonConfig,
        *,
        java_bin: Optional[str] = None,
    ) -> List[str]:
        return build_japicmp_command(
            java_bin=java_bin or self.java_bin,
            jar=self.jar if self.jar is not None else Path("japicmp.jar"),
            old=old,
            new=new,
            config=config,
        )

    def compare(
        self,
        old: Sequence[ArtifactReference],
        new: Sequence[ArtifactReference],
        config: ComparisonConfig,
    ) -> DiffResult:
        check_sides(old, new, config)
        self.require_jar()
        java = which_or_raise(self.java_bin, fallbacks=JAVA_FALLBACKS)

        config.work_dir.mkdir(parents=True, exist_ok=True)
        for stale in (config.staged_html, config.staged_xml):
            if stale.exists():
                stale.unlink()

        cmd = self.command_for(old, new, config, java_bin=java)
        logger.debug("japicmp command: %s", " ".join(cmd))

        res = run_cmd(
            cmd,
            cwd=config.work_dir,
            timeout_seconds=self.timeout_seconds,
            echo_stderr=not self.quiet,
        )
        if res.exit_code != 0:
            raise ComparatorError(
                f"japicmp exited with code {res.exit_code}: " + " | ".join(res.stderr_tail()),
                result=res,
            )

        result = DiffResult(html_path=config.staged_html, xml_path=config.staged_xml, cmd=res)
        if not result.exists():
            raise ComparatorError(f"japicmp did not produce {config.staged_html}", result=res)
        return result
