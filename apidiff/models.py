"""apidiff.models

Shared data structures for one release-pair comparison.

These dataclasses intentionally contain no side effects beyond cheap
``exists()`` checks, so they can be passed freely between the locator, the
engine adapter and the driver.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from apidiff.core_cmd import CmdResult


DEPENDENCY_DIR = Path("target") / "dependency"
BUILD_PROPERTIES = Path("target") / "classes" / "build.properties"


@dataclass(frozen=True)
class ReleaseRoot:
    """Top-level build output directory of one release."""

    path: Path

    @classmethod
    def resolve(cls, base_dir: Path, name: str) -> "ReleaseRoot":
        return cls(path=(Path(base_dir) / name).absolute())

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def dependency_dir(self) -> Path:
        return self.path / DEPENDENCY_DIR

    @property
    def build_properties(self) -> Path:
        return self.path / BUILD_PROPERTIES

    def exists(self) -> bool:
        return self.path.exists()


@dataclass(frozen=True)
class ArtifactReference:
    """One discovered artifact plus the version of the release it belongs to."""

    path: Path
    version: str


class AccessModifier(enum.Enum):
    """Visibility threshold passed to the engine (lowest included level)."""

    PUBLIC = "public"
    PROTECTED = "protected"
    PACKAGE_PROTECTED = "package"
    PRIVATE = "private"

    @property
    def cli_value(self) -> str:
        return self.value

    @classmethod
    def parse(cls, raw: str) -> "AccessModifier":
        s = str(raw).strip().lower()
        for member in cls:
            if s in {member.value, member.name.lower()}:
                return member
        raise ValueError(f"Unknown access modifier: {raw!r}")


@dataclass(frozen=True)
class ComparisonConfig:
    """Engine options for one comparison. Built once per pair."""

    output_file: Path
    title: str
    work_dir: Path
    access_modifier: AccessModifier = AccessModifier.PROTECTED
    only_modifications: bool = True
    only_binary_incompatible: bool = False
    ignore_missing_classes: bool = True
    ignore_missing_old_version: bool = False
    ignore_missing_new_version: bool = False
    semantic_versioning: bool = False
    html_stylesheet: Optional[Path] = None
    create_schema_file: bool = True

    @property
    def staged_html(self) -> Path:
        return self.work_dir / self.output_file.name

    @property
    def staged_xml(self) -> Path:
        return self.work_dir / f"{self.output_file.stem}.xml"


@dataclass(frozen=True)
class DiffResult:
    """Opaque engine output. Only existence is consulted by this tool."""

    html_path: Path
    xml_path: Path
    cmd: "CmdResult"

    def exists(self) -> bool:
        return self.html_path.exists()


@dataclass(frozen=True)
class PairRequest:
    """One old/new release comparison."""

    old: ReleaseRoot
    new: ReleaseRoot
    name: str

    @property
    def report_filename(self) -> str:
        return f"{self.name}-diff.html"


class PairStage(enum.Enum):
    NOT_STARTED = "not_started"
    ROOTS_VALIDATED = "roots_validated"
    VERSIONS_LOADED = "versions_loaded"
    ARTIFACTS_DISCOVERED = "artifacts_discovered"
    COMPARED = "compared"
    EMITTED = "emitted"
    CLEANED = "cleaned"
    DONE = "done"


@dataclass
class PairOutcome:
    """Result of running the pipeline for one release pair."""

    request: PairRequest
    stage: PairStage = PairStage.NOT_STARTED
    report_path: Optional[Path] = None
    old_version: Optional[str] = None
    new_version: Optional[str] = None
    old_artifacts: int = 0
    new_artifacts: int = 0
    command: Optional[str] = None
    elapsed_seconds: Optional[float] = None
    error: Optional[BaseException] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None and self.stage is PairStage.DONE

    @property
    def status(self) -> str:
        return "ok" if self.ok else "failed"

    def to_dict(self) -> dict:
        return {
            "pair": self.request.name,
            "old_root": str(self.request.old.path),
            "new_root": str(self.request.new.path),
            "old_version": self.old_version,
            "new_version": self.new_version,
            "old_artifacts": self.old_artifacts,
            "new_artifacts": self.new_artifacts,
            "report_path": str(self.report_path) if self.report_path else None,
            "command": self.command,
            "elapsed_seconds": self.elapsed_seconds,
            "stage": self.stage.value,
            "status": self.status,
            "error": f"{type(self.error).__name__}: {self.error}" if self.error else None,
            "warnings": list(self.warnings),
        }
