"""apidiff.errors

Typed failures raised by the pipeline stages.

Every failure is caught at the release-pair boundary
(:func:`apidiff.pipeline.run_pairs`) and recorded on the pair's outcome, so
these classes mostly exist to make outcomes and log lines readable.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from apidiff.core_cmd import CmdResult


class ApiDiffError(Exception):
    """Base class for apidiff failures."""


class ConfigError(ApiDiffError):
    """Invalid settings (YAML file, environment or CLI flags)."""


class ReleaseRootNotFoundError(ApiDiffError, FileNotFoundError):
    """A release root directory does not exist."""


class VersionNotFoundError(ApiDiffError):
    """The version key is missing from build.properties (strict mode only)."""


class MissingArtifactsError(ApiDiffError):
    """One side of a comparison has no artifacts after discovery."""


class ComparatorError(ApiDiffError):
    """The external comparison engine exited with a non-zero status."""

    def __init__(self, message: str, result: Optional["CmdResult"] = None) -> None:
        super().__init__(message)
        self.result = result
