"""apidiff.locator

Artifact discovery under ``<release root>/target/dependency``.

The dependency tree is populated by the release build (one jar per module,
laid out like a Maven repository). Only the product's own jars take part in
the comparison: build tooling and platform bundles are filtered out by path
fragment.

Failure policy
--------------
The walk is fail-fast. Any ``OSError`` while listing a directory or testing an
entry propagates immediately and no partial list is returned; an incomplete
artifact list would silently produce a misleading diff.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple, Union

from apidiff.models import ArtifactReference, ReleaseRoot


@dataclass(frozen=True)
class LocatorPolicy:
    """Which files under the dependency tree count as artifacts."""

    suffix: str = ".jar"
    include_marker: str = "org/eclipse/jetty"
    exclude_markers: Tuple[str, ...] = ("/toolchain/", "/orbit/")

    # Bounds runaway recursion (e.g. symlink loops); real module trees are
    # far shallower.
    max_depth: int = 10

    def matches(self, path: Union[str, Path]) -> bool:
        p = Path(path)
        if not p.name.endswith(self.suffix):
            return False

        # Markers use forward slashes; compare against the POSIX form.
        text = p.as_posix()
        if self.include_marker not in text:
            return False
        return not any(marker in text for marker in self.exclude_markers)


DEFAULT_POLICY = LocatorPolicy()


def _walk_files(start: Path, max_depth: int) -> List[Path]:
    """Regular files at most ``max_depth`` levels below ``start``.

    Symlinked directories are not followed. Directories at the depth limit are
    not entered.
    """
    found: List[Path] = []
    pending: List[Tuple[Path, int]] = [(start, 0)]

    while pending:
        current, depth = pending.pop()
        with os.scandir(current) as it:
            for entry in it:
                entry_depth = depth + 1
                if entry.is_dir(follow_symlinks=False):
                    if entry_depth < max_depth:
                        pending.append((Path(entry.path), entry_depth))
                    continue
                if entry.is_file():
                    found.append(Path(entry.path))

    return found


def locate_artifacts(
    root: Union[ReleaseRoot, Path],
    version: str,
    policy: LocatorPolicy = DEFAULT_POLICY,
) -> List[ArtifactReference]:
    """Return every artifact under the release's dependency directory.

    Each match is tagged with ``version``. The result order is unspecified;
    use :func:`apidiff.ordering.order_artifacts` before handing it to the
    engine.

    Raises ``FileNotFoundError`` when the dependency directory is missing and
    any other ``OSError`` raised while walking.
    """
    release = root if isinstance(root, ReleaseRoot) else ReleaseRoot(Path(root))
    start = release.dependency_dir
    if policy.max_depth < 0:
        raise ValueError(f"max_depth must be >= 0, got {policy.max_depth}")
    if policy.max_depth == 0:
        # Only the start directory itself would be visited.
        if not start.exists():
            raise FileNotFoundError(f"Dependency directory not found: {start}")
        return []

    return [
        ArtifactReference(path=path, version=version)
        for path in _walk_files(start, policy.max_depth)
        if policy.matches(path)
    ]
