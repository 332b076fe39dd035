"""apidiff.ordering

Deterministic order for artifact lists.

The engine reports classes in input order, so sorting here keeps reports
stable across runs, operating systems and filesystems.
"""

from __future__ import annotations

from typing import Iterable, List

from apidiff.models import ArtifactReference


def artifact_sort_key(ref: ArtifactReference) -> str:
    return str(ref.path)


def order_artifacts(refs: Iterable[ArtifactReference]) -> List[ArtifactReference]:
    """Return a new list sorted ascending by file path."""
    return sorted(refs, key=artifact_sort_key)
