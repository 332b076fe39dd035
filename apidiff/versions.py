"""apidiff.versions

Release version lookup from ``<root>/target/classes/build.properties``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

from apidiff.errors import VersionNotFoundError
from apidiff.io import read_properties
from apidiff.models import ReleaseRoot


logger = logging.getLogger(__name__)

DEFAULT_VERSION_KEY = "jetty.version"


def load_version(
    root: Union[ReleaseRoot, Path],
    *,
    key: str = DEFAULT_VERSION_KEY,
    required: bool = False,
) -> str:
    """Return the value of ``key`` from the release's build.properties.

    A missing file raises ``FileNotFoundError``. A missing key returns ``""``
    (the comparison proceeds with a blank version in the report title) unless
    ``required`` is set, in which case :class:`VersionNotFoundError` is raised.
    """
    release = root if isinstance(root, ReleaseRoot) else ReleaseRoot(Path(root))
    props_path = release.build_properties

    props = read_properties(props_path)
    version = props.get(key)
    if version:
        return version

    if required:
        raise VersionNotFoundError(f"Key '{key}' not found in {props_path}")

    logger.warning("Key '%s' not found in %s; using a blank version", key, props_path)
    return ""
