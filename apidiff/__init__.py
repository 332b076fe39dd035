"""apidiff

API difference reports between successive releases of a multi-module
distribution (Eclipse Jetty by default).

The package is a thin orchestrator around an external comparison engine
(japicmp):

  release roots -> versions + artifacts -> japicmp -> HTML report -> cleanup

Layout
------
* :mod:`apidiff.versions` / :mod:`apidiff.locator` / :mod:`apidiff.ordering`
  read the release build output.
* :mod:`apidiff.japicmp` owns everything engine-specific (command line,
  report emission).
* :mod:`apidiff.cleanup` rewrites the generated HTML.
* :mod:`apidiff.pipeline` runs one release pair at a time and isolates
  failures per pair.

``apidiff_cli.py`` is the composition root for command-line runs.
"""

from __future__ import annotations

__version__ = "0.1.0"
