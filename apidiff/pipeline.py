"""apidiff.pipeline

Per-pair pipeline and driver.

One release pair runs through a linear sequence of stages::

  roots validated -> versions loaded -> artifacts discovered
    -> compared -> emitted -> cleaned -> done

Failure policy
--------------
* Any exception inside a pair is caught at the pair boundary
  (:func:`run_pairs`), its traceback is printed to stderr and it is recorded on
  the pair's :class:`PairOutcome`. The next pair still runs.
* Report emission failures are absorbed locally: the traceback is printed, a
  warning is recorded and cleanup is still attempted (cleanup of a missing
  report then fails the pair through the boundary above).
* :func:`summarize` turns outcomes into an exit code (0 = every pair done).

The comparator is injected (duck-typed: ``compare``, ``write_report`` and
``describe``) so tests can run the pipeline without Java.
"""

from __future__ import annotations

import logging
import sys
import traceback
from pathlib import Path
from typing import List, Optional, Sequence

from apidiff.cleanup import build_line_rewriter, cleanup_report
from apidiff.errors import ConfigError, ReleaseRootNotFoundError
from apidiff.io import write_json
from apidiff.japicmp.runner import build_comparison_config
from apidiff.locator import locate_artifacts
from apidiff.models import PairOutcome, PairRequest, PairStage, ReleaseRoot
from apidiff.ordering import order_artifacts
from apidiff.settings import Settings
from apidiff.versions import load_version


logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Planning
# ---------------------------------------------------------------------------

def derive_pair_name(old_name: str, new_name: str) -> str:
    """``jetty-9.4`` + ``jetty-10.0`` -> ``jetty-9.4-to-10.0``."""
    old_prefix, sep_old, _ = old_name.partition("-")
    new_prefix, sep_new, new_rest = new_name.partition("-")
    if sep_old and sep_new and old_prefix == new_prefix and new_rest:
        return f"{old_name}-to-{new_rest}"
    return f"{old_name}-to-{new_name}"


def plan_pairs(base_dir: Path, release_names: Sequence[str]) -> List[PairRequest]:
    """Consecutive (old, new) pairs of release roots under ``base_dir``."""
    names = [n for n in release_names if n]
    if len(names) < 2:
        raise ConfigError(f"At least two releases are required, got: {names}")

    roots = [ReleaseRoot.resolve(base_dir, name) for name in names]
    return [
        PairRequest(old=old, new=new, name=derive_pair_name(old.name, new.name))
        for old, new in zip(roots, roots[1:])
    ]


# ---------------------------------------------------------------------------
# One pair
# ---------------------------------------------------------------------------

def _validate_roots(request: PairRequest) -> None:
    if not request.old.exists():
        raise ReleaseRootNotFoundError(f"Unable to find OLD Root Path: {request.old.path}")
    if not request.new.exists():
        raise ReleaseRootNotFoundError(f"Unable to find NEW Root Path: {request.new.path}")


def metadata_path_for(request: PairRequest, settings: Settings) -> Path:
    return settings.resolved_output_dir() / f"{request.name}-metadata.json"


def _log_done(outcome: PairOutcome) -> None:
    logger.info(
        "%s: %s -> %s, %d/%d artifacts, report %s",
        outcome.request.name,
        outcome.old_version or "?",
        outcome.new_version or "?",
        outcome.old_artifacts,
        outcome.new_artifacts,
        outcome.report_path,
    )


def run_pair(
    request: PairRequest,
    *,
    comparator,
    settings: Settings,
    outcome: Optional[PairOutcome] = None,
) -> PairOutcome:
    """Run the full pipeline for one pair. Raises on any non-emitter failure.

    ``outcome`` is updated in place as stages complete, so a caller that
    catches the exception still sees how far the pair got.
    """
    outcome = outcome or PairOutcome(request=request)

    _validate_roots(request)
    outcome.stage = PairStage.ROOTS_VALIDATED

    old_version = load_version(request.old, key=settings.version_key, required=settings.require_version)
    new_version = load_version(request.new, key=settings.version_key, required=settings.require_version)
    outcome.old_version, outcome.new_version = old_version, new_version
    outcome.stage = PairStage.VERSIONS_LOADED

    policy = settings.locator_policy
    old_artifacts = order_artifacts(locate_artifacts(request.old, old_version, policy))
    new_artifacts = order_artifacts(locate_artifacts(request.new, new_version, policy))
    outcome.old_artifacts, outcome.new_artifacts = len(old_artifacts), len(new_artifacts)
    outcome.stage = PairStage.ARTIFACTS_DISCOVERED

    config = build_comparison_config(
        request, old_version=old_version, new_version=new_version, settings=settings
    )
    outcome.command = comparator.describe(old_artifacts, new_artifacts, config)

    if settings.dry_run:
        print(f"  {request.name}: {len(old_artifacts)} old / {len(new_artifacts)} new artifacts")
        print("  Command :", outcome.command)
        print("  (dry-run: not executing)")
        outcome.stage = PairStage.DONE
        return outcome

    result = comparator.compare(old_artifacts, new_artifacts, config)
    outcome.command = result.cmd.command_str
    outcome.elapsed_seconds = result.cmd.elapsed_seconds
    outcome.stage = PairStage.COMPARED

    print(f"📄 Generating report: {config.output_file}")
    # A report left by an earlier run must not survive a failed emit.
    if config.output_file.exists():
        config.output_file.unlink()
    try:
        comparator.write_report(result, config)
        outcome.stage = PairStage.EMITTED
    except Exception as e:
        traceback.print_exc()
        outcome.warnings.append(f"report emission failed: {e}")

    print(f"🧹 Cleaning report: {config.output_file}")
    line_fn = build_line_rewriter(
        request.old.dependency_dir,
        request.new.dependency_dir,
        placeholder=settings.placeholder,
    )
    cleanup_report(config.output_file, line_fn, keep_copy=settings.keep_cleanup_copy)
    outcome.report_path = config.output_file
    outcome.stage = PairStage.CLEANED

    _log_done(outcome)
    outcome.stage = PairStage.DONE
    return outcome


def _write_metadata(outcome: PairOutcome, settings: Settings) -> None:
    # Nothing is written for pairs whose roots were never found.
    if settings.dry_run or outcome.stage is PairStage.NOT_STARTED:
        return
    path = metadata_path_for(outcome.request, settings)
    try:
        write_json(path, outcome.to_dict())
    except OSError as e:
        logger.warning("Could not write %s: %s", path, e)
        outcome.warnings.append(f"metadata not written: {e}")


# ---------------------------------------------------------------------------
# Driver
# ---------------------------------------------------------------------------

def run_pairs(
    requests: Sequence[PairRequest],
    *,
    comparator,
    settings: Settings,
) -> List[PairOutcome]:
    """Run every pair serially; a failing pair never stops the next one."""
    outcomes: List[PairOutcome] = []
    for request in requests:
        print("\n----------------------------------------")
        print(f"▶ {request.name}")
        print(f"  Old : {request.old.path}")
        print(f"  New : {request.new.path}")

        outcome = PairOutcome(request=request)
        try:
            run_pair(request, comparator=comparator, settings=settings, outcome=outcome)
        except Exception as e:
            outcome.error = e
            print(f"❌ {request.name} failed after stage '{outcome.stage.value}': {e}", file=sys.stderr)
            traceback.print_exc()

        _write_metadata(outcome, settings)
        outcomes.append(outcome)
    return outcomes


def summarize(outcomes: Sequence[PairOutcome]) -> int:
    """Print a summary table and return the process exit code."""
    print("\n========================================")
    print("Summary")
    width = max([len(o.request.name) for o in outcomes] + [4])
    for o in outcomes:
        mark = "✅" if o.ok else "❌"
        detail = str(o.report_path) if o.ok and o.report_path else (str(o.error) if o.error else o.stage.value)
        print(f"  {mark} {o.request.name:<{width}}  {detail}")
        for w in o.warnings:
            print(f"     ⚠️ {w}")

    failed = [o for o in outcomes if not o.ok]
    if not failed:
        print("\n✅ All comparisons completed.")
        return 0
    print(f"\n⚠️ {len(failed)} of {len(outcomes)} comparison(s) failed.")
    return 1
