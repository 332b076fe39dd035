#!/usr/bin/env python3
"""
CLI for API difference reports between consecutive releases.

With no arguments the defaults reproduce the Jetty run: release roots
jetty-9.4, jetty-10.0 and jetty-11.0 live next to the current directory and
reports land in ./target.

Usage:
  python apidiff_cli.py
  python apidiff_cli.py --japicmp-jar ~/lib/japicmp-0.15.3-jar-with-dependencies.jar
  python apidiff_cli.py --base-dir /work --releases jetty-10.0,jetty-11.0,jetty-12.0
  python apidiff_cli.py --config apidiff.yaml --dry-run

Exit code: 0 when every pair produced a report, 1 when any pair failed,
2 on invalid configuration.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from apidiff.errors import ConfigError
from apidiff.japicmp import JapicmpComparator
from apidiff.pipeline import plan_pairs, run_pairs, summarize
from apidiff.settings import Settings, load_settings


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Generate API difference reports between consecutive releases (japicmp)."
    )

    parser.add_argument("--config", help="YAML settings file (keys mirror the long options below).")
    parser.add_argument("--base-dir", help="Directory holding the release roots. Default: parent of cwd.")
    parser.add_argument(
        "--releases",
        help="Comma-separated release root names, oldest first. Default: jetty-9.4,jetty-10.0,jetty-11.0",
    )
    parser.add_argument("--output-dir", help="Report output directory. Default: target")

    parser.add_argument("--japicmp-jar", help="Path to the japicmp jar (with dependencies).")
    parser.add_argument("--java", dest="java_bin", help="Java executable. Default: $JAVA_HOME/bin/java or java.")
    parser.add_argument(
        "--access-modifier",
        choices=["public", "protected", "package", "private"],
        help="Lowest visibility included in the report. Default: protected",
    )
    parser.add_argument("--timeout-seconds", type=int, help="Engine timeout. 0 = no timeout.")

    parser.add_argument("--version-key", help="Key read from build.properties. Default: jetty.version")
    parser.add_argument(
        "--require-version",
        action="store_true",
        default=None,
        help="Fail a pair when the version key is missing (default: continue with a blank version).",
    )
    parser.add_argument("--max-depth", type=int, help="Dependency tree walk depth limit. Default: 10")
    parser.add_argument(
        "--discard-copy",
        action="store_true",
        help="Delete the copy-of-<report> file left behind by cleanup.",
    )

    parser.add_argument("--dry-run", action="store_true", default=None, help="Print commands but do not execute")
    parser.add_argument(
        "--quiet",
        action="store_true",
        default=None,
        help="Suppress engine stderr (not recommended for debugging)",
    )
    parser.add_argument("--log-level", default="INFO", help="Logging level. Default: INFO")
    return parser.parse_args(argv)


def cli_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Map parsed flags onto :class:`Settings` field names (None = unset)."""
    return {
        "base_dir": args.base_dir,
        "releases": args.releases,
        "output_dir": args.output_dir,
        "japicmp_jar": args.japicmp_jar,
        "java_bin": args.java_bin,
        "access_modifier": args.access_modifier,
        "engine_timeout_seconds": args.timeout_seconds,
        "version_key": args.version_key,
        "require_version": args.require_version,
        "max_depth": args.max_depth,
        "keep_cleanup_copy": False if args.discard_copy else None,
        "dry_run": args.dry_run,
        "quiet": args.quiet,
    }


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def run(settings: Settings, *, comparator=None) -> int:
    """Plan and run every pair; return the exit code."""
    requests = plan_pairs(settings.resolved_base_dir(), settings.releases)
    comparator = comparator or JapicmpComparator.from_settings(settings)

    print("\n🚀 Generating API diff reports")
    print(f"  Base dir : {settings.resolved_base_dir()}")
    print(f"  Releases : {', '.join(settings.releases)}")
    print(f"  Output   : {settings.resolved_output_dir()}")

    outcomes = run_pairs(requests, comparator=comparator, settings=settings)
    return summarize(outcomes)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    configure_logging(args.log_level)

    try:
        settings = load_settings(
            config_path=Path(args.config) if args.config else None,
            cli_overrides=cli_overrides(args),
        )
        code = run(settings)
    except ConfigError as e:
        print(f"❌ {e}", file=sys.stderr)
        raise SystemExit(2)

    raise SystemExit(code)


if __name__ == "__main__":
    main()
