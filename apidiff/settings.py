"""apidiff.settings

Run configuration.

Layering (later wins):

1. dataclass defaults (the Jetty 9.4 -> 10.0 -> 11.0 comparison)
2. environment, after loading ``.env`` from the working directory with
   python-dotenv (already-exported variables are never overridden)
3. optional YAML file (keys mirror :class:`Settings` fields; relative paths
   are anchored at the file, except ``output_dir``, which follows the working
   directory like every other layer)
4. CLI flags

Environment variables
---------------------
``APIDIFF_BASE_DIR``, ``APIDIFF_OUTPUT_DIR``, ``APIDIFF_JAVA``,
``APIDIFF_JAPICMP_JAR`` (``JAPICMP_JAR`` is accepted too).
"""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

import yaml
from dotenv import load_dotenv

from apidiff.core_cmd import java_from_env
from apidiff.errors import ConfigError
from apidiff.locator import LocatorPolicy
from apidiff.models import AccessModifier


PACKAGE_DIR = Path(__file__).resolve().parent
DEFAULT_STYLESHEET = PACKAGE_DIR / "resources" / "report.css"

DEFAULT_RELEASES: Tuple[str, ...] = ("jetty-9.4", "jetty-10.0", "jetty-11.0")
DEFAULT_TITLE_TEMPLATE = "Changes in {product} APIs from {old} to {new}"
DEFAULT_PLACEHOLDER = "${maven.repo}"

ENV_VARS: Dict[str, Tuple[str, ...]] = {
    "base_dir": ("APIDIFF_BASE_DIR",),
    "output_dir": ("APIDIFF_OUTPUT_DIR",),
    "java_bin": ("APIDIFF_JAVA",),
    "japicmp_jar": ("APIDIFF_JAPICMP_JAR", "JAPICMP_JAR"),
}

_PATH_FIELDS = {"base_dir", "output_dir", "japicmp_jar", "html_stylesheet"}
# `output_dir` stays relative to the working directory wherever it is set.
_FILE_RELATIVE_FIELDS = _PATH_FIELDS - {"output_dir"}
# A YAML `null` on these resets them (e.g. no stylesheet).
_NULLABLE_FIELDS = {"base_dir", "japicmp_jar", "html_stylesheet"}
_TUPLE_FIELDS = {"releases", "exclude_markers"}
_BOOL_FIELDS = {"require_version", "keep_cleanup_copy", "dry_run", "quiet"}
_INT_FIELDS = {"max_depth", "engine_timeout_seconds"}


@dataclass(frozen=True)
class Settings:
    # release layout
    base_dir: Optional[Path] = None
    releases: Tuple[str, ...] = DEFAULT_RELEASES
    output_dir: Path = Path("target")

    # version lookup
    version_key: str = "jetty.version"
    require_version: bool = False

    # artifact discovery
    suffix: str = ".jar"
    include_marker: str = "org/eclipse/jetty"
    exclude_markers: Tuple[str, ...] = ("/toolchain/", "/orbit/")
    max_depth: int = 10

    # engine
    java_bin: str = field(default_factory=java_from_env)
    japicmp_jar: Optional[Path] = None
    access_modifier: str = AccessModifier.PROTECTED.value
    html_stylesheet: Optional[Path] = DEFAULT_STYLESHEET
    engine_timeout_seconds: int = 0

    # report
    product: str = "Eclipse Jetty"
    title_template: str = DEFAULT_TITLE_TEMPLATE
    placeholder: str = DEFAULT_PLACEHOLDER
    keep_cleanup_copy: bool = True

    # execution
    dry_run: bool = False
    quiet: bool = False

    @property
    def locator_policy(self) -> LocatorPolicy:
        return LocatorPolicy(
            suffix=self.suffix,
            include_marker=self.include_marker,
            exclude_markers=tuple(self.exclude_markers),
            max_depth=self.max_depth,
        )

    def resolved_base_dir(self) -> Path:
        """Base directory holding the release roots (default: parent of cwd)."""
        if self.base_dir is not None:
            return Path(self.base_dir).expanduser().absolute()
        return Path.cwd().absolute().parent

    def resolved_output_dir(self) -> Path:
        return Path(self.output_dir).expanduser().absolute()

    def title_for(self, old_version: str, new_version: str) -> str:
        return self.title_template.format(product=self.product, old=old_version, new=new_version)


FIELD_NAMES = {f.name for f in dataclasses.fields(Settings)}


def _coerce(name: str, value: Any) -> Any:
    if value is None:
        return None
    try:
        if name in _PATH_FIELDS:
            return Path(str(value))
        if name in _TUPLE_FIELDS:
            if isinstance(value, str):
                return tuple(x.strip() for x in value.split(",") if x.strip())
            return tuple(str(x) for x in value)
        if name in _BOOL_FIELDS:
            if isinstance(value, str):
                return value.strip().lower() in {"1", "true", "yes", "on"}
            return bool(value)
        if name in _INT_FIELDS:
            return int(value)
        if name == "access_modifier":
            return AccessModifier.parse(value).value
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid value for {name!r}: {value!r} ({e})") from e
    return str(value)


def apply_overrides(
    settings: Settings,
    overrides: Mapping[str, Any],
    *,
    keep_none: Iterable[str] = (),
) -> Settings:
    """Return a copy of ``settings`` with ``overrides`` applied.

    ``None`` means "not given" and is skipped, except for the keys named in
    ``keep_none``, where it clears the setting.
    """
    keep_none = set(keep_none)
    unknown = sorted(set(overrides) - FIELD_NAMES)
    if unknown:
        raise ConfigError(f"Unknown setting(s): {', '.join(unknown)}")

    changes = {k: _coerce(k, v) for k, v in overrides.items() if v is not None or k in keep_none}
    return dataclasses.replace(settings, **changes)


def env_overrides(environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    environ = os.environ if environ is None else environ
    out: Dict[str, Any] = {}
    for name, keys in ENV_VARS.items():
        for key in keys:
            if environ.get(key):
                out[name] = environ[key]
                break
    return out


def load_yaml_config(path: Path) -> Dict[str, Any]:
    """Load a YAML settings file (top-level mapping)."""
    p = Path(path).expanduser().resolve()
    if not p.exists():
        raise ConfigError(f"Config file not found: {p}")
    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {p}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"Config YAML must be a mapping/object at top level: {p}")

    # Relative paths in the file are relative to the file itself.
    for key in _FILE_RELATIVE_FIELDS & set(raw):
        if raw[key] is not None and not Path(str(raw[key])).expanduser().is_absolute():
            raw[key] = p.parent / str(raw[key])
    return raw


def load_settings(
    *,
    config_path: Optional[Path] = None,
    cli_overrides: Optional[Mapping[str, Any]] = None,
    dotenv_path: Optional[Path] = None,
    use_dotenv: bool = True,
) -> Settings:
    """Build :class:`Settings` from defaults, .env/environment, YAML and CLI."""
    if use_dotenv:
        load_dotenv(dotenv_path or (Path.cwd() / ".env"), override=False)

    settings = apply_overrides(Settings(), env_overrides())
    if config_path is not None:
        settings = apply_overrides(settings, load_yaml_config(config_path), keep_none=_NULLABLE_FIELDS)
    if cli_overrides:
        settings = apply_overrides(settings, cli_overrides)
    return settings
