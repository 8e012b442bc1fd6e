"""Generation options with precedence resolution.

A generation run is configured by one :class:`~swaggen.models.GenOpts`,
merged from several layers. Precedence (high to low):

1. CLI flags (the ``overrides`` mapping).
2. Environment variables: ``SWAGGEN_SPEC``, ``SWAGGEN_TARGET`` and
   ``SWAGGEN_NAME``.
3. A config file: the one passed with ``--config``, otherwise the first of
   ``swaggen.yml``, ``swaggen.yaml`` or ``swaggen.json`` found in the current
   directory.
4. Defaults declared on :class:`~swaggen.models.GenOpts`.

Config files hold the ``GenOpts`` fields at top level::

    spec: swagger.yml
    target: ./out
    tags: [search]
    include_main: true
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml
from pydantic import ValidationError

from swaggen.exceptions import ConfigError
from swaggen.models import GenOpts

logger = logging.getLogger(__name__)

PROJECT_CONFIG_FILENAMES = ("swaggen.yml", "swaggen.yaml", "swaggen.json")

ENV_VARS: dict[str, str] = {
    "SWAGGEN_SPEC": "spec",
    "SWAGGEN_TARGET": "target",
    "SWAGGEN_NAME": "name",
}


def find_project_config(directory: Optional[Path] = None) -> Optional[Path]:
    """Return the first project config file in *directory* (default: cwd)."""
    base = directory or Path.cwd()
    for filename in PROJECT_CONFIG_FILENAMES:
        path = base / filename
        if path.is_file():
            return path
    return None


def load_config_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML or JSON config file into a dict.

    Raises:
        ConfigError: If the file is missing, unreadable, not parseable or
            not a mapping.
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc

    try:
        if path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigError(f"Invalid config at {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid config at {path}: expected a mapping of options")
    return data


def env_overrides(environ: Optional[Mapping[str, str]] = None) -> dict[str, str]:
    """Return the options set through ``SWAGGEN_*`` environment variables."""
    environ = os.environ if environ is None else environ
    return {field: environ[var] for var, field in ENV_VARS.items() if environ.get(var)}


def resolve_gen_opts(
    config_path: Optional[str | Path] = None,
    overrides: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> GenOpts:
    """Merge every configuration layer into one :class:`GenOpts`.

    Args:
        config_path: Explicit config file. When ``None``, the project file
            in the current directory is used if there is one.
        overrides: Options from CLI flags. ``None`` values mean "not given"
            and do not override lower layers.
        environ: Environment to read, ``os.environ`` by default.

    Raises:
        ConfigError: If a config file is invalid or the merged options fail
            validation.
    """
    merged: dict[str, Any] = {}

    path = Path(config_path) if config_path else find_project_config()
    if path is not None:
        logger.debug("Loading config from %s", path)
        merged.update(load_config_file(path))

    merged.update(env_overrides(environ))
    merged.update({key: value for key, value in (overrides or {}).items() if value is not None})

    unknown = sorted(set(merged) - set(GenOpts.model_fields))
    if unknown:
        raise ConfigError(f"Unknown option(s): {', '.join(unknown)}")

    try:
        return GenOpts.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid options: {exc}") from exc
