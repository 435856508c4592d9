"""Loading oracle configuration from YAML files and wiring up logging."""

from __future__ import annotations

import logging
from dataclasses import fields
from pathlib import Path
from typing import Any, Optional

import yaml

from .models import ComparisonOptions, LogLevel, OracleConfig
from .jsonpath_utils import JSONPathMatcher
from .exceptions import ConfigError


_LOGGING_LEVELS = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARN: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}


def _normalize_keys(section: dict, source: str) -> dict:
    if not isinstance(section, dict):
        raise ConfigError("expected a mapping", source)
    return {str(k).replace("-", "_"): v for k, v in section.items()}


def _positive_int(value: Any, name: str, source: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ConfigError(f"'{name}' must be a positive integer, got {value!r}", source)
    return value


def _comparison_options(section: Any, source: str) -> ComparisonOptions:
    section = _normalize_keys(section, source)
    known = {f.name for f in fields(ComparisonOptions)}
    unknown = set(section) - known
    if unknown:
        raise ConfigError(f"unknown comparison option(s): {', '.join(sorted(unknown))}", source)
    for name, value in section.items():
        if not isinstance(value, bool):
            raise ConfigError(f"comparison option '{name}' must be true or false", source)
    return ComparisonOptions(**section)


def config_from_dict(data: Optional[dict], source: str = "<dict>") -> OracleConfig:
    """
    Build an OracleConfig from a plain mapping.

    Keys may be written in snake_case or kebab-case; missing keys keep their
    defaults and unknown keys are rejected.
    """
    if data is None:
        return OracleConfig()

    data = _normalize_keys(data, source)
    known = {f.name for f in fields(OracleConfig)}
    unknown = set(data) - known
    if unknown:
        raise ConfigError(f"unknown setting(s): {', '.join(sorted(unknown))}", source)

    kwargs: dict[str, Any] = {}
    for name in ("max_depth", "max_ancestry_depth"):
        if name in data:
            kwargs[name] = _positive_int(data[name], name, source)

    if "export_root" in data:
        root = data["export_root"]
        if not isinstance(root, str) or not root.strip("/"):
            raise ConfigError("'export_root' must be a non-empty directory name", source)
        kwargs["export_root"] = root.strip("/")

    if "volatile_metadata_paths" in data:
        paths = data["volatile_metadata_paths"] or []
        if not isinstance(paths, list):
            raise ConfigError("'volatile_metadata_paths' must be a list", source)
        for path in paths:
            try:
                JSONPathMatcher.compile(str(path))
            except ValueError as e:
                raise ConfigError(str(e), source)
        kwargs["volatile_metadata_paths"] = [str(p) for p in paths]

    if data.get("scratch_dir") is not None:
        kwargs["scratch_dir"] = str(data["scratch_dir"])

    if "log_level" in data:
        try:
            kwargs["log_level"] = LogLevel(str(data["log_level"]).upper())
        except ValueError:
            choices = ", ".join(level.value for level in LogLevel)
            raise ConfigError(f"'log_level' must be one of {choices}", source)

    if "comparison" in data:
        kwargs["comparison"] = _comparison_options(data["comparison"], source)

    return OracleConfig(**kwargs)


def load_config(path: str | Path) -> OracleConfig:
    """Load configuration from a YAML or JSON file."""
    path = Path(path)
    if not path.exists():
        raise ConfigError("configuration file not found", str(path))

    with open(path, 'r') as f:
        content = f.read()

    # YAML also handles JSON since JSON is valid YAML
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(f"failed to parse configuration: {e}", str(path))

    return config_from_dict(data, str(path))


def configure_logging(config: Optional[OracleConfig] = None) -> logging.Logger:
    """Apply the configured level to the oracle's logger hierarchy."""
    config = config or OracleConfig()
    logger = logging.getLogger("classifier_oracle")
    logger.setLevel(_LOGGING_LEVELS[config.log_level])
    return logger
