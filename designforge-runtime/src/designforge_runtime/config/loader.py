"""
This module loads DesignForge configuration files.

Configuration may be written in YAML or JSON and comes in two shapes: a flat
document with named top-level sections (``providers``, ``agent``, ``codegen``,
``output``) or the same sections wrapped under a single ``default`` key. Both
are normalized into one canonical mapping so callers never see the difference.
A missing file is not an error; it simply yields an empty configuration.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Mapping

import yaml

LOGGER = logging.getLogger(__name__)

DEFAULT_CONFIG_NAMES = (
    "designforge.config.yaml",
    "designforge.config.yml",
    "designforge.config.json",
)

_SECTIONS = ("providers", "agent", "codegen", "output")
_PROVIDER_ALIASES = ("providers", "mcpServers", "mcp_servers")


class ConfigFileError(ValueError):
    """Raised when a configuration file exists but cannot be parsed."""


def _empty_config() -> Dict[str, Any]:
    return {"providers": {}, "agent": {}, "codegen": {}, "output": {}}


def normalize_config(data: Mapping[str, Any] | None) -> Dict[str, Any]:
    """
    Normalize either supported document shape into the canonical mapping.

    Args:
        data: The parsed document, or None for an empty file.

    Returns:
        A mapping that always contains the ``providers``, ``agent``,
        ``codegen`` and ``output`` sections.
    """
    canonical = _empty_config()
    if not data:
        return canonical
    if not isinstance(data, Mapping):
        raise ConfigFileError("configuration root must be a mapping")

    body: Mapping[str, Any] = data
    default = data.get("default")
    if isinstance(default, Mapping):
        body = default

    for alias in _PROVIDER_ALIASES:
        if alias in body and body[alias]:
            canonical["providers"] = body[alias]
            break

    for section in _SECTIONS[1:]:
        value = body.get(section)
        if value is None:
            continue
        if not isinstance(value, Mapping):
            raise ConfigFileError(f"configuration section '{section}' must be a mapping")
        canonical[section] = dict(value)
    return canonical


def find_config_file(directory: Path | None = None) -> Path | None:
    base = directory or Path.cwd()
    for name in DEFAULT_CONFIG_NAMES:
        candidate = base / name
        if candidate.is_file():
            return candidate
    return None


def load_config_file(path: Path | str | None) -> Dict[str, Any]:
    """
    Load a configuration file from disk.

    YAML is used for ``.yaml``/``.yml`` suffixes and JSON otherwise. When
    ``path`` is None the current directory is searched for one of the default
    file names.
    """
    file_path = Path(path) if path is not None else find_config_file()
    if file_path is None or not file_path.exists():
        LOGGER.debug("No configuration file found at %s; using empty configuration.", file_path)
        return _empty_config()

    try:
        with open(file_path, "r", encoding="utf-8") as f:
            if file_path.suffix.lower() in [".yaml", ".yml"]:
                data = yaml.safe_load(f)
            else:
                data = json.load(f)
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise ConfigFileError(f"Failed to parse {file_path}: {exc}") from exc

    LOGGER.info("Loaded configuration from %s", file_path)
    return normalize_config(data)
