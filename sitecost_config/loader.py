"""
Configuration Loader (``sitecost_config.loader``).

Responsibility
--------------
Loads a YAML settings file and parses it into a ``ReportingConfig``.
The single public entry point for runtime config is
``sitecost_config.get_active_config()``.

Invariants enforced
-------------------
* YAML is read with ``yaml.safe_load`` only.
* Unknown settings are rejected, never silently ignored.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML or wrong document shape  -> ``ConfigurationError``.
* Invalid setting values  -> ``ConfigurationError`` from ``ReportingConfig``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from sitecost_kernel.exceptions import ConfigurationError
from sitecost_modules.reporting.config import ReportingConfig

# Settings may sit at the top level or under this key
REPORTING_SECTION = "reporting"


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Postconditions:
        - Returns a ``dict`` (empty if the YAML document is empty).
    Raises:
        FileNotFoundError: if the file does not exist.
        ConfigurationError: if the YAML is invalid or not a mapping.
    """
    with open(path, encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML: {e}", source=str(path)) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError("Top-level YAML value must be a mapping", source=str(path))
    return data


def parse_reporting_config(data: dict[str, Any], source: str | None = None) -> ReportingConfig:
    """
    Build a ``ReportingConfig`` from a loaded document.

    Accepts either a flat mapping of settings or one nested under
    ``reporting:``.
    """
    section = data.get(REPORTING_SECTION, data)
    if not isinstance(section, dict):
        raise ConfigurationError(f"'{REPORTING_SECTION}' must be a mapping", source=source)
    try:
        return ReportingConfig.from_dict(section)
    except ConfigurationError as e:
        if source is None or e.source is not None:
            raise
        raise ConfigurationError(str(e), source=source) from e


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Postconditions:
        - Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
