"""
sitecost_config -- single public entrypoint for report configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  No other component reads configuration files
    or environment variables directly.

Invariants enforced:
    - Single entrypoint: all runtime config flows through
      ``get_active_config()``.
    - Validation: the returned ``ReportingConfig`` has passed its
      ``__post_init__`` checks.

Failure modes:
    - ``FileNotFoundError`` -- the requested settings file does not exist.
    - ``ConfigurationError`` -- malformed YAML or invalid settings.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``SITECOST_CONFIG_TRACE`` log entry with the source and checksum of the
    settings, tying each report to the exact configuration that produced it.
"""

from __future__ import annotations

from pathlib import Path

from sitecost_kernel.logging_config import get_logger
from sitecost_modules.reporting.config import ReportingConfig

from sitecost_config.loader import compute_checksum, load_yaml_file, parse_reporting_config

_logger = get_logger("config")


def get_active_config(path: Path | str | None = None) -> ReportingConfig:
    """The ONLY public configuration entrypoint.

    Args:
        path: YAML settings file. None means built-in defaults.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ConfigurationError: If the file or its settings are invalid.
    """
    if path is None:
        data: dict = {}
        source = "defaults"
        config = ReportingConfig.with_defaults()
    else:
        path = Path(path)
        data = load_yaml_file(path)
        source = str(path)
        config = parse_reporting_config(data, source=source)

    _logger.info(
        "SITECOST_CONFIG_TRACE",
        extra={
            "trace_type": "SITECOST_CONFIG_TRACE",
            "source": source,
            "checksum": compute_checksum(data),
            "currency": config.currency,
            "timezone": config.timezone,
            "validation_policy": config.validation_policy.value,
            "cost_pair_policy": config.cost_pair_policy.value,
        },
    )
    return config


__all__ = [
    "get_active_config",
]
