"""
payroll_config -- single public entrypoint for payroll configuration.

Responsibility:
    Provides the ONLY way to obtain engine configuration at runtime through
    ``get_active_config()``.  Returns an ``EngineConfig`` -- a frozen bundle
    of the hours, payroll, period and anti-spoofing policies.

Architecture position:
    Configuration -- YAML-driven policy objects.  This package sits above
    ``payroll_engines`` and below ``payroll_batch``.  Engines MUST NEVER
    import from ``payroll_config``; they receive their policy objects as
    constructor arguments.

Invariants enforced:
    - Single entrypoint: all runtime config flows through ``get_active_config()``.
    - Every policy validates itself on construction.
    - Deterministic checksum: the same YAML document always yields the same
      ``EngineConfig.checksum``.

Failure modes:
    - ``FileNotFoundError`` -- the requested configuration file is missing.
    - ``InvalidConfigurationError`` -- unknown sections or keys, or a
      policy invariant violation.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``PAYROLL_CONFIG_TRACE`` log entry containing the config_id, version
    and checksum.  It ties each payroll run back to the configuration
    that governed it.
"""

from __future__ import annotations

import logging
from pathlib import Path

from payroll_config.loader import compute_checksum, load_engine_config, parse_engine_config
from payroll_config.schema import EngineConfig

_logger = logging.getLogger("payroll_kernel.config")

# Default configuration set shipped with the package
DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "default.yaml"


def get_active_config(config_path: Path | str | None = None) -> EngineConfig:
    """The ONLY public configuration entrypoint.

    Args:
        config_path: Override path to a YAML configuration set.
            Defaults to payroll_config/sets/default.yaml.

    Returns:
        EngineConfig -- frozen, validated, checksummed.

    Raises:
        FileNotFoundError: If the configuration file does not exist.
        InvalidConfigurationError: If the configuration is invalid.
    """
    path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH
    config = load_engine_config(path)

    _logger.info(
        "PAYROLL_CONFIG_TRACE",
        extra={
            "trace_type": "PAYROLL_CONFIG_TRACE",
            "config_id": config.config_id,
            "config_version": config.version,
            "checksum": config.checksum,
            "source": str(path),
            "currency": config.payroll.currency,
            "tax_bracket_count": len(config.payroll.tax_brackets),
        },
    )
    return config


__all__ = [
    "DEFAULT_CONFIG_PATH",
    "EngineConfig",
    "compute_checksum",
    "get_active_config",
    "parse_engine_config",
]
