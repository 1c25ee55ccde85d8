"""
Configuration Loader (``payroll_config.loader``).

Responsibility
--------------
Load a YAML configuration set and parse it into the frozen policy
dataclasses composed by ``payroll_config.schema.EngineConfig``.  Runtime
callers go through ``payroll_config.get_active_config()``; the parse
functions are public so tests can build configs from plain dicts.

Architecture position
---------------------
**Config layer** -- sits above the engines.  Imports engine policy types;
the engines never import this module.

Invariants enforced
-------------------
* Missing keys fall back to the dataclass defaults.
* Unknown sections or keys are rejected, never silently ignored.
* Numeric values that feed money or hours are parsed to ``Decimal``
  through ``str`` so YAML floats do not leak binary rounding.
* ``compute_checksum`` is deterministic over the parsed YAML document.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown section/key, wrong shape or a policy invariant violation
  -> ``InvalidConfigurationError`` naming the source and the reason.

Audit relevance
---------------
The checksum ties every payroll run to a specific, version-controlled
configuration document.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import fields
from decimal import Decimal
from pathlib import Path
from typing import Any

import yaml

from payroll_config.schema import SECTION_NAMES, EngineConfig
from payroll_engines.anti_spoofing import AntiSpoofingPolicy
from payroll_engines.hours import HoursPolicy
from payroll_engines.payroll import PayrollPolicy, TaxBracket
from payroll_engines.periods import PeriodPolicy
from payroll_kernel.domain.values import as_decimal
from payroll_kernel.exceptions import InvalidConfigurationError

_IDENTITY_KEYS: tuple[str, ...] = ("config_id", "version", "description")

_PAYROLL_DECIMAL_FIELDS: frozenset[str] = frozenset({
    "overtime_multiplier",
    "holiday_multiplier",
    "social_security_rate",
    "social_security_cap",
    "annual_tax_exemption",
    "max_total_hours",
    "max_hourly_rate",
})


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        InvalidConfigurationError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise InvalidConfigurationError(
            str(path), f"top level must be a mapping, got {type(data).__name__}",
        )
    return data


def _section(data: dict[str, Any], name: str, source: str) -> dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise InvalidConfigurationError(source, f"section '{name}' must be a mapping")
    return section


def _check_keys(section: dict[str, Any], cls: type, name: str, source: str) -> None:
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(section) - known)
    if unknown:
        raise InvalidConfigurationError(
            source, f"unknown keys in '{name}': {', '.join(unknown)}",
        )


def _build(cls: type, kwargs: dict[str, Any], name: str, source: str) -> Any:
    try:
        return cls(**kwargs)
    except (TypeError, ValueError) as exc:
        raise InvalidConfigurationError(source, f"{name}: {exc}") from exc


def _decimal(value: Any, name: str, source: str) -> Decimal:
    try:
        return as_decimal(value, name)
    except (TypeError, ValueError) as exc:
        raise InvalidConfigurationError(source, str(exc)) from exc


def parse_hours_policy(data: dict[str, Any], source: str = "<dict>") -> HoursPolicy:
    """Parse the ``hours`` section."""
    _check_keys(data, HoursPolicy, "hours", source)
    kwargs: dict[str, Any] = {}
    if "regular_hours_per_day" in data:
        kwargs["regular_hours_per_day"] = _decimal(
            data["regular_hours_per_day"], "regular_hours_per_day", source,
        )
    return _build(HoursPolicy, kwargs, "hours", source)


def parse_tax_bracket(data: dict[str, Any], source: str = "<dict>") -> TaxBracket:
    """Parse one ``{lower, upper, rate}`` bracket; ``upper: null`` is open-ended."""
    if not isinstance(data, dict):
        raise InvalidConfigurationError(source, "each tax bracket must be a mapping")
    _check_keys(data, TaxBracket, "payroll.tax_brackets", source)
    try:
        lower = data["lower"]
        rate = data["rate"]
    except KeyError as exc:
        raise InvalidConfigurationError(
            source, f"tax bracket missing key {exc.args[0]!r}",
        ) from exc
    upper = data.get("upper")
    return _build(
        TaxBracket,
        {
            "lower": _decimal(lower, "lower", source),
            "upper": None if upper is None else _decimal(upper, "upper", source),
            "rate": _decimal(rate, "rate", source),
        },
        "payroll.tax_brackets",
        source,
    )


def parse_payroll_policy(data: dict[str, Any], source: str = "<dict>") -> PayrollPolicy:
    """Parse the ``payroll`` section."""
    _check_keys(data, PayrollPolicy, "payroll", source)
    kwargs: dict[str, Any] = {}
    for key, value in data.items():
        if key in _PAYROLL_DECIMAL_FIELDS:
            kwargs[key] = _decimal(value, key, source)
        elif key == "tax_brackets":
            if not isinstance(value, list):
                raise InvalidConfigurationError(source, "tax_brackets must be a list")
            kwargs[key] = tuple(parse_tax_bracket(b, source) for b in value)
        else:
            kwargs[key] = value
    return _build(PayrollPolicy, kwargs, "payroll", source)


def parse_period_policy(data: dict[str, Any], source: str = "<dict>") -> PeriodPolicy:
    """Parse the ``periods`` section."""
    _check_keys(data, PeriodPolicy, "periods", source)
    return _build(PeriodPolicy, dict(data), "periods", source)


def parse_anti_spoofing_policy(
    data: dict[str, Any],
    source: str = "<dict>",
) -> AntiSpoofingPolicy:
    """Parse the ``anti_spoofing`` section.

    ``risk_weights`` may override a subset of flags; the rest keep their
    default weights.  ``critical_flags`` replaces the default set.
    """
    _check_keys(data, AntiSpoofingPolicy, "anti_spoofing", source)
    kwargs = dict(data)
    if "risk_weights" in kwargs:
        overrides = kwargs["risk_weights"] or {}
        if not isinstance(overrides, dict):
            raise InvalidConfigurationError(source, "risk_weights must be a mapping")
        defaults = AntiSpoofingPolicy().risk_weights
        merged: dict[Any, Any] = {flag.value: weight for flag, weight in defaults.items()}
        merged.update(overrides)
        kwargs["risk_weights"] = merged
    if "critical_flags" in kwargs:
        kwargs["critical_flags"] = frozenset(kwargs["critical_flags"] or ())
    return _build(AntiSpoofingPolicy, kwargs, "anti_spoofing", source)


def parse_engine_config(data: dict[str, Any], source: str = "<dict>") -> EngineConfig:
    """
    Parse a whole configuration document into an ``EngineConfig``.

    Postconditions:
        - ``checksum`` is ``compute_checksum(data)``.
    Raises:
        InvalidConfigurationError: on unknown sections or invalid values.
    """
    unknown = sorted(set(data) - set(SECTION_NAMES) - set(_IDENTITY_KEYS))
    if unknown:
        raise InvalidConfigurationError(
            source, f"unknown sections: {', '.join(unknown)}",
        )

    try:
        version = int(data.get("version", 1))
    except (TypeError, ValueError):
        raise InvalidConfigurationError(source, "version must be an integer") from None

    return EngineConfig(
        config_id=str(data.get("config_id", "default")),
        version=version,
        description=str(data.get("description", "")),
        hours=parse_hours_policy(_section(data, "hours", source), source),
        payroll=parse_payroll_policy(_section(data, "payroll", source), source),
        periods=parse_period_policy(_section(data, "periods", source), source),
        anti_spoofing=parse_anti_spoofing_policy(
            _section(data, "anti_spoofing", source), source,
        ),
        checksum=compute_checksum(data),
    )


def load_engine_config(path: Path) -> EngineConfig:
    """Load and parse a configuration file."""
    return parse_engine_config(load_yaml_file(path), source=str(path))


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Postconditions:
        - Returns a hex-encoded SHA-256 hash string.
        - Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
