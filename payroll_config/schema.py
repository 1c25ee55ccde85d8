"""
EngineConfig schema.

The runtime configuration object handed to the engines.  Each engine owns
its policy dataclass (``HoursPolicy``, ``PayrollPolicy``, ``PeriodPolicy``,
``AntiSpoofingPolicy``); this module only composes them and adds identity
(config_id, version, checksum) so every calculation can be traced back to
the exact configuration that produced it.

The engines never import this module.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from payroll_engines.anti_spoofing import AntiSpoofingPolicy, AttendanceIntegrityValidator
from payroll_engines.hours import HoursPolicy
from payroll_engines.payroll import PayrollCalculator, PayrollPolicy
from payroll_engines.periods import PayrollPeriodScheduler, PeriodPolicy
from payroll_kernel.domain.clock import Clock

# Top-level YAML sections understood by the loader
SECTION_NAMES: tuple[str, ...] = ("hours", "payroll", "periods", "anti_spoofing")


@dataclass(frozen=True)
class EngineConfig:
    """Frozen bundle of every engine policy plus configuration identity."""

    config_id: str = "default"
    version: int = 1
    description: str = ""
    hours: HoursPolicy = field(default_factory=HoursPolicy)
    payroll: PayrollPolicy = field(default_factory=PayrollPolicy)
    periods: PeriodPolicy = field(default_factory=PeriodPolicy)
    anti_spoofing: AntiSpoofingPolicy = field(default_factory=AntiSpoofingPolicy)
    checksum: str = ""

    def payroll_calculator(self) -> PayrollCalculator:
        return PayrollCalculator(self.payroll)

    def integrity_validator(self) -> AttendanceIntegrityValidator:
        return AttendanceIntegrityValidator(self.anti_spoofing)

    def period_scheduler(self, clock: Clock) -> PayrollPeriodScheduler:
        return PayrollPeriodScheduler(clock, self.periods)
