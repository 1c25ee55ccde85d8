"""
Module: payroll_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    payroll and attendance engines.  This is the canonical import surface
    for higher layers (payroll_batch and the request-handling layer).

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import payroll_kernel (and sibling engine modules).
    MUST NOT import payroll_config or payroll_batch.

Invariants enforced:
    - Purity: engines NEVER call ``datetime.now()`` or ``date.today()``.
      Dates and timestamps are explicit parameters; ``PayrollPeriodScheduler``
      is the only class that holds a ``Clock``, and it is injected.
    - Decimal-only arithmetic for hours and money.
    - Determinism: identical inputs always produce identical outputs.

Failure modes:
    - ValueError from value-object constructors on invalid state.
    - UnsupportedFrequencyError when a CUSTOM period must be stepped.

Audit relevance:
    Every engine entry point is traced via ``@traced_engine``
    (see ``payroll_engines.tracer``), emitting PAYROLL_ENGINE_TRACE records
    with engine name, version, input fingerprint and duration.

Usage:
    from payroll_engines.hours import classify_hours, AttendanceInterval
    from payroll_engines.payroll import PayrollCalculator
    from payroll_engines.periods import generate_period, PayFrequency
    from payroll_engines.anti_spoofing import AttendanceIntegrityValidator
"""

from payroll_engines.anti_spoofing import (
    AntiSpoofingFlag,
    AntiSpoofingPolicy,
    AntiSpoofingResult,
    AttendanceIntegrityValidator,
    ClockInAttempt,
    LocationSample,
    ValidationContext,
    flag_description,
    validate_location,
)
from payroll_engines.geo import GeoPoint, haversine_distance, travel_speed_kmh
from payroll_engines.hours import (
    AttendanceDay,
    AttendanceInterval,
    HoursBreakdown,
    HoursPolicy,
    aggregate_attendance_days,
    classify_hours,
)
from payroll_engines.payroll import (
    PayrollCalculationInput,
    PayrollCalculationResult,
    PayrollCalculator,
    PayrollPolicy,
    PayrollSummary,
    PayRates,
    TaxBracket,
    calculate_payroll,
    summarize_payroll,
)
from payroll_engines.periods import (
    PayFrequency,
    PayrollPeriod,
    PayrollPeriodScheduler,
    PeriodPolicy,
    PeriodSnapshot,
    PeriodStatus,
    can_process_payroll,
    days_until_pay_date,
    find_period_for_date,
    generate_period,
    generate_periods_for_year,
    is_date_in_period,
    next_period,
    period_identifier,
    period_status,
    previous_period,
    validate_period,
)
from payroll_engines.tracer import traced_engine

__all__ = [
    # Hours
    "AttendanceDay",
    "AttendanceInterval",
    "HoursBreakdown",
    "HoursPolicy",
    "aggregate_attendance_days",
    "classify_hours",
    # Payroll
    "PayRates",
    "PayrollCalculationInput",
    "PayrollCalculationResult",
    "PayrollCalculator",
    "PayrollPolicy",
    "PayrollSummary",
    "TaxBracket",
    "calculate_payroll",
    "summarize_payroll",
    # Periods
    "PayFrequency",
    "PayrollPeriod",
    "PayrollPeriodScheduler",
    "PeriodPolicy",
    "PeriodSnapshot",
    "PeriodStatus",
    "can_process_payroll",
    "days_until_pay_date",
    "find_period_for_date",
    "generate_period",
    "generate_periods_for_year",
    "is_date_in_period",
    "next_period",
    "period_identifier",
    "period_status",
    "previous_period",
    "validate_period",
    # Attendance integrity
    "AntiSpoofingFlag",
    "AntiSpoofingPolicy",
    "AntiSpoofingResult",
    "AttendanceIntegrityValidator",
    "ClockInAttempt",
    "GeoPoint",
    "LocationSample",
    "ValidationContext",
    "flag_description",
    "haversine_distance",
    "travel_speed_kmh",
    "validate_location",
    # Tracing
    "traced_engine",
]
