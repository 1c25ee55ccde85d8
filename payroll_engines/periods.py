"""
Payroll Period Scheduler (``payroll_engines.periods``).

Responsibility
--------------
Derive payroll periods from a frequency and an anchor date, compute the
cutoff and pay dates, and classify a period's lifecycle state against a
given calendar date.

* weekly     -- the Monday..Sunday week containing the anchor date.
* bi-weekly  -- two consecutive weeks starting with the anchor's week.
* monthly    -- the calendar month containing the anchor date.
* custom     -- caller-supplied start/end pass through unchanged.

``pay_date = period_end + pay_days``; ``cutoff_date = pay_date - cutoff_days``.

Status state machine (pure function of ``as_of`` vs. the four dates)::

    UPCOMING -> ACTIVE -> CUTOFF -> PROCESSING -> COMPLETED

Architecture position
---------------------
**Engines layer** -- pure functional core.  Module-level functions take an
explicit ``as_of`` date and never read the clock.  ``PayrollPeriodScheduler``
is the one place that reads an injected ``Clock``, once per call.

Invariants enforced
-------------------
* Derived periods always satisfy ``start <= end < cutoff <= pay`` when
  ``pay_days > cutoff_days``.
* Consecutive generated periods of one frequency do not overlap.

Failure modes
-------------
* ``UnsupportedFrequencyError`` when an operation needs to step a CUSTOM
  period (next/previous/year generation), or when a frequency is not one
  of the ``PayFrequency`` values.  This is a programming error.
* ``ValueError`` for negative cutoff or pay day offsets.
* ``validate_period`` never raises; it reports ordering problems.

Audit relevance
---------------
``can_process_payroll`` is the gate a payroll run checks before it
calculates anything for a period.  Inputs for the period may be amended
until the cutoff date.
"""

from __future__ import annotations

import calendar
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum

from payroll_kernel.domain.clock import Clock
from payroll_kernel.exceptions import UnsupportedFrequencyError
from payroll_kernel.logging_config import get_logger
from payroll_engines.tracer import traced_engine

logger = get_logger("engines.periods")


class PayFrequency(str, Enum):
    """How often employees are paid."""

    WEEKLY = "weekly"
    BI_WEEKLY = "bi-weekly"
    MONTHLY = "monthly"
    CUSTOM = "custom"


class PeriodStatus(str, Enum):
    """Lifecycle state of a period, derived from the calendar."""

    UPCOMING = "upcoming"
    ACTIVE = "active"
    CUTOFF = "cutoff"
    PROCESSING = "processing"
    COMPLETED = "completed"


@dataclass(frozen=True)
class PeriodPolicy:
    """Offsets (in calendar days) used to derive cutoff and pay dates."""

    cutoff_days: int = 3
    pay_days: int = 7

    def __post_init__(self) -> None:
        if self.cutoff_days < 0:
            raise ValueError("cutoff_days cannot be negative")
        if self.pay_days < 0:
            raise ValueError("pay_days cannot be negative")


@dataclass(frozen=True)
class PayrollPeriod:
    """
    One payroll period.

    Ordering of the dates is not enforced here: periods loaded from
    storage may be inconsistent, and ``validate_period`` reports that.
    """

    frequency: PayFrequency
    period_start: date
    period_end: date
    cutoff_date: date
    pay_date: date
    description: str = ""

    @property
    def identifier(self) -> str:
        return period_identifier(self)

    @property
    def length_days(self) -> int:
        return (self.period_end - self.period_start).days + 1

    def contains(self, day: date) -> bool:
        return is_date_in_period(day, self)


@dataclass(frozen=True)
class PeriodSnapshot:
    """Status, processing gate and countdown, all read at one instant."""

    period: PayrollPeriod
    as_of: date
    status: PeriodStatus
    can_process: bool
    days_until_pay: int


# ---------------------------------------------------------------------------
# Date helpers
# ---------------------------------------------------------------------------


def _week_start(day: date) -> date:
    return day - timedelta(days=day.weekday())


def _week_end(day: date) -> date:
    return _week_start(day) + timedelta(days=6)


def _month_start(day: date) -> date:
    return day.replace(day=1)


def _month_end(day: date) -> date:
    return day.replace(day=calendar.monthrange(day.year, day.month)[1])


def _add_months(day: date, months: int) -> date:
    """Add calendar months, clamping the day to the target month's length."""
    index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(index, 12)
    last_day = calendar.monthrange(year, month + 1)[1]
    return date(year, month + 1, min(day.day, last_day))


def _short(day: date) -> str:
    return f"{day:%b} {day.day}"


def _long(day: date) -> str:
    return f"{day:%b} {day.day}, {day.year}"


def _coerce_frequency(frequency: PayFrequency | str, operation: str) -> PayFrequency:
    try:
        return PayFrequency(frequency)
    except ValueError:
        raise UnsupportedFrequencyError(str(frequency), operation) from None


def describe_period(frequency: PayFrequency, start: date, end: date) -> str:
    """Human-readable label, e.g. ``"Monthly (March 2026)"``."""
    frequency = _coerce_frequency(frequency, "describe_period")
    if frequency == PayFrequency.WEEKLY:
        return f"Weekly ({_short(start)} - {_short(end)}, {end.year})"
    if frequency == PayFrequency.BI_WEEKLY:
        return f"Bi-weekly ({_short(start)} - {_short(end)}, {end.year})"
    if frequency == PayFrequency.MONTHLY:
        return f"Monthly ({start:%B} {start.year})"
    return f"Custom ({_long(start)} - {_long(end)})"


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------


@traced_engine(
    "periods", "1.0",
    fingerprint_fields=("frequency", "start_date", "end_date", "cutoff_days", "pay_days"),
)
def generate_period(
    frequency: PayFrequency,
    start_date: date,
    cutoff_days: int = 3,
    pay_days: int = 7,
    end_date: date | None = None,
) -> PayrollPeriod:
    """
    Derive the period of ``frequency`` anchored on ``start_date``.

    Args:
        frequency: Pay frequency.
        start_date: Any date inside the wanted period (for CUSTOM, the start).
        cutoff_days: Days between cutoff and pay date.
        pay_days: Days between period end and pay date.
        end_date: CUSTOM only; defaults to ``start_date``.

    Returns:
        PayrollPeriod with cutoff and pay dates filled in.
    """
    if cutoff_days < 0 or pay_days < 0:
        raise ValueError(
            f"cutoff_days and pay_days cannot be negative "
            f"(got {cutoff_days}, {pay_days})"
        )
    frequency = _coerce_frequency(frequency, "generate_period")

    if frequency == PayFrequency.WEEKLY:
        period_start = _week_start(start_date)
        period_end = _week_end(start_date)
    elif frequency == PayFrequency.BI_WEEKLY:
        period_start = _week_start(start_date)
        period_end = _week_end(start_date + timedelta(weeks=1))
    elif frequency == PayFrequency.MONTHLY:
        period_start = _month_start(start_date)
        period_end = _month_end(start_date)
    else:
        period_start = start_date
        period_end = end_date or start_date

    pay_date = period_end + timedelta(days=pay_days)
    cutoff_date = pay_date - timedelta(days=cutoff_days)

    return PayrollPeriod(
        frequency=frequency,
        period_start=period_start,
        period_end=period_end,
        cutoff_date=cutoff_date,
        pay_date=pay_date,
        description=describe_period(frequency, period_start, period_end),
    )


def generate_period_with_policy(
    frequency: PayFrequency,
    start_date: date,
    policy: PeriodPolicy | None = None,
    end_date: date | None = None,
) -> PayrollPeriod:
    """``generate_period`` with offsets taken from a ``PeriodPolicy``."""
    policy = policy or PeriodPolicy()
    return generate_period(
        frequency, start_date,
        cutoff_days=policy.cutoff_days,
        pay_days=policy.pay_days,
        end_date=end_date,
    )


def generate_periods_for_year(
    year: int,
    frequency: PayFrequency,
    cutoff_days: int = 3,
    pay_days: int = 7,
) -> list[PayrollPeriod]:
    """
    All periods of ``frequency`` anchored on dates within ``year``.

    Weekly and bi-weekly step a cursor from January 1 by one or two weeks
    while the cursor stays in ``year``; the first period may therefore
    start in December of the previous year.  Monthly yields twelve periods.
    """
    frequency = _coerce_frequency(frequency, "generate_periods_for_year")
    if frequency == PayFrequency.CUSTOM:
        raise UnsupportedFrequencyError(frequency.value, "generate_periods_for_year")

    periods: list[PayrollPeriod] = []
    if frequency == PayFrequency.MONTHLY:
        for month in range(1, 13):
            periods.append(
                generate_period(frequency, date(year, month, 1), cutoff_days, pay_days)
            )
    else:
        step = timedelta(weeks=1 if frequency == PayFrequency.WEEKLY else 2)
        cursor = date(year, 1, 1)
        while cursor.year == year:
            periods.append(generate_period(frequency, cursor, cutoff_days, pay_days))
            cursor += step

    logger.info("periods_generated_for_year", extra={
        "year": year,
        "frequency": frequency.value,
        "period_count": len(periods),
    })
    return periods


def _step(period: PayrollPeriod, direction: int, operation: str) -> date:
    frequency = _coerce_frequency(period.frequency, operation)
    if frequency == PayFrequency.WEEKLY:
        return period.period_start + timedelta(weeks=direction)
    if frequency == PayFrequency.BI_WEEKLY:
        return period.period_start + timedelta(weeks=2 * direction)
    if frequency == PayFrequency.MONTHLY:
        return _add_months(period.period_start, direction)
    raise UnsupportedFrequencyError(frequency.value, operation)


def next_period(
    period: PayrollPeriod,
    cutoff_days: int = 3,
    pay_days: int = 7,
) -> PayrollPeriod:
    """The period immediately after ``period``."""
    anchor = _step(period, 1, "next_period")
    return generate_period(period.frequency, anchor, cutoff_days, pay_days)


def previous_period(
    period: PayrollPeriod,
    cutoff_days: int = 3,
    pay_days: int = 7,
) -> PayrollPeriod:
    """The period immediately before ``period``."""
    anchor = _step(period, -1, "previous_period")
    return generate_period(period.frequency, anchor, cutoff_days, pay_days)


def current_period(
    frequency: PayFrequency,
    as_of: date,
    cutoff_days: int = 3,
    pay_days: int = 7,
) -> PayrollPeriod:
    """The period of ``frequency`` containing ``as_of``."""
    return generate_period(frequency, as_of, cutoff_days, pay_days)


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------


def period_identifier(period: PayrollPeriod) -> str:
    """Stable id, e.g. ``"monthly-2026-03-01-2026-03-31"``."""
    return (
        f"{_coerce_frequency(period.frequency, 'period_identifier').value}-"
        f"{period.period_start.isoformat()}-{period.period_end.isoformat()}"
    )


def is_date_in_period(day: date, period: PayrollPeriod) -> bool:
    """Inclusive on both ends."""
    return period.period_start <= day <= period.period_end


def find_period_for_date(
    day: date,
    periods: Iterable[PayrollPeriod],
) -> PayrollPeriod | None:
    """First period containing ``day``, or None."""
    for period in periods:
        if is_date_in_period(day, period):
            return period
    return None


# ---------------------------------------------------------------------------
# Status
# ---------------------------------------------------------------------------


def period_status(period: PayrollPeriod, as_of: date) -> PeriodStatus:
    """Lifecycle state of ``period`` on ``as_of``."""
    if as_of < period.period_start:
        return PeriodStatus.UPCOMING
    if as_of <= period.period_end:
        return PeriodStatus.ACTIVE
    if as_of < period.cutoff_date:
        return PeriodStatus.CUTOFF
    if as_of < period.pay_date:
        return PeriodStatus.PROCESSING
    return PeriodStatus.COMPLETED


def can_process_payroll(period: PayrollPeriod, as_of: date) -> bool:
    """True once the cutoff date has been reached."""
    return as_of >= period.cutoff_date


def days_until_pay_date(period: PayrollPeriod, as_of: date) -> int:
    """Calendar days until pay date; negative once it has passed."""
    return (period.pay_date - as_of).days


def validate_period(period: PayrollPeriod) -> list[str]:
    """Report date-ordering problems; never raises."""
    errors: list[str] = []
    if period.period_start > period.period_end:
        errors.append("Period start date must be on or before period end date")
    if period.cutoff_date > period.pay_date:
        errors.append("Cutoff date must be on or before pay date")
    if period.cutoff_date < period.period_end:
        errors.append("Cutoff date should not be before period end date")
    return errors


# ---------------------------------------------------------------------------
# Clock-bound scheduler
# ---------------------------------------------------------------------------


class PayrollPeriodScheduler:
    """
    Period operations evaluated against an injected clock.

    Each public method reads ``clock.today()`` exactly once, so a single
    call never mixes two different "now" values.
    """

    def __init__(self, clock: Clock, policy: PeriodPolicy | None = None):
        self._clock = clock
        self._policy = policy or PeriodPolicy()

    @property
    def policy(self) -> PeriodPolicy:
        return self._policy

    def generate_period(
        self,
        frequency: PayFrequency,
        start_date: date,
        end_date: date | None = None,
    ) -> PayrollPeriod:
        return generate_period_with_policy(frequency, start_date, self._policy, end_date)

    def generate_periods_for_year(
        self,
        year: int,
        frequency: PayFrequency,
    ) -> list[PayrollPeriod]:
        return generate_periods_for_year(
            year, frequency, self._policy.cutoff_days, self._policy.pay_days,
        )

    def next_period(self, period: PayrollPeriod) -> PayrollPeriod:
        return next_period(period, self._policy.cutoff_days, self._policy.pay_days)

    def previous_period(self, period: PayrollPeriod) -> PayrollPeriod:
        return previous_period(period, self._policy.cutoff_days, self._policy.pay_days)

    def current_period(self, frequency: PayFrequency) -> PayrollPeriod:
        return current_period(
            frequency, self._clock.today(),
            self._policy.cutoff_days, self._policy.pay_days,
        )

    def status(self, period: PayrollPeriod) -> PeriodStatus:
        return period_status(period, self._clock.today())

    def can_process_payroll(self, period: PayrollPeriod) -> bool:
        return can_process_payroll(period, self._clock.today())

    def days_until_pay_date(self, period: PayrollPeriod) -> int:
        return days_until_pay_date(period, self._clock.today())

    def snapshot(self, period: PayrollPeriod) -> PeriodSnapshot:
        as_of = self._clock.today()
        snapshot = PeriodSnapshot(
            period=period,
            as_of=as_of,
            status=period_status(period, as_of),
            can_process=can_process_payroll(period, as_of),
            days_until_pay=days_until_pay_date(period, as_of),
        )
        logger.debug("period_snapshot_taken", extra={
            "period_id": period_identifier(period),
            "as_of": as_of,
            "status": snapshot.status.value,
            "can_process": snapshot.can_process,
            "days_until_pay": snapshot.days_until_pay,
        })
        return snapshot
