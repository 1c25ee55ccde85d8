"""
Hours Classifier (``payroll_engines.hours``).

Responsibility
--------------
Turn raw attendance intervals into regular / overtime / holiday hour
buckets:

1. Group intervals by calendar date and sum their hours.  A date is a
   holiday if ANY contributing interval is flagged holiday.
2. Holiday dates put every hour into ``holiday_hours`` (no daily cap).
   Other dates put ``min(total, threshold)`` into ``regular_hours`` and the
   remainder into ``overtime_hours``.
3. Accumulate across dates into one ``HoursBreakdown``.

Architecture position
---------------------
**Engines layer** -- pure functional core.  ZERO I/O, ZERO clock reads.

Invariants enforced
-------------------
* ``HoursBreakdown.total_hours == regular + overtime + holiday``.
* Every bucket is non-negative.
* Output is independent of input order.

Failure modes
-------------
* The classifier itself has no error conditions.  Negative hours are
  rejected when ``AttendanceInterval`` / ``AttendanceDay`` are constructed.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from payroll_kernel.domain.values import ZERO, NumberLike, as_decimal
from payroll_kernel.logging_config import get_logger
from payroll_engines.tracer import traced_engine

logger = get_logger("engines.hours")

_SECONDS_PER_HOUR = Decimal("3600")


@dataclass(frozen=True)
class HoursPolicy:
    """Daily overtime threshold."""

    regular_hours_per_day: Decimal = Decimal("8")

    def __post_init__(self) -> None:
        if self.regular_hours_per_day <= 0:
            raise ValueError("regular_hours_per_day must be positive")


@dataclass(frozen=True)
class AttendanceInterval:
    """One worked interval (a single time entry) on a calendar date."""

    work_date: date
    hours_worked: Decimal
    is_holiday: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "hours_worked", as_decimal(self.hours_worked, "hours_worked"),
        )
        if self.hours_worked < 0:
            raise ValueError("hours_worked cannot be negative")

    @classmethod
    def from_clock_times(
        cls,
        clock_in: datetime,
        clock_out: datetime,
        is_holiday: bool = False,
        work_date: date | None = None,
    ) -> AttendanceInterval:
        """Build an interval from clock-in/clock-out timestamps.

        The interval belongs to the clock-in date unless ``work_date`` is
        given (overnight shifts are attributed to the shift date).
        """
        if clock_out < clock_in:
            raise ValueError("clock_out cannot precede clock_in")
        seconds = Decimal(str((clock_out - clock_in).total_seconds()))
        return cls(
            work_date=work_date or clock_in.date(),
            hours_worked=seconds / _SECONDS_PER_HOUR,
            is_holiday=is_holiday,
        )


@dataclass(frozen=True)
class AttendanceDay:
    """All hours worked on one calendar date."""

    work_date: date
    hours_worked: Decimal
    is_holiday: bool = False

    def __post_init__(self) -> None:
        if self.hours_worked < 0:
            raise ValueError("hours_worked cannot be negative")


@dataclass(frozen=True)
class HoursBreakdown:
    """Classified hours for one employee over a period."""

    total_hours: Decimal
    regular_hours: Decimal
    overtime_hours: Decimal
    holiday_hours: Decimal

    def __post_init__(self) -> None:
        for name in ("total_hours", "regular_hours", "overtime_hours", "holiday_hours"):
            value = as_decimal(getattr(self, name), name)
            if value < 0:
                raise ValueError(f"{name} cannot be negative")
            object.__setattr__(self, name, value)
        bucket_sum = self.regular_hours + self.overtime_hours + self.holiday_hours
        if self.total_hours != bucket_sum:
            raise ValueError(
                f"total_hours ({self.total_hours}) must equal "
                f"regular + overtime + holiday ({bucket_sum})"
            )

    @classmethod
    def of(
        cls,
        regular_hours: NumberLike = ZERO,
        overtime_hours: NumberLike = ZERO,
        holiday_hours: NumberLike = ZERO,
    ) -> HoursBreakdown:
        """Build a breakdown from its buckets, deriving ``total_hours``."""
        regular = as_decimal(regular_hours, "regular_hours")
        overtime = as_decimal(overtime_hours, "overtime_hours")
        holiday = as_decimal(holiday_hours, "holiday_hours")
        return cls(
            total_hours=regular + overtime + holiday,
            regular_hours=regular,
            overtime_hours=overtime,
            holiday_hours=holiday,
        )

    @classmethod
    def empty(cls) -> HoursBreakdown:
        return cls.of()

    def __add__(self, other: HoursBreakdown) -> HoursBreakdown:
        return HoursBreakdown.of(
            self.regular_hours + other.regular_hours,
            self.overtime_hours + other.overtime_hours,
            self.holiday_hours + other.holiday_hours,
        )


def aggregate_attendance_days(
    intervals: Iterable[AttendanceInterval],
) -> tuple[AttendanceDay, ...]:
    """Group intervals by date, summing hours; any holiday flag wins.

    Returns:
        One ``AttendanceDay`` per distinct date, ordered by date.
    """
    totals: dict[date, Decimal] = {}
    holidays: dict[date, bool] = {}
    for interval in intervals:
        totals[interval.work_date] = (
            totals.get(interval.work_date, ZERO) + interval.hours_worked
        )
        holidays[interval.work_date] = (
            holidays.get(interval.work_date, False) or interval.is_holiday
        )

    return tuple(
        AttendanceDay(work_date=d, hours_worked=totals[d], is_holiday=holidays[d])
        for d in sorted(totals)
    )


def classify_day(day: AttendanceDay, policy: HoursPolicy | None = None) -> HoursBreakdown:
    """Classify a single day's hours."""
    policy = policy or HoursPolicy()
    if day.is_holiday:
        return HoursBreakdown.of(holiday_hours=day.hours_worked)
    threshold = policy.regular_hours_per_day
    return HoursBreakdown.of(
        regular_hours=min(day.hours_worked, threshold),
        overtime_hours=max(ZERO, day.hours_worked - threshold),
    )


@traced_engine("hours", "1.0", fingerprint_fields=("intervals",))
def classify_hours(
    intervals: Iterable[AttendanceInterval],
    policy: HoursPolicy | None = None,
) -> HoursBreakdown:
    """Classify attendance intervals into regular/overtime/holiday hours.

    Args:
        intervals: Raw intervals, possibly several per date, in any order.
        policy: Daily threshold; defaults to 8 hours.

    Returns:
        HoursBreakdown accumulated over every date.
    """
    policy = policy or HoursPolicy()
    intervals = tuple(intervals)
    days = aggregate_attendance_days(intervals)

    breakdown = HoursBreakdown.empty()
    for day in days:
        breakdown = breakdown + classify_day(day, policy)

    logger.debug("hours_classified", extra={
        "interval_count": len(intervals),
        "day_count": len(days),
        "holiday_day_count": sum(1 for d in days if d.is_holiday),
        "total_hours": str(breakdown.total_hours),
        "regular_hours": str(breakdown.regular_hours),
        "overtime_hours": str(breakdown.overtime_hours),
        "holiday_hours": str(breakdown.holiday_hours),
    })
    return breakdown
