"""
Hypothesis-based property tests for the payroll engines.

Properties checked here:
- Hours: every hour lands in exactly one bucket; overtime only past the
  daily threshold; order of intervals never matters
- Payroll: gross is the sum of its parts, net is never negative, social
  security never exceeds the cap, identical inputs give identical results
- Periods: derived dates are ordered, generated periods tile the year
- Anti-spoofing: risk score within [0, 100]; critical flags always invalidate
"""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

from hypothesis import given, settings
from hypothesis import strategies as st

from payroll_engines.anti_spoofing import (
    AntiSpoofingFlag,
    AttendanceIntegrityValidator,
    LocationSample,
    ValidationContext,
)
from payroll_engines.geo import GeoPoint, haversine_distance
from payroll_engines.hours import AttendanceInterval, HoursBreakdown, classify_hours
from payroll_engines.payroll import PayrollCalculator
from payroll_engines.periods import (
    PayFrequency,
    generate_period,
    generate_periods_for_year,
    next_period,
    previous_period,
)

hours_st = st.decimals(min_value=Decimal("0"), max_value=Decimal("24"), places=2)
rate_st = st.decimals(min_value=Decimal("0.01"), max_value=Decimal("10000"), places=2)
money_st = st.decimals(min_value=Decimal("0"), max_value=Decimal("100000"), places=2)
day_st = st.dates(min_value=date(2000, 1, 1), max_value=date(2099, 12, 31))

interval_st = st.builds(
    AttendanceInterval,
    work_date=st.dates(min_value=date(2026, 3, 1), max_value=date(2026, 3, 10)),
    hours_worked=hours_st,
    is_holiday=st.booleans(),
)

point_st = st.builds(
    GeoPoint,
    latitude=st.floats(min_value=-89.0, max_value=89.0, allow_nan=False),
    longitude=st.floats(min_value=-179.0, max_value=179.0, allow_nan=False),
)

NOW = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Hours
# ---------------------------------------------------------------------------


class TestHoursProperties:

    @given(st.lists(interval_st, max_size=30))
    def test_hours_conserved(self, intervals):
        result = classify_hours(intervals)
        assert result.total_hours == sum((i.hours_worked for i in intervals), Decimal("0"))
        assert result.regular_hours >= 0
        assert result.overtime_hours >= 0

    @given(st.lists(interval_st, max_size=30))
    def test_regular_hours_capped_per_day(self, intervals):
        result = classify_hours(intervals)
        working_days = {i.work_date for i in intervals}
        assert result.regular_hours <= Decimal("8") * len(working_days)

    @given(st.lists(interval_st, max_size=30), st.randoms())
    def test_order_independent(self, intervals, random):
        shuffled = list(intervals)
        random.shuffle(shuffled)
        assert classify_hours(intervals) == classify_hours(shuffled)


# ---------------------------------------------------------------------------
# Payroll
# ---------------------------------------------------------------------------


class TestPayrollProperties:

    def setup_method(self):
        self.calculator = PayrollCalculator()

    @given(
        regular=st.decimals(min_value=Decimal("0"), max_value=Decimal("300"), places=2),
        overtime=st.decimals(min_value=Decimal("0"), max_value=Decimal("100"), places=2),
        holiday=st.decimals(min_value=Decimal("0"), max_value=Decimal("100"), places=2),
        rate=rate_st,
        advances=money_st,
        other=money_st,
    )
    @settings(max_examples=200)
    def test_result_invariants(self, regular, overtime, holiday, rate, advances, other):
        result = self.calculator.calculate(
            HoursBreakdown.of(regular, overtime, holiday), rate, advances, other,
        )
        assert result.gross_salary == result.regular_pay + result.overtime_pay + result.holiday_pay
        assert result.net_salary >= 0
        assert result.net_salary == max(Decimal("0"), result.gross_salary - result.total_deductions)
        assert Decimal("0") <= result.social_security <= Decimal("750")
        assert result.tax_deduction >= 0
        assert result.gross_salary.as_tuple().exponent == -2

    @given(gross=st.decimals(min_value=Decimal("-100000"), max_value=Decimal("1000000"), places=2))
    def test_social_security_bounds(self, gross):
        contribution = self.calculator.calculate_social_security(gross)
        assert Decimal("0") <= contribution <= Decimal("750")

    @given(
        low=st.decimals(min_value=Decimal("0"), max_value=Decimal("500000"), places=2),
        delta=st.decimals(min_value=Decimal("0"), max_value=Decimal("500000"), places=2),
    )
    def test_tax_monotonic(self, low, delta):
        assert self.calculator.calculate_annual_tax(low) <= self.calculator.calculate_annual_tax(
            low + delta
        )

    @given(rate=rate_st, hours=hours_st)
    def test_deterministic(self, rate, hours):
        breakdown = HoursBreakdown.of(hours, "0", "0")
        assert self.calculator.calculate(breakdown, rate) == self.calculator.calculate(breakdown, rate)


# ---------------------------------------------------------------------------
# Periods
# ---------------------------------------------------------------------------


class TestPeriodProperties:

    @given(
        frequency=st.sampled_from([PayFrequency.WEEKLY, PayFrequency.BI_WEEKLY, PayFrequency.MONTHLY]),
        anchor=day_st,
    )
    def test_derived_dates_ordered(self, frequency, anchor):
        period = generate_period(frequency, anchor)
        assert period.period_start <= anchor <= period.period_end
        assert period.period_end < period.cutoff_date <= period.pay_date

    @given(
        frequency=st.sampled_from([PayFrequency.WEEKLY, PayFrequency.BI_WEEKLY, PayFrequency.MONTHLY]),
        anchor=day_st,
    )
    def test_next_is_adjacent(self, frequency, anchor):
        period = generate_period(frequency, anchor)
        following = next_period(period)
        assert following.period_start == period.period_end + timedelta(days=1)
        assert previous_period(following) == period

    @given(year=st.integers(min_value=2000, max_value=2099))
    def test_monthly_periods_tile_year(self, year):
        periods = generate_periods_for_year(year, PayFrequency.MONTHLY)
        assert sum(p.length_days for p in periods) == (date(year + 1, 1, 1) - date(year, 1, 1)).days


# ---------------------------------------------------------------------------
# Anti-spoofing
# ---------------------------------------------------------------------------


class TestAntiSpoofingProperties:

    def setup_method(self):
        self.validator = AttendanceIntegrityValidator()

    @given(
        claimed=point_st,
        workplace=point_st,
        radius=st.floats(min_value=1.0, max_value=5000.0),
        accuracy=st.floats(min_value=0.0, max_value=500.0),
        history=st.lists(
            st.tuples(point_st, st.integers(min_value=-600, max_value=0)),
            max_size=8,
        ),
    )
    @settings(max_examples=100)
    def test_score_bounded_and_critical_invalidates(
        self, claimed, workplace, radius, accuracy, history,
    ):
        samples = tuple(
            LocationSample(
                latitude=point.latitude,
                longitude=point.longitude,
                accuracy_meters=30.0,
                timestamp=NOW + timedelta(minutes=offset),
            )
            for point, offset in history
        )
        context = ValidationContext(
            workplace=workplace,
            radius_meters=radius,
            observed_at=NOW,
            location_history=samples,
        )
        result = self.validator.validate_location(claimed, accuracy, context)

        assert 0 <= result.risk_score <= 100
        if result.flags & {AntiSpoofingFlag.OUTSIDE_RADIUS, AntiSpoofingFlag.IMPOSSIBLE_SPEED}:
            assert not result.is_valid
        assert (AntiSpoofingFlag.OUTSIDE_RADIUS in result.flags) == (
            haversine_distance(claimed, workplace) > radius
        )
