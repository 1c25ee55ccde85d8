"""
Tests for the Payroll Calculator.

Covers:
- Earnings at regular / overtime / holiday rates
- Social security with cap
- Progressive income tax through the bracket table
- Net pay clamp at zero
- Advisory input validation
- Result invariants and summaries
- Alternate policies
"""

from decimal import Decimal

import pytest

from payroll_engines.hours import HoursBreakdown
from payroll_engines.payroll import (
    PayRates,
    PayrollCalculationInput,
    PayrollCalculationResult,
    PayrollCalculator,
    PayrollPolicy,
    TaxBracket,
    calculate_payroll,
    summarize_payroll,
    validate_input,
)


def _hours(regular="0", overtime="0", holiday="0") -> HoursBreakdown:
    return HoursBreakdown.of(regular, overtime, holiday)


def _input(**overrides) -> PayrollCalculationInput:
    values = dict(
        employee_id="EMP-001",
        regular_hours=Decimal("160"),
        overtime_hours=Decimal("20"),
        holiday_hours=Decimal("8"),
        hourly_rate=Decimal("150"),
    )
    values.update(overrides)
    return PayrollCalculationInput(**values)


class TestEarnings:
    """Gross pay from classified hours."""

    def setup_method(self):
        self.calculator = PayrollCalculator()

    def test_standard_month(self):
        """160 regular, 20 overtime, 8 holiday hours at 150/hour."""
        result = self.calculator.calculate(_hours("160", "20", "8"), Decimal("150"))

        assert result.regular_pay == Decimal("24000.00")
        assert result.overtime_pay == Decimal("4500.00")
        assert result.holiday_pay == Decimal("2400.00")
        assert result.gross_salary == Decimal("30900.00")

    def test_standard_month_deductions(self):
        result = self.calculator.calculate(_hours("160", "20", "8"), Decimal("150"))

        assert result.social_security == Decimal("750.00")
        # annual taxable = 370800 - 9000 - 60000 = 301800
        # tax = 150000 * 5% + 1800 * 10% = 7680 / 12 = 640
        assert result.tax_deduction == Decimal("640.00")
        assert result.total_deductions == Decimal("1390.00")
        assert result.net_salary == Decimal("29510.00")

    def test_rates_derived_from_hourly_rate(self):
        result = self.calculator.calculate(_hours("1"), Decimal("100"))
        assert result.rates == PayRates(
            regular_rate=Decimal("100"),
            overtime_rate=Decimal("150.0"),
            holiday_rate=Decimal("200.0"),
        )

    def test_money_rounded_half_up(self):
        # 1.5 h * 33.33 = 49.995 -> 50.00
        result = self.calculator.calculate(_hours("1.5"), Decimal("33.33"))
        assert result.regular_pay == Decimal("50.00")

    def test_gross_is_sum_of_rounded_parts(self):
        result = self.calculator.calculate(_hours("1.5", "1.5", "1.5"), Decimal("33.33"))
        assert result.gross_salary == (
            result.regular_pay + result.overtime_pay + result.holiday_pay
        )

    def test_accepts_int_and_str_amounts(self):
        a = self.calculator.calculate(_hours("10"), 150, salary_advances="100")
        b = self.calculator.calculate(_hours("10"), Decimal("150"), Decimal("100"))
        assert a == b

    def test_non_positive_rate_raises(self):
        with pytest.raises(ValueError, match="greater than 0"):
            self.calculator.calculate(_hours("10"), Decimal("0"))

    def test_negative_advance_is_computed(self):
        # a negative advance is paid back to the employee
        result = self.calculator.calculate(
            _hours("160"), Decimal("150"), salary_advances=Decimal("-100"),
        )
        assert result.gross_salary == Decimal("24000.00")
        assert result.social_security == Decimal("750.00")
        assert result.tax_deduction == Decimal("287.50")
        assert result.salary_advances == Decimal("-100.00")
        assert result.total_deductions == Decimal("937.50")
        assert result.net_salary == Decimal("23062.50")

    def test_negative_other_deduction_is_computed(self):
        result = self.calculator.calculate(
            _hours("160"), Decimal("150"), other_deductions=Decimal("-50"),
        )
        assert result.net_salary == Decimal("23012.50")

    def test_negative_advance_flagged_by_validation(self):
        errors = self.calculator.validate_input(_input(salary_advances=Decimal("-100")))
        assert errors == ["Salary advances cannot be negative"]

    def test_idempotent(self):
        args = (_hours("160", "20", "8"), Decimal("150"), Decimal("1000"), Decimal("250"))
        assert self.calculator.calculate(*args) == self.calculator.calculate(*args)

    def test_zero_hours(self):
        result = self.calculator.calculate(HoursBreakdown.empty(), Decimal("150"))
        assert result.gross_salary == Decimal("0.00")
        assert result.net_salary == Decimal("0.00")

    def test_logs_start_and_completion(self, captured_logs):
        self.calculator.calculate(_hours("8"), Decimal("100"))
        messages = [r["message"] for r in captured_logs()]
        assert "payroll_calculation_started" in messages
        assert "payroll_calculation_completed" in messages
        assert "PAYROLL_ENGINE_TRACE" in messages


class TestSocialSecurity:
    """Social security contribution."""

    def setup_method(self):
        self.calculator = PayrollCalculator()

    @pytest.mark.parametrize(
        "gross, expected",
        [
            ("10000", "500.00"),
            ("15000", "750.00"),
            ("20000", "750.00"),
            ("0", "0.00"),
            ("-1000", "0.00"),
            ("123.45", "6.17"),
        ],
    )
    def test_contribution(self, gross, expected):
        assert self.calculator.calculate_social_security(Decimal(gross)) == Decimal(expected)

    def test_alternate_cap(self):
        calculator = PayrollCalculator(PayrollPolicy(social_security_cap=Decimal("875")))
        assert calculator.calculate_social_security(Decimal("20000")) == Decimal("875.00")


class TestTaxDeduction:
    """Progressive income tax."""

    def setup_method(self):
        self.calculator = PayrollCalculator()

    def test_below_exemption_is_zero(self):
        # annual 120000 - 6000 - 60000 = 54000 -> 0% bracket
        assert self.calculator.calculate_tax_deduction(Decimal("10000"), Decimal("500")) == Decimal("0.00")

    def test_spans_three_brackets(self):
        # annual 600000 - 9000 - 60000 = 531000
        # 7500 + 20000 + 31000 * 15% = 32150 / 12 = 2679.1666...
        assert self.calculator.calculate_tax_deduction(
            Decimal("50000"), Decimal("750"),
        ) == Decimal("2679.17")

    def test_top_bracket_unbounded(self):
        annual = self.calculator.calculate_annual_tax(Decimal("6000000"))
        # 0 + 7500 + 20000 + 37500 + 50000 + 250000 + 900000 + 350000
        assert annual == Decimal("1615000.00")

    def test_negative_taxable_is_zero(self):
        assert self.calculator.calculate_annual_tax(Decimal("-5")) == Decimal("0")

    def test_bracket_boundary_belongs_to_upper_bracket(self):
        # exactly 150000 taxable: nothing taxed at 5% yet
        assert self.calculator.calculate_annual_tax(Decimal("150000")) == Decimal("0")
        assert self.calculator.calculate_annual_tax(Decimal("150001")) == Decimal("0.05")

    def test_flat_alternate_table(self):
        policy = PayrollPolicy(
            tax_brackets=(TaxBracket(Decimal("0"), None, Decimal("0.10")),),
            annual_tax_exemption=Decimal("0"),
        )
        calculator = PayrollCalculator(policy)
        # annual 12000 - 0 social security -> 1200 / 12 = 100
        assert calculator.calculate_tax_deduction(Decimal("1000"), Decimal("0")) == Decimal("100.00")


class TestNetSalaryClamp:
    """Deductions never drive pay negative."""

    def test_large_advance_clamps_to_zero(self):
        result = calculate_payroll(
            _hours("160", "20", "8"), Decimal("150"), salary_advances=Decimal("50000"),
        )
        assert result.net_salary == Decimal("0.00")
        assert result.salary_advances == Decimal("50000.00")
        assert result.total_deductions == Decimal("51390.00")
        assert result.uncollected_deductions == Decimal("20490.00")

    def test_clamp_is_logged(self, captured_logs):
        calculate_payroll(_hours("10"), Decimal("100"), other_deductions=Decimal("5000"))
        warnings = [r for r in captured_logs() if r["message"] == "payroll_net_salary_clamped"]
        assert len(warnings) == 1
        assert warnings[0]["level"] == "WARNING"

    def test_no_uncollected_when_covered(self):
        result = calculate_payroll(_hours("160"), Decimal("150"), salary_advances=Decimal("1000"))
        assert result.uncollected_deductions == Decimal("0")


class TestValidateInput:
    """Advisory validation returns problems without raising."""

    def setup_method(self):
        self.calculator = PayrollCalculator()

    def test_valid_input_has_no_errors(self):
        assert self.calculator.validate_input(_input()) == []

    def test_missing_employee_id(self):
        assert "Employee ID is required" in self.calculator.validate_input(_input(employee_id=""))

    def test_negative_hours_reported_per_bucket(self):
        errors = self.calculator.validate_input(_input(
            regular_hours=Decimal("-1"),
            overtime_hours=Decimal("-1"),
            holiday_hours=Decimal("-1"),
        ))
        assert "Regular hours cannot be negative" in errors
        assert "Overtime hours cannot be negative" in errors
        assert "Holiday hours cannot be negative" in errors

    def test_non_positive_rate(self):
        errors = self.calculator.validate_input(_input(hourly_rate=Decimal("0")))
        assert "Hourly rate must be greater than 0" in errors

    def test_negative_deductions(self):
        errors = self.calculator.validate_input(_input(
            salary_advances=Decimal("-5"), other_deductions=Decimal("-5"),
        ))
        assert "Salary advances cannot be negative" in errors
        assert "Other deductions cannot be negative" in errors

    def test_sanity_bounds(self):
        errors = self.calculator.validate_input(_input(
            regular_hours=Decimal("390"), hourly_rate=Decimal("10001"),
        ))
        assert len(errors) == 2
        assert any("Total hours" in e for e in errors)
        assert any("Hourly rate" in e for e in errors)

    def test_bounds_are_inclusive(self):
        errors = self.calculator.validate_input(_input(
            regular_hours=Decimal("372"), hourly_rate=Decimal("10000"),
        ))
        assert errors == []

    def test_several_errors_at_once(self):
        errors = validate_input(_input(employee_id="", hourly_rate=Decimal("-1")))
        assert len(errors) == 2

    def test_calculate_from_valid_input(self):
        result = self.calculator.calculate_from_input(_input())
        assert result.gross_salary == Decimal("30900.00")


class TestPayrollCalculationResult:
    """Result objects cannot be constructed inconsistent."""

    def _result(self, **overrides) -> PayrollCalculationResult:
        values = dict(
            hours=_hours("10"),
            rates=PayRates.from_hourly_rate(Decimal("100")),
            regular_pay=Decimal("1000.00"),
            overtime_pay=Decimal("0.00"),
            holiday_pay=Decimal("0.00"),
            gross_salary=Decimal("1000.00"),
            social_security=Decimal("50.00"),
            tax_deduction=Decimal("0.00"),
            salary_advances=Decimal("0.00"),
            other_deductions=Decimal("0.00"),
            total_deductions=Decimal("50.00"),
            net_salary=Decimal("950.00"),
        )
        values.update(overrides)
        return PayrollCalculationResult(**values)

    def test_consistent_result_builds(self):
        assert self._result().net_salary == Decimal("950.00")

    def test_gross_mismatch_rejected(self):
        with pytest.raises(ValueError, match="gross_salary"):
            self._result(gross_salary=Decimal("999.00"))

    def test_deduction_mismatch_rejected(self):
        with pytest.raises(ValueError, match="total_deductions"):
            self._result(total_deductions=Decimal("60.00"))

    def test_negative_net_rejected(self):
        with pytest.raises(ValueError, match="net_salary"):
            self._result(net_salary=Decimal("-1.00"))


class TestPayrollPolicy:
    """Policy validation."""

    def test_gap_between_brackets_rejected(self):
        with pytest.raises(ValueError, match="contiguous"):
            PayrollPolicy(tax_brackets=(
                TaxBracket(Decimal("0"), Decimal("100"), Decimal("0")),
                TaxBracket(Decimal("200"), None, Decimal("0.1")),
            ))

    def test_first_bracket_must_start_at_zero(self):
        with pytest.raises(ValueError, match="start at 0"):
            PayrollPolicy(tax_brackets=(TaxBracket(Decimal("10"), None, Decimal("0.1")),))

    def test_bracket_rate_out_of_range(self):
        with pytest.raises(ValueError):
            TaxBracket(Decimal("0"), None, Decimal("1.5"))

    def test_negative_social_security_rate_rejected(self):
        with pytest.raises(ValueError):
            PayrollPolicy(social_security_rate=Decimal("-0.01"))


class TestSummarizePayroll:
    """Totals over a set of results."""

    def test_empty(self):
        summary = summarize_payroll([])
        assert summary.total_employees == 0
        assert summary.total_gross_salary == Decimal("0")

    def test_totals(self):
        calculator = PayrollCalculator()
        results = [
            calculator.calculate(_hours("160", "20", "8"), Decimal("150")),
            calculator.calculate(_hours("100"), Decimal("100"), salary_advances=Decimal("500")),
        ]
        summary = summarize_payroll(results)

        assert summary.total_employees == 2
        assert summary.total_gross_salary == Decimal("40900.00")
        assert summary.total_advances == Decimal("500.00")
        assert summary.total_net_salary == sum(r.net_salary for r in results)
        assert summary.total_social_security == Decimal("1250.00")
