"""
Payroll Calculator (``payroll_engines.payroll``).

Responsibility
--------------
Convert classified hours and an hourly rate into gross pay, statutory
deductions (social security, progressive income tax) and net pay.

* Rates: regular = hourly, overtime = 1.5x, holiday = 2.0x.
* Social security: ``min(gross * 5%, 750)`` per pay cycle, never negative.
* Income tax: annualize gross and social security, subtract the annual
  exemption, run the remainder through the marginal bracket table, and
  divide the annual tax back down to one pay cycle.
* Net pay: ``max(0, gross - total_deductions)``.  Deductions larger than
  gross are absorbed, not carried forward.

Architecture position
---------------------
**Engines layer** -- pure functional core.  ZERO I/O, ZERO clock reads.
Constants come from an injected ``PayrollPolicy``.

Invariants enforced
-------------------
* All hours and money are ``Decimal``; money is quantized to
  ``policy.money_places`` with ROUND_HALF_UP.
* ``gross_salary == regular_pay + overtime_pay + holiday_pay``.
* ``net_salary >= 0`` always.
* Identical inputs produce identical results (no hidden state).

Failure modes
-------------
* ``validate_input`` never raises; it returns human-readable problems.
* ``PayRates.from_hourly_rate`` raises ``ValueError`` for a non-positive
  rate; ``PayrollCalculationResult`` raises ``ValueError`` if constructed
  in an inconsistent state.  Negative advances and other deductions are
  not rejected here: they are a data problem ``validate_input`` reports.
"""

from __future__ import annotations

import time
from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal

from payroll_kernel.domain.values import ZERO, NumberLike, as_decimal, round_money
from payroll_kernel.logging_config import get_logger
from payroll_engines.hours import HoursBreakdown
from payroll_engines.tracer import traced_engine

logger = get_logger("engines.payroll")


# ---------------------------------------------------------------------------
# Policy
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TaxBracket:
    """Marginal tax bracket over annual taxable income, ``[lower, upper)``.

    ``upper=None`` means the bracket is unbounded.
    """

    lower: Decimal
    upper: Decimal | None
    rate: Decimal

    def __post_init__(self) -> None:
        if self.lower < 0:
            raise ValueError("Bracket lower bound cannot be negative")
        if self.upper is not None and self.upper <= self.lower:
            raise ValueError(
                f"Bracket upper bound ({self.upper}) must exceed lower bound ({self.lower})"
            )
        if not ZERO <= self.rate <= Decimal("1"):
            raise ValueError(f"Bracket rate must be between 0 and 1, got {self.rate}")

    def taxable_portion(self, income: Decimal) -> Decimal:
        """Portion of ``income`` that falls inside this bracket."""
        if income <= self.lower:
            return ZERO
        top = income if self.upper is None else min(income, self.upper)
        return top - self.lower


DEFAULT_TAX_BRACKETS: tuple[TaxBracket, ...] = (
    TaxBracket(Decimal("0"), Decimal("150000"), Decimal("0.00")),
    TaxBracket(Decimal("150000"), Decimal("300000"), Decimal("0.05")),
    TaxBracket(Decimal("300000"), Decimal("500000"), Decimal("0.10")),
    TaxBracket(Decimal("500000"), Decimal("750000"), Decimal("0.15")),
    TaxBracket(Decimal("750000"), Decimal("1000000"), Decimal("0.20")),
    TaxBracket(Decimal("1000000"), Decimal("2000000"), Decimal("0.25")),
    TaxBracket(Decimal("2000000"), Decimal("5000000"), Decimal("0.30")),
    TaxBracket(Decimal("5000000"), None, Decimal("0.35")),
)


@dataclass(frozen=True)
class PayrollPolicy:
    """
    Statutory constants for pay, deductions and input sanity limits.

    Defaults follow Thai labor and revenue rules for a monthly pay cycle.
    Override at instantiation (or through ``payroll_config``) for another
    jurisdiction:

        policy = PayrollPolicy(social_security_cap=Decimal("875"))
    """

    overtime_multiplier: Decimal = Decimal("1.5")
    holiday_multiplier: Decimal = Decimal("2.0")

    social_security_rate: Decimal = Decimal("0.05")
    social_security_cap: Decimal = Decimal("750")

    annual_tax_exemption: Decimal = Decimal("60000")
    annualization_factor: int = 12
    tax_brackets: tuple[TaxBracket, ...] = DEFAULT_TAX_BRACKETS

    # Advisory sanity bounds used by validate_input
    max_total_hours: Decimal = Decimal("400")
    max_hourly_rate: Decimal = Decimal("10000")

    currency: str = "THB"
    money_places: int = 2

    def __post_init__(self) -> None:
        if self.overtime_multiplier <= 0:
            raise ValueError("overtime_multiplier must be positive")
        if self.holiday_multiplier <= 0:
            raise ValueError("holiday_multiplier must be positive")
        if not ZERO <= self.social_security_rate <= Decimal("1"):
            raise ValueError("social_security_rate must be between 0 and 1")
        if self.social_security_cap < 0:
            raise ValueError("social_security_cap cannot be negative")
        if self.annual_tax_exemption < 0:
            raise ValueError("annual_tax_exemption cannot be negative")
        if self.annualization_factor <= 0:
            raise ValueError("annualization_factor must be positive")
        if self.money_places < 0:
            raise ValueError("money_places cannot be negative")
        if not self.tax_brackets:
            raise ValueError("tax_brackets cannot be empty")

        # Brackets must be contiguous, ascending, starting at zero
        if self.tax_brackets[0].lower != ZERO:
            raise ValueError("The first tax bracket must start at 0")
        for previous, current in zip(self.tax_brackets, self.tax_brackets[1:]):
            if previous.upper is None or previous.upper != current.lower:
                raise ValueError(
                    "tax_brackets must be contiguous and sorted ascending "
                    f"(gap or overlap at {current.lower})"
                )


# ---------------------------------------------------------------------------
# Value objects
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PayRates:
    """Hourly rates derived from a single base hourly rate."""

    regular_rate: Decimal
    overtime_rate: Decimal
    holiday_rate: Decimal

    @classmethod
    def from_hourly_rate(
        cls,
        hourly_rate: NumberLike,
        policy: PayrollPolicy | None = None,
    ) -> PayRates:
        policy = policy or PayrollPolicy()
        rate = as_decimal(hourly_rate, "hourly_rate")
        if rate <= 0:
            raise ValueError(f"hourly_rate must be greater than 0, got {rate}")
        return cls(
            regular_rate=rate,
            overtime_rate=rate * policy.overtime_multiplier,
            holiday_rate=rate * policy.holiday_multiplier,
        )


@dataclass(frozen=True)
class PayrollCalculationInput:
    """
    Raw calculation request as it arrives from the request layer.

    Deliberately unvalidated: ``validate_input`` reports what is wrong with
    it instead of refusing to construct it.
    """

    employee_id: str
    regular_hours: Decimal
    overtime_hours: Decimal
    holiday_hours: Decimal
    hourly_rate: Decimal
    salary_advances: Decimal = ZERO
    other_deductions: Decimal = ZERO

    def __post_init__(self) -> None:
        for name in (
            "regular_hours", "overtime_hours", "holiday_hours",
            "hourly_rate", "salary_advances", "other_deductions",
        ):
            object.__setattr__(self, name, as_decimal(getattr(self, name), name))

    @classmethod
    def from_breakdown(
        cls,
        employee_id: str,
        hours: HoursBreakdown,
        hourly_rate: NumberLike,
        salary_advances: NumberLike = ZERO,
        other_deductions: NumberLike = ZERO,
    ) -> PayrollCalculationInput:
        return cls(
            employee_id=employee_id,
            regular_hours=hours.regular_hours,
            overtime_hours=hours.overtime_hours,
            holiday_hours=hours.holiday_hours,
            hourly_rate=hourly_rate,
            salary_advances=salary_advances,
            other_deductions=other_deductions,
        )

    @property
    def total_hours(self) -> Decimal:
        return self.regular_hours + self.overtime_hours + self.holiday_hours


@dataclass(frozen=True)
class PayrollCalculationResult:
    """
    Complete payroll calculation for one employee and one pay cycle.

    Immutable.  Construction fails if the earnings or deductions do not
    add up, so a result object is always internally consistent.
    """

    hours: HoursBreakdown
    rates: PayRates

    # Earnings
    regular_pay: Decimal
    overtime_pay: Decimal
    holiday_pay: Decimal
    gross_salary: Decimal

    # Deductions
    social_security: Decimal
    tax_deduction: Decimal
    salary_advances: Decimal
    other_deductions: Decimal
    total_deductions: Decimal

    net_salary: Decimal
    currency: str = "THB"

    def __post_init__(self) -> None:
        for name in (
            "regular_pay", "overtime_pay", "holiday_pay",
            "social_security", "tax_deduction",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} cannot be negative")

        earnings = self.regular_pay + self.overtime_pay + self.holiday_pay
        if self.gross_salary != earnings:
            raise ValueError(
                f"gross_salary ({self.gross_salary}) must equal the sum of "
                f"earnings ({earnings})"
            )
        deductions = (
            self.social_security + self.tax_deduction
            + self.salary_advances + self.other_deductions
        )
        if self.total_deductions != deductions:
            raise ValueError(
                f"total_deductions ({self.total_deductions}) must equal the sum "
                f"of deductions ({deductions})"
            )
        expected_net = max(ZERO, self.gross_salary - self.total_deductions)
        if self.net_salary != expected_net:
            raise ValueError(
                f"net_salary ({self.net_salary}) must equal "
                f"max(0, gross - deductions) ({expected_net})"
            )

    @property
    def regular_hours(self) -> Decimal:
        return self.hours.regular_hours

    @property
    def overtime_hours(self) -> Decimal:
        return self.hours.overtime_hours

    @property
    def holiday_hours(self) -> Decimal:
        return self.hours.holiday_hours

    @property
    def statutory_deductions(self) -> Decimal:
        """Social security plus income tax."""
        return self.social_security + self.tax_deduction

    @property
    def uncollected_deductions(self) -> Decimal:
        """Deductions that did not fit into gross pay and were dropped."""
        return max(ZERO, self.total_deductions - self.gross_salary)


@dataclass(frozen=True)
class PayrollSummary:
    """Totals across a set of payroll results."""

    total_employees: int = 0
    total_gross_salary: Decimal = ZERO
    total_net_salary: Decimal = ZERO
    total_deductions: Decimal = ZERO
    total_social_security: Decimal = ZERO
    total_tax: Decimal = ZERO
    total_advances: Decimal = ZERO


# ---------------------------------------------------------------------------
# Calculator
# ---------------------------------------------------------------------------


class PayrollCalculator:
    """
    Calculate gross pay, statutory deductions and net pay.

    Pure functions - no I/O, no database access, no clock.
    The policy is injected; the default is ``PayrollPolicy()``.
    """

    def __init__(self, policy: PayrollPolicy | None = None):
        self._policy = policy or PayrollPolicy()

    @property
    def policy(self) -> PayrollPolicy:
        return self._policy

    def _money(self, amount: Decimal) -> Decimal:
        return round_money(amount, self._policy.money_places)

    def calculate_social_security(self, gross_salary: NumberLike) -> Decimal:
        """``min(gross * rate, cap)``, floored at zero."""
        gross = as_decimal(gross_salary, "gross_salary")
        contribution = gross * self._policy.social_security_rate
        return self._money(max(ZERO, min(contribution, self._policy.social_security_cap)))

    def calculate_annual_tax(self, annual_taxable_income: NumberLike) -> Decimal:
        """Run annual taxable income through the marginal bracket table."""
        income = max(ZERO, as_decimal(annual_taxable_income, "annual_taxable_income"))
        total = ZERO
        for bracket in self._policy.tax_brackets:
            portion = bracket.taxable_portion(income)
            if portion <= 0:
                break
            total += portion * bracket.rate
        return total

    def calculate_tax_deduction(
        self,
        gross_salary: NumberLike,
        social_security: NumberLike,
    ) -> Decimal:
        """Income tax withheld for one pay cycle.

        Annual taxable income is ``gross*N - social_security*N - exemption``
        where N is the annualization factor (12 pay cycles).
        """
        policy = self._policy
        factor = Decimal(policy.annualization_factor)
        annual_gross = as_decimal(gross_salary, "gross_salary") * factor
        annual_social_security = as_decimal(social_security, "social_security") * factor
        taxable = max(
            ZERO, annual_gross - annual_social_security - policy.annual_tax_exemption,
        )
        return self._money(self.calculate_annual_tax(taxable) / factor)

    @traced_engine(
        "payroll", "1.0",
        fingerprint_fields=("hours", "hourly_rate", "salary_advances", "other_deductions"),
    )
    def calculate(
        self,
        hours: HoursBreakdown,
        hourly_rate: NumberLike,
        salary_advances: NumberLike = ZERO,
        other_deductions: NumberLike = ZERO,
    ) -> PayrollCalculationResult:
        """
        Calculate payroll for one employee.

        Args:
            hours: Classified hours for the pay cycle.
            hourly_rate: Base hourly rate (must be > 0).
            salary_advances: Advances already paid out this cycle.
            other_deductions: Any other discretionary deduction.

        Returns:
            PayrollCalculationResult with earnings, deductions and net pay.

        Raises:
            ValueError: If hourly_rate is not positive.

        Negative advances or deductions are computed as given (they raise
        net pay); ``validate_input`` reports them for the caller to judge.
        """
        t0 = time.monotonic()
        policy = self._policy
        rates = PayRates.from_hourly_rate(hourly_rate, policy)
        advances = self._money(as_decimal(salary_advances, "salary_advances"))
        other = self._money(as_decimal(other_deductions, "other_deductions"))

        logger.info("payroll_calculation_started", extra={
            "regular_hours": str(hours.regular_hours),
            "overtime_hours": str(hours.overtime_hours),
            "holiday_hours": str(hours.holiday_hours),
            "hourly_rate": str(rates.regular_rate),
            "currency": policy.currency,
        })

        regular_pay = self._money(hours.regular_hours * rates.regular_rate)
        overtime_pay = self._money(hours.overtime_hours * rates.overtime_rate)
        holiday_pay = self._money(hours.holiday_hours * rates.holiday_rate)
        gross_salary = regular_pay + overtime_pay + holiday_pay

        social_security = self.calculate_social_security(gross_salary)
        tax_deduction = self.calculate_tax_deduction(gross_salary, social_security)
        total_deductions = social_security + tax_deduction + advances + other

        net_salary = max(ZERO, gross_salary - total_deductions)
        if gross_salary - total_deductions < 0:
            logger.warning("payroll_net_salary_clamped", extra={
                "gross_salary": str(gross_salary),
                "total_deductions": str(total_deductions),
                "uncollected": str(total_deductions - gross_salary),
            })

        result = PayrollCalculationResult(
            hours=hours,
            rates=rates,
            regular_pay=regular_pay,
            overtime_pay=overtime_pay,
            holiday_pay=holiday_pay,
            gross_salary=gross_salary,
            social_security=social_security,
            tax_deduction=tax_deduction,
            salary_advances=advances,
            other_deductions=other,
            total_deductions=total_deductions,
            net_salary=net_salary,
            currency=policy.currency,
        )

        duration_ms = round((time.monotonic() - t0) * 1000, 2)
        logger.info("payroll_calculation_completed", extra={
            "gross_salary": str(result.gross_salary),
            "social_security": str(result.social_security),
            "tax_deduction": str(result.tax_deduction),
            "total_deductions": str(result.total_deductions),
            "net_salary": str(result.net_salary),
            "duration_ms": duration_ms,
        })
        return result

    def calculate_from_input(
        self,
        calculation_input: PayrollCalculationInput,
    ) -> PayrollCalculationResult:
        """Calculate from a raw request record (validate it first)."""
        return self.calculate(
            hours=HoursBreakdown.of(
                calculation_input.regular_hours,
                calculation_input.overtime_hours,
                calculation_input.holiday_hours,
            ),
            hourly_rate=calculation_input.hourly_rate,
            salary_advances=calculation_input.salary_advances,
            other_deductions=calculation_input.other_deductions,
        )

    def validate_input(self, calculation_input: PayrollCalculationInput) -> list[str]:
        """Return human-readable problems with a request; never raises.

        The caller decides whether any of these should block calculation.
        """
        policy = self._policy
        errors: list[str] = []

        if not calculation_input.employee_id:
            errors.append("Employee ID is required")
        if calculation_input.regular_hours < 0:
            errors.append("Regular hours cannot be negative")
        if calculation_input.overtime_hours < 0:
            errors.append("Overtime hours cannot be negative")
        if calculation_input.holiday_hours < 0:
            errors.append("Holiday hours cannot be negative")
        if calculation_input.hourly_rate <= 0:
            errors.append("Hourly rate must be greater than 0")
        if calculation_input.salary_advances < 0:
            errors.append("Salary advances cannot be negative")
        if calculation_input.other_deductions < 0:
            errors.append("Other deductions cannot be negative")

        if calculation_input.total_hours > policy.max_total_hours:
            errors.append(
                f"Total hours ({calculation_input.total_hours}) exceed the "
                f"maximum of {policy.max_total_hours}"
            )
        if calculation_input.hourly_rate > policy.max_hourly_rate:
            errors.append(
                f"Hourly rate ({calculation_input.hourly_rate}) exceeds the "
                f"maximum of {policy.max_hourly_rate}"
            )

        if errors:
            logger.info("payroll_input_validation_failed", extra={
                "employee_id": calculation_input.employee_id,
                "error_count": len(errors),
                "errors": errors,
            })
        return errors


def summarize_payroll(results: Iterable[PayrollCalculationResult]) -> PayrollSummary:
    """Sum a set of results into a ``PayrollSummary``."""
    summary = PayrollSummary()
    for result in results:
        summary = PayrollSummary(
            total_employees=summary.total_employees + 1,
            total_gross_salary=summary.total_gross_salary + result.gross_salary,
            total_net_salary=summary.total_net_salary + result.net_salary,
            total_deductions=summary.total_deductions + result.total_deductions,
            total_social_security=summary.total_social_security + result.social_security,
            total_tax=summary.total_tax + result.tax_deduction,
            total_advances=summary.total_advances + result.salary_advances,
        )
    return summary


# Convenience functions for the default policy

def calculate_payroll(
    hours: HoursBreakdown,
    hourly_rate: NumberLike,
    salary_advances: NumberLike = ZERO,
    other_deductions: NumberLike = ZERO,
    policy: PayrollPolicy | None = None,
) -> PayrollCalculationResult:
    """Calculate payroll with a one-off calculator."""
    return PayrollCalculator(policy).calculate(
        hours=hours,
        hourly_rate=hourly_rate,
        salary_advances=salary_advances,
        other_deductions=other_deductions,
    )


def validate_input(
    calculation_input: PayrollCalculationInput,
    policy: PayrollPolicy | None = None,
) -> list[str]:
    """Advisory validation with a one-off calculator."""
    return PayrollCalculator(policy).validate_input(calculation_input)
