"""
Batch task: per-employee payroll calculation for one pay period.

Each item is one employee: classify their attendance, run the advisory
input validation, then calculate pay.  Validation problems block the
item by default; a calculation error fails only that employee.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any

from payroll_kernel.domain.values import ZERO, as_decimal
from payroll_kernel.logging_config import LogContext, get_logger
from payroll_engines.hours import AttendanceInterval, HoursPolicy, classify_hours
from payroll_engines.payroll import (
    PayrollCalculationInput,
    PayrollCalculationResult,
    PayrollCalculator,
    PayrollSummary,
    summarize_payroll,
)

from payroll_batch.domain.types import BatchItemStatus, BatchRunResult
from payroll_batch.tasks.base import BatchItemInput, BatchTaskResult

logger = get_logger("batch.payroll_tasks")


@dataclass(frozen=True)
class EmployeePayrollRequest:
    """Everything needed to pay one employee for one period.

    Values are coerced to ``Decimal`` but not validated; validation is the
    task's job so a bad record fails its own item instead of the batch.
    """

    employee_id: str
    hourly_rate: Decimal
    attendance: tuple[AttendanceInterval, ...] = ()
    salary_advances: Decimal = ZERO
    other_deductions: Decimal = ZERO

    def __post_init__(self) -> None:
        object.__setattr__(self, "attendance", tuple(self.attendance))
        for name in ("hourly_rate", "salary_advances", "other_deductions"):
            object.__setattr__(self, name, as_decimal(getattr(self, name), name))


class EmployeePayrollTask:
    """Batch task calculating payroll for a fixed set of employees."""

    def __init__(
        self,
        requests: Iterable[EmployeePayrollRequest],
        calculator: PayrollCalculator | None = None,
        hours_policy: HoursPolicy | None = None,
        block_on_validation_errors: bool = True,
    ):
        self._requests = tuple(requests)
        self._calculator = calculator or PayrollCalculator()
        self._hours_policy = hours_policy or HoursPolicy()
        self._block_on_validation_errors = block_on_validation_errors

    @property
    def task_type(self) -> str:
        return "payroll.employee_calculation"

    @property
    def description(self) -> str:
        return "Calculate gross pay, deductions and net pay per employee"

    def prepare_items(
        self,
        parameters: dict[str, Any],
        as_of: datetime,
    ) -> tuple[BatchItemInput, ...]:
        return tuple(
            BatchItemInput(item_index=i, item_key=request.employee_id, payload=request)
            for i, request in enumerate(self._requests)
        )

    def execute_item(
        self,
        item: BatchItemInput,
        parameters: dict[str, Any],
        as_of: datetime,
    ) -> BatchTaskResult:
        request: EmployeePayrollRequest = item.payload

        with LogContext.bind(employee_id=request.employee_id):
            hours = classify_hours(request.attendance, self._hours_policy)
            calculation_input = PayrollCalculationInput.from_breakdown(
                employee_id=request.employee_id,
                hours=hours,
                hourly_rate=request.hourly_rate,
                salary_advances=request.salary_advances,
                other_deductions=request.other_deductions,
            )

            errors = self._calculator.validate_input(calculation_input)
            if errors and self._block_on_validation_errors:
                return BatchTaskResult(
                    status=BatchItemStatus.FAILED,
                    result_data={"validation_errors": tuple(errors)},
                    error_code="VALIDATION_FAILED",
                    error_message="; ".join(errors),
                )

            try:
                result = self._calculator.calculate_from_input(calculation_input)
            except ValueError as exc:
                logger.warning("employee_payroll_calculation_failed", extra={
                    "error": str(exc),
                })
                return BatchTaskResult(
                    status=BatchItemStatus.FAILED,
                    error_code="CALCULATION_FAILED",
                    error_message=str(exc),
                )

        return BatchTaskResult(
            status=BatchItemStatus.SUCCEEDED,
            result_data={
                "employee_id": request.employee_id,
                "hours": hours,
                "payroll": result,
                "warnings": tuple(errors),
            },
        )


def payroll_results(run: BatchRunResult) -> dict[str, PayrollCalculationResult]:
    """Successful payroll results of a run, keyed by employee id."""
    return {
        item.item_key: item.result_data["payroll"]
        for item in run.item_results
        if item.status == BatchItemStatus.SUCCEEDED and item.result_data
    }


def summarize_run(run: BatchRunResult) -> PayrollSummary:
    """Totals over the employees that were paid in a run."""
    return summarize_payroll(payroll_results(run).values())
