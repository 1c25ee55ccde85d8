"""
payroll_batch.tasks -- Task protocol and the payroll task implementation.

ZERO engine imports in base.py.
"""

from payroll_batch.tasks.base import BatchItemInput, BatchTask, BatchTaskResult
from payroll_batch.tasks.payroll_tasks import (
    EmployeePayrollRequest,
    EmployeePayrollTask,
    payroll_results,
    summarize_run,
)

__all__ = [
    "BatchItemInput",
    "BatchTask",
    "BatchTaskResult",
    "EmployeePayrollRequest",
    "EmployeePayrollTask",
    "payroll_results",
    "summarize_run",
]
