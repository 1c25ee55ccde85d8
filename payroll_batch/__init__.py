"""
payroll_batch -- Per-employee batch payroll driver.

Runs the payroll engines over many employees with per-item isolation,
progress reporting and cooperative cancellation.  Employees are
independent, so items may run sequentially or on a thread pool.

Architecture:
    payroll_batch/ is a top-level package.  Nothing in payroll_kernel,
    payroll_engines or payroll_config imports from payroll_batch.

Invariants:
    - One employee's failure never blocks the others.
    - Clock injection: no ``datetime.now()`` calls.
    - Cancellation stops submission; it never interrupts a running item.
"""

from payroll_batch.domain.types import (
    BatchItemResult,
    BatchItemStatus,
    BatchJobStatus,
    BatchProgress,
    BatchRunResult,
)
from payroll_batch.services.executor import PayrollBatchExecutor
from payroll_batch.tasks.base import BatchItemInput, BatchTask, BatchTaskResult
from payroll_batch.tasks.payroll_tasks import (
    EmployeePayrollRequest,
    EmployeePayrollTask,
    payroll_results,
    summarize_run,
)

__all__ = [
    "BatchItemInput",
    "BatchItemResult",
    "BatchItemStatus",
    "BatchJobStatus",
    "BatchProgress",
    "BatchRunResult",
    "BatchTask",
    "BatchTaskResult",
    "EmployeePayrollRequest",
    "EmployeePayrollTask",
    "PayrollBatchExecutor",
    "payroll_results",
    "summarize_run",
]
