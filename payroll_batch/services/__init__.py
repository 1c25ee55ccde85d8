"""payroll_batch.services -- Batch execution."""

from payroll_batch.services.executor import PayrollBatchExecutor, ProgressCallback

__all__ = ["PayrollBatchExecutor", "ProgressCallback"]
