"""
payroll_batch.domain.types -- Pure frozen dataclasses for the batch driver.

ZERO I/O.  Frozen dataclasses with enum status fields and tuples for
immutable collections.

Invariants enforced:
    - All DTOs are frozen (a run result is never patched after the fact).
    - ``BatchProgress.completed == succeeded + failed + skipped``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID


# =============================================================================
# Status enums
# =============================================================================


class BatchJobStatus(str, Enum):
    """Run-level status."""

    RUNNING = "running"
    COMPLETED = "completed"  # No item failed
    FAILED = "failed"  # No item succeeded
    CANCELLED = "cancelled"  # Cancel event fired; remaining items skipped
    PARTIALLY_COMPLETED = "partially_completed"  # Some items failed


class BatchItemStatus(str, Enum):
    """Per-item status within a run."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"  # Not attempted (run cancelled)


# =============================================================================
# Result DTOs
# =============================================================================


@dataclass(frozen=True)
class BatchItemResult:
    """Immutable result of processing a single batch item.

    One item failing never aborts the run; its error lands here.
    """

    item_index: int  # 0-indexed position in the batch
    item_key: str  # Business identifier (employee_id)
    status: BatchItemStatus
    error_code: str | None = None
    error_message: str | None = None
    result_data: dict[str, Any] | None = None
    duration_ms: int = 0
    started_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == BatchItemStatus.SUCCEEDED


@dataclass(frozen=True)
class BatchProgress:
    """Running counts reported after each item."""

    total: int
    completed: int = 0
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0

    def __post_init__(self) -> None:
        if self.completed != self.succeeded + self.failed + self.skipped:
            raise ValueError("completed must equal succeeded + failed + skipped")
        if self.completed > self.total:
            raise ValueError("completed cannot exceed total")

    @property
    def remaining(self) -> int:
        return self.total - self.completed


@dataclass(frozen=True)
class BatchRunResult:
    """Immutable result of one batch run.

    Returned by ``PayrollBatchExecutor.execute()``.
    """

    run_id: UUID
    task_type: str
    status: BatchJobStatus
    total_items: int
    succeeded: int
    failed: int
    skipped: int
    item_results: tuple[BatchItemResult, ...] = ()
    started_at: datetime | None = None
    completed_at: datetime | None = None
    duration_ms: int = 0
    correlation_id: str | None = None
    error_summary: str | None = None

    def item(self, item_key: str) -> BatchItemResult:
        """Look up an item result by its key.

        Raises:
            KeyError: If no item has that key.
        """
        for result in self.item_results:
            if result.item_key == item_key:
                return result
        raise KeyError(item_key)

    @property
    def failures(self) -> tuple[BatchItemResult, ...]:
        return tuple(r for r in self.item_results if r.status == BatchItemStatus.FAILED)
