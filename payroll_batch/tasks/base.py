"""
BatchTask protocol and supporting types.

Contract:
    ``BatchTask`` defines the interface every batch task must implement.
    The executor owns ordering, isolation, progress and cancellation; a
    task only knows how to list its items and process one of them.

Architecture:
    payroll_batch/tasks.  base.py imports only payroll_batch.domain and
    stdlib; concrete tasks import the engines they drive.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol, runtime_checkable

from payroll_batch.domain.types import BatchItemStatus


# =============================================================================
# Supporting DTOs
# =============================================================================


@dataclass(frozen=True)
class BatchItemInput:
    """Input for a single batch item.

    Created by ``BatchTask.prepare_items()``.
    """

    item_index: int
    item_key: str
    payload: Any = None


@dataclass(frozen=True)
class BatchTaskResult:
    """Result returned by ``BatchTask.execute_item()``.

    The executor uses this to build ``BatchItemResult`` DTOs.
    """

    status: BatchItemStatus
    result_data: dict[str, Any] | None = None
    error_code: str | None = None
    error_message: str | None = None


# =============================================================================
# BatchTask Protocol
# =============================================================================


@runtime_checkable
class BatchTask(Protocol):
    """Protocol defining the interface for batch task implementations.

    Contract:
        - ``task_type``: stable string key for logs and run results.
        - ``description``: human-readable label for the audit trail.
        - ``prepare_items()``: returns the immutable tuple of items.
        - ``execute_item()``: processes ONE item; must be safe to call
          concurrently for different items.

    Non-goals:
        - Does NOT catch unexpected exceptions -- the executor records
          them as FAILED items.
        - Does NOT retry.
    """

    @property
    def task_type(self) -> str: ...

    @property
    def description(self) -> str: ...

    def prepare_items(
        self,
        parameters: dict[str, Any],
        as_of: datetime,
    ) -> tuple[BatchItemInput, ...]:
        """List the items for this run.

        Args:
            parameters: Run-level parameters.
            as_of: Clock-injected timestamp for determinism.
        """
        ...

    def execute_item(
        self,
        item: BatchItemInput,
        parameters: dict[str, Any],
        as_of: datetime,
    ) -> BatchTaskResult:
        """Process a single item.

        Args:
            item: The item to process.
            parameters: Run-level parameters.
            as_of: Clock-injected timestamp, identical for every item.
        """
        ...
