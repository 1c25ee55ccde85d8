"""
PayrollBatchExecutor -- per-item isolated batch execution.

Contract:
    Runs every item of a ``BatchTask`` and collects per-item results.
    One item failing (or raising) never aborts the others.

Architecture: payroll_batch/services.  Imports from payroll_batch.domain,
    payroll_batch.tasks and the kernel (clock, logging, exceptions).

Invariants enforced:
    - Item isolation: an exception from ``execute_item`` becomes a FAILED
      item with error_code ``UNHANDLED_EXCEPTION``.
    - Unique item keys: duplicates raise ``DuplicateBatchItemError`` before
      any item runs.
    - Clock injection: ``as_of`` is read once per run and shared by every
      item; item timestamps come from the same clock.
    - Cancellation only stops submission: items already running finish,
      items never submitted are SKIPPED and the run is CANCELLED.
    - Progress counts are updated under a lock and reported in order.
    - A progress callback that raises is logged; the run carries on.
    - ``item_results`` is ordered by ``item_index`` whatever the
      completion order.
"""

from __future__ import annotations

import contextvars
import threading
import time
from collections.abc import Callable
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from datetime import datetime
from typing import Any
from uuid import uuid4

from payroll_kernel.domain.clock import Clock, SystemClock
from payroll_kernel.exceptions import DuplicateBatchItemError
from payroll_kernel.logging_config import LogContext, get_logger

from payroll_batch.domain.types import (
    BatchItemResult,
    BatchItemStatus,
    BatchJobStatus,
    BatchProgress,
    BatchRunResult,
)
from payroll_batch.tasks.base import BatchItemInput, BatchTask

logger = get_logger("batch.executor")

ProgressCallback = Callable[[BatchProgress], None]


class _ProgressTracker:
    """Thread-safe running counts.

    Counts change under ``_lock``.  The callback runs outside it, one call
    at a time under ``_report_lock``, so reports stay in completion order
    and a callback reading ``progress`` cannot deadlock.  A callback that
    raises is logged and otherwise ignored.
    """

    def __init__(self, total: int, callback: ProgressCallback | None):
        self._lock = threading.Lock()
        self._report_lock = threading.Lock()
        self._callback = callback
        self._progress = BatchProgress(total=total)

    @property
    def progress(self) -> BatchProgress:
        with self._lock:
            return self._progress

    def record(self, status: BatchItemStatus) -> None:
        with self._report_lock:
            with self._lock:
                p = self._progress
                snapshot = BatchProgress(
                    total=p.total,
                    completed=p.completed + 1,
                    succeeded=p.succeeded + (status == BatchItemStatus.SUCCEEDED),
                    failed=p.failed + (status == BatchItemStatus.FAILED),
                    skipped=p.skipped + (status == BatchItemStatus.SKIPPED),
                )
                self._progress = snapshot
            if self._callback is None:
                return
            try:
                self._callback(snapshot)
            except Exception:
                logger.exception("batch_progress_callback_failed", extra={
                    "completed": snapshot.completed,
                    "total": snapshot.total,
                })


class PayrollBatchExecutor:
    """Batch execution engine with per-item isolation.

    Contract:
        - ``execute()`` runs a task's items sequentially (``max_workers=1``)
          or on a thread pool, and returns a frozen ``BatchRunResult``.

    Non-goals:
        - Does NOT persist results -- the caller stores what it needs.
        - Does NOT retry failed items.
    """

    def __init__(self, clock: Clock | None = None, max_workers: int = 1):
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self._clock = clock or SystemClock()
        self._max_workers = max_workers

    @property
    def max_workers(self) -> int:
        return self._max_workers

    # -------------------------------------------------------------------------
    # Execute
    # -------------------------------------------------------------------------

    def execute(
        self,
        task: BatchTask,
        parameters: dict[str, Any] | None = None,
        *,
        cancel_event: threading.Event | None = None,
        progress_callback: ProgressCallback | None = None,
        correlation_id: str | None = None,
    ) -> BatchRunResult:
        """Run every item of ``task``.

        Args:
            task: The task supplying and processing items.
            parameters: Run-level parameters passed to the task.
            cancel_event: When set, no further items are started.
            progress_callback: Called with a ``BatchProgress`` after each item.
            correlation_id: Propagated into every log record of the run.

        Raises:
            DuplicateBatchItemError: If two items share an item_key.
        """
        parameters = parameters or {}
        run_id = uuid4()
        start_time = time.monotonic()
        started_at = self._clock.now()

        with LogContext.bind(batch_id=str(run_id), correlation_id=correlation_id):
            items = task.prepare_items(parameters=parameters, as_of=started_at)
            self._check_unique_keys(items)

            logger.info("batch_run_started", extra={
                "task_type": task.task_type,
                "total_items": len(items),
                "max_workers": self._max_workers,
            })

            tracker = _ProgressTracker(len(items), progress_callback)
            if self._max_workers == 1:
                results = self._run_sequential(
                    task, items, parameters, started_at, tracker, cancel_event,
                )
            else:
                results = self._run_concurrent(
                    task, items, parameters, started_at, tracker, cancel_event,
                )

            ordered = tuple(sorted(results, key=lambda r: r.item_index))
            succeeded = sum(1 for r in ordered if r.status == BatchItemStatus.SUCCEEDED)
            failed = sum(1 for r in ordered if r.status == BatchItemStatus.FAILED)
            skipped = sum(1 for r in ordered if r.status == BatchItemStatus.SKIPPED)

            cancelled = cancel_event is not None and cancel_event.is_set() and skipped > 0
            if cancelled:
                status = BatchJobStatus.CANCELLED
            elif failed == 0:
                status = BatchJobStatus.COMPLETED
            elif succeeded == 0:
                status = BatchJobStatus.FAILED
            else:
                status = BatchJobStatus.PARTIALLY_COMPLETED

            error_summary = None
            if failed:
                error_summary = f"{failed} item(s) failed"
            if cancelled:
                error_summary = f"Cancelled: {skipped} item(s) not started"

            completed_at = self._clock.now()
            total_duration = int((time.monotonic() - start_time) * 1000)

            log_extra = {
                "task_type": task.task_type,
                "status": status.value,
                "succeeded": succeeded,
                "failed": failed,
                "skipped": skipped,
                "duration_ms": total_duration,
            }
            if status == BatchJobStatus.COMPLETED:
                logger.info("batch_run_completed", extra=log_extra)
            else:
                logger.warning("batch_run_completed_with_issues", extra=log_extra)

        return BatchRunResult(
            run_id=run_id,
            task_type=task.task_type,
            status=status,
            total_items=len(items),
            succeeded=succeeded,
            failed=failed,
            skipped=skipped,
            item_results=ordered,
            started_at=started_at,
            completed_at=completed_at,
            duration_ms=total_duration,
            correlation_id=correlation_id,
            error_summary=error_summary,
        )

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _check_unique_keys(items: tuple[BatchItemInput, ...]) -> None:
        seen: set[str] = set()
        for item in items:
            if item.item_key in seen:
                raise DuplicateBatchItemError(item.item_key)
            seen.add(item.item_key)

    def _run_sequential(
        self,
        task: BatchTask,
        items: tuple[BatchItemInput, ...],
        parameters: dict[str, Any],
        as_of: datetime,
        tracker: _ProgressTracker,
        cancel_event: threading.Event | None,
    ) -> list[BatchItemResult]:
        results: list[BatchItemResult] = []
        for item in items:
            if cancel_event is not None and cancel_event.is_set():
                result = self._skipped(item)
            else:
                result = self._run_item(task, item, parameters, as_of)
            tracker.record(result.status)
            results.append(result)
        return results

    def _run_concurrent(
        self,
        task: BatchTask,
        items: tuple[BatchItemInput, ...],
        parameters: dict[str, Any],
        as_of: datetime,
        tracker: _ProgressTracker,
        cancel_event: threading.Event | None,
    ) -> list[BatchItemResult]:
        results: list[BatchItemResult] = []
        in_flight: set[Future[BatchItemResult]] = set()

        def collect(done: set[Future[BatchItemResult]]) -> None:
            for future in done:
                result = future.result()
                tracker.record(result.status)
                results.append(result)

        with ThreadPoolExecutor(
            max_workers=self._max_workers,
            thread_name_prefix="payroll-batch",
        ) as pool:
            for item in items:
                # Bounded submission so a cancel takes effect promptly
                while len(in_flight) >= self._max_workers:
                    done, in_flight = wait(in_flight, return_when=FIRST_COMPLETED)
                    collect(done)

                if cancel_event is not None and cancel_event.is_set():
                    result = self._skipped(item)
                    tracker.record(result.status)
                    results.append(result)
                    continue

                # Each worker runs in a copy of the caller's log context
                ctx = contextvars.copy_context()
                in_flight.add(
                    pool.submit(ctx.run, self._run_item, task, item, parameters, as_of)
                )

            done, _ = wait(in_flight)
            collect(done)

        return results

    def _run_item(
        self,
        task: BatchTask,
        item: BatchItemInput,
        parameters: dict[str, Any],
        as_of: datetime,
    ) -> BatchItemResult:
        item_start = time.monotonic()
        item_started_at = self._clock.now()
        try:
            outcome = task.execute_item(item=item, parameters=parameters, as_of=as_of)
        except Exception as exc:
            logger.exception("batch_item_unhandled_exception", extra={
                "item_key": item.item_key,
                "item_index": item.item_index,
            })
            return BatchItemResult(
                item_index=item.item_index,
                item_key=item.item_key,
                status=BatchItemStatus.FAILED,
                error_code="UNHANDLED_EXCEPTION",
                error_message=str(exc),
                duration_ms=int((time.monotonic() - item_start) * 1000),
                started_at=item_started_at,
                completed_at=self._clock.now(),
            )

        if outcome.status == BatchItemStatus.FAILED:
            logger.warning("batch_item_failed", extra={
                "item_key": item.item_key,
                "error_code": outcome.error_code,
                "error_message": outcome.error_message,
            })

        return BatchItemResult(
            item_index=item.item_index,
            item_key=item.item_key,
            status=outcome.status,
            error_code=outcome.error_code,
            error_message=outcome.error_message,
            result_data=outcome.result_data,
            duration_ms=int((time.monotonic() - item_start) * 1000),
            started_at=item_started_at,
            completed_at=self._clock.now(),
        )

    @staticmethod
    def _skipped(item: BatchItemInput) -> BatchItemResult:
        return BatchItemResult(
            item_index=item.item_index,
            item_key=item.item_key,
            status=BatchItemStatus.SKIPPED,
            error_code="CANCELLED",
        )
