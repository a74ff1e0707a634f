"""
payroll_services.batch -- Run the payroll engine across many employees.

Responsibility:
    Fan a list of (employee, adjustments) items out across a thread pool,
    record each item's outcome independently and report an aggregate
    status for the run.

Architecture position:
    Services -- imports payroll_engines; never imported by engines.

Invariants enforced:
    - Item isolation: a validation failure (or any other exception) on
      one item is recorded against that item and never aborts the batch.
    - Input order: ``items`` in the result appear in submission order
      regardless of completion order.
    - One rate table snapshot governs every item in the batch.

Failure modes:
    - None raised for item failures.  Item outcomes carry error codes:
      ``PAYROLL_VALIDATION_FAILED`` or ``UNHANDLED_EXCEPTION``.

Audit relevance:
    Every log record emitted while an item runs carries ``batch_id``,
    ``employee_id`` and ``period`` from LogContext.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from uuid import uuid4

from payroll_config.schema import RateTable
from payroll_engines.aggregator import PayrollAggregator, PayrollCalculationResult
from payroll_engines.models import EmployeeCompensationInput, PeriodAdjustments
from payroll_kernel.exceptions import PayrollValidationError
from payroll_kernel.logging_config import LogContext, get_logger

logger = get_logger("services.batch")

UNHANDLED_EXCEPTION = "UNHANDLED_EXCEPTION"


class BatchJobStatus(str, Enum):
    """Run-level outcome."""

    COMPLETED = "completed"  # Every item succeeded
    PARTIALLY_COMPLETED = "partially_completed"  # Some items failed
    FAILED = "failed"  # No item succeeded


class BatchItemStatus(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class PayrollBatchItem:
    employee: EmployeeCompensationInput
    adjustments: PeriodAdjustments


@dataclass(frozen=True)
class PayrollBatchItemResult:
    """Outcome of one item. ``result`` is set only when the item succeeded."""

    item_index: int
    employee_id: str
    status: BatchItemStatus
    result: PayrollCalculationResult | None = None
    error_code: str | None = None
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def is_validation_failure(self) -> bool:
        return self.error_code == PayrollValidationError.code


@dataclass(frozen=True)
class PayrollBatchResult:
    batch_id: str
    status: BatchJobStatus
    items: tuple[PayrollBatchItemResult, ...]

    @property
    def total_items(self) -> int:
        return len(self.items)

    @property
    def succeeded(self) -> int:
        return sum(1 for i in self.items if i.status == BatchItemStatus.SUCCEEDED)

    @property
    def failed(self) -> int:
        return sum(1 for i in self.items if i.status == BatchItemStatus.FAILED)

    @property
    def results(self) -> tuple[PayrollCalculationResult, ...]:
        """Successful calculation results, in input order."""
        return tuple(i.result for i in self.items if i.result is not None)

    @property
    def failures(self) -> tuple[PayrollBatchItemResult, ...]:
        return tuple(i for i in self.items if i.status == BatchItemStatus.FAILED)

    def summary_line(self) -> str:
        """One-line outcome, e.g. ``"12 succeeded, 3 failed validation"``."""
        invalid = sum(1 for i in self.failures if i.is_validation_failure)
        crashed = self.failed - invalid
        line = f"{self.succeeded} succeeded, {invalid} failed validation"
        if crashed:
            line += f", {crashed} failed with errors"
        return line


def _run_item(
    aggregator: PayrollAggregator,
    batch_id: str,
    index: int,
    item: PayrollBatchItem,
) -> PayrollBatchItemResult:
    employee_id = item.employee.employee_id
    with LogContext.bind(batch_id=batch_id, employee_id=employee_id, period=item.adjustments.period):
        try:
            result = aggregator.calculate(item.employee, item.adjustments)
        except PayrollValidationError as exc:
            logger.info(
                "batch_item_invalid",
                extra={"item_index": index, "error_count": len(exc.errors)},
            )
            return PayrollBatchItemResult(
                item_index=index,
                employee_id=employee_id,
                status=BatchItemStatus.FAILED,
                error_code=exc.code,
                errors=tuple(exc.messages()),
                warnings=tuple(getattr(w, "message", str(w)) for w in exc.warnings),
            )
        except Exception as exc:
            logger.exception("batch_item_failed", extra={"item_index": index})
            return PayrollBatchItemResult(
                item_index=index,
                employee_id=employee_id,
                status=BatchItemStatus.FAILED,
                error_code=UNHANDLED_EXCEPTION,
                errors=(str(exc),),
            )

    return PayrollBatchItemResult(
        item_index=index,
        employee_id=employee_id,
        status=BatchItemStatus.SUCCEEDED,
        result=result,
        warnings=result.warnings,
    )


def run_payroll_batch(
    items: list[PayrollBatchItem],
    rate_table: RateTable,
    max_workers: int | None = None,
    batch_id: str | None = None,
) -> PayrollBatchResult:
    """
    Calculate payroll for every item.

    Args:
        items: Employees and their period adjustments.
        rate_table: Rate table snapshot shared by every item.
        max_workers: Thread pool size (ThreadPoolExecutor default when None).
        batch_id: Identifier carried in logs; generated when omitted.

    Returns:
        PayrollBatchResult with one item result per input, in input order.
    """
    batch_id = batch_id or str(uuid4())
    aggregator = PayrollAggregator(rate_table)

    with LogContext.bind(batch_id=batch_id):
        logger.info(
            "payroll_batch_started",
            extra={"item_count": len(items), "rate_table_version": rate_table.version},
        )

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = [
            pool.submit(_run_item, aggregator, batch_id, index, item)
            for index, item in enumerate(items)
        ]
        item_results = tuple(f.result() for f in futures)

    succeeded = sum(1 for r in item_results if r.status == BatchItemStatus.SUCCEEDED)
    if succeeded == len(item_results):
        status = BatchJobStatus.COMPLETED
    elif succeeded == 0:
        status = BatchJobStatus.FAILED
    else:
        status = BatchJobStatus.PARTIALLY_COMPLETED

    batch = PayrollBatchResult(batch_id=batch_id, status=status, items=item_results)

    with LogContext.bind(batch_id=batch_id):
        logger.info(
            "payroll_batch_completed",
            extra={
                "status": status.value,
                "succeeded": batch.succeeded,
                "failed": batch.failed,
            },
        )
    return batch
