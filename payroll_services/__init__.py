"""
payroll_services -- Orchestration above the pure payroll engines.

Batch runs across many employees, period summaries and year-to-date
folds, and forward projections.  Services may import payroll_engines;
engines never import services.
"""

from payroll_services.batch import (
    BatchItemStatus,
    BatchJobStatus,
    PayrollBatchItem,
    PayrollBatchItemResult,
    PayrollBatchResult,
    run_payroll_batch,
)
from payroll_services.projection import (
    ContributionProjection,
    CumulativeMonth,
    PayrollProjection,
    annualize,
    cumulative_contributions,
)
from payroll_services.summary import (
    PayrollSummary,
    YearToDateTotals,
    summarize_payroll,
    year_to_date,
)

__all__ = [
    "BatchItemStatus",
    "BatchJobStatus",
    "ContributionProjection",
    "CumulativeMonth",
    "PayrollBatchItem",
    "PayrollBatchItemResult",
    "PayrollBatchResult",
    "PayrollProjection",
    "PayrollSummary",
    "YearToDateTotals",
    "annualize",
    "cumulative_contributions",
    "run_payroll_batch",
    "summarize_payroll",
    "year_to_date",
]
