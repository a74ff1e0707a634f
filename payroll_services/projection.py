"""
payroll_services.projection -- Forward projections from one month's result.

Responsibility:
    Scale a single PayrollCalculationResult to an annual (or any N-month)
    figure, and lay out the running totals of a contribution month by
    month.  Used for offer letters and "what will I pay this year" views.

Architecture position:
    Services -- reads engine results; holds no state.

Invariants enforced:
    - A projection assumes every month repeats the given result exactly.
      Each projected amount is the monthly emitted amount times the month
      count, so it is already cent-exact.
    - The month count must be at least 1.

Failure modes:
    - ValueError for a month count below 1.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from payroll_engines.aggregator import PayrollCalculationResult
from payroll_engines.statutory import ContributionResult
from payroll_kernel.logging_config import get_logger

logger = get_logger("services.projection")

MONTHS_PER_YEAR = 12


@dataclass(frozen=True)
class ContributionProjection:
    code: str
    employee_amount: Decimal
    employer_amount: Decimal

    @property
    def total(self) -> Decimal:
        return self.employee_amount + self.employer_amount


@dataclass(frozen=True)
class PayrollProjection:
    """One month's result repeated over ``months`` months."""

    employee_id: str
    months: int
    gross_pay: Decimal
    social_security: ContributionProjection
    health_levy: ContributionProjection
    housing_levy: ContributionProjection
    paye: Decimal
    total_deductions: Decimal
    net_pay: Decimal


@dataclass(frozen=True)
class CumulativeMonth:
    month: int
    employee_amount: Decimal
    employer_amount: Decimal
    cumulative_employee: Decimal
    cumulative_employer: Decimal


def _check_months(months: int) -> None:
    if months < 1:
        raise ValueError(f"months must be at least 1, got {months}")


def _scale(contribution: ContributionResult, months: int) -> ContributionProjection:
    return ContributionProjection(
        code=contribution.code,
        employee_amount=contribution.employee_amount * months,
        employer_amount=contribution.employer_amount * months,
    )


def annualize(result: PayrollCalculationResult, months: int = MONTHS_PER_YEAR) -> PayrollProjection:
    """
    Project a monthly result forward.

    Args:
        result: One employee's result for one month
        months: Number of identical months (12 for an annual figure)

    Raises:
        ValueError: If months is below 1.
    """
    _check_months(months)
    statutory = result.statutory
    projection = PayrollProjection(
        employee_id=result.employee_id,
        months=months,
        gross_pay=result.gross_pay * months,
        social_security=_scale(statutory.social_security, months),
        health_levy=_scale(statutory.health_levy, months),
        housing_levy=_scale(statutory.housing_levy, months),
        paye=result.tax.net_tax * months,
        total_deductions=result.total_deductions * months,
        net_pay=result.net_pay * months,
    )
    logger.debug(
        "payroll_projected",
        extra={
            "employee_id": result.employee_id,
            "months": months,
            "projected_net_pay": str(projection.net_pay),
        },
    )
    return projection


def cumulative_contributions(
    contribution: ContributionResult,
    months: int,
) -> tuple[CumulativeMonth, ...]:
    """Month-by-month running totals of one contribution, months 1..N."""
    _check_months(months)
    return tuple(
        CumulativeMonth(
            month=month,
            employee_amount=contribution.employee_amount,
            employer_amount=contribution.employer_amount,
            cumulative_employee=contribution.employee_amount * month,
            cumulative_employer=contribution.employer_amount * month,
        )
        for month in range(1, months + 1)
    )
