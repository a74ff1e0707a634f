"""
payroll_services.summary -- Period totals and year-to-date folds.

Responsibility:
    Reduce a collection of PayrollCalculationResults to the figures an
    employer reports for a pay period (head-count, totals by deduction,
    employer contributions, averages) and to an employee's year-to-date
    totals.

Architecture position:
    Services -- reads engine results; holds no state.  The engines keep no
    running totals, so YTD figures are always recomputed from the results
    a caller supplies.

Invariants enforced:
    - Every total is the plain sum of the corresponding emitted result
      fields, so the summary reconciles with the individual payslips.
    - Empty input yields zeros, never an error.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from payroll_engines.aggregator import PayrollCalculationResult
from payroll_kernel.logging_config import get_logger
from payroll_kernel.money import ZERO, round_money

logger = get_logger("services.summary")


@dataclass(frozen=True)
class PayrollSummary:
    """Employer-level totals for one pay period."""

    period: str | None
    total_employees: int
    total_basic_salary: Decimal
    total_allowances: Decimal
    total_gross_pay: Decimal
    # Allowable deductions
    total_social_security: Decimal
    total_health_levy: Decimal
    total_housing_levy: Decimal
    total_allowable_deductions: Decimal
    # Tax
    total_taxable_income: Decimal
    total_gross_tax: Decimal
    total_personal_relief: Decimal
    total_insurance_relief: Decimal
    total_paye: Decimal
    # Other
    total_custom_deductions: Decimal
    total_deductions: Decimal
    total_net_pay: Decimal
    # Employer
    total_employer_social_security: Decimal
    total_employer_health_levy: Decimal
    total_employer_housing_levy: Decimal
    total_employer_contributions: Decimal
    average_gross_pay: Decimal
    average_net_pay: Decimal


@dataclass(frozen=True)
class YearToDateTotals:
    employee_id: str | None
    gross_pay: Decimal
    total_deductions: Decimal
    net_pay: Decimal
    paye: Decimal
    social_security: Decimal
    health_levy: Decimal
    housing_levy: Decimal
    months_covered: int


def _total(values: Iterable[Decimal]) -> Decimal:
    return sum(values, round_money(ZERO))


def summarize_payroll(results: Iterable[PayrollCalculationResult]) -> PayrollSummary:
    """
    Summarize results for one pay period.

    ``period`` is the results' common period label, or None when they
    carry none or disagree.
    """
    rows = list(results)
    count = len(rows)
    periods = {r.period for r in rows}
    period = periods.pop() if len(periods) == 1 else None

    gross = _total(r.earnings.gross_pay for r in rows)
    net = _total(r.net_pay for r in rows)

    summary = PayrollSummary(
        period=period,
        total_employees=count,
        total_basic_salary=_total(r.earnings.basic_salary for r in rows),
        total_allowances=_total(r.earnings.allowances for r in rows),
        total_gross_pay=gross,
        total_social_security=_total(r.statutory.social_security.employee_amount for r in rows),
        total_health_levy=_total(r.statutory.health_levy.employee_amount for r in rows),
        total_housing_levy=_total(r.statutory.housing_levy.employee_amount for r in rows),
        total_allowable_deductions=_total(r.statutory.total_allowable_deductions for r in rows),
        total_taxable_income=_total(r.tax.taxable_income for r in rows),
        total_gross_tax=_total(r.tax.gross_tax for r in rows),
        total_personal_relief=_total(r.tax.personal_relief for r in rows),
        total_insurance_relief=_total(r.tax.insurance_relief for r in rows),
        total_paye=_total(r.tax.net_tax for r in rows),
        total_custom_deductions=_total(r.custom_deductions for r in rows),
        total_deductions=_total(r.total_deductions for r in rows),
        total_net_pay=net,
        total_employer_social_security=_total(r.employer_contributions.social_security for r in rows),
        total_employer_health_levy=_total(r.employer_contributions.health_levy for r in rows),
        total_employer_housing_levy=_total(r.employer_contributions.housing_levy for r in rows),
        total_employer_contributions=_total(r.employer_contributions.total for r in rows),
        average_gross_pay=round_money(gross / count) if count else round_money(ZERO),
        average_net_pay=round_money(net / count) if count else round_money(ZERO),
    )

    logger.info(
        "payroll_summarized",
        extra={
            "period": period,
            "total_employees": count,
            "total_gross_pay": str(gross),
            "total_net_pay": str(net),
        },
    )
    return summary


def year_to_date(results: Iterable[PayrollCalculationResult]) -> YearToDateTotals:
    """
    Fold one employee's prior-period results into year-to-date totals.

    Raises:
        ValueError: If the results belong to more than one employee.
    """
    rows = list(results)
    employees = {r.employee_id for r in rows}
    if len(employees) > 1:
        raise ValueError(f"Year-to-date totals need a single employee, got {sorted(employees)}")

    return YearToDateTotals(
        employee_id=employees.pop() if employees else None,
        gross_pay=_total(r.earnings.gross_pay for r in rows),
        total_deductions=_total(r.total_deductions for r in rows),
        net_pay=_total(r.net_pay for r in rows),
        paye=_total(r.tax.net_tax for r in rows),
        social_security=_total(r.statutory.social_security.employee_amount for r in rows),
        health_levy=_total(r.statutory.health_levy.employee_amount for r in rows),
        housing_levy=_total(r.statutory.housing_levy.employee_amount for r in rows),
        months_covered=len(rows),
    )
