"""
payroll_engines.aggregator -- Full payroll calculation for one employee and period.

Responsibility:
    Orchestrate the pipeline validator -> earnings -> statutory deductions
    -> income tax, then combine the pieces into a PayrollCalculationResult
    with totals, the employer-contribution mirror and calculation metadata.

Architecture position:
    Engines -- top of the pure calculation layer.  Holds no state between
    calls; year-to-date figures are a caller-side fold over results.

Invariants enforced:
    - Validation runs first.  Any hard error raises PayrollValidationError
      carrying every error, and no arithmetic is attempted.
    - total_statutory_deductions = net_tax + total_allowable_deductions.
    - total_deductions = total_statutory_deductions + custom_deductions.
    - net_pay = gross_pay - total_deductions, never clamped at zero.
    - Identical inputs and rate table give identical results.

Failure modes:
    - PayrollValidationError -- hard input errors.

Audit relevance:
    ``to_dict()`` exposes every named field with money as two-decimal
    strings; metadata carries the rate table version that governed the run.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from payroll_config.schema import RateTable
from payroll_engines.earnings import EarningsResult, calculate_earnings
from payroll_engines.income_tax import IncomeTaxResult, calculate_income_tax
from payroll_engines.models import EmployeeCompensationInput, PeriodAdjustments
from payroll_engines.statutory import (
    ContributionResult,
    StatutoryDeductions,
    calculate_statutory_deductions,
)
from payroll_engines.tracer import traced_engine
from payroll_engines.validation import ValidationResult, validate_payroll_input
from payroll_kernel.logging_config import get_logger
from payroll_kernel.money import ZERO, money_str, round_money

logger = get_logger("engines.aggregator")


@dataclass(frozen=True)
class EmployerContributions:
    """Employer-side mirror of the statutory contributions."""

    social_security: Decimal
    health_levy: Decimal
    housing_levy: Decimal
    total: Decimal


@dataclass(frozen=True)
class CalculationMetadata:
    working_days: Decimal
    daily_rate: Decimal
    hourly_rate: Decimal
    unpaid_deduction: Decimal
    rate_table_version: str


@dataclass(frozen=True)
class PayrollCalculationResult:
    """Fully itemized pay result for one employee and one pay period."""

    employee_id: str
    employee_name: str
    period: str | None
    earnings: EarningsResult
    statutory: StatutoryDeductions
    tax: IncomeTaxResult
    custom_deductions: Decimal
    total_statutory_deductions: Decimal
    total_deductions: Decimal
    net_pay: Decimal
    employer_contributions: EmployerContributions
    metadata: CalculationMetadata
    warnings: tuple[str, ...] = ()

    @property
    def gross_pay(self) -> Decimal:
        return self.earnings.gross_pay

    @property
    def total_cost_to_employer(self) -> Decimal:
        return self.gross_pay + self.employer_contributions.total

    def to_dict(self) -> dict[str, Any]:
        """JSON-safe dict form. Money is rendered as two-decimal strings."""
        e = self.earnings
        t = self.tax
        ec = self.employer_contributions
        m = self.metadata
        return {
            "employee_id": self.employee_id,
            "employee_name": self.employee_name,
            "period": self.period,
            "earnings": {
                "basic_salary": money_str(e.basic_salary),
                "adjusted_basic_salary": money_str(e.adjusted_basic_salary),
                "allowances": money_str(e.allowances),
                "overtime_hours": str(e.overtime_hours),
                "overtime_multiplier": str(e.overtime_multiplier),
                "overtime_amount": money_str(e.overtime_amount),
                "bonuses": money_str(e.bonuses),
                "unpaid_days": str(e.unpaid_days),
                "unpaid_deduction": money_str(e.unpaid_deduction),
                "gross_pay": money_str(e.gross_pay),
            },
            "statutory": {
                "social_security": _contribution_dict(self.statutory.social_security),
                "health_levy": _contribution_dict(self.statutory.health_levy),
                "housing_levy": _contribution_dict(self.statutory.housing_levy),
                "total_allowable_deductions": money_str(self.statutory.total_allowable_deductions),
            },
            "tax": {
                "taxable_income": money_str(t.taxable_income),
                "gross_tax": money_str(t.gross_tax),
                "personal_relief": money_str(t.personal_relief),
                "insurance_relief": money_str(t.insurance_relief),
                "net_tax": money_str(t.net_tax),
                "effective_rate": money_str(t.effective_rate),
                "disability_exemption_applied": t.disability_exemption_applied,
                "bands": [
                    {
                        "description": b.description,
                        "lower_bound": money_str(b.lower_bound),
                        "upper_bound": _optional_money(b.upper_bound),
                        "rate": str(b.rate),
                        "taxable_amount": money_str(b.taxable_amount),
                        "tax_amount": money_str(b.tax_amount),
                        "is_exemption": b.is_exemption,
                    }
                    for b in t.bands
                ],
            },
            "custom_deductions": money_str(self.custom_deductions),
            "total_statutory_deductions": money_str(self.total_statutory_deductions),
            "total_deductions": money_str(self.total_deductions),
            "net_pay": money_str(self.net_pay),
            "employer_contributions": {
                "social_security": money_str(ec.social_security),
                "health_levy": money_str(ec.health_levy),
                "housing_levy": money_str(ec.housing_levy),
                "total": money_str(ec.total),
            },
            "metadata": {
                "working_days": str(m.working_days),
                "daily_rate": money_str(m.daily_rate),
                "hourly_rate": money_str(m.hourly_rate),
                "unpaid_deduction": money_str(m.unpaid_deduction),
                "rate_table_version": m.rate_table_version,
            },
            "warnings": list(self.warnings),
        }


def _optional_money(amount: Decimal | None) -> str | None:
    return None if amount is None else money_str(amount)


def _contribution_dict(c: ContributionResult) -> dict[str, Any]:
    return {
        "code": c.code,
        "name": c.name,
        "base_amount": money_str(c.base_amount),
        "employee_amount": money_str(c.employee_amount),
        "employer_amount": money_str(c.employer_amount),
        "effective_rate": money_str(c.effective_rate),
        "capped_at_max": c.capped_at_max,
        "floor_applied": c.floor_applied,
        "is_applicable": c.is_applicable,
        "tiers": [
            {
                "tier": tier.tier,
                "name": tier.name,
                "lower_bound": money_str(tier.lower_bound),
                "upper_bound": money_str(tier.upper_bound),
                "pensionable_amount": money_str(tier.pensionable_amount),
                "employee_amount": money_str(tier.employee_amount),
                "employer_amount": money_str(tier.employer_amount),
            }
            for tier in c.tiers
        ],
    }


class PayrollAggregator:
    """
    Runs the full payroll pipeline against one rate table.

    Stateless apart from the rate table, so one instance may be shared
    across threads.
    """

    def __init__(self, rate_table: RateTable):
        self._rate_table = rate_table

    @property
    def rate_table(self) -> RateTable:
        return self._rate_table

    def validate(
        self,
        employee: EmployeeCompensationInput,
        adjustments: PeriodAdjustments,
    ) -> ValidationResult:
        return validate_payroll_input(employee, adjustments, self._rate_table)

    @traced_engine("payroll", "1.0", fingerprint_fields=("employee", "adjustments"))
    def calculate(
        self,
        employee: EmployeeCompensationInput,
        adjustments: PeriodAdjustments,
    ) -> PayrollCalculationResult:
        """
        Calculate one employee's pay for one period.

        Raises:
            PayrollValidationError: If any hard validation error is found.
        """
        rate_table = self._rate_table
        validation = self.validate(employee, adjustments)
        validation.raise_for_errors(employee.employee_id)

        earnings = calculate_earnings(
            basic_salary=employee.basic_salary,
            allowances=employee.allowances,
            overtime_hours=adjustments.overtime_hours,
            overtime_type=adjustments.overtime_type,
            unpaid_days=adjustments.unpaid_days,
            bonuses=adjustments.bonuses,
            rate_table=rate_table,
        )
        statutory = calculate_statutory_deductions(earnings.gross_pay, rate_table)
        tax = calculate_income_tax(
            gross_pay=earnings.gross_pay,
            total_allowable_deductions=statutory.total_allowable_deductions,
            insurance_premiums=employee.insurance_premiums,
            is_disabled=employee.is_disabled,
            rate_table=rate_table,
        )

        custom = round_money(adjustments.custom_deductions)
        total_statutory = tax.net_tax + statutory.total_allowable_deductions
        total_deductions = total_statutory + custom
        net_pay = earnings.gross_pay - total_deductions

        warnings = list(validation.warning_messages())
        if net_pay <= ZERO:
            warnings.append(f"Net pay is {money_str(net_pay)}; deductions meet or exceed gross pay")
            logger.warning(
                "net_pay_not_positive",
                extra={"employee_id": employee.employee_id, "net_pay": money_str(net_pay)},
            )

        employer = EmployerContributions(
            social_security=statutory.social_security.employer_amount,
            health_levy=statutory.health_levy.employer_amount,
            housing_levy=statutory.housing_levy.employer_amount,
            total=statutory.total_employer_contributions,
        )

        result = PayrollCalculationResult(
            employee_id=employee.employee_id,
            employee_name=employee.name,
            period=adjustments.period,
            earnings=earnings,
            statutory=statutory,
            tax=tax,
            custom_deductions=custom,
            total_statutory_deductions=total_statutory,
            total_deductions=total_deductions,
            net_pay=net_pay,
            employer_contributions=employer,
            metadata=CalculationMetadata(
                working_days=earnings.working_days,
                daily_rate=earnings.daily_rate,
                hourly_rate=earnings.hourly_rate,
                unpaid_deduction=earnings.unpaid_deduction,
                rate_table_version=rate_table.version,
            ),
            warnings=tuple(warnings),
        )

        logger.info(
            "payroll_calculated",
            extra={
                "employee_id": employee.employee_id,
                "gross_pay": money_str(earnings.gross_pay),
                "net_tax": money_str(tax.net_tax),
                "net_pay": money_str(net_pay),
                "warning_count": len(warnings),
            },
        )
        return result


def calculate_payroll(
    employee: EmployeeCompensationInput,
    adjustments: PeriodAdjustments,
    rate_table: RateTable,
) -> PayrollCalculationResult:
    """
    Calculate one employee's pay for one period.

    Convenience form of ``PayrollAggregator(rate_table).calculate(...)``.

    Raises:
        PayrollValidationError: If any hard validation error is found.
    """
    return PayrollAggregator(rate_table).calculate(employee, adjustments)
