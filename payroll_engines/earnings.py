"""
Earnings Engine - Derive gross pay from raw compensation inputs.

Pure functions with no I/O. Working-time constants and overtime
multipliers come from the RateTable passed in.

Usage:
    from payroll_config import get_rate_table
    from payroll_engines.earnings import calculate_earnings

    result = calculate_earnings(
        basic_salary=Decimal("50000"),
        allowances=Decimal("15000"),
        overtime_hours=Decimal("10"),
        overtime_type="weekday",
        unpaid_days=Decimal("0"),
        bonuses=Decimal("5000"),
        rate_table=get_rate_table(),
    )
    print(result.gross_pay)  # 74261.36
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from payroll_config.schema import RateTable
from payroll_engines.models import OvertimeType
from payroll_engines.tracer import traced_engine
from payroll_kernel.logging_config import get_logger
from payroll_kernel.money import ZERO, round_money

logger = get_logger("engines.earnings")


@dataclass(frozen=True)
class EarningsResult:
    """
    Earnings for one pay period.

    Every amount is rounded to cents. gross_pay is the exact sum of the
    four emitted components.
    """

    basic_salary: Decimal  # Contractual basic, before unpaid-day reduction
    daily_rate: Decimal
    hourly_rate: Decimal
    overtime_hours: Decimal
    overtime_multiplier: Decimal
    overtime_amount: Decimal
    unpaid_days: Decimal
    unpaid_deduction: Decimal
    adjusted_basic_salary: Decimal
    allowances: Decimal
    bonuses: Decimal
    gross_pay: Decimal
    working_days: Decimal


@traced_engine(
    "earnings",
    "1.0",
    fingerprint_fields=("basic_salary", "allowances", "overtime_hours", "overtime_type", "unpaid_days", "bonuses"),
)
def calculate_earnings(
    basic_salary: Decimal,
    allowances: Decimal,
    overtime_hours: Decimal,
    overtime_type: OvertimeType | str,
    unpaid_days: Decimal,
    bonuses: Decimal,
    rate_table: RateTable,
) -> EarningsResult:
    """
    Calculate adjusted basic salary, overtime and gross pay.

    Daily and hourly rates derive from the full contractual basic salary.
    They are carried at full precision into the overtime and unpaid-day
    products and only rounded when emitted.

    Args:
        basic_salary: Monthly basic salary (>= 0)
        allowances: Monthly allowances (>= 0)
        overtime_hours: Overtime hours worked in the period (>= 0)
        overtime_type: "weekday" (1.5x) or "holiday" (2.0x)
        unpaid_days: Unpaid days in the period (0-31)
        bonuses: Taxable bonuses for the period (>= 0)
        rate_table: Statutory rate table snapshot

    Returns:
        EarningsResult with all amounts rounded to cents
    """
    wt = rate_table.working_time
    multiplier = rate_table.overtime_multiplier(OvertimeType(overtime_type).value)

    daily_rate = basic_salary / wt.standard_days_per_month
    hourly_rate = basic_salary / wt.standard_hours_per_month

    overtime_amount = round_money(overtime_hours * hourly_rate * multiplier)
    unpaid_deduction = round_money(unpaid_days * daily_rate)
    adjusted_basic = max(ZERO, round_money(basic_salary) - unpaid_deduction)

    allowances = round_money(allowances)
    bonuses = round_money(bonuses)
    gross_pay = adjusted_basic + allowances + overtime_amount + bonuses

    if unpaid_deduction > basic_salary:
        logger.debug(
            "unpaid_deduction_exceeds_basic",
            extra={
                "unpaid_days": str(unpaid_days),
                "unpaid_deduction": str(unpaid_deduction),
                "basic_salary": str(basic_salary),
            },
        )

    return EarningsResult(
        basic_salary=round_money(basic_salary),
        daily_rate=round_money(daily_rate),
        hourly_rate=round_money(hourly_rate),
        overtime_hours=overtime_hours,
        overtime_multiplier=multiplier,
        overtime_amount=overtime_amount,
        unpaid_days=unpaid_days,
        unpaid_deduction=unpaid_deduction,
        adjusted_basic_salary=adjusted_basic,
        allowances=allowances,
        bonuses=bonuses,
        gross_pay=gross_pay,
        working_days=wt.standard_days_per_month,
    )
