"""
Statutory Deduction Engine - Allowable contributions computed from gross pay.

Three independent sub-calculations share one result shape:
  - Social security (NSSF): rate x pensionable pay, capped at the upper
    earnings limit, decomposed into display tiers.
  - Health levy (SHIF): rate x gross pay, never capped, floored at the
    minimum contribution when there is any pay at all.
  - Housing levy (AHL): flat rate x gross pay.

Each employee amount is rounded to cents when emitted and the total is
the sum of the emitted amounts. The employer side mirrors the employee side
using the employer rate.

Usage:
    from payroll_engines.statutory import calculate_statutory_deductions

    deductions = calculate_statutory_deductions(Decimal("74261.36"), rate_table)
    print(deductions.social_security.employee_amount)  # 4320.00
    print(deductions.total_allowable_deductions)  # 7476.11
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from payroll_config.schema import RateTable
from payroll_engines.tracer import traced_engine
from payroll_kernel.logging_config import get_logger
from payroll_kernel.money import ZERO, percent, round_money

logger = get_logger("engines.statutory")

SOCIAL_SECURITY = "NSSF"
HEALTH_LEVY = "SHIF"
HOUSING_LEVY = "AHL"


@dataclass(frozen=True)
class TierContribution:
    """Share of a tiered contribution attributable to one earnings tier."""

    tier: int
    name: str
    lower_bound: Decimal
    upper_bound: Decimal
    pensionable_amount: Decimal
    employee_amount: Decimal
    employer_amount: Decimal


@dataclass(frozen=True)
class ContributionResult:
    """
    One statutory contribution for one pay period.

    effective_rate is the employee amount as a percentage of gross pay.
    """

    code: str
    name: str
    base_amount: Decimal  # Pay the rate was applied to, after any cap
    employee_amount: Decimal
    employer_amount: Decimal
    effective_rate: Decimal
    capped_at_max: bool = False
    floor_applied: bool = False
    is_applicable: bool = True
    tiers: tuple[TierContribution, ...] = ()

    @property
    def total(self) -> Decimal:
        return self.employee_amount + self.employer_amount


@dataclass(frozen=True)
class StatutoryDeductions:
    """The three allowable deductions and their totals."""

    social_security: ContributionResult
    health_levy: ContributionResult
    housing_levy: ContributionResult
    total_allowable_deductions: Decimal
    total_employer_contributions: Decimal

    @property
    def contributions(self) -> tuple[ContributionResult, ...]:
        return (self.social_security, self.health_levy, self.housing_levy)


def _split_tiers(
    pensionable: Decimal,
    employee_total: Decimal,
    employer_total: Decimal,
    rate_table: RateTable,
) -> tuple[TierContribution, ...]:
    """Decompose a contribution into tiers. The last tier takes any cent residue."""
    ss = rate_table.social_security
    tiers: list[TierContribution] = []
    employee_so_far = ZERO
    employer_so_far = ZERO
    last = len(ss.tiers) - 1

    for index, tier in enumerate(ss.tiers):
        in_tier = max(ZERO, min(pensionable, tier.upper_bound) - tier.lower_bound)
        if index == last:
            employee_amount = employee_total - employee_so_far
            employer_amount = employer_total - employer_so_far
        else:
            employee_amount = round_money(in_tier * ss.rate)
            employer_amount = round_money(in_tier * ss.employer_rate)
        employee_so_far += employee_amount
        employer_so_far += employer_amount
        tiers.append(
            TierContribution(
                tier=tier.tier,
                name=tier.name,
                lower_bound=tier.lower_bound,
                upper_bound=tier.upper_bound,
                pensionable_amount=round_money(in_tier),
                employee_amount=employee_amount,
                employer_amount=employer_amount,
            )
        )
    return tuple(tiers)


@traced_engine("social_security", "1.0", fingerprint_fields=("gross_pay",))
def calculate_social_security(gross_pay: Decimal, rate_table: RateTable) -> ContributionResult:
    """
    NSSF contribution on pensionable pay.

    pensionable = min(gross, UEL); employee = pensionable x rate, employer
    mirrors at the employer rate. capped_at_max is set only when gross pay
    is strictly above the upper earnings limit.
    """
    ss = rate_table.social_security
    pensionable = min(max(gross_pay, ZERO), ss.upper_earnings_limit)
    capped = gross_pay > ss.upper_earnings_limit

    employee_amount = round_money(pensionable * ss.rate)
    employer_amount = round_money(pensionable * ss.employer_rate)

    if capped:
        logger.debug(
            "nssf_capped_at_uel",
            extra={
                "gross_pay": str(gross_pay),
                "upper_earnings_limit": str(ss.upper_earnings_limit),
                "employee_amount": str(employee_amount),
            },
        )

    return ContributionResult(
        code=SOCIAL_SECURITY,
        name="National Social Security Fund",
        base_amount=round_money(pensionable),
        employee_amount=employee_amount,
        employer_amount=employer_amount,
        effective_rate=percent(employee_amount, gross_pay),
        capped_at_max=capped,
        is_applicable=gross_pay > ZERO,
        tiers=_split_tiers(pensionable, employee_amount, employer_amount, rate_table),
    )


@traced_engine("health_levy", "1.0", fingerprint_fields=("gross_pay",))
def calculate_health_levy(gross_pay: Decimal, rate_table: RateTable) -> ContributionResult:
    """SHIF levy on gross pay, floored at the minimum contribution when gross > 0."""
    levy = rate_table.health_levy
    applicable = gross_pay > ZERO
    base = max(gross_pay, ZERO)

    employee_amount = round_money(base * levy.rate)
    employer_amount = round_money(base * levy.employer_rate)

    floor_applied = False
    if applicable and employee_amount < levy.minimum_contribution:
        employee_amount = round_money(levy.minimum_contribution)
        floor_applied = True
    if applicable and levy.employer_rate > ZERO and employer_amount < levy.minimum_contribution:
        employer_amount = round_money(levy.minimum_contribution)

    if floor_applied:
        logger.debug(
            "shif_minimum_applied",
            extra={"gross_pay": str(gross_pay), "minimum": str(levy.minimum_contribution)},
        )

    return ContributionResult(
        code=HEALTH_LEVY,
        name="Social Health Insurance Fund",
        base_amount=round_money(base),
        employee_amount=employee_amount,
        employer_amount=employer_amount,
        effective_rate=percent(employee_amount, gross_pay),
        floor_applied=floor_applied,
        is_applicable=applicable,
    )


@traced_engine("housing_levy", "1.0", fingerprint_fields=("gross_pay",))
def calculate_housing_levy(gross_pay: Decimal, rate_table: RateTable) -> ContributionResult:
    """AHL levy: flat rate on gross pay. Zero gross is not applicable, not an error."""
    levy = rate_table.housing_levy
    base = max(gross_pay, ZERO)
    employee_amount = round_money(base * levy.rate)

    return ContributionResult(
        code=HOUSING_LEVY,
        name="Affordable Housing Levy",
        base_amount=round_money(base),
        employee_amount=employee_amount,
        employer_amount=round_money(base * levy.employer_rate),
        effective_rate=percent(employee_amount, gross_pay),
        is_applicable=gross_pay > ZERO,
    )


def calculate_statutory_deductions(gross_pay: Decimal, rate_table: RateTable) -> StatutoryDeductions:
    """
    Compute all three allowable deductions from gross pay.

    The sub-calculations are independent; none reads another's output.
    """
    social_security = calculate_social_security(gross_pay, rate_table)
    health_levy = calculate_health_levy(gross_pay, rate_table)
    housing_levy = calculate_housing_levy(gross_pay, rate_table)
    parts = (social_security, health_levy, housing_levy)

    return StatutoryDeductions(
        social_security=social_security,
        health_levy=health_levy,
        housing_levy=housing_levy,
        total_allowable_deductions=sum((p.employee_amount for p in parts), ZERO),
        total_employer_contributions=sum((p.employer_amount for p in parts), ZERO),
    )
