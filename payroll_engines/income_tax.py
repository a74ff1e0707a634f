"""
payroll_engines.income_tax -- Progressive PAYE calculation with reliefs.

Responsibility:
    Turn gross pay and allowable deductions into taxable income, apply the
    rate table's progressive bands, then personal relief and insurance
    relief, producing net tax payable with a per-band breakdown.

Architecture position:
    Engines -- pure function, no I/O.  Consumes the output of the statutory
    deduction engine via ``total_allowable_deductions``.

Invariants enforced:
    - Band coverage: the breakdown's taxable amounts sum to taxable income
      and its tax amounts sum to gross tax, both to the cent.
    - Reliefs never drive tax below zero: personal relief is bounded by
      gross tax, insurance relief by what personal relief leaves.
    - Each band's tax is rounded when emitted; gross tax is their sum.

Failure modes:
    - None.  Band contiguity is guaranteed by RateTable construction.

Audit relevance:
    ``bands`` records which slice of income met which rate, so the
    deduction shown on a payslip can be recomputed by hand.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from payroll_config.schema import DisabilityExcessPolicy, RateTable
from payroll_engines.models import InsurancePremiums
from payroll_engines.tracer import traced_engine
from payroll_kernel.logging_config import get_logger
from payroll_kernel.money import HUNDRED, ZERO, percent, round_money

logger = get_logger("engines.income_tax")

DISABILITY_EXEMPTION_LABEL = "Disability Exemption"


@dataclass(frozen=True)
class TaxBandAmount:
    """The slice of taxable income that fell into one band, and its tax."""

    description: str
    lower_bound: Decimal
    upper_bound: Decimal | None
    rate: Decimal
    taxable_amount: Decimal
    tax_amount: Decimal
    is_exemption: bool = False


@dataclass(frozen=True)
class IncomeTaxResult:
    """PAYE for one pay period."""

    taxable_income: Decimal
    gross_tax: Decimal
    personal_relief: Decimal
    insurance_relief: Decimal
    net_tax: Decimal
    effective_rate: Decimal  # net_tax / taxable_income, percent
    bands: tuple[TaxBandAmount, ...]
    disability_exemption_applied: bool = False

    @property
    def total_relief(self) -> Decimal:
        return self.personal_relief + self.insurance_relief


def _band_income(income: Decimal, rate_table: RateTable) -> list[TaxBandAmount]:
    entries: list[TaxBandAmount] = []
    for band in rate_table.tax_bands:
        top = income if band.upper_bound is None else min(income, band.upper_bound)
        in_band = max(ZERO, top - band.lower_bound)
        if in_band == ZERO:
            continue
        entries.append(
            TaxBandAmount(
                description=band.description,
                lower_bound=band.lower_bound,
                upper_bound=band.upper_bound,
                rate=band.rate,
                taxable_amount=in_band,
                tax_amount=round_money(in_band * band.rate),
            )
        )
    return entries


def _exemption_entry(amount: Decimal, rate_table: RateTable) -> TaxBandAmount:
    return TaxBandAmount(
        description=DISABILITY_EXEMPTION_LABEL,
        lower_bound=ZERO,
        upper_bound=rate_table.disability_exemption_threshold,
        rate=ZERO,
        taxable_amount=amount,
        tax_amount=round_money(ZERO),
        is_exemption=True,
    )


def _premium_total(insurance_premiums: InsurancePremiums | Decimal | None) -> Decimal:
    if insurance_premiums is None:
        return ZERO
    if isinstance(insurance_premiums, InsurancePremiums):
        return insurance_premiums.total
    return insurance_premiums


@traced_engine(
    "income_tax",
    "1.0",
    fingerprint_fields=("gross_pay", "total_allowable_deductions", "insurance_premiums", "is_disabled"),
)
def calculate_income_tax(
    gross_pay: Decimal,
    total_allowable_deductions: Decimal,
    insurance_premiums: InsurancePremiums | Decimal | None,
    is_disabled: bool,
    rate_table: RateTable,
) -> IncomeTaxResult:
    """
    Calculate PAYE for one pay period.

    A disabled employee whose taxable income is at or below the exemption
    threshold pays no tax and gets a single exemption entry. Above the
    threshold, ``rate_table.disability_excess_policy`` decides whether the
    whole income is banded from zero or only the excess.

    Args:
        gross_pay: Gross pay from the earnings engine
        total_allowable_deductions: NSSF + SHIF + AHL employee amounts
        insurance_premiums: Qualifying premiums (or their total), if any
        is_disabled: Holds a disability exemption certificate
        rate_table: Statutory rate table snapshot

    Returns:
        IncomeTaxResult with per-band breakdown
    """
    taxable = round_money(max(ZERO, gross_pay - total_allowable_deductions))
    threshold = rate_table.disability_exemption_threshold

    if is_disabled and taxable <= threshold:
        logger.debug(
            "disability_exemption_applied",
            extra={"taxable_income": str(taxable), "threshold": str(threshold)},
        )
        zero = round_money(ZERO)
        return IncomeTaxResult(
            taxable_income=taxable,
            gross_tax=zero,
            personal_relief=zero,
            insurance_relief=zero,
            net_tax=zero,
            effective_rate=percent(ZERO, taxable),
            bands=(_exemption_entry(taxable, rate_table),),
            disability_exemption_applied=True,
        )

    exemption_applied = False
    if is_disabled and rate_table.disability_excess_policy == DisabilityExcessPolicy.EXCESS_ONLY:
        entries = [_exemption_entry(threshold, rate_table)]
        entries.extend(_band_income(taxable - threshold, rate_table))
        exemption_applied = True
    else:
        entries = _band_income(taxable, rate_table)

    gross_tax = sum((e.tax_amount for e in entries), round_money(ZERO))

    personal = min(rate_table.personal_relief, gross_tax)
    premiums = _premium_total(insurance_premiums)
    insurance = max(
        ZERO,
        min(
            round_money(premiums * rate_table.insurance_relief_rate),
            rate_table.insurance_relief_cap,
            gross_tax - personal,
        ),
    )
    net_tax = max(ZERO, gross_tax - personal - insurance)

    return IncomeTaxResult(
        taxable_income=taxable,
        gross_tax=gross_tax,
        personal_relief=round_money(personal),
        insurance_relief=round_money(insurance),
        net_tax=round_money(net_tax),
        effective_rate=percent(net_tax, taxable),
        bands=tuple(entries),
        disability_exemption_applied=exemption_applied,
    )


def marginal_tax_rate(taxable_income: Decimal, rate_table: RateTable) -> Decimal:
    """Rate, in percent, of the band containing taxable_income (the first band for zero)."""
    for band in rate_table.tax_bands:
        if band.contains(taxable_income):
            return band.rate * HUNDRED
    return rate_table.tax_bands[0].rate * HUNDRED
