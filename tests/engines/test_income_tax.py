"""
Tests for the Income Tax Engine.

Covers:
- Progressive banding and the per-band breakdown
- Personal relief bounded by gross tax
- Insurance relief: rate, cap, and bound by remaining tax
- Disability exemption at and above the threshold, under both policies
- Marginal rate lookup
"""

from dataclasses import replace
from decimal import Decimal

import pytest

from payroll_config import DisabilityExcessPolicy, get_rate_table
from payroll_engines.income_tax import (
    DISABILITY_EXEMPTION_LABEL,
    calculate_income_tax,
    marginal_tax_rate,
)
from payroll_engines.models import InsurancePremiums


def _tax(rate_table, gross, allowable="0", premiums=None, disabled=False):
    return calculate_income_tax(
        gross_pay=Decimal(gross),
        total_allowable_deductions=Decimal(allowable),
        insurance_premiums=premiums,
        is_disabled=disabled,
        rate_table=rate_table,
    )


class TestProgressiveBanding:
    """KRA PAYE bands: 10% / 25% / 30% / 32.5% / 35%."""

    def setup_method(self):
        self.rate_table = get_rate_table()

    def test_standard_employee(self):
        result = _tax(self.rate_table, "74261.36", "7476.11")

        assert result.taxable_income == Decimal("66785.25")
        assert [(b.taxable_amount, b.tax_amount) for b in result.bands] == [
            (Decimal("24000"), Decimal("2400.00")),
            (Decimal("8333"), Decimal("2083.25")),
            (Decimal("34452.25"), Decimal("10335.68")),
        ]
        assert result.gross_tax == Decimal("14818.93")
        assert result.personal_relief == Decimal("2400.00")
        assert result.insurance_relief == Decimal("0.00")
        assert result.net_tax == Decimal("12418.93")
        assert result.effective_rate == Decimal("18.60")

    def test_only_non_zero_bands_recorded(self):
        result = _tax(self.rate_table, "20000")

        assert len(result.bands) == 1
        assert result.bands[0].rate == Decimal("0.10")

    def test_top_band(self):
        result = _tax(self.rate_table, "1000000")

        assert len(result.bands) == 5
        assert result.bands[-1].upper_bound is None
        assert result.bands[-1].taxable_amount == Decimal("200000.00")
        assert result.bands[-1].tax_amount == Decimal("70000.00")

    def test_breakdown_reconciles(self):
        result = _tax(self.rate_table, "543210.99", "4321.09")

        assert sum(b.taxable_amount for b in result.bands) == result.taxable_income
        assert sum(b.tax_amount for b in result.bands) == result.gross_tax

    def test_deductions_exceeding_gross(self):
        result = _tax(self.rate_table, "1000", "2000")

        assert result.taxable_income == Decimal("0.00")
        assert result.bands == ()
        assert result.net_tax == Decimal("0.00")
        assert result.effective_rate == Decimal("0.00")


class TestReliefs:
    """Personal and insurance relief never push tax below zero."""

    def setup_method(self):
        self.rate_table = get_rate_table()

    def test_personal_relief_bounded_by_gross_tax(self):
        result = _tax(self.rate_table, "20000")

        assert result.gross_tax == Decimal("2000.00")
        assert result.personal_relief == Decimal("2000.00")
        assert result.net_tax == Decimal("0.00")

    def test_insurance_relief_at_rate(self):
        """15% of 10,000 premiums = 1,500 relief."""
        premiums = InsurancePremiums(life=Decimal("10000"))
        result = _tax(self.rate_table, "100000", premiums=premiums)

        assert result.gross_tax == Decimal("24783.35")
        assert result.insurance_relief == Decimal("1500.00")
        assert result.net_tax == Decimal("20883.35")

    def test_insurance_relief_capped(self):
        premiums = InsurancePremiums(life=Decimal("30000"), health=Decimal("20000"))
        result = _tax(self.rate_table, "100000", premiums=premiums)

        assert result.insurance_relief == Decimal("5000.00")
        assert result.net_tax == Decimal("17383.35")

    def test_insurance_relief_bounded_by_remaining_tax(self):
        """Gross tax 2,650 less personal relief leaves 250 for insurance relief."""
        premiums = InsurancePremiums(education=Decimal("10000"))
        result = _tax(self.rate_table, "25000", premiums=premiums)

        assert result.gross_tax == Decimal("2650.00")
        assert result.insurance_relief == Decimal("250.00")
        assert result.net_tax == Decimal("0.00")

    def test_premium_total_accepted(self):
        result = _tax(self.rate_table, "100000", premiums=Decimal("10000"))

        assert result.insurance_relief == Decimal("1500.00")

    def test_total_relief(self):
        premiums = InsurancePremiums(life=Decimal("10000"))
        result = _tax(self.rate_table, "100000", premiums=premiums)

        assert result.total_relief == Decimal("3900.00")


class TestDisabilityExemption:
    """Disabled employees are exempt up to 150,000 of taxable income."""

    def setup_method(self):
        self.rate_table = get_rate_table()

    def test_at_threshold_zero_tax(self):
        result = _tax(self.rate_table, "150000", disabled=True)

        assert result.net_tax == Decimal("0.00")
        assert result.gross_tax == Decimal("0.00")
        assert result.disability_exemption_applied is True
        assert len(result.bands) == 1
        assert result.bands[0].description == DISABILITY_EXEMPTION_LABEL
        assert result.bands[0].taxable_amount == Decimal("150000.00")

    def test_above_threshold_full_banding_by_default(self):
        disabled = _tax(self.rate_table, "200000", disabled=True)
        not_disabled = _tax(self.rate_table, "200000")

        assert self.rate_table.disability_excess_policy == DisabilityExcessPolicy.FULL_BANDING
        assert disabled.net_tax == not_disabled.net_tax == Decimal("52383.35")
        assert disabled.disability_exemption_applied is False

    def test_above_threshold_excess_only(self):
        table = replace(self.rate_table, disability_excess_policy=DisabilityExcessPolicy.EXCESS_ONLY)
        result = _tax(table, "200000", disabled=True)

        assert result.disability_exemption_applied is True
        assert result.bands[0].is_exemption
        assert result.bands[0].taxable_amount == Decimal("150000")
        assert result.gross_tax == Decimal("9783.35")
        assert result.net_tax == Decimal("7383.35")
        assert sum(b.taxable_amount for b in result.bands) == result.taxable_income

    def test_not_disabled_taxed_normally(self):
        result = _tax(self.rate_table, "150000")

        assert result.net_tax > Decimal("0")
        assert result.disability_exemption_applied is False


class TestMarginalRate:
    """Rate of the band containing the income."""

    def setup_method(self):
        self.rate_table = get_rate_table()

    @pytest.mark.parametrize(
        "taxable, expected",
        [
            ("0", "10"),
            ("24000", "10"),
            ("24000.01", "25"),
            ("66785.25", "30"),
            ("650000", "32.5"),
            ("900000", "35"),
        ],
    )
    def test_marginal_rate(self, taxable, expected):
        assert marginal_tax_rate(Decimal(taxable), self.rate_table) == Decimal(expected)
