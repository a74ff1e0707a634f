"""
Tests for the Earnings Engine.

Covers:
- Daily and hourly rate derivation
- Weekday and holiday overtime pricing
- Unpaid-day reduction, including the floor at zero
- Gross pay as the exact sum of emitted components
"""

from decimal import Decimal

import pytest

from payroll_config import get_rate_table
from payroll_engines.earnings import calculate_earnings
from payroll_engines.models import OvertimeType


def _earn(rate_table, **overrides):
    args = dict(
        basic_salary=Decimal("50000"),
        allowances=Decimal("15000"),
        overtime_hours=Decimal("10"),
        overtime_type=OvertimeType.WEEKDAY,
        unpaid_days=Decimal("0"),
        bonuses=Decimal("5000"),
        rate_table=rate_table,
    )
    args.update(overrides)
    return calculate_earnings(**args)


class TestRates:
    """Daily and hourly rates derive from the contractual basic salary."""

    def setup_method(self):
        self.rate_table = get_rate_table()

    def test_daily_and_hourly_rates(self):
        result = _earn(self.rate_table)

        assert result.daily_rate == Decimal("2272.73")
        assert result.hourly_rate == Decimal("284.09")
        assert result.working_days == Decimal("22")

    def test_rates_unaffected_by_unpaid_days(self):
        """Unpaid days reduce pay, not the rate used to price them."""
        result = _earn(self.rate_table, unpaid_days=Decimal("5"))

        assert result.daily_rate == Decimal("2272.73")
        assert result.basic_salary == Decimal("50000.00")


class TestOvertime:
    """Overtime = hours x hourly rate x multiplier."""

    def setup_method(self):
        self.rate_table = get_rate_table()

    def test_weekday_overtime_uses_unrounded_hourly_rate(self):
        """10h x 284.0909... x 1.5 = 4261.36, not 10 x 284.09 x 1.5 = 4261.35."""
        result = _earn(self.rate_table)

        assert result.overtime_multiplier == Decimal("1.5")
        assert result.overtime_amount == Decimal("4261.36")

    def test_holiday_overtime(self):
        result = _earn(self.rate_table, overtime_type=OvertimeType.HOLIDAY)

        assert result.overtime_multiplier == Decimal("2.0")
        assert result.overtime_amount == Decimal("5681.82")

    def test_overtime_type_accepts_plain_string(self):
        result = _earn(self.rate_table, overtime_type="holiday")

        assert result.overtime_amount == Decimal("5681.82")

    def test_no_overtime(self):
        result = _earn(self.rate_table, overtime_hours=Decimal("0"))

        assert result.overtime_amount == Decimal("0.00")

    def test_unknown_overtime_type_rejected(self):
        with pytest.raises(ValueError):
            _earn(self.rate_table, overtime_type="night")


class TestUnpaidDays:
    """Unpaid days reduce basic salary at the daily rate."""

    def setup_method(self):
        self.rate_table = get_rate_table()

    def test_unpaid_deduction(self):
        result = _earn(
            self.rate_table,
            basic_salary=Decimal("44000"),
            unpaid_days=Decimal("2"),
            overtime_hours=Decimal("0"),
        )

        assert result.unpaid_deduction == Decimal("4000.00")
        assert result.adjusted_basic_salary == Decimal("40000.00")

    def test_adjusted_basic_floored_at_zero(self):
        """31 unpaid days at 1000/day exceeds a 22000 basic."""
        result = _earn(
            self.rate_table,
            basic_salary=Decimal("22000"),
            allowances=Decimal("3000"),
            unpaid_days=Decimal("31"),
            overtime_hours=Decimal("0"),
            bonuses=Decimal("0"),
        )

        assert result.unpaid_deduction == Decimal("31000.00")
        assert result.adjusted_basic_salary == Decimal("0")
        assert result.gross_pay == Decimal("3000.00")


class TestGrossPay:
    """Gross pay is the sum of the emitted components."""

    def setup_method(self):
        self.rate_table = get_rate_table()

    def test_standard_gross(self):
        result = _earn(self.rate_table)

        assert result.gross_pay == Decimal("74261.36")

    def test_gross_equals_component_sum(self):
        result = _earn(
            self.rate_table,
            basic_salary=Decimal("33333.33"),
            overtime_hours=Decimal("7.5"),
            unpaid_days=Decimal("3"),
        )

        assert result.gross_pay == (
            result.adjusted_basic_salary
            + result.allowances
            + result.overtime_amount
            + result.bonuses
        )

    def test_zero_inputs(self):
        result = _earn(
            self.rate_table,
            basic_salary=Decimal("0"),
            allowances=Decimal("0"),
            overtime_hours=Decimal("0"),
            bonuses=Decimal("0"),
        )

        assert result.gross_pay == Decimal("0")
        assert result.hourly_rate == Decimal("0.00")
