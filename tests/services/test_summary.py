"""Tests for period summaries and year-to-date folds."""

from decimal import Decimal

import pytest

from payroll_engines.aggregator import calculate_payroll
from payroll_kernel.money import round_money
from payroll_services.summary import summarize_payroll, year_to_date


class TestSummarizePayroll:
    """Period totals reconcile with individual results."""

    def test_totals(self, rate_table, employee_factory, adjustments_factory):
        results = [
            calculate_payroll(employee_factory(employee_id="EMP001"), adjustments_factory(), rate_table),
            calculate_payroll(
                employee_factory(employee_id="EMP002", basic_salary=Decimal("30000")),
                adjustments_factory(overtime_hours=Decimal("0")),
                rate_table,
            ),
        ]

        summary = summarize_payroll(results)

        assert summary.period == "2025-03"
        assert summary.total_employees == 2
        assert summary.total_gross_pay == sum(r.gross_pay for r in results)
        assert summary.total_paye == sum(r.tax.net_tax for r in results)
        assert summary.total_net_pay == sum(r.net_pay for r in results)
        assert summary.total_allowable_deductions == (
            summary.total_social_security + summary.total_health_levy + summary.total_housing_levy
        )
        assert summary.total_employer_contributions == sum(
            r.employer_contributions.total for r in results
        )
        assert summary.average_gross_pay == round_money(summary.total_gross_pay / 2)

    def test_single_standard_employee(self, rate_table, standard_employee, standard_adjustments):
        result = calculate_payroll(standard_employee, standard_adjustments, rate_table)

        summary = summarize_payroll([result])

        assert summary.total_social_security == Decimal("4320.00")
        assert summary.total_paye == Decimal("12418.93")
        assert summary.average_net_pay == Decimal("52366.32")

    def test_mixed_periods(self, rate_table, standard_employee, adjustments_factory):
        results = [
            calculate_payroll(standard_employee, adjustments_factory(period=p), rate_table)
            for p in ("2025-03", "2025-04")
        ]

        assert summarize_payroll(results).period is None

    def test_empty(self):
        summary = summarize_payroll([])

        assert summary.total_employees == 0
        assert summary.total_gross_pay == Decimal("0")
        assert summary.average_net_pay == Decimal("0")
        assert summary.period is None


class TestYearToDate:
    """YTD totals are a plain fold over prior results."""

    def test_three_months(self, rate_table, standard_employee, adjustments_factory):
        results = [
            calculate_payroll(standard_employee, adjustments_factory(period=p), rate_table)
            for p in ("2025-02", "2025-03", "2025-04")
        ]

        ytd = year_to_date(results)

        assert ytd.employee_id == "EMP001"
        assert ytd.months_covered == 3
        assert ytd.gross_pay == Decimal("222784.08")
        assert ytd.paye == Decimal("37256.79")
        assert ytd.net_pay == Decimal("157098.96")
        assert ytd.social_security == Decimal("12960.00")

    def test_empty(self):
        ytd = year_to_date([])

        assert ytd.months_covered == 0
        assert ytd.employee_id is None
        assert ytd.gross_pay == Decimal("0")

    def test_mixed_employees_rejected(self, rate_table, employee_factory, standard_adjustments):
        results = [
            calculate_payroll(employee_factory(employee_id=e), standard_adjustments, rate_table)
            for e in ("EMP001", "EMP002")
        ]

        with pytest.raises(ValueError):
            year_to_date(results)
