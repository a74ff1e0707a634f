#!/usr/bin/env python3
"""
Calculate payroll for one or more employees from a YAML input file.

Usage:
    python scripts/calculate_payroll.py input.yaml [--rate-table rates.yaml]
        [--rate-set kenya_2025] [--workers 4] [--log-level WARNING]

Input file, single employee:

    employee:
      employee_id: EMP001
      name: Jane Wanjiku
      tax_id: A123456789Z
      basic_salary: "50000"
      allowances: "15000"
    adjustments:
      overtime_hours: 10
      bonuses: "5000"
      custom_deductions: "2000"
      period: "2025-03"

Input file, several employees (run as a batch):

    period: "2025-03"
    employees:
      - employee: {...}
        adjustments: {...}

Prints the JSON result to stdout. Exits with status 2 when an amount cannot
be read or any employee fails validation; the errors are printed instead
of a result.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from decimal import Decimal
from pathlib import Path
from typing import Any

import yaml

# Add project root to path
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from payroll_config import DEFAULT_RATE_TABLE, get_rate_table, load_rate_table
from payroll_engines import (
    EmployeeCompensationInput,
    InsurancePremiums,
    PeriodAdjustments,
    calculate_payroll,
)
from payroll_kernel.exceptions import MoneyError, PayrollValidationError
from payroll_kernel.logging_config import configure_logging
from payroll_kernel.money import money_str
from payroll_services import PayrollBatchItem, run_payroll_batch, summarize_payroll

EXIT_VALIDATION_FAILED = 2


def _amount(value: Any) -> Any:
    # YAML turns 50000.50 into a float; read it back through its text form.
    if isinstance(value, float):
        return Decimal(str(value))
    return value


def _text(value: Any) -> str | None:
    # A YAML null stays None so the required-field checks still see it.
    return None if value is None else str(value)


def build_employee(data: dict[str, Any]) -> EmployeeCompensationInput:
    premiums = data.get("insurance_premiums")
    return EmployeeCompensationInput(
        employee_id=_text(data.get("employee_id")),
        name=_text(data.get("name")),
        tax_id=_text(data.get("tax_id")),
        basic_salary=_amount(data.get("basic_salary", 0)),
        allowances=_amount(data.get("allowances", 0)),
        contract_type=data.get("contract_type", "permanent"),
        is_disabled=bool(data.get("is_disabled", False)),
        insurance_premiums=(
            InsurancePremiums(**{k: _amount(v) for k, v in premiums.items()})
            if premiums
            else None
        ),
    )


def build_adjustments(data: dict[str, Any], period: str | None = None) -> PeriodAdjustments:
    return PeriodAdjustments(
        overtime_hours=_amount(data.get("overtime_hours", 0)),
        overtime_type=data.get("overtime_type", "weekday"),
        unpaid_days=_amount(data.get("unpaid_days", 0)),
        bonuses=_amount(data.get("bonuses", 0)),
        custom_deductions=_amount(data.get("custom_deductions", 0)),
        period=_text(data.get("period", period)),
    )


def _summary_dict(results) -> dict[str, Any]:
    summary = summarize_payroll(results)
    return {
        "period": summary.period,
        "total_employees": summary.total_employees,
        "total_gross_pay": money_str(summary.total_gross_pay),
        "total_allowable_deductions": money_str(summary.total_allowable_deductions),
        "total_paye": money_str(summary.total_paye),
        "total_net_pay": money_str(summary.total_net_pay),
        "total_employer_contributions": money_str(summary.total_employer_contributions),
    }


def run_single(data: dict[str, Any], rate_table) -> tuple[dict[str, Any], int]:
    employee = build_employee(data.get("employee", {}))
    adjustments = build_adjustments(data.get("adjustments", {}), data.get("period"))
    try:
        result = calculate_payroll(employee, adjustments, rate_table)
    except PayrollValidationError as e:
        return {
            "error": e.code,
            "employee_id": e.employee_id,
            "errors": e.messages(),
        }, EXIT_VALIDATION_FAILED
    return result.to_dict(), 0


def run_batch(data: dict[str, Any], rate_table, workers: int | None) -> tuple[dict[str, Any], int]:
    period = data.get("period")
    items = [
        PayrollBatchItem(
            employee=build_employee(entry.get("employee", {})),
            adjustments=build_adjustments(entry.get("adjustments", {}), period),
        )
        for entry in data["employees"]
    ]
    batch = run_payroll_batch(items, rate_table, max_workers=workers)
    output = {
        "batch_id": batch.batch_id,
        "status": batch.status.value,
        "outcome": batch.summary_line(),
        "results": [r.to_dict() for r in batch.results],
        "failures": [
            {"employee_id": f.employee_id, "error": f.error_code, "errors": list(f.errors)}
            for f in batch.failures
        ],
        "summary": _summary_dict(batch.results),
    }
    return output, EXIT_VALIDATION_FAILED if batch.failed else 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Calculate statutory payroll from a YAML input file.")
    parser.add_argument("input", type=Path, help="YAML file with employee and adjustments")
    parser.add_argument("--rate-table", type=Path, help="YAML rate table file (overrides --rate-set)")
    parser.add_argument("--rate-set", default=DEFAULT_RATE_TABLE, help="Bundled rate set name")
    parser.add_argument("--workers", type=int, default=None, help="Thread pool size for batch input")
    parser.add_argument("--log-level", default="WARNING", help="Log level for JSON logs on stderr")
    args = parser.parse_args(argv)

    configure_logging(level=getattr(logging, args.log_level.upper(), logging.WARNING))

    rate_table = load_rate_table(args.rate_table) if args.rate_table else get_rate_table(args.rate_set)

    with open(args.input) as f:
        data = yaml.safe_load(f) or {}

    try:
        if "employees" in data:
            output, code = run_batch(data, rate_table, args.workers)
        else:
            output, code = run_single(data, rate_table)
    except MoneyError as e:
        output = {"error": e.code, "field": e.field, "errors": [str(e)]}
        code = EXIT_VALIDATION_FAILED

    print(json.dumps(output, indent=2))
    return code


if __name__ == "__main__":
    sys.exit(main())
