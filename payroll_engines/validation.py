"""
payroll_engines.validation -- Pre-flight checks for payroll inputs.

Responsibility:
    Inspect an EmployeeCompensationInput and PeriodAdjustments pair before
    any arithmetic runs.  Hard errors block the calculation; soft warnings
    ride along with a successful result.

Architecture position:
    Engines -- pure function, no I/O.  Reads thresholds from the RateTable
    it is handed.

Invariants enforced:
    - Every finding is collected.  Validation never stops at the first error.
    - Findings are reported in a stable order (employee fields, then period
      fields), so identical inputs give identical results.
    - A non-finite amount (NaN, Infinity) is a NOT_FINITE error and takes
      no part in the sign, range or warning checks.

Failure modes:
    - None raised directly.  ``ValidationResult.raise_for_errors()`` raises
      PayrollValidationError carrying every error.

Audit relevance:
    The error and warning codes are stable identifiers that appear in logs
    and batch results.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum

from payroll_config.schema import RateTable
from payroll_engines.models import (
    ContractType,
    EmployeeCompensationInput,
    OvertimeType,
    PeriodAdjustments,
)
from payroll_engines.tracer import traced_engine
from payroll_kernel.exceptions import PayrollValidationError
from payroll_kernel.logging_config import get_logger
from payroll_kernel.money import ZERO

logger = get_logger("engines.validation")

TAX_ID_PATTERN = re.compile(r"^[A-Z][0-9]{9}[A-Z]$")
PERIOD_PATTERN = re.compile(r"^(\d{4})-(0[1-9]|1[0-2])$")
MAX_UNPAID_DAYS = 31


class FindingSeverity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class ValidationFinding:
    """One validation finding against a named input field."""

    field: str
    code: str
    message: str
    severity: FindingSeverity = FindingSeverity.ERROR

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validate_payroll_input."""

    errors: tuple[ValidationFinding, ...] = ()
    warnings: tuple[ValidationFinding, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def error_messages(self) -> list[str]:
        return [e.message for e in self.errors]

    def warning_messages(self) -> list[str]:
        return [w.message for w in self.warnings]

    def messages(self) -> list[str]:
        """All messages, errors first."""
        return self.error_messages() + self.warning_messages()

    def raise_for_errors(self, employee_id: str | None = None) -> None:
        """Raise PayrollValidationError if any hard error was found."""
        if self.errors:
            raise PayrollValidationError(
                errors=self.errors,
                warnings=self.warnings,
                employee_id=employee_id,
            )


class _Collector:
    def __init__(self) -> None:
        self.errors: list[ValidationFinding] = []
        self.warnings: list[ValidationFinding] = []

    def error(self, field: str, code: str, message: str) -> None:
        self.errors.append(ValidationFinding(field, code, message, FindingSeverity.ERROR))

    def warning(self, field: str, code: str, message: str) -> None:
        self.warnings.append(ValidationFinding(field, code, message, FindingSeverity.WARNING))

    def finite(self, field: str, label: str, value: Decimal) -> bool:
        if value.is_finite():
            return True
        self.error(field, "NOT_FINITE", f"{label} must be a finite number, got {value}")
        return False

    def non_negative(self, field: str, label: str, value: Decimal) -> bool:
        """Sign check; False when the value is unusable for later checks."""
        if not self.finite(field, label, value):
            return False
        if value < ZERO:
            self.error(field, "NEGATIVE_AMOUNT", f"{label} cannot be negative")
        return True


@traced_engine("validation", "1.0", fingerprint_fields=("employee", "adjustments"))
def validate_payroll_input(
    employee: EmployeeCompensationInput,
    adjustments: PeriodAdjustments,
    rate_table: RateTable,
) -> ValidationResult:
    """
    Validate one employee's inputs for one pay period.

    Args:
        employee: Standing compensation
        adjustments: Period adjustments
        rate_table: Supplies minimum wage and warning thresholds

    Returns:
        ValidationResult with every error and warning found
    """
    c = _Collector()

    # Employee
    if not (employee.employee_id or "").strip():
        c.error("employee_id", "REQUIRED", "Employee ID is required")
    if not (employee.name or "").strip():
        c.error("name", "REQUIRED", "Employee name is required")
    tax_id = employee.tax_id or ""
    if not TAX_ID_PATTERN.match(tax_id):
        c.error(
            "tax_id",
            "INVALID_TAX_ID",
            f"Invalid KRA PIN format '{tax_id}' (expected e.g. A123456789Z)",
        )
    if not isinstance(employee.contract_type, ContractType):
        allowed = ", ".join(f"'{t.value}'" for t in ContractType)
        c.error(
            "contract_type",
            "INVALID_CONTRACT_TYPE",
            f"Contract type must be one of {allowed}, got {employee.contract_type!r}",
        )
    basic_ok = c.non_negative("basic_salary", "Basic salary", employee.basic_salary)
    allowances_ok = c.non_negative("allowances", "Allowances", employee.allowances)
    if employee.insurance_premiums is not None:
        for name in ("life", "education", "health"):
            c.non_negative(
                f"insurance_premiums.{name}",
                f"{name.capitalize()} insurance premium",
                getattr(employee.insurance_premiums, name),
            )

    # Period
    overtime_ok = c.non_negative("overtime_hours", "Overtime hours", adjustments.overtime_hours)
    bonuses_ok = c.non_negative("bonuses", "Bonuses", adjustments.bonuses)
    custom_ok = c.non_negative("custom_deductions", "Custom deductions", adjustments.custom_deductions)

    unpaid = adjustments.unpaid_days
    unpaid_ok = c.finite("unpaid_days", "Unpaid days", unpaid)
    if unpaid_ok:
        if unpaid < ZERO or unpaid > MAX_UNPAID_DAYS:
            c.error("unpaid_days", "OUT_OF_RANGE", f"Unpaid days must be between 0 and {MAX_UNPAID_DAYS}")
        elif unpaid != unpaid.to_integral_value():
            c.error("unpaid_days", "NOT_WHOLE_DAYS", "Unpaid days must be a whole number")

    if not isinstance(adjustments.overtime_type, OvertimeType):
        c.error(
            "overtime_type",
            "INVALID_OVERTIME_TYPE",
            f"Overtime type must be 'weekday' or 'holiday', got {adjustments.overtime_type!r}",
        )

    period_start = None
    if adjustments.period is not None:
        match = PERIOD_PATTERN.match(str(adjustments.period))
        if match is None:
            c.error("period", "INVALID_PERIOD", f"Pay period must be YYYY-MM, got {adjustments.period!r}")
        else:
            period_start = date(int(match.group(1)), int(match.group(2)), 1)

    # Warnings, only over values that passed the finiteness checks
    basic = employee.basic_salary
    if basic_ok and ZERO <= basic < rate_table.minimum_wage:
        c.warning(
            "basic_salary",
            "BELOW_MINIMUM_WAGE",
            f"Basic salary {basic} is below the minimum wage of {rate_table.minimum_wage}",
        )

    if basic_ok and allowances_ok and bonuses_ok and custom_ok and unpaid_ok:
        projected_gross = basic + employee.allowances + adjustments.bonuses
        daily_rate = basic / rate_table.working_time.standard_days_per_month
        projected_deductions = adjustments.custom_deductions + unpaid * daily_rate
        if projected_deductions >= projected_gross:
            c.warning(
                "custom_deductions",
                "DEDUCTIONS_EXCEED_GROSS",
                "Projected deductions equal or exceed projected gross pay; net pay may be zero or negative",
            )

    if overtime_ok and adjustments.overtime_hours > rate_table.max_overtime_hours_warning:
        c.warning(
            "overtime_hours",
            "EXCESSIVE_OVERTIME",
            f"Overtime of {adjustments.overtime_hours} hours exceeds "
            f"{rate_table.max_overtime_hours_warning} hours this period",
        )

    if unpaid_ok and rate_table.max_unpaid_days_warning < unpaid <= MAX_UNPAID_DAYS:
        c.warning(
            "unpaid_days",
            "EXCESSIVE_UNPAID_DAYS",
            f"{unpaid} unpaid days exceeds {rate_table.max_unpaid_days_warning} days this period",
        )

    if period_start is not None and not rate_table.is_effective(period_start):
        c.warning(
            "period",
            "RATE_TABLE_NOT_EFFECTIVE",
            f"Rate table {rate_table.name} {rate_table.version} does not govern period {adjustments.period}",
        )

    result = ValidationResult(errors=tuple(c.errors), warnings=tuple(c.warnings))
    if not result.is_valid:
        logger.info(
            "payroll_input_rejected",
            extra={
                "employee_id": employee.employee_id,
                "error_codes": [e.code for e in result.errors],
            },
        )
    return result
