"""
Payroll Input Models (``payroll_engines.models``).

Responsibility
--------------
Frozen dataclass value objects for the raw inputs of one payroll
calculation: the employee's standing compensation and the adjustments
for a single pay period.

Architecture position
---------------------
**Engines layer** -- pure data definitions with ZERO I/O.  Result types
live beside the engine that emits them.

Invariants enforced
-------------------
* All models are ``frozen=True`` (immutable after construction).
* All monetary fields hold ``Decimal``.  ``int`` and ``str`` are converted
  on construction; ``float`` raises ``FloatAmountError``.
* Domain checks (negative amounts, malformed PIN, unpaid-day range) are
  NOT enforced here.  ``validate_payroll_input`` reports them all at once.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from payroll_kernel.money import ZERO, to_decimal


class ContractType(str, Enum):
    """Employment contract classification."""

    PERMANENT = "permanent"
    CONTRACT = "contract"
    CASUAL = "casual"
    INTERN = "intern"


class OvertimeType(str, Enum):
    """Overtime pricing class."""

    WEEKDAY = "weekday"  # 1.5x
    HOLIDAY = "holiday"  # 2.0x, also weekends


def _coerce_enum(enum_cls: type[Enum], value):
    """Convert a matching raw value to its enum member; leave anything else for the validator."""
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str) and value.lower() in enum_cls._value2member_map_:
        return enum_cls(value.lower())
    return value


@dataclass(frozen=True)
class InsurancePremiums:
    """Monthly insurance premiums that qualify for insurance relief."""

    life: Decimal = ZERO
    education: Decimal = ZERO  # Policies with a maturity of at least 10 years
    health: Decimal = ZERO

    def __post_init__(self) -> None:
        for name in ("life", "education", "health"):
            object.__setattr__(self, name, to_decimal(getattr(self, name), f"insurance_premiums.{name}"))

    @property
    def total(self) -> Decimal:
        return self.life + self.education + self.health


@dataclass(frozen=True)
class EmployeeCompensationInput:
    """An employee's standing compensation for payroll purposes."""

    employee_id: str
    name: str
    tax_id: str  # KRA PIN, e.g. A123456789Z
    basic_salary: Decimal
    allowances: Decimal = ZERO
    contract_type: ContractType | str = ContractType.PERMANENT
    is_disabled: bool = False
    insurance_premiums: InsurancePremiums | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "basic_salary", to_decimal(self.basic_salary, "basic_salary"))
        object.__setattr__(self, "allowances", to_decimal(self.allowances, "allowances"))
        object.__setattr__(self, "contract_type", _coerce_enum(ContractType, self.contract_type))


@dataclass(frozen=True)
class PeriodAdjustments:
    """Adjustments that apply to one pay period only."""

    overtime_hours: Decimal = ZERO
    overtime_type: OvertimeType | str = OvertimeType.WEEKDAY
    unpaid_days: Decimal = ZERO
    bonuses: Decimal = ZERO  # Taxable
    custom_deductions: Decimal = ZERO  # Post-tax, not allowable
    period: str | None = None  # "YYYY-MM"

    def __post_init__(self) -> None:
        for name in ("overtime_hours", "unpaid_days", "bonuses", "custom_deductions"):
            object.__setattr__(self, name, to_decimal(getattr(self, name), name))
        object.__setattr__(self, "overtime_type", _coerce_enum(OvertimeType, self.overtime_type))
