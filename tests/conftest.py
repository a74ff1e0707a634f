"""
Pytest fixtures for the payroll engine test suite.

Provides:
- The bundled Kenya 2025 rate table
- A standard employee and period used across engine, service and golden tests
- Logging isolation between tests
"""

from decimal import Decimal
from pathlib import Path

import pytest

from payroll_config import get_rate_table
from payroll_engines.models import (
    EmployeeCompensationInput,
    OvertimeType,
    PeriodAdjustments,
)
from payroll_kernel.logging_config import LogContext, reset_logging

GOLDEN_DIR = Path(__file__).parent / "fixtures" / "golden"


@pytest.fixture(autouse=True)
def _isolate_logging():
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()


@pytest.fixture(scope="session")
def rate_table():
    return get_rate_table("kenya_2025")


def make_employee(**overrides) -> EmployeeCompensationInput:
    fields = dict(
        employee_id="EMP001",
        name="Jane Wanjiku",
        tax_id="A123456789Z",
        basic_salary=Decimal("50000"),
        allowances=Decimal("15000"),
    )
    fields.update(overrides)
    return EmployeeCompensationInput(**fields)


def make_adjustments(**overrides) -> PeriodAdjustments:
    fields = dict(
        overtime_hours=Decimal("10"),
        overtime_type=OvertimeType.WEEKDAY,
        unpaid_days=Decimal("0"),
        bonuses=Decimal("5000"),
        custom_deductions=Decimal("2000"),
        period="2025-03",
    )
    fields.update(overrides)
    return PeriodAdjustments(**fields)


@pytest.fixture
def standard_employee():
    return make_employee()


@pytest.fixture
def standard_adjustments():
    return make_adjustments()


@pytest.fixture
def employee_factory():
    return make_employee


@pytest.fixture
def adjustments_factory():
    return make_adjustments
