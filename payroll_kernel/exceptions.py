"""
Typed Exception Hierarchy for the Payroll Kernel.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from PayrollKernelError:

    PayrollKernelError (base)
    |
    +-- PayrollValidationError
    |
    +-- RateTableError
    |   +-- InvalidRateTableError
    |   +-- BandCoverageError
    |   +-- RateTableNotFoundError
    |
    +-- MoneyError
        +-- FloatAmountError
        +-- InvalidAmountError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Validation      | PAYROLL_VALIDATION_FAILED   | Hard input errors block a calculation
----------------|-----------------------------|-----------------------------------------
Rate table      | INVALID_RATE_TABLE          | Rate outside [0, 1], non-positive divisor
                | TAX_BAND_COVERAGE           | Bands have a gap, overlap or open middle
                | RATE_TABLE_NOT_FOUND        | Named bundled rate set does not exist
----------------|-----------------------------|-----------------------------------------
Money           | FLOAT_AMOUNT                | float passed where Decimal is required
                | INVALID_AMOUNT              | Amount text is not a number, or a bool

===============================================================================
HANDLING PATTERNS
===============================================================================

1. SURFACE EVERY VALIDATION ERROR (not just the first):

    try:
        result = calculate_payroll(employee, adjustments, rate_table)
    except PayrollValidationError as e:
        return {"error": e.code, "errors": e.messages()}

2. RATE TABLE ERRORS ARE CONFIGURATION FAULTS:

    except RateTableError as e:
        log.error("rate_table_rejected", extra={"code": e.code})
        halt_batch()
"""


class PayrollKernelError(Exception):
    """
    Base exception for all payroll kernel errors.

    All subclasses carry a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "PAYROLL_KERNEL_ERROR"


# Validation


class PayrollValidationError(PayrollKernelError):
    """Hard validation errors blocked the calculation.

    Carries every error found, so a caller can fix all of them in one
    resubmission.
    """

    code: str = "PAYROLL_VALIDATION_FAILED"

    def __init__(
        self,
        errors: tuple,
        warnings: tuple = (),
        employee_id: str | None = None,
    ):
        self.errors = tuple(errors)
        self.warnings = tuple(warnings)
        self.employee_id = employee_id
        count = len(self.errors)
        super().__init__(
            f"Payroll input for {employee_id or '<unknown>'} failed validation "
            f"with {count} error{'s' if count != 1 else ''}: "
            + "; ".join(self.messages())
        )

    def messages(self) -> list[str]:
        """Human-readable error messages, in detection order."""
        return [getattr(e, "message", str(e)) for e in self.errors]


# Rate table


class RateTableError(PayrollKernelError):
    """Base exception for rate table configuration errors."""

    code: str = "RATE_TABLE_ERROR"


class InvalidRateTableError(RateTableError):
    """A rate table field holds a value outside its allowed domain."""

    code: str = "INVALID_RATE_TABLE"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid rate table field '{field}': {reason}")


class BandCoverageError(RateTableError):
    """Tax bands are not contiguous and exhaustive over [0, infinity)."""

    code: str = "TAX_BAND_COVERAGE"

    def __init__(self, band_index: int, reason: str):
        self.band_index = band_index
        self.reason = reason
        super().__init__(f"Tax band {band_index}: {reason}")


class RateTableNotFoundError(RateTableError):
    """No bundled rate set exists with the requested name."""

    code: str = "RATE_TABLE_NOT_FOUND"

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Rate table not found: {name}")


# Money


class MoneyError(PayrollKernelError):
    """Base exception for monetary value errors."""

    code: str = "MONEY_ERROR"


class FloatAmountError(MoneyError):
    """A float was supplied where an exact Decimal amount is required."""

    code: str = "FLOAT_AMOUNT"

    def __init__(self, field: str, value: float):
        self.field = field
        self.value = value
        super().__init__(
            f"Field '{field}' received float {value!r}; "
            f"pass Decimal, int or str to keep cent-exact arithmetic"
        )


class InvalidAmountError(MoneyError, ValueError):
    """An amount could not be read as a decimal number."""

    code: str = "INVALID_AMOUNT"

    def __init__(self, field: str, value: object):
        self.field = field
        self.value = value
        super().__init__(f"Field '{field}' is not a valid decimal: {value!r}")
