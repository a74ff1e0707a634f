"""
Module: payroll_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    payroll calculation engines.  This is the canonical import surface for
    higher layers (payroll_services, scripts).

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import payroll_kernel, payroll_config.schema and sibling
    engine modules.  MUST NOT import payroll_services.

Invariants enforced:
    - Decimal-only arithmetic: floats are rejected at the model boundary.
    - Determinism: identical inputs and rate table always produce
      identical outputs.  Engines never read the clock.
    - The RateTable is passed explicitly to every call.

Failure modes:
    - PayrollValidationError from calculate_payroll on hard input errors.

Audit relevance:
    Every engine invocation is traced via ``@traced_engine`` (see
    ``payroll_engines.tracer``), emitting PAYROLL_ENGINE_TRACE records with
    engine name, version, input fingerprint and duration.

Usage:
    from payroll_config import get_rate_table
    from payroll_engines import (
        EmployeeCompensationInput,
        PeriodAdjustments,
        calculate_payroll,
    )

    result = calculate_payroll(employee, adjustments, get_rate_table())
"""

from payroll_kernel.logging_config import get_logger

logger = get_logger("engines")

from payroll_engines.aggregator import (
    CalculationMetadata,
    EmployerContributions,
    PayrollAggregator,
    PayrollCalculationResult,
    calculate_payroll,
)
from payroll_engines.earnings import EarningsResult, calculate_earnings
from payroll_engines.income_tax import (
    IncomeTaxResult,
    TaxBandAmount,
    calculate_income_tax,
    marginal_tax_rate,
)
from payroll_engines.models import (
    ContractType,
    EmployeeCompensationInput,
    InsurancePremiums,
    OvertimeType,
    PeriodAdjustments,
)
from payroll_engines.statutory import (
    ContributionResult,
    StatutoryDeductions,
    TierContribution,
    calculate_health_levy,
    calculate_housing_levy,
    calculate_social_security,
    calculate_statutory_deductions,
)
from payroll_engines.tracer import traced_engine
from payroll_engines.validation import (
    FindingSeverity,
    ValidationFinding,
    ValidationResult,
    validate_payroll_input,
)

__all__ = [
    # Models
    "ContractType",
    "EmployeeCompensationInput",
    "InsurancePremiums",
    "OvertimeType",
    "PeriodAdjustments",
    # Validation
    "FindingSeverity",
    "ValidationFinding",
    "ValidationResult",
    "validate_payroll_input",
    # Earnings
    "EarningsResult",
    "calculate_earnings",
    # Statutory
    "ContributionResult",
    "StatutoryDeductions",
    "TierContribution",
    "calculate_health_levy",
    "calculate_housing_levy",
    "calculate_social_security",
    "calculate_statutory_deductions",
    # Income tax
    "IncomeTaxResult",
    "TaxBandAmount",
    "calculate_income_tax",
    "marginal_tax_rate",
    # Aggregator
    "CalculationMetadata",
    "EmployerContributions",
    "PayrollAggregator",
    "PayrollCalculationResult",
    "calculate_payroll",
    # Tracing
    "traced_engine",
]
