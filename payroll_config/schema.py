"""
RateTable schema.

Defines the immutable statutory rate table that every payroll calculation
receives as an explicit argument. YAML rate sets are parsed into these
types by the loader; engines never read configuration any other way.

Invariants (checked at construction):
  - Tax bands start at zero, are contiguous, and only the last band is open.
  - Every rate lies in [0, 1].
  - Working-time divisors and overtime multipliers are strictly positive.
  - lower_earnings_limit <= upper_earnings_limit.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

from payroll_kernel.exceptions import BandCoverageError, InvalidRateTableError
from payroll_kernel.money import ZERO

_ONE = Decimal("1")


def _check_rate(field_name: str, rate: Decimal) -> None:
    if not isinstance(rate, Decimal):
        raise InvalidRateTableError(field_name, f"must be Decimal, got {type(rate).__name__}")
    if rate < ZERO or rate > _ONE:
        raise InvalidRateTableError(field_name, f"rate {rate} outside [0, 1]")


def _check_positive(field_name: str, value: Decimal) -> None:
    if value <= ZERO:
        raise InvalidRateTableError(field_name, f"must be positive, got {value}")


def _check_non_negative(field_name: str, value: Decimal) -> None:
    if value < ZERO:
        raise InvalidRateTableError(field_name, f"cannot be negative, got {value}")


class DisabilityExcessPolicy(str, Enum):
    """How a disabled employee's taxable income above the exemption threshold is taxed."""

    FULL_BANDING = "full_banding"  # Whole taxable income banded from zero
    EXCESS_ONLY = "excess_only"  # Only the amount above the threshold is banded


# ---------------------------------------------------------------------------
# Income tax
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TaxBand:
    """One progressive income tax band: (lower_bound, upper_bound] taxed at rate."""

    lower_bound: Decimal
    upper_bound: Decimal | None  # None = open top band
    rate: Decimal
    description: str = ""

    @property
    def is_open(self) -> bool:
        return self.upper_bound is None

    @property
    def width(self) -> Decimal | None:
        if self.upper_bound is None:
            return None
        return self.upper_bound - self.lower_bound

    def contains(self, amount: Decimal) -> bool:
        """True when amount falls inside (lower_bound, upper_bound]."""
        if amount <= self.lower_bound:
            return False
        return self.upper_bound is None or amount <= self.upper_bound


# ---------------------------------------------------------------------------
# Contributions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ContributionTier:
    """Display tier for decomposing pensionable pay (Tier I, Tier II)."""

    tier: int
    name: str
    lower_bound: Decimal
    upper_bound: Decimal
    description: str = ""


@dataclass(frozen=True)
class SocialSecurityRates:
    """Pension-style contribution (NSSF)."""

    rate: Decimal
    employer_rate: Decimal
    lower_earnings_limit: Decimal
    upper_earnings_limit: Decimal
    tiers: tuple[ContributionTier, ...] = ()

    @property
    def max_employee_contribution(self) -> Decimal:
        return self.upper_earnings_limit * self.rate


@dataclass(frozen=True)
class HealthLevyRates:
    """Health insurance levy (SHIF). Floored, never capped."""

    rate: Decimal
    employer_rate: Decimal
    minimum_contribution: Decimal = ZERO


@dataclass(frozen=True)
class HousingLevyRates:
    """Flat housing levy (AHL)."""

    rate: Decimal
    employer_rate: Decimal


@dataclass(frozen=True)
class WorkingTime:
    """Working-time constants used to derive daily and hourly rates."""

    standard_days_per_month: Decimal = Decimal("22")
    standard_hours_per_day: Decimal = Decimal("8")
    standard_hours_per_month: Decimal = Decimal("176")
    weekday_overtime_multiplier: Decimal = Decimal("1.5")
    holiday_overtime_multiplier: Decimal = Decimal("2.0")


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RateTable:
    """
    Complete statutory rate table for one regulatory period.

    Immutable snapshot. Pass the same instance to every calculation in a
    batch; rate changes mean a new RateTable, never mutation.
    """

    name: str
    version: str
    jurisdiction: str
    currency: str
    effective_from: date
    tax_bands: tuple[TaxBand, ...]
    personal_relief: Decimal
    insurance_relief_rate: Decimal
    insurance_relief_cap: Decimal
    disability_exemption_threshold: Decimal
    social_security: SocialSecurityRates
    health_levy: HealthLevyRates
    housing_levy: HousingLevyRates
    working_time: WorkingTime = field(default_factory=WorkingTime)
    minimum_wage: Decimal = ZERO
    max_overtime_hours_warning: Decimal = Decimal("60")
    max_unpaid_days_warning: int = 15
    disability_excess_policy: DisabilityExcessPolicy = DisabilityExcessPolicy.FULL_BANDING
    effective_to: date | None = None

    def __post_init__(self) -> None:
        self._validate_bands()

        for band_index, band in enumerate(self.tax_bands):
            _check_rate(f"tax_bands[{band_index}].rate", band.rate)
        _check_rate("insurance_relief_rate", self.insurance_relief_rate)
        _check_rate("social_security.rate", self.social_security.rate)
        _check_rate("social_security.employer_rate", self.social_security.employer_rate)
        _check_rate("health_levy.rate", self.health_levy.rate)
        _check_rate("health_levy.employer_rate", self.health_levy.employer_rate)
        _check_rate("housing_levy.rate", self.housing_levy.rate)
        _check_rate("housing_levy.employer_rate", self.housing_levy.employer_rate)

        _check_non_negative("personal_relief", self.personal_relief)
        _check_non_negative("insurance_relief_cap", self.insurance_relief_cap)
        _check_non_negative("disability_exemption_threshold", self.disability_exemption_threshold)
        _check_non_negative("health_levy.minimum_contribution", self.health_levy.minimum_contribution)
        _check_non_negative("minimum_wage", self.minimum_wage)

        ss = self.social_security
        _check_non_negative("social_security.lower_earnings_limit", ss.lower_earnings_limit)
        _check_positive("social_security.upper_earnings_limit", ss.upper_earnings_limit)
        if ss.lower_earnings_limit > ss.upper_earnings_limit:
            raise InvalidRateTableError(
                "social_security.lower_earnings_limit",
                f"{ss.lower_earnings_limit} exceeds upper earnings limit {ss.upper_earnings_limit}",
            )
        if ss.tiers and ss.tiers[-1].upper_bound != ss.upper_earnings_limit:
            raise InvalidRateTableError(
                "social_security.tiers",
                "last tier must end at the upper earnings limit",
            )

        wt = self.working_time
        _check_positive("working_time.standard_days_per_month", wt.standard_days_per_month)
        _check_positive("working_time.standard_hours_per_day", wt.standard_hours_per_day)
        _check_positive("working_time.standard_hours_per_month", wt.standard_hours_per_month)
        _check_positive("working_time.weekday_overtime_multiplier", wt.weekday_overtime_multiplier)
        _check_positive("working_time.holiday_overtime_multiplier", wt.holiday_overtime_multiplier)

        if self.effective_to is not None and self.effective_to < self.effective_from:
            raise InvalidRateTableError("effective_to", "precedes effective_from")

    def _validate_bands(self) -> None:
        if not self.tax_bands:
            raise BandCoverageError(0, "at least one tax band is required")
        if self.tax_bands[0].lower_bound != ZERO:
            raise BandCoverageError(0, f"first band must start at 0, starts at {self.tax_bands[0].lower_bound}")

        last = len(self.tax_bands) - 1
        for index, band in enumerate(self.tax_bands):
            if band.is_open:
                if index != last:
                    raise BandCoverageError(index, "only the last band may be open-ended")
                continue
            if band.width <= ZERO:
                raise BandCoverageError(
                    index, f"upper bound {band.upper_bound} must exceed lower bound {band.lower_bound}"
                )
            if index == last:
                raise BandCoverageError(index, "last band must be open-ended")
            following = self.tax_bands[index + 1]
            if following.lower_bound != band.upper_bound:
                kind = "gap" if following.lower_bound > band.upper_bound else "overlap"
                raise BandCoverageError(
                    index + 1,
                    f"{kind}: lower bound {following.lower_bound} != previous upper bound {band.upper_bound}",
                )

    def is_effective(self, on_date: date) -> bool:
        """Check if the table governs the given date."""
        if on_date < self.effective_from:
            return False
        if self.effective_to is not None and on_date > self.effective_to:
            return False
        return True

    def overtime_multiplier(self, overtime_type: str) -> Decimal:
        """Multiplier for 'weekday' or 'holiday' overtime."""
        if overtime_type == "holiday":
            return self.working_time.holiday_overtime_multiplier
        if overtime_type == "weekday":
            return self.working_time.weekday_overtime_multiplier
        raise ValueError(f"overtime_type must be 'weekday' or 'holiday', got {overtime_type!r}")

    def to_dict(self) -> dict[str, Any]:
        """Canonical dict form (Decimals as strings) used for YAML output and checksums."""
        ss = self.social_security
        wt = self.working_time
        return {
            "name": self.name,
            "version": self.version,
            "jurisdiction": self.jurisdiction,
            "currency": self.currency,
            "effective_from": self.effective_from.isoformat(),
            "effective_to": self.effective_to.isoformat() if self.effective_to else None,
            "tax_bands": [
                {
                    "lower_bound": str(b.lower_bound),
                    "upper_bound": str(b.upper_bound) if b.upper_bound is not None else None,
                    "rate": str(b.rate),
                    "description": b.description,
                }
                for b in self.tax_bands
            ],
            "personal_relief": str(self.personal_relief),
            "insurance_relief": {
                "rate": str(self.insurance_relief_rate),
                "cap": str(self.insurance_relief_cap),
            },
            "disability_exemption": {
                "threshold": str(self.disability_exemption_threshold),
                "excess_policy": self.disability_excess_policy.value,
            },
            "social_security": {
                "rate": str(ss.rate),
                "employer_rate": str(ss.employer_rate),
                "lower_earnings_limit": str(ss.lower_earnings_limit),
                "upper_earnings_limit": str(ss.upper_earnings_limit),
                "tiers": [
                    {
                        "tier": t.tier,
                        "name": t.name,
                        "lower_bound": str(t.lower_bound),
                        "upper_bound": str(t.upper_bound),
                        "description": t.description,
                    }
                    for t in ss.tiers
                ],
            },
            "health_levy": {
                "rate": str(self.health_levy.rate),
                "employer_rate": str(self.health_levy.employer_rate),
                "minimum_contribution": str(self.health_levy.minimum_contribution),
            },
            "housing_levy": {
                "rate": str(self.housing_levy.rate),
                "employer_rate": str(self.housing_levy.employer_rate),
            },
            "working_time": {
                "standard_days_per_month": str(wt.standard_days_per_month),
                "standard_hours_per_day": str(wt.standard_hours_per_day),
                "standard_hours_per_month": str(wt.standard_hours_per_month),
                "weekday_overtime_multiplier": str(wt.weekday_overtime_multiplier),
                "holiday_overtime_multiplier": str(wt.holiday_overtime_multiplier),
            },
            "warnings": {
                "minimum_wage": str(self.minimum_wage),
                "max_overtime_hours": str(self.max_overtime_hours_warning),
                "max_unpaid_days": self.max_unpaid_days_warning,
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RateTable:
        """Create a rate table from its dict form (e.g. parsed YAML)."""
        from payroll_config.loader import parse_rate_table

        return parse_rate_table(data)
