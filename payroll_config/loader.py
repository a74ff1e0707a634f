"""
Rate Table Loader (``payroll_config.loader``).

Responsibility
--------------
Loads YAML rate set files and parses them into the frozen
``payroll_config.schema.RateTable``.  Callers that want the bundled rate
set use ``payroll_config.get_rate_table()``; this module is the parsing
layer underneath it.

Invariants enforced
-------------------
* Every monetary amount and rate is parsed to ``Decimal`` from its string
  form; YAML floats are rejected so a rate like ``0.0275`` never passes
  through binary floating point.
* Every parsed object is a frozen dataclass from ``schema.py``; the
  RateTable constructor then enforces band coverage and rate domains.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  rate table identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Float-typed amounts  -> ``InvalidRateTableError``.
* Band or rate violations  -> ``RateTableError`` subclasses from the schema.
"""

from __future__ import annotations

import hashlib
import json
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from payroll_config.schema import (
    ContributionTier,
    DisabilityExcessPolicy,
    HealthLevyRates,
    HousingLevyRates,
    RateTable,
    SocialSecurityRates,
    TaxBand,
    WorkingTime,
)
from payroll_kernel.exceptions import InvalidRateTableError
from payroll_kernel.logging_config import get_logger

logger = get_logger("config.loader")


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_decimal(value: Any, field_name: str) -> Decimal:
    """Parse an exact Decimal from a YAML string or integer."""
    if isinstance(value, bool) or isinstance(value, float):
        raise InvalidRateTableError(
            field_name, f"write amounts as quoted strings, got {type(value).__name__} {value!r}"
        )
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except InvalidOperation as e:
        raise InvalidRateTableError(field_name, f"not a decimal: {value!r}") from e


def parse_date(value: Any) -> date:
    """Parse a date from YAML (string or date object)."""
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value)
    raise ValueError(f"Cannot parse date from {value!r}")


def parse_tax_band(data: dict[str, Any], index: int) -> TaxBand:
    upper = data.get("upper_bound")
    return TaxBand(
        lower_bound=parse_decimal(data["lower_bound"], f"tax_bands[{index}].lower_bound"),
        upper_bound=parse_decimal(upper, f"tax_bands[{index}].upper_bound") if upper is not None else None,
        rate=parse_decimal(data["rate"], f"tax_bands[{index}].rate"),
        description=data.get("description", ""),
    )


def parse_social_security(data: dict[str, Any]) -> SocialSecurityRates:
    rate = parse_decimal(data["rate"], "social_security.rate")
    return SocialSecurityRates(
        rate=rate,
        employer_rate=parse_decimal(data.get("employer_rate", rate), "social_security.employer_rate"),
        lower_earnings_limit=parse_decimal(
            data["lower_earnings_limit"], "social_security.lower_earnings_limit"
        ),
        upper_earnings_limit=parse_decimal(
            data["upper_earnings_limit"], "social_security.upper_earnings_limit"
        ),
        tiers=tuple(
            ContributionTier(
                tier=int(t["tier"]),
                name=t["name"],
                lower_bound=parse_decimal(t["lower_bound"], f"social_security.tiers[{i}].lower_bound"),
                upper_bound=parse_decimal(t["upper_bound"], f"social_security.tiers[{i}].upper_bound"),
                description=t.get("description", ""),
            )
            for i, t in enumerate(data.get("tiers", []))
        ),
    )


def parse_health_levy(data: dict[str, Any]) -> HealthLevyRates:
    rate = parse_decimal(data["rate"], "health_levy.rate")
    return HealthLevyRates(
        rate=rate,
        employer_rate=parse_decimal(data.get("employer_rate", rate), "health_levy.employer_rate"),
        minimum_contribution=parse_decimal(
            data.get("minimum_contribution", "0"), "health_levy.minimum_contribution"
        ),
    )


def parse_housing_levy(data: dict[str, Any]) -> HousingLevyRates:
    rate = parse_decimal(data["rate"], "housing_levy.rate")
    return HousingLevyRates(
        rate=rate,
        employer_rate=parse_decimal(data.get("employer_rate", rate), "housing_levy.employer_rate"),
    )


def parse_working_time(data: dict[str, Any]) -> WorkingTime:
    defaults = WorkingTime()
    days = parse_decimal(
        data.get("standard_days_per_month", defaults.standard_days_per_month),
        "working_time.standard_days_per_month",
    )
    hours_per_day = parse_decimal(
        data.get("standard_hours_per_day", defaults.standard_hours_per_day),
        "working_time.standard_hours_per_day",
    )
    hours_per_month = data.get("standard_hours_per_month")
    return WorkingTime(
        standard_days_per_month=days,
        standard_hours_per_day=hours_per_day,
        standard_hours_per_month=(
            parse_decimal(hours_per_month, "working_time.standard_hours_per_month")
            if hours_per_month is not None
            else days * hours_per_day
        ),
        weekday_overtime_multiplier=parse_decimal(
            data.get("weekday_overtime_multiplier", defaults.weekday_overtime_multiplier),
            "working_time.weekday_overtime_multiplier",
        ),
        holiday_overtime_multiplier=parse_decimal(
            data.get("holiday_overtime_multiplier", defaults.holiday_overtime_multiplier),
            "working_time.holiday_overtime_multiplier",
        ),
    )


def parse_rate_table(data: dict[str, Any]) -> RateTable:
    """
    Parse a ``RateTable`` from a dict.

    Preconditions:
        - ``data`` contains ``name``, ``version``, ``effective_from``,
          ``tax_bands``, ``personal_relief``, ``social_security``,
          ``health_levy`` and ``housing_levy``.
    Postconditions:
        - Returns a validated, frozen ``RateTable``.
    Raises:
        KeyError: if required keys are missing.
        RateTableError: if the parsed values violate schema invariants.
    """
    insurance = data.get("insurance_relief", {})
    disability = data.get("disability_exemption", {})
    warnings = data.get("warnings", {})

    table = RateTable(
        name=data["name"],
        version=str(data["version"]),
        jurisdiction=data.get("jurisdiction", ""),
        currency=data.get("currency", "KES"),
        effective_from=parse_date(data["effective_from"]),
        effective_to=parse_date(data["effective_to"]) if data.get("effective_to") else None,
        tax_bands=tuple(parse_tax_band(b, i) for i, b in enumerate(data["tax_bands"])),
        personal_relief=parse_decimal(data["personal_relief"], "personal_relief"),
        insurance_relief_rate=parse_decimal(insurance.get("rate", "0"), "insurance_relief.rate"),
        insurance_relief_cap=parse_decimal(insurance.get("cap", "0"), "insurance_relief.cap"),
        disability_exemption_threshold=parse_decimal(
            disability.get("threshold", "0"), "disability_exemption.threshold"
        ),
        disability_excess_policy=DisabilityExcessPolicy(
            disability.get("excess_policy", DisabilityExcessPolicy.FULL_BANDING.value)
        ),
        social_security=parse_social_security(data["social_security"]),
        health_levy=parse_health_levy(data["health_levy"]),
        housing_levy=parse_housing_levy(data["housing_levy"]),
        working_time=parse_working_time(data.get("working_time", {})),
        minimum_wage=parse_decimal(warnings.get("minimum_wage", "0"), "warnings.minimum_wage"),
        max_overtime_hours_warning=parse_decimal(
            warnings.get("max_overtime_hours", "60"), "warnings.max_overtime_hours"
        ),
        max_unpaid_days_warning=int(warnings.get("max_unpaid_days", 15)),
    )

    logger.debug(
        "rate_table_parsed",
        extra={
            "rate_table": table.name,
            "version": table.version,
            "band_count": len(table.tax_bands),
        },
    )
    return table


def load_rate_table(path: Path) -> RateTable:
    """Load and parse a rate table YAML file."""
    table = parse_rate_table(load_yaml_file(Path(path)))
    logger.info(
        "rate_table_loaded",
        extra={
            "path": str(path),
            "rate_table": table.name,
            "version": table.version,
            "checksum": compute_checksum(table),
        },
    )
    return table


def compute_checksum(table: RateTable) -> str:
    """
    Compute a deterministic SHA-256 checksum of a rate table.

    Postconditions:
        - Returns a 64-character hex string.
        - Identical tables always produce the same checksum.
    """
    canonical = json.dumps(table.to_dict(), sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
