"""
payroll_config -- statutory rate tables for the payroll engine.

Responsibility:
    Provides the frozen ``RateTable`` that every calculation receives as an
    explicit argument, either from a bundled rate set
    (``get_rate_table()``) or from a caller-supplied YAML file
    (``load_rate_table()``).

Architecture position:
    Configuration -- sits above ``payroll_kernel`` and below
    ``payroll_engines`` / ``payroll_services``.  Engines import the schema
    types only; they never locate or read rate files themselves.

Invariants enforced:
    - Tables are immutable snapshots.  A rate change is a new table.
    - Same YAML always yields the same ``compute_checksum()`` value.

Failure modes:
    - ``RateTableNotFoundError`` -- no bundled set with the requested name.
    - ``RateTableError`` subclasses -- schema invariant violations.

Audit relevance:
    Every ``get_rate_table()`` call emits a ``PAYROLL_RATE_TABLE_TRACE``
    log entry with the table name, version and checksum, which ties each
    calculation back to the exact rates that governed it.
"""

from __future__ import annotations

from pathlib import Path

from payroll_config.loader import compute_checksum, load_rate_table, parse_rate_table
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
from payroll_kernel.exceptions import RateTableNotFoundError
from payroll_kernel.logging_config import get_logger

_logger = get_logger("config")

# Bundled rate sets directory
_DEFAULT_SETS_DIR = Path(__file__).parent / "sets"

DEFAULT_RATE_TABLE = "kenya_2025"


def available_rate_tables(sets_dir: Path | None = None) -> list[str]:
    """Names of the rate sets found in the sets directory."""
    directory = sets_dir or _DEFAULT_SETS_DIR
    return sorted(p.stem for p in directory.glob("*.yaml"))


def get_rate_table(
    name: str = DEFAULT_RATE_TABLE,
    sets_dir: Path | None = None,
) -> RateTable:
    """Load a bundled rate set by name.

    Args:
        name: Rate set name (YAML file stem), e.g. ``"kenya_2025"``.
        sets_dir: Override path to the rate sets directory.

    Returns:
        The validated, frozen RateTable.

    Raises:
        RateTableNotFoundError: If no such rate set exists.
    """
    directory = sets_dir or _DEFAULT_SETS_DIR
    path = directory / f"{name}.yaml"
    if not path.is_file():
        raise RateTableNotFoundError(name)

    table = load_rate_table(path)
    _logger.info(
        "PAYROLL_RATE_TABLE_TRACE",
        extra={
            "trace_type": "PAYROLL_RATE_TABLE_TRACE",
            "rate_table": table.name,
            "version": table.version,
            "effective_from": table.effective_from.isoformat(),
            "checksum": compute_checksum(table),
        },
    )
    return table


__all__ = [
    "DEFAULT_RATE_TABLE",
    "ContributionTier",
    "DisabilityExcessPolicy",
    "HealthLevyRates",
    "HousingLevyRates",
    "RateTable",
    "SocialSecurityRates",
    "TaxBand",
    "WorkingTime",
    "available_rate_tables",
    "compute_checksum",
    "get_rate_table",
    "load_rate_table",
    "parse_rate_table",
]
