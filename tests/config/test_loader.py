"""
Tests for rate table loading.

Covers:
- Bundled Kenya 2025 rate set values
- YAML parsing rules: quoted amounts, float rejection, defaults
- Named set lookup and checksums
"""

from decimal import Decimal

import pytest
import yaml

from payroll_config import (
    DisabilityExcessPolicy,
    available_rate_tables,
    compute_checksum,
    get_rate_table,
    load_rate_table,
    parse_rate_table,
)
from payroll_config.loader import parse_decimal
from payroll_kernel.exceptions import InvalidRateTableError, RateTableNotFoundError


def _minimal(**overrides):
    data = {
        "name": "test_set",
        "version": "1",
        "effective_from": "2025-01-01",
        "tax_bands": [
            {"lower_bound": "0", "upper_bound": "10000", "rate": "0.10"},
            {"lower_bound": "10000", "upper_bound": None, "rate": "0.30"},
        ],
        "personal_relief": "1000",
        "social_security": {
            "rate": "0.05",
            "lower_earnings_limit": "0",
            "upper_earnings_limit": "50000",
        },
        "health_levy": {"rate": "0.02"},
        "housing_levy": {"rate": "0.01"},
    }
    data.update(overrides)
    return data


class TestBundledRateSet:
    """Kenya 2025 statutory figures."""

    def setup_method(self):
        self.table = get_rate_table("kenya_2025")

    def test_identity(self):
        assert self.table.name == "kenya_2025"
        assert self.table.version == "2025.02"
        assert self.table.currency == "KES"

    def test_tax_bands(self):
        assert [(b.lower_bound, b.upper_bound, b.rate) for b in self.table.tax_bands] == [
            (Decimal("0"), Decimal("24000"), Decimal("0.10")),
            (Decimal("24000"), Decimal("32333"), Decimal("0.25")),
            (Decimal("32333"), Decimal("500000"), Decimal("0.30")),
            (Decimal("500000"), Decimal("800000"), Decimal("0.325")),
            (Decimal("800000"), None, Decimal("0.35")),
        ]

    def test_reliefs_and_exemption(self):
        assert self.table.personal_relief == Decimal("2400")
        assert self.table.insurance_relief_rate == Decimal("0.15")
        assert self.table.insurance_relief_cap == Decimal("5000")
        assert self.table.disability_exemption_threshold == Decimal("150000")
        assert self.table.disability_excess_policy == DisabilityExcessPolicy.FULL_BANDING

    def test_contributions(self):
        ss = self.table.social_security
        assert (ss.rate, ss.lower_earnings_limit, ss.upper_earnings_limit) == (
            Decimal("0.06"),
            Decimal("8000"),
            Decimal("72000"),
        )
        assert [t.name for t in ss.tiers] == ["Tier I", "Tier II"]
        assert self.table.health_levy.rate == Decimal("0.0275")
        assert self.table.health_levy.minimum_contribution == Decimal("300")
        assert self.table.housing_levy.rate == Decimal("0.015")

    def test_working_time_and_thresholds(self):
        wt = self.table.working_time
        assert wt.standard_days_per_month == Decimal("22")
        assert wt.standard_hours_per_month == Decimal("176")
        assert self.table.minimum_wage == Decimal("15201")
        assert self.table.max_overtime_hours_warning == Decimal("60")
        assert self.table.max_unpaid_days_warning == 15

    def test_available(self):
        assert "kenya_2025" in available_rate_tables()

    def test_unknown_set(self):
        with pytest.raises(RateTableNotFoundError) as exc_info:
            get_rate_table("atlantis_2025")

        assert exc_info.value.name == "atlantis_2025"


class TestParsing:
    """Parsing rules for YAML rate tables."""

    def test_minimal_defaults(self):
        table = parse_rate_table(_minimal())

        assert table.social_security.employer_rate == Decimal("0.05")
        assert table.health_levy.minimum_contribution == Decimal("0")
        assert table.working_time.standard_hours_per_month == Decimal("176")
        assert table.disability_excess_policy == DisabilityExcessPolicy.FULL_BANDING

    def test_hours_per_month_derived(self):
        table = parse_rate_table(
            _minimal(working_time={"standard_days_per_month": "20", "standard_hours_per_day": "9"})
        )

        assert table.working_time.standard_hours_per_month == Decimal("180")

    def test_excess_policy(self):
        table = parse_rate_table(
            _minimal(disability_exemption={"threshold": "100000", "excess_policy": "excess_only"})
        )

        assert table.disability_excess_policy == DisabilityExcessPolicy.EXCESS_ONLY
        assert table.disability_exemption_threshold == Decimal("100000")

    def test_float_rejected(self):
        with pytest.raises(InvalidRateTableError) as exc_info:
            parse_rate_table(_minimal(personal_relief=2400.0))

        assert exc_info.value.field == "personal_relief"

    def test_integers_accepted(self):
        assert parse_decimal(2400, "x") == Decimal("2400")

    def test_bad_decimal_rejected(self):
        with pytest.raises(InvalidRateTableError):
            parse_decimal("twelve", "x")

    def test_missing_key(self):
        data = _minimal()
        del data["tax_bands"]

        with pytest.raises(KeyError):
            parse_rate_table(data)


class TestLoadFromFile:
    """YAML files on disk."""

    def test_load(self, tmp_path):
        path = tmp_path / "rates.yaml"
        path.write_text(yaml.safe_dump(_minimal()))

        table = load_rate_table(path)

        assert table.name == "test_set"
        assert table.tax_bands[1].rate == Decimal("0.30")

    def test_unquoted_float_in_yaml_rejected(self, tmp_path):
        path = tmp_path / "rates.yaml"
        path.write_text(yaml.safe_dump(_minimal()).replace("'0.05'", "0.05"))

        with pytest.raises(InvalidRateTableError, match="social_security.rate"):
            load_rate_table(path)

    def test_sets_dir_override(self, tmp_path):
        (tmp_path / "custom.yaml").write_text(yaml.safe_dump(_minimal()))

        assert available_rate_tables(tmp_path) == ["custom"]
        assert get_rate_table("custom", sets_dir=tmp_path).name == "test_set"


class TestChecksum:
    """SHA-256 identity of a rate table."""

    def test_stable(self):
        assert compute_checksum(get_rate_table()) == compute_checksum(get_rate_table())
        assert len(compute_checksum(get_rate_table())) == 64

    def test_changes_with_rates(self):
        base = parse_rate_table(_minimal())
        changed = parse_rate_table(_minimal(personal_relief="1001"))

        assert compute_checksum(base) != compute_checksum(changed)
