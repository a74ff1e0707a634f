"""Tests for the engine tracer (payroll_engines/tracer.py)."""

import json
import logging
from decimal import Decimal
from io import StringIO

from payroll_engines.models import OvertimeType
from payroll_engines.statutory import calculate_housing_levy
from payroll_engines.tracer import _canonicalize, compute_input_fingerprint, traced_engine
from payroll_kernel.logging_config import StructuredFormatter, configure_logging


def _capture() -> StringIO:
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    configure_logging(handler=handler)
    return stream


def _traces(stream: StringIO) -> list[dict]:
    records = [json.loads(line) for line in stream.getvalue().splitlines() if line]
    return [r for r in records if r["message"] == "PAYROLL_ENGINE_TRACE"]


class TestFingerprint:
    """Fingerprints are deterministic and sensitive to selected inputs."""

    def test_same_inputs_same_fingerprint(self):
        args = {"gross_pay": Decimal("1000.00"), "is_disabled": False}

        assert compute_input_fingerprint(("gross_pay",), args) == compute_input_fingerprint(
            ("gross_pay",), dict(args)
        )

    def test_different_inputs_differ(self):
        a = compute_input_fingerprint(("gross_pay",), {"gross_pay": Decimal("1000.00")})
        b = compute_input_fingerprint(("gross_pay",), {"gross_pay": Decimal("1000.01")})

        assert a != b
        assert len(a) == 16

    def test_unselected_fields_ignored(self):
        a = compute_input_fingerprint(("gross_pay",), {"gross_pay": Decimal("1"), "other": 1})
        b = compute_input_fingerprint(("gross_pay",), {"gross_pay": Decimal("1"), "other": 2})

        assert a == b

    def test_canonicalize(self):
        assert _canonicalize(None) == "null"
        assert _canonicalize(OvertimeType.HOLIDAY) == "holiday"
        assert _canonicalize({"b": 1, "a": 2}) == "{a:2,b:1}"
        assert _canonicalize((Decimal("1.50"), "x")) == "[1.50,x]"


class TestTracedEngine:
    """The decorator emits one PAYROLL_ENGINE_TRACE per call."""

    def test_trace_emitted(self, rate_table):
        stream = _capture()

        calculate_housing_levy(Decimal("50000"), rate_table)

        (trace,) = _traces(stream)
        assert trace["engine_name"] == "housing_levy"
        assert trace["engine_version"] == "1.0"
        assert trace["logger"] == "payroll_kernel.engines.tracer"
        assert trace["duration_ms"] >= 0

    def test_positional_and_keyword_calls_fingerprint_alike(self, rate_table):
        stream = _capture()

        calculate_housing_levy(Decimal("50000"), rate_table)
        calculate_housing_levy(gross_pay=Decimal("50000"), rate_table=rate_table)

        first, second = _traces(stream)
        assert first["input_fingerprint"] == second["input_fingerprint"] != ""

    def test_return_value_passed_through(self):
        @traced_engine("double", "0.1", fingerprint_fields=("x",))
        def double(x):
            return x * 2

        assert double(Decimal("2.5")) == Decimal("5.0")
        assert double.__name__ == "double"
