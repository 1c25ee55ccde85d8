"""Tests for the engine tracer decorator and input fingerprinting."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from payroll_engines.periods import PayFrequency
from payroll_engines.tracer import _canonicalize, compute_input_fingerprint, traced_engine


@dataclass(frozen=True)
class _Sample:
    amount: Decimal
    day: date


@traced_engine("sample", "2.1", fingerprint_fields=("amount", "rate"))
def _multiply(amount, rate=Decimal("2")):
    return amount * rate


class TestCanonicalize:

    def test_decimal_normalized(self):
        assert _canonicalize(Decimal("8")) == _canonicalize(Decimal("8.00"))

    def test_enum_uses_value(self):
        assert _canonicalize(PayFrequency.MONTHLY) == "monthly"

    def test_dict_keys_sorted(self):
        assert _canonicalize({"b": 1, "a": 2}) == _canonicalize({"a": 2, "b": 1})

    def test_sets_order_free(self):
        assert _canonicalize(frozenset({"x", "y"})) == _canonicalize(frozenset({"y", "x"}))

    def test_dataclass_includes_type_and_fields(self):
        text = _canonicalize(_Sample(Decimal("1.50"), date(2026, 3, 1)))
        assert text.startswith("_Sample")
        assert "2026-03-01" in text
        assert "1.5" in text

    def test_none_and_bool(self):
        assert _canonicalize(None) == "null"
        assert _canonicalize(True) == "true"


class TestFingerprint:

    def test_deterministic(self):
        args = {"amount": Decimal("10"), "rate": Decimal("2")}
        assert compute_input_fingerprint(("amount", "rate"), args) == compute_input_fingerprint(
            ("amount", "rate"), dict(args),
        )

    def test_length(self):
        assert len(compute_input_fingerprint(("amount",), {"amount": 1})) == 16

    def test_different_inputs_differ(self):
        a = compute_input_fingerprint(("amount",), {"amount": Decimal("10")})
        b = compute_input_fingerprint(("amount",), {"amount": Decimal("11")})
        assert a != b


class TestTracedEngine:

    def test_return_value_unchanged(self):
        assert _multiply(Decimal("3")) == Decimal("6")

    def test_trace_emitted(self, captured_logs):
        _multiply(Decimal("3"))
        traces = [r for r in captured_logs() if r["message"] == "PAYROLL_ENGINE_TRACE"]
        assert len(traces) == 1
        trace = traces[0]
        assert trace["trace_type"] == "PAYROLL_ENGINE_TRACE"
        assert trace["engine_name"] == "sample"
        assert trace["engine_version"] == "2.1"
        assert len(trace["input_fingerprint"]) == 16
        assert "duration_ms" in trace

    def test_positional_and_keyword_fingerprint_match(self, captured_logs):
        _multiply(Decimal("3"), Decimal("2"))
        _multiply(amount=Decimal("3"))
        traces = [r for r in captured_logs() if r["message"] == "PAYROLL_ENGINE_TRACE"]
        assert traces[0]["input_fingerprint"] == traces[1]["input_fingerprint"]

    def test_wraps_preserves_name(self):
        assert _multiply.__name__ == "_multiply"
