#!/usr/bin/env python3
"""
Reporting tests: origins, summaries and timeout messages.
"""

import json
import time
from pathlib import Path

import pytest

import settleguard
from settleguard import OperationOrigin, Outcome, SettleGuardConfig, SettleReport, SettleTimeoutError
from settleguard.report import InterceptKind, capture_origin, sanitize_token_repr

PACKAGE_DIR = str(Path(settleguard.__file__).parent)


@pytest.fixture
def stack_config():
    return SettleGuardConfig(timeout_s=1.0, excluded_paths=(PACKAGE_DIR,))


def make_report(count, outcome=Outcome.PENDING):
    origins = [
        OperationOrigin(kind=InterceptKind.CALLBACK, member="Clock.set_timeout", token_repr=str(i))
        for i in range(count)
    ]
    return SettleReport(outcome=outcome, started_at=time.monotonic(), timeout_s=1.0,
                        increments=count, outstanding=origins)


class TestTokenRepr:

    def test_addresses_masked(self):
        text = sanitize_token_repr(object())
        assert "0x" not in text
        assert "<addr>" in text

    def test_long_repr_truncated(self):
        text = sanitize_token_repr("x" * 500, max_len=40)
        assert len(text) == 40
        assert text.endswith("...")

    def test_broken_repr(self):
        class Unprintable:
            def __repr__(self):
                raise RuntimeError("no repr")

        assert sanitize_token_repr(Unprintable()) == "<Unprintable>"


class TestCaptureOrigin:

    def test_location_points_at_caller(self, stack_config):
        origin = capture_origin(InterceptKind.TIMER, "Clock.clear", 3, stack_config)
        assert origin.location.startswith("test_report.py:"), f"Unexpected location {origin.location}"
        assert origin.stack_hash is not None and len(origin.stack_hash) == 16
        assert "test_location_points_at_caller" in origin.stack_trace

    def test_stack_depth_limits_frames(self):
        config = SettleGuardConfig(excluded_paths=(PACKAGE_DIR,), stack_depth=1)
        origin = capture_origin(InterceptKind.TIMER, "Clock.clear", 3, config)
        assert origin.stack_trace.count('File "') == 1

    def test_capture_disabled(self):
        config = SettleGuardConfig(capture_stacks=False)
        origin = capture_origin(InterceptKind.CALLBACK, "Clock.set_timeout", 1, config)
        assert origin.location == "unknown:0"
        assert origin.stack_trace is None

    def test_interceptor_origin_names_calling_test(self, settle_session, stack_config):
        from fakes import FakeClock

        clock = FakeClock()
        session = settle_session(clock, config=stack_config)
        session.register_callback("set_timeout")
        clock.set_timeout(lambda: None)

        [origin] = session.ledger.snapshot()
        assert origin.kind is InterceptKind.CALLBACK
        assert origin.member == "FakeClock.set_timeout"
        assert origin.location.startswith("test_report.py:")


class TestSettleReport:

    def test_summary_respects_limit(self):
        report = make_report(5)
        summary = report.summary(limit=2)
        lines = summary.splitlines()
        assert lines[0] == "5 operation(s) outstanding:"
        assert len(lines) == 4
        assert lines[-1].strip() == "... and 3 more"

    def test_to_json(self):
        report = make_report(1, outcome=Outcome.FAILED)
        data = json.loads(report.to_json())
        assert data["outcome"] == "failed"
        assert data["outstanding"][0]["member"] == "Clock.set_timeout"
        assert "stack_trace" not in data["outstanding"][0]

    def test_duration_uses_finish_time(self):
        report = make_report(0)
        report.finished_at = report.started_at + 0.5
        assert report.duration_s == pytest.approx(0.5)

    def test_timeout_error_message(self):
        report = make_report(3, outcome=Outcome.FAILED)
        error = SettleTimeoutError(0.25, report, limit=1)
        message = str(error)
        assert message.startswith("Asynchronous operations did not settle within 0.250s")
        assert "3 operation(s) outstanding:" in message
        assert "... and 2 more" in message
        assert len(error.outstanding) == 3

    def test_timeout_error_without_report(self):
        error = SettleTimeoutError(1.0)
        assert error.outstanding == []
        assert "\n" not in str(error)
