#!/usr/bin/env python3
"""
Interceptor primitive tests: raw namespace capture and restoration.
"""

from types import SimpleNamespace

import pytest

from settleguard import CompletionLedger
from settleguard.interceptors import (
    MISSING,
    CallbackInterceptor,
    DeferredValueInterceptor,
    InterceptionRecord,
    MethodInterceptor,
    TimerHandlerInterceptor,
    own_entry,
)
from settleguard.report import InterceptKind

from fakes import Connection, Deferred, FakeClock


@pytest.fixture
def ledger(loop, config):
    ledger = CompletionLedger(lambda error: None, timeout_s=1.0, loop=loop, config=config)
    yield ledger
    ledger.fail(RuntimeError("teardown"))


class Base:
    def greet(self):
        return "base"

    @property
    def name(self):
        return "base"


class Child(Base):
    pass


class TestNamespaceCapture:

    def test_own_entry_returns_raw_descriptor(self):
        assert isinstance(own_entry(Base, "name"), property)
        assert own_entry(Base, "greet") is Base.__dict__["greet"]

    def test_inherited_member_is_missing(self):
        assert own_entry(Child, "greet") is MISSING

    def test_object_without_dict(self):
        assert own_entry(object(), "anything") is MISSING

    def test_missing_is_falsy(self):
        assert not MISSING
        assert repr(MISSING) == "MISSING"


class TestInterceptionRecord:

    def test_restore_reassigns_original(self):
        target = SimpleNamespace(run=len)
        record = InterceptionRecord(InterceptKind.CALLBACK, target, "run", len)
        target.run = print
        record.restore()
        assert target.run is len

    def test_restore_deletes_when_missing(self):
        class Local(Base):
            pass

        record = InterceptionRecord(InterceptKind.METHOD, Local, "greet", MISSING)
        Local.greet = lambda self: "patched"
        record.restore()
        assert "greet" not in Local.__dict__
        assert Local().greet() == "base"

    def test_restore_missing_twice_is_safe(self):
        class Local(Base):
            pass

        record = InterceptionRecord(InterceptKind.METHOD, Local, "greet", MISSING)
        record.restore()
        record.restore()
        assert "greet" not in Local.__dict__

    def test_cleanup_runs_after_restore(self):
        target = SimpleNamespace(run=len)
        seen = []
        record = InterceptionRecord(InterceptKind.PROPERTY, target, "run", len,
                                    cleanup=lambda: seen.append(target.run))
        target.run = print
        record.restore()
        assert seen == [len], "Cleanup must observe the restored member"

    def test_describe(self):
        record = InterceptionRecord(InterceptKind.TIMER, FakeClock(), "clear_timeout", MISSING)
        assert record.describe() == "timer FakeClock.clear_timeout"


class TestInstall:

    def test_callback_interceptor_preserves_metadata(self, ledger, config):
        clock = FakeClock()
        [record] = CallbackInterceptor(clock, "set_timeout", ledger, config).install()

        assert record.original is MISSING
        assert clock.set_timeout.__name__ == "set_timeout"
        assert clock.set_timeout.__wrapped__.__func__ is FakeClock.set_timeout
        record.restore()

    def test_timer_interceptor_without_arguments(self, ledger, config):
        target = SimpleNamespace(flush=lambda: "flushed")
        [record] = TimerHandlerInterceptor(target, "flush", ledger, config).install()
        assert target.flush() == "flushed"
        record.restore()

    def test_deferred_interceptor_members(self, ledger, config):
        interceptor = DeferredValueInterceptor(Deferred, ledger, config)
        assert interceptor.members == ("then", "catch")
        records = interceptor.install()
        try:
            assert [r.member for r in records] == ["then", "catch"]
        finally:
            for record in reversed(records):
                record.restore()
        assert Deferred.__dict__["then"].__name__ == "then"
        assert not hasattr(Deferred.__dict__["then"], "__wrapped__")

    def test_deferred_then_returning_other_type(self, ledger, config):
        class Loose:
            def then(self, on_success=None, on_error=None):
                return None

            def catch(self, on_error=None):
                return None

        records = DeferredValueInterceptor(Loose, ledger, config).install()
        try:
            value = Loose()
            assert value.then(print) is None
            assert ledger.increments == 1
            assert ledger.outstanding_count == 0, "Unobservable continuation must not stay outstanding"
        finally:
            for record in reversed(records):
                record.restore()

    def test_method_interceptor_repr(self, ledger, config):
        interceptor = MethodInterceptor(Connection, "close", ledger, config)
        assert repr(interceptor) == "MethodInterceptor(Connection.close)"
        assert interceptor.qualified_name == "Connection.close"
