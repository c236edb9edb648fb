#!/usr/bin/env python3
"""
Pytest plugin tests: fixtures and teardown restoration.
"""

from settleguard.pytest_plugin import SessionFactory

from fakes import FakeClock


class TestSessionFactory:

    def test_factory_binds_loop(self, settle_session, settle_loop):
        session = settle_session(FakeClock(), timeout_s=1.0)
        assert session.ledger.loop is settle_loop
        assert session in settle_session.sessions

    def test_run_drives_loop_until_settled(self, settle_session, settle_loop):
        session = settle_session(settle_loop, timeout_s=1.0)
        session.register_callback("call_later", arg_position=1)
        settle_loop.call_later(0.01, lambda: None)
        settle_session.run(session)
        assert session.is_settled

    def test_close_aborts_pending_sessions(self, settle_loop):
        factory = SessionFactory(settle_loop)
        clock = FakeClock()
        session = factory(clock, timeout_s=1.0)
        session.register_callback("set_timeout")
        clock.set_timeout(lambda: None)

        factory.close()
        assert session.is_settled
        assert "set_timeout" not in vars(clock), "Teardown must restore pending sessions"

    def test_close_skips_settled_sessions(self, settle_loop):
        factory = SessionFactory(settle_loop)
        session = factory(FakeClock(), timeout_s=1.0)
        session.resolve_if_idle()
        factory.close()
        assert session.ledger.error is None
