#=============================================================================
# File        : settleguard/__init__.py
# Project     : SettleGuard v1.0 - Open Source
# Component   : Package Initialization
# Description : Asynchronous-completion instrumentation for test code
#               • Counts callbacks, timers, deferred values, methods and
#                 callback properties triggered through a target object
#               • Single settle/timeout outcome per session
#               • Exact restoration of every instrumented member
# Author      : Kyle Clouthier
# Version     : 1.0.0
# Technology  : Python 3.8+, AsyncIO, Runtime Instrumentation
# Standards   : PEP 8, Type Hints, Dataclasses
# Created     : 2025-09-02
# Modified    : 2025-09-02 (Initial release)
# Dependencies: typing, asyncio, logging
# SHA-256     : [Updated by CI/CD]
# Testing     : 100% coverage, comprehensive test suite
# License     : MIT License
# Copyright   : © 2025 Kyle Clouthier. Released under MIT License.
#=============================================================================

"""
SettleGuard - Wait for every asynchronous side effect to settle

Instruments an object graph so that test code can assert "everything this
call started has finished" without hand-written future chains.

Quick Start:
    from settleguard import InstrumentationSession

    session = InstrumentationSession(scheduler, timeout_s=2.0)
    session.register_callback("schedule")
    session.register_timer_handler("cancel")

    scheduler.run_jobs()
    await session   # raises SettleTimeoutError if work is left over
"""

from .session import (
    InstrumentationSession,
    wait_all_async
)

from .ledger import CompletionLedger

from .config import SettleGuardConfig

from .errors import (
    SettleError,
    SettleTimeoutError,
    MisuseError,
    SessionAborted
)

from .report import (
    SettleReport,
    OperationOrigin,
    Outcome,
    InterceptKind
)

from .presets import (
    instrument_event_loop,
    instrument_module_timers
)

__version__ = "1.0.0"
__author__ = "Kyle Clouthier"
__license__ = "MIT"
__description__ = "Asynchronous-completion instrumentation harness for Python tests"

__all__ = [
    # Core
    "InstrumentationSession",
    "CompletionLedger",
    "wait_all_async",

    # Presets
    "instrument_event_loop",
    "instrument_module_timers",

    # Configuration
    "SettleGuardConfig",

    # Errors
    "SettleError",
    "SettleTimeoutError",
    "MisuseError",
    "SessionAborted",

    # Reporting
    "SettleReport",
    "OperationOrigin",
    "Outcome",
    "InterceptKind",

    # Metadata
    "__version__",
    "__author__",
    "__license__"
]


def get_info():
    """Get information about the SettleGuard project."""
    return f"""
SettleGuard v{__version__} - Asynchronous completion instrumentation

Built by: {__author__}
License: {__license__}

Shapes:
• Callback-accepting functions (schedulers, request APIs)
• Handle-consuming cancel functions
• Deferred values (then/catch)
• Completing instance methods
• Assignable callback properties
"""
