#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Utility exports for holocall core.
"""

from .logger import ModernLogger
from .exceptions import *  # noqa: F401,F403
from .exceptions import ExceptionFormatter, ExceptionTranslator
from .concurrency import create_loop_future

format_exception_summary = ExceptionFormatter.format_exception_summary

__all__ = [
    "ModernLogger",
    "ExceptionFormatter",
    "ExceptionTranslator",
    "create_loop_future",
    "format_exception_summary",
]
