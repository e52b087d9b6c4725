#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Concurrency primitives for holocall.
"""

import asyncio
from typing import Any


def create_loop_future() -> "asyncio.Future[Any]":
    """
    Create a future bound to the currently running event loop.
    """
    return asyncio.get_running_loop().create_future()
