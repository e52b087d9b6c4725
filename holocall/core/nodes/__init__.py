#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Host-facing node components: the framed channel and the round-trip client.
"""

from .connection import AppWebsocket
from .client import InvocationState, RemoteCallClient

__all__ = ["AppWebsocket", "InvocationState", "RemoteCallClient"]
