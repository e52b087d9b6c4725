#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Wire models and codec for conductor requests.
"""

from .models import AppInfo, CallZomeRequest, CellId, HostError, InstalledCell
from .serialize import coerce_output, decode, encode, normalize_payload

__all__ = [
    "AppInfo",
    "CallZomeRequest",
    "CellId",
    "HostError",
    "InstalledCell",
    "coerce_output",
    "decode",
    "encode",
    "normalize_payload",
]
