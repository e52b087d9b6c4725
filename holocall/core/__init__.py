#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
holocall core module exports (lazy-loaded).
"""

from importlib import import_module
from typing import Any, Dict, Tuple

_EXPORT_MAP: Dict[str, Tuple[str, str]] = {
    "RemoteCallClient": ("holocall.core.nodes", "RemoteCallClient"),
    "AppWebsocket": ("holocall.core.nodes", "AppWebsocket"),
    "ClientConfig": ("holocall.core.config", "ClientConfig"),
    "get_config": ("holocall.core.config", "get_config"),
    "create_config": ("holocall.core.config", "create_config"),
}

__all__ = sorted(_EXPORT_MAP.keys())


def __getattr__(name: str) -> Any:
    if name not in _EXPORT_MAP:
        raise AttributeError("module 'holocall.core' has no attribute '{0}'".format(name))

    module_name, attr_name = _EXPORT_MAP[name]
    module = import_module(module_name)
    value = getattr(module, attr_name)
    globals()[name] = value
    return value
