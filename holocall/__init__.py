#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
holocall public API with lazy imports.

This avoids importing the websocket/msgpack stack unless the corresponding API
objects are actually requested.
"""

from importlib import import_module
from typing import Any, Dict, Tuple

from ._version import __version__

_EXPORT_MAP: Dict[str, Tuple[str, str]] = {
    "RemoteCallClient": ("holocall.core.nodes.client", "RemoteCallClient"),
    "InvocationState": ("holocall.core.nodes.client", "InvocationState"),
    "AppWebsocket": ("holocall.core.nodes.connection", "AppWebsocket"),
    "ClientConfig": ("holocall.core.config", "ClientConfig"),
    "create_config": ("holocall.core.config", "create_config"),
    "get_config": ("holocall.core.config", "get_config"),
    "CellId": ("holocall.core.data.models", "CellId"),
    "AppInfo": ("holocall.core.data.models", "AppInfo"),
    "CallZomeRequest": ("holocall.core.data.models", "CallZomeRequest"),
    "zome_function": ("holocall.decorators", "zome_function"),
    "HolocallError": ("holocall.core.utils.exceptions", "HolocallError"),
    "ConnectionError": ("holocall.core.utils.exceptions", "ConnectionError"),
    "ConnectionClosedError": ("holocall.core.utils.exceptions", "ConnectionClosedError"),
    "ResolutionError": ("holocall.core.utils.exceptions", "ResolutionError"),
    "InvocationError": ("holocall.core.utils.exceptions", "InvocationError"),
    "SerializationError": ("holocall.core.utils.exceptions", "SerializationError"),
    "TeardownError": ("holocall.core.utils.exceptions", "TeardownError"),
}

__all__ = ["__version__", *sorted(_EXPORT_MAP.keys())]


def __getattr__(name: str) -> Any:
    """
    Resolve public API symbols lazily.
    """
    if name not in _EXPORT_MAP:
        raise AttributeError("module 'holocall' has no attribute '{0}'".format(name))

    module_name, attr_name = _EXPORT_MAP[name]
    module = import_module(module_name)
    value = getattr(module, attr_name)
    globals()[name] = value
    return value
