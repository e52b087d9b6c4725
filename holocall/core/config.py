#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Client configuration for holocall.

Resolution order for every field:
1. Explicit keyword override
2. ``HOLOCALL_*`` environment variable
3. Built-in default
"""

import os
import threading
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlparse

from .utils.exceptions import ConfigurationError
from .utils.logger import is_known_level

DEFAULT_HOST_ADDRESS = "ws://localhost:8888"
DEFAULT_APPLICATION_ID = "test-app"

_ENV_FIELDS: Dict[str, str] = {
    "host_address": "HOLOCALL_HOST_ADDRESS",
    "application_id": "HOLOCALL_APP_ID",
    "zome_name": "HOLOCALL_ZOME_NAME",
    "fn_name": "HOLOCALL_FN_NAME",
    "log_level": "HOLOCALL_LOG_LEVEL",
}

_SUPPORTED_SCHEMES = ("ws", "wss")


@dataclass(frozen=True)
class ClientConfig:
    """
    Everything one round trip needs: where to dial, which application to
    resolve, and which zome function to call with what payload.
    """

    host_address: str = DEFAULT_HOST_ADDRESS
    application_id: str = DEFAULT_APPLICATION_ID
    zome_name: Optional[str] = None
    fn_name: Optional[str] = None
    payload: Any = None
    cap_secret: Optional[bytes] = None
    log_level: str = "info"

    def validate(self) -> "ClientConfig":
        address = str(self.host_address or "").strip()
        if not address:
            raise ConfigurationError("host_address cannot be empty", field="host_address")

        scheme = urlparse(address).scheme.lower()
        if scheme not in _SUPPORTED_SCHEMES:
            raise ConfigurationError(
                "host_address must use one of {0}, got '{1}'".format(
                    "/".join(_SUPPORTED_SCHEMES), address
                ),
                field="host_address",
            )

        if not str(self.application_id or "").strip():
            raise ConfigurationError("application_id cannot be empty", field="application_id")

        if not is_known_level(self.log_level):
            raise ConfigurationError(
                "Unknown log level: {0}".format(self.log_level), field="log_level"
            )
        return self

    def with_overrides(self, **overrides: Any) -> "ClientConfig":
        """Return a validated copy with the non-``None`` overrides applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes).validate()

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ClientConfig":
        env = os.environ if environ is None else environ
        values: Dict[str, Any] = {}
        for field_name, env_name in _ENV_FIELDS.items():
            raw = env.get(env_name)
            if raw is not None and raw.strip():
                values[field_name] = raw.strip()
        return cls(**values)


def create_config(environ: Optional[Mapping[str, str]] = None, **overrides: Any) -> ClientConfig:
    """
    Build a validated config from the environment plus explicit overrides.
    """
    known = {item.name for item in fields(ClientConfig)}
    unknown = sorted(set(overrides) - known)
    if unknown:
        raise ConfigurationError(
            "Unknown configuration option(s): {0}".format(", ".join(unknown))
        )
    return ClientConfig.from_env(environ).with_overrides(**overrides)


_default_config: Optional[ClientConfig] = None
_default_config_lock = threading.Lock()


def get_config() -> ClientConfig:
    """
    Return the process-wide default config, built from the environment once.
    """
    global _default_config

    if _default_config is None:
        with _default_config_lock:
            if _default_config is None:
                _default_config = create_config()
    return _default_config


def reset_config() -> None:
    global _default_config

    with _default_config_lock:
        _default_config = None
