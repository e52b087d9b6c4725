#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Decorator helpers for declaring zome functions at the call site.
"""

import asyncio
import functools
from typing import Any, Callable, Optional, Type, TypeVar, Union, cast

from .core.config import ClientConfig, create_config
from .core.nodes.client import USE_CONFIG_PAYLOAD, RemoteCallClient

T = TypeVar("T", bound=Callable[..., Any])


class ZomeFunction:
    """
    Callable wrapper that turns a local stub into one conductor round trip.

    The stub's single argument is the payload; when it is omitted the
    configured ``payload`` is sent. The stub body never runs; it only
    documents the input shape for readers and static analysis.
    """

    client_factory: Callable[..., RemoteCallClient] = staticmethod(RemoteCallClient)

    def __init__(
        self,
        func: Callable[..., Any],
        zome_name: str,
        fn_name: Optional[str] = None,
        output_type: Optional[Type[Any]] = None,
        config: Optional[ClientConfig] = None,
        host_address: Optional[str] = None,
        application_id: Optional[str] = None,
    ) -> None:
        self.func = func
        self.zome_name = zome_name
        self.fn_name = fn_name or func.__name__
        self.output_type = output_type
        self._config = config
        self.host_address = host_address
        self.application_id = application_id
        functools.update_wrapper(self, func)

    def _resolve_config(self) -> ClientConfig:
        """
        Explicit config wins; otherwise build one from the environment.
        """
        base = self._config if self._config is not None else create_config()
        return base.with_overrides(
            host_address=self.host_address,
            application_id=self.application_id,
            zome_name=self.zome_name,
            fn_name=self.fn_name,
        )

    async def _invoke(self, payload: Any = USE_CONFIG_PAYLOAD) -> Any:
        # A fresh client per call: each call owns its own connection.
        client = self.client_factory(self._resolve_config())
        return await client.run(payload, output_type=self.output_type)

    def __call__(self, payload: Any = USE_CONFIG_PAYLOAD) -> Any:
        """
        Sync-friendly call entry.

        Behavior:
        - No running loop: blocks until completion via asyncio.run.
        - Running loop: returns coroutine for caller to await.
        """
        coroutine = self._invoke(payload)
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(coroutine)
        return coroutine

    async def __call_async__(self, payload: Any = USE_CONFIG_PAYLOAD) -> Any:
        return await self._invoke(payload)


def zome_function(
    func: Optional[Callable[..., Any]] = None,
    *,
    zome_name: Optional[str] = None,
    fn_name: Optional[str] = None,
    output_type: Optional[Type[Any]] = None,
    config: Optional[ClientConfig] = None,
    host_address: Optional[str] = None,
    application_id: Optional[str] = None,
    async_func: bool = False,
) -> Union[Callable[[T], T], T]:
    """
    Declare a zome function proxy.

    Supports ``@zome_function(zome_name=...)``; the bare ``@zome_function``
    form takes the zome name from ``HOLOCALL_ZOME_NAME``/``config``.
    """

    def decorator(target: T) -> T:
        resolved_zome = zome_name or (config.zome_name if config is not None else None)
        if not resolved_zome:
            resolved_zome = create_config().zome_name
        if not resolved_zome:
            raise ValueError(
                "zome_name is required for '{0}'".format(getattr(target, "__name__", target))
            )

        proxy = ZomeFunction(
            target,
            zome_name=resolved_zome,
            fn_name=fn_name,
            output_type=output_type,
            config=config,
            host_address=host_address,
            application_id=application_id,
        )

        if async_func:

            @functools.wraps(target)
            async def async_wrapper(payload: Any = USE_CONFIG_PAYLOAD) -> Any:
                return await proxy.__call_async__(payload)

            async_wrapper.zome_function = proxy  # type: ignore[attr-defined]
            return cast(T, async_wrapper)

        @functools.wraps(target)
        def sync_wrapper(payload: Any = USE_CONFIG_PAYLOAD) -> Any:
            return proxy(payload)

        sync_wrapper.zome_function = proxy  # type: ignore[attr-defined]
        return cast(T, sync_wrapper)

    if func is not None and callable(func):
        return decorator(cast(T, func))
    return decorator
