#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Round-trip zome call client.

``RemoteCallClient`` owns exactly one connection lifecycle:

    UNCONNECTED -> CONNECTING -> CONNECTED -> CONTEXT_RESOLVED -> INVOKING
        -> SUCCEEDED | FAILED -> CLOSED

The execution context is always the first cell the conductor reports for the
configured application, and every call is attributed to that cell's agent.
Once a connection has been opened it is closed on every exit path of
:meth:`RemoteCallClient.run`, including failures and cancellation. A client
instance is not reusable after it reaches ``CLOSED``.

Usage Example:
    >>> config = create_config(zome_name="squareroots", fn_name="square_root")
    >>> client = RemoteCallClient(config)
    >>> asyncio.run(client.run({"number": 7}))
    {'square_root': 2.6457513110645907}
"""

from enum import Enum
from typing import Any, Optional, Type, TypeVar

from ..config import ClientConfig, get_config
from ..data.models import CallZomeRequest, CellId
from ..data.serialize import coerce_output, normalize_payload
from ..utils.exceptions import (
    ConfigurationError,
    ConnectionClosedError,
    ResolutionError,
    ResolutionErrorKind,
    TeardownError,
)
from ..utils.logger import ModernLogger
from .connection import AppWebsocket, Connector, SignalHandler

T = TypeVar("T")

# Passed as ``payload`` to take the value from ``ClientConfig.payload``.
USE_CONFIG_PAYLOAD = object()


class InvocationState(Enum):
    """
    Lifecycle states of one invocation attempt.
    """
    UNCONNECTED = "unconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    CONTEXT_RESOLVED = "context_resolved"
    INVOKING = "invoking"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CLOSED = "closed"


class RemoteCallClient(ModernLogger):
    """
    Connects to a conductor, resolves a cell and performs one zome call.
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        *,
        connector: Optional[Connector] = None,
        signal_handler: Optional[SignalHandler] = None,
    ) -> None:
        self.config = (config or get_config()).validate()
        ModernLogger.__init__(self, name="RemoteCallClient", level=self.config.log_level)
        self._connector = connector
        self._signal_handler = signal_handler
        self._connection: Optional[AppWebsocket] = None
        self._cell_id: Optional[CellId] = None
        self._state = InvocationState.UNCONNECTED

    @property
    def state(self) -> InvocationState:
        return self._state

    @property
    def cell_id(self) -> Optional[CellId]:
        """The cell resolved by the last successful :meth:`resolve_context`."""
        return self._cell_id

    @property
    def connection(self) -> Optional[AppWebsocket]:
        return self._connection

    def _set_state(self, new_state: InvocationState) -> None:
        old_state = self._state
        self._state = new_state
        if old_state != new_state:
            self.debug(f"Invocation state changed: {old_state.value} -> {new_state.value}")

    def _fail(self) -> None:
        self._set_state(InvocationState.FAILED)
        if self._connection is None:
            self._set_state(InvocationState.CLOSED)

    def _require_connection(self) -> AppWebsocket:
        if self._connection is None:
            if self._state == InvocationState.CLOSED:
                raise ConnectionClosedError(
                    "Client is closed; create a new RemoteCallClient",
                    address=self.config.host_address,
                )
            raise RuntimeError("Client is not connected; call connect() first")
        return self._connection

    async def connect(self) -> AppWebsocket:
        """
        Open the channel to ``config.host_address``.

        Raises:
            ConnectionError: If the conductor is unreachable or the handshake fails.
        """
        if self._state != InvocationState.UNCONNECTED:
            raise RuntimeError(f"Client cannot connect from state: {self._state.value}")

        self._set_state(InvocationState.CONNECTING)
        try:
            self._connection = await AppWebsocket.connect(
                self.config.host_address,
                signal_handler=self._signal_handler,
                log_level=self.config.log_level,
                connector=self._connector,
            )
        except Exception:
            self._fail()
            raise

        self._set_state(InvocationState.CONNECTED)
        return self._connection

    async def resolve_context(self, application_id: Optional[str] = None) -> CellId:
        """
        Return the first cell of the installed application.

        Raises:
            ResolutionError: If the application reports no cells (or is not installed).
            ConfigurationError: If ``application_id`` is blank.
        """
        connection = self._require_connection()
        app_id = self.config.application_id if application_id is None else application_id
        if not str(app_id).strip():
            self._fail()
            raise ConfigurationError("application_id cannot be empty", field="application_id")

        try:
            app_info = await connection.app_info(app_id)
        except Exception:
            self._fail()
            raise

        cell_id = app_info.first_cell_id()
        if cell_id is None:
            self._fail()
            raise ResolutionError(
                "No app info found: application '{0}' has no cells".format(app_id),
                application_id=app_id,
                kind=ResolutionErrorKind.NO_CONTEXT_FOUND,
            )

        if len(app_info.cell_data) > 1:
            self.debug(
                f"Application '{app_id}' has {len(app_info.cell_data)} cells; using the first"
            )
        self._cell_id = cell_id
        self._set_state(InvocationState.CONTEXT_RESOLVED)
        return cell_id

    async def invoke(
        self,
        cell_id: CellId,
        zome_name: str,
        fn_name: str,
        payload: Any = None,
        *,
        cap: Optional[bytes] = None,
        output_type: Optional[Type[T]] = None,
    ) -> Any:
        """
        Call ``zome_name/fn_name`` in ``cell_id`` and return its output.

        Provenance is always ``cell_id``'s agent key. ``cap`` falls back to
        ``config.cap_secret``; ``None`` means the unrestricted capability.
        When ``output_type`` is given the decoded output is shaped into it.

        Raises:
            InvocationError: If the conductor or the zome reports a failure.
            SerializationError: If the payload or output does not fit the wire/declared shape.
            ConfigurationError: If ``cell_id`` is missing or a name is blank.
        """
        connection = self._require_connection()
        if cell_id is None:
            self._fail()
            raise ConfigurationError(
                "cell_id is required; resolve it with resolve_context()", field="cell_id"
            )

        try:
            request = CallZomeRequest.for_cell(
                cell_id,
                zome_name,
                fn_name,
                payload=normalize_payload(payload),
                cap=cap if cap is not None else self.config.cap_secret,
            )
        except ValueError as e:
            self._fail()
            raise ConfigurationError(str(e), cause=e) from e

        self._set_state(InvocationState.INVOKING)
        self.info(f"Calling {request.zome_name}/{request.fn_name}")
        try:
            output = await connection.call_zome(request)
            result = coerce_output(output, output_type)
        except Exception:
            self._fail()
            raise

        self._set_state(InvocationState.SUCCEEDED)
        return result

    async def close(self) -> None:
        """
        Release the channel. Outstanding calls fail with ``ConnectionClosedError``.

        Raises:
            TeardownError: If the underlying socket fails to close.
        """
        connection = self._connection
        if connection is None:
            return
        self._connection = None
        try:
            await connection.close()
        finally:
            self._set_state(InvocationState.CLOSED)

    async def _teardown(self) -> None:
        # A teardown failure is reported but never replaces the call's outcome.
        try:
            await self.close()
        except TeardownError as e:
            self.error(f"Teardown failed: {e}")

    async def run(
        self,
        payload: Any = USE_CONFIG_PAYLOAD,
        *,
        output_type: Optional[Type[T]] = None,
        zome_name: Optional[str] = None,
        fn_name: Optional[str] = None,
    ) -> Any:
        """
        Perform one full round trip: connect, resolve, invoke, close.

        ``payload``, ``zome_name`` and ``fn_name`` default to the config values.
        Returns the zome output or raises the first error encountered.
        """
        zome = zome_name or self.config.zome_name
        fn = fn_name or self.config.fn_name
        if not zome:
            raise ConfigurationError("zome_name is not configured", field="zome_name")
        if not fn:
            raise ConfigurationError("fn_name is not configured", field="fn_name")
        if payload is USE_CONFIG_PAYLOAD:
            payload = self.config.payload

        await self.connect()
        try:
            cell_id = await self.resolve_context()
            return await self.invoke(
                cell_id, zome, fn, payload, output_type=output_type
            )
        finally:
            await self._teardown()

    async def __aenter__(self) -> "RemoteCallClient":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        await self._teardown()


__all__ = ["InvocationState", "RemoteCallClient", "USE_CONFIG_PAYLOAD"]
