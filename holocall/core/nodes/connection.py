#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Framed request/response channel to a conductor app interface.

Frames are msgpack documents sent as binary WebSocket messages:

    outbound  {"id": n, "type": "Request",  "data": msgpack({"type": tag, "data": body})}
    inbound   {"id": n, "type": "Response", "data": msgpack({"type": tag | "error", "data": ...})}
    inbound   {"type": "Signal", "data": msgpack(signal)}

A background reader task matches responses to pending requests by id.
Closing the channel fails every outstanding request with
``ConnectionClosedError`` so no caller is left waiting.
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional

import websockets
from websockets.exceptions import ConnectionClosed

from ..data.models import AppInfo, CallZomeRequest, HostError
from ..data.serialize import decode, encode
from ..utils.concurrency import create_loop_future
from ..utils.exceptions import (
    ConnectionClosedError,
    ExceptionTranslator,
    HolocallError,
    HostRequestError,
    InvocationError,
    SerializationError,
)
from ..utils.logger import ModernLogger

APP_INFO = "app_info"
ZOME_CALL = "zome_call_invocation"
ERROR = "error"

SignalHandler = Callable[[Any], None]
Connector = Callable[..., Awaitable[Any]]


class AppWebsocket(ModernLogger):
    """
    One open channel to the conductor. Not reusable after :meth:`close`.
    """

    def __init__(
        self,
        address: str,
        socket: Any,
        signal_handler: Optional[SignalHandler] = None,
        log_level: str = "info",
    ) -> None:
        ModernLogger.__init__(self, name="AppWebsocket", level=log_level)
        self.address = address
        self._socket = socket
        self._signal_handler = signal_handler
        self._next_request_id = 0
        self._pending: Dict[int, "asyncio.Future[Any]"] = {}
        self._closed = False
        self._reader_stopped = False
        self._reader_task: Optional["asyncio.Task[None]"] = None

    @classmethod
    async def connect(
        cls,
        address: str,
        *,
        signal_handler: Optional[SignalHandler] = None,
        log_level: str = "info",
        connector: Optional[Connector] = None,
    ) -> "AppWebsocket":
        """
        Open a channel to ``address``; suspends until the handshake completes.

        No timeout is applied here.
        """
        dial = connector or websockets.connect
        try:
            socket = await dial(address, max_size=None)
        except Exception as e:
            raise ExceptionTranslator.as_connection_error(
                e, address=address, message="Could not connect to conductor"
            ) from e

        channel = cls(address, socket, signal_handler=signal_handler, log_level=log_level)
        channel._reader_task = asyncio.get_running_loop().create_task(channel._read_loop())
        channel.info(f"Connected to conductor at {address}")
        return channel

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    async def request(self, request_type: str, data: Any) -> Dict[str, Any]:
        """
        Send one request and wait for its response envelope ``{"type", "data"}``.
        """
        if self._closed:
            raise ConnectionClosedError(
                "Connection is closed; open a new one", address=self.address
            )
        if self._reader_stopped:
            raise ConnectionClosedError(
                "Connection reader has stopped; open a new connection",
                address=self.address,
            )

        request_id = self._next_request_id
        self._next_request_id += 1

        frame = encode(
            {
                "id": request_id,
                "type": "Request",
                "data": encode({"type": request_type, "data": data}),
            }
        )

        future = create_loop_future()
        self._pending[request_id] = future
        try:
            try:
                await self._socket.send(frame)
            except ConnectionClosed as e:
                raise ConnectionClosedError(
                    "Connection closed while sending '{0}' request".format(request_type),
                    address=self.address,
                    cause=e,
                ) from e
            response = await future
        finally:
            self._pending.pop(request_id, None)

        if not isinstance(response, Mapping) or "type" not in response:
            raise SerializationError(
                message="Malformed response to '{0}' request".format(request_type),
                operation="decode",
                data_type=type(response).__name__,
            )
        return dict(response)

    async def app_info(self, installed_app_id: str) -> AppInfo:
        response = await self.request(APP_INFO, {"installed_app_id": installed_app_id})
        if response["type"] == ERROR:
            host_error = HostError.from_wire(response.get("data"))
            raise HostRequestError(
                "app_info failed for '{0}': {1}".format(installed_app_id, host_error.describe()),
                request_type=APP_INFO,
                cause_type=host_error.error_type,
                cause_detail=host_error.detail,
            )
        self._expect_type(response, APP_INFO)

        try:
            return AppInfo.from_wire(response.get("data"), installed_app_id=installed_app_id)
        except ValueError as e:
            raise ExceptionTranslator.as_serialization_error(
                e, operation="decode", data_type="AppInfo"
            ) from e

    async def call_zome(self, request: CallZomeRequest) -> Any:
        """
        Run one zome call and return the decoded function output.
        """
        response = await self.request(ZOME_CALL, request.to_wire(encode(request.payload)))
        if response["type"] == ERROR:
            host_error = HostError.from_wire(response.get("data"))
            raise InvocationError(
                "{0}/{1} failed: {2}".format(
                    request.zome_name, request.fn_name, host_error.describe()
                ),
                zome_name=request.zome_name,
                fn_name=request.fn_name,
                cause_type=host_error.error_type,
                cause_detail=host_error.detail,
            )
        self._expect_type(response, ZOME_CALL)
        return decode(response.get("data"))

    async def close(self) -> None:
        """
        Release the channel and fail any request still waiting for a reply.
        """
        if self._closed:
            return
        self._closed = True

        self._fail_pending(
            ConnectionClosedError("Connection closed by client", address=self.address)
        )

        try:
            await self._socket.close()
        except Exception as e:
            raise ExceptionTranslator.as_teardown_error(e, address=self.address) from e
        finally:
            await self._stop_reader()

        self.info(f"Closed connection to {self.address}")

    async def _stop_reader(self) -> None:
        task = self._reader_task
        self._reader_task = None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _read_loop(self) -> None:
        try:
            async for message in self._socket:
                self._handle_message(message)
        except ConnectionClosed as e:
            self._fail_pending(
                ConnectionClosedError(
                    "Conductor closed the connection: {0}".format(e),
                    address=self.address,
                    cause=e,
                )
            )
        except Exception as e:
            self.error(f"Connection reader failed: {e}", exc_info=True)
            self._fail_pending(
                ExceptionTranslator.as_connection_error(
                    e, address=self.address, message="Connection reader failed"
                )
            )
        else:
            self._fail_pending(
                ConnectionClosedError("Conductor closed the connection", address=self.address)
            )
        finally:
            self._reader_stopped = True

    def _handle_message(self, message: Any) -> None:
        if isinstance(message, str):
            self.warning("Ignoring text frame from conductor")
            return

        try:
            frame = decode(message)
        except SerializationError as e:
            self.warning(f"Ignoring undecodable frame: {e}")
            return

        if not isinstance(frame, Mapping):
            self.warning(f"Ignoring frame that is not an object: {type(frame).__name__}")
            return

        frame_type = frame.get("type")
        if frame_type == "Response":
            self._resolve(frame)
        elif frame_type == "Signal":
            self._dispatch_signal(frame.get("data"))
        else:
            self.warning(f"Ignoring unknown frame type: {frame_type!r}")

    def _resolve(self, frame: Mapping[str, Any]) -> None:
        request_id = frame.get("id")
        future = self._pending.get(request_id)
        if future is None or future.done():
            self.warning(f"Ignoring response for unknown request id {request_id!r}")
            return

        try:
            future.set_result(decode(frame.get("data")))
        except SerializationError as e:
            future.set_exception(e)

    def _dispatch_signal(self, data: Any) -> None:
        try:
            signal = decode(data) if isinstance(data, (bytes, bytearray)) else data
        except SerializationError as e:
            self.warning(f"Ignoring undecodable signal: {e}")
            return

        self.debug("Received signal from conductor")
        if self._signal_handler is None:
            return
        try:
            self._signal_handler(signal)
        except Exception as e:
            self.warning(f"Signal handler failed: {e}", exc_info=True)

    def _fail_pending(self, error: HolocallError) -> None:
        for future in self._pending.values():
            if not future.done():
                future.set_exception(error)

    @staticmethod
    def _expect_type(response: Mapping[str, Any], expected: str) -> None:
        if response.get("type") != expected:
            raise SerializationError(
                message="Expected '{0}' response, got '{1}'".format(
                    expected, response.get("type")
                ),
                operation="decode",
                data_type=str(response.get("type")),
            )


__all__ = ["AppWebsocket"]
