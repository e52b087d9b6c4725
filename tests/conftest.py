#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
In-memory conductor used by the test suite.

``FakeConductor.connect`` has the same call shape as ``websockets.connect`` and
hands out ``FakeSocket`` objects that answer msgpack request frames the way a
conductor app interface does.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional

import msgpack
import pytest

from holocall.core.config import ClientConfig

DNA_A = b"\x84\x2d\x24dna-a"
AGENT_A = b"\x84\x20\x24agent-a"
DNA_B = b"\x84\x2d\x24dna-b"
AGENT_B = b"\x84\x20\x24agent-b"

_END_OF_STREAM = object()


def pack(value: Any) -> bytes:
    return msgpack.packb(value, use_bin_type=True)


def unpack(data: bytes) -> Any:
    return msgpack.unpackb(data, raw=False)


def cell(dna: bytes, agent: bytes, nick: str = "") -> Dict[str, Any]:
    return {"cell_id": [dna, agent], "cell_nick": nick}


class FakeSocket:
    def __init__(self, conductor: "FakeConductor") -> None:
        self._conductor = conductor
        self._inbox: "asyncio.Queue[Any]" = asyncio.Queue()
        self.frames: List[Dict[str, Any]] = []
        self.requests: List[Dict[str, Any]] = []
        self.close_calls = 0

    async def send(self, frame: bytes) -> None:
        outer = unpack(frame)
        inner = unpack(outer["data"])
        self.frames.append(outer)
        self.requests.append(inner)

        reply = self._conductor.respond(inner["type"], inner["data"])
        if reply is not None:
            self.push({"id": outer["id"], "type": "Response", "data": pack(reply)})

    def push(self, frame: Any) -> None:
        self._inbox.put_nowait(frame if isinstance(frame, (bytes, str)) else pack(frame))

    def push_raw(self, item: Any) -> None:
        self._inbox.put_nowait(item)

    def end_stream(self) -> None:
        self._inbox.put_nowait(_END_OF_STREAM)

    async def close(self) -> None:
        self.close_calls += 1
        self.end_stream()
        if self._conductor.close_error is not None:
            raise self._conductor.close_error

    def __aiter__(self) -> "FakeSocket":
        return self

    async def __anext__(self) -> Any:
        item = await self._inbox.get()
        if item is _END_OF_STREAM:
            raise StopAsyncIteration
        if isinstance(item, BaseException):
            raise item
        return item


class FakeConductor:
    def __init__(self) -> None:
        self.app_info: Optional[Dict[str, Any]] = {
            "installed_app_id": "test-app",
            "cell_data": [cell(DNA_A, AGENT_A, "numbers")],
            "active": True,
        }
        self.app_info_error: Optional[Dict[str, Any]] = None
        self.zome_output: Any = {"square_root": 2.6457513110645907}
        self.zome_error: Optional[Dict[str, Any]] = None
        self.hold_zome_calls = False
        self.connect_error: Optional[BaseException] = None
        self.zome_fault: Optional[BaseException] = None
        self.close_error: Optional[BaseException] = None
        self.dialed: List[str] = []
        self.sockets: List[FakeSocket] = []
        self.zome_calls: List[Dict[str, Any]] = []

    async def connect(self, address: str, max_size: Any = None) -> FakeSocket:
        self.dialed.append(address)
        if self.connect_error is not None:
            raise self.connect_error
        socket = FakeSocket(self)
        self.sockets.append(socket)
        return socket

    @property
    def socket(self) -> FakeSocket:
        assert len(self.sockets) == 1
        return self.sockets[0]

    def respond(self, request_type: str, data: Any) -> Optional[Dict[str, Any]]:
        if request_type == "app_info":
            if self.app_info_error is not None:
                return {"type": "error", "data": self.app_info_error}
            return {"type": "app_info", "data": self.app_info}

        if request_type == "zome_call_invocation":
            self.zome_calls.append(data)
            if self.zome_fault is not None:
                raise self.zome_fault
            if self.hold_zome_calls:
                return None
            if self.zome_error is not None:
                return {"type": "error", "data": self.zome_error}
            return {"type": "zome_call_invocation", "data": pack(self.zome_output)}

        return {"type": "error", "data": {"type": "unknown_request", "data": request_type}}


@pytest.fixture
def conductor() -> FakeConductor:
    return FakeConductor()


@pytest.fixture
def squareroot_config() -> ClientConfig:
    return ClientConfig(
        host_address="ws://localhost:8888",
        application_id="test-app",
        zome_name="squareroots",
        fn_name="square_root",
        payload={"number": 7},
    )
