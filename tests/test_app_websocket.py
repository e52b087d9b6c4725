#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Tests for conductor frame handling in AppWebsocket.
"""

import asyncio

import pytest
from websockets.exceptions import ConnectionClosedError as WebsocketClosedError

from holocall.core.data.models import AppInfo, CallZomeRequest, CellId
from holocall.core.nodes.connection import AppWebsocket
from holocall.core.utils.exceptions import (
    ConnectionClosedError,
    HostRequestError,
    SerializationError,
)

from conftest import AGENT_A, DNA_A, pack


async def _open(conductor, **kwargs) -> AppWebsocket:
    return await AppWebsocket.connect(
        "ws://localhost:8888", connector=conductor.connect, **kwargs
    )


def test_request_ids_start_at_zero_and_increase(conductor):
    async def run_case():
        channel = await _open(conductor)
        await channel.app_info("test-app")
        await channel.app_info("test-app")
        await channel.close()

    asyncio.run(run_case())

    frames = conductor.socket.frames
    assert [frame["id"] for frame in frames] == [0, 1]
    assert all(frame["type"] == "Request" for frame in frames)


def test_app_info_is_parsed_into_cells(conductor):
    async def run_case():
        channel = await _open(conductor)
        try:
            return await channel.app_info("test-app")
        finally:
            await channel.close()

    info = asyncio.run(run_case())

    assert isinstance(info, AppInfo)
    assert info.installed_app_id == "test-app"
    assert info.active is True
    assert info.first_cell_id() == CellId(DNA_A, AGENT_A)
    assert info.cell_data[0].cell_nick == "numbers"


def test_app_info_host_error_is_host_request_error(conductor):
    conductor.app_info_error = {"type": "internal_error", "data": "app interface down"}

    async def run_case():
        channel = await _open(conductor)
        try:
            await channel.app_info("test-app")
        finally:
            await channel.close()

    with pytest.raises(HostRequestError) as exc_info:
        asyncio.run(run_case())

    assert exc_info.value.request_type == "app_info"
    assert exc_info.value.cause_detail == "app interface down"


def test_call_zome_returns_decoded_output(conductor):
    conductor.zome_output = {"booking_day": "2021-08-12"}

    async def run_case():
        channel = await _open(conductor)
        request = CallZomeRequest.for_cell(
            CellId(DNA_A, AGENT_A), "pcrtests", "book_pcrtest", {"patientinfo": "ab"}
        )
        try:
            return await channel.call_zome(request)
        finally:
            await channel.close()

    assert asyncio.run(run_case()) == {"booking_day": "2021-08-12"}


def test_response_with_wrong_type_is_serialization_error(conductor):
    async def run_case():
        channel = await _open(conductor)
        request = CallZomeRequest.for_cell(CellId(DNA_A, AGENT_A), "zome", "fn")
        conductor.respond = lambda request_type, data: {"type": "app_info", "data": None}
        try:
            await channel.call_zome(request)
        finally:
            await channel.close()

    with pytest.raises(SerializationError):
        asyncio.run(run_case())


def test_signals_reach_handler_without_resolving_requests(conductor):
    signals = []

    async def run_case():
        channel = await _open(conductor, signal_handler=signals.append)
        conductor.socket.push({"type": "Signal", "data": pack({"App": "ping"})})
        conductor.socket.push({"type": "Heartbeat"})
        conductor.socket.push_raw("not binary")
        conductor.socket.push_raw(b"\xc1")
        info = await channel.app_info("test-app")
        await channel.close()
        return info

    info = asyncio.run(run_case())

    assert signals == [{"App": "ping"}]
    assert info.first_cell_id() == CellId(DNA_A, AGENT_A)


def test_response_for_unknown_id_is_ignored(conductor):
    async def run_case():
        channel = await _open(conductor)
        conductor.socket.push({"id": 99, "type": "Response", "data": pack({"type": "app_info"})})
        info = await channel.app_info("test-app")
        await channel.close()
        return info

    assert asyncio.run(run_case()).installed_app_id == "test-app"


def test_abnormal_close_fails_pending_requests(conductor):
    conductor.hold_zome_calls = True

    async def run_case():
        channel = await _open(conductor)
        request = CallZomeRequest.for_cell(CellId(DNA_A, AGENT_A), "zome", "fn")
        pending = asyncio.ensure_future(channel.call_zome(request))
        while channel.pending_count == 0:
            await asyncio.sleep(0)
        conductor.socket.push_raw(WebsocketClosedError(None, None))
        try:
            await pending
        finally:
            await channel.close()

    with pytest.raises(ConnectionClosedError):
        asyncio.run(run_case())


def test_request_after_close_is_rejected(conductor):
    async def run_case():
        channel = await _open(conductor)
        await channel.close()
        await channel.close()
        assert channel.closed is True
        await channel.app_info("test-app")

    with pytest.raises(ConnectionClosedError):
        asyncio.run(run_case())

    assert conductor.socket.close_calls == 1


def test_failing_signal_handler_does_not_stop_reader(conductor):
    def handler(signal):
        raise ValueError("bad signal")

    async def run_case():
        channel = await _open(conductor, signal_handler=handler)
        conductor.socket.push({"type": "Signal", "data": pack({"App": "ping"})})
        try:
            return await asyncio.wait_for(channel.app_info("test-app"), 1.0)
        finally:
            await channel.close()

    info = asyncio.run(run_case())

    assert info.first_cell_id() == CellId(DNA_A, AGENT_A)


def test_request_after_reader_stops_fails_immediately(conductor):
    async def run_case():
        channel = await _open(conductor)
        conductor.socket.end_stream()
        while not channel._reader_task.done():
            await asyncio.sleep(0)
        try:
            await asyncio.wait_for(channel.app_info("test-app"), 1.0)
        finally:
            await channel.close()

    with pytest.raises(ConnectionClosedError):
        asyncio.run(run_case())

    assert conductor.socket.requests == []
