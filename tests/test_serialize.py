#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Tests for the msgpack codec and structural output shaping.
"""

from dataclasses import dataclass
from typing import Dict, List, Literal, Optional

import pytest

from holocall.core.data.models import AppInfo, CallZomeRequest, CellId, HostError
from holocall.core.data.serialize import coerce_output, decode, encode, normalize_payload
from holocall.core.utils.exceptions import SerializationError


@dataclass
class TradeInput:
    tradeyear: str


@dataclass
class TradeOutput:
    hot_trading_price: str


def test_encode_keeps_bytes_and_strings_distinct():
    value = decode(encode({"key": b"\x00\x01", "name": "ab"}))

    assert value == {"key": b"\x00\x01", "name": "ab"}


def test_decode_of_empty_data_is_none():
    assert decode(b"") is None
    assert decode(None) is None


def test_decode_rejects_garbage():
    with pytest.raises(SerializationError) as exc_info:
        decode(b"\xc1")

    assert exc_info.value.operation == "decode"


def test_decode_rejects_text():
    with pytest.raises(SerializationError):
        decode("not bytes")


def test_encode_rejects_unsupported_values():
    with pytest.raises(SerializationError) as exc_info:
        encode({"handle": object()})

    assert exc_info.value.operation == "encode"
    assert exc_info.value.data_type == "dict"


def test_normalize_payload_converts_dataclasses_only():
    assert normalize_payload(TradeInput(tradeyear="2021")) == {"tradeyear": "2021"}
    assert normalize_payload({"number": 7}) == {"number": 7}
    assert normalize_payload(TradeInput) is TradeInput


def test_coerce_output_builds_dataclass():
    assert coerce_output({"hot_trading_price": "0.0123"}, TradeOutput) == TradeOutput("0.0123")


def test_coerce_output_without_type_is_identity():
    value = {"anything": [1, 2, 3]}
    assert coerce_output(value) is value


@pytest.mark.parametrize(
    "value, output_type",
    [
        ({"price": "1"}, TradeOutput),
        (["0.0123"], TradeOutput),
        ("2.64", float),
    ],
)
def test_coerce_output_rejects_mismatched_shapes(value, output_type):
    with pytest.raises(SerializationError):
        coerce_output(value, output_type)


def test_coerce_output_widens_int_to_float():
    assert coerce_output(3, float) == 3.0
    assert isinstance(coerce_output(3, float), float)


def test_coerce_output_checks_generic_aliases_by_container():
    assert coerce_output({"avg": 1.5}, Dict[str, float]) == {"avg": 1.5}
    assert coerce_output([1, 2], List[int]) == [1, 2]

    with pytest.raises(SerializationError):
        coerce_output([1.5], Dict[str, float])


def test_coerce_output_checks_optional_members():
    assert coerce_output(None, Optional[int]) is None
    assert coerce_output(5, Optional[int]) == 5
    assert isinstance(coerce_output(3, Optional[float]), float)

    with pytest.raises(SerializationError):
        coerce_output("5", Optional[int])


def test_coerce_output_wraps_uncheckable_types():
    with pytest.raises(SerializationError) as exc_info:
        coerce_output("a", Literal["a"])

    assert isinstance(exc_info.value.__cause__, TypeError)


def test_call_zome_request_is_self_attributed():
    cell_id = CellId(b"dna", b"agent")
    request = CallZomeRequest.for_cell(cell_id, " squareroots ", "square_root", {"number": 7})

    wire = request.to_wire(b"payload")

    assert request.provenance == b"agent"
    assert wire == {
        "cap": None,
        "cell_id": [b"dna", b"agent"],
        "zome_name": "squareroots",
        "fn_name": "square_root",
        "provenance": b"agent",
        "payload": b"payload",
    }


@pytest.mark.parametrize("zome_name, fn_name", [("", "fn"), ("zome", "  ")])
def test_call_zome_request_requires_names(zome_name, fn_name):
    with pytest.raises(ValueError):
        CallZomeRequest.for_cell(CellId(b"dna", b"agent"), zome_name, fn_name)


def test_app_info_rejects_malformed_cell_ids():
    with pytest.raises(ValueError):
        AppInfo.from_wire({"cell_data": [{"cell_id": [b"only-one"]}]})


def test_host_error_tolerates_bare_values():
    assert HostError.from_wire("boom").describe() == "unknown: boom"
    assert HostError.from_wire({"type": "ribosome_error"}).describe() == "ribosome_error"
