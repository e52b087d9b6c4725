#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
MessagePack codec for conductor frames and zome payloads.

Payloads and outputs are structural: the client packs whatever the call site
declares and only checks shape when the call site asks for a typed output.
"""

import dataclasses
import types
from typing import Any, Mapping, Optional, Tuple, Type, TypeVar, Union, get_args, get_origin

import msgpack

from ..utils.exceptions import ExceptionTranslator, SerializationError

T = TypeVar("T")

_UNION_ORIGINS = tuple(
    origin for origin in (Union, getattr(types, "UnionType", None)) if origin is not None
)


def encode(obj: Any) -> bytes:
    """Pack a value with bin/str distinction preserved."""
    try:
        return msgpack.packb(obj, use_bin_type=True)
    except (TypeError, ValueError, OverflowError) as e:
        raise ExceptionTranslator.as_serialization_error(
            e, operation="encode", data_type=type(obj).__name__
        ) from e


def decode(data: Optional[bytes]) -> Any:
    """Unpack one msgpack document; empty or missing data decodes to ``None``."""
    if not data:
        return None
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise SerializationError(
            message="Expected binary msgpack data, got {0}".format(type(data).__name__),
            operation="decode",
            data_type=type(data).__name__,
        )
    try:
        return msgpack.unpackb(data, raw=False)
    except (ValueError, TypeError, msgpack.exceptions.UnpackException) as e:
        raise ExceptionTranslator.as_serialization_error(e, operation="decode") from e


def normalize_payload(payload: Any) -> Any:
    """
    Convert a dataclass payload into a plain dict; other values pass through.
    """
    if dataclasses.is_dataclass(payload) and not isinstance(payload, type):
        return dataclasses.asdict(payload)
    return payload


def coerce_output(value: Any, output_type: Optional[Type[T]] = None) -> Any:
    """
    Shape a decoded zome output into ``output_type``.

    Dataclass types are built with keyword construction from a mapping; plain
    types are checked with ``isinstance`` (ints are widened to float). Without
    an ``output_type`` the decoded value is returned unmodified.
    """
    if output_type is None:
        return value

    type_name = getattr(output_type, "__name__", str(output_type))

    if dataclasses.is_dataclass(output_type):
        if not isinstance(value, Mapping):
            raise SerializationError(
                message="Cannot build {0} from {1}".format(type_name, type(value).__name__),
                operation="coerce",
                data_type=type_name,
            )
        try:
            return output_type(**value)
        except TypeError as e:
            raise ExceptionTranslator.as_serialization_error(
                e,
                operation="coerce",
                data_type=type_name,
                message="Output does not match {0}".format(type_name),
            ) from e

    if output_type is Any:
        return value

    check_types = _runtime_types(output_type)
    if (
        float in check_types
        and int not in check_types
        and isinstance(value, int)
        and not isinstance(value, bool)
    ):
        return float(value)
    try:
        matches = isinstance(value, check_types)
    except TypeError as e:
        raise ExceptionTranslator.as_serialization_error(
            e,
            operation="coerce",
            data_type=type_name,
            message="Cannot check output against {0}".format(type_name),
        ) from e
    if matches:
        return value

    raise SerializationError(
        message="Expected output of type {0}, got {1}".format(type_name, type(value).__name__),
        operation="coerce",
        data_type=type_name,
    )


def _runtime_types(output_type: Any) -> Tuple[Any, ...]:
    """
    Reduce a declared type to classes usable with ``isinstance``.

    ``Dict[str, float]`` checks as ``dict``; ``Optional[X]`` and ``X | Y``
    check against each member. Item types are not inspected.
    """
    origin = get_origin(output_type)
    if origin in _UNION_ORIGINS:
        members: Tuple[Any, ...] = ()
        for arg in get_args(output_type):
            members += _runtime_types(arg)
        return members
    return (origin or output_type,)
