#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Exception taxonomy for holocall.

Every error raised by the client derives from ``HolocallError``. Errors carry
a stable ``error_code``, an optional ``cause`` (also chained with ``from``)
and a free-form ``context`` dict with the identifiers that were in play when
the failure happened.

Hierarchy:
    HolocallError
    +-- ConfigurationError
    +-- ConnectionError
    |   +-- ConnectionClosedError
    +-- ResolutionError
    +-- InvocationError
    |   +-- HostRequestError
    +-- SerializationError
    +-- TeardownError
"""

from enum import Enum
from typing import Any, Dict, Optional

__all__ = [
    "HolocallError",
    "ConfigurationError",
    "ConnectionError",
    "ConnectionClosedError",
    "ResolutionError",
    "ResolutionErrorKind",
    "InvocationError",
    "HostRequestError",
    "SerializationError",
    "TeardownError",
    "ExceptionTranslator",
    "ExceptionFormatter",
]


class HolocallError(Exception):
    """
    Base class for every error surfaced by holocall.
    """

    default_code = "HOLOCALL_ERROR"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        cause: Optional[BaseException] = None,
        **context: Any,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.default_code
        self.cause = cause
        self.context: Dict[str, Any] = {
            key: value for key, value in context.items() if value is not None
        }
        if cause is not None and self.__cause__ is None:
            self.__cause__ = cause

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
        }
        if self.context:
            data["context"] = dict(self.context)
        if self.cause is not None:
            data["cause"] = "{0}: {1}".format(type(self.cause).__name__, self.cause)
        return data

    def __str__(self) -> str:
        return "[{0}] {1}".format(self.error_code, self.message)


class ConfigurationError(HolocallError):
    """Invalid client configuration."""

    default_code = "CONFIGURATION_ERROR"

    def __init__(self, message: str, field: Optional[str] = None, **kwargs: Any) -> None:
        super().__init__(message, field=field, **kwargs)
        self.field = field


# Shadows the builtin on purpose; import it from this module explicitly.
class ConnectionError(HolocallError):  # noqa: A001
    """
    The channel to the host could not be established or was lost.
    """

    default_code = "CONNECTION_ERROR"

    def __init__(self, message: str, address: Optional[str] = None, **kwargs: Any) -> None:
        super().__init__(message, address=address, **kwargs)
        self.address = address


class ConnectionClosedError(ConnectionError):
    """
    The channel closed while a request was outstanding, or was used after close.
    """

    default_code = "CONNECTION_CLOSED"


class ResolutionErrorKind(str, Enum):
    NO_CONTEXT_FOUND = "NoContextFound"


class ResolutionError(HolocallError):
    """
    No execution context (cell) could be resolved for an application.
    """

    default_code = "RESOLUTION_ERROR"

    def __init__(
        self,
        message: str,
        application_id: Optional[str] = None,
        kind: ResolutionErrorKind = ResolutionErrorKind.NO_CONTEXT_FOUND,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, application_id=application_id, kind=kind.value, **kwargs)
        self.application_id = application_id
        self.kind = kind


class InvocationError(HolocallError):
    """
    The host rejected or failed a zome call.

    ``cause_type`` and ``cause_detail`` hold the host-reported error kind and
    description unchanged (for example ``ribosome_error`` and the message the
    zome raised).
    """

    default_code = "INVOCATION_ERROR"

    def __init__(
        self,
        message: str,
        zome_name: Optional[str] = None,
        fn_name: Optional[str] = None,
        cause_type: Optional[str] = None,
        cause_detail: Any = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            message,
            zome_name=zome_name,
            fn_name=fn_name,
            cause_type=cause_type,
            **kwargs,
        )
        self.zome_name = zome_name
        self.fn_name = fn_name
        self.cause_type = cause_type
        self.cause_detail = cause_detail


class HostRequestError(InvocationError):
    """Host error reply to a non-zome request such as ``app_info``."""

    default_code = "HOST_REQUEST_ERROR"

    def __init__(self, message: str, request_type: Optional[str] = None, **kwargs: Any) -> None:
        super().__init__(message, request_type=request_type, **kwargs)
        self.request_type = request_type


class SerializationError(HolocallError):
    """
    A value could not be encoded for the wire or decoded into the declared shape.
    """

    default_code = "SERIALIZATION_ERROR"

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        serialization_format: str = "msgpack",
        data_type: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            message,
            operation=operation,
            serialization_format=serialization_format,
            data_type=data_type,
            **kwargs,
        )
        self.operation = operation
        self.serialization_format = serialization_format
        self.data_type = data_type


class TeardownError(HolocallError):
    """Closing the channel failed."""

    default_code = "TEARDOWN_ERROR"

    def __init__(self, message: str, address: Optional[str] = None, **kwargs: Any) -> None:
        super().__init__(message, address=address, **kwargs)
        self.address = address


class ExceptionTranslator:
    """
    Wrap arbitrary exceptions into the holocall taxonomy.

    Exceptions that already belong to the wanted class are returned unchanged
    so translation never double-wraps.
    """

    @staticmethod
    def as_connection_error(
        exc: BaseException, address: Optional[str] = None, message: Optional[str] = None
    ) -> ConnectionError:
        if isinstance(exc, ConnectionError):
            return exc
        return ConnectionError(
            message="{0}: {1}".format(message or "Connection failed", exc),
            address=address,
            cause=exc,
        )

    @staticmethod
    def as_serialization_error(
        exc: BaseException,
        operation: str,
        data_type: Optional[str] = None,
        message: Optional[str] = None,
    ) -> SerializationError:
        if isinstance(exc, SerializationError):
            return exc
        return SerializationError(
            message="{0}: {1}".format(message or "msgpack {0} failed".format(operation), exc),
            operation=operation,
            data_type=data_type,
            cause=exc,
        )

    @staticmethod
    def as_teardown_error(exc: BaseException, address: Optional[str] = None) -> TeardownError:
        if isinstance(exc, TeardownError):
            return exc
        return TeardownError(
            message="Failed to close connection: {0}".format(exc),
            address=address,
            cause=exc,
        )


class ExceptionFormatter:
    """Human-readable renderings of exceptions for outcome reporting."""

    @staticmethod
    def format_exception_summary(exc: BaseException) -> str:
        if isinstance(exc, HolocallError):
            summary = "{0}: {1}".format(exc.__class__.__name__, exc)
            detail = getattr(exc, "cause_detail", None)
            if detail is not None and str(detail) not in exc.message:
                summary = "{0} ({1})".format(summary, detail)
            return summary
        return "{0}: {1}".format(type(exc).__name__, exc)
