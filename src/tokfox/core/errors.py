"""Project-wide custom exceptions.

This module centralizes domain-specific exception types so that routers and
services can raise / catch them without importing deep infrastructure errors
like ``asyncpg`` or raw SQLAlchemy exceptions.

Every error surfaced to API callers is a ``ServerError`` carrying an HTTP
status, a numeric error code, a short message and an optional detail. The
codes are stable and part of the public contract:

* ``101`` database error (HTTP 501)
* ``201`` wrong alias type (HTTP 400)
* ``202`` wrong alias value (HTTP 400)
* ``203`` missing alias (HTTP 400)
* ``204`` wrong push endpoint value (HTTP 400)
* ``205`` wrong invitation value (HTTP 400)
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator

from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

DATABASE_ERROR = 101
WRONG_ALIAS_TYPE = 201
WRONG_ALIAS_VALUE = 202
MISSING_ALIAS = 203
WRONG_PUSH_ENDPOINT = 204
WRONG_INVITATION = 205


class TokfoxError(Exception):
    """Base class for all custom project exceptions.

    Subclass this rather than ``Exception`` directly for new domain errors.
    """


class ServerError(TokfoxError):
    """Error with the uniform shape rendered to API callers."""

    def __init__(self, http_status: int, code: int, message: str, detail: Any = None):
        self.http_status = http_status
        self.code = code
        self.message = message
        self.detail = detail
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.detail is not None:
            body["detail"] = self.detail
        return body

    def __repr__(self) -> str:
        return f"{type(self).__name__}(http_status={self.http_status}, code={self.code}, message={self.message!r})"


class ValidationError(ServerError):
    """Client-caused error detected before any store call."""

    def __init__(self, code: int, message: str, detail: Any = None):
        super().__init__(400, code, message, detail)


class MissingAliasError(ValidationError):
    def __init__(self):
        super().__init__(MISSING_ALIAS, "Missing alias")


class WrongAliasTypeError(ValidationError):
    def __init__(self, allowed: list[str]):
        super().__init__(
            WRONG_ALIAS_TYPE,
            "Wrong alias type",
            "Alias should be one of: " + ", ".join(allowed),
        )


class WrongAliasValueError(ValidationError):
    def __init__(self, value: Any):
        super().__init__(WRONG_ALIAS_VALUE, "Wrong alias value", f"Wrong alias value: {value}")


class InvalidPushEndpointError(ValidationError):
    def __init__(self):
        super().__init__(
            WRONG_PUSH_ENDPOINT,
            "Wrong push endpoint value",
            "Push endpoints must be valid HTTP or HTTPS urls",
        )


class InvalidInvitationError(ValidationError):
    def __init__(self):
        super().__init__(
            WRONG_INVITATION,
            "Wrong invitation value",
            "Invitations must be objects with a non-empty string version",
        )


class StorageError(ServerError):
    """Raised when the underlying store rejects or fails a request.

    The original driver exception is kept as ``__cause__``; only its string
    form travels in ``detail``.
    """

    def __init__(self, detail: Any = None):
        super().__init__(501, DATABASE_ERROR, "Database error", detail)


@contextmanager
def storage_errors() -> Iterator[None]:
    """Translate SQLAlchemy failures raised inside the block into ``StorageError``."""
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error("Database error: %s", exc, extra={"error_type": type(exc).__name__})
        raise StorageError(str(exc)) from exc


__all__ = [
    "DATABASE_ERROR",
    "WRONG_ALIAS_TYPE",
    "WRONG_ALIAS_VALUE",
    "MISSING_ALIAS",
    "WRONG_PUSH_ENDPOINT",
    "WRONG_INVITATION",
    "TokfoxError",
    "ServerError",
    "ValidationError",
    "MissingAliasError",
    "WrongAliasTypeError",
    "WrongAliasValueError",
    "InvalidPushEndpointError",
    "InvalidInvitationError",
    "StorageError",
    "storage_errors",
]
