"""
Failure taxonomy for the ParkAPI client.

Three families, so callers can pick a remedy:
- transport (`RequestError`): no response at all, retry may help
- protocol (`ServerError`, `NotFoundError`): bad status or unreadable body
- semantic (`IncompatibleApiError`, `NoDataError`): the request worked but the
  answer cannot be used

`IncompatibleApiError` ends the session for the client instance that raised it.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    REQUEST = "request"
    SERVER = "server"
    NOT_FOUND = "not_found"
    INCOMPATIBLE_API = "incompatible_api"
    NO_DATA = "no_data"
    UNKNOWN = "unknown"


class ParkApiError(Exception):
    """Base class; `kind` identifies the classified failure."""

    kind: ErrorKind = ErrorKind.UNKNOWN

    def __init__(self, message: str, *, url: str | None = None, status_code: int | None = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class RequestError(ParkApiError):
    kind = ErrorKind.REQUEST


class ServerError(ParkApiError):
    kind = ErrorKind.SERVER


class NotFoundError(ParkApiError):
    kind = ErrorKind.NOT_FOUND


class IncompatibleApiError(ParkApiError):
    kind = ErrorKind.INCOMPATIBLE_API

    def __init__(
        self,
        message: str,
        *,
        found: str | None,
        supported: str,
        url: str | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message, url=url, status_code=status_code)
        self.found = found
        self.supported = supported


class NoDataError(ParkApiError):
    kind = ErrorKind.NO_DATA


class UnknownError(ParkApiError):
    kind = ErrorKind.UNKNOWN
