"""
Application error taxonomy.

Every failure a service reports is an AppError carrying one ErrorKind from a
closed set. The HTTP layer maps the kind to a status code and never looks at
the message text.
"""

from enum import Enum
from typing import Any, Optional


class ErrorKind(Enum):
    """The closed set of failure categories."""
    VALIDATION = "VALIDATION"
    AUTHENTICATION = "AUTHENTICATION"
    AUTHORIZATION = "AUTHORIZATION"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    UPSTREAM = "UPSTREAM"
    INTERNAL = "INTERNAL"

    @property
    def http_status(self) -> int:
        return _HTTP_STATUS[self]


_HTTP_STATUS = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.AUTHENTICATION: 401,
    ErrorKind.AUTHORIZATION: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.UPSTREAM: 502,
    ErrorKind.INTERNAL: 500,
}


class AppError(Exception):
    """
    A failure with a category, a stable machine code and a human message.

    `code` is what clients switch on (e.g. "INVALID_OTP"); `message` is for
    people and may change wording freely.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        code: Optional[str] = None,
        details: Optional[Any] = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.code = code or f"{kind.value}_ERROR"
        self.details = details

    @property
    def status_code(self) -> int:
        return self.kind.http_status

    def __repr__(self) -> str:
        return f"AppError(kind={self.kind.value}, code={self.code!r}, message={self.message!r})"


def validation_error(message: str, code: str = "VALIDATION_ERROR", details: Any = None) -> AppError:
    return AppError(ErrorKind.VALIDATION, message, code, details)


def authentication_error(message: str, code: str = "AUTHENTICATION_ERROR") -> AppError:
    return AppError(ErrorKind.AUTHENTICATION, message, code)


def authorization_error(message: str, code: str = "AUTHORIZATION_ERROR") -> AppError:
    return AppError(ErrorKind.AUTHORIZATION, message, code)


def not_found_error(message: str, code: str = "NOT_FOUND") -> AppError:
    return AppError(ErrorKind.NOT_FOUND, message, code)


def conflict_error(message: str, code: str = "CONFLICT") -> AppError:
    return AppError(ErrorKind.CONFLICT, message, code)


def upstream_error(message: str, code: str = "UPSTREAM_ERROR") -> AppError:
    return AppError(ErrorKind.UPSTREAM, message, code)
