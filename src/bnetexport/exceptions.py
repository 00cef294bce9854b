"""Exception hierarchy for bnetexport.

All exceptions inherit from :class:`ExportError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`bnetexport.exit_codes`.
The top-level error handler in :func:`bnetexport.app.main` catches
``ExportError``, prints the full causal chain, and exits with the
appropriate code. Unexpected exceptions produce a crash log and exit with
:data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    ExportError (exit 1)
    +-- InputValidationError   (exit 2)
    +-- TransportError         (exit 6)
    +-- ProtocolError          (exit 5)
    |   +-- HTTPStatusError    (exit 5, or 3 on 401/403)
    |   +-- ContentTypeError   (exit 5)
    |   +-- ResponseParseError (exit 5)
    |   +-- MissingFieldError  (exit 5)
    +-- PreconditionError      (exit 8)
    +-- EncodingError          (exit 9)
    +-- ConfigError            (exit 1)
"""

from __future__ import annotations

from typing import Optional

from bnetexport.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_ENCODING_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_PRECONDITION_FAILED,
    EXIT_PROTOCOL_ERROR,
)


class ExportError(Exception):
    """Base exception for all bnetexport errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`bnetexport.exit_codes`.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InputValidationError(ExportError):
    """Raised when a required input is empty, before any network call."""

    exit_code = EXIT_INVALID_USAGE


class TransportError(ExportError):
    """Raised when a request cannot be sent or its response cannot be read.

    Covers DNS resolution, connection refused, TLS failures and timeouts.
    """

    exit_code = EXIT_CONNECTION_ERROR


class ProtocolError(ExportError):
    """Raised when the provider answers but the answer is not usable."""

    exit_code = EXIT_PROTOCOL_ERROR


class HTTPStatusError(ProtocolError):
    """Raised on a non-2xx status. 401 and 403 map to :data:`EXIT_AUTH_FAILURE`.

    Args:
        message: Error description including the truncated body.
        status_code: The HTTP status code returned by the provider.
        body: The truncated response body.
    """

    def __init__(self, message: str, status_code: int, body: str = ""):
        exit_code = EXIT_AUTH_FAILURE if status_code in (401, 403) else None
        super().__init__(message, exit_code=exit_code)
        self.status_code = status_code
        self.body = body


class ContentTypeError(ProtocolError):
    """Raised when a 2xx response does not declare a JSON content type."""

    def __init__(self, message: str, content_type: Optional[str], body: str = ""):
        super().__init__(message)
        self.content_type = content_type
        self.body = body


class ResponseParseError(ProtocolError):
    """Raised when a JSON response does not parse into the expected shape."""


class MissingFieldError(ProtocolError):
    """Raised when a parsed response lacks a required non-empty field."""

    def __init__(self, message: str, field: str):
        super().__init__(message)
        self.field = field


class PreconditionError(ExportError):
    """Raised when the restore call is attempted before the token exchange."""

    exit_code = EXIT_PRECONDITION_FAILED


class EncodingError(ExportError):
    """Raised when the device secret is not valid hexadecimal."""

    exit_code = EXIT_ENCODING_ERROR


class ConfigError(ExportError):
    """Raised for configuration problems (invalid JSON, unreadable token file)."""

    exit_code = EXIT_GENERIC_FAILURE


def format_error_chain(exc: BaseException) -> str:
    """Join *exc* and every chained cause into one ``a: b: c`` line.

    Follows ``__cause__`` links set by ``raise ... from``. Messages already
    contained in the previous link are skipped.
    """
    parts: list[str] = []
    current: Optional[BaseException] = exc
    seen: set[int] = set()
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        message = str(current) or type(current).__name__
        if not parts or message not in parts[-1]:
            parts.append(message)
        current = current.__cause__
    return ": ".join(parts)
