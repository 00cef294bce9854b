"""Response validation shared by both provider calls.

:func:`parse_json_response` turns an :class:`httpx.Response` into one of the
wire models from :mod:`bnetexport.models`, or raises a precisely classified
:class:`~bnetexport.exceptions.ProtocolError`. Checks run in a fixed order:

1. capture status and ``Content-Type`` before the body is consumed;
2. read the whole body as text;
3. non-2xx status -> :class:`~bnetexport.exceptions.HTTPStatusError`;
4. content type without ``json`` -> :class:`~bnetexport.exceptions.ContentTypeError`;
5. strict JSON parse into the model -> :class:`~bnetexport.exceptions.ResponseParseError`.

An HTML error page therefore surfaces as a status or content-type error
quoting the raw body.
"""

from __future__ import annotations

from typing import TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from bnetexport.exceptions import (
    ContentTypeError,
    HTTPStatusError,
    ResponseParseError,
    TransportError,
)
from bnetexport.output import get_output

ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_json_response(
    response: httpx.Response,
    label: str,
    model: type[ModelT],
    body_limit: int,
) -> ModelT:
    """Validate *response* and parse its body into *model*.

    Args:
        response: The provider's response. Its body may still be unread.
        label: Name of the step for error messages, e.g. ``"SSO token exchange"``.
        model: Pydantic model describing the expected JSON object.
        body_limit: Maximum number of body characters quoted in errors.

    Returns:
        The validated model instance.

    Raises:
        TransportError: If the body cannot be read.
        HTTPStatusError: On a non-2xx status.
        ContentTypeError: On a 2xx response without a JSON content type.
        ResponseParseError: If the body is not JSON of the expected shape.
    """
    status = response.status_code
    content_type = response.headers.get("content-type", "")

    try:
        response.read()
        body = response.text
    except (httpx.HTTPError, httpx.StreamError) as exc:
        raise TransportError("failed reading response body") from exc

    get_output().debug(
        f"{label}: HTTP {status}, Content-Type: {display_content_type(content_type)}"
    )

    if not response.is_success:
        raise HTTPStatusError(
            f"{label} failed with HTTP {status}. Response: {truncate(body, body_limit)}",
            status_code=status,
            body=truncate(body, body_limit),
        )

    if not is_json_content_type(content_type):
        raise ContentTypeError(
            f"{label} returned non-JSON content "
            f"(Content-Type: {display_content_type(content_type)}). "
            f"Response: {truncate(body, body_limit)}",
            content_type=content_type or None,
            body=truncate(body, body_limit),
        )

    try:
        return model.model_validate_json(body)
    except ValidationError as exc:
        raise ResponseParseError(f"failed to parse {label} JSON response") from exc


def is_json_content_type(content_type: str) -> bool:
    """Return True if *content_type* mentions ``json`` in any case."""
    return "json" in content_type.lower()


def display_content_type(content_type: str) -> str:
    """Return *content_type*, or ``(missing)`` when the header was absent or empty."""
    return content_type if content_type else "(missing)"


def truncate(text: str, max_chars: int) -> str:
    """Return at most *max_chars* characters of *text*."""
    return text[:max_chars]
