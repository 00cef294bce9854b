"""End-to-end authenticator export.

:func:`export_authenticator` ties the pieces together: input validation,
the two provider calls through :class:`~bnetexport.client.ExchangeClient`,
and the Base32/URI conversion from :mod:`bnetexport.codec`. It either
returns a complete :class:`~bnetexport.models.ExportResult` or raises; no
partial result ever escapes.
"""

from __future__ import annotations

from typing import Optional

import httpx

from bnetexport.client import ExchangeClient
from bnetexport.codec import build_otpauth_uri, hex_to_base32
from bnetexport.exceptions import InputValidationError
from bnetexport.models import ExportResult, GlobalConfig
from bnetexport.output import get_output


def ensure_non_empty(value: Optional[str], field_name: str) -> str:
    """Return *value* stripped, or raise if nothing is left.

    Raises:
        InputValidationError: ``"<field_name> is required"``.
    """
    cleaned = (value or "").strip()
    if not cleaned:
        raise InputValidationError(f"{field_name} is required")
    return cleaned


def export_authenticator(
    session_token: str,
    serial: str,
    restore_code: str,
    config: Optional[GlobalConfig] = None,
    transport: Optional[httpx.BaseTransport] = None,
) -> ExportResult:
    """Restore an authenticator and return its otpauth URI.

    All three inputs are validated before any request is sent.

    Args:
        session_token: Battle.net web session token (``ST=...``).
        serial: Authenticator serial.
        restore_code: Authenticator restore code.
        config: Effective configuration; defaults are used when ``None``.
        transport: Optional httpx transport override, used in tests.

    Returns:
        The :class:`~bnetexport.models.ExportResult` for the authenticator.

    Raises:
        InputValidationError: If any input is empty.
        ExportError: Any error from the client or the codec, unchanged.
    """
    session_token = ensure_non_empty(session_token, "session token")
    serial = ensure_non_empty(serial, "authenticator serial")
    restore_code = ensure_non_empty(restore_code, "restore code")

    output = get_output()
    with ExchangeClient(config, transport=transport) as client:
        output.info("Exchanging session token for a bearer token...")
        client.exchange_session_token(session_token)
        output.info("Restoring authenticator device secret...")
        device_secret = client.restore_device_secret(serial, restore_code)

    secret = hex_to_base32(device_secret)
    return ExportResult(serial=serial, secret=secret, uri=build_otpauth_uri(serial, secret))
