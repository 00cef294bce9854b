"""Device secret conversion and otpauth URI rendering.

Battle.net returns the authenticator's shared secret as hexadecimal, while
authenticator apps expect RFC 4648 Base32. :func:`hex_to_base32` converts
between the two without padding and in uppercase, the form that TOTP apps
accept consistently. :func:`build_otpauth_uri` renders the import URI with
the fixed Battle.net parameters (8 digits, SHA1, 30 second period).
"""

from __future__ import annotations

import base64
import binascii
from urllib.parse import quote

from bnetexport.exceptions import EncodingError
from bnetexport.models import TOTP_ALGORITHM, TOTP_DIGITS, TOTP_ISSUER, TOTP_PERIOD


def hex_to_base32(hex_secret: str) -> str:
    """Convert a hex-encoded secret to unpadded uppercase Base32.

    Args:
        hex_secret: Even-length hex string; digits are case-insensitive and
            surrounding whitespace is ignored.

    Returns:
        The Base32 encoding of the decoded bytes, without ``=`` padding.

    Raises:
        EncodingError: If the input is empty, has odd length, or contains a
            non-hex character.

    Example::

        >>> hex_to_base32("48656c6c6f21deadbeef")
        'JBSWY3DPEHPK3PXP'
    """
    cleaned = hex_secret.strip()
    if not cleaned:
        raise EncodingError("deviceSecret is not valid hex: empty value")
    try:
        raw = binascii.unhexlify(cleaned)
    except ValueError as exc:
        raise EncodingError("deviceSecret is not valid hex") from exc
    return base64.b32encode(raw).decode("ascii").rstrip("=").upper()


def build_otpauth_uri(serial: str, base32_secret: str) -> str:
    """Render the ``otpauth://totp/`` URI for a Battle.net authenticator.

    Characters outside the unreserved URI set are percent-encoded in the
    serial label; ordinary serials such as ``US-1234-5678-9012`` appear
    unchanged.

    Args:
        serial: Authenticator serial used as the account label.
        base32_secret: Secret from :func:`hex_to_base32`.

    Returns:
        ``otpauth://totp/Battle.net:<serial>?secret=<secret>&issuer=Battle.net&digits=8&algorithm=SHA1&period=30``
    """
    label = quote(serial, safe="-._~")
    return (
        f"otpauth://totp/{TOTP_ISSUER}:{label}"
        f"?secret={base32_secret}"
        f"&issuer={TOTP_ISSUER}"
        f"&digits={TOTP_DIGITS}"
        f"&algorithm={TOTP_ALGORITHM}"
        f"&period={TOTP_PERIOD}"
    )
