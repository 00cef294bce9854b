"""HTTP client module for bnetexport.

Wraps :mod:`httpx` for the two Battle.net calls of an authenticator export.

Classes:
    :class:`ExchangeClient` -- session-token exchange and device-secret restore.
    :class:`SessionState` -- progress of a client through the two calls.

Example::

    from bnetexport.client import ExchangeClient

    with ExchangeClient(config) as client:
        client.exchange_session_token(session_token)
        secret = client.restore_device_secret(serial, restore_code)
"""

from bnetexport.client.exchange import ExchangeClient, SessionState, normalize_session_token
from bnetexport.client.response import parse_json_response

__all__ = ["ExchangeClient", "SessionState", "normalize_session_token", "parse_json_response"]
