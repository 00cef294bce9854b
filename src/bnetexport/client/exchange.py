"""Battle.net SSO and authenticator REST client.

This module provides :class:`ExchangeClient`, which performs the two
dependent calls of an authenticator export over one :class:`httpx.Client`:

1. :meth:`ExchangeClient.exchange_session_token` -- POSTs the web session
   token (``ST=...``) to the SSO endpoint with the ``client_sso`` grant and
   receives an OAuth bearer token.
2. :meth:`ExchangeClient.restore_device_secret` -- POSTs the serial and
   restore code to ``{base}/device`` with that bearer token and receives
   the hex-encoded device secret.

The client tracks its progress in a :class:`SessionState`. The restore call
is only legal once the state is ``AUTHENTICATED``; attempting it earlier
raises :class:`~bnetexport.exceptions.PreconditionError` without touching
the network.

No call is retried.

Example::

    with ExchangeClient(config) as client:
        client.exchange_session_token("ST=US-abc...")
        secret = client.restore_device_secret("US-1234-5678-9012", "ABCDEFGHIJ")
"""

from __future__ import annotations

import enum
from typing import Any, Optional

import httpx

from bnetexport import __version__
from bnetexport.client.response import parse_json_response
from bnetexport.exceptions import MissingFieldError, PreconditionError, TransportError
from bnetexport.models import (
    GlobalConfig,
    RestoreRequest,
    RestoreResponse,
    SsoRequest,
    SsoResponse,
)
from bnetexport.output import get_output

USER_AGENT = f"bnet-export/{__version__}"

SSO_LABEL = "SSO token exchange"
RESTORE_LABEL = "restore request"

SSO_BODY_LIMIT = 500
RESTORE_BODY_LIMIT = 1000

_FORM_CONTENT_TYPE = "application/x-www-form-urlencoded; charset=utf-8"


class SessionState(str, enum.Enum):
    """Progress of an export through the two provider calls."""

    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"
    RESTORED = "restored"


def normalize_session_token(raw: str) -> str:
    """Strip whitespace and a leading ``ST=`` or ``st=`` from a session token.

    ``"  ST=abc123  "`` becomes ``"abc123"``; a bare token is unchanged.
    """
    token = raw.strip()
    for prefix in ("ST=", "st="):
        if token.startswith(prefix):
            token = token[len(prefix):]
            break
    return token.strip()


class ExchangeClient:
    """Client for the session-token exchange and the authenticator restore.

    Must be used as a context manager so that the underlying transport is
    opened and closed. Both requests carry ``User-Agent`` and
    ``Accept: application/json`` headers.

    Args:
        config: Effective configuration (endpoints and timeouts). Defaults
            to :class:`~bnetexport.models.GlobalConfig` defaults.
        transport: Optional httpx transport, e.g. :class:`httpx.MockTransport`
            in tests.
    """

    def __init__(
        self,
        config: Optional[GlobalConfig] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._config = config or GlobalConfig()
        self._transport = transport
        self._client: Optional[httpx.Client] = None
        self._bearer_token: Optional[str] = None
        self._state = SessionState.UNAUTHENTICATED

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> ExchangeClient:
        request = self._config.request
        self._client = httpx.Client(
            headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
            timeout=httpx.Timeout(request.timeout, connect=request.connect_timeout),
            verify=request.verify_ssl,
            transport=self._transport,
        )
        return self

    def __exit__(self, *args: object) -> None:
        if self._client:
            self._client.close()
            self._client = None

    @property
    def state(self) -> SessionState:
        """Current position in the export flow."""
        return self._state

    @property
    def restore_url(self) -> str:
        """Full URL of the restore endpoint."""
        return f"{self._config.endpoints.authenticator_base_url.rstrip('/')}/device"

    # ------------------------------------------------------------------ #
    # Provider calls
    # ------------------------------------------------------------------ #

    def exchange_session_token(self, session_token: str) -> str:
        """Exchange a web session token for an OAuth bearer token.

        Args:
            session_token: The ``ST=...`` value, with or without the prefix.

        Returns:
            The bearer token. It is also kept on the client for
            :meth:`restore_device_secret`.

        Raises:
            TransportError: If the request fails or the body cannot be read.
            HTTPStatusError: On a non-2xx status.
            ContentTypeError: On a non-JSON success response.
            ResponseParseError: If the JSON body has the wrong shape.
            MissingFieldError: If ``access_token`` is missing or empty.
        """
        endpoints = self._config.endpoints
        request = SsoRequest(
            client_id=endpoints.client_id,
            token=normalize_session_token(session_token),
        )

        get_output().debug(f"POST {endpoints.sso_url} ({SSO_LABEL})")
        try:
            response = self._http().post(
                endpoints.sso_url,
                data=request.model_dump(),
                headers={"Content-Type": _FORM_CONTENT_TYPE},
            )
        except httpx.RequestError as exc:
            raise TransportError(
                f"request failed for Battle.net {SSO_LABEL}"
            ) from exc

        parsed = parse_json_response(response, SSO_LABEL, SsoResponse, SSO_BODY_LIMIT)
        access_token = (parsed.access_token or "").strip()
        if not access_token:
            raise MissingFieldError(
                "SSO response did not include access_token", field="access_token"
            )

        self._bearer_token = access_token
        self._state = SessionState.AUTHENTICATED
        return access_token

    def restore_device_secret(self, serial: str, restore_code: str) -> str:
        """Fetch the hex-encoded device secret for an authenticator.

        Args:
            serial: Authenticator serial, sent unmodified.
            restore_code: Restore code, sent unmodified and never logged.

        Returns:
            The trimmed ``deviceSecret`` value (hex).

        Raises:
            PreconditionError: If :meth:`exchange_session_token` has not
                succeeded on this client. No request is sent.
            TransportError: If the request fails or the body cannot be read.
            HTTPStatusError: On a non-2xx status.
            ContentTypeError: On a non-JSON success response.
            ResponseParseError: If the JSON body has the wrong shape.
            MissingFieldError: If ``deviceSecret`` is missing or empty.
        """
        if self._state is SessionState.UNAUTHENTICATED or not self._bearer_token:
            raise PreconditionError(
                "bearer token not set; SSO token exchange must run first"
            )

        body = RestoreRequest(serial=serial, restore_code=restore_code)
        url = self.restore_url

        get_output().debug(f"POST {url} (serial {serial})")
        try:
            response = self._authorized_post(url, body.model_dump(by_alias=True))
        except httpx.RequestError as exc:
            raise TransportError(f"request failed for {url}") from exc

        parsed = parse_json_response(
            response, RESTORE_LABEL, RestoreResponse, RESTORE_BODY_LIMIT
        )
        device_secret = (parsed.device_secret or "").strip()
        if not device_secret:
            raise MissingFieldError(
                "restore response missing deviceSecret", field="deviceSecret"
            )

        self._state = SessionState.RESTORED
        return device_secret

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _http(self) -> httpx.Client:
        assert self._client is not None, "Client not initialised -- use as context manager"
        return self._client

    def _authorized_post(self, url: str, json_body: dict[str, Any]) -> httpx.Response:
        return self._http().post(
            url,
            json=json_body,
            headers={"Authorization": f"Bearer {self._bearer_token}"},
        )
