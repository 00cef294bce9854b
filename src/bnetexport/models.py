"""Canonical Pydantic models shared across all bnetexport modules.

The models fall into three groups:

**Wire models** -- request and response shapes of the two provider calls:
    :class:`SsoRequest`, :class:`SsoResponse`, :class:`RestoreRequest`,
    and :class:`RestoreResponse`. Field names are checked here once instead
    of through ad-hoc dictionary lookups at every call site.

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`RequestConfig`, :class:`EndpointsConfig`, :class:`OutputConfig`,
    and :class:`GlobalConfig`.

**Result models** -- :class:`ExportResult`, the data printed on success.

All models use Pydantic v2. Response models ignore unknown keys so that
the provider can add fields without breaking parsing.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

SSO_URL = "https://oauth.battle.net/oauth/sso"
AUTHENTICATOR_BASE_URL = (
    "https://authenticator-rest-api.bnet-identity.blizzard.net/v1/authenticator"
)
CLIENT_ID = "baedda12fe054e4abdfc3ad7bdea970a"

SSO_GRANT_TYPE = "client_sso"
SSO_SCOPE = "auth.authenticator"

TOTP_ISSUER = "Battle.net"
TOTP_DIGITS = 8
TOTP_ALGORITHM = "SHA1"
TOTP_PERIOD = 30


# --- Wire models ---


class SsoRequest(BaseModel):
    """Form fields of the session-token exchange POST."""

    client_id: str = CLIENT_ID
    grant_type: str = SSO_GRANT_TYPE
    scope: str = SSO_SCOPE
    token: str


class SsoResponse(BaseModel):
    """JSON body returned by the SSO endpoint."""

    model_config = ConfigDict(extra="ignore")

    access_token: Optional[str] = None


class RestoreRequest(BaseModel):
    """JSON body of the authenticator restore POST.

    Serialise with ``model_dump(by_alias=True)`` so that ``restore_code``
    goes out as the provider's ``restoreCode``.
    """

    model_config = ConfigDict(populate_by_name=True)

    serial: str
    restore_code: str = Field(alias="restoreCode")


class RestoreResponse(BaseModel):
    """JSON body returned by ``POST {base}/device``."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    device_secret: Optional[str] = Field(default=None, alias="deviceSecret")


# --- Configuration models ---


class RequestConfig(BaseModel):
    """HTTP settings applied to both provider calls."""

    timeout: float = Field(default=30.0, description="Read/write timeout in seconds")
    connect_timeout: float = Field(
        default=10.0, description="Connect timeout in seconds"
    )
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")


class EndpointsConfig(BaseModel):
    """Provider endpoints. Overridable to point at a mock provider."""

    sso_url: str = Field(default=SSO_URL, description="Battle.net SSO token endpoint")
    authenticator_base_url: str = Field(
        default=AUTHENTICATOR_BASE_URL,
        description="Base URL of the authenticator REST API",
    )
    client_id: str = Field(default=CLIENT_ID, description="OAuth client identifier")


class OutputConfig(BaseModel):
    """Default output format preference."""

    format: Literal["auto", "json", "plain", "rich"] = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/bnet-export/config.json``.

    Loaded and saved by :func:`~bnetexport.config.load_global_config` and
    :func:`~bnetexport.config.save_global_config`. See
    :func:`~bnetexport.config.resolve_config` for how environment variables
    and CLI flags override these values.
    """

    request: RequestConfig = Field(default_factory=RequestConfig)
    endpoints: EndpointsConfig = Field(default_factory=EndpointsConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


# --- Result models ---


class ExportResult(BaseModel):
    """Everything an authenticator app needs to generate matching codes."""

    serial: str
    secret: str = Field(description="Unpadded uppercase Base32 secret")
    uri: str = Field(description="otpauth:// URI for import")
    issuer: str = TOTP_ISSUER
    digits: int = TOTP_DIGITS
    algorithm: str = TOTP_ALGORITHM
    period: int = TOTP_PERIOD

    @property
    def settings_label(self) -> str:
        """Human-readable TOTP settings, e.g. ``SHA1 / 8 digits / 30s``."""
        return f"{self.algorithm} / {self.digits} digits / {self.period}s"
