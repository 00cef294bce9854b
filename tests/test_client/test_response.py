"""Tests for the shared provider response validation."""

from __future__ import annotations

import httpx
import pytest

from bnetexport.client.response import (
    display_content_type,
    is_json_content_type,
    parse_json_response,
    truncate,
)
from bnetexport.exceptions import (
    ContentTypeError,
    HTTPStatusError,
    ProtocolError,
    ResponseParseError,
)
from bnetexport.exit_codes import EXIT_AUTH_FAILURE, EXIT_PROTOCOL_ERROR
from bnetexport.models import RestoreResponse, SsoResponse


def _response(
    status_code: int = 200,
    text: str = "",
    content_type: str | None = "application/json",
) -> httpx.Response:
    headers = {"content-type": content_type} if content_type is not None else {}
    return httpx.Response(
        status_code=status_code,
        content=text.encode("utf-8"),
        headers=headers,
        request=httpx.Request("POST", "https://provider.example/test"),
    )


@pytest.fixture(autouse=True)
def _quiet(quiet_output):
    yield


class TestSuccess:
    def test_parses_model(self) -> None:
        parsed = parse_json_response(
            _response(text='{"access_token": "tok"}'), "SSO token exchange", SsoResponse, 500
        )
        assert parsed.access_token == "tok"

    def test_unknown_fields_ignored(self) -> None:
        parsed = parse_json_response(
            _response(text='{"deviceSecret": "ab", "timeCreated": 1}'),
            "restore request",
            RestoreResponse,
            1000,
        )
        assert parsed.device_secret == "ab"

    def test_missing_field_parses_as_none(self) -> None:
        parsed = parse_json_response(_response(text="{}"), "x", SsoResponse, 500)
        assert parsed.access_token is None

    def test_content_type_match_is_case_insensitive(self) -> None:
        parsed = parse_json_response(
            _response(text='{"access_token": "t"}', content_type="Application/JSON"),
            "x",
            SsoResponse,
            500,
        )
        assert parsed.access_token == "t"

    def test_vendor_json_content_type_accepted(self) -> None:
        parsed = parse_json_response(
            _response(text='{"access_token": "t"}', content_type="application/problem+json"),
            "x",
            SsoResponse,
            500,
        )
        assert parsed.access_token == "t"


class TestStatusErrors:
    def test_non_success_reports_status_and_body(self) -> None:
        with pytest.raises(HTTPStatusError) as exc_info:
            parse_json_response(
                _response(500, text='{"error": "boom"}'), "SSO token exchange", SsoResponse, 500
            )
        exc = exc_info.value
        assert exc.status_code == 500
        assert str(exc) == 'SSO token exchange failed with HTTP 500. Response: {"error": "boom"}'
        assert exc.exit_code == EXIT_PROTOCOL_ERROR

    def test_status_checked_before_content_type(self) -> None:
        html = "<html><body>401 Authorization Required</body></html>"
        with pytest.raises(HTTPStatusError) as exc_info:
            parse_json_response(
                _response(401, text=html, content_type="text/html"),
                "restore request",
                RestoreResponse,
                1000,
            )
        assert exc_info.value.status_code == 401
        assert exc_info.value.body == html
        assert exc_info.value.exit_code == EXIT_AUTH_FAILURE

    def test_body_is_truncated(self) -> None:
        with pytest.raises(HTTPStatusError) as exc_info:
            parse_json_response(
                _response(400, text="x" * 2000, content_type="text/plain"), "x", SsoResponse, 500
            )
        assert exc_info.value.body == "x" * 500
        assert str(exc_info.value).endswith("Response: " + "x" * 500)

    def test_redirect_status_is_not_success(self) -> None:
        with pytest.raises(HTTPStatusError):
            parse_json_response(_response(302, text=""), "x", SsoResponse, 500)


class TestContentTypeErrors:
    def test_html_on_success_status(self) -> None:
        with pytest.raises(ContentTypeError) as exc_info:
            parse_json_response(
                _response(200, text="<html>maintenance</html>", content_type="text/html"),
                "SSO token exchange",
                SsoResponse,
                500,
            )
        assert exc_info.value.content_type == "text/html"
        assert str(exc_info.value) == (
            "SSO token exchange returned non-JSON content (Content-Type: text/html). "
            "Response: <html>maintenance</html>"
        )

    def test_missing_content_type(self) -> None:
        with pytest.raises(ContentTypeError) as exc_info:
            parse_json_response(
                _response(200, text='{"access_token": "t"}', content_type=None),
                "x",
                SsoResponse,
                500,
            )
        assert exc_info.value.content_type is None
        assert "(Content-Type: (missing))" in str(exc_info.value)


class TestParseErrors:
    def test_invalid_json(self) -> None:
        with pytest.raises(ResponseParseError, match="failed to parse SSO token exchange JSON"):
            parse_json_response(_response(text="{not json"), "SSO token exchange", SsoResponse, 500)

    def test_json_array_is_wrong_shape(self) -> None:
        with pytest.raises(ResponseParseError):
            parse_json_response(_response(text="[]"), "x", SsoResponse, 500)

    def test_wrong_field_type(self) -> None:
        with pytest.raises(ResponseParseError) as exc_info:
            parse_json_response(_response(text='{"deviceSecret": 42}'), "x", RestoreResponse, 1000)
        assert exc_info.value.__cause__ is not None

    def test_parse_errors_are_protocol_errors(self) -> None:
        with pytest.raises(ProtocolError):
            parse_json_response(_response(text=""), "x", SsoResponse, 500)


class TestHelpers:
    def test_is_json_content_type(self) -> None:
        assert is_json_content_type("application/json; charset=utf-8")
        assert is_json_content_type("TEXT/JSON")
        assert not is_json_content_type("text/html")
        assert not is_json_content_type("")

    def test_display_content_type(self) -> None:
        assert display_content_type("") == "(missing)"
        assert display_content_type("text/plain") == "text/plain"

    def test_truncate_counts_characters(self) -> None:
        assert truncate("héllo wörld", 4) == "héll"
        assert truncate("short", 100) == "short"
