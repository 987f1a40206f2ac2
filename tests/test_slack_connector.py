"""
Tests for the Slack connector — authorize URL and the oauth.access exchange.
"""

import asyncio
from base64 import b64encode
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from connectors.base import BaseConnector
from connectors.errors import SlackApiError, SlackParseError, SlackTransportError
from connectors.slack import SlackConnector

from conftest import AUTHORIZE_URL, TOKEN_URL


class TestAuthUrl:
    def test_query_parameters(self, app_config):
        url = SlackConnector(app_config).get_auth_url("the-state")
        parsed = urlparse(url)
        assert f"{parsed.scheme}://{parsed.netloc}{parsed.path}" == AUTHORIZE_URL
        assert parse_qs(parsed.query) == {
            "client_id": ["123.456"],
            "scope": ["bot,commands"],
            "state": ["the-state"],
        }

    def test_is_configured(self, app_config):
        assert SlackConnector(app_config).is_configured()
        assert not SlackConnector(app_config.model_copy(update={"client_id": ""})).is_configured()


class TestExchange:
    @pytest.mark.asyncio
    async def test_success(self, app_config, fake_slack):
        connector = SlackConnector(app_config, http_client=fake_slack.client())
        result = await connector.handle_callback("abc123")

        assert result.team_id == "T1"
        assert result.access_token == "xoxb-1"
        assert result.ok is True

    @pytest.mark.asyncio
    async def test_request_uses_basic_auth_and_form_body(self, app_config, fake_slack):
        connector = SlackConnector(app_config, http_client=fake_slack.client())
        await connector.handle_callback("abc123")

        assert len(fake_slack.requests) == 1
        request = fake_slack.requests[0]
        assert request.method == "POST"
        assert str(request.url) == TOKEN_URL
        expected = b64encode(b"123.456:client-secret").decode()
        assert request.headers["Authorization"] == f"Basic {expected}"
        assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"
        assert request.content == b"code=abc123"

    @pytest.mark.asyncio
    async def test_ok_false_is_api_error_with_body(self, app_config, fake_slack):
        fake_slack.raw_body = '{"ok": false, "error": "invalid_code"}'
        connector = SlackConnector(app_config, http_client=fake_slack.client())

        with pytest.raises(SlackApiError) as info:
            await connector.handle_callback("abc123")
        assert info.value.kind == "api_error"
        assert info.value.body == '{"ok": false, "error": "invalid_code"}'
        assert "invalid_code" in info.value.message

    @pytest.mark.asyncio
    async def test_missing_ok_is_api_error(self, app_config, fake_slack):
        fake_slack.payload = {"team_id": "T1", "access_token": "xoxb-1"}
        connector = SlackConnector(app_config, http_client=fake_slack.client())

        with pytest.raises(SlackApiError):
            await connector.handle_callback("abc123")

    @pytest.mark.asyncio
    async def test_http_error_status_with_ok_false(self, app_config, fake_slack):
        fake_slack.status_code = 500
        fake_slack.payload = {"ok": False, "error": "internal_error"}
        connector = SlackConnector(app_config, http_client=fake_slack.client())

        with pytest.raises(SlackApiError):
            await connector.handle_callback("abc123")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", ["<html>bad gateway</html>", "", "[1, 2]"])
    async def test_unparseable_body(self, app_config, fake_slack, body):
        fake_slack.raw_body = body
        connector = SlackConnector(app_config, http_client=fake_slack.client())

        with pytest.raises(SlackParseError):
            await connector.handle_callback("abc123")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [
            {"ok": True, "access_token": "xoxb-1"},
            {"ok": True, "team_id": "T1"},
            {"ok": True, "team_id": 42, "access_token": "xoxb-1"},
        ],
    )
    async def test_missing_fields(self, app_config, fake_slack, payload):
        fake_slack.payload = payload
        connector = SlackConnector(app_config, http_client=fake_slack.client())

        with pytest.raises(SlackParseError) as info:
            await connector.handle_callback("abc123")
        assert "xoxb-1" not in (info.value.detail or "")

    @pytest.mark.asyncio
    async def test_transport_error(self, app_config, fake_slack):
        fake_slack.error = httpx.ConnectError("connection refused")
        connector = SlackConnector(app_config, http_client=fake_slack.client())

        with pytest.raises(SlackTransportError) as info:
            await connector.handle_callback("abc123")
        assert "client-secret" not in str(info.value)
        assert "client-secret" not in (info.value.detail or "")

    @pytest.mark.asyncio
    async def test_timeout_is_transport_error(self, app_config, fake_slack):
        fake_slack.error = httpx.ReadTimeout("timed out")
        connector = SlackConnector(app_config, http_client=fake_slack.client())

        with pytest.raises(SlackTransportError):
            await connector.handle_callback("abc123")

    @pytest.mark.asyncio
    async def test_exchange_can_be_cancelled(self, app_config):
        started = asyncio.Event()

        async def hang(request: httpx.Request) -> httpx.Response:
            started.set()
            await asyncio.sleep(60)
            return httpx.Response(200, json={"ok": True})

        client = httpx.AsyncClient(transport=httpx.MockTransport(hang))
        connector = SlackConnector(app_config, http_client=client)

        task = asyncio.ensure_future(connector.handle_callback("abc123"))
        await started.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task


class TestConnectorInterface:
    def test_only_flow_members_are_abstract(self):
        assert BaseConnector.__abstractmethods__ == {"scopes", "get_auth_url", "handle_callback"}
        assert not SlackConnector.__abstractmethods__
