"""
SlackConnector — classic Slack app OAuth (``oauth/authorize`` + ``oauth.access``).

The code exchange authenticates with HTTP Basic (client id / secret) and
posts the code as a form body.  Slack answers 200 with ``{"ok": false}`` on
errors, so the ``ok`` flag rather than the status code decides success.
"""

from __future__ import annotations

import json
import logging
from typing import List, Optional
from urllib.parse import urlencode

import httpx

from config.slack_app import SlackAppConfig
from connectors.base import BaseConnector
from connectors.errors import SlackApiError, SlackParseError, SlackTransportError
from connectors.schemas import ExchangeResult

logger = logging.getLogger(__name__)


class SlackConnector(BaseConnector):
    """OAuth2 connector for Slack workspaces."""

    def __init__(
        self,
        app_config: SlackAppConfig,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._config = app_config
        self._http_client = http_client

    @property
    def scopes(self) -> List[str]:
        return [s.strip() for s in self._config.scopes.split(",") if s.strip()]

    def is_configured(self) -> bool:
        return bool(self._config.client_id and self._config.client_secret.get_secret_value())

    def get_auth_url(self, state: str) -> str:
        params = {
            "client_id": self._config.client_id,
            "scope": ",".join(self.scopes),
            "state": state,
        }
        return f"{self._config.authorize_url}?{urlencode(params)}"

    async def handle_callback(self, code: str) -> ExchangeResult:
        """Exchange the install code for the workspace's access token."""
        if self._http_client is not None:
            body = await self._post_code(self._http_client, code)
        else:
            async with httpx.AsyncClient(timeout=self._config.http_timeout_seconds) as client:
                body = await self._post_code(client, code)
        return self._parse(body)

    async def _post_code(self, client: httpx.AsyncClient, code: str) -> str:
        try:
            resp = await client.post(
                self._config.token_url,
                auth=(self._config.client_id, self._config.client_secret.get_secret_value()),
                data={"code": code},
                timeout=self._config.http_timeout_seconds,
            )
        except httpx.HTTPError as exc:
            logger.warning("oauth.access request failed: %s", type(exc).__name__)
            raise SlackTransportError(detail=f"{type(exc).__name__}: {exc}") from exc
        return resp.text

    @staticmethod
    def _parse(body: str) -> ExchangeResult:
        try:
            data = json.loads(body)
        except ValueError as exc:
            raise SlackParseError(detail=body) from exc
        if not isinstance(data, dict):
            raise SlackParseError(detail=body)

        if data.get("ok") is not True:
            raise SlackApiError(body)

        team_id = data.get("team_id")
        access_token = data.get("access_token")
        if not isinstance(team_id, str) or not team_id or not isinstance(access_token, str) or not access_token:
            # Body holds a live token here; keep it out of the diagnostics.
            raise SlackParseError(detail="response is missing team_id or access_token")

        return ExchangeResult(team_id=team_id, access_token=access_token)
