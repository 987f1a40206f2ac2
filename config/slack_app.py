"""
Immutable Slack app configuration handed to the installer components.
"""

from __future__ import annotations

from urllib.parse import urlencode

from pydantic import BaseModel, ConfigDict, SecretStr


class SlackAppConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    client_id: str
    client_secret: SecretStr
    scopes: str
    app_id: str
    state_secret: SecretStr
    state_ttl_seconds: int = 600

    authorize_url: str = "https://slack.com/oauth/authorize"
    token_url: str = "https://slack.com/api/oauth.access"
    app_redirect_url: str = "https://slack.com/app_redirect"
    http_timeout_seconds: float = 10.0

    def landing_url(self) -> str:
        """Where Slack should show the app after a successful install."""
        return f"{self.app_redirect_url}?{urlencode({'app': self.app_id})}"
