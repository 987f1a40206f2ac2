"""
Shared fixtures: Slack app config, in-memory SQLite, mocked oauth.access.
"""

from typing import Any, Callable, List, Optional

import httpx
import pytest
import pytest_asyncio
from pydantic import SecretStr
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from config.slack_app import SlackAppConfig
from connectors.encryption import TokenCipher
from connectors.install_flow import InstallFlow
from connectors.slack import SlackConnector
from database.models import Base

TOKEN_URL = "https://slack.test/api/oauth.access"
AUTHORIZE_URL = "https://slack.test/oauth/authorize"


@pytest.fixture
def app_config() -> SlackAppConfig:
    return SlackAppConfig(
        client_id="123.456",
        client_secret=SecretStr("client-secret"),
        scopes="bot,commands",
        app_id="A0APP",
        state_secret=SecretStr("state-secret"),
        authorize_url=AUTHORIZE_URL,
        token_url=TOKEN_URL,
        app_redirect_url="https://slack.test/app_redirect",
    )


@pytest.fixture
def cipher() -> TokenCipher:
    return TokenCipher("")


@pytest_asyncio.fixture
async def session_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as s:
        yield s


class FakeSlack:
    """Records oauth.access requests and answers with a canned response."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.status_code = 200
        self.payload: Any = {"ok": True, "team_id": "T1", "access_token": "xoxb-1"}
        self.raw_body: Optional[str] = None
        self.error: Optional[Exception] = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.raw_body is not None:
            return httpx.Response(self.status_code, text=self.raw_body)
        return httpx.Response(self.status_code, json=self.payload)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def fake_slack() -> FakeSlack:
    return FakeSlack()


@pytest.fixture
def make_flow(app_config, fake_slack, cipher) -> Callable[..., InstallFlow]:
    def _make(config: Optional[SlackAppConfig] = None) -> InstallFlow:
        cfg = config or app_config
        return InstallFlow(cfg, SlackConnector(cfg, http_client=fake_slack.client()), cipher=cipher)

    return _make
