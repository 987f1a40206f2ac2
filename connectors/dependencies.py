"""
FastAPI dependencies for the installer routes.
"""

from __future__ import annotations

from functools import lru_cache
from typing import AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import config
from connectors.encryption import get_token_cipher
from connectors.install_flow import InstallFlow
from connectors.slack import SlackConnector
from database.session import get_db_session


async def db_session(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[AsyncSession, None]:
    """Yield a DB session for route handlers."""
    yield session


@lru_cache(maxsize=1)
def get_install_flow() -> InstallFlow:
    """Build the flow once from settings; it holds no per-request state."""
    app_config = config.slack_app_config()
    return InstallFlow(
        app_config,
        SlackConnector(app_config),
        cipher=get_token_cipher(),
    )
