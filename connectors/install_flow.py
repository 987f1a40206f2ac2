"""
InstallFlow — both legs of the Slack install handshake.

``build_authorize_url`` starts the install; ``complete`` handles the
``/authorize`` callback:

    verify state → reject denial → exchange code → upsert → redirect

The order is fixed: nothing runs before the state token has been
verified.  ``complete`` is the error boundary and turns every
``InstallError`` into an ``InstallOutcome``.
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from config.slack_app import SlackAppConfig
from connectors.base import BaseConnector
from connectors.encryption import TokenCipher
from connectors.errors import (
    ConfigurationError,
    ExchangeError,
    InstallationStoreError,
    InstallError,
    MissingCodeError,
    PermissionDeniedError,
)
from connectors.installation_store import upsert_installation
from connectors.schemas import InstallOutcome
from connectors.state import issue_state, verify_state

logger = logging.getLogger(__name__)


class InstallFlow:
    def __init__(
        self,
        app_config: SlackAppConfig,
        connector: BaseConnector,
        cipher: Optional[TokenCipher] = None,
    ) -> None:
        self._config = app_config
        self._connector = connector
        self._cipher = cipher

    @property
    def landing_url(self) -> str:
        return self._config.landing_url()

    def build_authorize_url(self, *, now: Optional[float] = None) -> str:
        """Mint a fresh state token and return the Slack authorize URL."""
        if not self._connector.is_configured():
            raise ConfigurationError(detail="client id or secret missing")
        state = issue_state(
            self._config.state_secret.get_secret_value(),
            self._config.state_ttl_seconds,
            now=now,
        )
        return self._connector.get_auth_url(state)

    async def complete(
        self,
        session: AsyncSession,
        code: Optional[str],
        state: Optional[str],
        error: Optional[str] = None,
        *,
        now: Optional[float] = None,
    ) -> InstallOutcome:
        """Run the callback and report how it ended; never raises InstallError."""
        try:
            verify_state(state, self._config.state_secret.get_secret_value(), now=now)

            if error:
                raise PermissionDeniedError(error)
            if not code:
                raise MissingCodeError()

            result = await self._connector.handle_callback(code)
            await upsert_installation(
                session, result.team_id, result.access_token, cipher=self._cipher
            )
        except InstallError as exc:
            return self._failure(exc)
        except Exception as exc:
            logger.exception("Unexpected error while completing Slack install")
            return InstallOutcome(
                ok=False,
                kind="internal",
                message="Installation failed.",
                detail=type(exc).__name__,
                status_code=500,
            )

        logger.info("Slack app installed for team %s", result.team_id)
        return InstallOutcome(ok=True, redirect_url=self.landing_url, team_id=result.team_id)

    @staticmethod
    def _failure(exc: InstallError) -> InstallOutcome:
        if isinstance(exc, (ExchangeError, InstallationStoreError, ConfigurationError)):
            logger.error("Slack install failed (%s): %s", exc.kind, exc.detail or exc.message)
        else:
            logger.warning("Slack install rejected (%s): %s", exc.kind, exc.message)
        return InstallOutcome(
            ok=False,
            kind=exc.kind,
            message=exc.message,
            detail=exc.detail,
            status_code=exc.status_code,
        )
