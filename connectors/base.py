"""
BaseConnector — abstract interface for OAuth2 app installers.

A provider subclass builds the authorization URL and exchanges the
callback code for an ``ExchangeResult``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from connectors.schemas import ExchangeResult


class BaseConnector(ABC):
    """Abstract base for OAuth2 install connectors."""

    @property
    @abstractmethod
    def scopes(self) -> List[str]:
        """OAuth scopes requested at install time."""
        ...

    # ── OAuth flow ──────────────────────────────────────────────────────

    @abstractmethod
    def get_auth_url(self, state: str) -> str:
        """
        Build the provider's OAuth2 authorization URL.

        Parameters
        ----------
        state : str
            Signed state token echoed back on the callback.
        """
        ...

    @abstractmethod
    async def handle_callback(self, code: str) -> ExchangeResult:
        """
        Exchange the authorization code for an access token.

        Raises an ``ExchangeError`` subclass on failure.
        """
        ...

    def is_configured(self) -> bool:
        return True
