"""
Pydantic models passed between the installer components.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ExchangeResult(BaseModel):
    """Parsed ``oauth.access`` response; never persisted as-is."""

    team_id: str
    access_token: str = Field(repr=False)
    ok: bool = True


class Installation(BaseModel):
    """A stored workspace credential with the token already decrypted."""

    team_id: str
    access_token: str = Field(repr=False)
    installed_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class InstallOutcome(BaseModel):
    """Result of one ``/authorize`` callback."""

    ok: bool
    redirect_url: Optional[str] = None
    team_id: Optional[str] = None
    kind: Optional[str] = None
    message: Optional[str] = None
    detail: Optional[str] = None
    status_code: int = 302
