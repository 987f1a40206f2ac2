"""
Installation store — one Slack access token per workspace.

``upsert_installation`` is a single ``INSERT … ON CONFLICT DO UPDATE``
statement, so concurrent installs of the same workspace never observe a
half-written row and the last writer wins.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from connectors.encryption import TokenCipher, get_token_cipher
from connectors.errors import InstallationStoreError
from connectors.models import SlackInstallation
from connectors.schemas import Installation

logger = logging.getLogger(__name__)

_DIALECT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


async def upsert_installation(
    session: AsyncSession,
    team_id: str,
    access_token: str,
    *,
    cipher: Optional[TokenCipher] = None,
) -> None:
    """
    Insert the workspace's token, or replace it in place if the workspace
    is already installed.  Commits on success, rolls back on failure.
    """
    cipher = cipher or get_token_cipher()
    try:
        dialect = session.get_bind().dialect.name
        insert = _DIALECT_INSERTS.get(dialect)
        if insert is None:
            raise InstallationStoreError(detail=f"unsupported dialect {dialect}")

        now = datetime.now(timezone.utc)
        stmt = insert(SlackInstallation).values(
            team_id=team_id,
            access_token=cipher.encrypt(access_token),
            installed_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["team_id"],
            set_={
                "access_token": stmt.excluded.access_token,
                "updated_at": stmt.excluded.updated_at,
            },
        )
        await session.execute(stmt)
        await session.commit()
    except SQLAlchemyError as exc:
        # The exception text embeds bound parameters (the token); log the type only.
        logger.error("upsert_installation failed for team %s: %s", team_id, type(exc).__name__)
        await session.rollback()
        raise InstallationStoreError(detail=type(exc).__name__) from exc

    logger.info("Stored installation for team %s", team_id)


async def get_installation(
    session: AsyncSession,
    team_id: str,
    *,
    cipher: Optional[TokenCipher] = None,
) -> Optional[Installation]:
    """Return the workspace's installation, or None if it never installed."""
    cipher = cipher or get_token_cipher()
    try:
        result = await session.execute(
            select(SlackInstallation).where(SlackInstallation.team_id == team_id)
        )
        row = result.scalar_one_or_none()
    except SQLAlchemyError as exc:
        logger.error("get_installation failed for team %s: %s", team_id, type(exc).__name__)
        raise InstallationStoreError(detail=type(exc).__name__) from exc

    if row is None:
        return None
    return Installation(
        team_id=row.team_id,
        access_token=cipher.decrypt(row.access_token),
        installed_at=row.installed_at,
        updated_at=row.updated_at,
    )
