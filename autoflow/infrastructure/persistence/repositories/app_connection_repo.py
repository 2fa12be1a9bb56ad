"""AppConnection repository: encrypted provider credentials per user."""

from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from autoflow.infrastructure.persistence.models.app_connection import AppConnection
from autoflow.infrastructure.persistence.repositories.base import BaseRepository
from autoflow.shared.utils import utc_now


class AppConnectionRepository(BaseRepository[AppConnection]):
    """App connection repository."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, AppConnection)

    async def get_by_user_and_app(self, user_id: str, app: str) -> AppConnection | None:
        result = await self.db.execute(
            select(AppConnection).where(
                AppConnection.user_id == user_id,
                AppConnection.app == app,
            )
        )
        return result.scalar_one_or_none()

    async def get_connected(self, user_id: str, app: str) -> AppConnection | None:
        """Return the row only when it is currently connected."""
        result = await self.db.execute(
            select(AppConnection).where(
                AppConnection.user_id == user_id,
                AppConnection.app == app,
                AppConnection.connected.is_(True),
            )
        )
        return result.scalar_one_or_none()

    async def get_by_user(self, user_id: str) -> list[AppConnection]:
        result = await self.db.execute(
            select(AppConnection)
            .where(AppConnection.user_id == user_id)
            .order_by(AppConnection.app.asc())
        )
        return list(result.scalars().all())

    async def get_by_external_account(
        self, app: str, external_account_id: str
    ) -> AppConnection | None:
        """Return the oldest connected row for a provider identity (e.g. Slack team)."""
        result = await self.db.execute(
            select(AppConnection)
            .where(
                AppConnection.app == app,
                AppConnection.external_account_id == external_account_id,
                AppConnection.connected.is_(True),
            )
            .order_by(AppConnection.created_at.asc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def touch_last_used(self, connection_id: str) -> None:
        await self.db.execute(
            update(AppConnection)
            .where(AppConnection.id == connection_id)
            .values(last_used_at=utc_now())
            .execution_options(synchronize_session=False)
        )
