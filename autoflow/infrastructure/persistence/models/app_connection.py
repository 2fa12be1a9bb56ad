"""AppConnection ORM model: a user's encrypted credential for one provider app."""

from datetime import datetime

import sqlalchemy as sa
from sqlalchemy import Boolean, DateTime, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from autoflow.infrastructure.persistence.database import Base
from autoflow.infrastructure.persistence.models.mixins import CuidMixin, TimestampMixin


class AppConnection(CuidMixin, TimestampMixin, Base):
    """Connected provider account. Table: app_connection. Tokens Fernet-encrypted."""

    __tablename__ = "app_connection"

    user_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    app: Mapped[str] = mapped_column(String, nullable=False)
    access_token_encrypted: Mapped[str] = mapped_column(Text, nullable=False)
    refresh_token_encrypted: Mapped[str | None] = mapped_column(Text, nullable=True)
    scope: Mapped[str | None] = mapped_column(String, nullable=True)
    # Provider identity (e.g. Slack team id) used to route inbound webhooks
    external_account_id: Mapped[str | None] = mapped_column(String, nullable=True)
    connected: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=sa.true()
    )
    last_used_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        UniqueConstraint("user_id", "app", name="uq_app_connection_user_app"),
        Index("ix_app_connection_app_external", "app", "external_account_id"),
    )
