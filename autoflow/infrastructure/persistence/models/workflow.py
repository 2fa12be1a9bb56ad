"""Workflow and WorkflowExecution ORM models. Trigger + ordered actions."""

from datetime import datetime
from typing import Any

import sqlalchemy as sa
from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from autoflow.infrastructure.persistence.database import Base
from autoflow.infrastructure.persistence.models.mixins import (
    CuidMixin,
    SoftDeleteMixin,
    TimestampMixin,
)
from autoflow.shared.enums import ExecutionStatus
from autoflow.shared.utils import utc_now


class Workflow(CuidMixin, TimestampMixin, SoftDeleteMixin, Base):
    """Workflow definition. Table: workflow. Actions JSON is an ordered list."""

    __tablename__ = "workflow"

    owner_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    trigger_app: Mapped[str] = mapped_column(String, nullable=False)
    trigger_event: Mapped[str] = mapped_column(String, nullable=False)
    trigger_config: Mapped[dict[str, Any]] = mapped_column(
        JSON, nullable=False, default=dict
    )
    actions: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False)
    enabled: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=sa.true()
    )
    execution_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=sa.text("0")
    )

    __table_args__ = (
        Index(
            "ix_workflow_owner_trigger",
            "owner_id",
            "trigger_app",
            "trigger_event",
            "enabled",
        ),
    )


class WorkflowExecution(CuidMixin, Base):
    """Workflow execution audit. Table: workflow_execution.

    Rows outlive their workflow (soft delete only), so the FK never cascades.
    """

    __tablename__ = "workflow_execution"

    workflow_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("workflow.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    owner_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    status: Mapped[str] = mapped_column(
        String,
        nullable=False,
        default=ExecutionStatus.PENDING.value,
        index=True,
    )
    trigger_data: Mapped[dict[str, Any]] = mapped_column(
        JSON, nullable=False, default=dict
    )
    action_results: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list
    )
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    started_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    finished_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (
        Index(
            "ix_workflow_execution_workflow_created",
            "workflow_id",
            "created_at",
        ),
        CheckConstraint(
            "status IN ({})".format(
                ", ".join(
                    "'{}'".format(v.replace("'", "''"))
                    for v in ExecutionStatus.values()
                )
            ),
            name="workflow_execution_status_check",
        ),
    )
