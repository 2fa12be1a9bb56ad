"""initial_workflow_execution_schema

Revision ID: 4f2a9c1d7b3e
Revises:
Create Date: 2026-10-19 09:12:44.301877

"""

from collections.abc import Sequence
from typing import Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "4f2a9c1d7b3e"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_EXECUTION_STATUSES = ("pending", "running", "succeeded", "failed", "partial")


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "workflow",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("owner_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("trigger_app", sa.String(), nullable=False),
        sa.Column("trigger_event", sa.String(), nullable=False),
        sa.Column("trigger_config", sa.JSON(), nullable=False),
        sa.Column("actions", sa.JSON(), nullable=False),
        sa.Column("enabled", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column(
            "execution_count", sa.Integer(), server_default=sa.text("0"), nullable=False
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_workflow_owner_id", "workflow", ["owner_id"])
    op.create_index("ix_workflow_deleted_at", "workflow", ["deleted_at"])
    op.create_index(
        "ix_workflow_owner_trigger",
        "workflow",
        ["owner_id", "trigger_app", "trigger_event", "enabled"],
    )

    op.create_table(
        "workflow_execution",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("workflow_id", sa.String(), nullable=False),
        sa.Column("owner_id", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("trigger_data", sa.JSON(), nullable=False),
        sa.Column("action_results", sa.JSON(), nullable=False),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("finished_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["workflow_id"], ["workflow.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "status IN ({})".format(", ".join(f"'{s}'" for s in _EXECUTION_STATUSES)),
            name="workflow_execution_status_check",
        ),
    )
    op.create_index(
        "ix_workflow_execution_workflow_id", "workflow_execution", ["workflow_id"]
    )
    op.create_index("ix_workflow_execution_owner_id", "workflow_execution", ["owner_id"])
    op.create_index("ix_workflow_execution_status", "workflow_execution", ["status"])
    op.create_index(
        "ix_workflow_execution_workflow_created",
        "workflow_execution",
        ["workflow_id", "created_at"],
    )

    op.create_table(
        "app_connection",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("app", sa.String(), nullable=False),
        sa.Column("access_token_encrypted", sa.Text(), nullable=False),
        sa.Column("refresh_token_encrypted", sa.Text(), nullable=True),
        sa.Column("scope", sa.String(), nullable=True),
        sa.Column("external_account_id", sa.String(), nullable=True),
        sa.Column("connected", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("last_used_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "app", name="uq_app_connection_user_app"),
    )
    op.create_index("ix_app_connection_user_id", "app_connection", ["user_id"])
    op.create_index(
        "ix_app_connection_app_external",
        "app_connection",
        ["app", "external_account_id"],
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_app_connection_app_external", table_name="app_connection")
    op.drop_index("ix_app_connection_user_id", table_name="app_connection")
    op.drop_table("app_connection")
    op.drop_index(
        "ix_workflow_execution_workflow_created", table_name="workflow_execution"
    )
    op.drop_index("ix_workflow_execution_status", table_name="workflow_execution")
    op.drop_index("ix_workflow_execution_owner_id", table_name="workflow_execution")
    op.drop_index("ix_workflow_execution_workflow_id", table_name="workflow_execution")
    op.drop_table("workflow_execution")
    op.drop_index("ix_workflow_owner_trigger", table_name="workflow")
    op.drop_index("ix_workflow_deleted_at", table_name="workflow")
    op.drop_index("ix_workflow_owner_id", table_name="workflow")
    op.drop_table("workflow")
