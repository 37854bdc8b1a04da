"""initial leave engine schema

Revision ID: 0001
Revises:
Create Date: 2026-10-17 00:00:00
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamp(name: str) -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)


def upgrade() -> None:
    op.create_table(
        "leave_type",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("organisation_id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("paid", sa.Boolean(), nullable=False),
        sa.Column("accrues", sa.Boolean(), nullable=False),
        sa.Column("accrual_rate_hours", sa.Numeric(10, 2), nullable=False),
        sa.Column("accrual_frequency", sa.String(length=50), nullable=False),
        sa.Column("max_balance_hours", sa.Numeric(10, 2), nullable=True),
        sa.Column("applicable_employment_types", sa.JSON(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("display_order", sa.Integer(), nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("organisation_id", "name", name="uq_leave_type_org_name"),
    )
    op.create_index("ix_leave_type_organisation_id", "leave_type", ["organisation_id"])
    op.create_index("ix_leave_type_is_active", "leave_type", ["is_active"])

    op.create_table(
        "leave_balance",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("organisation_id", sa.Uuid(), nullable=False),
        sa.Column("employee_id", sa.Uuid(), nullable=False),
        sa.Column("leave_type_id", sa.Uuid(), sa.ForeignKey("leave_type.id"), nullable=False),
        sa.Column("balance_hours", sa.Numeric(10, 2), nullable=False),
        sa.Column("last_accrual_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("accrual_anchor_day", sa.Integer(), nullable=True),
        sa.Column("version", sa.Integer(), server_default="0", nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("employee_id", "leave_type_id", name="uq_balance_employee_leave_type"),
    )
    op.create_index("ix_leave_balance_organisation_id", "leave_balance", ["organisation_id"])
    op.create_index("ix_leave_balance_employee_id", "leave_balance", ["employee_id"])
    op.create_index("ix_leave_balance_leave_type_id", "leave_balance", ["leave_type_id"])

    op.create_table(
        "leave_ledger_entry",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("organisation_id", sa.Uuid(), nullable=False),
        sa.Column("balance_id", sa.Uuid(), sa.ForeignKey("leave_balance.id"), nullable=False),
        sa.Column("employee_id", sa.Uuid(), nullable=False),
        sa.Column("leave_type_id", sa.Uuid(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("delta_hours", sa.Numeric(10, 2), nullable=False),
        sa.Column("balance_after_hours", sa.Numeric(10, 2), nullable=False),
        sa.Column("cause_type", sa.String(length=50), nullable=False),
        sa.Column("cause_ref", sa.String(length=255), nullable=False),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("balance_id", "version", name="uq_ledger_balance_version"),
        sa.UniqueConstraint("balance_id", "cause_type", "cause_ref", name="uq_ledger_cause"),
    )
    op.create_index("ix_leave_ledger_entry_organisation_id", "leave_ledger_entry", ["organisation_id"])
    op.create_index("ix_leave_ledger_entry_balance_id", "leave_ledger_entry", ["balance_id"])
    op.create_index("ix_ledger_employee_leave_type", "leave_ledger_entry", ["employee_id", "leave_type_id"])

    op.create_table(
        "leave_request",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("organisation_id", sa.Uuid(), nullable=False),
        sa.Column("employee_id", sa.Uuid(), nullable=False),
        sa.Column(
            "leave_type_id",
            sa.Uuid(),
            sa.ForeignKey("leave_type.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("hours", sa.Numeric(10, 2), nullable=False),
        sa.Column("reason", sa.String(), nullable=True),
        sa.Column("status", sa.String(length=50), server_default="pending", nullable=False),
        sa.Column("decided_by", sa.Uuid(), nullable=True),
        sa.Column("decided_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("decision_reason", sa.String(), nullable=True),
        sa.Column("cancelled_by", sa.Uuid(), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancellation_reason", sa.String(), nullable=True),
        sa.Column("balance_deducted", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("override_reason", sa.String(), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("end_date >= start_date", name="ck_leave_request_dates"),
        sa.CheckConstraint("hours > 0", name="ck_leave_request_hours"),
    )
    op.create_index("ix_leave_request_organisation_id", "leave_request", ["organisation_id"])
    op.create_index("ix_leave_request_employee_id", "leave_request", ["employee_id"])
    op.create_index("ix_leave_request_leave_type_id", "leave_request", ["leave_type_id"])
    op.create_index("ix_leave_request_status", "leave_request", ["status"])
    op.create_index("ix_leave_request_org_status", "leave_request", ["organisation_id", "status"])

    op.create_table(
        "leave_adjustment",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("organisation_id", sa.Uuid(), nullable=False),
        sa.Column("employee_id", sa.Uuid(), nullable=False),
        sa.Column("leave_type_id", sa.Uuid(), sa.ForeignKey("leave_type.id"), nullable=False),
        sa.Column("delta_hours", sa.Numeric(10, 2), nullable=False),
        sa.Column("reason", sa.String(), nullable=False),
        sa.Column("actor_id", sa.Uuid(), nullable=False),
        sa.Column("balance_id", sa.Uuid(), nullable=False),
        sa.Column("balance_version", sa.Integer(), nullable=False),
        sa.Column("balance_after_hours", sa.Numeric(10, 2), nullable=False),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("delta_hours <> 0", name="ck_leave_adjustment_nonzero"),
    )
    op.create_index("ix_leave_adjustment_organisation_id", "leave_adjustment", ["organisation_id"])
    op.create_index("ix_leave_adjustment_employee_id", "leave_adjustment", ["employee_id"])
    op.create_index("ix_leave_adjustment_leave_type_id", "leave_adjustment", ["leave_type_id"])

    op.create_table(
        "audit_log",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("organisation_id", sa.Uuid(), nullable=False),
        sa.Column("actor_id", sa.Uuid(), nullable=False),
        sa.Column("entity_type", sa.String(length=50), nullable=False),
        sa.Column("entity_id", sa.Uuid(), nullable=False),
        sa.Column("action", sa.String(length=50), nullable=False),
        sa.Column("before_json", sa.JSON(), nullable=True),
        sa.Column("after_json", sa.JSON(), nullable=True),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_audit_log_organisation_id", "audit_log", ["organisation_id"])
    op.create_index("ix_audit_log_created_at", "audit_log", ["created_at"])
    op.create_index("ix_audit_entity", "audit_log", ["entity_type", "entity_id"])


def downgrade() -> None:
    op.drop_table("audit_log")
    op.drop_table("leave_adjustment")
    op.drop_table("leave_request")
    op.drop_table("leave_ledger_entry")
    op.drop_table("leave_balance")
    op.drop_table("leave_type")
