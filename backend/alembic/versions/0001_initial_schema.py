"""initial_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19

Creates all tables for the event ledger:
event_types, services, events, event_services, payments, activity_logs.
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # --- event_types (catalog) ---
    op.create_table(
        "event_types",
        sa.Column("event_type_id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("type_name", sa.String(100), nullable=False, unique=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("base_price", sa.Numeric(12, 2), nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
    )

    # --- services (catalog) ---
    op.create_table(
        "services",
        sa.Column("service_id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("service_name", sa.String(150), nullable=False),
        sa.Column("category", sa.String(50), nullable=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("unit_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("unit_type", sa.String(30), nullable=True),
        sa.Column("is_available", sa.Boolean, nullable=False, server_default=sa.true()),
    )

    # --- events ---
    op.create_table(
        "events",
        sa.Column("event_id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("client_id", sa.Integer, nullable=False, index=True),
        sa.Column("event_type_id", sa.Integer, sa.ForeignKey("event_types.event_type_id"), nullable=False),
        sa.Column("event_name", sa.String(200), nullable=False),
        sa.Column("event_date", sa.Date, nullable=False),
        sa.Column("event_time", sa.Time, nullable=True),
        sa.Column("venue", sa.String(255), nullable=True),
        sa.Column("guest_count", sa.Integer, nullable=False, server_default="50"),
        sa.Column("budget", sa.Numeric(12, 2), nullable=True),
        sa.Column("special_notes", sa.Text, nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="inquiry"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("guest_count > 0", name="check_event_guest_count_positive"),
    )

    # --- event_services (booking lines) ---
    op.create_table(
        "event_services",
        sa.Column("event_service_id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("event_id", sa.Integer, sa.ForeignKey("events.event_id"), nullable=False, index=True),
        sa.Column("service_id", sa.Integer, sa.ForeignKey("services.service_id"), nullable=False),
        sa.Column("quantity", sa.Integer, nullable=False, server_default="1"),
        sa.Column("agreed_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("added_by", sa.Integer, nullable=False),
        sa.Column("added_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("quantity > 0", name="check_event_service_quantity_positive"),
        sa.CheckConstraint("agreed_price > 0", name="check_event_service_price_positive"),
    )
    op.create_index(
        "uq_event_services_active",
        "event_services",
        ["event_id", "service_id"],
        unique=True,
        postgresql_where=sa.text("status <> 'cancelled'"),
        sqlite_where=sa.text("status <> 'cancelled'"),
    )

    # --- payments ---
    op.create_table(
        "payments",
        sa.Column("payment_id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("event_id", sa.Integer, sa.ForeignKey("events.event_id"), nullable=False, index=True),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("payment_method", sa.String(20), nullable=False),
        sa.Column("payment_type", sa.String(20), nullable=False),
        sa.Column("reference_number", sa.String(40), nullable=False, unique=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="completed"),
        sa.Column("recorded_by", sa.Integer, nullable=False),
        sa.Column("payment_date", sa.Date, nullable=False),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("amount > 0", name="check_payment_amount_positive"),
    )

    # --- activity_logs ---
    op.create_table(
        "activity_logs",
        sa.Column("log_id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer, nullable=False, index=True),
        sa.Column("action_type", sa.String(50), nullable=False, index=True),
        sa.Column("table_name", sa.String(50), nullable=False),
        sa.Column("record_id", sa.Integer, nullable=False),
        sa.Column("old_value", sa.Text, nullable=True),
        sa.Column("new_value", sa.Text, nullable=True),
        sa.Column("ip_address", sa.String(45), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, index=True),
    )


def downgrade() -> None:
    op.drop_table("activity_logs")
    op.drop_table("payments")
    op.drop_index("uq_event_services_active", table_name="event_services")
    op.drop_table("event_services")
    op.drop_table("events")
    op.drop_table("services")
    op.drop_table("event_types")
