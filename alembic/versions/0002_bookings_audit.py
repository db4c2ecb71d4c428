"""bookings and booking audit log

Revision ID: 0002_bookings_audit
Revises: 0001_initial
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa

revision = "0002_bookings_audit"
down_revision = "0001_initial"
branch_labels = None
depends_on = None

def upgrade() -> None:
    op.create_table(
        "bookings",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("billboard_id", sa.String(length=36), nullable=False),
        sa.Column("advertiser_id", sa.String(length=36), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("status", sa.String(length=30), nullable=False, server_default="PENDING"),
        sa.Column("payment_status", sa.String(length=20), nullable=False, server_default="NOT_PAID"),
        sa.Column("days", sa.Integer(), nullable=False),
        sa.Column("price_per_day_at_booking", sa.Numeric(12, 2), nullable=False),
        sa.Column("original_base_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("discount_percent", sa.Numeric(5, 2), nullable=False, server_default="0"),
        sa.Column("discount_amount", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("base_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("commission_percent", sa.Numeric(5, 2), nullable=False),
        sa.Column("commission_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("gst_percent", sa.Numeric(5, 2), nullable=False),
        sa.Column("gst_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("total_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("price_locked", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("locked_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("payment_reference", sa.String(length=120), nullable=True),
        sa.Column("payment_failure_reason", sa.String(length=500), nullable=True),
        sa.Column("idempotency_key", sa.String(length=120), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("end_date >= start_date", name="ck_bookings_date_order"),
        sa.UniqueConstraint("advertiser_id", "idempotency_key", name="uq_bookings_advertiser_idempotency_key"),
    )
    op.create_index("ix_bookings_billboard_id", "bookings", ["billboard_id"])
    op.create_index("ix_bookings_advertiser_id", "bookings", ["advertiser_id"])
    op.create_index("ix_bookings_start_date", "bookings", ["start_date"])
    op.create_index("ix_bookings_end_date", "bookings", ["end_date"])
    op.create_index("ix_bookings_status", "bookings", ["status"])

    if op.get_bind().dialect.name == "postgresql":
        # Active bookings of one billboard may not overlap (inclusive ranges).
        op.execute("CREATE EXTENSION IF NOT EXISTS btree_gist")
        op.execute(
            "ALTER TABLE bookings ADD CONSTRAINT ex_bookings_active_overlap "
            "EXCLUDE USING gist (billboard_id WITH =, daterange(start_date, end_date, '[]') WITH &&) "
            "WHERE (status IN ('PENDING', 'APPROVED'))"
        )

    op.create_table(
        "booking_audit_logs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("booking_id", sa.String(length=36), nullable=False),
        sa.Column("action", sa.String(length=40), nullable=False),
        sa.Column("performed_by", sa.String(length=120), nullable=False),
        sa.Column("details_json", sa.Text(), nullable=False, server_default="{}"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_booking_audit_logs_booking_id", "booking_audit_logs", ["booking_id"])
    op.create_index("ix_booking_audit_logs_action", "booking_audit_logs", ["action"])

def downgrade() -> None:
    op.drop_table("booking_audit_logs")
    op.drop_table("bookings")
