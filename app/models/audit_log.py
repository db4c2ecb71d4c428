from sqlalchemy import String, Integer, DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from app.db.session import Base


class AuditAction:
    CREATED = "CREATED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    DISCOUNT_APPLIED = "DISCOUNT_APPLIED"
    DISCOUNT_REMOVED = "DISCOUNT_REMOVED"
    PAYMENT_INITIATED = "PAYMENT_INITIATED"
    PAID = "PAID"
    PAYMENT_FAILED = "PAYMENT_FAILED"
    CANCELLED = "CANCELLED"
    CANCELLED_NO_REFUND = "CANCELLED_NO_REFUND"
    COMPLETED = "COMPLETED"


class BookingAuditLog(Base):
    """Append-only; rows are never updated or deleted."""
    __tablename__ = "booking_audit_logs"

    # autoincrement id orders entries written within the same timestamp tick
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    booking_id: Mapped[str] = mapped_column(String(36), index=True)
    action: Mapped[str] = mapped_column(String(40), index=True)
    performed_by: Mapped[str] = mapped_column(String(120))
    details_json: Mapped[str] = mapped_column(Text, default="{}")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
