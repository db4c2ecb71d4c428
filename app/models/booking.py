from datetime import date, datetime, timezone
from decimal import Decimal
from sqlalchemy import String, Integer, Boolean, Date, DateTime, Numeric, CheckConstraint, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from app.db.session import Base


class BookingStatus:
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"
    CANCELLED_NO_REFUND = "CANCELLED_NO_REFUND"
    COMPLETED = "COMPLETED"

    ACTIVE = (PENDING, APPROVED)  # these block overlapping ranges
    TERMINAL = (REJECTED, CANCELLED, CANCELLED_NO_REFUND, COMPLETED)
    ALL = (PENDING, APPROVED, REJECTED, CANCELLED, CANCELLED_NO_REFUND, COMPLETED)


class PaymentStatus:
    NOT_PAID = "NOT_PAID"
    PENDING = "PENDING"
    PAID = "PAID"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint("end_date >= start_date", name="ck_bookings_date_order"),
        UniqueConstraint("advertiser_id", "idempotency_key", name="uq_bookings_advertiser_idempotency_key"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    billboard_id: Mapped[str] = mapped_column(String(36), index=True)
    advertiser_id: Mapped[str] = mapped_column(String(36), index=True)

    # inclusive, whole days
    start_date: Mapped[date] = mapped_column(Date, index=True)
    end_date: Mapped[date] = mapped_column(Date, index=True)

    status: Mapped[str] = mapped_column(String(30), default=BookingStatus.PENDING, index=True)
    payment_status: Mapped[str] = mapped_column(String(20), default=PaymentStatus.NOT_PAID)

    # price breakdown (flattened)
    days: Mapped[int] = mapped_column(Integer)
    price_per_day_at_booking: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    original_base_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    discount_percent: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=Decimal("0"))
    discount_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    base_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    commission_percent: Mapped[Decimal] = mapped_column(Numeric(5, 2))
    commission_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    gst_percent: Mapped[Decimal] = mapped_column(Numeric(5, 2))
    gst_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    price_locked: Mapped[bool] = mapped_column(Boolean, default=False)
    locked_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=True)

    payment_reference: Mapped[str] = mapped_column(String(120), nullable=True)
    payment_failure_reason: Mapped[str] = mapped_column(String(500), nullable=True)

    idempotency_key: Mapped[str] = mapped_column(String(120), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
                                                 onupdate=lambda: datetime.now(timezone.utc))
