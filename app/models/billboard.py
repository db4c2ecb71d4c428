from decimal import Decimal
from sqlalchemy import String, Boolean, DateTime, Numeric
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from app.db.session import Base

class Billboard(Base):
    __tablename__ = "billboards"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    owner_id: Mapped[str] = mapped_column(String(36), index=True)
    title: Mapped[str] = mapped_column(String(160), default="")
    location: Mapped[str] = mapped_column(String(255), default="")

    # Current rate; bookings copy it, locked bookings never follow later changes.
    price_per_day: Mapped[Decimal] = mapped_column(Numeric(12, 2))

    is_open_for_booking: Mapped[bool] = mapped_column(Boolean, default=True)  # owner toggle
    admin_blocked: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
                                                 onupdate=lambda: datetime.now(timezone.utc))
