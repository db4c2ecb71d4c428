"""
Availability index for a billboard.

Day status is derived from active bookings on every call; nothing is cached.
Two inclusive ranges [s1, e1] and [s2, e2] overlap iff s1 <= e2 and s2 <= e1,
and that predicate is the only conflict test used anywhere in the engine.
"""
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import InvalidDateRange
from app.models.booking import Booking, BookingStatus
from app.services.rate_source import get_rate_snapshot
from app.utils.dates import iter_days


class DayStatus:
    AVAILABLE = "AVAILABLE"
    PENDING = "PENDING"
    BOOKED = "BOOKED"
    UNAVAILABLE = "UNAVAILABLE"


@dataclass(frozen=True)
class DayAvailability:
    date: date
    status: str
    price: Decimal


def ranges_overlap(s1: date, e1: date, s2: date, e2: date) -> bool:
    return s1 <= e2 and s2 <= e1


def validate_range(start: date, end: date) -> None:
    if end < start:
        raise InvalidDateRange("endDate must not be before startDate", startDate=start, endDate=end)


def active_bookings_overlapping(db: Session, billboard_id: str, start: date, end: date,
                                exclude_booking_id: str | None = None) -> list[Booking]:
    stmt = select(Booking).where(
        Booking.billboard_id == billboard_id,
        Booking.status.in_(BookingStatus.ACTIVE),
        Booking.start_date <= end,
        Booking.end_date >= start,
    )
    if exclude_booking_id:
        stmt = stmt.where(Booking.id != exclude_booking_id)
    return list(db.execute(stmt.order_by(Booking.start_date)).scalars())


def has_conflict(db: Session, billboard_id: str, start: date, end: date,
                 exclude_booking_id: str | None = None) -> bool:
    validate_range(start, end)
    return bool(active_bookings_overlapping(db, billboard_id, start, end, exclude_booking_id))


def get_day_statuses(db: Session, billboard_id: str, from_date: date, to_date: date) -> list[DayAvailability]:
    validate_range(from_date, to_date)
    if (to_date - from_date).days + 1 > settings.AVAILABILITY_MAX_WINDOW_DAYS:
        raise InvalidDateRange(
            f"window may not exceed {settings.AVAILABILITY_MAX_WINDOW_DAYS} days",
            fromDate=from_date, toDate=to_date,
        )

    rate = get_rate_snapshot(db, billboard_id)
    if not rate.bookable:
        return [DayAvailability(d, DayStatus.UNAVAILABLE, rate.price_per_day) for d in iter_days(from_date, to_date)]

    booked: set[date] = set()
    pending: set[date] = set()
    for b in active_bookings_overlapping(db, billboard_id, from_date, to_date):
        target = booked if b.status == BookingStatus.APPROVED else pending
        for d in iter_days(max(b.start_date, from_date), min(b.end_date, to_date)):
            target.add(d)

    out = []
    for d in iter_days(from_date, to_date):
        if d in booked:
            status = DayStatus.BOOKED
        elif d in pending:
            status = DayStatus.PENDING
        else:
            status = DayStatus.AVAILABLE
        out.append(DayAvailability(d, status, rate.price_per_day))
    return out


@dataclass(frozen=True)
class RangeAvailability:
    billboard_id: str
    start_date: date
    end_date: date
    bookable: bool
    conflicts: list[Booking]

    @property
    def available(self) -> bool:
        return self.bookable and not self.conflicts

    @property
    def message(self) -> str:
        if not self.bookable:
            return "Billboard is not open for booking"
        if self.conflicts:
            return f"{len(self.conflicts)} booking(s) overlap the selected dates"
        return "Selected dates are available"


def check_range(db: Session, billboard_id: str, start: date, end: date) -> RangeAvailability:
    """Range-level conflict check that also names the active bookings in the way."""
    validate_range(start, end)
    rate = get_rate_snapshot(db, billboard_id)
    return RangeAvailability(
        billboard_id=billboard_id,
        start_date=start,
        end_date=end,
        bookable=rate.bookable,
        conflicts=active_bookings_overlapping(db, billboard_id, start, end),
    )
