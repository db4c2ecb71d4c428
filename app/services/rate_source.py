"""Read side of billboard rates and bookability, plus the owner/admin toggles that feed it."""
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from sqlalchemy.orm import Session

from app.core.errors import NotFound, InvalidPrice
from app.models.billboard import Billboard
from app.services.pricing import money

# keeps multi-day totals inside NUMERIC(12, 2)
MAX_PRICE_PER_DAY = Decimal("9999999.99")


@dataclass(frozen=True)
class RateSnapshot:
    billboard_id: str
    owner_id: str
    price_per_day: Decimal
    is_open_for_booking: bool
    admin_blocked: bool

    @property
    def bookable(self) -> bool:
        return self.is_open_for_booking and not self.admin_blocked


def _snapshot(b: Billboard) -> RateSnapshot:
    return RateSnapshot(
        billboard_id=b.id,
        owner_id=b.owner_id,
        price_per_day=money(b.price_per_day),
        is_open_for_booking=bool(b.is_open_for_booking),
        admin_blocked=bool(b.admin_blocked),
    )


def get_billboard(db: Session, billboard_id: str) -> Billboard:
    b = db.get(Billboard, billboard_id)
    if not b:
        raise NotFound("Billboard not found", billboard_id=billboard_id)
    return b


def get_rate_snapshot(db: Session, billboard_id: str) -> RateSnapshot:
    return _snapshot(get_billboard(db, billboard_id))


def set_open_for_booking(db: Session, billboard_id: str, available: bool) -> RateSnapshot:
    b = get_billboard(db, billboard_id)
    b.is_open_for_booking = bool(available)
    db.commit()
    return _snapshot(b)


def set_admin_blocked(db: Session, billboard_id: str, blocked: bool) -> RateSnapshot:
    b = get_billboard(db, billboard_id)
    b.admin_blocked = bool(blocked)
    db.commit()
    return _snapshot(b)


def set_price_per_day(db: Session, billboard_id: str, price_per_day) -> RateSnapshot:
    try:
        price = money(price_per_day)
        valid = 0 < price <= MAX_PRICE_PER_DAY
    except InvalidOperation:
        valid = False
    if not valid:
        raise InvalidPrice(f"Price per day must be greater than zero and at most {MAX_PRICE_PER_DAY}",
                           price_per_day=price_per_day)
    b = get_billboard(db, billboard_id)
    b.price_per_day = price
    db.commit()
    return _snapshot(b)
