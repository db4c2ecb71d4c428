"""Platform policy store: commission, GST and discount caps, kept in the settings table."""
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import InvalidPolicyValue
from app.models.setting import Setting
from app.services.pricing import money

COMMISSION_PERCENT = "COMMISSION_PERCENT"
GST_PERCENT = "GST_PERCENT"
WEEKDAY_DISCOUNT_CAP = "WEEKDAY_DISCOUNT_CAP_PERCENT"
WEEKEND_DISCOUNT_CAP = "WEEKEND_DISCOUNT_CAP_PERCENT"


def _defaults() -> dict[str, Decimal]:
    return {
        COMMISSION_PERCENT: settings.DEFAULT_COMMISSION_PERCENT,
        GST_PERCENT: settings.DEFAULT_GST_PERCENT,
        WEEKDAY_DISCOUNT_CAP: settings.DEFAULT_WEEKDAY_DISCOUNT_CAP_PERCENT,
        WEEKEND_DISCOUNT_CAP: settings.DEFAULT_WEEKEND_DISCOUNT_CAP_PERCENT,
    }


@dataclass(frozen=True)
class PolicySnapshot:
    commission_percent: Decimal
    gst_percent: Decimal
    weekday_discount_cap_percent: Decimal
    weekend_discount_cap_percent: Decimal

    def max_discount_percent(self, weekend: bool) -> Decimal:
        return self.weekend_discount_cap_percent if weekend else self.weekday_discount_cap_percent


def _read_percent(db: Session, key: str) -> Decimal:
    s = db.get(Setting, key)
    if s and s.str_value:
        try:
            return money(s.str_value)
        except InvalidOperation:
            pass
    return money(_defaults()[key])


def get_policy_snapshot(db: Session) -> PolicySnapshot:
    return PolicySnapshot(
        commission_percent=_read_percent(db, COMMISSION_PERCENT),
        gst_percent=_read_percent(db, GST_PERCENT),
        weekday_discount_cap_percent=_read_percent(db, WEEKDAY_DISCOUNT_CAP),
        weekend_discount_cap_percent=_read_percent(db, WEEKEND_DISCOUNT_CAP),
    )


def set_percent(db: Session, key: str, value) -> Decimal:
    if key not in _defaults():
        raise KeyError(key)
    try:
        pct = money(value)
    except InvalidOperation:
        raise InvalidPolicyValue(f"{key} is not a number")
    if pct < 0 or pct > 100:
        raise InvalidPolicyValue(f"{key} must be between 0 and 100", value=value)
    s = db.get(Setting, key)
    if not s:
        s = Setting(key=key, int_value=None, str_value=str(pct))
        db.add(s)
    else:
        s.str_value = str(pct)
    return pct


def update_policy(db: Session, commission_percent=None, gst_percent=None,
                  weekday_discount_cap_percent=None, weekend_discount_cap_percent=None) -> PolicySnapshot:
    changes = {
        COMMISSION_PERCENT: commission_percent,
        GST_PERCENT: gst_percent,
        WEEKDAY_DISCOUNT_CAP: weekday_discount_cap_percent,
        WEEKEND_DISCOUNT_CAP: weekend_discount_cap_percent,
    }
    for key, value in changes.items():
        if value is not None:
            set_percent(db, key, value)
    db.commit()
    return get_policy_snapshot(db)


def ensure_policy_defaults(db: Session) -> None:
    for key, value in _defaults().items():
        if not db.get(Setting, key):
            db.add(Setting(key=key, int_value=None, str_value=str(money(value))))
    db.commit()
