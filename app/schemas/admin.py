from decimal import Decimal
from pydantic import BaseModel
from typing import Optional

class PlatformSettingsOut(BaseModel):
    commissionPercent: Decimal
    gstPercent: Decimal
    weekdayDiscountCapPercent: Decimal
    weekendDiscountCapPercent: Decimal
    currency: str
    timezone: str

class PlatformSettingsIn(BaseModel):
    commissionPercent: Optional[Decimal] = None
    gstPercent: Optional[Decimal] = None
    weekdayDiscountCapPercent: Optional[Decimal] = None
    weekendDiscountCapPercent: Optional[Decimal] = None

class BillboardStateOut(BaseModel):
    billboardId: str
    ownerId: str
    pricePerDay: Decimal
    isOpenForBooking: bool
    adminBlocked: bool

class PriceIn(BaseModel):
    pricePerDay: Decimal

class SweepOut(BaseModel):
    completed: int
