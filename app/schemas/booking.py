from datetime import date
from decimal import Decimal
from pydantic import BaseModel
from typing import List, Optional

class BookingCreate(BaseModel):
    billboardId: str
    startDate: date
    endDate: date

class PriceBreakdownOut(BaseModel):
    pricePerDay: Decimal
    days: int
    originalBaseAmount: Decimal
    discountPercent: Decimal
    discountAmount: Decimal
    baseAmount: Decimal
    commissionPercent: Decimal
    commissionAmount: Decimal
    taxableAmount: Decimal
    gstPercent: Decimal
    gstAmount: Decimal
    cgstAmount: Decimal
    sgstAmount: Decimal
    totalAmount: Decimal
    locked: bool = False

class BookingOut(BaseModel):
    id: str
    billboardId: str
    advertiserId: str
    startDate: date
    endDate: date
    status: str
    paymentStatus: str
    paymentReference: Optional[str] = None
    pricing: PriceBreakdownOut
    lockedAt: Optional[str] = None
    createdAt: str

class BookingListOut(BaseModel):
    total: int
    items: List[BookingOut]

class PricePreviewOut(BaseModel):
    billboardId: str
    startDate: date
    endDate: date
    isWeekend: bool
    maxDiscountPercent: Decimal
    available: bool
    currency: str
    pricing: PriceBreakdownOut

class DiscountLimitsOut(BaseModel):
    bookingId: str
    isWeekend: bool
    maxDiscountPercent: Decimal
    currentDiscountPercent: Decimal
    currentDiscountAmount: Decimal
    originalBaseAmount: Decimal
    currentTotal: Decimal
    commissionPercent: Decimal
    gstPercent: Decimal

class RejectIn(BaseModel):
    reason: str = ""

class AuditEntryOut(BaseModel):
    action: str
    timestamp: str
    performedBy: str
    details: dict = {}

class BookingAuditOut(BaseModel):
    bookingId: str
    history: List[AuditEntryOut]
