import datetime as dt
from decimal import Decimal
from pydantic import BaseModel
from typing import List

class DayAvailabilityOut(BaseModel):
    date: dt.date
    status: str  # AVAILABLE | PENDING | BOOKED | UNAVAILABLE
    price: Decimal

class AvailabilityOut(BaseModel):
    billboardId: str
    fromDate: dt.date
    toDate: dt.date
    days: List[DayAvailabilityOut]

class ConflictingBookingOut(BaseModel):
    id: str
    startDate: dt.date
    endDate: dt.date
    status: str

class RangeAvailabilityOut(BaseModel):
    available: bool
    billboardId: str
    startDate: dt.date
    endDate: dt.date
    conflictingBookings: List[ConflictingBookingOut] = []
    message: str = ""
