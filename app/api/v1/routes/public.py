from datetime import date
from decimal import Decimal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.config import settings
from app.db.session import get_db
from app.schemas.availability import (
    AvailabilityOut,
    ConflictingBookingOut,
    DayAvailabilityOut,
    RangeAvailabilityOut,
)
from app.schemas.booking import PricePreviewOut
from app.services.availability_service import check_range, get_day_statuses
from app.services.booking_service import price_preview
from app.api.v1.routes.bookings import breakdown_out

router = APIRouter(tags=["availability"])


@router.get("/billboards/{billboard_id}/availability", response_model=AvailabilityOut)
def billboard_availability(billboard_id: str,
                           from_date: date = Query(alias="from"),
                           to_date: date = Query(alias="to"),
                           db: Session = Depends(get_db)):
    days = get_day_statuses(db, billboard_id, from_date, to_date)
    return AvailabilityOut(
        billboardId=billboard_id,
        fromDate=from_date,
        toDate=to_date,
        days=[DayAvailabilityOut(date=d.date, status=d.status, price=d.price) for d in days],
    )


@router.get("/billboards/{billboard_id}/check-availability", response_model=RangeAvailabilityOut)
def check_availability(billboard_id: str, startDate: date, endDate: date, db: Session = Depends(get_db)):
    r = check_range(db, billboard_id, startDate, endDate)
    return RangeAvailabilityOut(
        available=r.available,
        billboardId=billboard_id,
        startDate=r.start_date,
        endDate=r.end_date,
        conflictingBookings=[
            ConflictingBookingOut(id=b.id, startDate=b.start_date, endDate=b.end_date, status=b.status)
            for b in r.conflicts
        ],
        message=r.message,
    )


@router.get("/bookings/price-preview", response_model=PricePreviewOut)
def get_price_preview(billboardId: str, startDate: date, endDate: date,
                      discountPercent: Decimal = Decimal("0"),
                      db: Session = Depends(get_db)):
    p = price_preview(db, billboardId, startDate, endDate, discountPercent)
    return PricePreviewOut(
        billboardId=billboardId,
        startDate=p.start_date,
        endDate=p.end_date,
        isWeekend=p.is_weekend,
        maxDiscountPercent=p.max_discount_percent,
        available=p.available,
        currency=settings.CURRENCY,
        pricing=breakdown_out(p.breakdown),
    )
