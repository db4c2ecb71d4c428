"""
Payment collaborator callbacks.

These are the only entry points the gateway integration may call; it reports
outcomes and never computes or adjusts prices.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import verify_payment_callback
from app.api.v1.routes.bookings import booking_out
from app.db.session import get_db
from app.schemas.booking import BookingOut
from app.schemas.payments import PaymentFailedIn, PaymentInitiatedIn, PaymentPaidIn
from app.services import booking_service

router = APIRouter(tags=["payments"], dependencies=[Depends(verify_payment_callback)])


@router.post("/payments/bookings/{booking_id}/initiated", response_model=BookingOut)
def payment_initiated(booking_id: str, body: PaymentInitiatedIn, db: Session = Depends(get_db)):
    return booking_out(booking_service.begin_payment(db, booking_id, body.paymentReference))


@router.post("/payments/bookings/{booking_id}/paid", response_model=BookingOut)
def payment_paid(booking_id: str, body: PaymentPaidIn, db: Session = Depends(get_db)):
    return booking_out(booking_service.mark_paid(db, booking_id, body.paymentReference))


@router.post("/payments/bookings/{booking_id}/failed", response_model=BookingOut)
def payment_failed(booking_id: str, body: PaymentFailedIn, db: Session = Depends(get_db)):
    return booking_out(booking_service.mark_payment_failed(db, booking_id, body.reason))
