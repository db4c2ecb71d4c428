import json
from decimal import Decimal
from fastapi import APIRouter, Depends, Header
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.api.deps import Actor, get_current_actor, require_roles, ensure_can_view, owned_booking
from app.models.booking import Booking
from app.schemas.booking import (
    AuditEntryOut,
    BookingAuditOut,
    BookingCreate,
    BookingListOut,
    BookingOut,
    DiscountLimitsOut,
    PriceBreakdownOut,
    RejectIn,
)
from app.services.audit_service import booking_history
from app.services import booking_service
from app.services.pricing import PriceBreakdown

router = APIRouter(tags=["bookings"])


def breakdown_out(p: PriceBreakdown, locked: bool = False) -> PriceBreakdownOut:
    cgst, sgst = p.gst_split()
    return PriceBreakdownOut(
        pricePerDay=p.price_per_day,
        days=p.days,
        originalBaseAmount=p.original_base_amount,
        discountPercent=p.discount_percent,
        discountAmount=p.discount_amount,
        baseAmount=p.base_amount,
        commissionPercent=p.commission_percent,
        commissionAmount=p.commission_amount,
        taxableAmount=p.taxable_amount,
        gstPercent=p.gst_percent,
        gstAmount=p.gst_amount,
        cgstAmount=cgst,
        sgstAmount=sgst,
        totalAmount=p.total_amount,
        locked=locked,
    )


def booking_out(b: Booking) -> BookingOut:
    return BookingOut(
        id=b.id,
        billboardId=b.billboard_id,
        advertiserId=b.advertiser_id,
        startDate=b.start_date,
        endDate=b.end_date,
        status=b.status,
        paymentStatus=b.payment_status,
        paymentReference=b.payment_reference,
        pricing=breakdown_out(booking_service.booking_breakdown(b), locked=bool(b.price_locked)),
        lockedAt=b.locked_at.isoformat() if b.locked_at else None,
        createdAt=b.created_at.isoformat(),
    )


@router.post("/bookings", response_model=BookingOut, status_code=201)
def create_booking(body: BookingCreate,
                   idempotency_key: str | None = Header(default=None, alias="Idempotency-Key"),
                   db: Session = Depends(get_db),
                   actor: Actor = Depends(require_roles("advertiser"))):
    key = (idempotency_key or "").strip() or None
    b = booking_service.create_booking(db, body.billboardId, actor.user_id, body.startDate, body.endDate, key)
    return booking_out(b)


@router.get("/bookings", response_model=BookingListOut)
def list_bookings(status: str | None = None, limit: int = 50, offset: int = 0,
                  db: Session = Depends(get_db),
                  actor: Actor = Depends(get_current_actor)):
    scope = {}
    if actor.role == "advertiser":
        scope["advertiser_id"] = actor.user_id
    elif actor.role == "owner":
        scope["owner_id"] = actor.user_id
    items = booking_service.list_bookings(db, status=status, limit=limit, offset=offset, **scope)
    total = booking_service.count_bookings(db, status=status, **scope)
    return BookingListOut(total=total, items=[booking_out(b) for b in items])


@router.get("/bookings/{booking_id}", response_model=BookingOut)
def get_booking(booking_id: str, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    b = booking_service.get_booking(db, booking_id)
    ensure_can_view(db, actor, b)
    return booking_out(b)


@router.post("/bookings/{booking_id}/approve", response_model=BookingOut)
def approve_booking(booking_id: str, db: Session = Depends(get_db),
                    actor: Actor = Depends(require_roles("owner", "admin"))):
    owned_booking(booking_id, db, actor)
    return booking_out(booking_service.approve_booking(db, booking_id, actor.user_id))


@router.post("/bookings/{booking_id}/reject", response_model=BookingOut)
def reject_booking(booking_id: str, body: RejectIn | None = None, db: Session = Depends(get_db),
                   actor: Actor = Depends(require_roles("owner", "admin"))):
    owned_booking(booking_id, db, actor)
    reason = body.reason if body else ""
    return booking_out(booking_service.reject_booking(db, booking_id, actor.user_id, reason))


@router.get("/bookings/{booking_id}/discount-limits", response_model=DiscountLimitsOut)
def get_discount_limits(booking_id: str, db: Session = Depends(get_db),
                        actor: Actor = Depends(require_roles("owner", "admin"))):
    owned_booking(booking_id, db, actor)
    lim = booking_service.discount_limits(db, booking_id)
    return DiscountLimitsOut(
        bookingId=lim.booking_id,
        isWeekend=lim.is_weekend,
        maxDiscountPercent=lim.max_discount_percent,
        currentDiscountPercent=lim.current_discount_percent,
        currentDiscountAmount=lim.current_discount_amount,
        originalBaseAmount=lim.original_base_amount,
        currentTotal=lim.current_total,
        commissionPercent=lim.commission_percent,
        gstPercent=lim.gst_percent,
    )


@router.post("/bookings/{booking_id}/discount", response_model=BookingOut)
def apply_discount(booking_id: str, percent: Decimal, db: Session = Depends(get_db),
                   actor: Actor = Depends(require_roles("owner", "admin"))):
    owned_booking(booking_id, db, actor)
    return booking_out(booking_service.apply_discount(db, booking_id, percent, actor.user_id))


@router.delete("/bookings/{booking_id}/discount", response_model=BookingOut)
def remove_discount(booking_id: str, db: Session = Depends(get_db),
                    actor: Actor = Depends(require_roles("owner", "admin"))):
    owned_booking(booking_id, db, actor)
    return booking_out(booking_service.remove_discount(db, booking_id, actor.user_id))


@router.post("/bookings/{booking_id}/cancel", response_model=BookingOut)
def cancel_booking(booking_id: str, db: Session = Depends(get_db),
                   actor: Actor = Depends(get_current_actor)):
    b = booking_service.get_booking(db, booking_id)
    ensure_can_view(db, actor, b)
    return booking_out(booking_service.cancel_booking(db, booking_id, actor.user_id))


@router.get("/bookings/{booking_id}/audit", response_model=BookingAuditOut)
def get_booking_audit(booking_id: str, db: Session = Depends(get_db),
                      actor: Actor = Depends(get_current_actor)):
    b = booking_service.get_booking(db, booking_id)
    ensure_can_view(db, actor, b)
    history = [
        AuditEntryOut(
            action=e.action,
            timestamp=e.created_at.isoformat(),
            performedBy=e.performed_by,
            details=json.loads(e.details_json or "{}"),
        )
        for e in booking_history(db, booking_id)
    ]
    return BookingAuditOut(bookingId=booking_id, history=history)
