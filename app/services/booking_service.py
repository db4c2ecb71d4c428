"""
Booking lifecycle manager.

Status:   PENDING -> APPROVED | REJECTED | CANCELLED
          APPROVED -> CANCELLED | CANCELLED_NO_REFUND | COMPLETED
Payment:  NOT_PAID -> PENDING -> PAID | FAILED,  FAILED -> PENDING (re-attempt)

Every mutation runs under the billboard's lock and a row lock on the record it
changes, writes its audit entry in the same transaction and commits once. A
rejected operation raises before anything is added to the session. Repeating a
mutation that already reached its target state returns the booking unchanged.
"""
import logging
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import (
    AlreadyLocked,
    BillboardUnavailable,
    DateRangeUnavailable,
    DiscountExceedsLimit,
    InvalidDateRange,
    InvalidStateTransition,
    NotFound,
)
from app.models.audit_log import AuditAction
from app.models.billboard import Billboard
from app.models.booking import Booking, BookingStatus, PaymentStatus
from app.services.audit_service import log_booking_event
from app.services.availability_service import has_conflict, validate_range
from app.services.locks import billboard_lock
from app.services.policy_service import PolicySnapshot, get_policy_snapshot
from app.services.pricing import PriceBreakdown, compute_for_range, money
from app.services.rate_source import RateSnapshot, get_rate_snapshot
from app.utils.dates import is_weekend_window, today

logger = logging.getLogger(__name__)

SYSTEM_ACTOR = "system"
PAYMENT_ACTOR = "payment-gateway"


@dataclass(frozen=True)
class PricePreview:
    breakdown: PriceBreakdown
    start_date: date
    end_date: date
    is_weekend: bool
    max_discount_percent: Decimal
    available: bool


@dataclass(frozen=True)
class DiscountLimits:
    booking_id: str
    is_weekend: bool
    max_discount_percent: Decimal
    current_discount_percent: Decimal
    current_discount_amount: Decimal
    original_base_amount: Decimal
    current_total: Decimal
    commission_percent: Decimal
    gst_percent: Decimal


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _apply_breakdown(b: Booking, p: PriceBreakdown) -> None:
    b.days = p.days
    b.price_per_day_at_booking = p.price_per_day
    b.original_base_amount = p.original_base_amount
    b.discount_percent = p.discount_percent
    b.discount_amount = p.discount_amount
    b.base_amount = p.base_amount
    b.commission_percent = p.commission_percent
    b.commission_amount = p.commission_amount
    b.gst_percent = p.gst_percent
    b.gst_amount = p.gst_amount
    b.total_amount = p.total_amount


def booking_breakdown(b: Booking) -> PriceBreakdown:
    return PriceBreakdown(
        price_per_day=money(b.price_per_day_at_booking),
        days=b.days,
        original_base_amount=money(b.original_base_amount),
        discount_percent=money(b.discount_percent),
        discount_amount=money(b.discount_amount),
        base_amount=money(b.base_amount),
        commission_percent=money(b.commission_percent),
        commission_amount=money(b.commission_amount),
        gst_percent=money(b.gst_percent),
        gst_amount=money(b.gst_amount),
        total_amount=money(b.total_amount),
    )


def _commit(db: Session) -> None:
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise


# -------------------------
# READS
# -------------------------
def get_booking(db: Session, booking_id: str) -> Booking:
    b = db.get(Booking, booking_id)
    if not b:
        raise NotFound("Booking not found", booking_id=booking_id)
    return b


def _scoped(stmt, advertiser_id: str | None, owner_id: str | None, status: str | None):
    if advertiser_id:
        stmt = stmt.where(Booking.advertiser_id == advertiser_id)
    if owner_id:
        stmt = stmt.join(Billboard, Billboard.id == Booking.billboard_id).where(Billboard.owner_id == owner_id)
    if status:
        stmt = stmt.where(Booking.status == status)
    return stmt


def list_bookings(db: Session, advertiser_id: str | None = None, owner_id: str | None = None,
                  status: str | None = None, limit: int = 50, offset: int = 0) -> list[Booking]:
    stmt = _scoped(select(Booking), advertiser_id, owner_id, status)
    stmt = stmt.order_by(Booking.created_at.desc()).limit(min(limit, 200)).offset(max(offset, 0))
    return list(db.execute(stmt).scalars())


def count_bookings(db: Session, advertiser_id: str | None = None, owner_id: str | None = None,
                   status: str | None = None) -> int:
    """Matching rows ignoring limit/offset."""
    stmt = _scoped(select(func.count()).select_from(Booking), advertiser_id, owner_id, status)
    return db.execute(stmt).scalar_one()


def _check_discount(percent, policy: PolicySnapshot, start: date, end: date) -> Decimal:
    cap = policy.max_discount_percent(is_weekend_window(start, end))
    try:
        pct = money(percent)
        in_range = 0 <= pct <= cap
    except InvalidOperation:
        # too many digits to quantize, NaN or infinity
        in_range = False
    if not in_range:
        raise DiscountExceedsLimit(f"Discount must be between 0 and {cap}%", percent=percent, maxDiscountPercent=cap)
    return pct


def price_preview(db: Session, billboard_id: str, start: date, end: date, discount_percent=0) -> PricePreview:
    """Live preview; nothing is persisted."""
    validate_range(start, end)
    rate = get_rate_snapshot(db, billboard_id)
    policy = get_policy_snapshot(db)
    pct = _check_discount(discount_percent, policy, start, end)
    weekend = is_weekend_window(start, end)
    return PricePreview(
        breakdown=compute_for_range(rate.price_per_day, start, end, pct, policy.commission_percent, policy.gst_percent),
        start_date=start,
        end_date=end,
        is_weekend=weekend,
        max_discount_percent=policy.max_discount_percent(weekend),
        available=rate.bookable and not has_conflict(db, billboard_id, start, end),
    )


def discount_limits(db: Session, booking_id: str) -> DiscountLimits:
    b = get_booking(db, booking_id)
    policy = get_policy_snapshot(db)
    weekend = is_weekend_window(b.start_date, b.end_date)
    return DiscountLimits(
        booking_id=b.id,
        is_weekend=weekend,
        max_discount_percent=policy.max_discount_percent(weekend),
        current_discount_percent=money(b.discount_percent),
        current_discount_amount=money(b.discount_amount),
        original_base_amount=money(b.original_base_amount),
        current_total=money(b.total_amount),
        # a locked booking reports what it was locked at, not current policy
        commission_percent=money(b.commission_percent) if b.price_locked else policy.commission_percent,
        gst_percent=money(b.gst_percent) if b.price_locked else policy.gst_percent,
    )


# -------------------------
# CREATE
# -------------------------
def _find_by_idempotency_key(db: Session, advertiser_id: str, key: str) -> Booking | None:
    return db.execute(
        select(Booking).where(Booking.advertiser_id == advertiser_id, Booking.idempotency_key == key)
    ).scalar_one_or_none()


def _replay(existing: Booking, billboard_id: str, start: date, end: date) -> Booking:
    if (existing.billboard_id, existing.start_date, existing.end_date) != (billboard_id, start, end):
        raise InvalidStateTransition("Idempotency-Key was already used for a different booking request")
    return existing


def create_booking(db: Session, billboard_id: str, advertiser_id: str, start: date, end: date,
                   idempotency_key: str | None = None) -> Booking:
    validate_range(start, end)
    if start < today():
        raise InvalidDateRange("startDate must not be in the past", startDate=start)

    with billboard_lock(billboard_id):
        # Row lock on the billboard serializes check-then-insert across processes
        bb = db.execute(
            select(Billboard).where(Billboard.id == billboard_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if not bb:
            raise NotFound("Billboard not found", billboard_id=billboard_id)

        if idempotency_key:
            existing = _find_by_idempotency_key(db, advertiser_id, idempotency_key)
            if existing:
                db.commit()
                return _replay(existing, billboard_id, start, end)

        rate = RateSnapshot(bb.id, bb.owner_id, money(bb.price_per_day), bool(bb.is_open_for_booking), bool(bb.admin_blocked))
        if not rate.bookable:
            db.rollback()
            raise BillboardUnavailable(billboard_id=billboard_id)

        if has_conflict(db, billboard_id, start, end):
            db.rollback()
            raise DateRangeUnavailable(billboard_id=billboard_id, startDate=start, endDate=end)

        policy = get_policy_snapshot(db)
        booking = Booking(
            id=str(uuid.uuid4()),
            billboard_id=billboard_id,
            advertiser_id=advertiser_id,
            start_date=start,
            end_date=end,
            status=BookingStatus.PENDING,
            payment_status=PaymentStatus.NOT_PAID,
            price_locked=False,
            idempotency_key=idempotency_key,
        )
        _apply_breakdown(booking, compute_for_range(
            rate.price_per_day, start, end, Decimal("0"), policy.commission_percent, policy.gst_percent,
        ))
        db.add(booking)
        log_booking_event(db, booking.id, AuditAction.CREATED, advertiser_id, {
            "billboardId": billboard_id,
            "startDate": start.isoformat(),
            "endDate": end.isoformat(),
            "totalAmount": str(booking.total_amount),
        })
        try:
            db.commit()
        except IntegrityError:
            # exclusion constraint (PostgreSQL) or a concurrent replay of the same idempotency key
            db.rollback()
            if idempotency_key:
                existing = _find_by_idempotency_key(db, advertiser_id, idempotency_key)
                if existing:
                    return _replay(existing, billboard_id, start, end)
            raise DateRangeUnavailable(billboard_id=billboard_id, startDate=start, endDate=end)

    logger.info("booking %s created billboard=%s %s..%s total=%s", booking.id, billboard_id, start, end, booking.total_amount)
    return booking


# -------------------------
# TRANSITIONS
# -------------------------
@contextmanager
def _locked_booking(db: Session, booking_id: str):
    billboard_id = get_booking(db, booking_id).billboard_id
    with billboard_lock(billboard_id):
        b = db.execute(
            select(Booking).where(Booking.id == booking_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one()
        try:
            yield b
        except Exception:
            db.rollback()
            raise
        else:
            if db.in_transaction():
                # no-op replays commit nothing but must still release the row lock
                db.commit()


def _require_status(b: Booking, *allowed: str, target: str) -> None:
    if b.status not in allowed:
        raise InvalidStateTransition(
            f"Booking is {b.status}; cannot move to {target}",
            booking_id=b.id, status=b.status, target=target,
        )


def approve_booking(db: Session, booking_id: str, actor: str) -> Booking:
    with _locked_booking(db, booking_id) as b:
        if b.status == BookingStatus.APPROVED:
            return b
        _require_status(b, BookingStatus.PENDING, target=BookingStatus.APPROVED)
        b.status = BookingStatus.APPROVED
        log_booking_event(db, b.id, AuditAction.APPROVED, actor)
        _commit(db)
    logger.info("booking %s approved by %s", booking_id, actor)
    return b


def reject_booking(db: Session, booking_id: str, actor: str, reason: str | None = None) -> Booking:
    with _locked_booking(db, booking_id) as b:
        if b.status == BookingStatus.REJECTED:
            return b
        _require_status(b, BookingStatus.PENDING, target=BookingStatus.REJECTED)
        if b.payment_status not in (PaymentStatus.NOT_PAID, PaymentStatus.FAILED):
            raise InvalidStateTransition("Cannot reject a booking once payment has begun",
                                         booking_id=b.id, payment_status=b.payment_status)
        b.status = BookingStatus.REJECTED
        log_booking_event(db, b.id, AuditAction.REJECTED, actor, {"reason": reason or ""})
        _commit(db)
    logger.info("booking %s rejected by %s", booking_id, actor)
    return b


def apply_discount(db: Session, booking_id: str, percent, actor: str) -> Booking:
    with _locked_booking(db, booking_id) as b:
        if b.price_locked or b.payment_status == PaymentStatus.PAID:
            raise AlreadyLocked("Discount cannot change after payment", booking_id=b.id)
        _require_status(b, *BookingStatus.ACTIVE, target="discount change")

        policy = get_policy_snapshot(db)
        pct = _check_discount(percent, policy, b.start_date, b.end_date)
        old_pct = money(b.discount_percent)
        if pct == old_pct:
            return b

        rate = get_rate_snapshot(db, b.billboard_id)
        old_total = money(b.total_amount)
        _apply_breakdown(b, compute_for_range(
            rate.price_per_day, b.start_date, b.end_date, pct, policy.commission_percent, policy.gst_percent,
        ))
        action = AuditAction.DISCOUNT_REMOVED if pct == 0 else AuditAction.DISCOUNT_APPLIED
        log_booking_event(db, b.id, action, actor, {
            "oldPercent": str(old_pct),
            "newPercent": str(pct),
            "oldTotal": str(old_total),
            "newTotal": str(b.total_amount),
        })
        _commit(db)
    logger.info("booking %s discount %s%% -> %s%% by %s", booking_id, old_pct, pct, actor)
    return b


def remove_discount(db: Session, booking_id: str, actor: str) -> Booking:
    return apply_discount(db, booking_id, 0, actor)


def begin_payment(db: Session, booking_id: str, payment_reference: str, actor: str = PAYMENT_ACTOR) -> Booking:
    with _locked_booking(db, booking_id) as b:
        if b.payment_status == PaymentStatus.PAID:
            raise AlreadyLocked("Booking is already paid", booking_id=b.id)
        if b.payment_status == PaymentStatus.PENDING and b.payment_reference == payment_reference:
            return b
        _require_status(b, BookingStatus.APPROVED, target="payment")
        b.payment_status = PaymentStatus.PENDING
        b.payment_reference = payment_reference
        b.payment_failure_reason = None
        log_booking_event(db, b.id, AuditAction.PAYMENT_INITIATED, actor, {
            "paymentReference": payment_reference,
            "amount": str(b.total_amount),
        })
        _commit(db)
    logger.info("booking %s payment initiated ref=%s", booking_id, payment_reference)
    return b


def mark_paid(db: Session, booking_id: str, payment_reference: str, actor: str = PAYMENT_ACTOR) -> Booking:
    with _locked_booking(db, booking_id) as b:
        if b.payment_status == PaymentStatus.PAID:
            if b.payment_reference == payment_reference:
                return b
            raise AlreadyLocked("Booking was paid with a different payment reference",
                                booking_id=b.id, payment_reference=payment_reference)
        _require_status(b, BookingStatus.APPROVED, target=PaymentStatus.PAID)
        if b.payment_status not in (PaymentStatus.NOT_PAID, PaymentStatus.PENDING):
            raise InvalidStateTransition("Payment must be re-initiated after a failure",
                                         booking_id=b.id, payment_status=b.payment_status)
        # Freeze the last computed breakdown; later rate/policy changes no longer apply.
        b.payment_status = PaymentStatus.PAID
        b.payment_reference = payment_reference
        b.price_locked = True
        b.locked_at = _now()
        log_booking_event(db, b.id, AuditAction.PAID, actor, {
            "paymentReference": payment_reference,
            "totalAmount": str(b.total_amount),
            "pricePerDay": str(b.price_per_day_at_booking),
            "commissionPercent": str(b.commission_percent),
            "gstPercent": str(b.gst_percent),
            "discountPercent": str(b.discount_percent),
        })
        _commit(db)
    logger.info("booking %s paid ref=%s total=%s (price locked)", booking_id, payment_reference, b.total_amount)
    return b


def mark_payment_failed(db: Session, booking_id: str, reason: str, actor: str = PAYMENT_ACTOR) -> Booking:
    with _locked_booking(db, booking_id) as b:
        if b.payment_status == PaymentStatus.FAILED and b.payment_failure_reason == reason:
            return b
        if b.payment_status == PaymentStatus.PAID:
            raise AlreadyLocked("Booking is already paid", booking_id=b.id)
        _require_status(b, BookingStatus.APPROVED, target=PaymentStatus.FAILED)
        if b.payment_status != PaymentStatus.PENDING:
            raise InvalidStateTransition("Only an initiated payment can fail",
                                         booking_id=b.id, payment_status=b.payment_status)
        b.payment_status = PaymentStatus.FAILED
        b.payment_failure_reason = reason
        log_booking_event(db, b.id, AuditAction.PAYMENT_FAILED, actor, {
            "paymentReference": b.payment_reference or "",
            "reason": reason,
        })
        _commit(db)
    logger.warning("booking %s payment failed: %s", booking_id, reason)
    return b


def cancel_booking(db: Session, booking_id: str, actor: str) -> Booking:
    """
    Unpaid bookings become CANCELLED and any in-flight payment is voided.
    APPROVED + PAID bookings become CANCELLED_NO_REFUND: the payment stays PAID,
    no refund is issued.
    """
    with _locked_booking(db, booking_id) as b:
        if b.status in (BookingStatus.CANCELLED, BookingStatus.CANCELLED_NO_REFUND):
            return b
        _require_status(b, *BookingStatus.ACTIVE, target=BookingStatus.CANCELLED)

        previous = {"previousStatus": b.status, "paymentStatus": b.payment_status}
        if b.payment_status == PaymentStatus.PAID and b.status == BookingStatus.APPROVED:
            b.status = BookingStatus.CANCELLED_NO_REFUND
            action = AuditAction.CANCELLED_NO_REFUND
            details = {**previous, "refund": "none"}
        else:
            voided = b.payment_status == PaymentStatus.PENDING
            if voided:
                b.payment_status = PaymentStatus.FAILED
                b.payment_failure_reason = "voided: booking cancelled"
            b.status = BookingStatus.CANCELLED
            action = AuditAction.CANCELLED
            details = {**previous, "paymentVoided": voided}
        log_booking_event(db, b.id, action, actor, details)
        _commit(db)
    logger.info("booking %s %s by %s", booking_id, b.status, actor)
    return b


def complete_booking(db: Session, booking_id: str, actor: str = SYSTEM_ACTOR, as_of: date | None = None) -> Booking:
    as_of = as_of or today()
    with _locked_booking(db, booking_id) as b:
        if b.status == BookingStatus.COMPLETED:
            return b
        _require_status(b, BookingStatus.APPROVED, target=BookingStatus.COMPLETED)
        if b.payment_status != PaymentStatus.PAID:
            raise InvalidStateTransition("Only paid bookings can complete", booking_id=b.id)
        if b.end_date >= as_of:
            raise InvalidStateTransition("Booking window has not ended", booking_id=b.id, endDate=b.end_date)
        b.status = BookingStatus.COMPLETED
        log_booking_event(db, b.id, AuditAction.COMPLETED, actor, {"endDate": b.end_date.isoformat()})
        _commit(db)
    logger.info("booking %s completed", booking_id)
    return b


def complete_finished_bookings(db: Session, as_of: date | None = None) -> int:
    """Sweep: complete every APPROVED + PAID booking whose end date has passed."""
    as_of = as_of or today()
    ids = list(db.execute(
        select(Booking.id).where(
            Booking.status == BookingStatus.APPROVED,
            Booking.payment_status == PaymentStatus.PAID,
            Booking.end_date < as_of,
        )
    ).scalars())
    completed = 0
    for booking_id in ids:
        try:
            complete_booking(db, booking_id, SYSTEM_ACTOR, as_of)
            completed += 1
        except InvalidStateTransition as e:
            # changed (e.g. cancelled) between the scan and the lock
            logger.warning("skipping completion of %s: %s", booking_id, e.message)
    if completed:
        logger.info("completion sweep completed %d booking(s)", completed)
    return completed
