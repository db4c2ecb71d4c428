import json
import threading
import uuid
from datetime import timedelta
from decimal import Decimal

from app.core.errors import AlreadyLocked, DateRangeUnavailable
from app.db.session import SessionLocal
from app.models.audit_log import AuditAction
from app.models.booking import Booking, PaymentStatus
from app.services import booking_service, locks
from app.services.audit_service import booking_history
from app.services.locks import billboard_lock
from conftest import next_weekday

WORKERS = 8


def _race(billboard_id, ranges):
    barrier = threading.Barrier(len(ranges))
    created, conflicts, errors = [], [], []

    def attempt(i, start, end):
        db = SessionLocal()
        try:
            barrier.wait()
            b = booking_service.create_booking(db, billboard_id, f"advertiser-{i}", start, end)
            created.append(b.id)
        except DateRangeUnavailable:
            conflicts.append(i)
        except Exception as e:  # surfaced by the assertions below
            errors.append(e)
        finally:
            db.close()

    threads = [threading.Thread(target=attempt, args=(i, s, e)) for i, (s, e) in enumerate(ranges)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=60)
    return created, conflicts, errors


def test_overlapping_creates_admit_exactly_one(db, billboard):
    monday = next_weekday(0)
    # every range contains the Wednesday
    ranges = [(monday + timedelta(days=i % 3), monday + timedelta(days=2 + i % 3)) for i in range(WORKERS)]

    created, conflicts, errors = _race(billboard.id, ranges)

    assert errors == []
    assert len(created) == 1
    assert len(conflicts) == WORKERS - 1
    assert db.query(Booking).filter(Booking.billboard_id == billboard.id).count() == 1


def test_disjoint_creates_all_succeed(db, billboard):
    monday = next_weekday(0)
    ranges = [(monday + timedelta(days=2 * i), monday + timedelta(days=2 * i + 1)) for i in range(WORKERS)]

    created, conflicts, errors = _race(billboard.id, ranges)

    assert errors == []
    assert conflicts == []
    assert len(created) == WORKERS


def test_concurrent_discounts_leave_consistent_totals(db, billboard, owner_id):
    monday = next_weekday(0)
    booking = booking_service.create_booking(db, billboard.id, "advertiser-x", monday, monday + timedelta(days=2))
    barrier = threading.Barrier(WORKERS)
    errors = []

    def discount(pct):
        s = SessionLocal()
        try:
            barrier.wait()
            booking_service.apply_discount(s, booking.id, pct, owner_id)
        except Exception as e:
            errors.append(e)
        finally:
            s.close()

    threads = [threading.Thread(target=discount, args=(5 * (i + 1),)) for i in range(WORKERS)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=60)

    assert errors == []
    db.expire_all()
    b = booking_service.get_booking(db, booking.id)
    assert b.total_amount == b.base_amount + b.commission_amount + b.gst_amount
    assert b.discount_amount == b.original_base_amount - b.base_amount


def test_discounts_racing_mark_paid_never_change_a_locked_price(db, billboard, owner_id):
    monday = next_weekday(0)
    booking = booking_service.create_booking(db, billboard.id, "advertiser-y", monday, monday + timedelta(days=2))
    booking_service.approve_booking(db, booking.id, owner_id)
    booking_service.begin_payment(db, booking.id, "pay_race")

    barrier = threading.Barrier(WORKERS + 1)
    applied, locked_out, errors = [], [], []

    def discount(pct):
        s = SessionLocal()
        try:
            barrier.wait()
            booking_service.apply_discount(s, booking.id, pct, owner_id)
            applied.append(pct)
        except AlreadyLocked:
            locked_out.append(pct)
        except Exception as e:
            errors.append(e)
        finally:
            s.close()

    def pay():
        s = SessionLocal()
        try:
            barrier.wait()
            booking_service.mark_paid(s, booking.id, "pay_race")
        except Exception as e:
            errors.append(e)
        finally:
            s.close()

    threads = [threading.Thread(target=discount, args=(5 * (i + 1),)) for i in range(WORKERS)]
    threads.append(threading.Thread(target=pay))
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=60)

    assert errors == []
    assert len(applied) + len(locked_out) == WORKERS

    db.expire_all()
    b = booking_service.get_booking(db, booking.id)
    assert b.price_locked is True
    assert b.payment_status == PaymentStatus.PAID

    history = booking_history(db, booking.id)
    paid_entry = next(e for e in history if e.action == AuditAction.PAID)
    discount_entries = [e for e in history if e.action == AuditAction.DISCOUNT_APPLIED]
    # every discount that went through committed before the price was locked
    assert len(discount_entries) == len(applied)
    assert all(e.id < paid_entry.id for e in discount_entries)

    locked_at_payment = json.loads(paid_entry.details_json)
    assert Decimal(locked_at_payment["discountPercent"]) == b.discount_percent
    assert Decimal(locked_at_payment["totalAmount"]) == b.total_amount
    assert b.total_amount == b.base_amount + b.commission_amount + b.gst_amount


def test_billboard_locks_come_from_a_fixed_pool():
    ids = [str(uuid.uuid4()) for _ in range(1000)]
    for billboard_id in ids:
        with billboard_lock(billboard_id):
            pass
    assert len(locks._stripes) == locks.STRIPES
    assert all(0 <= locks.stripe_index(i) < locks.STRIPES for i in ids)
    assert locks.stripe_index(ids[0]) == locks.stripe_index(ids[0])

    with billboard_lock(ids[0]):
        assert locks._stripes[locks.stripe_index(ids[0])].locked()
    assert not locks._stripes[locks.stripe_index(ids[0])].locked()
