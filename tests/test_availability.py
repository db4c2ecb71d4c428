from datetime import date, timedelta
from decimal import Decimal

import pytest

from app.core.errors import InvalidDateRange
from app.services import booking_service
from app.services.availability_service import (
    DayStatus,
    get_day_statuses,
    has_conflict,
    ranges_overlap,
)
from app.services.rate_source import set_admin_blocked, set_open_for_booking
from conftest import next_weekday


@pytest.mark.parametrize("s1,e1,s2,e2,expected", [
    (1, 3, 3, 5, True),    # shared boundary day
    (1, 3, 4, 6, False),   # adjacent
    (1, 10, 4, 5, True),   # containment
    (4, 5, 1, 10, True),
    (5, 6, 1, 4, False),
    (2, 2, 2, 2, True),
])
def test_inclusive_overlap_predicate(s1, e1, s2, e2, expected):
    d = lambda n: date(2026, 5, n)
    assert ranges_overlap(d(s1), d(e1), d(s2), d(e2)) is expected


def test_day_statuses_reflect_pending_and_approved(db, billboard, advertiser_id, owner_id):
    monday = next_weekday(0)
    pending = booking_service.create_booking(db, billboard.id, advertiser_id, monday, monday + timedelta(days=1))
    approved = booking_service.create_booking(db, billboard.id, advertiser_id, monday + timedelta(days=3), monday + timedelta(days=4))
    booking_service.approve_booking(db, approved.id, owner_id)

    days = get_day_statuses(db, billboard.id, monday, monday + timedelta(days=5))
    assert [d.status for d in days] == [
        DayStatus.PENDING, DayStatus.PENDING, DayStatus.AVAILABLE,
        DayStatus.BOOKED, DayStatus.BOOKED, DayStatus.AVAILABLE,
    ]
    assert [d.date for d in days] == [monday + timedelta(days=i) for i in range(6)]
    assert all(d.price == Decimal("1000.00") for d in days)
    assert pending.status == "PENDING"


def test_terminal_bookings_do_not_block(db, billboard, advertiser_id, owner_id):
    start = next_weekday(0)
    b = booking_service.create_booking(db, billboard.id, advertiser_id, start, start + timedelta(days=2))
    assert has_conflict(db, billboard.id, start, start)
    booking_service.reject_booking(db, b.id, owner_id)
    assert not has_conflict(db, billboard.id, start, start + timedelta(days=2))
    assert {d.status for d in get_day_statuses(db, billboard.id, start, start + timedelta(days=2))} == {DayStatus.AVAILABLE}


def test_exclude_booking_id_ignores_own_range(db, billboard, advertiser_id):
    start = next_weekday(0)
    b = booking_service.create_booking(db, billboard.id, advertiser_id, start, start + timedelta(days=2))
    assert has_conflict(db, billboard.id, start, start + timedelta(days=2))
    assert not has_conflict(db, billboard.id, start, start + timedelta(days=2), exclude_booking_id=b.id)


def test_closed_or_blocked_billboard_reports_unavailable(db, billboard, advertiser_id):
    start = next_weekday(0)
    booking_service.create_booking(db, billboard.id, advertiser_id, start, start)

    set_open_for_booking(db, billboard.id, False)
    assert {d.status for d in get_day_statuses(db, billboard.id, start, start + timedelta(days=3))} == {DayStatus.UNAVAILABLE}

    set_open_for_booking(db, billboard.id, True)
    set_admin_blocked(db, billboard.id, True)
    assert {d.status for d in get_day_statuses(db, billboard.id, start, start + timedelta(days=3))} == {DayStatus.UNAVAILABLE}


def test_reversed_window_rejected(db, billboard):
    start = next_weekday(0)
    with pytest.raises(InvalidDateRange):
        get_day_statuses(db, billboard.id, start, start - timedelta(days=1))
