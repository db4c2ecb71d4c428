from datetime import date
from decimal import Decimal

import pytest

from app.services.pricing import compute, compute_for_range, inclusive_days, money


def test_scenario_a_no_discount():
    p = compute(Decimal("1000"), 3, 0, 15, 18)
    assert p.original_base_amount == Decimal("3000.00")
    assert p.discount_amount == Decimal("0.00")
    assert p.base_amount == Decimal("3000.00")
    assert p.commission_amount == Decimal("450.00")
    assert p.gst_amount == Decimal("621.00")
    assert p.total_amount == Decimal("4071.00")


def test_scenario_b_twenty_percent_discount():
    p = compute(Decimal("1000"), 3, 20, 15, 18)
    assert p.discount_amount == Decimal("600.00")
    assert p.base_amount == Decimal("2400.00")
    assert p.commission_amount == Decimal("360.00")
    assert p.gst_amount == Decimal("496.80")
    assert p.total_amount == Decimal("3256.80")


def test_each_step_rounds_half_up():
    p = compute(Decimal("333.33"), 1, Decimal("12.5"), 15, 18)
    assert p.discount_amount == Decimal("41.67")
    assert p.base_amount == Decimal("291.66")
    assert p.commission_amount == Decimal("43.75")
    assert p.taxable_amount == Decimal("335.41")
    assert p.gst_amount == Decimal("60.37")
    assert p.total_amount == Decimal("395.78")


@pytest.mark.parametrize("rate,days,discount,commission,gst", [
    ("999.99", 7, "33.33", "12.5", "18"),
    ("1.01", 1, "0", "0", "0"),
    ("12345.67", 31, "49.99", "17.25", "28"),
    ("0.05", 3, "50", "15", "5"),
])
def test_total_is_exact_sum_of_parts(rate, days, discount, commission, gst):
    p = compute(Decimal(rate), days, Decimal(discount), Decimal(commission), Decimal(gst))
    assert p.total_amount == p.base_amount + p.commission_amount + p.gst_amount
    assert p.base_amount == p.original_base_amount - p.discount_amount
    for amount in (p.original_base_amount, p.discount_amount, p.commission_amount, p.gst_amount, p.total_amount):
        assert amount == money(amount)


def test_compute_is_deterministic():
    args = (Decimal("777.77"), 5, Decimal("10"), Decimal("15"), Decimal("18"))
    assert compute(*args) == compute(*args)


def test_inclusive_day_count():
    assert inclusive_days(date(2026, 3, 1), date(2026, 3, 1)) == 1
    assert inclusive_days(date(2026, 2, 27), date(2026, 3, 2)) == 4
    p = compute_for_range(Decimal("1000"), date(2026, 3, 2), date(2026, 3, 4), 0, 15, 18)
    assert p.days == 3
    assert p.total_amount == Decimal("4071.00")


def test_gst_split_halves_and_keeps_remainder():
    assert compute(Decimal("1000"), 3, 0, 15, 18).gst_split() == (Decimal("310.50"), Decimal("310.50"))
    cgst, sgst = compute(Decimal("333.33"), 1, Decimal("12.5"), 15, 18).gst_split()
    assert (cgst, sgst) == (Decimal("30.19"), Decimal("30.18"))


def test_zero_days_rejected():
    with pytest.raises(ValueError):
        compute(Decimal("1000"), 0, 0, 15, 18)
