"""
Price breakdown for a billboard rental window.

All amounts are Decimal rounded half-up to 2 places after every multiplication or
division, so a preview and a persisted booking computed from the same inputs are
identical and total == base + commission + gst holds exactly.
"""
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP

CENT = Decimal("0.01")
HUNDRED = Decimal("100")


def money(value: Decimal | str | int | None) -> Decimal:
    if value is None:
        return Decimal("0.00")
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def percent_of(amount: Decimal, percent: Decimal) -> Decimal:
    return money(Decimal(amount) * Decimal(percent) / HUNDRED)


def inclusive_days(start: date, end: date) -> int:
    return (end - start).days + 1


@dataclass(frozen=True)
class PriceBreakdown:
    price_per_day: Decimal
    days: int
    original_base_amount: Decimal
    discount_percent: Decimal
    discount_amount: Decimal
    base_amount: Decimal
    commission_percent: Decimal
    commission_amount: Decimal
    gst_percent: Decimal
    gst_amount: Decimal
    total_amount: Decimal

    @property
    def taxable_amount(self) -> Decimal:
        return self.base_amount + self.commission_amount

    def gst_split(self) -> tuple[Decimal, Decimal]:
        """(cgst, sgst): CGST takes the rounded half, SGST the remainder."""
        cgst = money(self.gst_amount / 2)
        return cgst, self.gst_amount - cgst


def compute(price_per_day, days: int, discount_percent, commission_percent, gst_percent) -> PriceBreakdown:
    if days < 1:
        raise ValueError("days must be >= 1")
    rate = money(price_per_day)
    discount_pct = money(discount_percent)
    commission_pct = money(commission_percent)
    gst_pct = money(gst_percent)

    original = money(rate * days)
    discount_amount = percent_of(original, discount_pct)
    base = original - discount_amount
    commission = percent_of(base, commission_pct)
    taxable = base + commission
    gst = percent_of(taxable, gst_pct)

    return PriceBreakdown(
        price_per_day=rate,
        days=days,
        original_base_amount=original,
        discount_percent=discount_pct,
        discount_amount=discount_amount,
        base_amount=base,
        commission_percent=commission_pct,
        commission_amount=commission,
        gst_percent=gst_pct,
        gst_amount=gst,
        total_amount=taxable + gst,
    )


def compute_for_range(price_per_day, start: date, end: date, discount_percent,
                      commission_percent, gst_percent) -> PriceBreakdown:
    return compute(price_per_day, inclusive_days(start, end), discount_percent, commission_percent, gst_percent)
