import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.api.deps import Actor, require_roles
from app.core.config import settings
from app.schemas.admin import BillboardStateOut, PlatformSettingsIn, PlatformSettingsOut, SweepOut
from app.services.booking_service import complete_finished_bookings
from app.services.policy_service import PolicySnapshot, get_policy_snapshot, update_policy
from app.services.rate_source import RateSnapshot, set_admin_blocked

logger = logging.getLogger(__name__)

router = APIRouter(tags=["admin"])


def policy_out(p: PolicySnapshot) -> PlatformSettingsOut:
    return PlatformSettingsOut(
        commissionPercent=p.commission_percent,
        gstPercent=p.gst_percent,
        weekdayDiscountCapPercent=p.weekday_discount_cap_percent,
        weekendDiscountCapPercent=p.weekend_discount_cap_percent,
        currency=settings.CURRENCY,
        timezone=settings.TIMEZONE,
    )


def billboard_state_out(r: RateSnapshot) -> BillboardStateOut:
    return BillboardStateOut(
        billboardId=r.billboard_id,
        ownerId=r.owner_id,
        pricePerDay=r.price_per_day,
        isOpenForBooking=r.is_open_for_booking,
        adminBlocked=r.admin_blocked,
    )


@router.get("/admin/platform-settings", response_model=PlatformSettingsOut)
def get_platform_settings(db: Session = Depends(get_db), me: Actor = Depends(require_roles("admin"))):
    return policy_out(get_policy_snapshot(db))


@router.put("/admin/platform-settings", response_model=PlatformSettingsOut)
def put_platform_settings(body: PlatformSettingsIn, db: Session = Depends(get_db),
                          me: Actor = Depends(require_roles("admin"))):
    p = update_policy(
        db,
        commission_percent=body.commissionPercent,
        gst_percent=body.gstPercent,
        weekday_discount_cap_percent=body.weekdayDiscountCapPercent,
        weekend_discount_cap_percent=body.weekendDiscountCapPercent,
    )
    logger.info("platform policy updated by %s: %s", me.user_id, p)
    return policy_out(p)


@router.post("/admin/billboards/{billboard_id}/block", response_model=BillboardStateOut)
def block_billboard(billboard_id: str, db: Session = Depends(get_db), me: Actor = Depends(require_roles("admin"))):
    logger.info("billboard %s blocked by %s", billboard_id, me.user_id)
    return billboard_state_out(set_admin_blocked(db, billboard_id, True))


@router.post("/admin/billboards/{billboard_id}/unblock", response_model=BillboardStateOut)
def unblock_billboard(billboard_id: str, db: Session = Depends(get_db), me: Actor = Depends(require_roles("admin"))):
    logger.info("billboard %s unblocked by %s", billboard_id, me.user_id)
    return billboard_state_out(set_admin_blocked(db, billboard_id, False))


@router.post("/admin/bookings/complete-sweep", response_model=SweepOut)
def run_completion_sweep(db: Session = Depends(get_db), me: Actor = Depends(require_roles("admin"))):
    return SweepOut(completed=complete_finished_bookings(db))
