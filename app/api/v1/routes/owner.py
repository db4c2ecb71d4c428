from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.api.deps import Actor, require_roles, ensure_billboard_owner
from app.api.v1.routes.admin import billboard_state_out
from app.schemas.admin import BillboardStateOut, PriceIn
from app.services.rate_source import set_open_for_booking, set_price_per_day

router = APIRouter(tags=["owner"])


@router.put("/owner/billboards/{billboard_id}/availability", response_model=BillboardStateOut)
def toggle_availability(billboard_id: str, available: bool, db: Session = Depends(get_db),
                        me: Actor = Depends(require_roles("owner", "admin"))):
    ensure_billboard_owner(db, me, billboard_id)
    return billboard_state_out(set_open_for_booking(db, billboard_id, available))


@router.put("/owner/billboards/{billboard_id}/price", response_model=BillboardStateOut)
def update_price(billboard_id: str, body: PriceIn, db: Session = Depends(get_db),
                 me: Actor = Depends(require_roles("owner", "admin"))):
    # Only unlocked bookings are repriced, and only when their discount next changes.
    ensure_billboard_owner(db, me, billboard_id)
    return billboard_state_out(set_price_per_day(db, billboard_id, body.pricePerDay))
