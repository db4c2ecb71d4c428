from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import Forbidden
from app.core.security import decode_token, verify_payment_signature
from app.db.session import get_db
from app.models.booking import Booking
from app.services.booking_service import get_booking
from app.services.rate_source import get_billboard

bearer = HTTPBearer(auto_error=False)

ROLES = ("advertiser", "owner", "admin")


@dataclass(frozen=True)
class Actor:
    user_id: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def get_current_actor(creds: HTTPAuthorizationCredentials | None = Depends(bearer)) -> Actor:
    if not creds:
        raise HTTPException(status_code=401, detail="Not authenticated")
    try:
        payload = decode_token(creds.credentials)
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token")
    user_id = payload.get("sub")
    role = payload.get("role")
    if not user_id or role not in ROLES:
        raise HTTPException(status_code=401, detail="Invalid token claims")
    return Actor(user_id=user_id, role=role)

def require_roles(*roles: str):
    def _guard(actor: Actor = Depends(get_current_actor)) -> Actor:
        if actor.role not in roles:
            raise HTTPException(status_code=403, detail="Forbidden")
        return actor
    return _guard


def ensure_billboard_owner(db: Session, actor: Actor, billboard_id: str) -> None:
    if actor.is_admin:
        return
    if get_billboard(db, billboard_id).owner_id != actor.user_id:
        raise Forbidden("Billboard belongs to another owner")


def ensure_can_view(db: Session, actor: Actor, booking: Booking) -> None:
    if actor.is_admin:
        return
    if actor.role == "advertiser" and booking.advertiser_id == actor.user_id:
        return
    if actor.role == "owner" and get_billboard(db, booking.billboard_id).owner_id == actor.user_id:
        return
    raise Forbidden("Not a party to this booking")


def owned_booking(booking_id: str, db: Session, actor: Actor) -> Booking:
    """Booking the actor may act on as owner (or admin)."""
    b = get_booking(db, booking_id)
    ensure_billboard_owner(db, actor, b.billboard_id)
    return b


async def verify_payment_callback(request: Request) -> None:
    if not settings.PAYMENT_WEBHOOK_VERIFY:
        return
    body = await request.body()
    if not verify_payment_signature(body, request.headers.get("X-Signature")):
        raise HTTPException(status_code=401, detail="Invalid payment signature")
