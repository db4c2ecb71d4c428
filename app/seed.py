import logging
import uuid
from decimal import Decimal

from sqlalchemy.orm import Session
from sqlalchemy import text
from sqlalchemy.exc import ProgrammingError

from app.db.session import SessionLocal
from app.core.config import settings
from app.models.billboard import Billboard
from app.services.policy_service import ensure_policy_defaults

logger = logging.getLogger(__name__)

DEMO_OWNER_ID = "00000000-0000-0000-0000-0000000000a1"

DEMO_BILLBOARDS = [
    ("MG Road Gantry 40x20", "MG Road, Bengaluru", Decimal("1000.00")),
    ("Marine Drive Unipole", "Marine Drive, Mumbai", Decimal("2500.00")),
]


def ensure_billboard(db: Session, title: str, location: str, price: Decimal):
    b = db.query(Billboard).filter(Billboard.title == title).first()
    if b:
        return
    db.add(
        Billboard(
            id=str(uuid.uuid4()),
            owner_id=DEMO_OWNER_ID,
            title=title,
            location=location,
            price_per_day=price,
            is_open_for_booking=True,
            admin_blocked=False,
        )
    )
    db.commit()


def run(db=None):
    if db is None:
        db = SessionLocal()
    try:
        # If migrations haven't been applied yet, seeding must not crash the API.
        try:
            db.execute(text("SELECT 1 FROM settings LIMIT 1"))
        except ProgrammingError:
            db.rollback()
            logger.warning("[seed] settings table not found yet. Skipping seeding (run alembic upgrade head).")
            return

        # platform policy (commission, GST, discount caps)
        ensure_policy_defaults(db)

        if settings.ENV == "local":
            for title, location, price in DEMO_BILLBOARDS:
                ensure_billboard(db, title, location, price)
        logger.info("[seed] done")
    finally:
        db.close()


if __name__ == "__main__":
    run()
