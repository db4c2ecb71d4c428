import logging
from sqlalchemy.orm import Session
from sqlalchemy.exc import ProgrammingError
from app.db.session import SessionLocal
from app.services import booking_service

logger = logging.getLogger(__name__)

def complete_finished_bookings() -> dict:
    db: Session = SessionLocal()
    try:
        try:
            completed = booking_service.complete_finished_bookings(db)
        except ProgrammingError:
            # DB not migrated yet; don't crash the worker.
            db.rollback()
            logger.warning("completion sweep skipped: bookings table missing")
            return {"skipped": True, "reason": "missing_tables"}
        return {"completed": completed}
    finally:
        db.close()
