import json
from sqlalchemy import select
from sqlalchemy.orm import Session
from app.models.audit_log import BookingAuditLog

def log_booking_event(db: Session, booking_id: str, action: str, performed_by: str, details: dict | None = None) -> BookingAuditLog:
    # Added to the caller's transaction; committed together with the transition it records.
    entry = BookingAuditLog(
        booking_id=booking_id,
        action=action,
        performed_by=performed_by,
        details_json=json.dumps(details or {}, ensure_ascii=False, default=str),
    )
    db.add(entry)
    return entry

def booking_history(db: Session, booking_id: str) -> list[BookingAuditLog]:
    stmt = (
        select(BookingAuditLog)
        .where(BookingAuditLog.booking_id == booking_id)
        .order_by(BookingAuditLog.created_at.asc(), BookingAuditLog.id.asc())
    )
    return list(db.execute(stmt).scalars())
