import os
import tempfile
import uuid
from datetime import timedelta
from decimal import Decimal

# Settings are read at import time; point the app at a throwaway SQLite file first.
_tmpdir = tempfile.mkdtemp(prefix="billboards-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_tmpdir, 'test.db')}"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["ENV"] = "test"
os.environ["PAYMENT_WEBHOOK_VERIFY"] = "false"
os.environ["DEFAULT_COMMISSION_PERCENT"] = "15"
os.environ["DEFAULT_GST_PERCENT"] = "18"
os.environ["DEFAULT_WEEKDAY_DISCOUNT_CAP_PERCENT"] = "50"
os.environ["DEFAULT_WEEKEND_DISCOUNT_CAP_PERCENT"] = "30"

import pytest
from fastapi.testclient import TestClient

from app.core.security import create_access_token
from app.db.session import Base, SessionLocal, engine
from app.main import app
from app.models.audit_log import BookingAuditLog  # noqa: F401
from app.models.billboard import Billboard
from app.models.booking import Booking  # noqa: F401
from app.models.setting import Setting  # noqa: F401
from app.utils.dates import today

Base.metadata.create_all(bind=engine)


@pytest.fixture(autouse=True)
def _clean_tables():
    yield
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


def auth(user_id: str, role: str) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user_id, role)}"}


def next_weekday(weekday: int, weeks_ahead: int = 1):
    """First date with the given weekday (0=Mon) at least `weeks_ahead` weeks from today."""
    d = today() + timedelta(days=7 * weeks_ahead)
    return d + timedelta(days=(weekday - d.weekday()) % 7)


@pytest.fixture
def owner_id():
    return str(uuid.uuid4())


@pytest.fixture
def advertiser_id():
    return str(uuid.uuid4())


@pytest.fixture
def billboard(db, owner_id):
    b = Billboard(
        id=str(uuid.uuid4()),
        owner_id=owner_id,
        title="Ring Road Unipole",
        location="Ring Road",
        price_per_day=Decimal("1000.00"),
        is_open_for_booking=True,
        admin_blocked=False,
    )
    db.add(b)
    db.commit()
    return b
