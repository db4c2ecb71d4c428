"""Block until the PostgreSQL server behind DATABASE_URL accepts connections."""
import logging
import os
import time
from urllib.parse import urlparse

import psycopg2

from app.core.config import settings

logger = logging.getLogger("wait_for_db")

# SQLAlchemy URL may start with postgresql+psycopg2://
url = settings.DATABASE_URL.replace("postgresql+psycopg2://", "postgresql://")
p = urlparse(url)

timeout_s = int(os.getenv("DB_WAIT_TIMEOUT", "60"))
deadline = time.time() + timeout_s

logger.warning("waiting for Postgres at %s:%s db=%s (timeout=%ss)", p.hostname, p.port or 5432, p.path.lstrip("/"), timeout_s)
while True:
    try:
        psycopg2.connect(url).close()
        logger.warning("Postgres is ready")
        break
    except psycopg2.OperationalError as e:
        if time.time() > deadline:
            logger.error("timed out waiting for DB: %s", e)
            raise
        time.sleep(1)
