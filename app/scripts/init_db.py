"""
Create tables and seed reference data without Alembic (local SQLite, quick demos):

  python -m app.scripts.init_db

Use `alembic upgrade head` for PostgreSQL/MySQL deployments.
"""

import logging
import sys

from app.core.database import SessionLocal, engine
from app.models import Base
from app.services.seed import seed_reference_data

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main() -> int:
    """Create missing tables, then insert missing seed roles and permissions."""
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        roles, permissions = seed_reference_data(db)
        logger.info("Database initialised: roles_inserted=%s permissions_inserted=%s", roles, permissions)
        return 0
    except Exception as e:
        logger.exception("Database initialisation failed: %s", e)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
