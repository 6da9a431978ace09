"""Run one recurring invoice batch from the command line.

Intended for crontab entries on hosts that do not call the HTTP trigger::

    0 * * * * cd /srv/slimbooks && python -m backend.app.run_recurring
"""

import logging
import sys

from backend.app.core.logging import configure_logging
from backend.app.core.settings import get_settings
from backend.app.crud.stores import build_recurring_processor
from backend.app.db.base import Base
from backend.app.db.session import SessionLocal, engine

logger = logging.getLogger(__name__)


def main() -> int:
    configure_logging(get_settings().log_level)
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        result = build_recurring_processor(db).run_batch()
    finally:
        db.close()

    if not result.success:
        logger.error("Recurring invoice run failed: %s", result.error)
        return 1
    logger.info(result.message)
    return 0


if __name__ == "__main__":
    sys.exit(main())
