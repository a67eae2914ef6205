import logging

from lms_gradebook.db.base import Base
from lms_gradebook.db.session import engine

logger = logging.getLogger(__name__)


def init_db() -> None:
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ensured")
