from collections.abc import Iterator

from sqlalchemy.orm import Session

from lms_gradebook.db.session import SessionLocal


def get_db() -> Iterator[Session]:
    """Request-scoped session; grade writes commit explicitly, reads never do."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
