import uuid

from sqlalchemy.orm import DeclarativeBase


def new_id() -> str:
    """Collision-resistant string id shaped like a CUID: 'c' + 24 [a-z0-9]."""
    return "c" + uuid.uuid4().hex[:24]


class Base(DeclarativeBase):
    pass
