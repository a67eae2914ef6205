from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from lms_gradebook.core.deps import get_db
from lms_gradebook.core.errors import UnauthorizedError
from lms_gradebook.core.security import decode_access_token
from lms_gradebook.models.user import User

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError()

    user_id = decode_access_token(credentials.credentials)
    if user_id is None:
        raise UnauthorizedError("Could not validate credentials")

    user = (
        db.query(User)
        .filter(User.id == user_id, User.deleted_at.is_(None))
        .first()
    )
    if not user:
        raise UnauthorizedError("Could not validate credentials")
    return user
