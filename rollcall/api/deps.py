"""Shared API dependencies."""
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from rollcall.db import get_db, get_db_context
from rollcall.core.security import decode_access_token
from rollcall.db.models import User

bearer_scheme = HTTPBearer(auto_error=False)

__all__ = ["get_db", "get_db_context", "get_current_user", "require_teacher", "require_student"]


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the bearer token in the Authorization header to a user."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise HTTPException(status_code=401, detail="Not authenticated")

    payload = decode_access_token(credentials.credentials)
    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid token")

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=401, detail="Account no longer exists")
    return user


def require_teacher(user: User = Depends(get_current_user)) -> User:
    if not user.is_teacher:
        raise HTTPException(status_code=403, detail="Instructor account required")
    return user


def require_student(user: User = Depends(get_current_user)) -> User:
    if not user.is_student:
        raise HTTPException(status_code=403, detail="Student account required")
    return user
