"""Account business logic."""
from typing import Any, Dict, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from rollcall.core.constants import MIN_PASSWORD_LENGTH, ROLE_STUDENT, USER_ROLES
from rollcall.core.errors import AlreadyExists, AuthenticationFailed, InvalidInput, UserNotFound
from rollcall.core.logging_config import get_logger
from rollcall.core.security import create_user_token, get_password_hash, verify_password
from rollcall.db.models import User

logger = get_logger(__name__)


def _check_password_length(password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise InvalidInput(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")


def register(
    db: Session,
    name: str,
    email: str,
    password: str,
    role: int = ROLE_STUDENT,
    student_code: Optional[str] = None,
) -> User:
    """Create an account. ``email`` is expected to be normalized already."""
    if role not in USER_ROLES:
        raise InvalidInput("Role must be 1 (student) or 2 (instructor)")
    _check_password_length(password)

    if db.query(User).filter(User.email == email).first():
        raise AlreadyExists("Email is already registered")

    user = User(
        name=name,
        email=email,
        password_hash=get_password_hash(password),
        role=role,
        student_code=student_code,
    )
    try:
        db.add(user)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise AlreadyExists("Email is already registered")

    db.refresh(user)
    logger.info("user_registered", user_id=user.id, role=role)
    return user


def authenticate(db: Session, email: str, password: str) -> User:
    """Return the user for valid credentials, else raise AuthenticationFailed."""
    user = db.query(User).filter(User.email == email).first()
    if not user or not verify_password(password, user.password_hash):
        logger.info("login_failed", email=email)
        raise AuthenticationFailed()
    return user


def get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise UserNotFound()
    return user


def update_profile(db: Session, user: User, changes: Dict[str, Any]) -> User:
    for field in ("name", "photo_url"):
        if field in changes:
            setattr(user, field, changes[field])
    db.commit()
    db.refresh(user)
    return user


def change_password(db: Session, user: User, current_password: str, new_password: str) -> None:
    if not verify_password(current_password, user.password_hash):
        raise AuthenticationFailed("Current password is incorrect")
    _check_password_length(new_password)

    user.password_hash = get_password_hash(new_password)
    db.commit()
    logger.info("password_changed", user_id=user.id)


def user_to_dict(user: User, with_token: bool = False) -> Dict[str, Any]:
    data = {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "rule": user.role,
        "student_id": user.student_code,
        "photo_url": user.photo_url,
    }
    if with_token:
        data["token"] = create_user_token(user.id, user.role)
    return data
