"""QR session token issuance and validation."""
import base64
import io
import json
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

import qrcode
from qrcode.image.svg import SvgImage
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from rollcall.core import config
from rollcall.core.errors import SessionClosed, TokenExpired, TokenInvalid
from rollcall.core.logging_config import get_logger
from rollcall.core.sanitization import validate_token_format
from rollcall.core.security import create_token_lookup_key, generate_qr_token
from rollcall.core.utils import to_utc, utcnow
from rollcall.db.models import AttendanceSession, SessionToken
from rollcall.db.models.attendance_session import SessionStatus
from rollcall.services.sessions import effective_status

logger = get_logger(__name__)


@dataclass
class IssuedToken:
    session_id: int
    token: str
    issued_at: datetime
    expires_at: datetime

    @property
    def qr_payload(self) -> dict:
        """What the instructor's screen encodes into the QR code."""
        return {"sessionId": self.session_id, "token": self.token}


def clamp_ttl(ttl_minutes: Optional[int] = None) -> int:
    """Apply the default and the policy bounds to a requested TTL."""
    settings = config.settings
    if ttl_minutes is None:
        ttl_minutes = settings.QR_TOKEN_DEFAULT_TTL_MINUTES
    return max(settings.QR_TOKEN_MIN_TTL_MINUTES, min(settings.QR_TOKEN_MAX_TTL_MINUTES, ttl_minutes))


def issue_token(
    db: Session,
    session: AttendanceSession,
    ttl_minutes: Optional[int] = None,
    now: Optional[datetime] = None,
    _retry_count: int = 0,
) -> IssuedToken:
    """
    Issue a fresh QR token for a session.

    Earlier tokens for the same session are not revoked; each keeps its own
    expiry. Only the HMAC lookup key of the token is stored.

    Raises:
        SessionClosed: if the session is already closed
    """
    if _retry_count > 5:
        raise RuntimeError("Failed to generate unique token after multiple attempts")

    now = to_utc(now) if now else utcnow()
    if effective_status(session, now) == SessionStatus.CLOSED:
        raise SessionClosed("Session is closed, QR code cannot be generated")

    ttl = clamp_ttl(ttl_minutes)
    token = generate_qr_token()
    expires_at = now + timedelta(minutes=ttl)

    try:
        db.add(SessionToken(
            session_id=session.id,
            token_lookup_key=create_token_lookup_key(token),
            issued_at=now,
            expires_at=expires_at,
        ))
        db.commit()
    except IntegrityError:
        db.rollback()
        # Collision unlikely but possible, retry with counter
        return issue_token(db, session, ttl_minutes, now, _retry_count + 1)

    logger.info("qr_token_issued", session_id=session.id, ttl_minutes=ttl, expires_at=expires_at.isoformat())
    return IssuedToken(session_id=session.id, token=token, issued_at=now, expires_at=expires_at)


def validate_token(db: Session, token: str, now: Optional[datetime] = None) -> int:
    """
    Resolve a scanned token to its session id.

    The token is valid strictly before its expiry instant. Validation has no
    side effects; a token can be presented by any number of students.

    Raises:
        TokenInvalid: token is malformed or was never issued
        TokenExpired: now >= expires_at
    """
    now = to_utc(now) if now else utcnow()
    try:
        token = validate_token_format(token)
    except ValueError:
        raise TokenInvalid()
    record = db.query(SessionToken).filter(
        SessionToken.token_lookup_key == create_token_lookup_key(token)
    ).first()

    if not record:
        raise TokenInvalid()
    if now >= to_utc(record.expires_at):
        raise TokenExpired()
    return record.session_id


def render_qr_svg(issued: IssuedToken) -> str:
    """Render the QR payload as an SVG data URI."""
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=4,
    )
    qr.add_data(json.dumps(issued.qr_payload, separators=(",", ":")))
    qr.make(fit=True)

    img = qr.make_image(image_factory=SvgImage)
    buffer = io.BytesIO()
    img.save(buffer)
    encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f"data:image/svg+xml;base64,{encoded}"
