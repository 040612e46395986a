"""QR session token model."""
from datetime import datetime, timezone as tz
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship

from rollcall.db.base import Base


class SessionToken(Base):
    """One issued QR token. Rows are append-only; reissuing adds a row."""

    __tablename__ = "session_tokens"

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(Integer, ForeignKey("attendance_sessions.id", ondelete="CASCADE"), nullable=False)
    token_lookup_key = Column(String(64), unique=True, nullable=False)  # HMAC-SHA256 output (64 hex chars)
    issued_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(tz.utc))
    expires_at = Column(DateTime(timezone=True), nullable=False)

    # Relationships
    session = relationship("AttendanceSession", back_populates="tokens")

    __table_args__ = (Index("idx_session_tokens_session", "session_id"),)
