"""Attendance session model."""
import enum
from datetime import datetime, timezone as tz
from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship

from rollcall.db.base import Base


class SessionStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    ONGOING = "ongoing"
    CLOSED = "closed"


class AttendanceSession(Base):
    __tablename__ = "attendance_sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    title = Column(String(200), nullable=False)
    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=False)
    # Null window bounds fall back to start_time / end_time
    attendance_window_start = Column(DateTime(timezone=True), nullable=True)
    attendance_window_end = Column(DateTime(timezone=True), nullable=True)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    radius = Column(Float, nullable=False)
    # Last explicitly set or materialized status; see services.sessions.effective_status
    status = Column(String(20), nullable=False, default=SessionStatus.SCHEDULED.value)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(tz.utc))

    # Relationships
    course = relationship("Course", back_populates="sessions")
    tokens = relationship("SessionToken", back_populates="session", cascade="all, delete-orphan")
    records = relationship("AttendanceRecord", back_populates="session", cascade="all, delete-orphan")

    __table_args__ = (Index("idx_sessions_course", "course_id"),)
