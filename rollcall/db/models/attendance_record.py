"""Attendance record model."""
import enum
from datetime import datetime, timezone as tz
from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import relationship

from rollcall.db.base import Base


class AttendanceStatus(str, enum.Enum):
    PRESENT = "present"
    LATE = "late"
    ABSENT_EXCUSED = "absent_excused"
    ABSENT_UNEXCUSED = "absent_unexcused"


class CheckInMethod(str, enum.Enum):
    QR = "qr"
    MANUAL = "manual"


class AttendanceRecord(Base):
    __tablename__ = "attendance_records"

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(Integer, ForeignKey("attendance_sessions.id", ondelete="CASCADE"), nullable=False)
    student_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    status = Column(String(20), nullable=False)
    method = Column(String(10), nullable=False, default=CheckInMethod.QR.value)
    check_in_time = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(tz.utc))
    # Reported position; null for manual records
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    accuracy = Column(Float, nullable=True)
    distance_to_class = Column(Float, nullable=True)

    # Relationships
    session = relationship("AttendanceSession", back_populates="records")
    student = relationship("User")

    __table_args__ = (
        Index("idx_attendance_records_student", "student_id"),
        UniqueConstraint("session_id", "student_id", name="uq_session_student"),
    )
