"""Database models."""
from rollcall.db.models.user import User
from rollcall.db.models.course import Course, Enrollment
from rollcall.db.models.attendance_session import AttendanceSession
from rollcall.db.models.session_token import SessionToken
from rollcall.db.models.attendance_record import AttendanceRecord

__all__ = ["User", "Course", "Enrollment", "AttendanceSession", "SessionToken", "AttendanceRecord"]
