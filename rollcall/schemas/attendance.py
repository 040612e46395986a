"""Attendance schemas."""
from typing import List, Optional
from pydantic import Field, field_validator

from rollcall.schemas.common import CamelModel
from rollcall.schemas.session import SessionOut

# Display string for a roster entry with no attendance record yet
NO_RECORD_DISPLAY = "absent"


class CheckInRequest(CamelModel):
    session_id: int
    token: str = Field(..., min_length=1, max_length=100)
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    accuracy: Optional[float] = Field(None, ge=0)


class ManualCheckInRequest(CamelModel):
    session_id: int
    student_id: int
    status: str = Field(..., min_length=1, max_length=20)


class Location(CamelModel):
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    accuracy: Optional[float] = None
    distance_to_class: Optional[float] = None


class AttendanceRecordOut(CamelModel):
    id: int
    session_id: int
    student_id: int
    status: str
    method: str
    check_in_time: str
    location: Optional[Location] = None


class SessionRecordOut(AttendanceRecordOut):
    student_name: str
    student_email: str


class RosterStudent(CamelModel):
    id: int
    name: str
    email: str
    student_code: Optional[str] = None
    attendance_id: Optional[int] = None
    status: str
    check_in_time: Optional[str] = None
    location: Optional[Location] = None

    @field_validator('status', mode='before')
    @classmethod
    def display_status(cls, v) -> str:
        """Render the roster's no-record case as the client's "absent" placeholder."""
        value = getattr(v, "value", v)
        if value == "no_record":
            return NO_RECORD_DISPLAY
        return value


class SessionRosterOut(CamelModel):
    session: SessionOut
    students: List[RosterStudent]


class StudentStats(CamelModel):
    id: int
    name: str
    email: str
    total_sessions: int
    present_count: int
    late_count: int
    absent_excused_count: int
    absent_unexcused_count: int
    not_checked_in: int
    attendance_rate: float


class ClassStatsOut(CamelModel):
    class_name: str
    class_code: str
    total_sessions: int
    total_students: int
    students: List[StudentStats]


class HistoryItem(CamelModel):
    id: int
    session_id: int
    session_title: str
    session_start_time: str
    session_end_time: str
    class_id: int
    class_name: str
    check_in_time: str
    status: str
    distance_to_class: Optional[float] = None
