"""Attendance session schemas."""
from datetime import datetime
from typing import Optional
from pydantic import Field, field_validator

from rollcall.core.sanitization import sanitize_text, MAX_NAME_LENGTH
from rollcall.schemas.common import CamelModel


def _sanitize_title(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    return sanitize_text(v, max_length=MAX_NAME_LENGTH) or None


class SessionCreate(CamelModel):
    course_id: int
    title: Optional[str] = Field(None, max_length=200)
    start_time: datetime
    end_time: datetime
    attendance_window_start: Optional[datetime] = None
    attendance_window_end: Optional[datetime] = None
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    radius: Optional[float] = Field(None, gt=0)

    @field_validator('title')
    @classmethod
    def sanitize_title_field(cls, v: Optional[str]) -> Optional[str]:
        return _sanitize_title(v)


class SessionUpdate(CamelModel):
    title: Optional[str] = Field(None, max_length=200)
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    attendance_window_start: Optional[datetime] = None
    attendance_window_end: Optional[datetime] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    radius: Optional[float] = Field(None, gt=0)
    status: Optional[str] = Field(None, pattern="^(scheduled|ongoing|closed)$")

    @field_validator('title')
    @classmethod
    def sanitize_title_field(cls, v: Optional[str]) -> Optional[str]:
        return _sanitize_title(v)


class SessionOut(CamelModel):
    id: int
    course_id: int
    title: str
    start_time: str
    end_time: str
    attendance_window_start: str
    attendance_window_end: str
    latitude: float
    longitude: float
    radius: float
    status: str


class StudentSessionOut(SessionOut):
    attendance_status: Optional[str] = None
    check_in_time: Optional[str] = None


class QrRequest(CamelModel):
    expires_in_minutes: Optional[int] = None


class QrPayload(CamelModel):
    session_id: int
    token: str


class QrOut(CamelModel):
    qr_payload: QrPayload
    expires_at: str
    qr_image: str
