"""Pydantic schemas for request/response validation."""
from rollcall.schemas.common import ApiResponse, CamelModel, ErrorDetail, ErrorResponse, SuccessResponse
from rollcall.schemas.auth import ChangePasswordRequest, LoginRequest, ProfileUpdate, RegisterRequest, UserOut
from rollcall.schemas.course import ClassCreate, ClassOut, ClassStudent, ClassStudentsOut, ClassUpdate, JoinClassRequest
from rollcall.schemas.session import (
    QrOut,
    QrPayload,
    QrRequest,
    SessionCreate,
    SessionOut,
    SessionUpdate,
    StudentSessionOut,
)
from rollcall.schemas.attendance import (
    AttendanceRecordOut,
    CheckInRequest,
    ClassStatsOut,
    HistoryItem,
    Location,
    ManualCheckInRequest,
    RosterStudent,
    SessionRecordOut,
    SessionRosterOut,
    StudentStats,
)

__all__ = [
    "ApiResponse",
    "CamelModel",
    "ErrorDetail",
    "ErrorResponse",
    "SuccessResponse",
    "ChangePasswordRequest",
    "LoginRequest",
    "ProfileUpdate",
    "RegisterRequest",
    "UserOut",
    "ClassCreate",
    "ClassOut",
    "ClassStudent",
    "ClassStudentsOut",
    "ClassUpdate",
    "JoinClassRequest",
    "QrOut",
    "QrPayload",
    "QrRequest",
    "SessionCreate",
    "SessionOut",
    "SessionUpdate",
    "StudentSessionOut",
    "AttendanceRecordOut",
    "CheckInRequest",
    "ClassStatsOut",
    "HistoryItem",
    "Location",
    "ManualCheckInRequest",
    "RosterStudent",
    "SessionRecordOut",
    "SessionRosterOut",
    "StudentStats",
]
