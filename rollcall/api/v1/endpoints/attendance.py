"""Attendance session, QR and check-in endpoints."""
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Request
from sqlalchemy.orm import Session

from rollcall.api.deps import get_current_user, get_db, require_student, require_teacher
from rollcall.core.rate_limit import limiter, RATE_LIMITS
from rollcall.core.utils import isoformat
from rollcall.db.models import AttendanceSession, User
from rollcall.db.models.attendance_record import AttendanceStatus
from rollcall.schemas import (
    ApiResponse,
    AttendanceRecordOut,
    CheckInRequest,
    ClassStatsOut,
    HistoryItem,
    ManualCheckInRequest,
    QrOut,
    QrRequest,
    SessionCreate,
    SessionOut,
    SessionRecordOut,
    SessionRosterOut,
    SessionUpdate,
    StudentSessionOut,
    SuccessResponse,
)
from rollcall.services import checkin as checkin_service
from rollcall.services import classes as class_service
from rollcall.services import reports
from rollcall.services import sessions as session_service
from rollcall.services import tokens as token_service

router = APIRouter()


def _owned_session(db: Session, session_id: int, teacher: User) -> AttendanceSession:
    session = session_service.get_session(db, session_id)
    class_service.get_owned_class(db, session.course_id, teacher)
    return session


def _check_in_message(status: str, created: bool) -> str:
    if not created:
        return "You have already checked in for this session"
    if status == AttendanceStatus.PRESENT.value:
        return "Check-in successful"
    if status == AttendanceStatus.LATE.value:
        return "Check-in successful, you are late"
    return "You are outside the allowed area, recorded as absent"


@router.post("/sessions", response_model=ApiResponse[SessionOut])
async def create_session(
    payload: SessionCreate,
    teacher: User = Depends(require_teacher),
    db: Session = Depends(get_db),
):
    """
    Create an attendance session for a class (instructor only).

    The attendance window defaults to the session's start and end time and the
    geofence radius to the configured default.

    Raises:
        400 if end is not after start, the window falls outside the session,
            or the radius is not positive
        403 if the class belongs to another instructor
    """
    course = class_service.get_owned_class(db, payload.course_id, teacher)
    session = session_service.create_session(
        db,
        course,
        start_time=payload.start_time,
        end_time=payload.end_time,
        latitude=payload.latitude,
        longitude=payload.longitude,
        title=payload.title,
        radius=payload.radius,
        attendance_window_start=payload.attendance_window_start,
        attendance_window_end=payload.attendance_window_end,
    )
    return ApiResponse(data=session_service.session_to_dict(session), message="Session created")


@router.get("/class/{class_id}/sessions", response_model=ApiResponse[List[SessionOut]])
async def list_class_sessions(class_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    course = class_service.get_class(db, class_id)
    class_service.ensure_can_view(db, course, user)
    sessions = session_service.list_sessions(db, course.id)
    return ApiResponse(data=[session_service.session_to_dict(s) for s in sessions])


@router.get("/sessions/{session_id}", response_model=ApiResponse[SessionOut])
async def get_session(session_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    session = session_service.get_session(db, session_id)
    class_service.ensure_can_view(db, class_service.get_class(db, session.course_id), user)
    return ApiResponse(data=session_service.session_to_dict(session))


@router.put("/sessions/{session_id}", response_model=ApiResponse[SessionOut])
async def update_session(
    session_id: int,
    payload: SessionUpdate,
    teacher: User = Depends(require_teacher),
    db: Session = Depends(get_db),
):
    """
    Edit a session (instructor only).

    Only the fields sent are changed. ``status`` may only move forward
    (scheduled, ongoing, closed); existing attendance records are kept.
    """
    session = _owned_session(db, session_id, teacher)
    session = session_service.update_session(db, session, payload.model_dump(exclude_unset=True))
    return ApiResponse(data=session_service.session_to_dict(session), message="Session updated")


@router.delete("/sessions/{session_id}", response_model=SuccessResponse)
async def delete_session(session_id: int, teacher: User = Depends(require_teacher), db: Session = Depends(get_db)):
    session = _owned_session(db, session_id, teacher)
    session_service.delete_session(db, session)
    return SuccessResponse(message="Session deleted")


@router.post("/sessions/{session_id}/qr", response_model=ApiResponse[QrOut])
async def generate_qr(
    session_id: int,
    payload: Optional[QrRequest] = Body(None),
    teacher: User = Depends(require_teacher),
    db: Session = Depends(get_db),
):
    """
    Issue a short-lived QR token for a session (instructor only).

    ``expiresInMinutes`` is clamped to the configured bounds (1 to 30 minutes,
    5 by default). Earlier codes stay valid until their own expiry.

    Example:
        Response (200):
            {
                "success": true,
                "message": "QR code generated",
                "data": {
                    "qrPayload": {"sessionId": 12, "token": "Xk3..."},
                    "expiresAt": "2026-03-02T08:05:00+00:00",
                    "qrImage": "data:image/svg+xml;base64,..."
                }
            }
    """
    session = _owned_session(db, session_id, teacher)
    ttl = payload.expires_in_minutes if payload else None
    issued = token_service.issue_token(db, session, ttl)
    return ApiResponse(
        data={
            "qr_payload": {"session_id": issued.session_id, "token": issued.token},
            "expires_at": isoformat(issued.expires_at),
            "qr_image": token_service.render_qr_svg(issued),
        },
        message="QR code generated",
    )


@router.get("/sessions/{session_id}/attendances", response_model=ApiResponse[List[SessionRecordOut]])
async def list_session_records(session_id: int, teacher: User = Depends(require_teacher), db: Session = Depends(get_db)):
    session = _owned_session(db, session_id, teacher)
    return ApiResponse(data=reports.session_records(db, session))


@router.get("/sessions/{session_id}/students", response_model=ApiResponse[SessionRosterOut])
async def session_roster(session_id: int, teacher: User = Depends(require_teacher), db: Session = Depends(get_db)):
    """Every class member with their status in the session; students without a record show as absent."""
    session = _owned_session(db, session_id, teacher)
    return ApiResponse(data=reports.session_roster(db, session))


@router.get("/class/{class_id}/stats", response_model=ApiResponse[ClassStatsOut])
async def class_stats(class_id: int, teacher: User = Depends(require_teacher), db: Session = Depends(get_db)):
    course = class_service.get_owned_class(db, class_id, teacher)
    return ApiResponse(data=reports.class_stats(db, course))


@router.post("/check-in", response_model=ApiResponse[AttendanceRecordOut])
@limiter.limit(RATE_LIMITS["check_in"])
async def check_in(
    request: Request,
    payload: CheckInRequest,
    student: User = Depends(require_student),
    db: Session = Depends(get_db),
):
    """
    Check in by scanning the session QR code (student only).

    A scan outside the geofence still succeeds and records the student as
    absent_unexcused; the message tells the student why. Scanning again
    returns the first record unchanged.

    Raises:
        400 if the code is unknown, expired, for another session, or the
            attendance window is not open
        403 if the student is not a member of the class
        404 if the session does not exist
    """
    result = checkin_service.check_in(
        db,
        session_id=payload.session_id,
        token=payload.token,
        student_id=student.id,
        latitude=payload.latitude,
        longitude=payload.longitude,
        accuracy=payload.accuracy,
    )
    return ApiResponse(
        data=reports.record_to_dict(result.record),
        message=_check_in_message(result.record.status, result.created),
    )


@router.post("/manual-check-in", response_model=ApiResponse[AttendanceRecordOut])
async def manual_check_in(
    payload: ManualCheckInRequest,
    teacher: User = Depends(require_teacher),
    db: Session = Depends(get_db),
):
    """Set a student's status for a session directly (instructor only)."""
    _owned_session(db, payload.session_id, teacher)
    record = checkin_service.manual_check_in(db, payload.session_id, payload.student_id, payload.status)
    return ApiResponse(data=reports.record_to_dict(record), message="Attendance updated")


@router.get("/history", response_model=ApiResponse[List[HistoryItem]])
async def attendance_history(student: User = Depends(require_student), db: Session = Depends(get_db)):
    return ApiResponse(data=reports.student_history(db, student))


@router.get("/student/class/{class_id}/sessions", response_model=ApiResponse[List[StudentSessionOut]])
async def student_class_sessions(class_id: int, student: User = Depends(require_student), db: Session = Depends(get_db)):
    course = class_service.get_class(db, class_id)
    class_service.ensure_can_view(db, course, student)
    return ApiResponse(data=reports.student_sessions(db, course, student))
