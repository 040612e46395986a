"""Attendance session business logic.

Session status is evaluated lazily against the clock instead of being
flipped by a background job:

    closed    if the stored status is closed, or now > end_time
    ongoing   if the stored status is ongoing, or now >= start_time
    scheduled otherwise

The stored column only ever moves forward (scheduled -> ongoing -> closed),
either by an explicit instructor action or when an edit materializes the
status observed at that moment.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from rollcall.core import config
from rollcall.core.errors import InvalidInput, InvalidStatusTransition, SessionNotFound
from rollcall.core.logging_config import get_logger
from rollcall.core.utils import isoformat, to_utc, utcnow
from rollcall.db.models import AttendanceSession, Course
from rollcall.db.models.attendance_session import SessionStatus

logger = get_logger(__name__)

_STATUS_ORDER = {
    SessionStatus.SCHEDULED: 0,
    SessionStatus.ONGOING: 1,
    SessionStatus.CLOSED: 2,
}

EDITABLE_FIELDS = (
    "title",
    "start_time",
    "end_time",
    "attendance_window_start",
    "attendance_window_end",
    "latitude",
    "longitude",
    "radius",
)

# Fields an edit may change but never clear
REQUIRED_FIELDS = ("start_time", "end_time", "latitude", "longitude", "radius")


def effective_status(session: AttendanceSession, now: Optional[datetime] = None) -> SessionStatus:
    """Status of the session at ``now`` (defaults to the current time)."""
    now = to_utc(now) if now else utcnow()
    stored = SessionStatus(session.status)

    if stored == SessionStatus.CLOSED or now > to_utc(session.end_time):
        return SessionStatus.CLOSED
    if stored == SessionStatus.ONGOING or now >= to_utc(session.start_time):
        return SessionStatus.ONGOING
    return SessionStatus.SCHEDULED


def attendance_window(session: AttendanceSession) -> Tuple[datetime, datetime]:
    """Interval during which check-ins are accepted, in UTC."""
    start = session.attendance_window_start or session.start_time
    end = session.attendance_window_end or session.end_time
    return to_utc(start), to_utc(end)


def is_accepting_check_ins(session: AttendanceSession, now: Optional[datetime] = None) -> bool:
    """True when the session is ongoing and ``now`` is inside the attendance window."""
    now = to_utc(now) if now else utcnow()
    if effective_status(session, now) != SessionStatus.ONGOING:
        return False
    window_start, window_end = attendance_window(session)
    return window_start <= now <= window_end


def validate_session_fields(
    start_time: datetime,
    end_time: datetime,
    attendance_window_start: Optional[datetime],
    attendance_window_end: Optional[datetime],
    latitude: float,
    longitude: float,
    radius: float,
) -> None:
    """Check schedule, window and geofence invariants. Raises InvalidInput."""
    start = to_utc(start_time)
    end = to_utc(end_time)
    if end <= start:
        raise InvalidInput("End time must be after start time")

    window_start = to_utc(attendance_window_start) if attendance_window_start else start
    window_end = to_utc(attendance_window_end) if attendance_window_end else end
    if window_start < start or window_end > end:
        raise InvalidInput("Attendance window must fall within the session time")
    if window_end < window_start:
        raise InvalidInput("Attendance window end must not be before its start")

    if not -90 <= latitude <= 90 or not -180 <= longitude <= 180:
        raise InvalidInput("Location coordinates are out of range")
    if radius is None or radius <= 0:
        raise InvalidInput("Radius must be greater than 0")


def get_session(db: Session, session_id: int) -> AttendanceSession:
    """Load a session or raise SessionNotFound."""
    session = db.query(AttendanceSession).filter(AttendanceSession.id == session_id).first()
    if not session:
        raise SessionNotFound()
    return session


def list_sessions(db: Session, course_id: int) -> List[AttendanceSession]:
    """Sessions of a class, most recent first."""
    return (
        db.query(AttendanceSession)
        .filter(AttendanceSession.course_id == course_id)
        .order_by(AttendanceSession.start_time.desc())
        .all()
    )


def create_session(
    db: Session,
    course: Course,
    start_time: datetime,
    end_time: datetime,
    latitude: float,
    longitude: float,
    title: Optional[str] = None,
    radius: Optional[float] = None,
    attendance_window_start: Optional[datetime] = None,
    attendance_window_end: Optional[datetime] = None,
) -> AttendanceSession:
    """Create a session for a class. Radius defaults to the configured policy value."""
    if radius is None:
        radius = config.settings.DEFAULT_RADIUS_METERS

    validate_session_fields(
        start_time, end_time, attendance_window_start, attendance_window_end,
        latitude, longitude, radius,
    )

    start_utc = to_utc(start_time)
    if not title:
        title = f"Session {start_utc:%Y-%m-%d %H:%M}"

    session = AttendanceSession(
        course_id=course.id,
        title=title,
        start_time=start_utc,
        end_time=to_utc(end_time),
        attendance_window_start=to_utc(attendance_window_start) if attendance_window_start else None,
        attendance_window_end=to_utc(attendance_window_end) if attendance_window_end else None,
        latitude=latitude,
        longitude=longitude,
        radius=radius,
        status=SessionStatus.SCHEDULED.value,
    )
    db.add(session)
    db.commit()
    db.refresh(session)

    logger.info("session_created", session_id=session.id, course_id=course.id, radius=radius)
    return session


def _materialize_status(session: AttendanceSession, now: datetime) -> SessionStatus:
    """Persist the lazily observed status into the stored column."""
    current = effective_status(session, now)
    session.status = current.value
    return current


def transition_status(
    session: AttendanceSession,
    target: SessionStatus,
    now: Optional[datetime] = None,
) -> None:
    """Move the stored status forward to ``target``. Does not commit."""
    now = to_utc(now) if now else utcnow()
    current = _materialize_status(session, now)
    if _STATUS_ORDER[target] < _STATUS_ORDER[current]:
        raise InvalidStatusTransition(
            f"Cannot change session status from {current.value} to {target.value}"
        )
    session.status = target.value


def update_session(
    db: Session,
    session: AttendanceSession,
    changes: Dict[str, Any],
    now: Optional[datetime] = None,
) -> AttendanceSession:
    """
    Apply an instructor edit to a session.

    ``changes`` holds only the fields the client sent. Schedule and geofence
    invariants are checked against the merged result. Existing attendance
    records are left untouched even if the window shrinks past them.
    """
    now = to_utc(now) if now else utcnow()
    changes = dict(changes)
    target_status = changes.pop("status", None)

    merged = {field: getattr(session, field) for field in EDITABLE_FIELDS}
    for field in EDITABLE_FIELDS:
        if field in changes:
            merged[field] = changes[field]
    if merged["title"] is None or not str(merged["title"]).strip():
        raise InvalidInput("Title cannot be empty")
    for field in REQUIRED_FIELDS:
        if merged[field] is None:
            raise InvalidInput(f"{field.replace('_', ' ').capitalize()} cannot be empty")

    validate_session_fields(
        merged["start_time"], merged["end_time"],
        merged["attendance_window_start"], merged["attendance_window_end"],
        merged["latitude"], merged["longitude"], merged["radius"],
    )

    try:
        # Status observed before the edit is what "no transition back" protects
        _materialize_status(session, now)
        if target_status is not None:
            transition_status(session, SessionStatus(target_status), now)

        for field in EDITABLE_FIELDS:
            if field in changes:
                value = changes[field]
                if isinstance(value, datetime):
                    value = to_utc(value)
                setattr(session, field, value)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(session)
    logger.info("session_updated", session_id=session.id, fields=sorted(changes), status=session.status)
    return session


def close_session(db: Session, session: AttendanceSession, now: Optional[datetime] = None) -> AttendanceSession:
    """Explicitly close a session."""
    transition_status(session, SessionStatus.CLOSED, now)
    db.commit()
    db.refresh(session)
    logger.info("session_closed", session_id=session.id)
    return session


def delete_session(db: Session, session: AttendanceSession) -> None:
    """Delete a session together with its tokens and attendance records."""
    session_id = session.id
    db.delete(session)
    db.commit()
    logger.info("session_deleted", session_id=session_id)


def session_to_dict(session: AttendanceSession, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Serializable view of a session with its effective status."""
    window_start, window_end = attendance_window(session)
    return {
        "id": session.id,
        "course_id": session.course_id,
        "title": session.title,
        "start_time": isoformat(session.start_time),
        "end_time": isoformat(session.end_time),
        "attendance_window_start": isoformat(window_start),
        "attendance_window_end": isoformat(window_end),
        "latitude": session.latitude,
        "longitude": session.longitude,
        "radius": session.radius,
        "status": effective_status(session, now).value,
    }
