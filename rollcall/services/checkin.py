"""Check-in evaluation.

``check_in`` runs the scan path in a fixed order, each step short-circuiting
with a named error:

    1. resolve the session                      SessionNotFound
    2. validate the token against it            TokenInvalid / TokenExpired / TokenSessionMismatch
    3. session ongoing and inside the window    WindowClosed
    4. student is an active class member        NotEnrolled
    5. existing record for the pair             returned unchanged (idempotent re-scan)
    6. distance to the class geofence center
    7. classify: present / late inside the radius, absent_unexcused outside
    8. persist exactly one record

Steps 1-4 never write. An out-of-range scan is not an error: it produces an
absent_unexcused record so the student can tell "too far away" apart from
"scan failed".
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from rollcall.core import config
from rollcall.core.errors import (
    AttendanceError,
    InvalidInput,
    NotEnrolled,
    TokenSessionMismatch,
    WindowClosed,
)
from rollcall.core.geofence import distance_meters, within_radius
from rollcall.core.logging_config import get_logger
from rollcall.core.utils import to_utc, utcnow
from rollcall.db.models import AttendanceRecord, AttendanceSession
from rollcall.db.models.attendance_record import AttendanceStatus, CheckInMethod
from rollcall.services import records
from rollcall.services.classes import is_active_member
from rollcall.services.sessions import attendance_window, get_session, is_accepting_check_ins
from rollcall.services.tokens import validate_token

logger = get_logger(__name__)


@dataclass
class CheckInResult:
    record: AttendanceRecord
    # False when an earlier check-in for the same pair was returned
    created: bool


def classify(
    session: AttendanceSession,
    distance: float,
    now: datetime,
    late_grace_minutes: Optional[int] = None,
) -> AttendanceStatus:
    """Attendance status for a scan at ``distance`` meters taken at ``now``."""
    if not within_radius(distance, session.radius):
        return AttendanceStatus.ABSENT_UNEXCUSED

    if late_grace_minutes is None:
        return AttendanceStatus.PRESENT

    window_start, _ = attendance_window(session)
    if to_utc(now) <= window_start + timedelta(minutes=late_grace_minutes):
        return AttendanceStatus.PRESENT
    return AttendanceStatus.LATE


def check_in(
    db: Session,
    session_id: int,
    token: str,
    student_id: int,
    latitude: float,
    longitude: float,
    accuracy: Optional[float] = None,
    now: Optional[datetime] = None,
) -> CheckInResult:
    """Evaluate a QR scan and record its outcome. See module docstring for the steps."""
    now = to_utc(now) if now else utcnow()
    log = logger.bind(session_id=session_id, student_id=student_id)

    try:
        session = get_session(db, session_id)

        token_session_id = validate_token(db, token, now)
        if token_session_id != session.id:
            raise TokenSessionMismatch()

        if not is_accepting_check_ins(session, now):
            raise WindowClosed()

        if not is_active_member(db, session.course_id, student_id):
            raise NotEnrolled()
    except AttendanceError as e:
        log.info("check_in_rejected", reason=e.code)
        raise

    existing = records.get_record(db, session.id, student_id)
    if existing is not None:
        log.info("check_in_repeated", status=existing.status)
        return CheckInResult(record=existing, created=False)

    distance = distance_meters(session.latitude, session.longitude, latitude, longitude)
    status = classify(session, distance, now, config.settings.LATE_GRACE_MINUTES)

    record, created = records.upsert_if_absent(db, AttendanceRecord(
        session_id=session.id,
        student_id=student_id,
        status=status.value,
        method=CheckInMethod.QR.value,
        check_in_time=now,
        latitude=latitude,
        longitude=longitude,
        accuracy=accuracy,
        distance_to_class=distance,
    ))

    if created:
        log.info(
            "check_in_recorded",
            status=record.status,
            distance_m=round(distance, 1),
            radius_m=session.radius,
            accuracy_m=accuracy,
        )
    else:
        log.info("check_in_race_lost", status=record.status)
    return CheckInResult(record=record, created=created)


def manual_check_in(
    db: Session,
    session_id: int,
    student_id: int,
    status: str,
    now: Optional[datetime] = None,
) -> AttendanceRecord:
    """
    Instructor override: set a student's status for a session directly.

    Skips token, window and geofence checks and overwrites any earlier
    record. This is the only way to produce absent_excused.
    """
    try:
        new_status = AttendanceStatus(status)
    except ValueError:
        raise InvalidInput(
            "Status must be one of: " + ", ".join(s.value for s in AttendanceStatus)
        )

    now = to_utc(now) if now else utcnow()
    session = get_session(db, session_id)
    if not is_active_member(db, session.course_id, student_id):
        raise NotEnrolled("Student is not a member of this class")

    record = records.overwrite(
        db,
        session.id,
        student_id,
        status=new_status.value,
        method=CheckInMethod.MANUAL.value,
        check_in_time=now,
        latitude=None,
        longitude=None,
        accuracy=None,
        distance_to_class=None,
    )
    logger.info("manual_check_in", session_id=session.id, student_id=student_id, status=record.status)
    return record
