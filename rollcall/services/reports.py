"""Attendance reporting: rosters, class statistics and student history."""
import enum
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session, joinedload

from rollcall.core.utils import isoformat, to_utc, utcnow
from rollcall.db.models import AttendanceRecord, AttendanceSession, Course, User
from rollcall.db.models.attendance_record import AttendanceStatus
from rollcall.db.models.attendance_session import SessionStatus
from rollcall.services import records
from rollcall.services.classes import list_active_students
from rollcall.services.sessions import effective_status, list_sessions, session_to_dict


class RosterStatus(str, enum.Enum):
    """A student's standing in one session: a stored status or no record yet."""

    PRESENT = AttendanceStatus.PRESENT.value
    LATE = AttendanceStatus.LATE.value
    ABSENT_EXCUSED = AttendanceStatus.ABSENT_EXCUSED.value
    ABSENT_UNEXCUSED = AttendanceStatus.ABSENT_UNEXCUSED.value
    NO_RECORD = "no_record"


def record_location(record: AttendanceRecord) -> Optional[Dict[str, Any]]:
    """Reported position of a scan; None for manual records."""
    if record.latitude is None and record.distance_to_class is None:
        return None
    return {
        "latitude": record.latitude,
        "longitude": record.longitude,
        "accuracy": record.accuracy,
        "distance_to_class": record.distance_to_class,
    }


def record_to_dict(record: AttendanceRecord) -> Dict[str, Any]:
    return {
        "id": record.id,
        "session_id": record.session_id,
        "student_id": record.student_id,
        "status": record.status,
        "method": record.method,
        "check_in_time": isoformat(record.check_in_time),
        "location": record_location(record),
    }


def session_records(db: Session, session: AttendanceSession) -> List[Dict[str, Any]]:
    """Students who have a record for the session, in check-in order."""
    result = []
    for record in records.list_by_session(db, session.id):
        item = record_to_dict(record)
        item["student_name"] = record.student.name
        item["student_email"] = record.student.email
        result.append(item)
    return result


def session_roster(
    db: Session,
    session: AttendanceSession,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Every active class member with their standing in the session."""
    by_student = {r.student_id: r for r in records.list_by_session(db, session.id)}

    students = []
    for student in list_active_students(db, session.course_id):
        record = by_student.get(student.id)
        students.append({
            "id": student.id,
            "name": student.name,
            "email": student.email,
            "student_code": student.student_code,
            "attendance_id": record.id if record else None,
            "status": RosterStatus(record.status) if record else RosterStatus.NO_RECORD,
            "check_in_time": isoformat(record.check_in_time) if record else None,
            "location": record_location(record) if record else None,
        })

    return {"session": session_to_dict(session, now), "students": students}


def class_stats(db: Session, course: Course, now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Per-student attendance counts across all sessions of a class.

    notCheckedIn counts closed sessions without a record; sessions still open
    are not held against the student. The rate is (present + late) over all
    sessions of the class.
    """
    now = to_utc(now) if now else utcnow()
    sessions = list_sessions(db, course.id)
    session_ids = [s.id for s in sessions]
    closed_ids = {s.id for s in sessions if effective_status(s, now) == SessionStatus.CLOSED}

    statuses: Dict[int, Dict[int, str]] = {}
    if session_ids:
        rows = db.query(
            AttendanceRecord.student_id,
            AttendanceRecord.session_id,
            AttendanceRecord.status,
        ).filter(AttendanceRecord.session_id.in_(session_ids)).all()
        for student_id, session_id, status in rows:
            statuses.setdefault(student_id, {})[session_id] = status

    total_sessions = len(sessions)
    students = []
    for student in list_active_students(db, course.id):
        mine = statuses.get(student.id, {})
        counts = {status.value: 0 for status in AttendanceStatus}
        for status in mine.values():
            counts[status] += 1
        not_checked_in = len(closed_ids - set(mine))
        attended = counts[AttendanceStatus.PRESENT.value] + counts[AttendanceStatus.LATE.value]
        rate = round(attended / total_sessions * 100, 1) if total_sessions else 0.0

        students.append({
            "id": student.id,
            "name": student.name,
            "email": student.email,
            "total_sessions": total_sessions,
            "present_count": counts[AttendanceStatus.PRESENT.value],
            "late_count": counts[AttendanceStatus.LATE.value],
            "absent_excused_count": counts[AttendanceStatus.ABSENT_EXCUSED.value],
            "absent_unexcused_count": counts[AttendanceStatus.ABSENT_UNEXCUSED.value],
            "not_checked_in": not_checked_in,
            "attendance_rate": rate,
        })

    return {
        "class_name": course.name,
        "class_code": course.code,
        "total_sessions": total_sessions,
        "total_students": len(students),
        "students": students,
    }


def student_history(db: Session, student: User) -> List[Dict[str, Any]]:
    """All attendance records of a student, most recent first."""
    rows = (
        db.query(AttendanceRecord)
        .options(joinedload(AttendanceRecord.session).joinedload(AttendanceSession.course))
        .filter(AttendanceRecord.student_id == student.id)
        .order_by(AttendanceRecord.check_in_time.desc())
        .all()
    )

    result = []
    for record in rows:
        session = record.session
        result.append({
            "id": record.id,
            "session_id": session.id,
            "session_title": session.title,
            "session_start_time": isoformat(session.start_time),
            "session_end_time": isoformat(session.end_time),
            "class_id": session.course_id,
            "class_name": session.course.name,
            "check_in_time": isoformat(record.check_in_time),
            "status": record.status,
            "distance_to_class": record.distance_to_class,
        })
    return result


def student_sessions(
    db: Session,
    course: Course,
    student: User,
    now: Optional[datetime] = None,
) -> List[Dict[str, Any]]:
    """Sessions of a class with the student's own attendance status (or None)."""
    sessions = list_sessions(db, course.id)
    mine = {
        r.session_id: r
        for r in db.query(AttendanceRecord).filter(
            AttendanceRecord.student_id == student.id,
            AttendanceRecord.session_id.in_([s.id for s in sessions]),
        ).all()
    } if sessions else {}

    result = []
    for session in sessions:
        item = session_to_dict(session, now)
        record = mine.get(session.id)
        item["attendance_status"] = record.status if record else None
        item["check_in_time"] = isoformat(record.check_in_time) if record else None
        result.append(item)
    return result
