"""Attendance record store.

The (session_id, student_id) pair is unique at the database level
(``uq_session_student``). Writers never read-then-insert: they insert and
let the constraint arbitrate concurrent attempts.
"""
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from rollcall.db.models import AttendanceRecord


def get_record(db: Session, session_id: int, student_id: int) -> Optional[AttendanceRecord]:
    """Get the record for a (session, student) pair, if any."""
    return db.query(AttendanceRecord).filter(
        AttendanceRecord.session_id == session_id,
        AttendanceRecord.student_id == student_id,
    ).first()


def upsert_if_absent(db: Session, record: AttendanceRecord) -> Tuple[AttendanceRecord, bool]:
    """
    Insert ``record`` unless its pair already has one.

    Returns:
        (stored record, created). When another writer won the race the
        winning row is returned with created=False.
    """
    try:
        db.add(record)
        db.commit()
    except IntegrityError:
        db.rollback()
        existing = get_record(db, record.session_id, record.student_id)
        if existing is None:
            # Constraint failure was not the pair uniqueness
            raise
        return existing, False

    db.refresh(record)
    return record, True


def overwrite(db: Session, session_id: int, student_id: int, **fields) -> AttendanceRecord:
    """
    Replace the record for a pair, creating it if needed.

    Every column in ``fields`` is written; columns not given keep their
    previous value on update.
    """
    existing = get_record(db, session_id, student_id)
    if existing is None:
        record = AttendanceRecord(session_id=session_id, student_id=student_id, **fields)
        try:
            db.add(record)
            db.commit()
            db.refresh(record)
            return record
        except IntegrityError:
            db.rollback()
            existing = get_record(db, session_id, student_id)
            if existing is None:
                raise

    for name, value in fields.items():
        setattr(existing, name, value)
    db.commit()
    db.refresh(existing)
    return existing


def list_by_session(db: Session, session_id: int) -> List[AttendanceRecord]:
    """Records of one session in check-in order."""
    return (
        db.query(AttendanceRecord)
        .filter(AttendanceRecord.session_id == session_id)
        .order_by(AttendanceRecord.check_in_time.asc())
        .all()
    )


def list_by_student(db: Session, student_id: int) -> List[AttendanceRecord]:
    """Records of one student, most recent first."""
    return (
        db.query(AttendanceRecord)
        .filter(AttendanceRecord.student_id == student_id)
        .order_by(AttendanceRecord.check_in_time.desc())
        .all()
    )
