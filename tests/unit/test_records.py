"""Unit tests for the attendance record store."""
from datetime import timedelta

import pytest

from rollcall.db.models import AttendanceRecord
from rollcall.services import records

from tests.utils import T0, enroll, make_class, make_session, make_teacher, make_user


@pytest.fixture
def pair(db_session):
    course = make_class(db_session, make_teacher(db_session))
    student = make_user(db_session)
    enroll(db_session, course, student)
    return make_session(db_session, course), student


def new_record(session, student, status="present", at=T0):
    return AttendanceRecord(
        session_id=session.id,
        student_id=student.id,
        status=status,
        method="qr",
        check_in_time=at,
    )


@pytest.mark.unit
class TestUpsertIfAbsent:

    def test_inserts(self, db_session, pair):
        session, student = pair
        record, created = records.upsert_if_absent(db_session, new_record(session, student))

        assert created is True
        assert records.get_record(db_session, session.id, student.id).id == record.id

    def test_keeps_existing(self, db_session, pair):
        session, student = pair
        first, _ = records.upsert_if_absent(db_session, new_record(session, student, "late"))
        second, created = records.upsert_if_absent(db_session, new_record(session, student, "present"))

        assert created is False
        assert second.id == first.id
        assert second.status == "late"
        assert db_session.query(AttendanceRecord).count() == 1


@pytest.mark.unit
class TestOverwrite:

    def test_inserts_when_missing(self, db_session, pair):
        session, student = pair
        record = records.overwrite(db_session, session.id, student.id, status="absent_excused", method="manual", check_in_time=T0)
        assert record.status == "absent_excused"

    def test_replaces_fields(self, db_session, pair):
        session, student = pair
        records.upsert_if_absent(db_session, new_record(session, student))
        record = records.overwrite(db_session, session.id, student.id, status="late", method="manual")

        assert record.status == "late"
        assert record.method == "manual"
        assert db_session.query(AttendanceRecord).count() == 1


@pytest.mark.unit
def test_listing_order(db_session, pair):
    session, student = pair
    other = make_user(db_session)
    records.upsert_if_absent(db_session, new_record(session, other, at=T0 + timedelta(minutes=3)))
    records.upsert_if_absent(db_session, new_record(session, student, at=T0 + timedelta(minutes=1)))

    by_session = records.list_by_session(db_session, session.id)
    assert [r.student_id for r in by_session] == [student.id, other.id]
    assert [r.session_id for r in records.list_by_student(db_session, student.id)] == [session.id]
