"""Concurrent check-ins against a shared database file."""
import threading
from datetime import timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from rollcall.db.base import Base
from rollcall.db.models import AttendanceRecord
from rollcall.services.checkin import check_in
from rollcall.services.tokens import issue_token

from tests.utils import CLASS_LON, T0, enroll, make_class, make_session, make_teacher, make_user

THREADS = 8


@pytest.fixture
def file_db(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'concurrency.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.mark.unit
@pytest.mark.slow
def test_same_student_scanning_concurrently_gets_one_record(file_db):
    with file_db() as db:
        course = make_class(db, make_teacher(db))
        student = make_user(db)
        enroll(db, course, student)
        session = make_session(db, course)
        token = issue_token(db, session, now=T0).token
        session_id, student_id = session.id, student.id

    barrier = threading.Barrier(THREADS)
    results = []
    errors = []
    lock = threading.Lock()

    def worker():
        with file_db() as db:
            barrier.wait()
            try:
                result = check_in(db, session_id, token, student_id, 10.0002, CLASS_LON, now=T0 + timedelta(minutes=1))
                with lock:
                    results.append((result.record.id, result.created))
            except Exception as exc:  # collected and asserted below
                with lock:
                    errors.append(exc)

    threads = [threading.Thread(target=worker) for _ in range(THREADS)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert len(results) == THREADS
    assert len({record_id for record_id, _ in results}) == 1
    assert sum(1 for _, created in results if created) == 1

    with file_db() as db:
        assert db.query(AttendanceRecord).count() == 1


@pytest.mark.unit
@pytest.mark.slow
def test_many_students_share_one_token(file_db):
    with file_db() as db:
        course = make_class(db, make_teacher(db))
        students = [make_user(db) for _ in range(THREADS)]
        for student in students:
            enroll(db, course, student)
        session = make_session(db, course)
        token = issue_token(db, session, now=T0).token
        session_id = session.id
        student_ids = [s.id for s in students]

    errors = []

    def worker(student_id):
        with file_db() as db:
            try:
                check_in(db, session_id, token, student_id, 10.0002, CLASS_LON, now=T0 + timedelta(minutes=2))
            except Exception as exc:  # collected and asserted below
                errors.append(exc)

    threads = [threading.Thread(target=worker, args=(sid,)) for sid in student_ids]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    with file_db() as db:
        assert db.query(AttendanceRecord).count() == THREADS
