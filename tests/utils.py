"""Builders for test data."""
import itertools
from datetime import datetime, timedelta, timezone

from rollcall.core.constants import ROLE_STUDENT, ROLE_TEACHER
from rollcall.core.security import create_user_token
from rollcall.db.models import Course, Enrollment, User
from rollcall.services.sessions import create_session

# Fixed clock for service-level tests
T0 = datetime(2026, 3, 2, 8, 0, tzinfo=timezone.utc)

CLASS_LAT = 10.0
CLASS_LON = 106.0

_ids = itertools.count(1)


def make_user(db, role=ROLE_STUDENT, name=None, email=None, student_code=None):
    n = next(_ids)
    user = User(
        name=name or f"User {n}",
        email=email or f"user{n}@example.edu",
        password_hash="unused",
        role=role,
        student_code=student_code,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_teacher(db, **kwargs):
    return make_user(db, role=ROLE_TEACHER, **kwargs)


def make_class(db, teacher, name="Algorithms", max_students=None):
    course = Course(
        teacher_id=teacher.id,
        name=name,
        code=f"TST{next(_ids):05d}",
        max_students=max_students,
    )
    db.add(course)
    db.commit()
    db.refresh(course)
    return course


def enroll(db, course, student):
    db.add(Enrollment(course_id=course.id, student_id=student.id))
    db.commit()


def make_session(db, course, start=T0, duration=timedelta(hours=2), **kwargs):
    kwargs.setdefault("latitude", CLASS_LAT)
    kwargs.setdefault("longitude", CLASS_LON)
    return create_session(db, course, start_time=start, end_time=start + duration, **kwargs)


def auth_headers(user):
    return {"Authorization": f"Bearer {create_user_token(user.id, user.role)}"}
