"""Unit tests for class management and membership."""
import pytest

from rollcall.core.errors import AlreadyExists, ClassClosed, ClassFull, ClassNotFound, InvalidInput, NotEnrolled, PermissionDenied
from rollcall.db.models import AttendanceRecord, AttendanceSession, Course, Enrollment
from rollcall.db.models.attendance_session import SessionStatus
from rollcall.db.models.course import CourseStatus, EnrollmentStatus
from rollcall.services import classes
from rollcall.services.checkin import manual_check_in

from tests.utils import T0, make_session, make_teacher, make_user


@pytest.fixture
def teacher(db_session):
    return make_teacher(db_session, name="Dr. Le")


@pytest.fixture
def course(db_session, teacher):
    return classes.create_class(db_session, teacher, "Databases", "Spring term", max_students=2)


@pytest.mark.unit
class TestCreateClass:

    def test_code_is_pronounceable(self, course):
        assert len(course.code) == 8
        assert course.code.isalpha() and course.code.isupper()
        assert course.status == CourseStatus.ACTIVE.value

    def test_invalid_capacity(self, db_session, teacher):
        with pytest.raises(InvalidInput):
            classes.create_class(db_session, teacher, "Empty", max_students=0)

    def test_owner_check(self, db_session, course):
        with pytest.raises(PermissionDenied):
            classes.get_owned_class(db_session, course.id, make_teacher(db_session))

    def test_missing_class(self, db_session, teacher):
        with pytest.raises(ClassNotFound):
            classes.get_owned_class(db_session, 999, teacher)


@pytest.mark.unit
class TestMembership:

    def test_join_and_leave(self, db_session, course):
        student = make_user(db_session)
        classes.join_class(db_session, student, course.code)
        assert classes.is_active_member(db_session, course.id, student.id)

        classes.leave_class(db_session, student, course.id)
        assert not classes.is_active_member(db_session, course.id, student.id)

    def test_rejoin_reuses_enrollment(self, db_session, course):
        student = make_user(db_session)
        classes.join_class(db_session, student, course.code)
        classes.leave_class(db_session, student, course.id)
        classes.join_class(db_session, student, course.code)

        assert db_session.query(Enrollment).count() == 1
        assert classes.get_enrollment(db_session, course.id, student.id).status == EnrollmentStatus.ACTIVE.value

    def test_join_twice(self, db_session, course):
        student = make_user(db_session)
        classes.join_class(db_session, student, course.code)
        with pytest.raises(AlreadyExists):
            classes.join_class(db_session, student, course.code)

    def test_unknown_code(self, db_session, course):
        with pytest.raises(ClassNotFound):
            classes.join_class(db_session, make_user(db_session), "NOPENOPE")

    def test_class_full(self, db_session, course):
        classes.join_class(db_session, make_user(db_session), course.code)
        classes.join_class(db_session, make_user(db_session), course.code)
        with pytest.raises(ClassFull):
            classes.join_class(db_session, make_user(db_session), course.code)

    def test_closed_class(self, db_session, course):
        classes.close_class(db_session, course)
        with pytest.raises(ClassClosed):
            classes.join_class(db_session, make_user(db_session), course.code)

    def test_leave_without_joining(self, db_session, course):
        with pytest.raises(NotEnrolled):
            classes.leave_class(db_session, make_user(db_session), course.id)

    def test_listing(self, db_session, teacher, course):
        student = make_user(db_session, name="Binh")
        classes.join_class(db_session, student, course.code)

        assert [c.id for c in classes.list_teacher_classes(db_session, teacher)] == [course.id]
        assert [c.id for c in classes.list_student_classes(db_session, student)] == [course.id]
        assert [s.id for s in classes.list_active_students(db_session, course.id)] == [student.id]

    def test_view_permissions(self, db_session, teacher, course):
        student = make_user(db_session)
        classes.ensure_can_view(db_session, course, teacher)
        with pytest.raises(PermissionDenied):
            classes.ensure_can_view(db_session, course, student)
        classes.join_class(db_session, student, course.code)
        classes.ensure_can_view(db_session, course, student)


@pytest.mark.unit
class TestCloseUpdateDelete:

    def test_close_closes_sessions(self, db_session, course):
        session = make_session(db_session, course)
        classes.close_class(db_session, course)

        db_session.refresh(session)
        assert course.status == CourseStatus.CLOSED.value
        assert session.status == SessionStatus.CLOSED.value

    def test_update_fields(self, db_session, course):
        classes.update_class(db_session, course, {"name": "Databases II", "max_students": None})
        assert course.name == "Databases II"
        assert course.max_students is None

    def test_update_status_closed(self, db_session, course):
        session = make_session(db_session, course)
        classes.update_class(db_session, course, {"status": "closed"})
        db_session.refresh(session)
        assert session.status == SessionStatus.CLOSED.value

    def test_capacity_below_current_members(self, db_session, course):
        classes.join_class(db_session, make_user(db_session), course.code)
        classes.join_class(db_session, make_user(db_session), course.code)
        with pytest.raises(InvalidInput):
            classes.update_class(db_session, course, {"max_students": 1})

    def test_unknown_status(self, db_session, course):
        with pytest.raises(InvalidInput):
            classes.update_class(db_session, course, {"status": "archived"})

    def test_delete_cascades(self, db_session, course):
        student = make_user(db_session)
        classes.join_class(db_session, student, course.code)
        session = make_session(db_session, course)
        manual_check_in(db_session, session.id, student.id, "present", now=T0)

        classes.delete_class(db_session, course)

        assert db_session.query(Course).count() == 0
        assert db_session.query(Enrollment).count() == 0
        assert db_session.query(AttendanceSession).count() == 0
        assert db_session.query(AttendanceRecord).count() == 0

    def test_to_dict(self, db_session, course):
        classes.join_class(db_session, make_user(db_session), course.code)
        data = classes.class_to_dict(db_session, course)

        assert data["teacher_name"] == "Dr. Le"
        assert data["student_count"] == 1
        assert data["code"] == course.code
