"""Unit tests for attendance session lifecycle."""
from datetime import timedelta

import pytest

from rollcall.core.errors import InvalidInput, InvalidStatusTransition, SessionNotFound
from rollcall.core.utils import to_utc
from rollcall.db.models import AttendanceSession
from rollcall.db.models.attendance_session import SessionStatus
from rollcall.services.sessions import (
    attendance_window,
    close_session,
    delete_session,
    effective_status,
    get_session,
    is_accepting_check_ins,
    session_to_dict,
    update_session,
)

from tests.utils import T0, make_class, make_session, make_teacher


@pytest.fixture
def course(db_session):
    return make_class(db_session, make_teacher(db_session))


@pytest.mark.unit
class TestCreateSession:

    def test_defaults(self, db_session, course):
        session = make_session(db_session, course)

        assert session.status == SessionStatus.SCHEDULED.value
        assert session.radius == 100.0
        assert session.title == "Session 2026-03-02 08:00"
        assert attendance_window(session) == (T0, T0 + timedelta(hours=2))

    def test_configured_default_radius(self, db_session, course, settings):
        settings.DEFAULT_RADIUS_METERS = 40.0
        assert make_session(db_session, course).radius == 40.0

    def test_end_must_follow_start(self, db_session, course):
        with pytest.raises(InvalidInput, match="End time"):
            make_session(db_session, course, duration=timedelta(0))

    def test_window_must_fit_in_session(self, db_session, course):
        with pytest.raises(InvalidInput, match="within the session"):
            make_session(db_session, course, attendance_window_start=T0 - timedelta(minutes=1))

    def test_window_end_before_start(self, db_session, course):
        with pytest.raises(InvalidInput):
            make_session(
                db_session, course,
                attendance_window_start=T0 + timedelta(minutes=30),
                attendance_window_end=T0 + timedelta(minutes=10),
            )

    def test_radius_must_be_positive(self, db_session, course):
        with pytest.raises(InvalidInput, match="Radius"):
            make_session(db_session, course, radius=0)

    def test_nothing_written_on_invalid_input(self, db_session, course):
        with pytest.raises(InvalidInput):
            make_session(db_session, course, radius=-5)
        assert db_session.query(AttendanceSession).count() == 0

    def test_get_missing_session(self, db_session):
        with pytest.raises(SessionNotFound):
            get_session(db_session, 12345)


@pytest.mark.unit
class TestEffectiveStatus:

    def test_scheduled_before_start(self, db_session, course):
        session = make_session(db_session, course)
        assert effective_status(session, T0 - timedelta(seconds=1)) == SessionStatus.SCHEDULED

    def test_ongoing_from_start(self, db_session, course):
        session = make_session(db_session, course)
        assert effective_status(session, T0) == SessionStatus.ONGOING

    def test_still_ongoing_at_end(self, db_session, course):
        session = make_session(db_session, course)
        assert effective_status(session, T0 + timedelta(hours=2)) == SessionStatus.ONGOING

    def test_closed_after_end(self, db_session, course):
        session = make_session(db_session, course)
        assert effective_status(session, T0 + timedelta(hours=2, seconds=1)) == SessionStatus.CLOSED

    def test_explicit_close_wins_over_clock(self, db_session, course):
        session = make_session(db_session, course)
        close_session(db_session, session, now=T0 - timedelta(hours=1))
        assert effective_status(session, T0 + timedelta(minutes=5)) == SessionStatus.CLOSED

    def test_explicitly_started_before_start_time(self, db_session, course):
        session = make_session(db_session, course)
        update_session(db_session, session, {"status": "ongoing"}, now=T0 - timedelta(minutes=10))
        assert effective_status(session, T0 - timedelta(minutes=5)) == SessionStatus.ONGOING


@pytest.mark.unit
class TestAcceptingCheckIns:

    def test_window_bounds_are_inclusive(self, db_session, course):
        session = make_session(
            db_session, course,
            attendance_window_start=T0 + timedelta(minutes=5),
            attendance_window_end=T0 + timedelta(minutes=20),
        )
        assert not is_accepting_check_ins(session, T0 + timedelta(minutes=4, seconds=59))
        assert is_accepting_check_ins(session, T0 + timedelta(minutes=5))
        assert is_accepting_check_ins(session, T0 + timedelta(minutes=20))
        assert not is_accepting_check_ins(session, T0 + timedelta(minutes=20, seconds=1))

    def test_not_accepting_when_closed(self, db_session, course):
        session = make_session(db_session, course)
        close_session(db_session, session, now=T0 + timedelta(minutes=1))
        assert not is_accepting_check_ins(session, T0 + timedelta(minutes=2))


@pytest.mark.unit
class TestUpdateSession:

    def test_partial_update(self, db_session, course):
        session = make_session(db_session, course, title="Week 1")
        update_session(db_session, session, {"radius": 75.0}, now=T0 - timedelta(hours=1))

        assert session.radius == 75.0
        assert session.title == "Week 1"

    def test_invalid_merge_is_rejected(self, db_session, course):
        session = make_session(db_session, course)
        with pytest.raises(InvalidInput):
            update_session(db_session, session, {"end_time": T0 - timedelta(minutes=1)})
        db_session.refresh(session)
        assert to_utc(session.end_time) == T0 + timedelta(hours=2)

    def test_cannot_reopen_closed_session(self, db_session, course):
        session = make_session(db_session, course)
        close_session(db_session, session, now=T0)
        with pytest.raises(InvalidStatusTransition):
            update_session(db_session, session, {"status": "ongoing"}, now=T0 + timedelta(minutes=1))

    def test_cannot_move_back_to_scheduled_once_started_by_clock(self, db_session, course):
        session = make_session(db_session, course)
        with pytest.raises(InvalidStatusTransition):
            update_session(db_session, session, {"status": "scheduled"}, now=T0 + timedelta(minutes=1))
        db_session.refresh(session)
        assert session.status == SessionStatus.SCHEDULED.value

    def test_edit_materializes_observed_status(self, db_session, course):
        session = make_session(db_session, course)
        update_session(db_session, session, {"title": "Renamed"}, now=T0 + timedelta(minutes=1))
        assert session.status == SessionStatus.ONGOING.value

    def test_empty_title(self, db_session, course):
        session = make_session(db_session, course)
        with pytest.raises(InvalidInput, match="Title"):
            update_session(db_session, session, {"title": None})

    @pytest.mark.parametrize("field", ["start_time", "end_time", "latitude", "longitude", "radius"])
    def test_required_field_cannot_be_cleared(self, db_session, course, field):
        session = make_session(db_session, course)
        with pytest.raises(InvalidInput, match="cannot be empty"):
            update_session(db_session, session, {field: None})
        db_session.refresh(session)
        assert getattr(session, field) is not None


@pytest.mark.unit
class TestDeleteAndSerialize:

    def test_delete(self, db_session, course):
        session = make_session(db_session, course)
        delete_session(db_session, session)
        assert db_session.query(AttendanceSession).count() == 0

    def test_to_dict_uses_effective_status(self, db_session, course):
        session = make_session(db_session, course)
        data = session_to_dict(session, now=T0 + timedelta(minutes=1))

        assert data["status"] == "ongoing"
        assert data["start_time"] == "2026-03-02T08:00:00+00:00"
        assert data["attendance_window_end"] == "2026-03-02T10:00:00+00:00"

    def test_to_dict_in_configured_timezone(self, db_session, course, settings):
        settings.TIMEZONE = "Asia/Ho_Chi_Minh"
        data = session_to_dict(make_session(db_session, course), now=T0)
        assert data["start_time"] == "2026-03-02T15:00:00+07:00"
