from .checkin import CheckInResult, check_in, classify, manual_check_in
from .records import get_record, list_by_session, list_by_student, overwrite, upsert_if_absent
from .sessions import (
    attendance_window,
    close_session,
    create_session,
    delete_session,
    effective_status,
    get_session,
    is_accepting_check_ins,
    update_session,
)
from .tokens import IssuedToken, clamp_ttl, issue_token, validate_token

__all__ = [
    # checkin
    "CheckInResult",
    "check_in",
    "classify",
    "manual_check_in",
    # records
    "get_record",
    "list_by_session",
    "list_by_student",
    "overwrite",
    "upsert_if_absent",
    # sessions
    "attendance_window",
    "close_session",
    "create_session",
    "delete_session",
    "effective_status",
    "get_session",
    "is_accepting_check_ins",
    "update_session",
    # tokens
    "IssuedToken",
    "clamp_ttl",
    "issue_token",
    "validate_token",
]
