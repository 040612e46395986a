"""Named errors raised by the service layer.

Every error derives from ``AttendanceError`` (itself a ``ValueError``) and
carries the HTTP status and machine-readable code the API boundary uses when
rendering it. The message is shown to the user as-is by the mobile client.
"""


class AttendanceError(ValueError):
    """Base class for client-caused failures."""

    status_code = 400
    code = "invalid_input"
    default_message = "Invalid request"

    def __init__(self, message=None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class InvalidInput(AttendanceError):
    pass


class InvalidStatusTransition(AttendanceError):
    code = "invalid_status_transition"
    default_message = "Invalid session status transition"


class AuthenticationFailed(AttendanceError):
    status_code = 401
    code = "authentication_failed"
    default_message = "Invalid email or password"


class PermissionDenied(AttendanceError):
    status_code = 403
    code = "permission_denied"
    default_message = "You do not have permission to perform this action"


class AlreadyExists(AttendanceError):
    status_code = 409
    code = "already_exists"
    default_message = "Resource already exists"


# Lookups

class SessionNotFound(AttendanceError):
    status_code = 404
    code = "session_not_found"
    default_message = "Session not found"


class ClassNotFound(AttendanceError):
    status_code = 404
    code = "class_not_found"
    default_message = "Class not found"


class UserNotFound(AttendanceError):
    status_code = 404
    code = "user_not_found"
    default_message = "User not found"


# Check-in protocol

class TokenInvalid(AttendanceError):
    code = "token_invalid"
    default_message = "Invalid QR code"


class TokenExpired(AttendanceError):
    code = "token_expired"
    default_message = "QR code has expired, please scan the new code"


class TokenSessionMismatch(AttendanceError):
    code = "token_session_mismatch"
    default_message = "QR code does not belong to this session"


class WindowClosed(AttendanceError):
    code = "window_closed"
    default_message = "Attendance is not open for this session"


class SessionClosed(AttendanceError):
    code = "session_closed"
    default_message = "Session is closed"


class NotEnrolled(AttendanceError):
    status_code = 403
    code = "not_enrolled"
    default_message = "You are not a member of this class"


# Class membership

class ClassClosed(AttendanceError):
    code = "class_closed"
    default_message = "Class is closed"


class ClassFull(AttendanceError):
    status_code = 409
    code = "class_full"
    default_message = "Class is full"
