"""Database base class and model imports."""
from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Import all models here so metadata.create_all() sees them
from rollcall.db.models.user import User  # noqa: F401, E402
from rollcall.db.models.course import Course, Enrollment  # noqa: F401, E402
from rollcall.db.models.attendance_session import AttendanceSession  # noqa: F401, E402
from rollcall.db.models.session_token import SessionToken  # noqa: F401, E402
from rollcall.db.models.attendance_record import AttendanceRecord  # noqa: F401, E402
