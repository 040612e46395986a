"""Create the database schema, optionally with demo accounts.

Usage:
    python create_tables.py            # tables only
    python create_tables.py --demo     # plus one instructor and one student
"""
import sys

from rollcall.core.constants import ROLE_STUDENT, ROLE_TEACHER
from rollcall.core.logging_config import get_logger, setup_logging
from rollcall.db import Base, engine, get_db_context
from rollcall.db.models import User
from rollcall.services import auth as auth_service

DEMO_ACCOUNTS = [
    ("Demo Instructor", "teacher@example.edu", "teacher123", ROLE_TEACHER, None),
    ("Demo Student", "student@example.edu", "student123", ROLE_STUDENT, "S0001"),
]


def main(argv):
    setup_logging()
    logger = get_logger("create_tables")

    Base.metadata.create_all(bind=engine)
    logger.info("tables_created", url=engine.url.render_as_string(hide_password=True))

    if "--demo" not in argv:
        return

    with get_db_context() as db:
        for name, email, password, role, student_code in DEMO_ACCOUNTS:
            if db.query(User).filter(User.email == email).first():
                logger.info("demo_account_exists", email=email)
                continue
            auth_service.register(db, name, email, password, role, student_code)
            logger.info("demo_account_created", email=email, role=role)


if __name__ == "__main__":
    main(sys.argv[1:])
