import os
from pathlib import Path
import nox

# Reuse existing virtualenvs for faster runs
nox.options.reuse_existing_virtualenvs = True
# Default sessions when running "nox"
nox.options.sessions = ["lint", "unit", "integration"]

# Environment variables to propagate
PASSED_ENV_VARS = [
    "SECRET_KEY",
    "ENVIRONMENT",
    "DATABASE_URL",
    "TIMEZONE",
    "LATE_GRACE_MINUTES",
]


def _set_env(session):
    """
    Propagate configuration environment variables into the session.
    Also ensure the project root is on PYTHONPATH.
    """
    session.env["PYTHONPATH"] = str(Path.cwd())
    for var in PASSED_ENV_VARS:
        if var in os.environ:
            session.env[var] = os.environ[var]


@nox.session(name="lint")
def lint(session):
    """
    Code formatting, linting, and type-checks:
      - isort
      - black
      - flake8
      - mypy
    """
    _set_env(session)
    session.install("isort", "black", "flake8", "mypy")
    session.run("isort", "rollcall/", "tests/")
    session.run("black", "rollcall/", "tests/")
    session.run("flake8", "rollcall/", "tests/")
    session.run("mypy", "rollcall/")


@nox.session(name="unit")
def unit(session):
    """
    Run unit tests against an in-memory SQLite database.
    Pass positional args to target specific tests.
    Usage:
      nox -s unit             # runs all tests marked unit
      nox -s unit -- tests/unit/test_checkin.py::TestCheckIn
    """
    _set_env(session)
    session.install("-e", ".[test]")
    tests = session.posargs or ["tests/unit"]
    htmlcov_path = ".nox/htmlcov"
    session.run(
        "pytest",
        *tests,
        "--maxfail=1",
        "-vv",
        "--tb=short",
        "--cov=rollcall",
        "--cov-report=term-missing",
        "--cov-report=html:" + htmlcov_path,
        "--cov-report=xml",
        "--cov-fail-under=80",
    )


@nox.session(name="integration")
def integration(session):
    """
    Run API tests through the FastAPI test client.
    Usage:
      nox -s integration
      nox -s integration -- tests/integration/test_attendance_api.py
    """
    _set_env(session)
    session.install("-e", ".[test]")
    tests = session.posargs or ["tests/integration"]
    session.run(
        "pytest",
        *tests,
        "--maxfail=1",
        "-vv",
        "--tb=short",
    )
