"""Class (course) management and roster membership."""
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from rollcall.core.errors import (
    AlreadyExists,
    ClassClosed,
    ClassFull,
    ClassNotFound,
    InvalidInput,
    NotEnrolled,
    PermissionDenied,
)
from rollcall.core.logging_config import get_logger
from rollcall.core.utils import isoformat, make_pronounceable
from rollcall.db.models import Course, Enrollment, User
from rollcall.db.models.attendance_session import SessionStatus
from rollcall.db.models.course import CourseStatus, EnrollmentStatus

logger = get_logger(__name__)


def create_class(
    db: Session,
    teacher: User,
    name: str,
    description: Optional[str] = None,
    max_students: Optional[int] = None,
) -> Course:
    """Create a new class with a unique join code."""
    if max_students is not None and max_students < 1:
        raise InvalidInput("Max students must be at least 1")

    # Try to create class with unique code
    for _ in range(3):
        course = Course(
            teacher_id=teacher.id,
            name=name,
            description=description,
            max_students=max_students,
            code=make_pronounceable(),
            status=CourseStatus.ACTIVE.value,
        )
        try:
            db.add(course)
            db.commit()
            db.refresh(course)
            logger.info("class_created", class_id=course.id, teacher_id=teacher.id)
            return course
        except IntegrityError:
            db.rollback()
            continue

    raise RuntimeError("Failed to generate unique class code")


def get_class(db: Session, class_id: int) -> Course:
    course = db.query(Course).filter(Course.id == class_id).first()
    if not course:
        raise ClassNotFound()
    return course


def get_owned_class(db: Session, class_id: int, teacher: User) -> Course:
    """Load a class and check that ``teacher`` runs it."""
    course = get_class(db, class_id)
    if course.teacher_id != teacher.id:
        raise PermissionDenied("You are not the instructor of this class")
    return course


def get_enrollment(db: Session, class_id: int, student_id: int) -> Optional[Enrollment]:
    return db.query(Enrollment).filter(
        Enrollment.course_id == class_id,
        Enrollment.student_id == student_id,
    ).first()


def is_active_member(db: Session, class_id: int, student_id: int) -> bool:
    """Roster check used before any check-in is considered."""
    enrollment = get_enrollment(db, class_id, student_id)
    return enrollment is not None and enrollment.status == EnrollmentStatus.ACTIVE.value


def ensure_can_view(db: Session, course: Course, user: User) -> None:
    """Instructors see their own classes; students see classes they belong to."""
    if course.teacher_id == user.id:
        return
    if not is_active_member(db, course.id, user.id):
        raise PermissionDenied("You are not a member of this class")


def active_student_count(db: Session, class_id: int) -> int:
    return db.query(func.count(Enrollment.id)).filter(
        Enrollment.course_id == class_id,
        Enrollment.status == EnrollmentStatus.ACTIVE.value,
    ).scalar()


def list_active_students(db: Session, class_id: int) -> List[User]:
    """Active members of a class ordered by name."""
    return (
        db.query(User)
        .join(Enrollment, Enrollment.student_id == User.id)
        .filter(
            Enrollment.course_id == class_id,
            Enrollment.status == EnrollmentStatus.ACTIVE.value,
        )
        .order_by(User.name.asc(), User.id.asc())
        .all()
    )


def list_teacher_classes(db: Session, teacher: User) -> List[Course]:
    return (
        db.query(Course)
        .filter(Course.teacher_id == teacher.id)
        .order_by(Course.created_at.desc(), Course.id.desc())
        .all()
    )


def list_student_classes(db: Session, student: User) -> List[Course]:
    return (
        db.query(Course)
        .join(Enrollment, Enrollment.course_id == Course.id)
        .filter(
            Enrollment.student_id == student.id,
            Enrollment.status == EnrollmentStatus.ACTIVE.value,
        )
        .order_by(Enrollment.joined_at.desc(), Course.id.desc())
        .all()
    )


def join_class(db: Session, student: User, code: str) -> Course:
    """
    Join a class by its code.

    A student who left earlier is re-activated rather than enrolled twice.
    """
    course = db.query(Course).filter(Course.code == code).first()
    if not course:
        raise ClassNotFound("No class matches this code")
    if course.status == CourseStatus.CLOSED.value:
        raise ClassClosed()

    enrollment = get_enrollment(db, course.id, student.id)
    if enrollment is not None and enrollment.status == EnrollmentStatus.ACTIVE.value:
        raise AlreadyExists("You have already joined this class")

    if course.max_students is not None and active_student_count(db, course.id) >= course.max_students:
        raise ClassFull()

    try:
        if enrollment is None:
            db.add(Enrollment(course_id=course.id, student_id=student.id))
        else:
            enrollment.status = EnrollmentStatus.ACTIVE.value
        db.commit()
    except IntegrityError:
        db.rollback()
        # Concurrent join for the same student
        raise AlreadyExists("You have already joined this class")

    logger.info("class_joined", class_id=course.id, student_id=student.id)
    return course


def leave_class(db: Session, student: User, class_id: int) -> None:
    course = get_class(db, class_id)
    enrollment = get_enrollment(db, course.id, student.id)
    if enrollment is None or enrollment.status != EnrollmentStatus.ACTIVE.value:
        raise NotEnrolled()

    enrollment.status = EnrollmentStatus.LEFT.value
    db.commit()
    logger.info("class_left", class_id=course.id, student_id=student.id)


def close_class(db: Session, course: Course) -> Course:
    """Close a class and every session that belongs to it."""
    course.status = CourseStatus.CLOSED.value
    for session in course.sessions:
        session.status = SessionStatus.CLOSED.value
    db.commit()
    db.refresh(course)
    logger.info("class_closed", class_id=course.id, sessions_closed=len(course.sessions))
    return course


def update_class(db: Session, course: Course, changes: Dict[str, Any]) -> Course:
    """Apply an edit to a class. Setting status to closed closes its sessions."""
    changes = dict(changes)
    status = changes.pop("status", None)

    if "name" in changes and not changes["name"]:
        raise InvalidInput("Class name cannot be empty")
    if "max_students" in changes and changes["max_students"] is not None:
        if changes["max_students"] < active_student_count(db, course.id):
            raise InvalidInput("Max students cannot be lower than the current number of students")

    for field in ("name", "description", "max_students"):
        if field in changes:
            setattr(course, field, changes[field])

    if status is not None:
        try:
            new_status = CourseStatus(status)
        except ValueError:
            raise InvalidInput("Status must be active or closed")
        if new_status == CourseStatus.CLOSED:
            return close_class(db, course)
        course.status = new_status.value

    db.commit()
    db.refresh(course)
    return course


def delete_class(db: Session, course: Course) -> None:
    """Delete a class with its enrollments, sessions, tokens and records."""
    class_id = course.id
    db.delete(course)
    db.commit()
    logger.info("class_deleted", class_id=class_id)


def class_to_dict(db: Session, course: Course) -> Dict[str, Any]:
    return {
        "id": course.id,
        "code": course.code,
        "name": course.name,
        "description": course.description,
        "max_students": course.max_students,
        "status": course.status,
        "teacher_id": course.teacher_id,
        "teacher_name": course.teacher.name if course.teacher else None,
        "student_count": active_student_count(db, course.id),
        "created_at": isoformat(course.created_at),
    }
