"""Class management endpoints."""
from typing import List

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from rollcall.api.deps import get_current_user, get_db, require_student, require_teacher
from rollcall.core.rate_limit import limiter, RATE_LIMITS
from rollcall.db.models import User
from rollcall.schemas import (
    ApiResponse,
    ClassCreate,
    ClassOut,
    ClassStudentsOut,
    ClassUpdate,
    JoinClassRequest,
    SuccessResponse,
)
from rollcall.services import classes as class_service

router = APIRouter()


@router.post("/create", response_model=ApiResponse[ClassOut])
async def create_class(
    payload: ClassCreate,
    teacher: User = Depends(require_teacher),
    db: Session = Depends(get_db),
):
    """
    Create a class (instructor only).

    A pronounceable 8-letter join code (e.g. "TOXEVIMA") is generated for
    students to enter or scan.
    """
    course = class_service.create_class(
        db, teacher, payload.name, payload.description, payload.max_students
    )
    return ApiResponse(data=class_service.class_to_dict(db, course), message="Class created")


@router.get("/teacher", response_model=ApiResponse[List[ClassOut]])
async def list_teacher_classes(teacher: User = Depends(require_teacher), db: Session = Depends(get_db)):
    courses = class_service.list_teacher_classes(db, teacher)
    return ApiResponse(data=[class_service.class_to_dict(db, c) for c in courses])


@router.get("/student", response_model=ApiResponse[List[ClassOut]])
async def list_student_classes(student: User = Depends(require_student), db: Session = Depends(get_db)):
    courses = class_service.list_student_classes(db, student)
    return ApiResponse(data=[class_service.class_to_dict(db, c) for c in courses])


@router.post("/join", response_model=ApiResponse[ClassOut])
@limiter.limit(RATE_LIMITS["join_class"])
async def join_class(
    request: Request,
    payload: JoinClassRequest,
    student: User = Depends(require_student),
    db: Session = Depends(get_db),
):
    """
    Join a class by its code (student only).

    Raises:
        404 if no class has this code
        400 if the class is closed
        409 if already joined or the class is full
    """
    course = class_service.join_class(db, student, payload.code)
    return ApiResponse(data=class_service.class_to_dict(db, course), message="Joined class")


@router.delete("/{class_id}/leave", response_model=SuccessResponse)
async def leave_class(class_id: int, student: User = Depends(require_student), db: Session = Depends(get_db)):
    class_service.leave_class(db, student, class_id)
    return SuccessResponse(message="Left class")


@router.get("/{class_id}", response_model=ApiResponse[ClassOut])
async def get_class(class_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    course = class_service.get_class(db, class_id)
    class_service.ensure_can_view(db, course, user)
    return ApiResponse(data=class_service.class_to_dict(db, course))


@router.get("/{class_id}/students", response_model=ApiResponse[ClassStudentsOut])
async def get_class_students(class_id: int, teacher: User = Depends(require_teacher), db: Session = Depends(get_db)):
    course = class_service.get_owned_class(db, class_id, teacher)
    students = [
        {"id": s.id, "name": s.name, "email": s.email, "student_id": s.student_code}
        for s in class_service.list_active_students(db, course.id)
    ]
    return ApiResponse(data={"class_info": class_service.class_to_dict(db, course), "students": students})


@router.put("/{class_id}/close", response_model=ApiResponse[ClassOut])
async def close_class(class_id: int, teacher: User = Depends(require_teacher), db: Session = Depends(get_db)):
    """Close a class (instructor only). All of its sessions are closed too."""
    course = class_service.get_owned_class(db, class_id, teacher)
    course = class_service.close_class(db, course)
    return ApiResponse(data=class_service.class_to_dict(db, course), message="Class closed")


@router.put("/{class_id}", response_model=ApiResponse[ClassOut])
async def update_class(
    class_id: int,
    payload: ClassUpdate,
    teacher: User = Depends(require_teacher),
    db: Session = Depends(get_db),
):
    course = class_service.get_owned_class(db, class_id, teacher)
    course = class_service.update_class(db, course, payload.model_dump(exclude_unset=True))
    return ApiResponse(data=class_service.class_to_dict(db, course), message="Class updated")


@router.delete("/{class_id}", response_model=SuccessResponse)
async def delete_class(class_id: int, teacher: User = Depends(require_teacher), db: Session = Depends(get_db)):
    """Delete a class with its sessions and attendance records (instructor only)."""
    course = class_service.get_owned_class(db, class_id, teacher)
    class_service.delete_class(db, course)
    return SuccessResponse(message="Class deleted")
