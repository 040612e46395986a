"""Authentication endpoints."""
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from rollcall.api.deps import get_current_user, get_db
from rollcall.core.rate_limit import limiter, RATE_LIMITS
from rollcall.db.models import User
from rollcall.schemas import (
    ApiResponse,
    ChangePasswordRequest,
    LoginRequest,
    ProfileUpdate,
    RegisterRequest,
    SuccessResponse,
    UserOut,
)
from rollcall.services import auth as auth_service

router = APIRouter()


@router.post("/register", response_model=ApiResponse[UserOut])
@limiter.limit(RATE_LIMITS["register"])
async def register(request: Request, payload: RegisterRequest, db: Session = Depends(get_db)):
    """
    Create an account and sign it in.

    ``rule`` selects the role: 1 for a student, 2 for an instructor. The
    response carries the bearer token so the client can skip a separate login.

    Raises:
        400 if the password is too short or the role is unknown
        409 if the email is already registered
    """
    user = auth_service.register(
        db,
        name=payload.name,
        email=payload.email,
        password=payload.password,
        role=payload.rule,
        student_code=payload.student_id,
    )
    return ApiResponse(data=auth_service.user_to_dict(user, with_token=True), message="Registered successfully")


@router.post("/login", response_model=ApiResponse[UserOut])
@limiter.limit(RATE_LIMITS["login"])
async def login(request: Request, payload: LoginRequest, db: Session = Depends(get_db)):
    """
    Exchange email and password for a bearer token.

    Example:
        Request:
            POST /auth/login
            {"email": "an@example.edu", "password": "secret1"}

        Response (200):
            {
                "success": true,
                "message": "Logged in successfully",
                "data": {"id": 3, "name": "An", "email": "an@example.edu",
                         "rule": 1, "token": "eyJhbGc..."}
            }

        Response (401):
            {"success": false, "message": "Invalid email or password", ...}
    """
    user = auth_service.authenticate(db, payload.email, payload.password)
    return ApiResponse(data=auth_service.user_to_dict(user, with_token=True), message="Logged in successfully")


@router.get("/profile", response_model=ApiResponse[UserOut])
async def get_profile(user: User = Depends(get_current_user)):
    return ApiResponse(data=auth_service.user_to_dict(user))


@router.put("/profile", response_model=ApiResponse[UserOut])
async def update_profile(
    payload: ProfileUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    user = auth_service.update_profile(db, user, payload.model_dump(exclude_unset=True))
    return ApiResponse(data=auth_service.user_to_dict(user), message="Profile updated")


@router.put("/change-password", response_model=SuccessResponse)
async def change_password(
    payload: ChangePasswordRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    auth_service.change_password(db, user, payload.current_password, payload.new_password)
    return SuccessResponse(message="Password changed successfully")
