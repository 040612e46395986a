"""Main API router for v1."""
from fastapi import APIRouter

from rollcall.api.v1.endpoints import attendance, auth, classes

# Paths are unprefixed; the mobile client calls /auth, /class and /attendance directly
api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(classes.router, prefix="/class", tags=["Classes"])
api_router.include_router(attendance.router, prefix="/attendance", tags=["Attendance"])
