"""Response envelope, error mapping and operational endpoints."""
import pytest
from fastapi import APIRouter
from fastapi.testclient import TestClient

from rollcall.core.errors import (
    AlreadyExists,
    AttendanceError,
    AuthenticationFailed,
    ClassFull,
    NotEnrolled,
    SessionNotFound,
    TokenExpired,
    WindowClosed,
)
from rollcall.main import app


@pytest.mark.integration
class TestErrorEnvelope:

    @pytest.mark.parametrize("error,status,code", [
        (TokenExpired(), 400, "token_expired"),
        (WindowClosed(), 400, "window_closed"),
        (AuthenticationFailed(), 401, "authentication_failed"),
        (NotEnrolled(), 403, "not_enrolled"),
        (SessionNotFound(), 404, "session_not_found"),
        (AlreadyExists(), 409, "already_exists"),
        (ClassFull(), 409, "class_full"),
    ])
    def test_named_error_mapping(self, error, status, code):
        assert isinstance(error, AttendanceError)
        assert isinstance(error, ValueError)
        assert error.status_code == status
        assert error.code == code

    def test_custom_message_overrides_default(self):
        assert TokenExpired("Scan the new code").message == "Scan the new code"
        assert TokenExpired().message.startswith("QR code has expired")

    def test_domain_error_body(self, client, student_headers):
        response = client.get("/class/999", headers=student_headers)

        assert response.status_code == 404
        assert response.json() == {
            "success": False,
            "message": "Class not found",
            "error": {"code": "class_not_found", "message": "Class not found"},
        }

    def test_unknown_route(self, client):
        response = client.get("/no/such/route")
        assert response.status_code == 404
        assert response.json()["success"] is False

    def test_validation_error_message_names_field(self, client, teacher_headers):
        response = client.post("/class/create", headers=teacher_headers, json={})

        assert response.status_code == 422
        body = response.json()
        assert body["error"]["code"] == "validation_error"
        assert body["message"].startswith("name")

    def test_unhandled_error_is_500(self):
        router = APIRouter()

        @router.get("/__explode")
        async def explode():
            raise RuntimeError("kaboom")

        app.include_router(router)
        try:
            with TestClient(app, raise_server_exceptions=False) as client:
                response = client.get("/__explode")
        finally:
            app.router.routes = [r for r in app.router.routes if getattr(r, "path", None) != "/__explode"]

        assert response.status_code == 500
        assert response.json()["message"] == "Internal server error"


@pytest.mark.integration
class TestOperational:

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["database"]["status"] == "connected"

    def test_headers(self, client):
        response = client.get("/health")

        assert response.headers["X-API-Version"] == "1.0.0"
        assert response.headers["X-Request-ID"]

    def test_success_envelope(self, client, teacher_headers):
        body = client.get("/class/teacher", headers=teacher_headers).json()
        assert body == {"success": True, "message": None, "data": []}
