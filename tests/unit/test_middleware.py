"""Unit tests for middleware."""
import pytest
from unittest.mock import Mock

from rollcall.middleware.logging import LoggingMiddleware


def make_request(method="GET", path="/health", headers=None):
    request = Mock()
    request.state = Mock(spec=[])
    request.method = method
    request.url = Mock()
    request.url.path = path
    request.client = Mock()
    request.client.host = "127.0.0.1"
    request.headers = headers or {}
    request.query_params = {}
    return request


def make_response(status_code=200):
    response = Mock()
    response.headers = {}
    response.status_code = status_code
    return response


@pytest.mark.unit
class TestLoggingMiddleware:
    """Test logging middleware."""

    @pytest.mark.asyncio
    async def test_request_id_added_to_state_and_headers(self):
        request = make_request()
        response = make_response()

        async def call_next(req):
            assert isinstance(req.state.request_id, str)
            return response

        result = await LoggingMiddleware(Mock()).dispatch(request, call_next)

        assert result.headers["X-Request-ID"] == request.state.request_id
        assert len(request.state.request_id) == 36

    @pytest.mark.asyncio
    async def test_incoming_request_id_is_kept(self):
        request = make_request(headers={"X-Request-ID": "edge-1234"})

        async def call_next(req):
            return make_response()

        result = await LoggingMiddleware(Mock()).dispatch(request, call_next)

        assert result.headers["X-Request-ID"] == "edge-1234"

    @pytest.mark.asyncio
    async def test_unique_ids_per_request(self):
        middleware = LoggingMiddleware(Mock())
        ids = []

        async def call_next(req):
            ids.append(req.state.request_id)
            return make_response()

        for _ in range(3):
            await middleware.dispatch(make_request(), call_next)

        assert len(set(ids)) == 3

    @pytest.mark.asyncio
    async def test_exception_is_reraised(self):
        async def call_next(req):
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            await LoggingMiddleware(Mock()).dispatch(make_request(method="POST"), call_next)
