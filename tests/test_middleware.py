"""Tests for the request producer middleware"""

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from auditor.core.models import Destination
from auditor.infrastructure.middleware.context import (RequestContext,
                                                       get_request_context,
                                                       reset_request_context,
                                                       set_request_context)
from conftest import read_lines


@pytest.fixture
def app_and_audit(make_audit):
    audit = make_audit(destinations=[Destination.FILE], split_files=True)
    app = FastAPI()

    @app.get("/orders/{order_id}")
    async def get_order(order_id: str, request: Request):
        return {"order": order_id, "caller": get_request_context().user_id}

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.get("/explode")
    async def explode():
        raise RuntimeError("kaboom")

    audit.request_logger(exclude_paths=["/health"]).install(app)

    # Added last so it runs before the audit middleware
    @app.middleware("http")
    async def fake_auth(request: Request, call_next):
        request.state.user = {"id": 7}
        return await call_next(request)

    return app, audit


class TestAuditMiddleware:
    """Test request and error events"""

    def test_request_event(self, app_and_audit, base_dir):
        app, _ = app_and_audit
        with TestClient(app) as client:
            response = client.get(
                "/orders/9?expand=1",
                headers={"User-Agent": "pytest-agent", "X-Forwarded-For": "10.0.0.1, 10.0.0.2"},
            )

        assert response.status_code == 200
        (event,) = read_lines(base_dir / "audits" / "request.log")
        assert event["type"] == "request"
        assert event["action"] == "incoming request"
        assert event["message"] == "GET /orders/9?expand=1 200"
        assert event["method"] == "GET"
        assert event["statusCode"] == 200
        assert event["route"] == "/orders/9?expand=1"
        assert event["ip"] == "10.0.0.1"
        assert event["userAgent"] == "pytest-agent"
        assert event["duration"] >= 0

    def test_user_from_request_state(self, app_and_audit, base_dir):
        app, _ = app_and_audit
        with TestClient(app) as client:
            client.get("/orders/1")

        (event,) = read_lines(base_dir / "audits" / "request.log")
        assert event["userId"] == "7"

    def test_excluded_path(self, app_and_audit, base_dir):
        app, _ = app_and_audit
        with TestClient(app) as client:
            assert client.get("/health").status_code == 200

        assert read_lines(base_dir / "audits" / "request.log") == []

    def test_unhandled_exception(self, app_and_audit, base_dir):
        app, _ = app_and_audit
        with TestClient(app, raise_server_exceptions=False) as client:
            response = client.get("/explode")

        assert response.status_code == 500
        (error,) = read_lines(base_dir / "audits" / "error.log")
        assert error["action"] == "request failed"
        assert error["message"] == "kaboom"
        assert error["statusCode"] == 500
        assert "explode" in error["stack"]
        assert "RuntimeError" in error["fullStack"]

        (request_event,) = read_lines(base_dir / "audits" / "request.log")
        assert request_event["outcome"] == "failure"
        assert request_event["statusCode"] == 500


class TestRequestContext:
    def test_default_context(self):
        context = get_request_context()
        assert context.as_event_fields() == {
            "userId": "unknown", "endPoint": "", "ip": "unknown", "userAgent": "unknown"
        }

    def test_set_and_reset(self):
        token = set_request_context(RequestContext(user_id="u1", endpoint="/x"))
        assert get_request_context().user_id == "u1"

        reset_request_context(token)

        assert get_request_context().user_id == "unknown"
