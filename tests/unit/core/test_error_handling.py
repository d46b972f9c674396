"""
Tests for error handling middleware and exception handlers.

Tests:
- Sensitive data sanitization
- Domain error mapping to the error envelope
- Database and unhandled errors
"""

import pytest
from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError, OperationalError

from core.exceptions import (
    ConcurrentUpdateError,
    InterviewStateError,
    NotFoundError,
    PayloadTooLargeError,
    ValidationError,
)
from core.middleware.error_handling import (
    ErrorHandlingMiddleware,
    get_safe_error_details,
    sanitize_error_message,
    setup_error_handlers,
)


class TestSanitization:

    @pytest.mark.parametrize("message", [
        'password="secret123"',
        'token: abc.def.ghi',
        'api_key=AIzaSyXXXXXX',
        'client secret=confidential',
        'authorization: Bearer-xyz',
    ])
    def test_redacts(self, message):
        assert "[REDACTED]" in sanitize_error_message(message)

    @pytest.mark.parametrize("message", [
        "Interview not found",
        "Answer is required",
        'username="jane"',
    ])
    def test_leaves_safe_messages(self, message):
        assert sanitize_error_message(message) == message

    def test_domain_messages_survive(self):
        """Auth messages are worded so the sensitive keyword is not followed by text."""
        for message in (
            "Requirements not met for the chosen password",
            "Expired access token",
            "Invalid access token",
        ):
            assert sanitize_error_message(message) == message

    def test_safe_error_details(self):
        details = get_safe_error_details(ValueError("bad password=hunter2"))

        assert details["type"] == "ValueError"
        assert "hunter2" not in details["message"]
        assert "traceback" not in details

    def test_safe_error_details_debug(self):
        details = get_safe_error_details(ValueError("boom"), include_details=True)

        assert "traceback" in details


class Payload(BaseModel):
    count: int


@pytest.fixture
def app():
    app = FastAPI()
    setup_error_handlers(app)
    app.add_middleware(ErrorHandlingMiddleware, debug=False)

    @app.get("/not-found")
    async def not_found():
        raise NotFoundError("Interview not found", {"interviewId": "x"})

    @app.get("/invalid")
    async def invalid():
        raise ValidationError("Answer is required")

    @app.get("/state")
    async def state():
        raise InterviewStateError("Interview is completed")

    @app.get("/race")
    async def race():
        raise ConcurrentUpdateError("Interview was modified by another request")

    @app.get("/too-large")
    async def too_large():
        raise PayloadTooLargeError("Audio file is too large")

    @app.get("/http")
    async def http():
        raise HTTPException(status_code=418, detail="teapot")

    @app.post("/validate")
    async def validate(payload: Payload):
        return payload

    @app.get("/integrity")
    async def integrity():
        raise IntegrityError("INSERT ...", {"password": "secret"}, Exception("duplicate"))

    @app.get("/operational")
    async def operational():
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    @app.get("/crash")
    async def crash():
        raise RuntimeError("token=abcdef leaked")

    return app


@pytest.fixture
def client(app):
    return TestClient(app, raise_server_exceptions=False)


class TestErrorEnvelope:

    @pytest.mark.parametrize("path,status_code,code", [
        ("/not-found", 404, "NOT_FOUND"),
        ("/invalid", 400, "INVALID_INPUT"),
        ("/state", 409, "INVALID_STATE"),
        ("/race", 409, "CONCURRENT_UPDATE"),
        ("/too-large", 413, "PAYLOAD_TOO_LARGE"),
    ])
    def test_domain_errors(self, client, path, status_code, code):
        response = client.get(path)

        assert response.status_code == status_code
        error = response.json()["error"]
        assert error["code"] == code
        assert error["path"] == path
        assert error["method"] == "GET"

    def test_details_included(self, client):
        error = client.get("/not-found").json()["error"]

        assert error["message"] == "Interview not found"
        assert error["details"] == {"interviewId": "x"}

    def test_http_exception(self, client):
        response = client.get("/http")

        assert response.status_code == 418
        assert response.json()["error"]["code"] == "HTTP_EXCEPTION"

    def test_request_validation(self, client):
        response = client.post("/validate", json={"count": "many"})

        assert response.status_code == 422
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert error["details"][0]["field"] == "body.count"

    def test_integrity_error_hides_statement(self, client):
        response = client.get("/integrity")

        assert response.status_code == 409
        assert "INSERT" not in response.text
        assert "secret" not in response.text

    def test_operational_error(self, client):
        response = client.get("/operational")

        assert response.status_code == 503
        assert response.json()["error"]["code"] == "DATABASE_ERROR"

    def test_unhandled_exception(self, client):
        response = client.get("/crash")

        assert response.status_code == 500
        error = response.json()["error"]
        assert error["code"] == "INTERNAL_SERVER_ERROR"
        assert "abcdef" not in response.text
