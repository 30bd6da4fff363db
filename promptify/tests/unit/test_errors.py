"""Unit tests for the error taxonomy and its HTTP rendering."""
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError

from promptify.core.errors import (
    AppError,
    AuthenticationError,
    AuthorizationError,
    DuplicateError,
    ErrorCode,
    ExternalAPIError,
    NotFoundError,
    PaymentError,
    RateLimitError,
    ValidationError,
    register_exception_handlers,
)


class Payload(BaseModel):
    name: str
    age: int


def build_app() -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/not-found")
    def not_found():
        raise NotFoundError("Prompt")

    @app.get("/external")
    def external():
        raise ExternalAPIError("Claude", "overloaded")

    @app.get("/integrity")
    def integrity():
        raise IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))

    @app.get("/boom")
    def boom():
        raise RuntimeError("kaboom")

    @app.post("/validate")
    def validate(payload: Payload):
        return payload

    return app


@pytest.fixture
def error_client() -> TestClient:
    return TestClient(build_app(), raise_server_exceptions=False)


# =============================================================================
# TAXONOMY
# =============================================================================

class TestErrorTaxonomy:
    @pytest.mark.parametrize(
        "error,status,code",
        [
            (ValidationError("bad"), 400, ErrorCode.VALIDATION),
            (AuthenticationError(), 401, ErrorCode.AUTHENTICATION),
            (AuthorizationError(), 403, ErrorCode.AUTHORIZATION),
            (NotFoundError("User"), 404, ErrorCode.NOT_FOUND),
            (DuplicateError("dup"), 400, ErrorCode.DUPLICATE),
            (RateLimitError(), 429, ErrorCode.RATE_LIMIT),
            (PaymentError("declined"), 400, ErrorCode.PAYMENT),
            (ExternalAPIError("Claude", "down"), 502, ErrorCode.EXTERNAL_API),
        ],
    )
    def test_fixed_status_and_code(self, error: AppError, status: int, code: ErrorCode):
        assert error.status_code == status
        assert error.code == code
        assert error.is_operational

    def test_default_messages(self):
        assert AuthorizationError().message == "Access denied"
        assert NotFoundError("User").message == "User not found"
        assert ExternalAPIError("Claude", "timeout").message == "Claude API error: timeout"

    def test_status_override(self):
        assert AppError("teapot", status_code=418).status_code == 418


# =============================================================================
# HANDLERS
# =============================================================================

class TestErrorHandlers:
    def test_app_error_envelope(self, error_client: TestClient):
        response = error_client.get("/not-found")
        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Prompt not found"
        assert body["error"]["code"] == "NOT_FOUND"

    def test_external_api_error_is_502(self, error_client: TestClient):
        response = error_client.get("/external")
        assert response.status_code == 502
        assert response.json()["error"]["code"] == "EXTERNAL_API_ERROR"

    def test_request_validation_is_400_with_field_details(self, error_client: TestClient):
        response = error_client.post("/validate", json={"name": "x", "age": "old"})
        assert response.status_code == 400
        body = response.json()
        assert body["error"]["code"] == "VALIDATION_ERROR"
        assert body["message"].startswith("Invalid input data.")
        assert any(d["field"] == "age" for d in body["error"]["details"])

    def test_integrity_error_is_duplicate(self, error_client: TestClient):
        response = error_client.get("/integrity")
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "DUPLICATE_ERROR"

    def test_unknown_route_message(self, error_client: TestClient):
        response = error_client.get("/missing")
        assert response.status_code == 404
        assert response.json()["message"] == "API endpoint not found"

    def test_unhandled_error_outside_production_includes_stack(self, error_client: TestClient):
        response = error_client.get("/boom")
        assert response.status_code == 500
        body = response.json()
        assert body["error"]["code"] == "SERVER_ERROR"
        assert body["message"] == "kaboom"
        assert "RuntimeError" in body["stack"]
