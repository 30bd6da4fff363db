"""Integration tests for the authentication API and health endpoints.

Test Coverage:
- Register (Free plan assignment, duplicate email, password rules)
- Login (valid, wrong password, deactivated account)
- Profile read/update, password change, logout
- Token handling (missing, invalid, expired)
"""
from datetime import timedelta

from fastapi.testclient import TestClient
from sqlmodel import Session

from promptify.core.security import create_access_token
from promptify.models import Plan, User

USER_PASSWORD = "TestPass123"

REGISTER_PAYLOAD = {"name": "Jane Doe", "email": "Jane@Example.com", "password": "Secret123"}


# =============================================================================
# REGISTER
# =============================================================================

class TestRegister:
    def test_register_returns_user_and_token(self, client: TestClient, free_plan: Plan):
        """
        Given: A new email address
        When: POST /api/auth/register
        Then: 201 with the user on the Free plan and a bearer token
        """
        response = client.post("/api/auth/register", json=REGISTER_PAYLOAD)

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        data = body["data"]
        assert data["token"]
        assert data["user"]["email"] == "jane@example.com"
        assert data["user"]["role"] == "user"
        assert data["user"]["plan"]["name"] == "Free"
        assert data["user"]["subscription"]["status"] == "inactive"
        assert data["user"]["usage"]["playground_sessions"] == {
            "current": 0,
            "limit": free_plan.playground_sessions,
            "reset_date": data["user"]["usage"]["playground_sessions"]["reset_date"],
        }

    def test_duplicate_email_rejected(self, client: TestClient, user: User):
        response = client.post(
            "/api/auth/register",
            json={**REGISTER_PAYLOAD, "email": user.email.upper()},
        )
        assert response.status_code == 400
        assert response.json()["message"] == "User with this email already exists"

    def test_weak_password_rejected(self, client: TestClient):
        response = client.post("/api/auth/register", json={**REGISTER_PAYLOAD, "password": "alllowercase1"})
        assert response.status_code == 400
        body = response.json()
        assert body["error"]["code"] == "VALIDATION_ERROR"
        assert body["error"]["details"][0]["field"] == "password"

    def test_short_name_rejected(self, client: TestClient):
        response = client.post("/api/auth/register", json={**REGISTER_PAYLOAD, "name": "J"})
        assert response.status_code == 400


# =============================================================================
# LOGIN
# =============================================================================

class TestLogin:
    def test_login_with_valid_credentials(self, client: TestClient, user: User):
        response = client.post("/api/auth/login", json={"email": user.email, "password": USER_PASSWORD})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["user"]["id"] == str(user.id)
        assert data["token"]

    def test_wrong_password(self, client: TestClient, user: User):
        response = client.post("/api/auth/login", json={"email": user.email, "password": "Wrong123"})
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid email or password"

    def test_unknown_email_gets_same_message(self, client: TestClient):
        response = client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "Wrong123"})
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid email or password"

    def test_deactivated_account(self, client: TestClient, session: Session, user: User):
        user.is_active = False
        session.add(user)
        session.commit()

        response = client.post("/api/auth/login", json={"email": user.email, "password": USER_PASSWORD})

        assert response.status_code == 401
        assert response.json()["message"] == "Account is deactivated"


# =============================================================================
# PROFILE
# =============================================================================

class TestProfile:
    def test_me_requires_token(self, client: TestClient):
        response = client.get("/api/auth/me")
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "AUTHENTICATION_ERROR"

    def test_me_with_invalid_token(self, client: TestClient):
        response = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid token. Please log in again!"

    def test_me_with_expired_token(self, client: TestClient, user: User):
        token = create_access_token(user.id, expires_delta=timedelta(seconds=-5))
        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json()["message"] == "Your token has expired! Please log in again."

    def test_me(self, client: TestClient, user: User, user_headers: dict):
        response = client.get("/api/auth/me", headers=user_headers)
        assert response.status_code == 200
        assert response.json()["data"]["user"]["email"] == user.email

    def test_update_profile(self, client: TestClient, user_headers: dict):
        response = client.put(
            "/api/auth/profile",
            headers=user_headers,
            json={"name": "Renamed", "preferences": {"theme": "dark"}},
        )
        assert response.status_code == 200
        updated = response.json()["data"]["user"]
        assert updated["name"] == "Renamed"
        assert updated["preferences"]["theme"] == "dark"
        assert updated["preferences"]["email_notifications"] is True

    def test_change_password(self, client: TestClient, user: User, user_headers: dict):
        response = client.put(
            "/api/auth/change-password",
            headers=user_headers,
            json={"current_password": USER_PASSWORD, "new_password": "NewPass456"},
        )
        assert response.status_code == 200

        login = client.post("/api/auth/login", json={"email": user.email, "password": "NewPass456"})
        assert login.status_code == 200

    def test_change_password_accepts_post(self, client: TestClient, user: User, user_headers: dict):
        response = client.post(
            "/api/auth/change-password",
            headers=user_headers,
            json={"current_password": USER_PASSWORD, "new_password": "NewPass456"},
        )
        assert response.status_code == 200

        login = client.post("/api/auth/login", json={"email": user.email, "password": "NewPass456"})
        assert login.status_code == 200

    def test_profile_null_name_keeps_existing(self, client: TestClient, user: User, user_headers: dict):
        response = client.put("/api/auth/profile", headers=user_headers, json={"name": None})
        assert response.status_code == 200
        assert response.json()["data"]["user"]["name"] == user.name

    def test_change_password_wrong_current(self, client: TestClient, user_headers: dict):
        response = client.put(
            "/api/auth/change-password",
            headers=user_headers,
            json={"current_password": "Nope1234", "new_password": "NewPass456"},
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Current password is incorrect"

    def test_logout(self, client: TestClient, user_headers: dict):
        response = client.post("/api/auth/logout", headers=user_headers)
        assert response.status_code == 200
        assert response.json()["success"] is True


# =============================================================================
# HEALTH
# =============================================================================

class TestHealth:
    def test_health_under_api_prefix_and_root(self, client: TestClient):
        for path in ("/api/health", "/health"):
            response = client.get(path)
            assert response.status_code == 200
            body = response.json()
            assert body["service"] == "Promptify"
            assert body["environment"] == "test"

    def test_readiness_checks_database(self, client: TestClient):
        response = client.get("/api/health/ready")
        assert response.status_code == 200
        assert response.json()["checks"]["database"] == "healthy"

    def test_unknown_route(self, client: TestClient):
        response = client.get("/api/nothing-here")
        assert response.status_code == 404
        assert response.json()["message"] == "API endpoint not found"
