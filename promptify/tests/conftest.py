"""Pytest configuration - sets environment variables before the app is imported."""
import os

os.environ["ENVIRONMENT"] = "test"
os.environ.setdefault("SECRET_KEY", "testsecretkey123456789012345678901234567890")
os.environ.setdefault("FIRST_SUPERUSER", "admin@example.com")
os.environ.setdefault("FIRST_SUPERUSER_PASSWORD", "AdminPass123")
os.environ.setdefault("FRONTEND_HOST", "http://localhost:5173")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["LOGGING_FILE_LOGGING"] = "false"
os.environ["RAZORPAY_KEY_ID"] = "rzp_test_key"
os.environ["RAZORPAY_KEY_SECRET"] = "rzp_test_secret"
os.environ["RAZORPAY_WEBHOOK_SECRET"] = "whsec_test"
for _key in ("ANTHROPIC_API_KEY", "OPENAI_API_KEY", "PERPLEXITY_API_KEY", "CATGPT_API_KEY"):
    os.environ[f"AI_{_key}"] = ""

from collections.abc import Generator  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import Session, SQLModel, select  # noqa: E402

from promptify.api.deps import get_db  # noqa: E402
from promptify.core.db import engine, init_db  # noqa: E402
from promptify.core.razorpay_client import RazorpayClient  # noqa: E402
from promptify.core.security import create_access_token  # noqa: E402
from promptify.main import app  # noqa: E402
from promptify.models import Plan, User  # noqa: E402
from promptify.schemas import UserCreate  # noqa: E402
from promptify.services import UserService  # noqa: E402
from promptify.services.ai import (  # noqa: E402
    AIManager,
    CatGPTProvider,
    ChatGPTProvider,
    ClaudeProvider,
    PerplexityProvider,
)

USER_PASSWORD = "TestPass123"


# =============================================================================
# DATABASE
# =============================================================================

@pytest.fixture
def session() -> Generator[Session, None, None]:
    """Fresh schema with seeded plans and admin for every test."""
    SQLModel.metadata.drop_all(engine)
    with Session(engine) as session:
        init_db(session)
        yield session
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def client(session: Session) -> Generator[TestClient, None, None]:
    app.dependency_overrides[get_db] = lambda: session
    # no context manager: lifespan would re-run init_db against the shared engine
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


# =============================================================================
# EXTERNAL SERVICES
# =============================================================================

@pytest.fixture(autouse=True)
def instant_mock_replies(monkeypatch):
    """Mock-mode providers answer immediately."""
    for provider in (ClaudeProvider, ChatGPTProvider, PerplexityProvider, CatGPTProvider):
        monkeypatch.setattr(provider, "mock_delay", (0.0, 0.0))
    AIManager._instance = None
    yield
    AIManager._instance = None


@pytest.fixture(autouse=True)
def reset_razorpay():
    RazorpayClient.reset()
    yield
    RazorpayClient.reset()


# =============================================================================
# USERS
# =============================================================================

@pytest.fixture
def free_plan(session: Session) -> Plan:
    return session.exec(select(Plan).where(Plan.name == "Free")).one()


@pytest.fixture
def pro_plan(session: Session) -> Plan:
    return session.exec(select(Plan).where(Plan.name == "Pro")).one()


@pytest.fixture
def user(session: Session) -> User:
    return UserService(session).register(
        UserCreate(name="Test User", email="user@example.com", password=USER_PASSWORD)
    )


@pytest.fixture
def other_user(session: Session) -> User:
    return UserService(session).register(
        UserCreate(name="Other User", email="other@example.com", password=USER_PASSWORD)
    )


@pytest.fixture
def admin(session: Session) -> User:
    return UserService(session).get_by_email(os.environ["FIRST_SUPERUSER"])


def auth_header(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture
def user_headers(user: User) -> dict[str, str]:
    return auth_header(user)


@pytest.fixture
def admin_headers(admin: User) -> dict[str, str]:
    return auth_header(admin)


@pytest.fixture
def other_headers(other_user: User) -> dict[str, str]:
    return auth_header(other_user)
