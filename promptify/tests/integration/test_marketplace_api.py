"""Integration tests for the marketplace and user prompt APIs."""
import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, select

from promptify.models import Prompt, PromptStatus, PromptVersion, User

PROMPT_PAYLOAD = {
    "title": "Cold Email Writer",
    "description": "Drafts a concise cold email for B2B outreach.",
    "content": "Write a cold email to {name} at {company} about {product}.",
    "category": "marketing",
    "tags": "email, sales",
}


@pytest.fixture
def published_prompt(client: TestClient, user_headers: dict) -> dict:
    response = client.post("/api/marketplace/prompts", headers=user_headers, json=PROMPT_PAYLOAD)
    assert response.status_code == 201
    return response.json()["data"]["prompt"]


# =============================================================================
# END TO END
# =============================================================================

class TestFreePromptFlow:
    def test_register_login_create_and_list(self, client: TestClient):
        """
        Given: A newly registered user
        When: They create a prompt with is_paid=false but a non-zero price
        Then: The marketplace lists it with type "free" and price 0
        """
        register = client.post(
            "/api/auth/register",
            json={"name": "Author", "email": "author@example.com", "password": "Author123"},
        )
        assert register.status_code == 201

        login = client.post("/api/auth/login", json={"email": "author@example.com", "password": "Author123"})
        headers = {"Authorization": f"Bearer {login.json()['data']['token']}"}

        created = client.post(
            "/api/marketplace/prompts",
            headers=headers,
            json={**PROMPT_PAYLOAD, "is_paid": False, "price": 9.99},
        )
        assert created.status_code == 201
        prompt = created.json()["data"]["prompt"]
        assert prompt["type"] == "free"
        assert prompt["price"] == 0
        assert prompt["status"] == "published"
        assert prompt["tags"] == ["email", "sales"]

        listing = client.get("/api/marketplace/prompts")
        assert listing.status_code == 200
        data = listing.json()["data"]
        assert data["pagination"] == {"page": 1, "limit": 12, "total": 1, "pages": 1}
        listed = data["prompts"][0]
        assert listed["id"] == prompt["id"]
        assert listed["type"] == "free"
        assert listed["price"] == 0
        assert listed["content"] is None


# =============================================================================
# CREATE
# =============================================================================

class TestCreatePrompt:
    def test_paid_prompt(self, client: TestClient, user_headers: dict):
        response = client.post(
            "/api/marketplace/prompts",
            headers=user_headers,
            json={**PROMPT_PAYLOAD, "is_paid": True, "price": 4.5},
        )
        assert response.status_code == 201
        prompt = response.json()["data"]["prompt"]
        assert prompt["type"] == "premium"
        assert prompt["price"] == 4.5

    def test_paid_prompt_without_price_rejected(self, client: TestClient, user_headers: dict):
        response = client.post(
            "/api/marketplace/prompts",
            headers=user_headers,
            json={**PROMPT_PAYLOAD, "is_paid": True, "price": 0},
        )
        assert response.status_code == 400

    def test_requires_authentication(self, client: TestClient):
        assert client.post("/api/marketplace/prompts", json=PROMPT_PAYLOAD).status_code == 401

    def test_invalid_category(self, client: TestClient, user_headers: dict):
        response = client.post(
            "/api/marketplace/prompts", headers=user_headers, json={**PROMPT_PAYLOAD, "category": "poetry"}
        )
        assert response.status_code == 400

    def test_side_effects(self, client: TestClient, session: Session, user: User, published_prompt: dict):
        """Author counter goes up and version 1.0 is stored."""
        session.refresh(user)
        assert user.prompts_created == 1
        versions = session.exec(select(PromptVersion)).all()
        assert [v.version for v in versions] == ["1.0"]


# =============================================================================
# BROWSE
# =============================================================================

class TestBrowse:
    def test_listing_counts_views(self, client: TestClient, session: Session, published_prompt: dict):
        client.get("/api/marketplace/prompts")
        client.get("/api/marketplace/prompts")
        prompt = session.exec(select(Prompt)).one()
        assert prompt.views == 2

    def test_non_published_hidden_from_listing(self, client: TestClient, session: Session, published_prompt: dict):
        prompt = session.exec(select(Prompt)).one()
        prompt.status = PromptStatus.DRAFT
        session.add(prompt)
        session.commit()

        data = client.get("/api/marketplace/prompts").json()["data"]
        assert data["prompts"] == []

    def test_filters(self, client: TestClient, user_headers: dict, published_prompt: dict):
        client.post(
            "/api/marketplace/prompts",
            headers=user_headers,
            json={
                **PROMPT_PAYLOAD,
                "title": "SQL Query Helper",
                "category": "development",
                "tags": ["sql"],
                "is_paid": True,
                "price": 3,
            },
        )

        by_category = client.get("/api/marketplace/prompts", params={"category": "development"}).json()["data"]
        assert [p["title"] for p in by_category["prompts"]] == ["SQL Query Helper"]

        free_only = client.get("/api/marketplace/prompts", params={"type": "free"}).json()["data"]
        assert [p["title"] for p in free_only["prompts"]] == ["Cold Email Writer"]

        by_tag = client.get("/api/marketplace/prompts", params={"search": "sql"}).json()["data"]
        assert by_tag["pagination"]["total"] == 1

        by_price = client.get("/api/marketplace/prompts", params={"sort": "price_high"}).json()["data"]
        assert by_price["prompts"][0]["title"] == "SQL Query Helper"

    def test_limit_capped_at_50(self, client: TestClient):
        assert client.get("/api/marketplace/prompts", params={"limit": 51}).status_code == 400

    def test_get_prompt_increments_views(self, client: TestClient, published_prompt: dict):
        response = client.get(f"/api/marketplace/prompts/{published_prompt['id']}")
        assert response.status_code == 200
        prompt = response.json()["data"]["prompt"]
        assert prompt["content"] == PROMPT_PAYLOAD["content"]
        assert prompt["analytics"]["views"] == 1
        assert prompt["versions"][0]["version"] == "1.0"

    def test_draft_visible_only_to_author_and_admin(
        self,
        client: TestClient,
        session: Session,
        published_prompt: dict,
        user_headers: dict,
        other_headers: dict,
        admin_headers: dict,
    ):
        prompt = session.exec(select(Prompt)).one()
        prompt.status = PromptStatus.DRAFT
        session.add(prompt)
        session.commit()
        url = f"/api/marketplace/prompts/{published_prompt['id']}"

        assert client.get(url).status_code == 403
        assert client.get(url, headers=other_headers).status_code == 403
        assert client.get(url, headers=user_headers).status_code == 200
        assert client.get(url, headers=admin_headers).status_code == 200

    def test_private_prompt_hidden_from_others(
        self, client: TestClient, user_headers: dict, other_headers: dict, admin_headers: dict
    ):
        """
        Given: A published prompt with private visibility
        When: Anonymous and other users read or download it
        Then: Both get 403 and the content is never returned
        """
        created = client.post(
            "/api/marketplace/prompts",
            headers=user_headers,
            json={**PROMPT_PAYLOAD, "visibility": "private"},
        ).json()["data"]["prompt"]
        url = f"/api/marketplace/prompts/{created['id']}"

        anonymous = client.get(url)
        assert anonymous.status_code == 403
        assert PROMPT_PAYLOAD["content"] not in anonymous.text

        download = client.post(f"{url}/download", headers=other_headers)
        assert download.status_code == 403
        assert PROMPT_PAYLOAD["content"] not in download.text

        assert client.get(url, headers=user_headers).status_code == 200
        assert client.post(f"{url}/download", headers=admin_headers).status_code == 200

    def test_unknown_prompt(self, client: TestClient):
        response = client.get("/api/marketplace/prompts/00000000-0000-0000-0000-000000000000")
        assert response.status_code == 404
        assert response.json()["message"] == "Prompt not found"

    def test_categories(self, client: TestClient, published_prompt: dict):
        categories = client.get("/api/marketplace/categories").json()["data"]
        counts = {c["name"]: c["count"] for c in categories}
        assert counts["marketing"] == 1
        assert counts["writing"] == 0


# =============================================================================
# UPDATE / DELETE
# =============================================================================

class TestModifyPrompt:
    def test_owner_updates_and_new_version_recorded(
        self, client: TestClient, session: Session, published_prompt: dict, user_headers: dict
    ):
        response = client.put(
            f"/api/marketplace/prompts/{published_prompt['id']}",
            headers=user_headers,
            json={"content": "Write a warmer cold email to {name} about {product}.", "changelog": "Tone"},
        )
        assert response.status_code == 200
        versions = session.exec(select(PromptVersion).order_by(PromptVersion.created_at)).all()
        assert [v.version for v in versions] == ["1.0", "1.1"]

    def test_switching_to_free_zeroes_price(
        self, client: TestClient, user_headers: dict
    ):
        created = client.post(
            "/api/marketplace/prompts",
            headers=user_headers,
            json={**PROMPT_PAYLOAD, "is_paid": True, "price": 7},
        ).json()["data"]["prompt"]

        response = client.put(
            f"/api/marketplace/prompts/{created['id']}", headers=user_headers, json={"is_paid": False}
        )
        prompt = response.json()["data"]["prompt"]
        assert prompt["type"] == "free"
        assert prompt["price"] == 0

    def test_null_price_keeps_existing_price(self, client: TestClient, user_headers: dict):
        created = client.post(
            "/api/marketplace/prompts",
            headers=user_headers,
            json={**PROMPT_PAYLOAD, "is_paid": True, "price": 7},
        ).json()["data"]["prompt"]

        response = client.put(
            f"/api/marketplace/prompts/{created['id']}", headers=user_headers, json={"price": None}
        )

        assert response.status_code == 200
        prompt = response.json()["data"]["prompt"]
        assert prompt["type"] == "premium"
        assert prompt["price"] == 7

    def test_null_required_fields_left_unchanged(
        self, client: TestClient, published_prompt: dict, user_headers: dict
    ):
        response = client.put(
            f"/api/marketplace/prompts/{published_prompt['id']}",
            headers=user_headers,
            json={"title": None, "category": None, "content": None, "description": "A fresh description."},
        )

        assert response.status_code == 200
        prompt = response.json()["data"]["prompt"]
        assert prompt["title"] == PROMPT_PAYLOAD["title"]
        assert prompt["category"] == PROMPT_PAYLOAD["category"]
        assert prompt["content"] == PROMPT_PAYLOAD["content"]
        assert prompt["description"] == "A fresh description."

    def test_other_user_cannot_edit_or_delete(self, client: TestClient, published_prompt: dict, other_headers: dict):
        url = f"/api/marketplace/prompts/{published_prompt['id']}"
        assert client.put(url, headers=other_headers, json={"title": "Hijacked"}).status_code == 403
        assert client.delete(url, headers=other_headers).status_code == 403

    def test_admin_can_delete(self, client: TestClient, session: Session, published_prompt: dict, admin_headers: dict):
        response = client.delete(f"/api/marketplace/prompts/{published_prompt['id']}", headers=admin_headers)
        assert response.status_code == 200
        assert session.exec(select(Prompt)).all() == []


# =============================================================================
# ENGAGEMENT
# =============================================================================

class TestEngagement:
    def test_like(self, client: TestClient, published_prompt: dict, other_headers: dict):
        response = client.post(f"/api/marketplace/prompts/{published_prompt['id']}/like", headers=other_headers)
        assert response.status_code == 200
        assert response.json()["data"]["likes"] == 1

    def test_download_counts_for_prompt_and_user(
        self, client: TestClient, session: Session, published_prompt: dict, other_user: User, other_headers: dict
    ):
        response = client.post(
            f"/api/marketplace/prompts/{published_prompt['id']}/download", headers=other_headers
        )
        assert response.status_code == 200
        assert response.json()["data"]["content"] == PROMPT_PAYLOAD["content"]
        session.refresh(other_user)
        assert other_user.prompts_downloaded == 1

    def test_review_updates_rating(self, client: TestClient, published_prompt: dict, other_headers: dict):
        url = f"/api/marketplace/prompts/{published_prompt['id']}/reviews"
        client.post(url, headers=other_headers, json={"rating": 5, "comment": "Great"})
        response = client.post(url, headers=other_headers, json={"rating": 4})
        assert response.status_code == 201
        assert response.json()["data"]["rating"] == {"average": 4.5, "count": 2}

    def test_review_rating_bounds(self, client: TestClient, published_prompt: dict, other_headers: dict):
        url = f"/api/marketplace/prompts/{published_prompt['id']}/reviews"
        assert client.post(url, headers=other_headers, json={"rating": 6}).status_code == 400


# =============================================================================
# USER PROMPTS
# =============================================================================

class TestUserPrompts:
    def test_own_prompts_and_dashboard(self, client: TestClient, published_prompt: dict, user_headers: dict):
        own = client.get("/api/user/prompts", headers=user_headers).json()["data"]
        assert own["pagination"]["total"] == 1

        dashboard = client.get("/api/user/dashboard", headers=user_headers).json()["data"]
        assert dashboard["stats"]["total_prompts"] == 1
        assert dashboard["plan"]["name"] == "Free"
        assert dashboard["recent_prompts"][0]["id"] == published_prompt["id"]

    def test_cannot_touch_someone_elses_prompt(self, client: TestClient, published_prompt: dict, other_headers: dict):
        url = f"/api/user/prompts/{published_prompt['id']}"
        assert client.delete(url, headers=other_headers).status_code == 404

    def test_admin_created_prompt_cannot_be_deleted_by_owner(
        self, client: TestClient, session: Session, published_prompt: dict, user_headers: dict
    ):
        prompt = session.exec(select(Prompt)).one()
        prompt.is_admin_created = True
        session.add(prompt)
        session.commit()

        response = client.delete(f"/api/user/prompts/{published_prompt['id']}", headers=user_headers)
        assert response.status_code == 403

    def test_analytics_period(self, client: TestClient, published_prompt: dict, user_headers: dict):
        response = client.get("/api/user/analytics", headers=user_headers, params={"period": "7d"})
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["period"] == "7d"
        assert data["summary"]["total_prompts"] == 1
        assert sum(day["count"] for day in data["daily"]) == 1

    def test_analytics_rejects_unknown_period(self, client: TestClient, user_headers: dict):
        assert client.get("/api/user/analytics", headers=user_headers, params={"period": "5y"}).status_code == 400
