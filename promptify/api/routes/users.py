"""User dashboard API - own prompts, analytics and playground usage."""

import uuid
from typing import Any, Literal, Optional

from fastapi import APIRouter, Query

from promptify.api.deps import CurrentUser, SessionDep
from promptify.core.errors import AuthorizationError, NotFoundError
from promptify.models import Prompt, PromptCategory, PromptStatus, User
from promptify.schemas import Pagination, PromptUpdate, ok, prompt_to_public, user_to_public
from promptify.services import AnalyticsService, PlaygroundService, PromptService

router = APIRouter(prefix="/user", tags=["user"])

Period = Literal["7d", "30d", "90d", "1y"]


def _own_prompt(service: PromptService, prompt_id: uuid.UUID, user: User) -> Prompt:
    prompt = service.get_by_id(prompt_id)
    if not prompt or prompt.author_id != user.id:
        raise NotFoundError("Prompt")
    return prompt


@router.get("/dashboard")
def read_dashboard(session: SessionDep, current_user: CurrentUser) -> Any:
    service = PromptService(session)
    stats = service.author_stats(current_user.id)
    recent, _ = service.list_for_author(current_user.id, limit=5)
    plan = current_user.plan
    return ok(
        {
            "user": user_to_public(current_user),
            "plan": {"id": plan.id, "name": plan.name} if plan else None,
            "stats": stats,
            "recent_prompts": [prompt_to_public(p, include_content=False) for p in recent],
        },
        "Dashboard data retrieved successfully",
    )


@router.get("/prompts")
def list_own_prompts(
    session: SessionDep,
    current_user: CurrentUser,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    status: Optional[PromptStatus] = Query(None),
    category: Optional[PromptCategory] = Query(None),
) -> Any:
    prompts, total_count = PromptService(session).list_for_author(
        current_user.id, skip=(page - 1) * limit, limit=limit, status=status, category=category
    )
    return ok(
        {
            "prompts": [prompt_to_public(p) for p in prompts],
            "pagination": Pagination.build(page, limit, total_count),
        },
        "Prompts retrieved successfully",
    )


@router.put("/prompts/{prompt_id}")
def update_own_prompt(
    prompt_id: uuid.UUID, prompt_in: PromptUpdate, session: SessionDep, current_user: CurrentUser
) -> Any:
    service = PromptService(session)
    prompt = service.update(_own_prompt(service, prompt_id, current_user), prompt_in)
    return ok({"prompt": prompt_to_public(prompt)}, "Prompt updated successfully")


@router.delete("/prompts/{prompt_id}")
def delete_own_prompt(prompt_id: uuid.UUID, session: SessionDep, current_user: CurrentUser) -> Any:
    service = PromptService(session)
    prompt = _own_prompt(service, prompt_id, current_user)
    if prompt.is_admin_created:
        raise AuthorizationError("Admin-created prompts cannot be deleted")
    service.delete(prompt)
    return ok(message="Prompt deleted successfully")


@router.get("/analytics")
def read_analytics(session: SessionDep, current_user: CurrentUser, period: Period = Query("30d")) -> Any:
    data = AnalyticsService(session).user_analytics(current_user.id, period)
    return ok(data, "Analytics retrieved successfully")


@router.get("/usage")
def read_usage(session: SessionDep, current_user: CurrentUser) -> Any:
    return ok(PlaygroundService(session).usage(current_user), "Usage retrieved successfully")


@router.post("/increment-usage")
def increment_usage(session: SessionDep, current_user: CurrentUser) -> Any:
    service = PlaygroundService(session)
    service.consume_session(current_user)
    return ok(service.usage(current_user), "Usage updated successfully")
