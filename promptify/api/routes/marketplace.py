"""Marketplace API - browse, publish and engage with prompts."""

import uuid
from typing import Any, Literal, Optional

from fastapi import APIRouter, Query, status

from promptify.api.deps import CurrentUser, OptionalUser, SessionDep
from promptify.core.errors import AuthorizationError
from promptify.models import PromptCategory
from promptify.schemas import Pagination, PromptCreate, PromptUpdate, ReviewCreate, ok, prompt_to_public
from promptify.services import PromptService

router = APIRouter(prefix="/marketplace", tags=["marketplace"])

SortOption = Literal["latest", "popular", "rating", "price_low", "price_high"]


@router.get("/prompts")
def list_prompts(
    session: SessionDep,
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=50),
    category: Optional[PromptCategory] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    type: Literal["all", "free", "premium"] = Query("all"),
    sort: SortOption = Query("latest"),
) -> Any:
    """
    Published, public prompts. Content is withheld from listings.

    Every prompt returned counts one view.
    """
    prompts, total_count = PromptService(session).list_marketplace(
        skip=(page - 1) * limit,
        limit=limit,
        category=category,
        search=search,
        prompt_type=type,
        sort=sort,
    )
    return ok(
        {
            "prompts": [prompt_to_public(p, include_content=False) for p in prompts],
            "pagination": Pagination.build(page, limit, total_count),
        },
        "Prompts retrieved successfully",
    )


@router.get("/categories")
def list_categories(session: SessionDep) -> Any:
    counts = PromptService(session).category_counts()
    categories = [{"name": name, "count": count} for name, count in counts.items()]
    return ok(categories, "Categories retrieved successfully")


@router.get("/prompts/{prompt_id}")
def read_prompt(prompt_id: uuid.UUID, session: SessionDep, viewer: OptionalUser) -> Any:
    prompt = PromptService(session).get_for_viewer(prompt_id, viewer)
    return ok({"prompt": prompt_to_public(prompt, include_children=True)}, "Prompt retrieved successfully")


@router.post("/prompts", status_code=status.HTTP_201_CREATED)
def create_prompt(prompt_in: PromptCreate, session: SessionDep, current_user: CurrentUser) -> Any:
    prompt = PromptService(session).create(current_user, prompt_in)
    return ok({"prompt": prompt_to_public(prompt)}, "Prompt created successfully")


@router.put("/prompts/{prompt_id}")
def update_prompt(
    prompt_id: uuid.UUID, prompt_in: PromptUpdate, session: SessionDep, current_user: CurrentUser
) -> Any:
    service = PromptService(session)
    prompt = service.get_or_404(prompt_id)
    if not service.can_manage(prompt, current_user):
        raise AuthorizationError("You can only edit your own prompts")
    prompt = service.update(prompt, prompt_in)
    return ok({"prompt": prompt_to_public(prompt)}, "Prompt updated successfully")


@router.delete("/prompts/{prompt_id}")
def delete_prompt(prompt_id: uuid.UUID, session: SessionDep, current_user: CurrentUser) -> Any:
    service = PromptService(session)
    prompt = service.get_or_404(prompt_id)
    if not service.can_manage(prompt, current_user):
        raise AuthorizationError("You can only delete your own prompts")
    service.delete(prompt)
    return ok(message="Prompt deleted successfully")


@router.post("/prompts/{prompt_id}/like")
def like_prompt(prompt_id: uuid.UUID, session: SessionDep, current_user: CurrentUser) -> Any:
    service = PromptService(session)
    prompt = service.like(service.get_or_404(prompt_id))
    return ok({"likes": prompt.likes}, "Prompt liked successfully")


@router.post("/prompts/{prompt_id}/download")
def download_prompt(prompt_id: uuid.UUID, session: SessionDep, current_user: CurrentUser) -> Any:
    service = PromptService(session)
    prompt = service.get_for_viewer(prompt_id, current_user)
    prompt = service.download(prompt, current_user)
    return ok(
        {"content": prompt.content, "downloads": prompt.downloads},
        "Prompt downloaded successfully",
    )


@router.post("/prompts/{prompt_id}/reviews", status_code=status.HTTP_201_CREATED)
def review_prompt(
    prompt_id: uuid.UUID, review_in: ReviewCreate, session: SessionDep, current_user: CurrentUser
) -> Any:
    service = PromptService(session)
    prompt = service.add_review(service.get_or_404(prompt_id), current_user, review_in.rating, review_in.comment)
    return ok(
        {"rating": {"average": prompt.rating_average, "count": prompt.rating_count}},
        "Review added successfully",
    )
