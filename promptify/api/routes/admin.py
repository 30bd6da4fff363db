"""Admin console API. Every route requires the admin role."""

import uuid
from typing import Any, Literal, Optional

from fastapi import APIRouter, Depends, Query, status

from promptify.api.deps import AdminUser, SessionDep, get_current_active_superuser
from promptify.core.errors import NotFoundError
from promptify.models import PaymentStatus, PromptCategory, PromptStatus, Role
from promptify.schemas import (
    AdminPromptCreate,
    AdminUserUpdate,
    Pagination,
    PlanCreate,
    PlanUpdate,
    PromptModeration,
    ok,
    payment_to_public,
    plan_to_public,
    prompt_to_public,
    user_to_public,
)
from promptify.services import AnalyticsService, PaymentService, PlanService, PromptService, UserService

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(get_current_active_superuser)],
)


@router.get("/dashboard")
def read_dashboard(session: SessionDep) -> Any:
    return ok(AnalyticsService(session).admin_dashboard(), "Dashboard data retrieved successfully")


# ---- users ----

@router.get("/users")
def list_users(
    session: SessionDep,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: Optional[str] = Query(None, max_length=100),
    role: Optional[Role] = Query(None),
    status: Optional[Literal["active", "inactive"]] = Query(None),
) -> Any:
    users, total_count = UserService(session).get_all(
        skip=(page - 1) * limit,
        limit=limit,
        search=search,
        role=role,
        is_active=None if status is None else status == "active",
    )
    return ok(
        {
            "users": [user_to_public(u) for u in users],
            "pagination": Pagination.build(page, limit, total_count),
        },
        "Users retrieved successfully",
    )


@router.put("/users/{user_id}")
def update_user(user_id: uuid.UUID, user_in: AdminUserUpdate, session: SessionDep) -> Any:
    service = UserService(session)
    user = service.get_by_id(user_id)
    if not user:
        raise NotFoundError("User")
    user = service.admin_update(user, user_in)
    return ok({"user": user_to_public(user)}, "User updated successfully")


# ---- prompts ----

@router.get("/prompts")
def list_prompts(
    session: SessionDep,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: Optional[PromptStatus] = Query(None),
    category: Optional[PromptCategory] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
) -> Any:
    prompts, total_count = PromptService(session).list_admin(
        skip=(page - 1) * limit, limit=limit, status=status, category=category, search=search
    )
    return ok(
        {
            "prompts": [prompt_to_public(p) for p in prompts],
            "pagination": Pagination.build(page, limit, total_count),
        },
        "Prompts retrieved successfully",
    )


@router.post("/prompts", status_code=status.HTTP_201_CREATED)
def create_prompt(prompt_in: AdminPromptCreate, session: SessionDep, admin: AdminUser) -> Any:
    prompt = PromptService(session).create_as_admin(admin, prompt_in)
    return ok({"prompt": prompt_to_public(prompt)}, "Prompt created successfully")


@router.put("/prompts/{prompt_id}")
def moderate_prompt(
    prompt_id: uuid.UUID, moderation_in: PromptModeration, session: SessionDep, admin: AdminUser
) -> Any:
    service = PromptService(session)
    prompt = service.moderate(service.get_or_404(prompt_id), admin, moderation_in)
    return ok({"prompt": prompt_to_public(prompt)}, "Prompt updated successfully")


# ---- plans ----

@router.get("/plans")
def list_plans(
    session: SessionDep,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
    search: Optional[str] = Query(None, max_length=100),
    is_active: Optional[bool] = Query(None),
) -> Any:
    plans, total_count = PlanService(session).get_all(
        skip=(page - 1) * limit, limit=limit, search=search, is_active=is_active
    )
    return ok(
        {
            "plans": [plan_to_public(p, include_analytics=True) for p in plans],
            "pagination": Pagination.build(page, limit, total_count),
        },
        "Plans retrieved successfully",
    )


@router.post("/plans", status_code=status.HTTP_201_CREATED)
def create_plan(plan_in: PlanCreate, session: SessionDep, admin: AdminUser) -> Any:
    plan = PlanService(session).create(plan_in, created_by_id=admin.id)
    return ok({"plan": plan_to_public(plan, include_analytics=True)}, "Plan created successfully")


@router.put("/plans/{plan_id}")
def update_plan(plan_id: uuid.UUID, plan_in: PlanUpdate, session: SessionDep) -> Any:
    service = PlanService(session)
    plan = service.get_by_id(plan_id)
    if not plan:
        raise NotFoundError("Plan")
    plan = service.update(plan, plan_in)
    return ok({"plan": plan_to_public(plan, include_analytics=True)}, "Plan updated successfully")


# ---- reporting ----

@router.get("/analytics")
def read_analytics(session: SessionDep, period: Literal["7d", "30d", "90d", "1y"] = Query("30d")) -> Any:
    return ok(AnalyticsService(session).admin_analytics(period), "Analytics retrieved successfully")


@router.get("/payments")
def list_payments(
    session: SessionDep,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: Optional[PaymentStatus] = Query(None),
) -> Any:
    payments, total_count = PaymentService(session).get_history(
        status=status, skip=(page - 1) * limit, limit=limit
    )
    return ok(
        {
            "payments": [payment_to_public(p) for p in payments],
            "pagination": Pagination.build(page, limit, total_count),
        },
        "Payments retrieved successfully",
    )


@router.get("/recent-activity")
def recent_activity(session: SessionDep, limit: int = Query(20, ge=1)) -> Any:
    """At most 50 items regardless of the requested limit."""
    return ok(AnalyticsService(session).recent_activity(limit), "Recent activity retrieved successfully")
