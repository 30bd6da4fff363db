"""Playground API - chat with AI models and track sessions."""

from typing import Any

from fastapi import APIRouter, Depends, Query, Request, status

from promptify.api.deps import CurrentUser, SessionDep
from promptify.schemas import (
    ChatRequest,
    ChatResponse,
    Pagination,
    SessionEndRequest,
    SessionStartRequest,
    ok,
    session_to_public,
)
from promptify.services import PlaygroundService
from promptify.services.ai import AIManager, get_ai_manager

router = APIRouter(prefix="/playground", tags=["playground"])


def get_playground_service(
    session: SessionDep, ai_manager: AIManager = Depends(get_ai_manager)
) -> PlaygroundService:
    return PlaygroundService(session, ai_manager)


@router.post("/chat")
async def chat(
    chat_in: ChatRequest,
    current_user: CurrentUser,
    service: PlaygroundService = Depends(get_playground_service),
) -> Any:
    """
    Send one message to the selected model.

    Counts against the monthly playground quota unless the user has an
    active subscription.
    """
    result = await service.chat(
        current_user, chat_in.message, model=chat_in.model, session_id=chat_in.session_id
    )
    return ok(ChatResponse(**result), "Response generated successfully")


@router.post("/session/start", status_code=status.HTTP_201_CREATED)
def start_session(
    request: Request,
    current_user: CurrentUser,
    session_in: SessionStartRequest = SessionStartRequest(),
    service: PlaygroundService = Depends(get_playground_service),
) -> Any:
    record = service.start_session(
        current_user,
        session_in.type,
        user_agent=request.headers.get("user-agent"),
        ip=request.client.host if request.client else None,
    )
    return ok({"session_id": record.session_id}, "Session started successfully")


@router.post("/session/end")
def end_session(
    session_in: SessionEndRequest,
    current_user: CurrentUser,
    service: PlaygroundService = Depends(get_playground_service),
) -> Any:
    record = service.end_session(current_user, session_in.session_id)
    return ok({"session": session_to_public(record)}, "Session ended successfully")


def _list_sessions(service: PlaygroundService, user_id, page: int, limit: int) -> dict[str, Any]:
    records, total_count = service.list_sessions(user_id, skip=(page - 1) * limit, limit=limit)
    return {
        "sessions": [session_to_public(r) for r in records],
        "pagination": Pagination.build(page, limit, total_count),
    }


@router.get("/sessions")
def list_sessions(
    current_user: CurrentUser,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    service: PlaygroundService = Depends(get_playground_service),
) -> Any:
    return ok(_list_sessions(service, current_user.id, page, limit), "Sessions retrieved successfully")


@router.get("/history")
def read_history(
    current_user: CurrentUser,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=50),
    service: PlaygroundService = Depends(get_playground_service),
) -> Any:
    return ok(_list_sessions(service, current_user.id, page, limit), "History retrieved successfully")


@router.get("/usage")
def read_usage(
    current_user: CurrentUser, service: PlaygroundService = Depends(get_playground_service)
) -> Any:
    return ok(service.usage(current_user), "Usage retrieved successfully")


@router.get("/models")
async def list_models(
    current_user: CurrentUser, ai_manager: AIManager = Depends(get_ai_manager)
) -> Any:
    info = ai_manager.get_service_info()
    models = await ai_manager.get_available_models()
    data = [
        {
            "id": name,
            **details,
            "models": models.get(name, {}).get("models", []),
        }
        for name, details in info.items()
    ]
    return ok({"models": data, "default": ai_manager.default_model}, "Models retrieved successfully")


@router.get("/health")
async def ai_health(
    current_user: CurrentUser, ai_manager: AIManager = Depends(get_ai_manager)
) -> Any:
    return ok(await ai_manager.health_check(), "AI service health retrieved successfully")
