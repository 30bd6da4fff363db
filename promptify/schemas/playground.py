from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from sqlmodel import Field, SQLModel

from promptify.models import PlaygroundSession, SessionType, as_utc


class ChatRequest(SQLModel):
    message: Optional[str] = Field(default=None, max_length=10000)
    model: Optional[str] = None
    session_id: Optional[str] = Field(default=None, max_length=64)


class ChatUsage(SQLModel):
    current: int
    limit: int
    unlimited: bool


class ChatResponse(SQLModel):
    response: str
    session_id: str
    model: Optional[str] = None
    ai_model: Optional[str] = None
    citations: Optional[list[str]] = None
    token_usage: Optional[dict[str, int]] = None
    usage: ChatUsage


class SessionStartRequest(SQLModel):
    type: SessionType = SessionType.PLAYGROUND


class SessionEndRequest(SQLModel):
    session_id: Optional[str] = None


class SessionPublic(SQLModel):
    id: UUID
    session_id: str
    type: SessionType
    start_time: datetime
    end_time: Optional[datetime] = None
    duration: Optional[int] = None
    actions: list[dict[str, Any]]


def session_to_public(session: PlaygroundSession) -> SessionPublic:
    return SessionPublic(
        id=session.id,
        session_id=session.session_id,
        type=session.type,
        start_time=as_utc(session.start_time),
        end_time=as_utc(session.end_time),
        duration=session.duration,
        actions=list(session.actions or []),
    )
