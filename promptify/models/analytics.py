"""Daily rollups and per-session activity logs."""

from datetime import date, datetime
from typing import Any
from uuid import UUID

from sqlalchemy import JSON, String
from sqlmodel import Column, Field

from promptify.models.base import ActionType, BaseModel, SessionType, as_utc, utc_now


class DailyAnalytics(BaseModel, table=True):
    __tablename__ = "daily_analytics"

    day: date = Field(unique=True, index=True)

    total_users: int = Field(default=0)
    new_users: int = Field(default=0)
    active_users: int = Field(default=0)

    total_prompts: int = Field(default=0)
    new_prompts: int = Field(default=0)
    prompt_views: int = Field(default=0)
    prompt_downloads: int = Field(default=0)

    playground_sessions: int = Field(default=0)
    playground_messages: int = Field(default=0)
    model_usage: dict[str, int] = Field(default_factory=dict, sa_column=Column(JSON))

    total_revenue: float = Field(default=0.0)
    subscription_revenue: float = Field(default=0.0)
    prompt_revenue: float = Field(default=0.0)
    transactions: int = Field(default=0)


class PlaygroundSession(BaseModel, table=True):
    __tablename__ = "playground_sessions"

    user_id: UUID = Field(foreign_key="users.id", index=True, ondelete="CASCADE")
    session_id: str = Field(unique=True, index=True, max_length=64)
    type: SessionType = Field(default=SessionType.PLAYGROUND, sa_type=String(20), nullable=False)
    start_time: datetime = Field(default_factory=utc_now, nullable=False)
    end_time: datetime | None = Field(default=None)
    duration: int | None = Field(default=None, description="Seconds between start and end")
    actions: list[dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))
    user_agent: str | None = Field(default=None, max_length=500)
    ip: str | None = Field(default=None, max_length=64)

    def log_action(
        self, action: ActionType, target: str | None = None, **extra: Any
    ) -> None:
        entry = {"type": action.value, "target": target, "timestamp": utc_now().isoformat()}
        entry.update(extra)
        # reassign so the JSON column is flagged dirty
        self.actions = [*(self.actions or []), entry]

    def end(self) -> None:
        self.end_time = utc_now()
        self.duration = int((self.end_time - as_utc(self.start_time)).total_seconds())
