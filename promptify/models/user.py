"""User account, subscription state and playground usage."""

from datetime import datetime
from typing import TYPE_CHECKING, Optional
from uuid import UUID

from pydantic import EmailStr
from sqlalchemy import String, event
from sqlmodel import Field, Relationship

from promptify.models.base import (
    BaseModel,
    Role,
    SubscriptionStatus,
    Theme,
    as_utc,
    utc_now,
)

if TYPE_CHECKING:
    from promptify.models.billing import Plan
    from promptify.models.prompt import Prompt

DEFAULT_PLAYGROUND_LIMIT = 10
UNLIMITED = -1


class User(BaseModel, table=True):
    __tablename__ = "users"

    name: str = Field(min_length=2, max_length=50)
    email: EmailStr = Field(unique=True, index=True, max_length=255)
    hashed_password: str = Field(sa_column_kwargs={"name": "password_hash"})
    role: Role = Field(default=Role.USER, sa_type=String(20), nullable=False)
    avatar: str | None = Field(default=None, max_length=500)
    plan_id: UUID | None = Field(default=None, foreign_key="plans.id", ondelete="SET NULL")

    # subscription
    subscription_status: SubscriptionStatus = Field(
        default=SubscriptionStatus.INACTIVE, sa_type=String(20), nullable=False
    )
    subscription_start: datetime | None = Field(default=None)
    subscription_end: datetime | None = Field(default=None)
    razorpay_customer_id: str | None = Field(default=None, max_length=100)
    razorpay_subscription_id: str | None = Field(default=None, max_length=100)

    # usage
    playground_sessions_current: int = Field(default=0, nullable=False)
    playground_sessions_limit: int = Field(default=DEFAULT_PLAYGROUND_LIMIT, nullable=False)
    usage_reset_date: datetime = Field(default_factory=utc_now, nullable=False)
    prompts_created: int = Field(default=0, nullable=False)
    prompts_downloaded: int = Field(default=0, nullable=False)

    # preferences
    theme: Theme = Field(default=Theme.SYSTEM, sa_type=String(10), nullable=False)
    email_notifications: bool = Field(default=True)
    marketing_notifications: bool = Field(default=False)

    # analytics
    total_views: int = Field(default=0, nullable=False)
    total_likes: int = Field(default=0, nullable=False)
    revenue: float = Field(default=0.0, nullable=False)
    last_active: datetime = Field(default_factory=utc_now, nullable=False)

    is_email_verified: bool = Field(default=False)
    is_active: bool = Field(default=True)

    plan: Optional["Plan"] = Relationship(
        sa_relationship_kwargs={"foreign_keys": "[User.plan_id]"}
    )
    prompts: list["Prompt"] = Relationship(
        back_populates="author",
        sa_relationship_kwargs={"cascade": "all, delete-orphan", "foreign_keys": "[Prompt.author_id]"},
    )

    @property
    def has_active_subscription(self) -> bool:
        return self.subscription_status == SubscriptionStatus.ACTIVE

    @property
    def playground_unlimited(self) -> bool:
        return self.has_active_subscription or self.playground_sessions_limit == UNLIMITED

    def refresh_usage_period(self, now: datetime | None = None) -> bool:
        """Start a new monthly usage window if the calendar month has changed."""
        now = now or utc_now()
        reset = as_utc(self.usage_reset_date)
        if reset is not None and reset.month == now.month and reset.year == now.year:
            return False
        self.playground_sessions_current = 0
        self.prompts_created = 0
        self.usage_reset_date = now
        return True

    def can_use_playground(self) -> bool:
        if self.playground_unlimited:
            return True
        self.refresh_usage_period()
        return self.playground_sessions_current < self.playground_sessions_limit

    def increment_playground_usage(self) -> None:
        if not self.has_active_subscription:
            self.refresh_usage_period()
            self.playground_sessions_current += 1
        self.last_active = utc_now()


@event.listens_for(User, "before_insert")
@event.listens_for(User, "before_update")
def _reset_monthly_usage(mapper, connection, target: User) -> None:
    target.refresh_usage_period()
