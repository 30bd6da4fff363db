from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import EmailStr, field_validator
from sqlmodel import Field, SQLModel

from promptify.models import Role, SubscriptionStatus, Theme, User, as_utc


class SubscriptionInfo(SQLModel):
    status: SubscriptionStatus
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class PlaygroundUsage(SQLModel):
    current: int
    limit: int
    reset_date: datetime


class UsageInfo(SQLModel):
    playground_sessions: PlaygroundUsage
    prompts_created: int
    prompts_downloaded: int


class Preferences(SQLModel):
    theme: Theme = Theme.SYSTEM
    email_notifications: bool = True
    marketing_notifications: bool = False


class UserAnalytics(SQLModel):
    total_views: int
    likes: int
    revenue: float
    last_active: datetime


class PlanSummary(SQLModel):
    id: UUID
    name: str
    monthly_price: float


class UserPublic(SQLModel):
    id: UUID
    name: str
    email: EmailStr
    role: Role
    avatar: Optional[str] = None
    plan: Optional[PlanSummary] = None
    subscription: SubscriptionInfo
    usage: UsageInfo
    preferences: Preferences
    analytics: UserAnalytics
    is_email_verified: bool
    is_active: bool
    created_at: datetime


def user_to_public(user: User) -> UserPublic:
    """Flattened columns back into the nested shape clients expect."""
    plan = None
    if user.plan is not None:
        plan = PlanSummary(id=user.plan.id, name=user.plan.name, monthly_price=user.plan.monthly_price)
    return UserPublic(
        id=user.id,
        name=user.name,
        email=user.email,
        role=user.role,
        avatar=user.avatar,
        plan=plan,
        subscription=SubscriptionInfo(
            status=user.subscription_status,
            start_date=as_utc(user.subscription_start),
            end_date=as_utc(user.subscription_end),
        ),
        usage=UsageInfo(
            playground_sessions=PlaygroundUsage(
                current=user.playground_sessions_current,
                limit=user.playground_sessions_limit,
                reset_date=as_utc(user.usage_reset_date),
            ),
            prompts_created=user.prompts_created,
            prompts_downloaded=user.prompts_downloaded,
        ),
        preferences=Preferences(
            theme=user.theme,
            email_notifications=user.email_notifications,
            marketing_notifications=user.marketing_notifications,
        ),
        analytics=UserAnalytics(
            total_views=user.total_views,
            likes=user.total_likes,
            revenue=user.revenue,
            last_active=as_utc(user.last_active),
        ),
        is_email_verified=user.is_email_verified,
        is_active=user.is_active,
        created_at=as_utc(user.created_at),
    )


class UserCreate(SQLModel):
    name: str = Field(min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)
    role: Role = Role.USER

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return v.strip()

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class PreferencesUpdate(SQLModel):
    theme: Optional[Theme] = None
    email_notifications: Optional[bool] = None
    marketing_notifications: Optional[bool] = None


class ProfileUpdate(SQLModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=50)
    avatar: Optional[str] = Field(default=None, max_length=500)
    preferences: Optional[PreferencesUpdate] = None


class ChangePasswordRequest(SQLModel):
    current_password: str
    new_password: str = Field(min_length=6, max_length=128)


class AdminUserUpdate(SQLModel):
    role: Optional[Role] = None
    is_active: Optional[bool] = None
    plan_id: Optional[UUID] = None
