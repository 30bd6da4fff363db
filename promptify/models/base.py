"""Base model and common enums for all models."""

from datetime import datetime, timezone
from enum import Enum
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes read back from backends without tz support."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# ==================== ENUMS ====================

class Role(str, Enum):
    ADMIN = "admin"
    USER = "user"


class SubscriptionStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"
    SYSTEM = "system"


class PromptCategory(str, Enum):
    WRITING = "writing"
    DEVELOPMENT = "development"
    MARKETING = "marketing"
    EDUCATION = "education"
    BUSINESS = "business"
    ANALYTICS = "analytics"


class PromptType(str, Enum):
    FREE = "free"
    PREMIUM = "premium"


class PromptStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"
    REJECTED = "rejected"


class Visibility(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"
    UNLISTED = "unlisted"


class Difficulty(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class PaymentType(str, Enum):
    SUBSCRIPTION = "subscription"
    PROMPT_PURCHASE = "prompt_purchase"
    ONE_TIME = "one_time"


class Currency(str, Enum):
    INR = "INR"
    USD = "USD"
    EUR = "EUR"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class BillingPeriod(str, Enum):
    MONTHLY = "monthly"
    YEARLY = "yearly"
    ONE_TIME = "one_time"


class GatewaySubscriptionStatus(str, Enum):
    CREATED = "created"
    AUTHENTICATED = "authenticated"
    ACTIVE = "active"
    PAUSED = "paused"
    HALTED = "halted"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class SessionType(str, Enum):
    PLAYGROUND = "playground"
    MARKETPLACE = "marketplace"
    DASHBOARD = "dashboard"


class ActionType(str, Enum):
    VIEW = "view"
    CLICK = "click"
    DOWNLOAD = "download"
    LIKE = "like"
    SHARE = "share"
    CREATE = "create"
    EDIT = "edit"
    DELETE = "delete"


# ==================== BASE MODEL ====================

class BaseModel(SQLModel):
    """Base model with common fields."""
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    created_at: datetime = Field(
        default_factory=utc_now, nullable=False
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_column_kwargs={"onupdate": utc_now},
        nullable=False,
    )
