"""
Models package - All SQLModel tables for Promptify.

Import order matters for foreign key dependencies:
1. base (enums, BaseModel)
2. user
3. prompt (depends on User)
4. billing (depends on User, Prompt)
5. analytics (depends on User)
"""

from sqlmodel import SQLModel

from promptify.models.base import (
    ActionType,
    BaseModel,
    BillingPeriod,
    Currency,
    Difficulty,
    GatewaySubscriptionStatus,
    PaymentStatus,
    PaymentType,
    PromptCategory,
    PromptStatus,
    PromptType,
    Role,
    SessionType,
    SubscriptionStatus,
    Theme,
    Visibility,
    as_utc,
    utc_now,
)
from promptify.models.user import DEFAULT_PLAYGROUND_LIMIT, UNLIMITED, User
from promptify.models.prompt import Prompt, PromptReview, PromptVersion, slugify
from promptify.models.billing import PLAN_PERMISSIONS, Payment, Plan, Subscription
from promptify.models.analytics import DailyAnalytics, PlaygroundSession

__all__ = [
    "SQLModel",
    "ActionType",
    "BaseModel",
    "BillingPeriod",
    "Currency",
    "DailyAnalytics",
    "DEFAULT_PLAYGROUND_LIMIT",
    "Difficulty",
    "GatewaySubscriptionStatus",
    "PLAN_PERMISSIONS",
    "Payment",
    "PaymentStatus",
    "PaymentType",
    "Plan",
    "PlaygroundSession",
    "Prompt",
    "PromptCategory",
    "PromptReview",
    "PromptStatus",
    "PromptType",
    "PromptVersion",
    "Role",
    "SessionType",
    "Subscription",
    "SubscriptionStatus",
    "Theme",
    "UNLIMITED",
    "User",
    "Visibility",
    "as_utc",
    "slugify",
    "utc_now",
]
