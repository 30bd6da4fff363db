"""Plans, payments and gateway subscriptions."""

from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional
from uuid import UUID

from sqlalchemy import JSON, String, Text
from sqlmodel import Column, Field, Relationship

from promptify.models.base import (
    BaseModel,
    BillingPeriod,
    Currency,
    GatewaySubscriptionStatus,
    PaymentStatus,
    PaymentType,
    utc_now,
)

if TYPE_CHECKING:
    from promptify.models.user import User

PLAN_PERMISSIONS = (
    "access_premium_prompts",
    "create_paid_prompts",
    "advanced_analytics",
    "priority_support",
    "api_access",
    "white_label",
    "custom_integrations",
)


class Plan(BaseModel, table=True):
    __tablename__ = "plans"

    name: str = Field(unique=True, index=True, max_length=50)
    description: str | None = Field(default=None, max_length=200)
    monthly_price: float = Field(default=0.0, ge=0)
    yearly_price: float | None = Field(default=None, ge=0)
    currency: str = Field(default="INR", max_length=3)
    features: list[dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))

    # limits, -1 means unlimited
    playground_sessions: int = Field(default=-1)
    prompts_per_month: int = Field(default=-1)
    team_members: int = Field(default=1)
    api_calls: int = Field(default=-1)
    storage_gb: float = Field(default=1)

    # permissions
    access_premium_prompts: bool = Field(default=False)
    create_paid_prompts: bool = Field(default=False)
    advanced_analytics: bool = Field(default=False)
    priority_support: bool = Field(default=False)
    api_access: bool = Field(default=False)
    white_label: bool = Field(default=False)
    custom_integrations: bool = Field(default=False)

    # display
    color: str = Field(default="#3B82F6", max_length=20)
    icon: str = Field(default="zap", max_length=50)
    popular: bool = Field(default=False)
    recommended: bool = Field(default=False)
    order: int = Field(default=0, sa_column_kwargs={"name": "display_order"})

    # billing
    razorpay_plan_id_monthly: str | None = Field(default=None, max_length=100)
    razorpay_plan_id_yearly: str | None = Field(default=None, max_length=100)
    trial_days: int = Field(default=0)
    setup_fee: float = Field(default=0.0)

    # analytics
    total_subscribers: int = Field(default=0, nullable=False)
    active_subscribers: int = Field(default=0, nullable=False)
    total_revenue: float = Field(default=0.0, nullable=False)
    conversion_rate: float = Field(default=0.0, nullable=False)

    is_active: bool = Field(default=True, index=True)
    is_visible: bool = Field(default=True)
    created_by_id: UUID | None = Field(default=None, foreign_key="users.id", ondelete="SET NULL")
    is_admin_created: bool = Field(default=False)

    @property
    def yearly_discount(self) -> int:
        if not self.monthly_price or not self.yearly_price:
            return 0
        annual_monthly_cost = self.monthly_price * 12
        return round((annual_monthly_cost - self.yearly_price) / annual_monthly_cost * 100)

    @property
    def effective_monthly_price(self) -> float:
        if self.yearly_price:
            return round(self.yearly_price / 12, 2)
        return self.monthly_price

    def price_for(self, period: BillingPeriod) -> float | None:
        if period == BillingPeriod.YEARLY:
            return self.yearly_price
        return self.monthly_price

    def has_feature(self, feature_name: str) -> bool:
        wanted = feature_name.lower()
        return any(
            str(feature.get("name", "")).lower() == wanted and feature.get("included", True)
            for feature in self.features or []
        )

    def has_permission(self, permission: str) -> bool:
        if permission not in PLAN_PERMISSIONS:
            return False
        return bool(getattr(self, permission))

    def add_subscriber(self, amount: float = 0) -> None:
        self.total_subscribers += 1
        self.active_subscribers += 1
        self.total_revenue += amount

    def remove_subscriber(self) -> None:
        self.active_subscribers = max(0, self.active_subscribers - 1)


class Payment(BaseModel, table=True):
    __tablename__ = "payments"

    user_id: UUID = Field(foreign_key="users.id", index=True, ondelete="CASCADE")
    type: PaymentType = Field(sa_type=String(20), nullable=False)
    amount: float = Field(ge=0)
    currency: Currency = Field(default=Currency.INR, sa_type=String(3), nullable=False)
    status: PaymentStatus = Field(
        default=PaymentStatus.PENDING, sa_type=String(20), nullable=False, index=True
    )
    plan_id: UUID | None = Field(default=None, foreign_key="plans.id", ondelete="SET NULL")
    prompt_id: UUID | None = Field(default=None, foreign_key="prompts.id", ondelete="SET NULL")

    # gateway
    razorpay_order_id: str | None = Field(default=None, index=True, max_length=100)
    razorpay_payment_id: str | None = Field(default=None, max_length=100)
    razorpay_signature: str | None = Field(default=None, max_length=255)
    razorpay_subscription_id: str | None = Field(default=None, max_length=100)
    razorpay_customer_id: str | None = Field(default=None, max_length=100)

    # billing window
    billing_period: BillingPeriod | None = Field(default=None, sa_type=String(20))
    billing_start: datetime | None = Field(default=None)
    billing_end: datetime | None = Field(default=None)
    next_billing_date: datetime | None = Field(default=None)

    description: str | None = Field(default=None, sa_column=Column(Text))
    invoice: str | None = Field(default=None, max_length=100)
    receipt: str | None = Field(default=None, max_length=100)
    tax: float = Field(default=0.0)
    discount: float = Field(default=0.0)

    refund_amount: float | None = Field(default=None)
    refund_reason: str | None = Field(default=None, sa_column=Column(Text))
    refund_id: str | None = Field(default=None, max_length=100)
    refunded_at: datetime | None = Field(default=None)
    refunded_by_id: UUID | None = Field(default=None, foreign_key="users.id", ondelete="SET NULL")

    failure_reason: str | None = Field(default=None, sa_column=Column(Text))
    attempts: int = Field(default=0, nullable=False)
    webhook_events: list[dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))

    user: "User" = Relationship(sa_relationship_kwargs={"foreign_keys": "[Payment.user_id]"})
    plan: Optional[Plan] = Relationship()

    @property
    def net_amount(self) -> float:
        return self.amount - (self.discount or 0) + (self.tax or 0)

    def mark_completed(self, payment_id: str | None = None, signature: str | None = None) -> None:
        self.status = PaymentStatus.COMPLETED
        if payment_id:
            self.razorpay_payment_id = payment_id
        if signature:
            self.razorpay_signature = signature

    def mark_failed(self, reason: str | None = None) -> None:
        self.status = PaymentStatus.FAILED
        self.failure_reason = reason
        self.attempts += 1

    def process_refund(
        self, amount: float, reason: str, refunded_by_id: UUID | None = None,
        refund_id: str | None = None,
    ) -> None:
        self.status = PaymentStatus.REFUNDED
        self.refund_amount = amount
        self.refund_reason = reason
        self.refund_id = refund_id
        self.refunded_at = utc_now()
        self.refunded_by_id = refunded_by_id

    def record_webhook_event(self, event: str, data: dict[str, Any]) -> None:
        # reassign so the JSON column is flagged dirty
        self.webhook_events = [
            *(self.webhook_events or []),
            {"event": event, "data": data, "timestamp": utc_now().isoformat()},
        ]


class Subscription(BaseModel, table=True):
    __tablename__ = "subscriptions"

    user_id: UUID = Field(foreign_key="users.id", index=True, ondelete="CASCADE")
    plan_id: UUID = Field(foreign_key="plans.id", ondelete="CASCADE")
    razorpay_subscription_id: str | None = Field(default=None, unique=True, max_length=100)
    status: GatewaySubscriptionStatus = Field(
        default=GatewaySubscriptionStatus.CREATED, sa_type=String(20), nullable=False
    )
    current_period_start: datetime | None = Field(default=None)
    current_period_end: datetime | None = Field(default=None)
    billing_cycle: BillingPeriod = Field(default=BillingPeriod.MONTHLY, sa_type=String(20))
    billing_amount: float = Field(default=0.0)
    trial_end: datetime | None = Field(default=None)
    cancelled_at: datetime | None = Field(default=None)
    cancel_reason: str | None = Field(default=None, sa_column=Column(Text))

    plan: Plan = Relationship()
