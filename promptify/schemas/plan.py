from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import field_validator, model_validator
from sqlmodel import Field, SQLModel

from promptify.models import Plan, as_utc


class PlanFeature(SQLModel):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=300)
    included: bool = True


class PlanLimits(SQLModel):
    """-1 means unlimited."""
    playground_sessions: int = Field(default=-1, ge=-1)
    prompts_per_month: int = Field(default=-1, ge=-1)
    team_members: int = Field(default=1, ge=-1)
    api_calls: int = Field(default=-1, ge=-1)
    storage_gb: float = Field(default=1, ge=0)

    @field_validator("team_members")
    @classmethod
    def validate_team_members(cls, v: int) -> int:
        if v == 0:
            raise ValueError("team_members must be -1 (unlimited) or at least 1")
        return v


class PlanPermissions(SQLModel):
    access_premium_prompts: bool = False
    create_paid_prompts: bool = False
    advanced_analytics: bool = False
    priority_support: bool = False
    api_access: bool = False
    white_label: bool = False
    custom_integrations: bool = False


class PlanDisplay(SQLModel):
    color: str = "#3B82F6"
    icon: str = "zap"
    popular: bool = False
    recommended: bool = False
    order: int = 0


class PlanBilling(SQLModel):
    razorpay_plan_id_monthly: Optional[str] = None
    razorpay_plan_id_yearly: Optional[str] = None
    trial_days: int = Field(default=0, ge=0)
    setup_fee: float = Field(default=0, ge=0)


class PlanCreate(SQLModel):
    name: str = Field(min_length=2, max_length=50)
    description: Optional[str] = Field(default=None, max_length=200)
    monthly_price: float = Field(ge=0)
    yearly_price: Optional[float] = Field(default=None, ge=0)
    features: list[PlanFeature] = Field(default_factory=list)
    limits: PlanLimits = Field(default_factory=PlanLimits)
    permissions: PlanPermissions = Field(default_factory=PlanPermissions)
    display: PlanDisplay = Field(default_factory=PlanDisplay)
    billing: PlanBilling = Field(default_factory=PlanBilling)
    is_active: bool = True
    is_visible: bool = True

    @model_validator(mode="after")
    def validate_features(self):
        if not self.features:
            raise ValueError("At least one feature is required")
        return self


class PlanUpdate(SQLModel):
    """Partial update; nested groups replace only the keys they carry."""
    name: Optional[str] = Field(default=None, min_length=2, max_length=50)
    description: Optional[str] = Field(default=None, max_length=200)
    monthly_price: Optional[float] = Field(default=None, ge=0)
    yearly_price: Optional[float] = Field(default=None, ge=0)
    features: Optional[list[PlanFeature]] = None
    limits: Optional[PlanLimits] = None
    permissions: Optional[PlanPermissions] = None
    display: Optional[PlanDisplay] = None
    billing: Optional[PlanBilling] = None
    is_active: Optional[bool] = None
    is_visible: Optional[bool] = None


class PlanAnalytics(SQLModel):
    total_subscribers: int
    active_subscribers: int
    total_revenue: float
    conversion_rate: float


class PlanPublic(SQLModel):
    id: UUID
    name: str
    description: Optional[str] = None
    monthly_price: float
    yearly_price: Optional[float] = None
    yearly_discount: int
    effective_monthly_price: float
    currency: str
    features: list[PlanFeature]
    limits: PlanLimits
    permissions: PlanPermissions
    display: PlanDisplay
    billing: PlanBilling
    analytics: Optional[PlanAnalytics] = None
    is_active: bool
    is_visible: bool
    created_at: datetime
    updated_at: datetime


def flatten_plan_data(data: dict) -> dict:
    """Nested request groups onto the Plan table's columns."""
    flat = dict(data)
    for group in ("limits", "permissions", "display", "billing"):
        nested = flat.pop(group, None)
        if nested:
            flat.update(nested)
    return flat


def plan_to_public(plan: Plan, include_analytics: bool = False) -> PlanPublic:
    analytics = None
    if include_analytics:
        analytics = PlanAnalytics(
            total_subscribers=plan.total_subscribers,
            active_subscribers=plan.active_subscribers,
            total_revenue=plan.total_revenue,
            conversion_rate=plan.conversion_rate,
        )
    return PlanPublic(
        id=plan.id,
        name=plan.name,
        description=plan.description,
        monthly_price=plan.monthly_price,
        yearly_price=plan.yearly_price,
        yearly_discount=plan.yearly_discount,
        effective_monthly_price=plan.effective_monthly_price,
        currency=plan.currency,
        features=[PlanFeature(**feature) for feature in plan.features or []],
        limits=PlanLimits.model_construct(
            playground_sessions=plan.playground_sessions,
            prompts_per_month=plan.prompts_per_month,
            team_members=plan.team_members,
            api_calls=plan.api_calls,
            storage_gb=plan.storage_gb,
        ),
        permissions=PlanPermissions(
            access_premium_prompts=plan.access_premium_prompts,
            create_paid_prompts=plan.create_paid_prompts,
            advanced_analytics=plan.advanced_analytics,
            priority_support=plan.priority_support,
            api_access=plan.api_access,
            white_label=plan.white_label,
            custom_integrations=plan.custom_integrations,
        ),
        display=PlanDisplay(
            color=plan.color,
            icon=plan.icon,
            popular=plan.popular,
            recommended=plan.recommended,
            order=plan.order,
        ),
        billing=PlanBilling(
            razorpay_plan_id_monthly=plan.razorpay_plan_id_monthly,
            razorpay_plan_id_yearly=plan.razorpay_plan_id_yearly,
            trial_days=plan.trial_days,
            setup_fee=plan.setup_fee,
        ),
        analytics=analytics,
        is_active=plan.is_active,
        is_visible=plan.is_visible,
        created_at=as_utc(plan.created_at),
        updated_at=as_utc(plan.updated_at),
    )
