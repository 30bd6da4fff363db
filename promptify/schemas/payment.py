"""Payment request/response schemas."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlmodel import Field, SQLModel

from promptify.models import BillingPeriod, Currency, Payment, PaymentStatus, PaymentType, as_utc


class CreateOrderRequest(SQLModel):
    plan_id: UUID
    billing_cycle: BillingPeriod = BillingPeriod.MONTHLY


class OrderResponse(SQLModel):
    order_id: str
    amount: int = Field(description="Amount in the smallest currency unit (paise)")
    currency: str
    key_id: str
    payment_id: UUID
    plan_name: str
    billing_cycle: BillingPeriod


class VerifyPaymentRequest(SQLModel):
    razorpay_order_id: str = Field(min_length=1)
    razorpay_payment_id: str = Field(min_length=1)
    razorpay_signature: str = Field(min_length=1)
    razorpay_subscription_id: Optional[str] = Field(default=None, max_length=100)


class CancelSubscriptionRequest(SQLModel):
    reason: Optional[str] = Field(default=None, max_length=500)


class PaymentPublic(SQLModel):
    id: UUID
    user_id: UUID
    type: PaymentType
    amount: float
    net_amount: float
    currency: Currency
    status: PaymentStatus
    plan_id: Optional[UUID] = None
    plan_name: Optional[str] = None
    razorpay_order_id: Optional[str] = None
    razorpay_payment_id: Optional[str] = None
    billing_period: Optional[BillingPeriod] = None
    billing_start: Optional[datetime] = None
    billing_end: Optional[datetime] = None
    description: Optional[str] = None
    receipt: Optional[str] = None
    failure_reason: Optional[str] = None
    refund_amount: Optional[float] = None
    created_at: datetime


def payment_to_public(payment: Payment) -> PaymentPublic:
    return PaymentPublic(
        id=payment.id,
        user_id=payment.user_id,
        type=payment.type,
        amount=payment.amount,
        net_amount=payment.net_amount,
        currency=payment.currency,
        status=payment.status,
        plan_id=payment.plan_id,
        plan_name=payment.plan.name if payment.plan else None,
        razorpay_order_id=payment.razorpay_order_id,
        razorpay_payment_id=payment.razorpay_payment_id,
        billing_period=payment.billing_period,
        billing_start=as_utc(payment.billing_start),
        billing_end=as_utc(payment.billing_end),
        description=payment.description,
        receipt=payment.receipt,
        failure_reason=payment.failure_reason,
        refund_amount=payment.refund_amount,
        created_at=as_utc(payment.created_at),
    )
