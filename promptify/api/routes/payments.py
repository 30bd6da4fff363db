"""Payment API - plans, Razorpay checkout, webhooks and subscription management."""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Header, Query, Request

from promptify.api.deps import CurrentUser, SessionDep
from promptify.core.config import razorpay_settings
from promptify.schemas import (
    CancelSubscriptionRequest,
    CreateOrderRequest,
    OrderResponse,
    Pagination,
    VerifyPaymentRequest,
    ok,
    payment_to_public,
    plan_to_public,
    user_to_public,
)
from promptify.services import PaymentService, PlanService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/payment", tags=["payments"])


@router.get("/plans")
def list_plans(session: SessionDep) -> Any:
    """Public endpoint - no authentication required."""
    plans = PlanService(session).get_active_plans()
    return ok([plan_to_public(plan) for plan in plans], "Plans retrieved successfully")


@router.post("/create-order")
def create_order(order_in: CreateOrderRequest, session: SessionDep, current_user: CurrentUser) -> Any:
    payment, order = PaymentService(session).create_order(
        current_user, order_in.plan_id, order_in.billing_cycle
    )
    return ok(
        OrderResponse(
            order_id=order["id"],
            amount=order["amount"],
            currency=order.get("currency", razorpay_settings.CURRENCY),
            key_id=razorpay_settings.KEY_ID,
            payment_id=payment.id,
            plan_name=payment.plan.name if payment.plan else "",
            billing_cycle=order_in.billing_cycle,
        ),
        "Order created successfully",
    )


@router.post("/verify")
def verify_payment(verify_in: VerifyPaymentRequest, session: SessionDep, current_user: CurrentUser) -> Any:
    payment = PaymentService(session).verify_payment(
        current_user,
        verify_in.razorpay_order_id,
        verify_in.razorpay_payment_id,
        verify_in.razorpay_signature,
        subscription_id=verify_in.razorpay_subscription_id,
    )
    session.refresh(current_user)
    return ok(
        {"payment": payment_to_public(payment), "user": user_to_public(current_user)},
        "Payment verified successfully",
    )


@router.post("/webhook")
async def razorpay_webhook(
    request: Request,
    session: SessionDep,
    x_razorpay_signature: Optional[str] = Header(None),
) -> Any:
    """
    Razorpay server-to-server notifications.

    The signature is checked against the raw body before anything is parsed.
    """
    body = await request.body()
    event = PaymentService(session).handle_webhook(body, x_razorpay_signature)
    return ok({"event": event}, "Webhook processed successfully")


@router.post("/cancel-subscription")
def cancel_subscription(
    session: SessionDep,
    current_user: CurrentUser,
    cancel_in: CancelSubscriptionRequest = CancelSubscriptionRequest(),
) -> Any:
    PaymentService(session).cancel_subscription(current_user, cancel_in.reason)
    return ok({"user": user_to_public(current_user)}, "Subscription cancelled successfully")


@router.get("/history")
def payment_history(
    session: SessionDep,
    current_user: CurrentUser,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
) -> Any:
    payments, total_count = PaymentService(session).get_history(
        user_id=current_user.id, skip=(page - 1) * limit, limit=limit
    )
    return ok(
        {
            "payments": [payment_to_public(p) for p in payments],
            "pagination": Pagination.build(page, limit, total_count),
        },
        "Payment history retrieved successfully",
    )
