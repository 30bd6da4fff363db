"""Payment Service - Razorpay orders, verification, webhooks and cancellations."""

import json
import logging
import time
from datetime import datetime, timedelta
from typing import Any, Optional
from uuid import UUID

from sqlmodel import Session, and_, col, func, select

from promptify.core.config import razorpay_settings
from promptify.core.errors import ExternalAPIError, NotFoundError, PaymentError, ValidationError
from promptify.core.razorpay_client import (
    razorpay_client,
    verify_payment_signature,
    verify_webhook_signature,
)
from promptify.models import (
    BillingPeriod,
    GatewaySubscriptionStatus,
    Payment,
    PaymentStatus,
    PaymentType,
    Plan,
    Subscription,
    SubscriptionStatus,
    User,
    utc_now,
)
from promptify.services.user_service import UserService

logger = logging.getLogger(__name__)

BILLING_DAYS = {BillingPeriod.MONTHLY: 30, BillingPeriod.YEARLY: 365}


def _entity(entities: dict[str, Any], name: str) -> dict[str, Any]:
    """The ``entity`` dict of one webhook payload section, or an empty dict."""
    section = entities.get(name)
    entity = section.get("entity") if isinstance(section, dict) else None
    return entity if isinstance(entity, dict) else {}


class PaymentService:
    """Service for the subscription payment lifecycle."""

    def __init__(self, session: Session):
        self.session = session

    def create_order(
        self, user: User, plan_id: UUID, billing_cycle: BillingPeriod
    ) -> tuple[Payment, dict[str, Any]]:
        """
        Create a Razorpay order and the matching pending payment.

        Returns:
            Tuple of (payment, gateway order)
        """
        plan = self.session.get(Plan, plan_id)
        if not plan or not plan.is_active:
            raise NotFoundError("Plan")

        price = plan.price_for(billing_cycle)
        if price is None or price <= 0:
            raise ValidationError("Invalid plan pricing")

        amount_paise = int(round(price * 100))
        receipt = f"order_{user.id.hex[:12]}_{int(time.time() * 1000)}"
        order_data = {
            "amount": amount_paise,
            "currency": razorpay_settings.CURRENCY,
            "receipt": receipt,
            "notes": {
                "user_id": str(user.id),
                "plan_id": str(plan.id),
                "plan_name": plan.name,
                "billing_cycle": billing_cycle.value,
            },
        }

        client = razorpay_client()
        try:
            order = client.order.create(data=order_data)
        except Exception as e:
            logger.error(f"Failed to create Razorpay order for user {user.id}: {e}")
            raise ExternalAPIError("Razorpay", str(e)) from e

        start = utc_now()
        end = start + timedelta(days=BILLING_DAYS[billing_cycle])
        payment = Payment(
            user_id=user.id,
            type=PaymentType.SUBSCRIPTION,
            amount=price,
            currency=razorpay_settings.CURRENCY,
            status=PaymentStatus.PENDING,
            plan_id=plan.id,
            razorpay_order_id=order["id"],
            billing_period=billing_cycle,
            billing_start=start,
            billing_end=end,
            next_billing_date=end,
            description=f"{plan.name} - {billing_cycle.value.capitalize()} subscription",
            receipt=receipt,
        )
        self.session.add(payment)
        self.session.commit()
        self.session.refresh(payment)
        logger.info(f"Created order {order['id']} for user {user.id} ({plan.name}, {billing_cycle.value})")
        return payment, order

    def get_by_order_id(self, order_id: str) -> Payment | None:
        statement = select(Payment).where(Payment.razorpay_order_id == order_id)
        return self.session.exec(statement).first()

    def verify_payment(
        self,
        user: User,
        order_id: str,
        payment_id: str,
        signature: str,
        subscription_id: Optional[str] = None,
    ) -> Payment:
        if not verify_payment_signature(order_id, payment_id, signature):
            logger.warning(f"Invalid payment signature for order {order_id}")
            raise PaymentError("Invalid payment signature")

        payment = self.get_by_order_id(order_id)
        if not payment or payment.user_id != user.id:
            raise NotFoundError("Payment")
        if payment.status == PaymentStatus.COMPLETED:
            return payment

        payment.mark_completed(payment_id, signature)
        if subscription_id:
            payment.razorpay_subscription_id = subscription_id
        self.session.add(payment)
        self._activate_subscription(user, payment)
        self.session.commit()
        self.session.refresh(payment)
        logger.info(f"Payment {payment.id} verified for user {user.id}")
        return payment

    def _activate_subscription(self, user: User, payment: Payment) -> None:
        plan = self.session.get(Plan, payment.plan_id) if payment.plan_id else None
        user.subscription_status = SubscriptionStatus.ACTIVE
        user.subscription_start = payment.billing_start or utc_now()
        user.subscription_end = payment.billing_end
        if payment.razorpay_subscription_id:
            user.razorpay_subscription_id = payment.razorpay_subscription_id
        if plan:
            UserService(self.session).apply_plan(user, plan)
            plan.add_subscriber(payment.amount)
            self.session.add(plan)
            subscription = None
            if payment.razorpay_subscription_id:
                subscription = self.session.exec(
                    select(Subscription).where(
                        Subscription.razorpay_subscription_id == payment.razorpay_subscription_id
                    )
                ).first()
            subscription = subscription or Subscription(
                user_id=user.id,
                plan_id=plan.id,
                razorpay_subscription_id=payment.razorpay_subscription_id,
            )
            subscription.sqlmodel_update({
                "plan_id": plan.id,
                "status": GatewaySubscriptionStatus.ACTIVE,
                "current_period_start": user.subscription_start,
                "current_period_end": payment.billing_end,
                "billing_cycle": payment.billing_period or BillingPeriod.MONTHLY,
                "billing_amount": payment.amount,
            })
            self.session.add(subscription)
        self.session.add(user)

    def handle_webhook(self, body: bytes, signature: Optional[str]) -> str:
        """
        Apply a verified gateway event.

        Every event that can be tied to a payment is appended to that
        payment's webhook log.

        Returns:
            The event name that was processed
        """
        if not verify_webhook_signature(body, signature):
            logger.warning("Invalid webhook signature")
            raise PaymentError("Invalid webhook signature")

        try:
            payload = json.loads(body)
        except ValueError as e:
            raise ValidationError("Invalid webhook payload") from e
        if not isinstance(payload, dict):
            raise ValidationError("Invalid webhook payload")

        event = str(payload.get("event", ""))
        entities = payload.get("payload") or {}
        if not isinstance(entities, dict):
            raise ValidationError("Invalid webhook payload")
        payment_entity = _entity(entities, "payment")
        subscription_entity = _entity(entities, "subscription")
        logger.info(f"Processing webhook event: {event}")

        if event == "subscription.cancelled":
            payment = self._get_by_subscription_id(subscription_entity.get("id"))
            if payment:
                payment.record_webhook_event(event, subscription_entity)
                self.session.add(payment)
            user = self._get_user_by_subscription_id(subscription_entity.get("id"))
            if user and user.has_active_subscription:
                self._deactivate_subscription(user, "Cancelled through payment gateway")
        else:
            payment = self.get_by_order_id(payment_entity.get("order_id") or "")
            if payment:
                payment.record_webhook_event(event, payment_entity)
                if event == "payment.captured" and payment.status != PaymentStatus.COMPLETED:
                    payment.mark_completed(payment_entity.get("id"))
                    user = self.session.get(User, payment.user_id)
                    if user:
                        self._activate_subscription(user, payment)
                elif event == "payment.failed":
                    payment.mark_failed(payment_entity.get("error_description") or "Payment failed")
                self.session.add(payment)
            if event not in ("payment.captured", "payment.failed"):
                logger.info(f"Unhandled webhook event: {event}")

        self.session.commit()
        return event

    def _get_by_subscription_id(self, subscription_id: Optional[str]) -> Payment | None:
        if not subscription_id:
            return None
        statement = (
            select(Payment)
            .where(Payment.razorpay_subscription_id == subscription_id)
            .order_by(col(Payment.created_at).desc())
        )
        return self.session.exec(statement).first()

    def _get_user_by_subscription_id(self, subscription_id: Optional[str]) -> User | None:
        if not subscription_id:
            return None
        statement = select(User).where(User.razorpay_subscription_id == subscription_id)
        return self.session.exec(statement).first()

    def _deactivate_subscription(self, user: User, reason: Optional[str] = None) -> None:
        user.subscription_status = SubscriptionStatus.CANCELLED
        if user.plan_id:
            plan = self.session.get(Plan, user.plan_id)
            if plan:
                plan.remove_subscriber()
                self.session.add(plan)
        active = self.session.exec(
            select(Subscription).where(
                Subscription.user_id == user.id,
                Subscription.status == GatewaySubscriptionStatus.ACTIVE,
            )
        ).all()
        for subscription in active:
            subscription.status = GatewaySubscriptionStatus.CANCELLED
            subscription.cancelled_at = utc_now()
            subscription.cancel_reason = reason
            self.session.add(subscription)
        self.session.add(user)

    def cancel_subscription(self, user: User, reason: Optional[str] = None) -> Payment:
        if not user.has_active_subscription:
            raise ValidationError("No active subscription to cancel")

        self._deactivate_subscription(user, reason)
        user.subscription_end = utc_now()
        record = Payment(
            user_id=user.id,
            type=PaymentType.SUBSCRIPTION,
            amount=0,
            currency=razorpay_settings.CURRENCY,
            status=PaymentStatus.CANCELLED,
            plan_id=user.plan_id,
            description=f"Subscription cancelled: {reason or 'User requested cancellation'}",
        )
        self.session.add(record)
        self.session.commit()
        self.session.refresh(user)
        self.session.refresh(record)
        logger.info(f"Subscription cancelled for user {user.id}")
        return record

    def get_history(
        self,
        user_id: Optional[UUID] = None,
        status: Optional[PaymentStatus] = None,
        skip: int = 0,
        limit: int = 10,
    ) -> tuple[list[Payment], int]:
        conditions = []
        if user_id:
            conditions.append(Payment.user_id == user_id)
        if status:
            conditions.append(Payment.status == status)

        count_statement = select(func.count(Payment.id))
        statement = select(Payment)
        if conditions:
            count_statement = count_statement.where(and_(*conditions))
            statement = statement.where(and_(*conditions))
        total_count = self.session.exec(count_statement).one()
        statement = statement.order_by(col(Payment.created_at).desc()).offset(skip).limit(limit)
        return list(self.session.exec(statement).all()), total_count

    def revenue_by_date_range(self, start: datetime, end: datetime) -> dict[str, float]:
        statement = select(Payment.type, Payment.amount).where(
            Payment.status == PaymentStatus.COMPLETED,
            Payment.created_at >= start,
            Payment.created_at <= end,
        )
        summary = {
            "total_revenue": 0.0,
            "subscription_revenue": 0.0,
            "prompt_revenue": 0.0,
            "transaction_count": 0,
        }
        for payment_type, amount in self.session.exec(statement).all():
            summary["total_revenue"] += amount
            summary["transaction_count"] += 1
            if payment_type == PaymentType.SUBSCRIPTION:
                summary["subscription_revenue"] += amount
            elif payment_type == PaymentType.PROMPT_PURCHASE:
                summary["prompt_revenue"] += amount
        return summary

    def monthly_revenue(self, year: int) -> list[dict[str, float]]:
        statement = select(Payment.created_at, Payment.amount).where(
            Payment.status == PaymentStatus.COMPLETED
        )
        months = {month: {"month": month, "revenue": 0.0, "count": 0} for month in range(1, 13)}
        for created_at, amount in self.session.exec(statement).all():
            if created_at.year != year:
                continue
            months[created_at.month]["revenue"] += amount
            months[created_at.month]["count"] += 1
        return list(months.values())
