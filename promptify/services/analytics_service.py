"""Analytics Service - dashboards, period reports and the admin activity feed."""

from collections import Counter
from datetime import datetime, timedelta
from typing import Any, Optional
from uuid import UUID

from sqlmodel import Session, col, func, select

from promptify.models import (
    DailyAnalytics,
    Payment,
    PaymentStatus,
    Plan,
    Prompt,
    PromptStatus,
    SubscriptionStatus,
    User,
    as_utc,
    utc_now,
)
from promptify.services.payment_service import PaymentService

PERIOD_DAYS = {"7d": 7, "30d": 30, "90d": 90, "1y": 365}
DEFAULT_PERIOD = "30d"
MAX_ACTIVITY_ITEMS = 50


def period_start(period: str, now: Optional[datetime] = None) -> datetime:
    """Unknown periods fall back to 30 days."""
    now = now or utc_now()
    return now - timedelta(days=PERIOD_DAYS.get(period, PERIOD_DAYS[DEFAULT_PERIOD]))


def calculate_growth(current: float, previous: float) -> float:
    """Percent change from previous to current; 100 when starting from zero."""
    if not previous:
        return 100.0 if current else 0.0
    return round((current - previous) / previous * 100, 1)


def _daily_counts(timestamps: list[datetime]) -> list[dict[str, Any]]:
    counts = Counter(as_utc(ts).strftime("%Y-%m-%d") for ts in timestamps)
    return [{"date": day, "count": counts[day]} for day in sorted(counts)]


class AnalyticsService:
    """Read-only reporting over users, prompts and payments."""

    def __init__(self, session: Session):
        self.session = session

    def _count(self, model, *conditions) -> int:
        statement = select(func.count(model.id))
        if conditions:
            statement = statement.where(*conditions)
        return self.session.exec(statement).one()

    def _revenue(self, start: datetime, end: datetime) -> float:
        statement = select(func.coalesce(func.sum(Payment.amount), 0)).where(
            Payment.status == PaymentStatus.COMPLETED,
            Payment.created_at >= start,
            Payment.created_at < end,
        )
        return float(self.session.exec(statement).one())

    def admin_dashboard(self) -> dict[str, Any]:
        """Platform totals, with the last 30 days compared to the 30 before."""
        now = utc_now()
        thirty_days_ago = now - timedelta(days=30)
        sixty_days_ago = now - timedelta(days=60)

        new_users = self._count(User, User.created_at >= thirty_days_ago)
        previous_users = self._count(
            User, User.created_at >= sixty_days_ago, User.created_at < thirty_days_ago
        )
        revenue = self._revenue(thirty_days_ago, now)
        previous_revenue = self._revenue(sixty_days_ago, thirty_days_ago)
        views, downloads = self.session.exec(
            select(
                func.coalesce(func.sum(Prompt.views), 0),
                func.coalesce(func.sum(Prompt.downloads), 0),
            )
        ).one()

        return {
            "users": {
                "total": self._count(User),
                "new": new_users,
                "premium": self._count(User, User.subscription_status == SubscriptionStatus.ACTIVE),
                "growth": calculate_growth(new_users, previous_users),
            },
            "prompts": {
                "total": self._count(Prompt),
                "published": self._count(Prompt, Prompt.status == PromptStatus.PUBLISHED),
                "pending": self._count(Prompt, Prompt.status == PromptStatus.DRAFT),
                "new": self._count(Prompt, Prompt.created_at >= thirty_days_ago),
            },
            "revenue": {
                "total": revenue,
                "previous": previous_revenue,
                "growth": calculate_growth(revenue, previous_revenue),
            },
            "analytics": {
                "total_views": int(views),
                "total_downloads": int(downloads),
            },
        }

    def admin_analytics(self, period: str = DEFAULT_PERIOD) -> dict[str, Any]:
        end = utc_now()
        start = period_start(period, end)
        daily = self.session.exec(
            select(DailyAnalytics)
            .where(DailyAnalytics.day >= start.date(), DailyAnalytics.day <= end.date())
            .order_by(col(DailyAnalytics.day).asc())
        ).all()
        signups = self.session.exec(
            select(User.created_at).where(User.created_at >= start, User.created_at <= end)
        ).all()
        return {
            "analytics": [row.model_dump(exclude={"id", "created_at", "updated_at"}) for row in daily],
            "revenue": PaymentService(self.session).revenue_by_date_range(start, end),
            "user_growth": _daily_counts(list(signups)),
            "period": period,
        }

    def user_analytics(self, user_id: UUID, period: str = DEFAULT_PERIOD) -> dict[str, Any]:
        """Totals and a per-day breakdown for prompts the user created in the period."""
        end = utc_now()
        start = period_start(period, end)
        conditions = (
            Prompt.author_id == user_id,
            Prompt.created_at >= start,
            Prompt.created_at <= end,
        )
        total, views, downloads, likes, revenue, rating = self.session.exec(
            select(
                func.count(Prompt.id),
                func.coalesce(func.sum(Prompt.views), 0),
                func.coalesce(func.sum(Prompt.downloads), 0),
                func.coalesce(func.sum(Prompt.likes), 0),
                func.coalesce(func.sum(Prompt.revenue), 0),
                func.avg(Prompt.rating_average),
            ).where(*conditions)
        ).one()
        created = self.session.exec(select(Prompt.created_at).where(*conditions)).all()
        return {
            "summary": {
                "total_prompts": total,
                "total_views": int(views),
                "total_downloads": int(downloads),
                "total_likes": int(likes),
                "total_revenue": float(revenue),
                "average_rating": round(float(rating), 1) if rating is not None else 0,
            },
            "daily": _daily_counts(list(created)),
            "period": period,
        }

    def recent_activity(self, limit: int = 20) -> list[dict[str, Any]]:
        """Newest registrations, prompt submissions and upgrades, merged by time."""
        limit = max(1, min(limit, MAX_ACTIVITY_ITEMS))
        per_source = -(-limit // 3)

        users = self.session.exec(
            select(User).order_by(col(User.created_at).desc()).limit(per_source)
        ).all()
        prompts = self.session.exec(
            select(Prompt).order_by(col(Prompt.created_at).desc()).limit(per_source)
        ).all()
        payments = self.session.exec(
            select(Payment)
            .where(Payment.status == PaymentStatus.COMPLETED)
            .order_by(col(Payment.created_at).desc())
            .limit(per_source)
        ).all()

        activities: list[dict[str, Any]] = []
        for user in users:
            activities.append({
                "id": user.id,
                "type": "user_registration",
                "title": "New User Registration",
                "description": f"{user.name} joined the platform",
                "user": {
                    "name": user.name,
                    "email": user.email,
                    "plan": user.plan.name if user.plan else "Free",
                },
                "timestamp": as_utc(user.created_at),
                "icon": "user-plus",
            })
        for prompt in prompts:
            author_name = prompt.author.name if prompt.author else "Unknown"
            activities.append({
                "id": prompt.id,
                "type": "prompt_submission",
                "title": "New Prompt Submitted",
                "description": f'"{prompt.title}" by {author_name}',
                "prompt": {
                    "title": prompt.title,
                    "category": prompt.category,
                    "status": prompt.status,
                },
                "user": {"name": author_name},
                "timestamp": as_utc(prompt.created_at),
                "icon": "file-text",
            })
        for payment in payments:
            plan = self.session.get(Plan, payment.plan_id) if payment.plan_id else None
            plan_name = plan.name if plan else "Premium"
            buyer = payment.user
            activities.append({
                "id": payment.id,
                "type": "plan_upgrade",
                "title": "Plan Upgrade",
                "description": f"{buyer.name if buyer else 'User'} upgraded to {plan_name}",
                "user": {
                    "name": buyer.name if buyer else "Unknown",
                    "email": buyer.email if buyer else None,
                },
                "payment": {"plan": plan_name, "amount": payment.amount},
                "timestamp": as_utc(payment.created_at),
                "icon": "credit-card",
            })

        activities.sort(key=lambda item: item["timestamp"], reverse=True)
        return activities[:limit]
