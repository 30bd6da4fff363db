"""Services package for the Promptify API."""

from .user_service import UserService
from .plan_service import PlanService
from .prompt_service import PromptService
from .payment_service import PaymentService
from .playground_service import PlaygroundService
from .analytics_service import AnalyticsService

__all__ = [
    "UserService",
    "PlanService",
    "PromptService",
    "PaymentService",
    "PlaygroundService",
    "AnalyticsService",
]
