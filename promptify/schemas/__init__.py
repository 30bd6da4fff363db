from promptify.schemas.auth import AuthData, LoginRequest, RegisterRequest, TokenPayload
from promptify.schemas.common import ApiResponse, Message, Pagination, ok
from promptify.schemas.payment import (
    CancelSubscriptionRequest,
    CreateOrderRequest,
    OrderResponse,
    PaymentPublic,
    VerifyPaymentRequest,
    payment_to_public,
)
from promptify.schemas.plan import (
    PlanCreate,
    PlanFeature,
    PlanPublic,
    PlanUpdate,
    flatten_plan_data,
    plan_to_public,
)
from promptify.schemas.playground import (
    ChatRequest,
    ChatResponse,
    ChatUsage,
    SessionEndRequest,
    SessionPublic,
    SessionStartRequest,
    session_to_public,
)
from promptify.schemas.prompt import (
    AdminPromptCreate,
    PromptCreate,
    PromptModeration,
    PromptPublic,
    PromptUpdate,
    ReviewCreate,
    prompt_to_public,
)
from promptify.schemas.user import (
    AdminUserUpdate,
    ChangePasswordRequest,
    ProfileUpdate,
    UserCreate,
    UserPublic,
    user_to_public,
)

__all__ = [
    "AdminPromptCreate",
    "AdminUserUpdate",
    "ApiResponse",
    "AuthData",
    "CancelSubscriptionRequest",
    "ChangePasswordRequest",
    "ChatRequest",
    "ChatResponse",
    "ChatUsage",
    "CreateOrderRequest",
    "LoginRequest",
    "Message",
    "OrderResponse",
    "Pagination",
    "PaymentPublic",
    "PlanCreate",
    "PlanFeature",
    "PlanPublic",
    "PlanUpdate",
    "ProfileUpdate",
    "PromptCreate",
    "PromptModeration",
    "PromptPublic",
    "PromptUpdate",
    "RegisterRequest",
    "ReviewCreate",
    "SessionEndRequest",
    "SessionPublic",
    "SessionStartRequest",
    "TokenPayload",
    "UserCreate",
    "UserPublic",
    "VerifyPaymentRequest",
    "flatten_plan_data",
    "ok",
    "payment_to_public",
    "plan_to_public",
    "prompt_to_public",
    "session_to_public",
    "user_to_public",
]
