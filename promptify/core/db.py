import logging

from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine, select

from promptify.core.config import database_settings, settings
from promptify.models import Plan, Role, User
from promptify.schemas import UserCreate

logger = logging.getLogger(__name__)


def build_engine(url: str | None = None):
    url = url or database_settings.SQLALCHEMY_DATABASE_URI
    if url.startswith("sqlite"):
        # one shared connection so in-memory databases survive across sessions
        return create_engine(
            url,
            echo=database_settings.ECHO,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(
        url,
        echo=database_settings.ECHO,
        pool_size=database_settings.POOL_SIZE,
        max_overflow=database_settings.MAX_OVERFLOW,
        pool_pre_ping=True,
        pool_recycle=3600,
    )


engine = build_engine()


DEFAULT_PLANS = [
    {
        "name": "Free",
        "description": "Perfect for getting started with AI prompts",
        "monthly_price": 0,
        "yearly_price": 0,
        "features": [
            {"name": "Basic Prompts", "description": "Access to free prompts", "included": True},
            {"name": "Playground Access", "description": "10 playground sessions per month", "included": True},
            {"name": "Community Support", "description": "Help from the community", "included": True},
            {"name": "Premium Prompts", "description": "Access to premium prompts", "included": False},
        ],
        "playground_sessions": 10,
        "prompts_per_month": 5,
        "team_members": 1,
        "api_calls": 0,
        "storage_gb": 0.5,
        "color": "#10B981",
        "icon": "zap",
        "order": 1,
    },
    {
        "name": "Pro",
        "description": "For professionals who need more power",
        "monthly_price": 29,
        "yearly_price": 290,
        "features": [
            {"name": "Basic Prompts", "description": "Access to free prompts", "included": True},
            {"name": "Premium Prompts", "description": "Access to premium prompts", "included": True},
            {"name": "Unlimited Playground", "description": "Unlimited playground sessions", "included": True},
            {"name": "Sell Prompts", "description": "Create and sell paid prompts", "included": True},
            {"name": "Advanced Analytics", "description": "Detailed performance insights", "included": True},
            {"name": "Priority Support", "description": "Faster response times", "included": True},
        ],
        "playground_sessions": -1,
        "prompts_per_month": -1,
        "team_members": 5,
        "api_calls": 10000,
        "storage_gb": 10,
        "access_premium_prompts": True,
        "create_paid_prompts": True,
        "advanced_analytics": True,
        "priority_support": True,
        "api_access": True,
        "color": "#3B82F6",
        "icon": "star",
        "popular": True,
        "recommended": True,
        "order": 2,
        "trial_days": 7,
    },
    {
        "name": "Enterprise",
        "description": "For teams and organizations at scale",
        "monthly_price": 99,
        "yearly_price": 990,
        "features": [
            {"name": "Everything in Pro", "description": "All Pro features", "included": True},
            {"name": "Unlimited Team Members", "description": "Collaborate with your whole team", "included": True},
            {"name": "White Label", "description": "Remove Promptify branding", "included": True},
            {"name": "Custom Integrations", "description": "Connect your own tools", "included": True},
            {"name": "Dedicated Support", "description": "A dedicated account manager", "included": True},
        ],
        "playground_sessions": -1,
        "prompts_per_month": -1,
        "team_members": -1,
        "api_calls": -1,
        "storage_gb": 100,
        "access_premium_prompts": True,
        "create_paid_prompts": True,
        "advanced_analytics": True,
        "priority_support": True,
        "api_access": True,
        "white_label": True,
        "custom_integrations": True,
        "color": "#8B5CF6",
        "icon": "crown",
        "order": 3,
        "trial_days": 14,
    },
]


def create_tables(bind=None) -> None:
    SQLModel.metadata.create_all(bind or engine)


def init_db(session: Session) -> None:
    from promptify.services.user_service import UserService

    create_tables(session.get_bind())

    # 1. Seed default plans if not exists
    for plan_data in DEFAULT_PLANS:
        existing_plan = session.exec(
            select(Plan).where(Plan.name == plan_data["name"])
        ).first()

        if not existing_plan:
            session.add(Plan(**plan_data))
            session.commit()
            logger.info(f"Created {plan_data['name']} plan")

    # 2. Seed admin if not exists
    user = session.exec(
        select(User).where(User.email == settings.FIRST_SUPERUSER.lower())
    ).first()
    if not user:
        user_in = UserCreate(
            name=settings.FIRST_SUPERUSER_NAME,
            email=settings.FIRST_SUPERUSER,
            password=settings.FIRST_SUPERUSER_PASSWORD,
            role=Role.ADMIN,
        )
        user = UserService(session).create(user_in)
        logger.info(f"Created superuser: {user.email}")
