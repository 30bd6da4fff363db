"""User Service - Encapsulates all user-related business logic."""

import logging
from typing import Optional
from uuid import UUID

from sqlmodel import Session, and_, col, func, or_, select

from promptify.core.errors import AuthenticationError, DuplicateError, NotFoundError, ValidationError
from promptify.core.security import get_password_hash, verify_password
from promptify.models import Plan, Role, SubscriptionStatus, User, utc_now
from promptify.schemas import AdminUserUpdate, ProfileUpdate, UserCreate

logger = logging.getLogger(__name__)

FREE_PLAN_NAME = "Free"


class UserService:
    """Service for user management and authentication."""

    def __init__(self, session: Session):
        self.session = session

    def create(self, user_create: UserCreate) -> User:
        """Create a new user."""
        if self.get_by_email(user_create.email):
            raise DuplicateError("User with this email already exists")
        db_obj = User(
            name=user_create.name,
            email=user_create.email.lower(),
            hashed_password=get_password_hash(user_create.password),
            role=user_create.role,
        )
        self.session.add(db_obj)
        self.session.commit()
        self.session.refresh(db_obj)
        return db_obj

    def register(self, user_create: UserCreate) -> User:
        """Create a regular user on the Free plan."""
        user = self.create(user_create)
        free_plan = self.session.exec(select(Plan).where(Plan.name == FREE_PLAN_NAME)).first()
        if free_plan:
            self.apply_plan(user, free_plan)
            self.session.add(user)
            self.session.commit()
            self.session.refresh(user)
        else:
            logger.warning("Free plan not found in database, user registered without a plan")
        logger.info(f"Registered user {user.id}")
        return user

    def get_by_id(self, user_id: UUID) -> User | None:
        return self.session.get(User, user_id)

    def get_by_email(self, email: str) -> User | None:
        """Get user by email."""
        statement = select(User).where(User.email == email.strip().lower())
        return self.session.exec(statement).first()

    def authenticate(self, email: str, password: str) -> User:
        user = self.get_by_email(email)
        if not user or not verify_password(password, user.hashed_password):
            raise AuthenticationError("Invalid email or password")
        if not user.is_active:
            raise AuthenticationError("Account is deactivated")
        user.last_active = utc_now()
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        return user

    def update_profile(self, user: User, profile_in: ProfileUpdate) -> User:
        data = profile_in.model_dump(exclude_unset=True)
        if data.get("name") is None:
            data.pop("name", None)
        preferences = data.pop("preferences", None) or {}
        data.update({key: value for key, value in preferences.items() if value is not None})
        user.sqlmodel_update(data)
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        return user

    def change_password(self, user: User, current_password: str, new_password: str) -> None:
        if not verify_password(current_password, user.hashed_password):
            raise ValidationError("Current password is incorrect")
        user.hashed_password = get_password_hash(new_password)
        self.session.add(user)
        self.session.commit()

    def apply_plan(self, user: User, plan: Plan) -> None:
        """Point the user at a plan and adopt its playground quota."""
        user.plan_id = plan.id
        user.playground_sessions_limit = plan.playground_sessions

    def increment_playground_usage(self, user: User) -> User:
        user.increment_playground_usage()
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        return user

    def get_all(
        self,
        skip: int = 0,
        limit: int = 20,
        search: Optional[str] = None,
        role: Optional[Role] = None,
        is_active: Optional[bool] = None,
        subscription_status: Optional[SubscriptionStatus] = None,
    ) -> tuple[list[User], int]:
        conditions = []
        if search:
            search_term = f"%{search}%"
            conditions.append(
                or_(col(User.name).ilike(search_term), col(User.email).ilike(search_term))
            )
        if role:
            conditions.append(User.role == role)
        if is_active is not None:
            conditions.append(User.is_active == is_active)
        if subscription_status:
            conditions.append(User.subscription_status == subscription_status)

        count_statement = select(func.count(User.id))
        statement = select(User)
        if conditions:
            count_statement = count_statement.where(and_(*conditions))
            statement = statement.where(and_(*conditions))
        total_count = self.session.exec(count_statement).one()

        statement = statement.order_by(col(User.created_at).desc()).offset(skip).limit(limit)
        return list(self.session.exec(statement).all()), total_count

    def admin_update(self, user: User, user_in: AdminUserUpdate) -> User:
        data = user_in.model_dump(exclude_unset=True, exclude_none=True)
        plan_id = data.pop("plan_id", None)
        if plan_id is not None:
            plan = self.session.get(Plan, plan_id)
            if not plan:
                raise NotFoundError("Plan")
            self.apply_plan(user, plan)
        user.sqlmodel_update(data)
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        return user
