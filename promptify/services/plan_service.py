"""Plan Service - Encapsulates all plan-related business logic."""

from typing import Optional
from uuid import UUID

from sqlmodel import Session, and_, col, func, or_, select

from promptify.core.errors import DuplicateError
from promptify.models import Plan
from promptify.schemas.plan import PlanCreate, PlanUpdate, flatten_plan_data


class PlanService:
    """Service for plan management."""

    def __init__(self, session: Session):
        self.session = session

    def get_active_plans(self) -> list[Plan]:
        """Active and visible plans, cheapest first within the same display order."""
        statement = (
            select(Plan)
            .where(Plan.is_active == True, Plan.is_visible == True)  # noqa: E712
            .order_by(col(Plan.order).asc(), col(Plan.monthly_price).asc())
        )
        return list(self.session.exec(statement).all())

    def get_popular_plan(self) -> Plan | None:
        statement = select(Plan).where(
            Plan.is_active == True, Plan.popular == True  # noqa: E712
        )
        return self.session.exec(statement).first()

    def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
        search: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> tuple[list[Plan], int]:
        conditions = []
        if search:
            search_term = f"%{search}%"
            conditions.append(
                or_(col(Plan.name).ilike(search_term), col(Plan.description).ilike(search_term))
            )
        if is_active is not None:
            conditions.append(Plan.is_active == is_active)

        count_statement = select(func.count(Plan.id))
        statement = select(Plan)
        if conditions:
            count_statement = count_statement.where(and_(*conditions))
            statement = statement.where(and_(*conditions))
        total_count = self.session.exec(count_statement).one()

        statement = statement.order_by(col(Plan.order).asc()).offset(skip).limit(limit)
        return list(self.session.exec(statement).all()), total_count

    def get_by_id(self, plan_id: UUID) -> Plan | None:
        """Get plan by ID."""
        return self.session.get(Plan, plan_id)

    def get_by_name(self, name: str) -> Plan | None:
        """Get plan by name."""
        statement = select(Plan).where(Plan.name == name)
        return self.session.exec(statement).first()

    def create(self, plan_in: PlanCreate, created_by_id: UUID | None = None) -> Plan:
        """Create a new plan."""
        if self.get_by_name(plan_in.name):
            raise DuplicateError(f"Plan '{plan_in.name}' already exists")
        db_obj = Plan(
            **flatten_plan_data(plan_in.model_dump()),
            created_by_id=created_by_id,
            is_admin_created=created_by_id is not None,
        )
        self.session.add(db_obj)
        self.session.commit()
        self.session.refresh(db_obj)
        return db_obj

    def update(self, db_plan: Plan, plan_in: PlanUpdate) -> Plan:
        """Update plan information."""
        plan_data = flatten_plan_data(plan_in.model_dump(exclude_unset=True, exclude_none=True))
        new_name = plan_data.get("name")
        if new_name and new_name != db_plan.name and self.get_by_name(new_name):
            raise DuplicateError(f"Plan '{new_name}' already exists")
        db_plan.sqlmodel_update(plan_data)
        self.session.add(db_plan)
        self.session.commit()
        self.session.refresh(db_plan)
        return db_plan
