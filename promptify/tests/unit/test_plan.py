"""Unit tests for Plan pricing helpers and plan listing."""
import pytest
from pydantic import ValidationError
from sqlmodel import Session

from promptify.models import BillingPeriod, Plan
from promptify.schemas import PlanCreate
from promptify.services import PlanService


def make_plan(**overrides) -> Plan:
    fields = {"name": "Test", "monthly_price": 10, "yearly_price": 100}
    fields.update(overrides)
    return Plan(**fields)


# =============================================================================
# PRICING
# =============================================================================

class TestPlanPricing:
    def test_yearly_discount(self):
        """
        Given: 10/month and 100/year
        When: yearly_discount is read
        Then: round((120 - 100) / 120 * 100) == 17
        """
        assert make_plan().yearly_discount == 17

    def test_yearly_discount_zero_when_price_missing(self):
        assert make_plan(monthly_price=0).yearly_discount == 0
        assert make_plan(yearly_price=None).yearly_discount == 0
        assert make_plan(yearly_price=0).yearly_discount == 0

    def test_effective_monthly_price_uses_yearly(self):
        assert make_plan(monthly_price=29, yearly_price=290).effective_monthly_price == pytest.approx(24.17)

    def test_effective_monthly_price_without_yearly(self):
        assert make_plan(monthly_price=29, yearly_price=None).effective_monthly_price == 29

    def test_price_for_period(self):
        plan = make_plan()
        assert plan.price_for(BillingPeriod.MONTHLY) == 10
        assert plan.price_for(BillingPeriod.YEARLY) == 100


# =============================================================================
# FEATURES / PERMISSIONS / SUBSCRIBERS
# =============================================================================

class TestPlanFeatures:
    def test_has_feature_is_case_insensitive_and_respects_included(self):
        plan = make_plan(
            features=[
                {"name": "Playground Access", "included": True},
                {"name": "Premium Prompts", "included": False},
            ]
        )
        assert plan.has_feature("playground access")
        assert not plan.has_feature("Premium Prompts")
        assert not plan.has_feature("Unknown")

    def test_has_permission(self):
        plan = make_plan(api_access=True)
        assert plan.has_permission("api_access")
        assert not plan.has_permission("white_label")
        assert not plan.has_permission("name")

    def test_subscriber_counters(self):
        plan = make_plan()
        plan.add_subscriber(29)
        plan.add_subscriber(29)
        plan.remove_subscriber()
        assert plan.total_subscribers == 2
        assert plan.active_subscribers == 1
        assert plan.total_revenue == 58

    def test_remove_subscriber_floors_at_zero(self):
        plan = make_plan()
        plan.remove_subscriber()
        assert plan.active_subscribers == 0


# =============================================================================
# LISTING
# =============================================================================

class TestActivePlans:
    def test_seeded_plans_listed_in_display_order(self, session: Session):
        names = [plan.name for plan in PlanService(session).get_active_plans()]
        assert names == ["Free", "Pro", "Enterprise"]

    def test_listed_iff_active_and_visible(self, session: Session):
        """
        Given: One hidden plan and one inactive plan
        When: get_active_plans is called
        Then: Neither is listed
        """
        session.add(make_plan(name="Hidden", is_visible=False))
        session.add(make_plan(name="Retired", is_active=False))
        session.add(make_plan(name="Shown", order=5))
        session.commit()

        names = {plan.name for plan in PlanService(session).get_active_plans()}
        assert "Shown" in names
        assert "Hidden" not in names
        assert "Retired" not in names

    def test_same_order_sorted_by_monthly_price(self, session: Session):
        session.add(make_plan(name="Expensive", order=9, monthly_price=50))
        session.add(make_plan(name="Cheap", order=9, monthly_price=5))
        session.commit()

        names = [plan.name for plan in PlanService(session).get_active_plans()]
        assert names.index("Cheap") < names.index("Expensive")


class TestPlanCreateSchema:
    def test_requires_at_least_one_feature(self):
        with pytest.raises(ValidationError):
            PlanCreate(name="Empty", monthly_price=5, features=[])

    def test_rejects_playground_limit_below_minus_one(self):
        with pytest.raises(ValidationError):
            PlanCreate(
                name="Broken",
                monthly_price=5,
                features=[{"name": "Thing", "included": True}],
                limits={"playground_sessions": -2},
            )
