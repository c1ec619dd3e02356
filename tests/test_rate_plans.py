"""Tests for rate plan selection priority."""

from staydesk.domain.models import RatePlan
from staydesk.domain.rate_plans import (
    PlanNotFoundError,
    select_rate_plan,
    selection_path,
)

from helpers import FakeRatePlanRepository


def _plan(plan_id, code, room_type_id=None):
    return RatePlan(
        id=plan_id,
        code=code,
        name=f"{code} plan",
        currency="USD",
        room_type_id=room_type_id,
    )


class TestExplicitId:
    def test_explicit_id_returns_plan(self):
        repo = FakeRatePlanRepository([_plan(1, "BAR"), _plan(5, "PROMO", 7)])
        plan = select_rate_plan(repo, rate_plan_id=5, room_type_id=3)
        assert plan.id == 5

    def test_unknown_id_does_not_fall_back(self):
        repo = FakeRatePlanRepository([_plan(1, "BAR"), _plan(2, "BAR", 7)])
        assert select_rate_plan(repo, rate_plan_id=99, room_type_id=7) is None
        assert repo.find_calls == []


class TestRoomTypePriority:
    def test_room_type_code_beats_global_code_with_lower_id(self):
        repo = FakeRatePlanRepository([_plan(1, "BAR"), _plan(2, "BAR", 7)])
        plan = select_rate_plan(repo, room_type_id=7)
        assert plan.id == 2

    def test_global_code_when_room_type_has_no_such_code(self):
        repo = FakeRatePlanRepository([_plan(1, "BAR"), _plan(2, "PROMO", 7)])
        plan = select_rate_plan(repo, room_type_id=7)
        assert plan.id == 1

    def test_any_room_type_plan_before_any_global(self):
        repo = FakeRatePlanRepository([_plan(1, "NRF"), _plan(4, "PROMO", 7), _plan(3, "PKG", 7)])
        plan = select_rate_plan(repo, room_type_id=7)
        assert plan.id == 3

    def test_any_global_plan_last(self):
        repo = FakeRatePlanRepository([_plan(6, "NRF"), _plan(2, "PROMO", 8)])
        plan = select_rate_plan(repo, room_type_id=7)
        assert plan.id == 6

    def test_lowest_id_wins_within_tier(self):
        repo = FakeRatePlanRepository([_plan(9, "BAR", 7), _plan(4, "BAR", 7)])
        assert select_rate_plan(repo, room_type_id=7).id == 4

    def test_preferred_code(self):
        repo = FakeRatePlanRepository([_plan(1, "BAR", 7), _plan(2, "PROMO", 7)])
        plan = select_rate_plan(repo, room_type_id=7, preferred_code="PROMO")
        assert plan.id == 2

    def test_empty_preferred_code_means_bar(self):
        repo = FakeRatePlanRepository([_plan(1, "PROMO", 7), _plan(2, "BAR", 7)])
        plan = select_rate_plan(repo, room_type_id=7, preferred_code=None)
        assert plan.id == 2

    def test_lookup_order(self):
        repo = FakeRatePlanRepository([])
        assert select_rate_plan(repo, room_type_id=7) is None
        assert repo.find_calls == [(7, "BAR"), (None, "BAR"), (7, None), (None, None)]


class TestNoRoomType:
    def test_global_code_then_any_global(self):
        repo = FakeRatePlanRepository([_plan(3, "NRF"), _plan(8, "BAR", 7)])
        assert select_rate_plan(repo).id == 3
        assert repo.find_calls == [(None, "BAR"), (None, None)]

    def test_no_plans(self):
        assert select_rate_plan(FakeRatePlanRepository([])) is None


class TestSelectionPath:
    def test_rate_plan_id_wins(self):
        assert selection_path(rate_plan_id=1, room_type_id=7) == "rate_plan_id"

    def test_room_type(self):
        assert selection_path(rate_plan_id=None, room_type_id=7) == "room_type_id"

    def test_fallback(self):
        assert selection_path(rate_plan_id=None, room_type_id=None) == "fallback"


class TestPlanNotFoundError:
    def test_carries_criteria(self):
        exc = PlanNotFoundError(rate_plan_id=99, room_type_id=7, code="BAR")
        assert str(exc) == "Rate plan not found"
        assert (exc.rate_plan_id, exc.room_type_id, exc.code) == (99, 7, "BAR")
