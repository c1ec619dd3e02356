"""Rate plan selection.

Priority when no explicit id is given:
  (code, room type) -> (code, global) -> (any plan of room type) -> (any global)

A room-type-specific plan with the requested code beats a global plan with
that code, even when the global plan has a lower id.
"""

from __future__ import annotations

from typing import Literal

from staydesk.domain.models import RatePlan
from staydesk.domain.ports import RatePlanRepository

DEFAULT_PLAN_CODE = "BAR"

SelectedBy = Literal["rate_plan_id", "room_type_id", "fallback"]


class PlanNotFoundError(Exception):
    """Raised when no rate plan resolves for the selection criteria."""

    def __init__(
        self,
        *,
        rate_plan_id: int | None = None,
        room_type_id: int | None = None,
        code: str | None = None,
    ) -> None:
        self.rate_plan_id = rate_plan_id
        self.room_type_id = room_type_id
        self.code = code
        super().__init__("Rate plan not found")


def select_rate_plan(
    repo: RatePlanRepository,
    *,
    rate_plan_id: int | None = None,
    room_type_id: int | None = None,
    preferred_code: str | None = DEFAULT_PLAN_CODE,
) -> RatePlan | None:
    """Resolve the single applicable rate plan, or None.

    An explicit rate_plan_id is looked up directly and never falls back.
    """
    if rate_plan_id is not None:
        return repo.get_rate_plan(rate_plan_id)

    code = preferred_code or DEFAULT_PLAN_CODE

    plan = repo.find_rate_plan(room_type_id=room_type_id, code=code)
    if plan is None and room_type_id is not None:
        plan = repo.find_rate_plan(room_type_id=None, code=code)
    if plan is None and room_type_id is not None:
        plan = repo.find_rate_plan(room_type_id=room_type_id)
    if plan is None:
        plan = repo.find_rate_plan(room_type_id=None)
    return plan


def selection_path(
    *,
    rate_plan_id: int | None,
    room_type_id: int | None,
) -> SelectedBy:
    """Which input drove the selection, echoed back in quotes."""
    if rate_plan_id is not None:
        return "rate_plan_id"
    if room_type_id is not None:
        return "room_type_id"
    return "fallback"
