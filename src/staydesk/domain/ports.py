"""Data-access interfaces the engines depend on.

PostgreSQL implementations live in staydesk.infra.repositories; tests use
in-memory fakes. Implementations are read-only.
"""

from __future__ import annotations

from datetime import date
from typing import Protocol, Sequence

from staydesk.domain.models import (
    RatePlan,
    RatePlanPrice,
    RateRestriction,
    Reservation,
)


class RatePlanRepository(Protocol):
    def get_rate_plan(self, rate_plan_id: int) -> RatePlan | None: ...

    def find_rate_plan(
        self,
        *,
        room_type_id: int | None,
        code: str | None = None,
    ) -> RatePlan | None:
        """First plan (lowest id) for a room type, or global when room_type_id is None.

        code=None matches any code.
        """
        ...

    def find_prices(self, rate_plan_id: int, dates: Sequence[str]) -> list[RatePlanPrice]: ...

    def find_restrictions(
        self, rate_plan_id: int, dates: Sequence[str]
    ) -> list[RateRestriction]: ...


class InventoryRepository(Protocol):
    def count_rooms(self, room_type_id: int, statuses: Sequence[str]) -> int: ...


class ReservationRepository(Protocol):
    def find_overlapping_reservations(
        self,
        check_in: date,
        check_out: date,
        *,
        room_type_id: int,
    ) -> list[Reservation]:
        """Non-cancelled reservations overlapping [check_in, check_out).

        Only reservations holding at least one line of room_type_id are
        returned, with their lines filtered to that room type.
        """
        ...
