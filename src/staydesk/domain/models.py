"""Read models consumed by the quote and availability engines.

Rows are loaded by the repositories with raw SQL and handed to the domain as
frozen dataclasses. Money is always Decimal (NUMERIC(10,2) columns).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

# Rooms in these statuses are physically sellable (ooo / oos are excluded).
SELLABLE_ROOM_STATUSES = ("vacant", "occupied")

CANCELLED_STATUS = "cancelled"


@dataclass(frozen=True)
class RatePlan:
    """Pricing plan. room_type_id=None means a global (cross-type) plan."""

    id: int
    code: str
    name: str
    currency: str
    room_type_id: int | None = None


@dataclass(frozen=True)
class RatePlanPrice:
    rate_plan_id: int
    date: date
    price_base: Decimal
    price_extra_adult: Decimal = Decimal("0.00")
    price_extra_child: Decimal = Decimal("0.00")
    closed: bool = False


@dataclass(frozen=True)
class RateRestriction:
    """Per-date stay restriction.

    advance_min / advance_max are stored for booking-window rules and are not
    evaluated by the quote engine.
    """

    rate_plan_id: int
    date: date
    min_stay: int | None = None
    max_stay: int | None = None
    cta: bool = False
    ctd: bool = False
    advance_min: int | None = None
    advance_max: int | None = None


@dataclass(frozen=True)
class ReservationRoom:
    room_type_id: int
    qty: int = 1


@dataclass(frozen=True)
class Reservation:
    """Reservation header with its room lines.

    check_in / check_out form a half-open range: check_out is the departure
    day and is not a night of the stay.
    """

    id: int
    code: str
    check_in: date
    check_out: date
    status: str
    rooms: tuple[ReservationRoom, ...] = field(default_factory=tuple)

    def qty_for_room_type(self, room_type_id: int) -> int:
        """Total rooms of a type held by this reservation."""
        return sum(line.qty for line in self.rooms if line.room_type_id == room_type_id)
