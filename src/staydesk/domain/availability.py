"""Availability engine - per-day free inventory for a room type.

Inventory is the number of sellable rooms (vacant or occupied) of the type.
Demand comes from non-cancelled reservations overlapping the requested stay:

    existing.check_in < requested.check_out AND existing.check_out > requested.check_in

Strict inequality: a reservation departing on the requested check-in day does
not overlap (same-day turnover).

Each reservation's room-type quantity is applied to every night of its own
stay; nights outside the requested window simply find no day to count on.
A stay is bookable only if every night has enough rooms, so the verdict uses
the minimum across nights.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from staydesk.domain.dates import format_date_only, nights_between
from staydesk.domain.models import CANCELLED_STATUS, SELLABLE_ROOM_STATUSES
from staydesk.domain.ports import InventoryRepository, ReservationRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DayAvailability:
    date: str
    available: int


@dataclass(frozen=True)
class AvailabilityResult:
    room_type_id: int
    check_in: str
    check_out: str
    requested_rooms: int
    total_rooms: int
    daily: tuple[DayAvailability, ...]
    min_available: int
    can_accommodate: bool

    def to_dict(self) -> dict:
        return {
            "room_type_id": self.room_type_id,
            "check_in": self.check_in,
            "check_out": self.check_out,
            "requested_rooms": self.requested_rooms,
            "total_rooms": self.total_rooms,
            "daily": [{"date": d.date, "available": d.available} for d in self.daily],
            "min_available": self.min_available,
            "can_accommodate": self.can_accommodate,
        }


class AvailabilityEngine:
    """Computes availability from injected inventory and reservation repositories."""

    def __init__(
        self,
        inventory: InventoryRepository,
        reservations: ReservationRepository,
    ) -> None:
        self.inventory = inventory
        self.reservations = reservations

    def occupancy_by_day(
        self,
        *,
        room_type_id: int,
        check_in: date,
        check_out: date,
    ) -> dict[str, int]:
        """Rooms of the type committed per requested night."""
        occupancy = {night: 0 for night in nights_between(check_in, check_out)}
        if not occupancy:
            return occupancy

        overlapping = self.reservations.find_overlapping_reservations(
            check_in,
            check_out,
            room_type_id=room_type_id,
        )
        for reservation in overlapping:
            if reservation.status == CANCELLED_STATUS:
                continue
            qty = reservation.qty_for_room_type(room_type_id)
            if qty == 0:
                continue
            for night in nights_between(reservation.check_in, reservation.check_out):
                if night in occupancy:
                    occupancy[night] += qty

        return occupancy

    def search(
        self,
        *,
        room_type_id: int,
        check_in: date,
        check_out: date,
        requested_rooms: int = 1,
    ) -> AvailabilityResult:
        """Search availability for requested_rooms rooms over [check_in, check_out)."""
        total_rooms = self.inventory.count_rooms(room_type_id, SELLABLE_ROOM_STATUSES)
        occupancy = self.occupancy_by_day(
            room_type_id=room_type_id,
            check_in=check_in,
            check_out=check_out,
        )

        daily: list[DayAvailability] = []
        for night, booked in occupancy.items():
            available_raw = total_rooms - booked
            if available_raw < 0:
                logger.warning(
                    "overbooking detected",
                    extra={
                        "extra_fields": {
                            "room_type_id": room_type_id,
                            "date": night,
                            "total_rooms": total_rooms,
                            "booked": booked,
                        }
                    },
                )
            daily.append(DayAvailability(date=night, available=max(0, available_raw)))

        min_available = min((d.available for d in daily), default=total_rooms)

        result = AvailabilityResult(
            room_type_id=room_type_id,
            check_in=format_date_only(check_in),
            check_out=format_date_only(check_out),
            requested_rooms=requested_rooms,
            total_rooms=total_rooms,
            daily=tuple(daily),
            min_available=min_available,
            can_accommodate=min_available >= requested_rooms,
        )

        logger.info(
            "availability computed",
            extra={
                "extra_fields": {
                    "room_type_id": room_type_id,
                    "check_in": result.check_in,
                    "check_out": result.check_out,
                    "total_rooms": total_rooms,
                    "min_available": min_available,
                    "requested_rooms": requested_rooms,
                    "can_accommodate": result.can_accommodate,
                }
            },
        )
        return result
