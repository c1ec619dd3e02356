"""Availability search endpoint.

GET /availability/search: per-day free rooms of a room type over
[check_in, check_out) and whether `rooms` rooms fit on every night.
Requires the reservations.view permission.
"""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query

from staydesk.api.auth import CurrentUser
from staydesk.api.rbac import PERM_RESERVATIONS_VIEW, require_permission
from staydesk.api.schemas import AvailabilityQuery, parse_query
from staydesk.domain.availability import AvailabilityEngine
from staydesk.infra.repositories.inventory_repository import PgInventoryRepository
from staydesk.infra.repositories.reservations_repository import PgReservationRepository

router = APIRouter(prefix="/availability", tags=["availability"])


def _search_availability(query: AvailabilityQuery) -> dict:
    """Run the availability engine inside one read transaction."""
    from staydesk.infra.db import txn

    with txn() as cur:
        engine = AvailabilityEngine(
            PgInventoryRepository(cur),
            PgReservationRepository(cur),
        )
        result = engine.search(
            room_type_id=query.room_type_id,
            check_in=query.check_in,
            check_out=query.check_out,
            requested_rooms=query.rooms,
        )
    return result.to_dict()


@router.get("/search")
def search_availability(
    room_type_id: int = Query(..., description="Room type ID"),
    check_in: date = Query(..., description="Check-in date (YYYY-MM-DD)"),
    check_out: date = Query(..., description="Check-out date (YYYY-MM-DD, exclusive)"),
    rooms: int = Query(1, description="Number of rooms requested"),
    _user: CurrentUser = Depends(require_permission(PERM_RESERVATIONS_VIEW)),
) -> dict:
    """Search availability for a room type.

    An unknown room type is not an error: it has no rooms, so nothing fits.
    """
    query = parse_query(
        AvailabilityQuery,
        room_type_id=room_type_id,
        check_in=check_in,
        check_out=check_out,
        rooms=rooms,
    )
    return _search_availability(query)
