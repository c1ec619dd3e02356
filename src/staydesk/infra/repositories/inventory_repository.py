"""Inventory repository - physical rooms per room type.

Uses raw SQL with psycopg2 (no ORM).
"""

from __future__ import annotations

from typing import Sequence

from psycopg2.extensions import cursor as PgCursor

from staydesk.infra.db import fetchone


class PgInventoryRepository:
    def __init__(self, cur: PgCursor) -> None:
        self.cur = cur

    def count_rooms(self, room_type_id: int, statuses: Sequence[str]) -> int:
        """Number of rooms of the type whose status is in statuses."""
        row = fetchone(
            self.cur,
            """
            SELECT count(*)
            FROM rooms
            WHERE room_type_id = %s
              AND status = ANY(%s)
            """,
            (room_type_id, list(statuses)),
        )
        return int(row[0]) if row else 0
