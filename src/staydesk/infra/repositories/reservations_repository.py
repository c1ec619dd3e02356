"""Reservations repository - overlap reads for availability.

Uses raw SQL with psycopg2 (no ORM). Read-only: booking flows write these
tables elsewhere.
"""

from __future__ import annotations

from datetime import date

from psycopg2.extensions import cursor as PgCursor

from staydesk.domain.models import CANCELLED_STATUS, Reservation, ReservationRoom
from staydesk.infra.db import fetchall


class PgReservationRepository:
    def __init__(self, cur: PgCursor) -> None:
        self.cur = cur

    def find_overlapping_reservations(
        self,
        check_in: date,
        check_out: date,
        *,
        room_type_id: int,
    ) -> list[Reservation]:
        """Non-cancelled reservations overlapping [check_in, check_out).

        Overlap formula (strict, same-day turnover allowed):
            r.check_in < check_out AND r.check_out > check_in

        The INNER JOIN keeps only reservations holding the room type and only
        their lines of that type.
        """
        rows = fetchall(
            self.cur,
            """
            SELECT r.id, r.code, r.check_in, r.check_out, r.status,
                   rr.room_type_id, rr.qty
            FROM reservations r
            JOIN reservation_rooms rr ON rr.reservation_id = r.id
            WHERE r.status <> %s
              AND r.check_in < %s
              AND r.check_out > %s
              AND rr.room_type_id = %s
            ORDER BY r.check_in, r.id, rr.id
            """,
            (CANCELLED_STATUS, check_out, check_in, room_type_id),
        )

        # One row per line: fold lines back under their reservation.
        headers: dict[int, tuple] = {}
        lines: dict[int, list[ReservationRoom]] = {}
        for row in rows:
            reservation_id = row[0]
            if reservation_id not in headers:
                headers[reservation_id] = row[:5]
                lines[reservation_id] = []
            lines[reservation_id].append(
                ReservationRoom(room_type_id=row[5], qty=int(row[6] or 0))
            )

        return [
            Reservation(
                id=h[0],
                code=h[1],
                check_in=h[2],
                check_out=h[3],
                status=h[4],
                rooms=tuple(lines[reservation_id]),
            )
            for reservation_id, h in headers.items()
        ]
