"""Rate plans repository - reads rate_plans, rate_plan_prices, rate_restrictions.

Uses raw SQL with psycopg2 (no ORM). Read-only.
"""

from __future__ import annotations

from typing import Sequence

from psycopg2.extensions import cursor as PgCursor

from staydesk.domain.models import RatePlan, RatePlanPrice, RateRestriction
from staydesk.infra.db import fetchall, fetchone

_PLAN_COLUMNS = "id, code, name, currency, room_type_id"


def _row_to_plan(row: tuple) -> RatePlan:
    return RatePlan(
        id=row[0],
        code=row[1],
        name=row[2],
        currency=row[3],
        room_type_id=row[4],
    )


class PgRatePlanRepository:
    """RatePlanRepository over an open cursor (caller owns the transaction)."""

    def __init__(self, cur: PgCursor) -> None:
        self.cur = cur

    def get_rate_plan(self, rate_plan_id: int) -> RatePlan | None:
        row = fetchone(
            self.cur,
            f"SELECT {_PLAN_COLUMNS} FROM rate_plans WHERE id = %s",
            (rate_plan_id,),
        )
        return _row_to_plan(row) if row else None

    def find_rate_plan(
        self,
        *,
        room_type_id: int | None,
        code: str | None = None,
    ) -> RatePlan | None:
        """Lowest-id plan for a room type (or global plans when None), optionally by code."""
        conditions: list[str] = []
        params: list = []

        if room_type_id is None:
            conditions.append("room_type_id IS NULL")
        else:
            conditions.append("room_type_id = %s")
            params.append(room_type_id)

        if code is not None:
            conditions.append("code = %s")
            params.append(code)

        where = " AND ".join(conditions)
        row = fetchone(
            self.cur,
            f"""
            SELECT {_PLAN_COLUMNS}
            FROM rate_plans
            WHERE {where}
            ORDER BY id
            LIMIT 1
            """,
            params,
        )
        return _row_to_plan(row) if row else None

    def find_prices(self, rate_plan_id: int, dates: Sequence[str]) -> list[RatePlanPrice]:
        """All price rows of the plan for the given nights (one query)."""
        rows = fetchall(
            self.cur,
            """
            SELECT rate_plan_id, date, price_base, price_extra_adult,
                   price_extra_child, closed
            FROM rate_plan_prices
            WHERE rate_plan_id = %s
              AND date = ANY(%s::date[])
            ORDER BY date
            """,
            (rate_plan_id, list(dates)),
        )
        return [
            RatePlanPrice(
                rate_plan_id=r[0],
                date=r[1],
                price_base=r[2],
                price_extra_adult=r[3],
                price_extra_child=r[4],
                closed=bool(r[5]),
            )
            for r in rows
        ]

    def find_restrictions(
        self, rate_plan_id: int, dates: Sequence[str]
    ) -> list[RateRestriction]:
        """All restriction rows of the plan for the given nights (one query)."""
        rows = fetchall(
            self.cur,
            """
            SELECT rate_plan_id, date, min_stay, max_stay, cta, ctd,
                   advance_min, advance_max
            FROM rate_restrictions
            WHERE rate_plan_id = %s
              AND date = ANY(%s::date[])
            ORDER BY date
            """,
            (rate_plan_id, list(dates)),
        )
        # cta / ctd are nullable columns: NULL means not set.
        return [
            RateRestriction(
                rate_plan_id=r[0],
                date=r[1],
                min_stay=r[2],
                max_stay=r[3],
                cta=bool(r[4]),
                ctd=bool(r[5]),
                advance_min=r[6],
                advance_max=r[7],
            )
            for r in rows
        ]
