"""Rate quotation endpoint.

GET /rates/quote: night-by-night price and restriction breakdown for a stay.

The plan is chosen by rate_plan_id, or from room_type_id + plan_code
(default BAR) with fallback to other plans of the room type, then global
plans. Requires the rates.view permission.
"""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query

from staydesk.api.auth import CurrentUser
from staydesk.api.rbac import PERM_RATES_VIEW, require_permission
from staydesk.api.schemas import QuoteQuery, parse_query
from staydesk.domain.quote import QuoteEngine
from staydesk.domain.rate_plans import PlanNotFoundError
from staydesk.infra.repositories.rate_plans_repository import PgRatePlanRepository
from staydesk.infra.settings import get_settings
from staydesk.observability.logging import get_logger

router = APIRouter(prefix="/rates", tags=["rates"])

logger = get_logger(__name__)


def _quote(query: QuoteQuery, plan_code: str) -> dict:
    """Run the quote engine inside one read transaction."""
    from staydesk.infra.db import txn

    with txn() as cur:
        engine = QuoteEngine(PgRatePlanRepository(cur))
        result = engine.quote(
            check_in=query.check_in,
            check_out=query.check_out,
            rate_plan_id=query.rate_plan_id,
            room_type_id=query.room_type_id,
            preferred_code=plan_code,
            adults=query.adults,
            children=query.children,
        )
    return result.to_dict()


@router.get("/quote")
def quote_rates(
    check_in: date = Query(..., description="Check-in date (YYYY-MM-DD)"),
    check_out: date = Query(..., description="Check-out date (YYYY-MM-DD, exclusive)"),
    rate_plan_id: int | None = Query(None, description="Explicit rate plan"),
    room_type_id: int | None = Query(None, description="Room type for plan selection"),
    plan_code: str | None = Query(None, description="Preferred plan code (default BAR)"),
    adults: int = Query(2),
    children: int = Query(0),
    user: CurrentUser = Depends(require_permission(PERM_RATES_VIEW)),
) -> dict:
    """Quote a stay.

    Returns the resolved plan, echoed parameters, per-night breakdown,
    grand_total and any_closed. Amounts are two-decimal strings.
    Validation errors and unknown plans return 422.
    """
    query = parse_query(
        QuoteQuery,
        check_in=check_in,
        check_out=check_out,
        rate_plan_id=rate_plan_id,
        room_type_id=room_type_id,
        plan_code=plan_code,
        adults=adults,
        children=children,
    )

    try:
        return _quote(query, query.plan_code or get_settings().default_plan_code)
    except PlanNotFoundError as exc:
        logger.info(
            "rate plan not found",
            extra={
                "extra_fields": {
                    "rate_plan_id": exc.rate_plan_id,
                    "room_type_id": exc.room_type_id,
                    "plan_code": exc.code,
                    "subject": user.subject,
                }
            },
        )
        raise HTTPException(status_code=422, detail=str(exc))
