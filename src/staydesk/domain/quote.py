"""Quote engine - night-by-night pricing with stay restrictions.

For a resolved rate plan and a stay [check_in, check_out), every night gets a
price breakdown and is either open or closed with a reason. Closing checks run
in a fixed order and the first match wins:

    no_price -> closed -> cta -> ctd -> min_stay:<n> -> max_stay:<n>

Occupancy pricing assumes two adults are included in price_base. Extra adults
beyond two and every child add their per-night supplement.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Callable

from staydesk.domain.dates import format_date_only, nights_between
from staydesk.domain.models import RatePlan, RatePlanPrice, RateRestriction
from staydesk.domain.ports import RatePlanRepository
from staydesk.domain.rate_plans import (
    PlanNotFoundError,
    SelectedBy,
    select_rate_plan,
    selection_path,
)

logger = logging.getLogger(__name__)

BASE_OCCUPANCY = 2

_ZERO = Decimal("0.00")
_CENTS = Decimal("0.01")


def format_amount(value: Decimal) -> str:
    """Two-decimal string for JSON output (no float drift)."""
    return str(value.quantize(_CENTS))


@dataclass(frozen=True)
class QuoteNight:
    date: str
    base: Decimal
    extra_adult: Decimal
    extra_child: Decimal
    total: Decimal
    closed: bool
    reason: str | None = None

    def to_dict(self) -> dict:
        return {
            "date": self.date,
            "base": format_amount(self.base),
            "extra_adult": format_amount(self.extra_adult),
            "extra_child": format_amount(self.extra_child),
            "total": format_amount(self.total),
            "closed": self.closed,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class QuoteResult:
    plan: RatePlan
    check_in: str
    check_out: str
    adults: int
    children: int
    selected_by: SelectedBy
    nights: tuple[QuoteNight, ...]
    grand_total: Decimal
    any_closed: bool

    @property
    def nights_count(self) -> int:
        return len(self.nights)

    def to_dict(self) -> dict:
        return {
            "plan": {
                "id": self.plan.id,
                "code": self.plan.code,
                "name": self.plan.name,
                "currency": self.plan.currency,
                "room_type_id": self.plan.room_type_id,
            },
            "params": {
                "check_in": self.check_in,
                "check_out": self.check_out,
                "adults": self.adults,
                "children": self.children,
                "nights": self.nights_count,
                "selected_by": self.selected_by,
            },
            "nights": [n.to_dict() for n in self.nights],
            "grand_total": format_amount(self.grand_total),
            "any_closed": self.any_closed,
        }


# ── Closing checks ────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class _NightContext:
    index: int
    nights_count: int
    price: RatePlanPrice | None
    restriction: RateRestriction | None


NightCheck = Callable[[_NightContext], str | None]


def _check_no_price(ctx: _NightContext) -> str | None:
    return "no_price" if ctx.price is None else None


def _check_price_closed(ctx: _NightContext) -> str | None:
    return "closed" if ctx.price is not None and ctx.price.closed else None


def _check_cta(ctx: _NightContext) -> str | None:
    r = ctx.restriction
    if r is not None and r.cta and ctx.index == 0:
        return "cta"
    return None


def _check_ctd(ctx: _NightContext) -> str | None:
    r = ctx.restriction
    if r is not None and r.ctd and ctx.index == ctx.nights_count - 1:
        return "ctd"
    return None


def _check_min_stay(ctx: _NightContext) -> str | None:
    r = ctx.restriction
    if r is not None and r.min_stay and ctx.nights_count < r.min_stay:
        return f"min_stay:{r.min_stay}"
    return None


def _check_max_stay(ctx: _NightContext) -> str | None:
    r = ctx.restriction
    if r is not None and r.max_stay and ctx.nights_count > r.max_stay:
        return f"max_stay:{r.max_stay}"
    return None


NIGHT_CHECKS: tuple[NightCheck, ...] = (
    _check_no_price,
    _check_price_closed,
    _check_cta,
    _check_ctd,
    _check_min_stay,
    _check_max_stay,
)


def closing_reason(ctx: _NightContext) -> str | None:
    """Reason of the first check that closes the night, or None if open."""
    for check in NIGHT_CHECKS:
        reason = check(ctx)
        if reason is not None:
            return reason
    return None


def price_night(
    night: str,
    *,
    index: int,
    nights_count: int,
    price: RatePlanPrice | None,
    restriction: RateRestriction | None,
    adults: int,
    children: int,
) -> QuoteNight:
    """Price a single night of a stay."""
    reason = closing_reason(
        _NightContext(
            index=index,
            nights_count=nights_count,
            price=price,
            restriction=restriction,
        )
    )

    if price is None:
        return QuoteNight(
            date=night,
            base=_ZERO,
            extra_adult=_ZERO,
            extra_child=_ZERO,
            total=_ZERO,
            closed=True,
            reason=reason,
        )

    base = price.price_base
    extra_adult = max(0, adults - BASE_OCCUPANCY) * price.price_extra_adult
    extra_child = max(0, children) * price.price_extra_child
    closed = reason is not None
    # Floor at base: a negative supplement never discounts below price_base.
    total = _ZERO if closed else max(base, base + extra_adult + extra_child)

    return QuoteNight(
        date=night,
        base=base,
        extra_adult=extra_adult,
        extra_child=extra_child,
        total=total,
        closed=closed,
        reason=reason,
    )


# ── Engine ────────────────────────────────────────────────────────────────────


class QuoteEngine:
    """Computes stay quotes against a rate plan repository.

    Holds no state beyond the injected repository; one instance per request.
    """

    def __init__(self, rate_plans: RatePlanRepository) -> None:
        self.rate_plans = rate_plans

    def quote(
        self,
        *,
        check_in: date,
        check_out: date,
        rate_plan: RatePlan | None = None,
        rate_plan_id: int | None = None,
        room_type_id: int | None = None,
        preferred_code: str | None = None,
        adults: int = 2,
        children: int = 0,
    ) -> QuoteResult:
        """Quote a stay night by night.

        The plan is resolved with select_rate_plan() unless one is supplied.

        Raises:
            PlanNotFoundError: No rate plan matches the selection criteria.
        """
        plan = rate_plan
        if plan is None:
            plan = select_rate_plan(
                self.rate_plans,
                rate_plan_id=rate_plan_id,
                room_type_id=room_type_id,
                preferred_code=preferred_code,
            )
        if plan is None:
            raise PlanNotFoundError(
                rate_plan_id=rate_plan_id,
                room_type_id=room_type_id,
                code=preferred_code,
            )

        nights = nights_between(check_in, check_out)
        nights_count = len(nights)

        prices_by_date: dict[str, RatePlanPrice] = {}
        restrictions_by_date: dict[str, RateRestriction] = {}
        if nights:
            for p in self.rate_plans.find_prices(plan.id, nights):
                prices_by_date[format_date_only(p.date)] = p
            for r in self.rate_plans.find_restrictions(plan.id, nights):
                restrictions_by_date[format_date_only(r.date)] = r

        priced = tuple(
            price_night(
                night,
                index=i,
                nights_count=nights_count,
                price=prices_by_date.get(night),
                restriction=restrictions_by_date.get(night),
                adults=adults,
                children=children,
            )
            for i, night in enumerate(nights)
        )

        grand_total = sum((n.total for n in priced), _ZERO)
        any_closed = any(n.closed for n in priced)

        result = QuoteResult(
            plan=plan,
            check_in=format_date_only(check_in),
            check_out=format_date_only(check_out),
            adults=adults,
            children=children,
            selected_by=selection_path(
                rate_plan_id=rate_plan_id if rate_plan is None else plan.id,
                room_type_id=room_type_id,
            ),
            nights=priced,
            grand_total=grand_total,
            any_closed=any_closed,
        )

        logger.info(
            "quote computed",
            extra={
                "extra_fields": {
                    "rate_plan_id": plan.id,
                    "selected_by": result.selected_by,
                    "check_in": result.check_in,
                    "check_out": result.check_out,
                    "nights": nights_count,
                    "grand_total": format_amount(grand_total),
                    "any_closed": any_closed,
                }
            },
        )
        return result
