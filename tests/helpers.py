"""Shared test helper functions for staydesk tests.

This module contains helpers that can be imported by both conftest.py and
individual test files. These are NOT fixtures - they are regular functions
and in-memory repositories standing in for PostgreSQL.
"""

from __future__ import annotations

import base64
import time
from contextlib import contextmanager
from datetime import date
from decimal import Decimal
from typing import Sequence
from unittest.mock import MagicMock

import jwt
from cryptography.hazmat.primitives.asymmetric import rsa

from staydesk.domain.dates import format_date_only
from staydesk.domain.models import (
    CANCELLED_STATUS,
    RatePlan,
    RatePlanPrice,
    RateRestriction,
    Reservation,
    ReservationRoom,
)

ALL_PERMISSIONS = ("rates.view", "reservations.view")


# ── Auth ──────────────────────────────────────────────────────────────────────


def _generate_rsa_keypair():
    """Generate RSA key pair for test JWT signing."""
    private_key = rsa.generate_private_key(
        public_exponent=65537,
        key_size=2048,
    )
    public_key = private_key.public_key()
    return private_key, public_key


def _create_jwks(public_key, kid: str = "test-key-1") -> dict:
    """Create JWKS from public key."""
    public_numbers = public_key.public_numbers()

    def int_to_base64(n: int) -> str:
        byte_length = (n.bit_length() + 7) // 8
        return (
            base64.urlsafe_b64encode(n.to_bytes(byte_length, "big"))
            .rstrip(b"=")
            .decode()
        )

    return {
        "keys": [
            {
                "kty": "RSA",
                "use": "sig",
                "alg": "RS256",
                "kid": kid,
                "n": int_to_base64(public_numbers.n),
                "e": int_to_base64(public_numbers.e),
            }
        ]
    }


def _create_token(
    private_key,
    kid: str = "test-key-1",
    sub: str = "user-123",
    iss: str = "https://auth.example.com",
    aud: str = "staydesk-api",
    exp: int | None = None,
    azp: str | None = None,
    permissions: Sequence[str] | None = ALL_PERMISSIONS,
) -> str:
    """Create signed JWT for testing."""
    now = int(time.time())
    payload = {
        "sub": sub,
        "iss": iss,
        "aud": aud,
        "exp": exp if exp is not None else now + 3600,
        "iat": now,
        "email": "frontdesk@example.com",
    }
    if permissions is not None:
        payload["permissions"] = list(permissions)
    if azp:
        payload["azp"] = azp

    return jwt.encode(payload, private_key, algorithm="RS256", headers={"kid": kid})


@contextmanager
def fake_txn():
    """Stand-in for staydesk.infra.db.txn yielding a mock cursor."""
    yield MagicMock()


# ── In-memory repositories ────────────────────────────────────────────────────


def price(
    plan_id: int,
    d: date,
    base: str = "100.00",
    extra_adult: str = "20.00",
    extra_child: str = "10.00",
    closed: bool = False,
) -> RatePlanPrice:
    return RatePlanPrice(
        rate_plan_id=plan_id,
        date=d,
        price_base=Decimal(base),
        price_extra_adult=Decimal(extra_adult),
        price_extra_child=Decimal(extra_child),
        closed=closed,
    )


class FakeRatePlanRepository:
    """RatePlanRepository over lists; counts bulk reads."""

    def __init__(
        self,
        plans: list[RatePlan] | None = None,
        prices: list[RatePlanPrice] | None = None,
        restrictions: list[RateRestriction] | None = None,
    ) -> None:
        self.plans = list(plans or [])
        self.prices = list(prices or [])
        self.restrictions = list(restrictions or [])
        self.price_queries = 0
        self.restriction_queries = 0
        self.find_calls: list[tuple[int | None, str | None]] = []

    def get_rate_plan(self, rate_plan_id: int) -> RatePlan | None:
        return next((p for p in self.plans if p.id == rate_plan_id), None)

    def find_rate_plan(self, *, room_type_id: int | None, code: str | None = None) -> RatePlan | None:
        self.find_calls.append((room_type_id, code))
        matches = [
            p
            for p in self.plans
            if p.room_type_id == room_type_id and (code is None or p.code == code)
        ]
        return min(matches, key=lambda p: p.id, default=None)

    def find_prices(self, rate_plan_id: int, dates: Sequence[str]) -> list[RatePlanPrice]:
        self.price_queries += 1
        wanted = set(dates)
        return [
            p for p in self.prices
            if p.rate_plan_id == rate_plan_id and format_date_only(p.date) in wanted
        ]

    def find_restrictions(self, rate_plan_id: int, dates: Sequence[str]) -> list[RateRestriction]:
        self.restriction_queries += 1
        wanted = set(dates)
        return [
            r for r in self.restrictions
            if r.rate_plan_id == rate_plan_id and format_date_only(r.date) in wanted
        ]


class FakeInventoryRepository:
    """Rooms as (room_type_id, status) pairs."""

    def __init__(self, rooms: list[tuple[int, str]] | None = None) -> None:
        self.rooms = list(rooms or [])

    def count_rooms(self, room_type_id: int, statuses: Sequence[str]) -> int:
        return sum(1 for rt, status in self.rooms if rt == room_type_id and status in statuses)


class FakeReservationRepository:
    """Applies the same overlap / status / room type filter as the SQL query."""

    def __init__(self, reservations: list[Reservation] | None = None) -> None:
        self.reservations = list(reservations or [])
        self.calls = 0

    def find_overlapping_reservations(
        self, check_in: date, check_out: date, *, room_type_id: int
    ) -> list[Reservation]:
        self.calls += 1
        out = []
        for r in self.reservations:
            if r.status == CANCELLED_STATUS:
                continue
            if not (r.check_in < check_out and r.check_out > check_in):
                continue
            lines = tuple(line for line in r.rooms if line.room_type_id == room_type_id)
            if not lines:
                continue
            out.append(
                Reservation(
                    id=r.id,
                    code=r.code,
                    check_in=r.check_in,
                    check_out=r.check_out,
                    status=r.status,
                    rooms=lines,
                )
            )
        return out


def reservation(
    res_id: int,
    check_in: date,
    check_out: date,
    *lines: tuple[int, int],
    status: str = "confirmed",
) -> Reservation:
    """Build a reservation; lines are (room_type_id, qty) pairs."""
    return Reservation(
        id=res_id,
        code=f"RSV-2025-{res_id:06d}",
        check_in=check_in,
        check_out=check_out,
        status=status,
        rooms=tuple(ReservationRoom(room_type_id=rt, qty=qty) for rt, qty in lines),
    )
