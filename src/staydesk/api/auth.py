"""OIDC JWT bearer authentication.

Provides:
- verify_token(): Validates an RS256 JWT against the issuer's JWKS, returns claims
- get_current_user(): FastAPI dependency for the authenticated principal

Tokens are issued elsewhere; this service only verifies them. The principal
is built from claims alone (sub, email, permissions).
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Any

import jwt
import requests
from fastapi import Depends, HTTPException, Request

from staydesk.infra.settings import get_settings

# JWKS cache with TTL
_jwks_cache: dict[str, Any] | None = None
_jwks_cache_time: float = 0
_jwks_cache_lock = threading.Lock()
_JWKS_CACHE_TTL = 600  # 10 minutes


@dataclass
class CurrentUser:
    """Authenticated principal."""

    subject: str
    email: str | None = None
    permissions: frozenset[str] = field(default_factory=frozenset)

    def has_permission(self, code: str) -> bool:
        return code in self.permissions


def _fetch_jwks(jwks_url: str) -> dict[str, Any]:
    resp = requests.get(jwks_url, timeout=10)
    resp.raise_for_status()
    return resp.json()


def _get_jwks(jwks_url: str, force_refresh: bool = False) -> dict[str, Any]:
    """Get JWKS with caching."""
    global _jwks_cache, _jwks_cache_time

    with _jwks_cache_lock:
        now = time.time()
        if not force_refresh and _jwks_cache is not None and (now - _jwks_cache_time) < _JWKS_CACHE_TTL:
            return _jwks_cache

        try:
            _jwks_cache = _fetch_jwks(jwks_url)
        except requests.RequestException:
            raise HTTPException(status_code=503, detail="Auth temporarily unavailable")
        _jwks_cache_time = now
        return _jwks_cache


def _find_key(jwks: dict[str, Any], kid: str) -> dict[str, Any] | None:
    for key in jwks.get("keys", []):
        if key.get("kid") == kid:
            return key
    return None


def verify_token(token: str) -> dict[str, Any]:
    """Verify JWT and return its claims.

    Args:
        token: JWT token string.

    Returns:
        Decoded claims; exp, iss, aud and sub are guaranteed present.

    Raises:
        HTTPException: 401 if the token is invalid, 503 if JWKS is unreachable.
    """
    oidc = get_settings().oidc
    if not oidc.configured:
        raise HTTPException(status_code=401, detail="OIDC not configured")

    try:
        unverified_header = jwt.get_unverified_header(token)
    except jwt.exceptions.DecodeError:
        raise HTTPException(status_code=401, detail="Invalid token")

    kid = unverified_header.get("kid")
    if not kid:
        raise HTTPException(status_code=401, detail="Invalid token")

    jwks = _get_jwks(oidc.jwks_url)
    key_data = _find_key(jwks, kid)

    # Unknown kid: the issuer may have rotated keys, refresh once.
    if key_data is None:
        jwks = _get_jwks(oidc.jwks_url, force_refresh=True)
        key_data = _find_key(jwks, kid)

    if key_data is None:
        raise HTTPException(status_code=401, detail="Invalid token")

    def _try_verify(jwk_data: dict[str, Any]) -> dict[str, Any]:
        try:
            public_key = jwt.algorithms.RSAAlgorithm.from_jwk(jwk_data)
        except (jwt.exceptions.InvalidKeyError, ValueError, TypeError):
            raise HTTPException(status_code=401, detail="Invalid token")

        return jwt.decode(
            token,
            public_key,
            algorithms=["RS256"],
            issuer=oidc.issuer,
            audience=oidc.audience,
            options={"require": ["exp", "iss", "aud", "sub"]},
        )

    try:
        claims = _try_verify(key_data)
    except jwt.InvalidSignatureError:
        # Stale key material, refetch once.
        jwks = _get_jwks(oidc.jwks_url, force_refresh=True)
        key_data = _find_key(jwks, kid)
        if key_data is None:
            raise HTTPException(status_code=401, detail="Invalid token")
        try:
            claims = _try_verify(key_data)
        except jwt.InvalidTokenError:
            raise HTTPException(status_code=401, detail="Invalid token")
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid token")

    if oidc.authorized_parties and "azp" in claims:
        if claims["azp"] not in oidc.authorized_parties:
            raise HTTPException(status_code=401, detail="Invalid token")

    if not claims.get("sub"):
        raise HTTPException(status_code=401, detail="Invalid token")

    return claims


def _extract_bearer_token(request: Request) -> str:
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        raise HTTPException(status_code=401, detail="Missing authorization header")

    parts = auth_header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise HTTPException(status_code=401, detail="Invalid authorization header")

    return parts[1]


def _user_from_claims(claims: dict[str, Any]) -> CurrentUser:
    raw_permissions = claims.get("permissions") or []
    if isinstance(raw_permissions, str):
        raw_permissions = raw_permissions.split()
    return CurrentUser(
        subject=str(claims["sub"]),
        email=claims.get("email"),
        permissions=frozenset(str(p) for p in raw_permissions),
    )


def get_current_user(request: Request) -> CurrentUser:
    """FastAPI dependency: get authenticated principal.

    Raises:
        HTTPException: 401 if token invalid/missing.
    """
    token = _extract_bearer_token(request)
    claims = verify_token(token)
    return _user_from_claims(claims)


# Dependency alias for cleaner imports
CurrentUserDep = Depends(get_current_user)
