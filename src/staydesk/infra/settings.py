"""Service settings from environment variables.

Settings are read on every call so tests can patch os.environ freely.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from staydesk.domain.rate_plans import DEFAULT_PLAN_CODE

DEFAULT_MAX_RANGE_DAYS = 366


@dataclass(frozen=True)
class OidcSettings:
    """Bearer token verification settings."""

    issuer: str | None = None
    audience: str | None = None
    jwks_url: str | None = None
    authorized_parties: list[str] | None = None

    @property
    def configured(self) -> bool:
        return bool(self.issuer and self.audience and self.jwks_url)


@dataclass(frozen=True)
class Settings:
    database_url: str | None = None
    db_password: str | None = None
    log_level: str = "INFO"
    service_name: str = "staydesk"
    default_plan_code: str = DEFAULT_PLAN_CODE
    max_range_days: int = DEFAULT_MAX_RANGE_DAYS
    oidc: OidcSettings = field(default_factory=OidcSettings)


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}")


def _list_env(name: str) -> list[str] | None:
    raw = os.environ.get(name, "")
    items = [p.strip() for p in raw.split(",") if p.strip()]
    return items or None


def get_settings() -> Settings:
    """Load settings from the environment."""
    return Settings(
        database_url=os.environ.get("DATABASE_URL") or None,
        db_password=os.environ.get("DB_PASSWORD") or None,
        log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        service_name=os.environ.get("SERVICE_NAME", "staydesk"),
        default_plan_code=os.environ.get("DEFAULT_PLAN_CODE") or DEFAULT_PLAN_CODE,
        max_range_days=_int_env("MAX_RANGE_DAYS", DEFAULT_MAX_RANGE_DAYS),
        oidc=OidcSettings(
            issuer=os.environ.get("OIDC_ISSUER"),
            audience=os.environ.get("OIDC_AUDIENCE"),
            jwks_url=os.environ.get("OIDC_JWKS_URL"),
            authorized_parties=_list_env("OIDC_AUTHORIZED_PARTIES"),
        ),
    )
