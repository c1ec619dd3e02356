"""Request DTOs for the quote and availability endpoints.

Query strings are parsed by FastAPI, then validated here once so the engines
always receive well-typed, consistent values.
"""

from __future__ import annotations

from datetime import date

from fastapi import HTTPException
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from staydesk.infra.settings import get_settings


def _check_stay(check_in: date, check_out: date) -> None:
    if check_out <= check_in:
        raise ValueError("check_out must be after check_in")
    max_days = get_settings().max_range_days
    if (check_out - check_in).days > max_days:
        raise ValueError(f"Date range cannot exceed {max_days} days")


class QuoteQuery(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    check_in: date
    check_out: date
    rate_plan_id: int | None = Field(None, gt=0)
    room_type_id: int | None = Field(None, gt=0)
    plan_code: str | None = Field(None, min_length=1, max_length=50)
    adults: int = Field(2, ge=1)
    children: int = Field(0, ge=0)

    @model_validator(mode="after")
    def _cross_fields(self) -> QuoteQuery:
        if self.rate_plan_id is None and self.room_type_id is None:
            raise ValueError("rate_plan_id or room_type_id is required")
        _check_stay(self.check_in, self.check_out)
        return self


class AvailabilityQuery(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    room_type_id: int = Field(..., gt=0)
    check_in: date
    check_out: date
    rooms: int = Field(1, ge=1)

    @model_validator(mode="after")
    def _date_order(self) -> AvailabilityQuery:
        _check_stay(self.check_in, self.check_out)
        return self


def validation_message(exc: ValidationError) -> str:
    """Human-readable message for the first validation error."""
    err = exc.errors()[0]
    ctx_error = (err.get("ctx") or {}).get("error")
    if err.get("type") == "value_error" and ctx_error is not None:
        return str(ctx_error)
    loc = ".".join(str(part) for part in err.get("loc", ()))
    return f"{loc}: {err['msg']}" if loc else err["msg"]


def parse_query(model: type[BaseModel], **values) -> BaseModel:
    """Build a DTO or raise HTTP 422 with the validation message."""
    try:
        return model(**values)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=validation_message(exc))
