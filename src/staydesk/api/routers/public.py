"""Public API surface: health plus the quote and availability routes."""

from fastapi import APIRouter

from staydesk.api.routes import availability, rates

router = APIRouter()


@router.get("/health")
def health() -> dict:
    """Health check endpoint (no database access)."""
    return {"status": "ok"}


router.include_router(rates.router)
router.include_router(availability.router)
