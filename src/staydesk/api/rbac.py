"""Permission guard for routes.

Permissions are codes of the form "<resource>.<action>" carried in the access
token's ``permissions`` claim. Permission storage and grants live in the
identity provider; this module only checks the claim.
"""

from __future__ import annotations

import re
from typing import Callable

from fastapi import Depends, HTTPException

from staydesk.api.auth import CurrentUser, get_current_user

_PERMISSION_RE = re.compile(r"^[a-z_]+\.[a-z_]+$")


def permission_code(resource: str, action: str) -> str:
    """Build a permission code, e.g. permission_code("rates", "view") -> "rates.view"."""
    return f"{resource}.{action}"


PERM_RATES_VIEW = permission_code("rates", "view")
PERM_RESERVATIONS_VIEW = permission_code("reservations", "view")


def require_permission(code: str) -> Callable[..., CurrentUser]:
    """Create a dependency that requires a permission.

    Args:
        code: Permission code, e.g. "rates.view".

    Returns:
        FastAPI dependency function.

    Usage:
        @router.get("/quote")
        def endpoint(user: CurrentUser = Depends(require_permission("rates.view"))):
            ...
    """
    if not _PERMISSION_RE.match(code):
        raise ValueError(f"Invalid permission code: {code}")

    def dependency(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if not user.has_permission(code):
            raise HTTPException(status_code=403, detail="Insufficient permission")
        return user

    return dependency
