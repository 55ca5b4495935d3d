"""Role checks for privileged mutations."""

from collections.abc import Iterable

from booking_api.core.exceptions import AuthorizationError
from booking_api.db.enums import Role
from booking_api.schemas.auth import TenantContext


def has_role(ctx: TenantContext, roles: Iterable[Role]) -> bool:
    """Check if the caller holds one of ``roles``."""
    return ctx.role in set(roles)


def require_role(ctx: TenantContext, roles: Iterable[Role]) -> None:
    """
    Raise unless the caller holds one of ``roles``.
    
    Raises:
        AuthorizationError: caller role insufficient
    """
    if not has_role(ctx, roles):
        raise AuthorizationError("Forbidden – insufficient permissions")
