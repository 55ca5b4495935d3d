"""FastAPI dependencies for authentication, tenant resolution, and database access."""

from typing import Generator

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from booking_api.core.security import decode_session_token
from booking_api.db.enums import Role
from booking_api.db.session import SessionLocal
from booking_api.db.tenant_scope import TenantScope
from booking_api.schemas.auth import TenantContext, TokenPayload


# Cookie and header names
COOKIE_NAME = "booking_session"
CSRF_HEADER = "X-Requested-With"
CSRF_HEADER_VALUE = "XMLHttpRequest"


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency.
    
    Yields a database session and ensures it's closed after the request.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _read_token(request: Request) -> str | None:
    token = request.cookies.get(COOKIE_NAME)
    if token:
        return token
    auth_header = request.headers.get("Authorization", "")
    if auth_header.lower().startswith("bearer "):
        return auth_header[7:].strip() or None
    return None


def get_tenant_context(request: Request) -> TenantContext:
    """
    Resolve the caller's tenant context from the session token.

    The token (session cookie or Bearer header) carries user id, tenant id
    and role; no database lookup happens here.

    Raises:
        HTTPException 401: Not authenticated or token invalid
        HTTPException 403: Unknown role
    """
    token = _read_token(request)
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    try:
        payload = TokenPayload(**decode_session_token(token))
    except Exception:
        raise HTTPException(status_code=401, detail="Invalid session")

    # Validate role is a known enum value - return 403 not 500
    if not Role.has_value(payload.role):
        raise HTTPException(
            status_code=403,
            detail=f"Unknown role '{payload.role}'. Contact administrator."
        )

    return TenantContext(
        tenant_id=payload.tenant_id,
        user_id=payload.sub,
        role=Role(payload.role),
    )


def get_scope(
    ctx: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
) -> TenantScope:
    """
    Tenant-fenced data access for the current request.

    Every service call receives this scope; it is the only path to
    tenant-owned rows.
    """
    return TenantScope(db, ctx)


def require_csrf_header(request: Request) -> None:
    """
    Verify CSRF header on mutations.
    
    Apply to state-changing endpoints (POST, PATCH, DELETE).
    
    Raises:
        HTTPException 403: Missing or invalid CSRF header
    """
    if request.headers.get(CSRF_HEADER) != CSRF_HEADER_VALUE:
        raise HTTPException(
            status_code=403, 
            detail=f"Missing CSRF header. Include '{CSRF_HEADER}: {CSRF_HEADER_VALUE}'"
        )
