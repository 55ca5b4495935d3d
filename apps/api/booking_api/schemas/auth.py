"""Authentication-related Pydantic schemas."""

from uuid import UUID

from pydantic import BaseModel

from booking_api.db.enums import Role


class TokenPayload(BaseModel):
    """Decoded JWT payload structure."""
    sub: UUID  # user_id
    tenant_id: UUID
    role: str


class TenantContext(BaseModel):
    """
    Caller context for every scheduling operation.
    
    Produced by the auth dependency and passed explicitly into services;
    there is no ambient "current tenant".
    """
    tenant_id: UUID
    user_id: UUID
    role: Role  # Validated enum
