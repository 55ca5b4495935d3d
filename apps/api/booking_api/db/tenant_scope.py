"""Tenant-fenced data access.

``TenantScope`` is the one place tenant isolation is enforced. Services
never call ``db.query`` on tenant-owned models directly; they ask the scope,
which appends ``tenant_id == ctx.tenant_id`` to every filter and stamps the
caller's tenant onto every new row (overwriting whatever was there).

Models without ``TenantScopedMixin`` (Tenant, User) pass through untouched.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator, TypeVar
from uuid import UUID

from sqlalchemy.orm import Query, Session

from booking_api.core.exceptions import ValidationError
from booking_api.db.base import TenantScopedMixin
from booking_api.schemas.auth import TenantContext

logger = logging.getLogger(__name__)

M = TypeVar("M")


def is_tenant_scoped(model: type) -> bool:
    """Whether rows of ``model`` belong to a tenant."""
    return isinstance(model, type) and issubclass(model, TenantScopedMixin)


class TenantScope:
    """Session wrapper bound to a single tenant."""

    def __init__(self, db: Session, ctx: TenantContext | None):
        if ctx is None or ctx.tenant_id is None:
            raise ValidationError("Tenant not resolved")
        self.db = db
        self.ctx = ctx

    @property
    def tenant_id(self) -> UUID:
        return self.ctx.tenant_id

    def _fence(self, model: type, criteria: tuple) -> tuple:
        if is_tenant_scoped(model):
            return (model.tenant_id == self.tenant_id, *criteria)
        return criteria

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def query(self, model: type[M], *criteria: Any) -> Query:
        """Filtered query; tenant filter is always part of the WHERE clause."""
        return self.db.query(model).filter(*self._fence(model, criteria))

    def get(self, model: type[M], entity_id: UUID, *criteria: Any) -> M | None:
        """Point lookup by id. Rows of other tenants are indistinguishable from missing."""
        return self.query(model, model.id == entity_id, *criteria).first()

    def first(self, model: type[M], *criteria: Any) -> M | None:
        return self.query(model, *criteria).first()

    def count(self, model: type, *criteria: Any) -> int:
        return self.query(model, *criteria).count()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def add(self, obj: Any) -> Any:
        """Stage a new row, stamped with the caller's tenant."""
        if is_tenant_scoped(type(obj)):
            obj.tenant_id = self.tenant_id
        self.db.add(obj)
        return obj

    def update_where(self, model: type, values: dict, *criteria: Any) -> int:
        """UPDATE ... WHERE tenant fence AND criteria. Returns affected row count."""
        return self.query(model, *criteria).update(
            values, synchronize_session="fetch"
        )

    def delete_where(self, model: type, *criteria: Any) -> int:
        """DELETE ... WHERE tenant fence AND criteria. Returns affected row count."""
        return self.query(model, *criteria).delete(synchronize_session="fetch")

    @contextmanager
    def atomic(self) -> Iterator["TenantScope"]:
        """
        All-or-nothing batch.
        
        Commits when the block exits cleanly; any exception rolls back every
        write staged in the block and propagates.
        """
        try:
            yield self
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.warning("Rolled back tenant transaction", extra={"tenant_id": str(self.tenant_id)})
            raise
