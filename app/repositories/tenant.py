"""
Tenant boundary.

A ``TenantScope`` is the only thing repositories accept as a tenant; it is
produced by ``resolve_tenant`` from an active tenant row. Every query built
through ``scoped_query`` is filtered by that tenant, and every row written
takes its ``tenant_id`` from the scope.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass

from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.orm import Query, Session

from app.core.errors import InvalidReference, PersistenceUnavailable
from app.models.tenant import Tenant
from app.utils.wallclock import TenantClock

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TenantScope:
    id: int
    slug: str
    utc_offset_minutes: int

    @property
    def clock(self) -> TenantClock:
        return TenantClock(self.utc_offset_minutes)


def resolve_tenant(db: Session, slug: str) -> TenantScope:
    with persistence_boundary(db):
        tenant = (
            db.query(Tenant)
            .filter(Tenant.slug == slug, Tenant.is_active == True)  # noqa: E712
            .first()
        )
    if not tenant:
        logger.warning("Unknown or inactive tenant %r", slug)
        raise InvalidReference(f"Tenant '{slug}' not found or inactive")
    return TenantScope(id=tenant.id, slug=tenant.slug, utc_offset_minutes=tenant.utc_offset_minutes)


def scoped_query(db: Session, model, tenant: TenantScope) -> Query:
    """``db.query(model)`` restricted to ``tenant``'s rows."""
    if not isinstance(tenant, TenantScope):
        raise TypeError(f"Expected TenantScope, got {type(tenant).__name__}")
    return db.query(model).filter(model.tenant_id == tenant.id)


@contextmanager
def persistence_boundary(db: Session):
    """Roll back and raise ``PersistenceUnavailable`` on infrastructure errors.

    Integrity errors are re-raised untouched; callers decide what they mean.
    """
    try:
        yield
    except IntegrityError:
        db.rollback()
        raise
    except DBAPIError as exc:
        db.rollback()
        logger.exception("Database unavailable")
        raise PersistenceUnavailable("Storage is temporarily unavailable, please retry") from exc
