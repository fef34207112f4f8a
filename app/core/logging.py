"""Tenant-aware logging.

Every record carries the slug of the tenant whose request produced it, so a
single tenant's traffic can be followed through the booking engine:

    set_log_tenant("barbearia-centro")
    logger.info("Appointment created")  # -> [barbearia-centro] Appointment created
"""

import logging
from contextvars import ContextVar

_tenant: ContextVar[str] = ContextVar("tenant", default="-")

LOG_FORMAT = "%(asctime)s [%(tenant)s] %(name)s %(levelname)s: %(message)s"


def set_log_tenant(slug: str) -> None:
    """Set the tenant slug for the current request context."""
    _tenant.set(slug)


def get_log_tenant() -> str:
    return _tenant.get()


class TenantLogFilter(logging.Filter):
    """Injects ``tenant`` into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.tenant = _tenant.get()  # type: ignore[attr-defined]
        return True


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, TenantLogFilter) for f in handler.filters):
            handler.addFilter(TenantLogFilter())
