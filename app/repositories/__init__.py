from app.repositories.tenant import TenantScope, resolve_tenant
from app.repositories.schedule import ScheduleRepository, BookedInterval
