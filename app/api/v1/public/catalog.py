from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_tenant
from app.db.session import get_db
from app.repositories.schedule import ScheduleRepository
from app.repositories.tenant import TenantScope
from app.schemas.catalog import Professional as ProfessionalSchema, Service as ServiceSchema

router = APIRouter(tags=["Catalog"])


@router.get("/professionals", response_model=List[ProfessionalSchema])
def list_professionals(
    tenant: TenantScope = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    """Active professionals of the tenant, with the ids of the services they offer."""
    professionals = ScheduleRepository(db).list_professionals(tenant)
    return [
        ProfessionalSchema(
            id=p.id,
            name=p.name,
            description=p.description,
            avatar_url=p.avatar_url,
            service_ids=[s.id for s in p.services if s.is_active],
        )
        for p in professionals
    ]


@router.get("/services", response_model=List[ServiceSchema])
def list_services(
    tenant: TenantScope = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    return ScheduleRepository(db).list_services(tenant)
