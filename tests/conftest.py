"""Shared test fixtures: a throwaway SQLite database seeded with two tenants."""

import os

# Must be set before the app's settings are imported.
os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import date, datetime, time, timezone
from decimal import Decimal
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from app.api.deps import get_now
from app.core.security import create_access_token
from app.db.base import Base
from app.db.session import build_engine, get_db
from app.main import app
from app.models.availability import WeeklyAvailability
from app.models.catalog import Professional, Service
from app.models.tenant import Tenant
from app.models.user import StaffUser
from app.repositories.tenant import TenantScope
from app.services.booking import BookingEngine
from app.services.locks import AdmissionLocks

# 2030-01-07 is a Monday. 11:00 UTC is 08:00 on the UTC-3 tenant's wall clock.
MONDAY = date(2030, 1, 7)
TUESDAY = date(2030, 1, 8)
NOW = datetime(2030, 1, 7, 11, 0, tzinfo=timezone.utc)


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'booking.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def seed(db):
    """
    Tenant "centro" (UTC-3): Carlos works Mondays 09:00-18:00 with lunch
    12:00-13:00 and offers a 30 min haircut and a 60 min beard service.
    Tenant "norte" (UTC+1): Ana, with her own haircut service.
    """
    centro = Tenant(name="Barbearia Centro", slug="centro", utc_offset_minutes=-180)
    norte = Tenant(name="Barbearia Norte", slug="norte", utc_offset_minutes=60)
    db.add_all([centro, norte])
    db.flush()

    haircut = Service(tenant_id=centro.id, name="Corte", price=Decimal("40.00"), duration_minutes=30)
    beard = Service(tenant_id=centro.id, name="Barba", price=Decimal("30.00"), duration_minutes=60)
    coloring = Service(tenant_id=centro.id, name="Coloração", price=Decimal("90.00"), duration_minutes=90)
    norte_haircut = Service(tenant_id=norte.id, name="Corte", price=Decimal("45.00"), duration_minutes=30)
    db.add_all([haircut, beard, coloring, norte_haircut])
    db.flush()

    carlos = Professional(tenant_id=centro.id, name="Carlos", services=[haircut, beard])
    ana = Professional(tenant_id=norte.id, name="Ana")
    db.add_all([carlos, ana])
    db.flush()

    db.add_all([
        WeeklyAvailability(
            tenant_id=centro.id,
            professional_id=carlos.id,
            day_of_week=1,
            start_time=time(9, 0),
            end_time=time(18, 0),
            lunch_start=time(12, 0),
            lunch_end=time(13, 0),
        ),
        WeeklyAvailability(
            tenant_id=norte.id,
            professional_id=ana.id,
            day_of_week=1,
            start_time=time(10, 0),
            end_time=time(14, 0),
        ),
    ])

    admin = StaffUser(
        tenant_id=centro.id,
        username="admin",
        password_hash="not-used",
        full_name="Dona Maria",
        role="admin",
    )
    db.add(admin)
    db.commit()

    return SimpleNamespace(
        centro=centro,
        norte=norte,
        haircut=haircut,
        beard=beard,
        coloring=coloring,
        norte_haircut=norte_haircut,
        carlos=carlos,
        ana=ana,
        admin=admin,
    )


@pytest.fixture
def centro(seed) -> TenantScope:
    return TenantScope(id=seed.centro.id, slug="centro", utc_offset_minutes=-180)


@pytest.fixture
def norte(seed) -> TenantScope:
    return TenantScope(id=seed.norte.id, slug="norte", utc_offset_minutes=60)


@pytest.fixture
def booking_engine(db):
    return BookingEngine(db, locks=AdmissionLocks(timeout=5))


@pytest.fixture
def client(session_factory, seed):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_now] = lambda: NOW
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def tenant_headers():
    return {"X-Tenant": "centro"}


@pytest.fixture
def admin_headers(seed, tenant_headers):
    token = create_access_token(subject=str(seed.admin.id), tenant_slug="centro")
    return {**tenant_headers, "Authorization": f"Bearer {token}"}
