from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, Header, HTTPException, Query, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.logging import set_log_tenant
from app.core.security import decode_token
from app.db.session import get_db
from app.models.user import StaffUser
from app.repositories.tenant import TenantScope, resolve_tenant, scoped_query
from app.services.booking import BookingEngine

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/login")


def get_now() -> datetime:
    """Current UTC instant. Overridden in tests to pin the clock."""
    return datetime.now(timezone.utc)


def get_tenant(
    x_tenant: Optional[str] = Header(None, alias="X-Tenant"),
    tenant: Optional[str] = Query(None, description="Tenant slug (alternative to X-Tenant header)"),
    db: Session = Depends(get_db),
) -> TenantScope:
    slug = x_tenant or tenant
    if not slug:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Tenant not specified. Send the X-Tenant header or ?tenant=SLUG",
        )
    scope = resolve_tenant(db, slug)
    set_log_tenant(scope.slug)
    return scope


def get_booking_engine(db: Session = Depends(get_db)) -> BookingEngine:
    return BookingEngine(db)


def get_current_staff(
    token: str = Depends(oauth2_scheme),
    tenant: TenantScope = Depends(get_tenant),
    db: Session = Depends(get_db),
) -> StaffUser:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    claims = decode_token(token)
    if not claims or not claims.get("sub"):
        raise credentials_exception
    if claims.get("tenant") != tenant.slug:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Token was issued for another tenant",
        )
    try:
        user_id = int(claims["sub"])
    except ValueError:
        raise credentials_exception from None
    user = scoped_query(db, StaffUser, tenant).filter(StaffUser.id == user_id).first()
    if not user:
        raise credentials_exception
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is inactive")
    return user


def get_current_admin(current_user: StaffUser = Depends(get_current_staff)) -> StaffUser:
    if current_user.role != "admin":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return current_user
