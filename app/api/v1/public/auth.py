from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from app.api.deps import get_current_staff, get_tenant
from app.core.security import create_access_token, verify_password
from app.db.session import get_db
from app.models.user import StaffUser
from app.repositories.tenant import TenantScope, scoped_query
from app.schemas.user import StaffUser as StaffUserSchema, Token

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=Token)
def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    tenant: TenantScope = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    user = (
        scoped_query(db, StaffUser, tenant)
        .filter(StaffUser.username == form_data.username)
        .first()
    )
    if not user or not verify_password(form_data.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive",
        )
    return Token(
        access_token=create_access_token(subject=str(user.id), tenant_slug=tenant.slug),
        token_type="bearer",
        user=StaffUserSchema.model_validate(user),
    )


@router.get("/me", response_model=StaffUserSchema)
def read_me(current_user: StaffUser = Depends(get_current_staff)):
    return current_user
