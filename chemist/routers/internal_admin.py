import secrets

from fastapi import APIRouter, HTTPException, Depends, status
from sqlalchemy.orm import Session

from chemist.database import get_db
from chemist.models.users import User
from chemist.core.config import settings
from chemist.schemas.user import UserCreate, UserResponse
from chemist.services.accounts import create_user

router = APIRouter(prefix="/internal", tags=["Internal"])


@router.post("/bootstrap-admin", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def bootstrap_admin(
    user_data: UserCreate,
    secret: str,
    db: Session = Depends(get_db),
):
    """
    Creates the first admin account.

    Disabled unless INTERNAL_ADMIN_SECRET is set, and refuses once any
    admin exists; later accounts are created through /users.
    """
    if not settings.INTERNAL_ADMIN_SECRET or not secrets.compare_digest(
        secret, settings.INTERNAL_ADMIN_SECRET
    ):
        raise HTTPException(status_code=403, detail="Unauthorized")

    if db.query(User.id).filter(User.role == "admin").first():
        raise HTTPException(status_code=409, detail="An admin account already exists")

    return create_user(
        db,
        email=user_data.email,
        password=user_data.password,
        full_name=user_data.full_name,
        role="admin",
    )
