# chemist/routers/users.py

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from chemist.database import get_db
from chemist.core.auth import require_permission
from chemist.core.policy import Action, Resource
from chemist.schemas.user import CredentialsUpdate, UserCreate, UserResponse
from chemist.services import accounts

router = APIRouter(prefix="/users", tags=["Users"])


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    user_data: UserCreate,
    db: Session = Depends(get_db),
    current_user=Depends(require_permission(Resource.USERS, Action.CREATE)),
):
    try:
        return accounts.create_user(
            db,
            email=user_data.email,
            password=user_data.password,
            full_name=user_data.full_name,
            role=user_data.role,
        )
    except SQLAlchemyError:
        raise HTTPException(status_code=500, detail="Unable to create account")


@router.get("", response_model=list[UserResponse])
def list_users(
    db: Session = Depends(get_db),
    current_user=Depends(require_permission(Resource.USERS, Action.READ)),
):
    return accounts.list_users(db)


@router.post("/credentials", response_model=UserResponse)
def update_credentials(
    credentials: CredentialsUpdate,
    db: Session = Depends(get_db),
    current_user=Depends(require_permission(Resource.USERS, Action.UPDATE)),
):
    try:
        return accounts.update_credentials(
            db,
            old_email=credentials.old_email,
            new_email=credentials.new_email,
            new_password=credentials.new_password,
        )
    except SQLAlchemyError:
        raise HTTPException(status_code=500, detail="Unable to update credentials")
