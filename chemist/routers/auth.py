import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session
from fastapi.security import OAuth2PasswordRequestForm

from chemist.database import get_db
from chemist.core.auth import get_current_user
from chemist.core.jwt import create_access_token
from chemist.core.policy import permissions_for
from chemist.core.rate_limiter import limiter
from chemist.schemas.user import MeResponse, Token, UserResponse
from chemist.services.accounts import authenticate

router = APIRouter(prefix="/auth", tags=["Authentication"])

logger = logging.getLogger(__name__)


# ---------------- LOGIN (TOKEN-BASED) ----------------
@router.post("/login", response_model=Token)
@limiter.limit("5/minute")
def login(
    request: Request,
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
):
    user = authenticate(db, form_data.username, form_data.password)

    if not user:
        logger.warning("Failed login attempt")
        raise HTTPException(status_code=401, detail="Invalid credentials")

    token = create_access_token(user.id, user.role)

    return {
        "access_token": token,
        "token_type": "bearer"
    }


# ---------------- CURRENT USER ----------------
@router.get("/me", response_model=MeResponse)
def me(current_user=Depends(get_current_user)):
    # Clients gate navigation on this list instead of comparing role names
    return {
        "user": UserResponse.model_validate(current_user),
        "permissions": permissions_for(current_user.role),
    }
