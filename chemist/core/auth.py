# chemist/core/auth.py

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from chemist.database import get_db
from chemist.models.users import User
from chemist.core.jwt import decode_access_token
from chemist.core.policy import authorize

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
):
    payload = decode_access_token(token)

    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )

    user_id = payload.get("sub")

    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        )

    user = db.query(User).filter(User.id == int(user_id)).first()

    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )

    return user


def require_permission(resource, action):
    """
    Route guard backed by the policy table.

    Runs before the route body, so a denied caller never learns whether
    the record it asked for exists. Ownership scopes are checked again by
    the service once the record is known.
    """

    def dependency(current_user: User = Depends(get_current_user)):
        authorize(current_user, resource, action, scoped=False)
        return current_user

    return dependency
