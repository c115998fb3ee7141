# chemist/services/accounts.py

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from chemist.core.exceptions import NotFoundError, ValidationError
from chemist.core.hashing import hash_password, verify_password
from chemist.core.policy import Role
from chemist.models.users import User

logger = logging.getLogger(__name__)

COMMON_PASSWORDS = {
    "password",
    "password123",
    "12345678",
    "qwerty123",
    "admin123",
}


def _check_password(password: str):
    if password.lower() in COMMON_PASSWORDS:
        raise ValidationError("password", "Password is too common. Please choose a stronger password.")

    if password.isdigit():
        raise ValidationError("password", "Password cannot be numbers only.")


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def create_user(db: Session, email: str, password: str, full_name: str | None = None, role: str = "cashier") -> User:
    try:
        role = Role(role).value
    except ValueError:
        raise ValidationError("role", "Role must be admin or cashier")

    _check_password(password)
    email = _normalize_email(email)

    if db.query(User.id).filter(User.email == email).first():
        raise ValidationError("email", "Email already exists")

    user = User(
        email=email,
        full_name=full_name,
        password_hash=hash_password(password),
        role=role,
    )

    try:
        db.add(user)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValidationError("email", "Email already exists")
    except SQLAlchemyError:
        db.rollback()
        raise

    db.refresh(user)
    logger.info(f"Created {role} account {user.id}")

    return user


def list_users(db: Session):
    return db.query(User).order_by(User.id).all()


def authenticate(db: Session, email: str, password: str) -> User | None:
    user = db.query(User).filter(User.email == _normalize_email(email)).first()

    if not user or not user.is_active or not verify_password(password, user.password_hash):
        return None

    return user


def update_credentials(db: Session, old_email: str, new_email: str, new_password: str) -> User:
    """Rewrite an account's login email and password in one commit."""
    _check_password(new_password)

    old_email = _normalize_email(old_email)
    new_email = _normalize_email(new_email)

    user = db.query(User).filter(User.email == old_email).first()

    if not user:
        raise NotFoundError("User")

    if new_email != old_email and db.query(User.id).filter(User.email == new_email).first():
        raise ValidationError("new_email", "Email already exists")

    user.email = new_email
    user.password_hash = hash_password(new_password)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValidationError("new_email", "Email already exists")
    except SQLAlchemyError:
        db.rollback()
        raise

    db.refresh(user)
    logger.info(f"Credentials updated for user {user.id}")

    return user
