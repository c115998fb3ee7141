# chemist/services/settings.py

from sqlalchemy.orm import Session

from chemist.core.config import settings as app_settings
from chemist.core.exceptions import ValidationError
from chemist.models.admin_settings import AdminSettings


def get_admin_settings(db: Session) -> AdminSettings | None:
    return db.query(AdminSettings).order_by(AdminSettings.id).first()


def low_stock_threshold(db: Session) -> int:
    admin_settings = get_admin_settings(db)

    if admin_settings is None or admin_settings.low_stock_threshold is None:
        return app_settings.DEFAULT_LOW_STOCK_THRESHOLD

    return admin_settings.low_stock_threshold


def update_admin_settings(db: Session, admin_phone=None, low_stock_threshold=None) -> AdminSettings:
    if low_stock_threshold is not None and low_stock_threshold < 0:
        raise ValidationError("low_stock_threshold", "Low stock threshold cannot be negative")

    admin_settings = get_admin_settings(db)

    if admin_settings is None:
        admin_settings = AdminSettings(
            low_stock_threshold=app_settings.DEFAULT_LOW_STOCK_THRESHOLD,
        )
        db.add(admin_settings)

    if admin_phone is not None:
        admin_settings.admin_phone = admin_phone.strip() or None

    if low_stock_threshold is not None:
        admin_settings.low_stock_threshold = low_stock_threshold

    db.commit()
    db.refresh(admin_settings)

    return admin_settings
