# chemist/routers/settings.py

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from chemist.database import get_db
from chemist.core.auth import require_permission
from chemist.core.config import settings as app_settings
from chemist.core.policy import Action, Resource
from chemist.schemas.settings import AdminSettingsResponse, AdminSettingsUpdate
from chemist.services.settings import get_admin_settings, update_admin_settings

router = APIRouter(prefix="/settings", tags=["Settings"])


@router.get("", response_model=AdminSettingsResponse)
def read_settings(
    db: Session = Depends(get_db),
    current_user=Depends(require_permission(Resource.ADMIN_SETTINGS, Action.READ)),
):
    admin_settings = get_admin_settings(db)

    if admin_settings is None:
        return AdminSettingsResponse(
            admin_phone=None,
            low_stock_threshold=app_settings.DEFAULT_LOW_STOCK_THRESHOLD,
        )

    return admin_settings


@router.put("", response_model=AdminSettingsResponse)
def write_settings(
    settings_data: AdminSettingsUpdate,
    db: Session = Depends(get_db),
    current_user=Depends(require_permission(Resource.ADMIN_SETTINGS, Action.UPDATE)),
):
    return update_admin_settings(
        db,
        admin_phone=settings_data.admin_phone,
        low_stock_threshold=settings_data.low_stock_threshold,
    )
