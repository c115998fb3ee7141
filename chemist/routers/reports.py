# =========================================================
# REPORTS ROUTER
#
# Dashboard figures for admins and cashiers alike.
# =========================================================

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from chemist.database import get_db
from chemist.core.auth import require_permission
from chemist.core.policy import Action, Resource
from chemist.schemas.report import SalesSummaryResponse
from chemist.services.reports import sales_summary

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/summary", response_model=SalesSummaryResponse)
def get_sales_summary(
    db: Session = Depends(get_db),
    current_user=Depends(require_permission(Resource.REPORTS, Action.READ)),
):
    return sales_summary(db)
