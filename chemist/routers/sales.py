# =========================================================
# SALES ROUTER
#
# - Checkout is one transaction (sale + lines + stock)
# - Notifications go out in the background after commit
# - Sales are immutable: no update / delete routes
# =========================================================

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status, Request
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from chemist.database import get_db
from chemist.core.auth import require_permission
from chemist.core.policy import Action, Resource
from chemist.core.rate_limiter import limiter
from chemist.schemas.sale import CheckoutResponse, SaleCreate, SaleResponse
from chemist.services.checkout import CartLine, checkout, get_sale as fetch_sale, list_sales as fetch_sales
from chemist.services.notifications import deferred

router = APIRouter(prefix="/sales", tags=["Sales"])


# =========================================================
# CHECKOUT
# =========================================================
@router.post("", response_model=CheckoutResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_sale(
    request: Request,
    sale_data: SaleCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user=Depends(require_permission(Resource.SALES, Action.CREATE)),
):
    cart = [
        CartLine(
            medicine_id=item.medicine_id,
            quantity=item.quantity,
            unit_price=item.unit_price,
        )
        for item in sale_data.items
    ]

    try:
        result = checkout(
            db,
            cart,
            cashier=current_user,
            payment_method=sale_data.payment_method,
            customer_name=sale_data.customer_name,
            customer_phone=sale_data.customer_phone,
            request_id=sale_data.request_id,
            dispatch=deferred(background_tasks),
        )
    except SQLAlchemyError:
        raise HTTPException(status_code=500, detail="Unable to complete sale")

    response = CheckoutResponse.model_validate(result.sale)
    response.stock = result.stock

    return response


# =========================================================
# LIST SALES
# =========================================================
@router.get("", response_model=list[SaleResponse])
def list_sales(
    db: Session = Depends(get_db),
    current_user=Depends(require_permission(Resource.SALES, Action.READ)),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    return fetch_sales(db, limit=limit, offset=offset)


# =========================================================
# GET SINGLE SALE
# =========================================================
@router.get("/{sale_id}", response_model=SaleResponse)
def get_sale(
    sale_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(require_permission(Resource.SALES, Action.READ)),
):
    return fetch_sale(db, sale_id)
