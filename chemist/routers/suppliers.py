# chemist/routers/suppliers.py

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from chemist.database import get_db
from chemist.core.auth import require_permission
from chemist.core.policy import Action, Resource
from chemist.schemas.supplier import (
    SupplierCreate,
    SupplierResponse,
    IntakeCreate,
    IntakeResponse,
    SyncRequest,
    SyncResponse,
)
from chemist.services import intake
from chemist.services.notifications import deferred, dispatch_all

router = APIRouter(tags=["Suppliers"])


# =========================================================
# SUPPLIERS
# =========================================================
@router.post("/suppliers", response_model=SupplierResponse, status_code=status.HTTP_201_CREATED)
def create_supplier(
    supplier_data: SupplierCreate,
    db: Session = Depends(get_db),
    current_user=Depends(require_permission(Resource.SUPPLIERS, Action.CREATE)),
):
    try:
        return intake.create_supplier(db, supplier_data)
    except SQLAlchemyError:
        raise HTTPException(status_code=500, detail="Unable to save supplier")


@router.get("/suppliers", response_model=list[SupplierResponse])
def list_suppliers(
    db: Session = Depends(get_db),
    current_user=Depends(require_permission(Resource.SUPPLIERS, Action.READ)),
):
    return intake.list_suppliers(db)


@router.get("/suppliers/{supplier_id}", response_model=SupplierResponse)
def get_supplier(
    supplier_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(require_permission(Resource.SUPPLIERS, Action.READ)),
):
    return intake.get_supplier(db, supplier_id)


# =========================================================
# INTAKE BATCHES
# =========================================================
@router.post("/intake", response_model=IntakeResponse, status_code=status.HTTP_201_CREATED)
def create_batch(
    batch_data: IntakeCreate,
    db: Session = Depends(get_db),
    current_user=Depends(require_permission(Resource.INTAKE_BATCHES, Action.CREATE)),
):
    try:
        return intake.create_batch(db, batch_data)
    except SQLAlchemyError:
        raise HTTPException(status_code=500, detail="Unable to save supplied product")


@router.get("/intake", response_model=list[IntakeResponse])
def list_batches(
    supplier_id: int | None = Query(None),
    db: Session = Depends(get_db),
    current_user=Depends(require_permission(Resource.INTAKE_BATCHES, Action.READ)),
):
    return intake.list_batches(db, supplier_id=supplier_id)


# =========================================================
# SYNC BATCH INTO INVENTORY
# =========================================================
@router.post("/intake/{batch_id}/sync", response_model=SyncResponse)
def sync_batch(
    batch_id: int,
    background_tasks: BackgroundTasks,
    sync_data: SyncRequest | None = None,
    db: Session = Depends(get_db),
    current_user=Depends(require_permission(Resource.INTAKE_BATCHES, Action.UPDATE)),
):
    quantity = sync_data.quantity if sync_data else None

    try:
        result = intake.sync_batch(db, batch_id, quantity=quantity)
    except SQLAlchemyError:
        raise HTTPException(status_code=500, detail="Unable to sync supplied product")

    dispatch_all(result.notifications, deferred(background_tasks))

    return SyncResponse(
        batch_id=result.batch.id,
        medicine_id=result.medicine.id,
        medicine_name=result.medicine.name,
        synced_quantity=result.synced_quantity,
        quantity_in_stock=result.medicine.quantity,
        quantity_remaining_in_batch=result.batch.quantity_remaining,
        created=result.created,
    )
