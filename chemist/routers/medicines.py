# chemist/routers/medicines.py

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from chemist.database import get_db
from chemist.core.auth import require_permission
from chemist.core.policy import Action, Resource, authorize_fields
from chemist.schemas.medicine import (
    MedicineCreate,
    MedicineUpdate,
    MedicineResponse,
)
from chemist.services import inventory
from chemist.services.notifications import deferred, dispatch_all

router = APIRouter(
    prefix="/medicines",
    tags=["Medicines"],
)


@router.get("", response_model=list[MedicineResponse])
def list_medicines(
    search: str | None = Query(None, max_length=100),
    db: Session = Depends(get_db),
    current_user=Depends(require_permission(Resource.MEDICINES, Action.READ)),
):
    return inventory.list_medicines(db, search=search)


@router.get("/low-stock", response_model=list[MedicineResponse])
def list_low_stock(
    db: Session = Depends(get_db),
    current_user=Depends(require_permission(Resource.MEDICINES, Action.READ)),
):
    return inventory.low_stock_medicines(db)


@router.get("/{medicine_id}", response_model=MedicineResponse)
def get_medicine(
    medicine_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(require_permission(Resource.MEDICINES, Action.READ)),
):
    return inventory.get_medicine(db, medicine_id)


@router.post(
    "",
    response_model=MedicineResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_medicine(
    medicine_data: MedicineCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user=Depends(require_permission(Resource.MEDICINES, Action.CREATE)),
):
    try:
        change = inventory.create_medicine(
            db,
            name=medicine_data.name,
            unit_cost=medicine_data.unit_cost,
            quantity=medicine_data.quantity,
        )
    except SQLAlchemyError:
        raise HTTPException(status_code=500, detail="Unable to save medicine")

    dispatch_all(change.notifications, deferred(background_tasks))

    return change.medicine


@router.put("/{medicine_id}", response_model=MedicineResponse)
def update_medicine(
    medicine_id: int,
    medicine_data: MedicineUpdate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user=Depends(require_permission(Resource.MEDICINES, Action.UPDATE)),
):
    changes = medicine_data.model_dump(exclude_unset=True, exclude_none=True)

    # Cashiers may only correct quantities
    authorize_fields(current_user, Resource.MEDICINES, Action.UPDATE, changes.keys())

    try:
        change = inventory.update_medicine(db, medicine_id, **changes)
    except SQLAlchemyError:
        raise HTTPException(status_code=500, detail="Unable to update medicine")

    dispatch_all(change.notifications, deferred(background_tasks))

    return change.medicine


@router.delete("/{medicine_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_medicine(
    medicine_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(require_permission(Resource.MEDICINES, Action.DELETE)),
):
    inventory.delete_medicine(db, medicine_id)

    return None
