# =========================================================
# INVENTORY STORE
#
# Every quantity write returns the low-stock notifications it
# produced. Callers dispatch them only after the commit.
# =========================================================

import logging
from dataclasses import dataclass, field
from decimal import Decimal

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from chemist.core.events import ChangeEvent, change_feed
from chemist.core.exceptions import (
    ChemistError,
    InsufficientStockError,
    NotFoundError,
    ReferencedRecordError,
    ValidationError,
)
from chemist.models.medicines import Medicine
from chemist.models.sale_items import SaleItem
from chemist.services.alerts import low_stock_alert
from chemist.services.notifications import Notification
from chemist.services.settings import low_stock_threshold

logger = logging.getLogger(__name__)


@dataclass
class StockChange:
    medicine: Medicine
    notifications: list[Notification] = field(default_factory=list)


# =========================================================
# ATOMIC QUANTITY WRITES (caller owns the transaction)
# =========================================================

def _current_quantity(db: Session, medicine_id: int) -> int:
    return db.execute(
        select(Medicine.quantity).where(Medicine.id == medicine_id)
    ).scalar_one()


def decrement_stock(db: Session, medicine_id: int, quantity: int) -> tuple[int, int]:
    """
    Take `quantity` units off a medicine in a single conditional UPDATE.

    The row only changes when enough stock is on hand, so two checkouts
    racing for the last units cannot both succeed. Returns the
    (previous, new) quantities.
    """
    result = db.execute(
        update(Medicine)
        .where(Medicine.id == medicine_id, Medicine.quantity >= quantity)
        .values(quantity=Medicine.quantity - quantity)
        .execution_options(synchronize_session=False)
    )

    if result.rowcount != 1:
        row = db.execute(
            select(Medicine.name, Medicine.quantity).where(Medicine.id == medicine_id)
        ).first()

        if row is None:
            raise NotFoundError("Medicine")

        raise InsufficientStockError(row.name, row.quantity, quantity)

    new_quantity = _current_quantity(db, medicine_id)
    return new_quantity + quantity, new_quantity


def increment_stock(db: Session, medicine_id: int, quantity: int) -> tuple[int, int]:
    result = db.execute(
        update(Medicine)
        .where(Medicine.id == medicine_id)
        .values(quantity=Medicine.quantity + quantity)
        .execution_options(synchronize_session=False)
    )

    if result.rowcount != 1:
        raise NotFoundError("Medicine")

    new_quantity = _current_quantity(db, medicine_id)
    return new_quantity - quantity, new_quantity


# =========================================================
# QUERIES
# =========================================================

def list_medicines(db: Session, search: str | None = None):
    query = db.query(Medicine)

    if search:
        query = query.filter(Medicine.name.ilike(f"%{search.strip()}%"))

    return query.order_by(Medicine.name).all()


def get_medicine(db: Session, medicine_id: int, for_update: bool = False) -> Medicine:
    query = db.query(Medicine).filter(Medicine.id == medicine_id)

    if for_update:
        query = query.with_for_update()

    medicine = query.first()

    if not medicine:
        raise NotFoundError("Medicine")

    return medicine


def low_stock_medicines(db: Session):
    threshold = low_stock_threshold(db)

    return (
        db.query(Medicine)
        .filter(Medicine.quantity < threshold)
        .order_by(Medicine.quantity, Medicine.name)
        .all()
    )


# =========================================================
# ADMIN EDITS
# =========================================================

def _validate_fields(name=None, unit_cost=None, quantity=None):
    if name is not None and not name.strip():
        raise ValidationError("name", "Name cannot be empty")

    if unit_cost is not None and Decimal(unit_cost) < 0:
        raise ValidationError("unit_cost", "Unit cost cannot be negative")

    if quantity is not None and quantity < 0:
        raise ValidationError("quantity", "Quantity cannot be negative")


def _name_taken(db: Session, name: str, exclude_id: int | None = None) -> bool:
    query = db.query(Medicine.id).filter(Medicine.name == name)

    if exclude_id is not None:
        query = query.filter(Medicine.id != exclude_id)

    return query.first() is not None


def create_medicine(db: Session, name: str, unit_cost=Decimal("0.00"), quantity: int = 0) -> StockChange:
    _validate_fields(name=name, unit_cost=unit_cost, quantity=quantity)
    name = name.strip()

    try:
        if _name_taken(db, name):
            raise ValidationError("name", "Medicine with this name already exists")

        medicine = Medicine(name=name, unit_cost=unit_cost, quantity=quantity)
        db.add(medicine)
        db.flush()

        alert = low_stock_alert(db, medicine.name, medicine.quantity, None)

        db.commit()

    except IntegrityError:
        db.rollback()
        raise ValidationError("name", "Medicine with this name already exists")

    except (ChemistError, SQLAlchemyError):
        db.rollback()
        raise

    db.refresh(medicine)
    change_feed.publish(ChangeEvent("medicines", "insert", medicine.id))

    return StockChange(medicine, [alert] if alert else [])


def update_medicine(
    db: Session,
    medicine_id: int,
    name: str | None = None,
    unit_cost=None,
    quantity: int | None = None,
) -> StockChange:
    _validate_fields(name=name, unit_cost=unit_cost, quantity=quantity)

    try:
        medicine = get_medicine(db, medicine_id, for_update=True)
        previous_quantity = medicine.quantity

        if name is not None:
            name = name.strip()
            if _name_taken(db, name, exclude_id=medicine.id):
                raise ValidationError("name", "Medicine with this name already exists")
            medicine.name = name

        if unit_cost is not None:
            medicine.unit_cost = unit_cost

        alert = None
        if quantity is not None:
            medicine.quantity = quantity
            alert = low_stock_alert(db, medicine.name, quantity, previous_quantity)

        db.commit()

    except IntegrityError:
        db.rollback()
        raise ValidationError("name", "Medicine with this name already exists")

    except (ChemistError, SQLAlchemyError):
        db.rollback()
        raise

    db.refresh(medicine)
    change_feed.publish(ChangeEvent("medicines", "update", medicine.id))

    return StockChange(medicine, [alert] if alert else [])


def delete_medicine(db: Session, medicine_id: int):
    medicine = get_medicine(db, medicine_id)

    referenced = (
        db.query(SaleItem.id)
        .filter(SaleItem.medicine_id == medicine.id)
        .first()
    )

    if referenced:
        raise ReferencedRecordError("Medicine has sales history and cannot be deleted")

    try:
        db.delete(medicine)
        db.commit()

    except IntegrityError:
        db.rollback()
        raise ReferencedRecordError("Medicine has sales history and cannot be deleted")

    change_feed.publish(ChangeEvent("medicines", "delete", medicine_id))
    logger.info(f"Medicine {medicine_id} deleted")
