# =========================================================
# SUPPLIER / INTAKE LEDGER
#
# Batches delivered by suppliers are recorded here and only
# become sellable stock through an explicit sync. Syncing
# consumes the batch's remaining quantity, so the same units
# cannot be pushed into inventory twice.
# =========================================================

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from chemist.core.events import ChangeEvent, change_feed
from chemist.core.exceptions import ChemistError, NotFoundError, ValidationError
from chemist.models.medicines import Medicine
from chemist.models.supplied_products import SuppliedProduct
from chemist.models.suppliers import Supplier
from chemist.services.alerts import low_stock_alert
from chemist.services.inventory import increment_stock
from chemist.services.notifications import Notification

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    batch: SuppliedProduct
    medicine: Medicine
    synced_quantity: int
    created: bool
    notifications: list[Notification] = field(default_factory=list)


# =========================================================
# SUPPLIERS
# =========================================================

def create_supplier(db: Session, data) -> Supplier:
    supplier = Supplier(
        name=data.name,
        contact_person=data.contact_person,
        phone=data.phone,
        email=data.email,
        company=data.company,
        address=data.address,
    )

    try:
        db.add(supplier)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    db.refresh(supplier)
    return supplier


def list_suppliers(db: Session):
    return db.query(Supplier).order_by(Supplier.name).all()


def get_supplier(db: Session, supplier_id: int) -> Supplier:
    supplier = db.query(Supplier).filter(Supplier.id == supplier_id).first()

    if not supplier:
        raise NotFoundError("Supplier")

    return supplier


# =========================================================
# INTAKE BATCHES
# =========================================================

def create_batch(db: Session, data, today: date | None = None) -> SuppliedProduct:
    today = today or datetime.now(timezone.utc).date()

    if data.quantity is None or data.quantity <= 0:
        raise ValidationError("quantity", "Quantity must be greater than zero")

    if Decimal(data.cost_per_unit) < 0:
        raise ValidationError("cost_per_unit", "Cost per unit cannot be negative")

    if data.expiry_date <= today:
        raise ValidationError("expiry_date", "Expiry date must be in the future")

    if not data.product_name or not data.product_name.strip():
        raise ValidationError("product_name", "Product name cannot be empty")

    get_supplier(db, data.supplier_id)

    cost_per_unit = Decimal(data.cost_per_unit).quantize(Decimal("0.01"))

    batch = SuppliedProduct(
        supplier_id=data.supplier_id,
        product_name=data.product_name.strip(),
        batch_number=data.batch_number,
        quantity=data.quantity,
        quantity_remaining=data.quantity,
        cost_per_unit=cost_per_unit,
        total_cost=cost_per_unit * data.quantity,
        expiry_date=data.expiry_date,
    )

    try:
        db.add(batch)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    db.refresh(batch)
    change_feed.publish(ChangeEvent("supplied_products", "insert", batch.id))

    return batch


def list_batches(db: Session, supplier_id: int | None = None):
    query = db.query(SuppliedProduct)

    if supplier_id is not None:
        query = query.filter(SuppliedProduct.supplier_id == supplier_id)

    return query.order_by(SuppliedProduct.id.desc()).all()


def get_batch(db: Session, batch_id: int, for_update: bool = False) -> SuppliedProduct:
    query = db.query(SuppliedProduct).filter(SuppliedProduct.id == batch_id)

    if for_update:
        query = query.with_for_update()

    batch = query.first()

    if not batch:
        raise NotFoundError("Supplied product")

    return batch


# =========================================================
# SYNC INTO INVENTORY
# =========================================================

def _find_medicine_id(db: Session, name: str) -> int | None:
    row = db.query(Medicine.id).filter(Medicine.name == name).first()
    return row.id if row else None


def _add_to_inventory(db: Session, batch: SuppliedProduct, quantity: int):
    """
    Returns (medicine_id, previous_quantity, new_quantity, created).

    medicines.name is unique: when a concurrent sync creates the same
    name first, the losing insert is rolled back to its savepoint and
    the units are added to the winner's row instead.
    """
    medicine_id = _find_medicine_id(db, batch.product_name)

    if medicine_id is None:
        try:
            with db.begin_nested():
                medicine = Medicine(
                    name=batch.product_name,
                    unit_cost=batch.cost_per_unit,
                    quantity=quantity,
                )
                db.add(medicine)
            return medicine.id, None, quantity, True

        except IntegrityError:
            logger.info(f"{batch.product_name} was created concurrently, adding to it")
            medicine_id = _find_medicine_id(db, batch.product_name)

            if medicine_id is None:
                raise

    previous_quantity, new_quantity = increment_stock(db, medicine_id, quantity)
    return medicine_id, previous_quantity, new_quantity, False


def sync_batch(db: Session, batch_id: int, quantity: int | None = None) -> SyncResult:
    try:
        batch = get_batch(db, batch_id, for_update=True)

        if quantity is None:
            quantity = batch.quantity_remaining

        if quantity < 1 or quantity > batch.quantity_remaining:
            raise ValidationError(
                "quantity",
                f"Sync quantity must be between 1 and {batch.quantity_remaining}",
            )

        medicine_id, previous_quantity, new_quantity, created = _add_to_inventory(db, batch, quantity)

        batch.quantity_remaining -= quantity

        alert = low_stock_alert(db, batch.product_name, new_quantity, previous_quantity)

        db.commit()

    except (ChemistError, SQLAlchemyError):
        db.rollback()
        raise

    db.refresh(batch)
    medicine = db.query(Medicine).filter(Medicine.id == medicine_id).one()

    logger.info(
        f"Synced {quantity} x {batch.product_name} from batch {batch.batch_number} "
        f"({'new item' if created else 'restock'}), stock now {medicine.quantity}"
    )

    change_feed.publish(ChangeEvent("medicines", "insert" if created else "update", medicine.id))
    change_feed.publish(ChangeEvent("supplied_products", "update", batch.id))

    return SyncResult(
        batch=batch,
        medicine=medicine,
        synced_quantity=quantity,
        created=created,
        notifications=[alert] if alert else [],
    )
