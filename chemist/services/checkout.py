# =========================================================
# CHECKOUT
#
# One cart -> one sale, all or nothing:
#   1. total = sum(quantity * unit_price)
#   2. sale number from the day's counter
#   3. sale row
#   4. sale lines
#   5. conditional stock decrements
# are written in a single transaction. Notifications (sale
# broadcast, low-stock alerts) go out only after the commit
# and can never undo or fail the sale.
# =========================================================

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Callable, Iterable

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from chemist.core.events import ChangeEvent, change_feed
from chemist.core.exceptions import (
    ChemistError,
    DuplicateSaleNumberError,
    EmptyCartError,
    InsufficientStockError,
    NotFoundError,
    NotPermittedError,
    ValidationError,
)
from chemist.core.policy import Action, Resource, authorize
from chemist.models.medicines import Medicine
from chemist.models.sale_items import SaleItem
from chemist.models.sales import PAYMENT_METHODS, Sale
from chemist.services.alerts import low_stock_alert
from chemist.services.inventory import decrement_stock
from chemist.services.notifications import (
    Notification,
    SaleSummary,
    dispatch_all,
    sale_notification,
)
from chemist.services.sale_numbers import business_day, next_sale_number

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


@dataclass(frozen=True)
class CartLine:
    medicine_id: int
    quantity: int
    # Defaults to the medicine's current unit cost
    unit_price: Decimal | None = None


@dataclass
class CheckoutResult:
    sale: Sale
    stock: dict[int, int] = field(default_factory=dict)
    notifications: list[Notification] = field(default_factory=list)
    replayed: bool = False


def _validate_cart(cart: list[CartLine], payment_method: str):
    if not cart:
        raise EmptyCartError()

    if payment_method not in PAYMENT_METHODS:
        raise ValidationError(
            "payment_method",
            f"Payment method must be one of: {', '.join(PAYMENT_METHODS)}",
        )

    for line in cart:
        if line.quantity is None or line.quantity <= 0:
            raise ValidationError("quantity", "Item quantity must be greater than zero")

        if line.unit_price is not None and Decimal(line.unit_price) < 0:
            raise ValidationError("unit_price", "Unit price cannot be negative")

    medicine_ids = [line.medicine_id for line in cart]
    if len(medicine_ids) != len(set(medicine_ids)):
        raise ValidationError("items", "Duplicate medicines in sale are not allowed")


def _sale_by_request_id(db: Session, request_id: str) -> Sale | None:
    return (
        db.query(Sale)
        .options(joinedload(Sale.items))
        .filter(Sale.request_id == request_id)
        .first()
    )


def _replay(db: Session, request_id: str, cashier) -> CheckoutResult | None:
    existing = _sale_by_request_id(db, request_id)

    if existing is None:
        return None

    if existing.cashier_id != cashier.id:
        raise NotPermittedError()

    logger.info(f"Checkout {request_id} already completed as {existing.sale_number}")
    return CheckoutResult(existing, replayed=True)


def checkout(
    db: Session,
    cart: Iterable[CartLine],
    cashier,
    payment_method: str = "cash",
    customer_name: str | None = None,
    customer_phone: str | None = None,
    request_id: str | None = None,
    dispatch: Callable[[Notification], object] | None = None,
    day: date | None = None,
) -> CheckoutResult:
    cart = list(cart)
    _validate_cart(cart, payment_method)

    authorize(cashier, Resource.SALES, Action.CREATE, owner_id=cashier.id)
    authorize(cashier, Resource.SALE_ITEMS, Action.CREATE, owner_id=cashier.id)

    if request_id:
        replay = _replay(db, request_id, cashier)
        if replay:
            return replay

    alerts = []
    stock = {}

    try:
        medicine_ids = [line.medicine_id for line in cart]
        medicines = {
            medicine.id: medicine
            for medicine in db.query(Medicine).filter(Medicine.id.in_(medicine_ids)).all()
        }

        # Precheck against the latest snapshot; the decrement re-checks atomically
        priced_lines = []
        for line in cart:
            medicine = medicines.get(line.medicine_id)

            if medicine is None:
                raise NotFoundError("Medicine")

            if line.quantity > medicine.quantity:
                raise InsufficientStockError(medicine.name, medicine.quantity, line.quantity)

            unit_price = line.unit_price if line.unit_price is not None else medicine.unit_cost
            unit_price = Decimal(unit_price).quantize(CENTS)
            line_total = (unit_price * line.quantity).quantize(CENTS)

            priced_lines.append((medicine, line.quantity, unit_price, line_total))

        total_amount = sum((line_total for *_, line_total in priced_lines), Decimal("0.00"))

        sale_number = next_sale_number(db, day or business_day())

        sale = Sale(
            sale_number=sale_number,
            cashier_id=cashier.id,
            total_amount=total_amount,
            payment_method=payment_method,
            customer_name=customer_name or None,
            customer_phone=customer_phone or None,
            request_id=request_id,
        )
        db.add(sale)

        try:
            db.flush()
        except IntegrityError:
            raise DuplicateSaleNumberError(sale_number)

        db.add_all(
            SaleItem(
                sale_id=sale.id,
                medicine_id=medicine.id,
                medicine_name=medicine.name,
                quantity=quantity,
                unit_price=unit_price,
                total_price=line_total,
            )
            for medicine, quantity, unit_price, line_total in priced_lines
        )
        db.flush()

        for medicine, quantity, _, _ in priced_lines:
            previous_quantity, new_quantity = decrement_stock(db, medicine.id, quantity)
            stock[medicine.id] = new_quantity

            alert = low_stock_alert(db, medicine.name, new_quantity, previous_quantity)
            if alert:
                alerts.append(alert)

        db.commit()

    except DuplicateSaleNumberError:
        db.rollback()

        # A concurrent retry of the same attempt may have won the insert
        if request_id:
            replay = _replay(db, request_id, cashier)
            if replay:
                return replay

        logger.warning(f"Sale number collision, checkout aborted for cashier {cashier.id}")
        raise

    except (ChemistError, SQLAlchemyError):
        db.rollback()
        raise

    db.refresh(sale)

    logger.info(
        f"Sale {sale.sale_number} completed by cashier {cashier.id}: "
        f"{len(priced_lines)} line(s), total {sale.total_amount}"
    )

    change_feed.publish(ChangeEvent("sales", "insert", sale.id))
    for medicine_id in stock:
        change_feed.publish(ChangeEvent("medicines", "update", medicine_id))

    summary = SaleSummary(
        sale_number=sale.sale_number,
        total_amount=sale.total_amount,
        cashier_name=cashier.display_name,
        item_count=len(priced_lines),
        created_at=sale.created_at,
    )

    broadcast = sale_notification(summary)
    notifications = ([broadcast] if broadcast else []) + alerts

    dispatch_all(notifications, dispatch)

    return CheckoutResult(sale, stock, notifications)


# =========================================================
# SALE HISTORY (read only: sales are never edited)
# =========================================================

def list_sales(db: Session, limit: int = 20, offset: int = 0):
    return (
        db.query(Sale)
        .options(joinedload(Sale.items))
        .order_by(Sale.created_at.desc(), Sale.id.desc())
        .limit(limit)
        .offset(offset)
        .all()
    )


def get_sale(db: Session, sale_id: int) -> Sale:
    sale = (
        db.query(Sale)
        .options(joinedload(Sale.items))
        .filter(Sale.id == sale_id)
        .first()
    )

    if not sale:
        raise NotFoundError("Sale")

    return sale
