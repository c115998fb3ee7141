"""
Low-stock alerting.

Edge-triggered: an alert is produced when a quantity write moves an item
from at-or-above the threshold to below it (or inserts it below it).
Further writes while the item stays below the threshold are silent.
"""
import logging

from sqlalchemy.orm import Session

from chemist.core.config import settings
from chemist.services.notifications import Notification, low_stock_message
from chemist.services.settings import get_admin_settings

logger = logging.getLogger(__name__)


def crossed_below(previous_quantity: int | None, new_quantity: int, threshold: int) -> bool:
    if new_quantity >= threshold:
        return False

    return previous_quantity is None or previous_quantity >= threshold


def low_stock_alert(
    db: Session,
    medicine_name: str,
    quantity: int,
    previous_quantity: int | None,
) -> Notification | None:
    admin_settings = get_admin_settings(db)

    if admin_settings is None or not admin_settings.admin_phone:
        return None

    threshold = admin_settings.low_stock_threshold
    if threshold is None:
        threshold = settings.DEFAULT_LOW_STOCK_THRESHOLD

    if not crossed_below(previous_quantity, quantity, threshold):
        return None

    logger.info(f"Low stock alert triggered for {medicine_name} (quantity: {quantity})")

    return Notification(
        recipient_phone=admin_settings.admin_phone,
        message=low_stock_message(medicine_name, quantity),
    )
