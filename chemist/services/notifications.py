"""
Outbound SMS notifications.

Everything here is best effort: a notification is attempted once, after
the write that caused it has committed, and a failure is logged for the
operator instead of being reported to the caller.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Iterable

from chemist.core.config import settings
from chemist.core.sms import send_sms

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    recipient_phone: str
    message: str


@dataclass(frozen=True)
class SaleSummary:
    sale_number: str
    total_amount: Decimal
    cashier_name: str
    item_count: int
    created_at: datetime | None = None


def sale_message(summary: SaleSummary) -> str:
    when = summary.created_at or datetime.now(timezone.utc)

    return (
        "New Sale Alert!\n"
        f"Sale: {summary.sale_number}\n"
        f"Cashier: {summary.cashier_name}\n"
        f"Items: {summary.item_count}\n"
        f"Total: {settings.CURRENCY} {Decimal(summary.total_amount):.2f}\n"
        f"Time: {when:%Y-%m-%d %H:%M}"
    )


def sale_notification(summary: SaleSummary) -> Notification | None:
    if not settings.SALE_ALERT_PHONE:
        logger.debug(f"SALE_ALERT_PHONE not set, no broadcast for {summary.sale_number}")
        return None

    return Notification(settings.SALE_ALERT_PHONE, sale_message(summary))


def low_stock_message(medicine_name: str, quantity: int) -> str:
    return (
        f"LOW STOCK ALERT: {medicine_name} is running low with only "
        f"{quantity} unit(s) remaining. Please restock soon."
    )


class NotificationDispatcher:
    def __init__(self, gateway: Callable[[str, str], object] | None = None):
        self.gateway = gateway or send_sms

    def dispatch(self, notification: Notification) -> bool:
        try:
            self.gateway(notification.recipient_phone, notification.message)
        except Exception:
            logger.exception(f"Notification to {notification.recipient_phone} dropped")
            return False

        logger.info(f"Notification sent to {notification.recipient_phone}")
        return True


dispatcher = NotificationDispatcher()


def dispatch_all(
    notifications: Iterable[Notification],
    dispatch: Callable[[Notification], object] | None = None,
):
    dispatch = dispatch or dispatcher.dispatch

    for notification in notifications:
        try:
            dispatch(notification)
        except Exception:
            logger.exception(f"Notification to {notification.recipient_phone} dropped")


def deferred(background_tasks) -> Callable[[Notification], None]:
    """Dispatch through FastAPI BackgroundTasks, i.e. after the response is sent."""

    def schedule(notification: Notification):
        background_tasks.add_task(dispatcher.dispatch, notification)

    return schedule
