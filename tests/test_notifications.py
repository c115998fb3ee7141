from datetime import datetime
from decimal import Decimal

import pytest
import requests

from chemist.core import sms
from chemist.core.config import settings
from chemist.core.events import ChangeEvent, ChangeFeed
from chemist.core.exceptions import NotificationError
from chemist.services.notifications import (
    Notification,
    NotificationDispatcher,
    SaleSummary,
    dispatch_all,
    low_stock_message,
    sale_message,
    sale_notification,
)


class FakeResponse:
    def __init__(self, status_code=201, body=None, text=""):
        self.status_code = status_code
        self._body = body or {"SMSMessageData": {"Message": "Sent to 1/1"}}
        self.text = text

    def json(self):
        return self._body


@pytest.fixture
def api_key(monkeypatch):
    monkeypatch.setattr(settings, "AFRICAS_TALKING_API_KEY", "atsk_test_key")
    monkeypatch.setattr(settings, "AFRICAS_TALKING_USERNAME", "chemist")


# =============================================================================
# SMS GATEWAY
# =============================================================================

def test_send_sms_requires_api_key(monkeypatch):
    monkeypatch.setattr(settings, "AFRICAS_TALKING_API_KEY", None)

    with pytest.raises(NotificationError):
        sms.send_sms("+254711000111", "hello")


def test_send_sms_posts_form(monkeypatch, api_key):
    calls = []

    def fake_post(url, data=None, headers=None, timeout=None):
        calls.append({"url": url, "data": data, "headers": headers, "timeout": timeout})
        return FakeResponse()

    monkeypatch.setattr(sms.requests, "post", fake_post)

    body = sms.send_sms("+254711000111", "Restock Insulin")

    (call,) = calls
    assert call["url"] == settings.SMS_API_URL
    assert call["data"] == {"username": "chemist", "to": "+254711000111", "message": "Restock Insulin"}
    assert call["headers"]["apiKey"] == "atsk_test_key"
    assert call["timeout"] == settings.SMS_TIMEOUT_SECONDS
    assert body["SMSMessageData"]["Message"] == "Sent to 1/1"


def test_send_sms_rejected_by_gateway(monkeypatch, api_key):
    monkeypatch.setattr(sms.requests, "post", lambda *a, **kw: FakeResponse(401, text="bad key"))

    with pytest.raises(NotificationError, match="bad key"):
        sms.send_sms("+254711000111", "hello")


def test_send_sms_network_error(monkeypatch, api_key):
    def unreachable(*args, **kwargs):
        raise requests.ConnectionError("no route to host")

    monkeypatch.setattr(sms.requests, "post", unreachable)

    with pytest.raises(NotificationError):
        sms.send_sms("+254711000111", "hello")


# =============================================================================
# MESSAGES & DISPATCH
# =============================================================================

def test_sale_message_format():
    summary = SaleSummary(
        sale_number="SALE-20261018-0007",
        total_amount=Decimal("45"),
        cashier_name="Tom Cashier",
        item_count=2,
        created_at=datetime(2026, 10, 18, 14, 5),
    )

    assert sale_message(summary) == (
        "New Sale Alert!\n"
        "Sale: SALE-20261018-0007\n"
        "Cashier: Tom Cashier\n"
        "Items: 2\n"
        "Total: KES 45.00\n"
        "Time: 2026-10-18 14:05"
    )


def test_no_broadcast_without_operator_phone(monkeypatch):
    monkeypatch.setattr(settings, "SALE_ALERT_PHONE", None)

    summary = SaleSummary("SALE-20261018-0001", Decimal("10.00"), "Tom Cashier", 1)

    assert sale_notification(summary) is None


def test_low_stock_message():
    assert low_stock_message("Insulin", 2) == (
        "LOW STOCK ALERT: Insulin is running low with only 2 unit(s) remaining. "
        "Please restock soon."
    )


def test_dispatcher_reports_failure_without_raising():
    def broken_gateway(to_phone, message):
        raise NotificationError("gateway down")

    dispatcher = NotificationDispatcher(gateway=broken_gateway)

    assert dispatcher.dispatch(Notification("+254711000111", "hi")) is False


def test_dispatcher_success():
    sent = []
    dispatcher = NotificationDispatcher(gateway=lambda to, msg: sent.append((to, msg)))

    assert dispatcher.dispatch(Notification("+254711000111", "hi")) is True
    assert sent == [("+254711000111", "hi")]


def test_dispatch_all_continues_after_failure():
    delivered = []

    def flaky(notification):
        if notification.message == "first":
            raise RuntimeError("boom")
        delivered.append(notification.message)

    dispatch_all(
        [Notification("+254711000111", "first"), Notification("+254711000111", "second")],
        dispatch=flaky,
    )

    assert delivered == ["second"]


# =============================================================================
# CHANGE FEED
# =============================================================================

def test_change_feed_isolates_subscribers():
    feed = ChangeFeed()
    seen = []

    def broken(event):
        raise RuntimeError("socket closed")

    feed.subscribe(broken)
    feed.subscribe(seen.append)

    event = ChangeEvent("medicines", "update", 7)
    feed.publish(event)

    assert seen == [event]


def test_change_feed_unsubscribe():
    feed = ChangeFeed()
    seen = []

    callback = feed.subscribe(seen.append)
    feed.unsubscribe(callback)
    feed.publish(ChangeEvent("sales", "insert", 1))

    assert seen == []
