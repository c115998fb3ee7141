# =========================================================
# SALES DASHBOARD FIGURES
#
# Today's takings, month to date, and a zero-filled daily
# series for the last 7 days (oldest first).
# =========================================================

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

from sqlalchemy import func
from sqlalchemy.orm import Session

from chemist.models.sales import Sale
from chemist.services.checkout import list_sales

RECENT_SALES_LIMIT = 50


def _totals_between(db: Session, start: date, end: date):
    """Sum and count of sales with start <= created_at < end (dates)."""
    start_dt = datetime.combine(start, datetime.min.time())
    end_dt = datetime.combine(end, datetime.min.time())

    total, count = (
        db.query(
            func.coalesce(func.sum(Sale.total_amount), 0),
            func.count(Sale.id),
        )
        .filter(
            Sale.created_at >= start_dt,
            Sale.created_at < end_dt,
        )
        .one()
    )

    return Decimal(total or 0).quantize(Decimal("0.01")), int(count or 0)


def sales_summary(db: Session, today: date | None = None) -> dict:
    today = today or datetime.now(timezone.utc).date()
    tomorrow = today + timedelta(days=1)

    today_total, today_count = _totals_between(db, today, tomorrow)
    month_total, month_count = _totals_between(db, today.replace(day=1), tomorrow)

    daily = []
    for offset in range(6, -1, -1):
        day = today - timedelta(days=offset)
        total, count = _totals_between(db, day, day + timedelta(days=1))
        daily.append({"date": day, "total": total, "count": count})

    return {
        "date": today,
        "today_total": today_total,
        "today_count": today_count,
        "month_total": month_total,
        "month_count": month_count,
        "daily": daily,
        "recent_sales": list_sales(db, limit=RECENT_SALES_LIMIT),
    }
