"""
Sale numbers: SALE-YYYYMMDD-NNNN, NNNN restarting at 0001 each day.

The per-day sequence lives in its own row and is bumped with a single
UPDATE inside the checkout transaction, so two sales on the same day
can never read the same value. The unique constraint on
sales.sale_number stays as the backstop.
"""
from datetime import date, datetime, timezone

from sqlalchemy import insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from chemist.models.sale_counters import SaleCounter


def business_day(now: datetime | None = None) -> date:
    return (now or datetime.now(timezone.utc)).date()


def format_sale_number(day: date, sequence: int) -> str:
    return f"SALE-{day:%Y%m%d}-{sequence:04d}"


def _bump(db: Session, day: date) -> int:
    result = db.execute(
        update(SaleCounter)
        .where(SaleCounter.day == day)
        .values(last_value=SaleCounter.last_value + 1)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount


def next_sale_number(db: Session, day: date) -> str:
    if _bump(db, day) == 0:
        try:
            with db.begin_nested():
                db.execute(insert(SaleCounter).values(day=day, last_value=1))
        except IntegrityError:
            # Another checkout opened the day first
            _bump(db, day)

    sequence = db.execute(
        select(SaleCounter.last_value).where(SaleCounter.day == day)
    ).scalar_one()

    return format_sale_number(day, sequence)
