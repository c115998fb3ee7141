# chemist/models/sale_counters.py

from sqlalchemy import Column, Date, Integer

from chemist.database import Base


class SaleCounter(Base):
    """Last sale sequence handed out for a business day."""

    __tablename__ = "sale_counters"

    day = Column(Date, primary_key=True)
    last_value = Column(Integer, nullable=False, default=0)
