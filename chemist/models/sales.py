# models/sales.py

from sqlalchemy import CheckConstraint, Column, Index, Integer, DateTime, ForeignKey, Numeric, String
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from chemist.database import Base


PAYMENT_METHODS = ("cash", "mobile-money", "card")


class Sale(Base):
    __tablename__ = "sales"

    id = Column(Integer, primary_key=True, index=True)

    # SALE-YYYYMMDD-NNNN
    sale_number = Column(String, nullable=False, unique=True, index=True)

    cashier_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    total_amount = Column(Numeric(10, 2), nullable=False)
    payment_method = Column(String, nullable=False, default="cash")

    customer_name = Column(String, nullable=True)
    customer_phone = Column(String, nullable=True)

    # Checkout-attempt key; a retried request returns the original sale
    request_id = Column(String, nullable=True, unique=True)

    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True,
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    cashier = relationship("User")

    items = relationship(
        "SaleItem",
        back_populates="sale",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="SaleItem.id",
    )

    __table_args__ = (
        Index("ix_sales_cashier_created", "cashier_id", "created_at"),
        CheckConstraint(
            "payment_method IN ('cash', 'mobile-money', 'card')",
            name="ck_sales_payment_method_valid",
        ),
        CheckConstraint("total_amount >= 0", name="ck_sales_total_non_negative"),
    )
