# chemist/models/supplied_products.py

from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from chemist.database import Base


class SuppliedProduct(Base):
    """An intake batch delivered by a supplier, not yet sellable stock."""

    __tablename__ = "supplied_products"

    id = Column(Integer, primary_key=True, index=True)

    supplier_id = Column(Integer, ForeignKey("suppliers.id"), nullable=False, index=True)

    product_name = Column(String, nullable=False, index=True)
    batch_number = Column(String, nullable=False)

    quantity = Column(Integer, nullable=False)
    quantity_remaining = Column(Integer, nullable=False)

    cost_per_unit = Column(Numeric(10, 2), nullable=False)
    total_cost = Column(Numeric(12, 2), nullable=False)

    expiry_date = Column(Date, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    supplier = relationship("Supplier", back_populates="batches")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_supplied_quantity_positive"),
        CheckConstraint("quantity_remaining >= 0", name="ck_supplied_remaining_non_negative"),
        CheckConstraint("quantity_remaining <= quantity", name="ck_supplied_remaining_within_quantity"),
        CheckConstraint("cost_per_unit >= 0", name="ck_supplied_cost_non_negative"),
    )
