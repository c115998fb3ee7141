# chemist/models/admin_settings.py

from sqlalchemy import CheckConstraint, Column, Integer, String, DateTime
from sqlalchemy.sql import func

from chemist.database import Base


class AdminSettings(Base):
    __tablename__ = "admin_settings"

    id = Column(Integer, primary_key=True, index=True)

    # Low-stock alerts are skipped while this is empty
    admin_phone = Column(String, nullable=True)
    low_stock_threshold = Column(Integer, nullable=False, default=10)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    __table_args__ = (
        CheckConstraint("low_stock_threshold >= 0", name="ck_admin_settings_threshold_non_negative"),
    )
