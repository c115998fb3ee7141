# chemist/models/users.py

from sqlalchemy import Boolean, CheckConstraint, Column, Integer, String, DateTime
from sqlalchemy.sql import func

from chemist.database import Base

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    full_name = Column(String, nullable=True)
    password_hash = Column(String, nullable=False)

    # Policy role: "admin" or "cashier"
    role = Column(String, nullable=False, default="cashier")

    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        CheckConstraint("role IN ('admin', 'cashier')", name="ck_users_role_valid"),
    )

    @property
    def display_name(self):
        return self.full_name or self.email
