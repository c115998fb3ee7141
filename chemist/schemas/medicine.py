from decimal import Decimal
from pydantic import BaseModel, Field
from datetime import datetime


class MedicineCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)

    unit_cost: Decimal = Field(
        Decimal("0.00"),
        ge=0,
        lt=100_000_000,
        description="Unit cost must be below 100 million"
    )

    quantity: int = Field(0, ge=0)


class MedicineUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    unit_cost: Decimal | None = Field(None, ge=0, lt=100_000_000)
    quantity: int | None = Field(None, ge=0)


class MedicineResponse(BaseModel):
    id: int
    name: str
    unit_cost: Decimal
    quantity: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
