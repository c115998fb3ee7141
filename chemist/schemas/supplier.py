# schemas/supplier.py

from pydantic import BaseModel, EmailStr, Field
from datetime import date, datetime
from decimal import Decimal


class SupplierCreate(BaseModel):
    name: str = Field(..., min_length=1)
    contact_person: str | None = None
    phone: str = Field(..., min_length=1)
    email: EmailStr | None = None
    company: str = Field(..., min_length=1, description="Distributing company")
    address: str | None = None


class SupplierResponse(BaseModel):
    id: int
    name: str
    contact_person: str | None
    phone: str
    email: str | None
    company: str
    address: str | None
    created_at: datetime

    class Config:
        from_attributes = True


class IntakeCreate(BaseModel):
    supplier_id: int
    product_name: str = Field(..., min_length=1)
    batch_number: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0)
    cost_per_unit: Decimal = Field(..., ge=0, lt=100_000_000)
    expiry_date: date


class IntakeResponse(BaseModel):
    id: int
    supplier_id: int
    product_name: str
    batch_number: str
    quantity: int
    quantity_remaining: int
    cost_per_unit: Decimal
    total_cost: Decimal
    expiry_date: date
    created_at: datetime

    class Config:
        from_attributes = True


class SyncRequest(BaseModel):
    # Defaults to everything left in the batch
    quantity: int | None = Field(None, gt=0)


class SyncResponse(BaseModel):
    batch_id: int
    medicine_id: int
    medicine_name: str
    synced_quantity: int
    quantity_in_stock: int
    quantity_remaining_in_batch: int
    created: bool
