# schemas/sale.py

from pydantic import BaseModel, Field
from datetime import datetime
from typing import List
from decimal import Decimal

class SaleItemCreate(BaseModel):
    medicine_id: int
    quantity: int
    unit_price: Decimal | None = Field(None, ge=0, lt=100_000_000)

class SaleCreate(BaseModel):
    items: List[SaleItemCreate]
    payment_method: str = "cash"
    customer_name: str | None = None
    customer_phone: str | None = None
    # Client-generated key per checkout attempt (double click / retry protection)
    request_id: str | None = Field(None, max_length=100)

class SaleItemResponse(BaseModel):
    medicine_id: int
    medicine_name: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal

    class Config:
        from_attributes = True

class SaleResponse(BaseModel):
    id: int
    sale_number: str
    cashier_id: int
    total_amount: Decimal
    payment_method: str
    customer_name: str | None
    customer_phone: str | None
    created_at: datetime
    items: List[SaleItemResponse]

    class Config:
        from_attributes = True

class CheckoutResponse(SaleResponse):
    # medicine id -> quantity left after this sale
    stock: dict[int, int] = {}
