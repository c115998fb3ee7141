# schemas/report.py

from pydantic import BaseModel
from datetime import date
from decimal import Decimal
from typing import List

from chemist.schemas.sale import SaleResponse


class DailySales(BaseModel):
    date: date
    total: Decimal
    count: int


class SalesSummaryResponse(BaseModel):
    date: date
    today_total: Decimal
    today_count: int
    month_total: Decimal
    month_count: int
    daily: List[DailySales]
    recent_sales: List[SaleResponse]
