from pydantic import BaseModel, Field
from datetime import datetime


class AdminSettingsUpdate(BaseModel):
    admin_phone: str | None = Field(None, max_length=20)
    low_stock_threshold: int | None = Field(None, ge=0)


class AdminSettingsResponse(BaseModel):
    admin_phone: str | None
    low_stock_threshold: int
    updated_at: datetime | None = None

    class Config:
        from_attributes = True
