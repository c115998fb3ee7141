from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
from typing import List, Literal

class UserCreate(BaseModel):
    email: EmailStr = Field(..., description="Login email")
    password: str = Field(..., min_length=8, max_length=72, description="Plain password (will be hashed). Minimum 8 characters.")
    full_name: str | None = Field(None, description="Shown on sale notifications")
    role: Literal["admin", "cashier"] = "cashier"

class UserResponse(BaseModel):
    id: int
    email: EmailStr
    full_name: str | None
    role: str
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True

class Permission(BaseModel):
    resource: str
    action: str
    scope: str

class MeResponse(BaseModel):
    user: UserResponse
    permissions: List[Permission]

class CredentialsUpdate(BaseModel):
    old_email: EmailStr
    new_email: EmailStr
    new_password: str = Field(..., min_length=8, max_length=72)

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
