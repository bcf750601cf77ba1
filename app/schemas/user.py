from pydantic import BaseModel, Field
from datetime import datetime
from typing import Literal

Role = Literal["admin", "employee"]


class UserCreate(BaseModel):
    name: str = Field(..., min_length=2, description="Display name shown on receipts")
    username: str = Field(..., min_length=4, max_length=50)
    password: str = Field(..., min_length=6, max_length=72, description="Plain password (will be hashed). Minimum 6 characters.")
    role: Role = "employee"

class UserUpdate(BaseModel):
    name: str | None = Field(None, min_length=2)
    username: str | None = Field(None, min_length=4, max_length=50)
    # Empty or missing keeps the current password
    password: str | None = Field(None, max_length=72)
    role: Role | None = None

class UserResponse(BaseModel):
    id: int
    name: str
    username: str
    role: str
    created_at: datetime

    class Config:
        from_attributes = True

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse
