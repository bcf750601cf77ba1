from decimal import Decimal
from pydantic import BaseModel, Field, HttpUrl
from datetime import datetime
from typing import Literal


class ToppingCreate(BaseModel):
    name: str = Field(..., min_length=2)
    price: Decimal = Field(..., ge=0, lt=10_000_000_000, decimal_places=2)
    stock: int = Field(..., ge=0)
    image_url: HttpUrl | Literal[""] | None = None
    description: str = ""

class ToppingUpdate(BaseModel):
    name: str | None = Field(None, min_length=2)
    price: Decimal | None = Field(None, ge=0, lt=10_000_000_000, decimal_places=2)
    stock: int | None = Field(None, ge=0)
    image_url: HttpUrl | Literal[""] | None = None
    description: str | None = None

class ToppingResponse(BaseModel):
    id: int
    name: str
    price: Decimal
    stock: int
    image_url: str
    description: str
    created_at: datetime

    class Config:
        from_attributes = True
