from decimal import Decimal
from pydantic import BaseModel, Field, HttpUrl
from datetime import datetime
from typing import List, Literal


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=2)
    category_id: int

    price: Decimal = Field(
        ...,
        ge=0,
        lt=10_000_000_000,
        decimal_places=2,
        description="Selling price, cannot be negative"
    )

    stock: int = Field(..., ge=0)
    image_url: HttpUrl | Literal[""] | None = None
    description: str = ""


class ProductUpdate(BaseModel):
    name: str | None = Field(None, min_length=2)
    category_id: int | None = None
    price: Decimal | None = Field(None, ge=0, lt=10_000_000_000, decimal_places=2)
    stock: int | None = Field(None, ge=0)
    image_url: HttpUrl | Literal[""] | None = None
    description: str | None = None

class ProductResponse(BaseModel):
    id: int
    name: str
    category_id: int
    category_name: str | None = None
    price: Decimal
    stock: int
    image_url: str
    description: str
    created_at: datetime

    class Config:
        from_attributes = True

class StockHighlight(BaseModel):
    id: int
    name: str
    stock: int

    class Config:
        from_attributes = True

class StockHighlightsResponse(BaseModel):
    most_stock: List[StockHighlight]
    least_stock: List[StockHighlight]
