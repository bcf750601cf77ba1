from decimal import Decimal
from pydantic import BaseModel, Field
from datetime import datetime


class PurchaseCreate(BaseModel):
    item_name: str = Field(..., min_length=2)
    supplier: str = Field(..., min_length=2)
    quantity: int = Field(..., ge=1)
    price: Decimal = Field(..., ge=1, lt=10_000_000_000, decimal_places=2, description="Amount paid for this purchase")
    description: str = ""

class PurchaseUpdate(BaseModel):
    item_name: str | None = Field(None, min_length=2)
    supplier: str | None = Field(None, min_length=2)
    quantity: int | None = Field(None, ge=1)
    price: Decimal | None = Field(None, ge=1, lt=10_000_000_000, decimal_places=2)
    description: str | None = None

class PurchaseResponse(BaseModel):
    id: int
    item_name: str
    supplier: str
    quantity: int
    price: Decimal
    description: str
    user_id: int
    user_name: str
    created_at: datetime

    class Config:
        from_attributes = True
