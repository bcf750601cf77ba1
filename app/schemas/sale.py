# schemas/sale.py

from enum import Enum
from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Literal
from decimal import Decimal


class PaymentMethod(str, Enum):
    CASH = "cash"
    QRIS = "qris"
    E_WALLET = "e_wallet"
    BANK_TRANSFER = "bank_transfer"
    DELIVERY_COURIER = "delivery_courier"


# Money is stored with 2 decimal places; anything finer would be rounded away on save
MONEY_LIMIT = 10_000_000_000


class SaleAddOnCreate(BaseModel):
    add_on_id: int
    name: str = Field(..., min_length=1, max_length=100)
    unit_price: Decimal = Field(..., ge=0, lt=MONEY_LIMIT, decimal_places=2)

class SaleItemCreate(BaseModel):
    item_kind: Literal["product", "topping"] = "product"
    item_id: int
    item_name: str = Field(..., min_length=1, max_length=100)
    unit_price: Decimal = Field(..., ge=0, lt=MONEY_LIMIT, decimal_places=2)
    quantity: int = Field(..., gt=0)
    add_ons: List[SaleAddOnCreate] = []
    note: str | None = Field(None, max_length=200)

class SaleCreate(BaseModel):
    items: List[SaleItemCreate]
    payment_method: PaymentMethod
    total: Decimal = Field(..., ge=0, lt=MONEY_LIMIT, decimal_places=2)
    cash_amount: Decimal | None = Field(None, ge=0, lt=MONEY_LIMIT, decimal_places=2)
    request_id: str | None = Field(None, max_length=64)

class SaleItemAddOnResponse(BaseModel):
    add_on_id: int
    name: str
    price: Decimal

    class Config:
        from_attributes = True

class SaleItemResponse(BaseModel):
    item_kind: str
    item_id: int
    item_name: str
    quantity: int
    unit_price: Decimal
    note: str
    line_total: Decimal
    add_ons: List[SaleItemAddOnResponse]

    class Config:
        from_attributes = True

class SaleResponse(BaseModel):
    id: int
    cashier_id: int
    cashier_name: str
    total: Decimal
    payment_method: str
    cash_amount: Decimal | None
    change_due: Decimal
    created_at: datetime
    items: List[SaleItemResponse]

    class Config:
        from_attributes = True
