from decimal import Decimal
from pydantic import BaseModel, Field
from typing import List, Literal

from app.schemas.sale import PaymentMethod


class CheckoutItemAdd(BaseModel):
    item_kind: Literal["product", "topping"] = "product"
    item_id: int
    topping_ids: List[int] = []
    note: str | None = Field(None, max_length=200)
    quantity: int = Field(1, gt=0)

class CheckoutQuantityUpdate(BaseModel):
    # Zero or less removes the line
    quantity: int

class CheckoutPayment(BaseModel):
    payment_method: PaymentMethod
    cash_amount: Decimal | None = Field(None, ge=0, lt=10_000_000_000, decimal_places=2)

class CartAddOnOut(BaseModel):
    add_on_id: int
    name: str
    unit_price: Decimal

class CartLineOut(BaseModel):
    line_id: str
    item_kind: str
    item_id: int
    item_name: str
    unit_price: Decimal
    quantity: int
    add_ons: List[CartAddOnOut]
    note: str
    line_total: Decimal

class CheckoutResponse(BaseModel):
    state: str
    items: List[CartLineOut]
    total: Decimal
    payment_method: PaymentMethod | None
    cash_amount: Decimal | None
    change_due: Decimal
    last_sale_id: int | None
    last_error: str | None
