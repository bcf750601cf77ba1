# =========================================================
# CHECKOUT (SERVER-SIDE CART)
#
# Every cashier has one open cart kept in memory.
# Items are priced from the live catalog when added; the
# price is then frozen in the cart line.
#
# Flow:
#   add items -> choose payment -> (enter cash) -> pay
# =========================================================

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.core.auth import get_current_user
from app.core.rate_limiter import limiter
from app.models.products import Product
from app.models.toppings import Topping
from app.models.users import User
from app.schemas.checkout import (
    CheckoutItemAdd,
    CheckoutPayment,
    CheckoutQuantityUpdate,
    CheckoutResponse,
)
from app.schemas.sale import SaleResponse
from app.services.cart import PRODUCT, AddOn, BaseItem
from app.services.checkout import (
    CheckoutRegistry,
    CheckoutSession,
    get_checkout_registry,
)
from app.services.sales import commit_sale

router = APIRouter(prefix="/checkout", tags=["Checkout"])


def _session_to_out(session: CheckoutSession) -> dict:
    return {
        "state": session.state.value,
        "items": [
            {
                "line_id": line.line_id,
                "item_kind": line.base.kind,
                "item_id": line.base.item_id,
                "item_name": line.base.name,
                "unit_price": line.unit_price,
                "quantity": line.quantity,
                "add_ons": [
                    {
                        "add_on_id": a.add_on_id,
                        "name": a.name,
                        "unit_price": a.unit_price,
                    }
                    for a in line.add_ons
                ],
                "note": line.note,
                "line_total": line.line_total,
            }
            for line in session.cart
        ],
        "total": session.total,
        "payment_method": session.payment_method,
        "cash_amount": session.cash_tendered,
        "change_due": session.change_due,
        "last_sale_id": session.last_sale.id if session.last_sale is not None else None,
        "last_error": session.last_error,
    }


def _load_base_item(db: Session, item: CheckoutItemAdd) -> BaseItem:
    if item.item_kind == PRODUCT:
        product = db.query(Product).filter(Product.id == item.item_id).first()
        if not product:
            raise HTTPException(status_code=404, detail="Product not found")
        return BaseItem.product(product.id, product.name, product.price)

    topping = db.query(Topping).filter(Topping.id == item.item_id).first()
    if not topping:
        raise HTTPException(status_code=404, detail="Topping not found")
    return BaseItem.topping(topping.id, topping.name, topping.price)


def _load_add_ons(db: Session, topping_ids: list[int]) -> list[AddOn]:
    if not topping_ids:
        return []

    wanted = set(topping_ids)
    toppings = db.query(Topping).filter(Topping.id.in_(wanted)).all()

    if len(toppings) != len(wanted):
        raise HTTPException(status_code=404, detail="Topping not found")

    return [
        AddOn(t.id, t.name, t.price)
        for t in sorted(toppings, key=lambda t: t.id)
    ]


# =========================================================
# VIEW CART
# =========================================================
@router.get("", response_model=CheckoutResponse)
def get_checkout(
    current_user: User = Depends(get_current_user),
    registry: CheckoutRegistry = Depends(get_checkout_registry),
):
    return _session_to_out(registry.get(current_user.id))


# =========================================================
# CART EDITS
# =========================================================
@router.post("/items", response_model=CheckoutResponse)
def add_item(
    item: CheckoutItemAdd,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    registry: CheckoutRegistry = Depends(get_checkout_registry),
):
    base = _load_base_item(db, item)
    add_ons = _load_add_ons(db, item.topping_ids)

    session = registry.get(current_user.id)
    session.add_item(base, add_ons, item.note, item.quantity)

    return _session_to_out(session)


@router.put("/items/{line_id}", response_model=CheckoutResponse)
def update_item_quantity(
    line_id: str,
    update: CheckoutQuantityUpdate,
    current_user: User = Depends(get_current_user),
    registry: CheckoutRegistry = Depends(get_checkout_registry),
):
    session = registry.get(current_user.id)
    session.set_quantity(line_id, update.quantity)

    return _session_to_out(session)


@router.delete("/items/{line_id}", response_model=CheckoutResponse)
def remove_item(
    line_id: str,
    current_user: User = Depends(get_current_user),
    registry: CheckoutRegistry = Depends(get_checkout_registry),
):
    session = registry.get(current_user.id)
    session.remove_line(line_id)

    return _session_to_out(session)


@router.delete("", response_model=CheckoutResponse)
def clear_cart(
    current_user: User = Depends(get_current_user),
    registry: CheckoutRegistry = Depends(get_checkout_registry),
):
    session = registry.get(current_user.id)
    session.clear()

    return _session_to_out(session)


# =========================================================
# PAYMENT
# =========================================================
@router.put("/payment", response_model=CheckoutResponse)
def choose_payment(
    payment: CheckoutPayment,
    current_user: User = Depends(get_current_user),
    registry: CheckoutRegistry = Depends(get_checkout_registry),
):
    session = registry.get(current_user.id)
    session.select_method(payment.payment_method)

    if payment.cash_amount is not None:
        session.enter_cash(payment.cash_amount)

    return _session_to_out(session)


@router.post("/pay", response_model=SaleResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def pay(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    registry: CheckoutRegistry = Depends(get_checkout_registry),
):
    session = registry.get(current_user.id)

    return session.pay(
        lambda cart, method, total, cash: commit_sale(
            db,
            cashier=current_user,
            lines=cart,
            payment_method=method,
            total=total,
            cash_tendered=cash,
        )
    )
