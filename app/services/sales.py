# =========================================================
# SALE COMMIT
#
# Turns a priced cart into one Sale row plus the matching
# stock decrements, in a single database transaction.
# Either everything is written or nothing is.
#
# Validation (auth, empty cart, total, payment) runs before
# the database is touched at all.
# =========================================================

import logging
from decimal import Decimal, InvalidOperation
from typing import Iterable

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.changes import change_feed
from app.core.config import settings
from app.core.errors import (
    CatalogItemNotFound,
    CommitFailed,
    EmptyCart,
    InsufficientPayment,
    InvalidCartItem,
    InvalidPayment,
    NotAuthenticated,
    OutOfStock,
    PosError,
    TotalMismatch,
)
from app.models.products import Product
from app.models.sale_items import SaleItem, SaleItemAddOn
from app.models.sales import Sale
from app.models.toppings import Topping
from app.schemas.sale import PaymentMethod
from app.services.cart import (
    PRODUCT,
    TOPPING,
    CartLine,
    cart_total,
    clamp_stock,
    consumption,
)

logger = logging.getLogger("app")

INVENTORY_MODELS = {
    PRODUCT: Product,
    TOPPING: Topping,
}

INVENTORY_COLLECTIONS = {
    PRODUCT: "products",
    TOPPING: "toppings",
}


def _has_sub_cent(price) -> bool:
    price = Decimal(str(price))
    return not price.is_finite() or price.as_tuple().exponent < -2


def _to_decimal(value, field_name: str) -> Decimal:
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvalidPayment(f"Invalid {field_name}")


def validate_sale(
    cashier,
    lines: tuple[CartLine, ...],
    payment_method,
    total,
    cash_tendered=None,
):
    """Checks everything that can be checked without the database."""
    if cashier is None:
        raise NotAuthenticated()

    if not lines:
        raise EmptyCart()

    for line in lines:
        prices = [line.base.unit_price, *(a.unit_price for a in line.add_ons)]
        if any(_has_sub_cent(p) for p in prices):
            raise InvalidCartItem(f"Price of {line.base.name} has more than 2 decimal places")

    try:
        method = PaymentMethod(payment_method)
    except ValueError:
        raise InvalidPayment(f"Unknown payment method: {payment_method}")

    total = _to_decimal(total, "total")
    computed_total = cart_total(lines)

    if total != computed_total:
        raise TotalMismatch(
            f"Submitted total {total} does not match cart total {computed_total}"
        )

    cash = None

    if method is PaymentMethod.CASH:
        if cash_tendered is None:
            raise InvalidPayment("Cash amount is required for cash payments")

        cash = _to_decimal(cash_tendered, "cash amount")

        if cash < total:
            raise InsufficientPayment(
                f"Cash tendered {cash} is less than the total {total}"
            )

    elif cash_tendered is not None:
        raise InvalidPayment("Cash amount is only accepted for cash payments")

    return method, computed_total, cash


def _build_sale(cashier, lines, method: PaymentMethod, total: Decimal, cash, request_id):
    sale = Sale(
        cashier_id=cashier.id,
        cashier_name=cashier.name,
        total=total,
        payment_method=method.value,
        cash_amount=cash,
        request_id=request_id,
    )

    # Prices and names come from the cart snapshot, never from the live catalog
    for line in lines:
        item = SaleItem(
            item_kind=line.base.kind,
            item_id=line.base.item_id,
            item_name=line.base.name,
            quantity=line.quantity,
            unit_price=line.base.unit_price,
            note=line.note,
            line_total=line.line_total,
        )

        for add_on in line.add_ons:
            item.add_ons.append(
                SaleItemAddOn(
                    add_on_id=add_on.add_on_id,
                    name=add_on.name,
                    price=add_on.unit_price,
                )
            )

        sale.items.append(item)

    return sale


def _decrement_stock(db: Session, usage: dict[tuple[str, int], int]) -> set[str]:
    touched = set()

    # Rows are locked in a fixed order so two checkouts cannot deadlock
    for (kind, item_id), used in sorted(usage.items()):
        model = INVENTORY_MODELS[kind]

        item = (
            db.query(model)
            .filter(model.id == item_id)
            .with_for_update()
            .first()
        )

        if item is None:
            raise CatalogItemNotFound(
                f"{kind.capitalize()} {item_id} no longer exists. Stock was not changed."
            )

        if used > item.stock:
            if not settings.ALLOW_OVERSELL:
                raise OutOfStock(f"Insufficient stock for {item.name}")

            logger.warning(
                f"Oversell: {kind} {item.id} ({item.name}) "
                f"stock {item.stock}, sold {used}. Stock set to 0."
            )

        item.stock = clamp_stock(item.stock, used)
        touched.add(INVENTORY_COLLECTIONS[kind])

    return touched


def commit_sale(
    db: Session,
    cashier,
    lines: Iterable[CartLine],
    payment_method,
    total,
    cash_tendered=None,
    request_id: str | None = None,
) -> Sale:
    lines = tuple(lines)
    method, total, cash = validate_sale(cashier, lines, payment_method, total, cash_tendered)

    if request_id:
        existing = db.query(Sale).filter(Sale.request_id == request_id).first()
        if existing:
            logger.info(f"Duplicate sale submission {request_id}, returning sale {existing.id}")
            return existing

    try:
        sale = _build_sale(cashier, lines, method, total, cash, request_id)
        db.add(sale)

        touched = _decrement_stock(db, consumption(lines))

        db.commit()

    except PosError:
        db.rollback()
        raise

    except IntegrityError:
        db.rollback()

        # Same request committed by a concurrent submit
        if request_id:
            existing = db.query(Sale).filter(Sale.request_id == request_id).first()
            if existing:
                return existing

        logger.exception("Sale commit rejected by the database")
        raise CommitFailed()

    except SQLAlchemyError:
        db.rollback()
        logger.exception("Sale commit failed")
        raise CommitFailed()

    db.refresh(sale)

    logger.info(
        f"Sale {sale.id} committed by {cashier.name} "
        f"total={sale.total} method={sale.payment_method} lines={len(lines)}"
    )

    change_feed.publish("sales", "created", sale.id)
    for collection in sorted(touched):
        change_feed.publish(collection, "stock_changed")

    return sale
