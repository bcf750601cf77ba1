# =========================================================
# DOMAIN ERRORS
#
# Every checkout / sale failure is a PosError carrying the
# HTTP status and the message shown to the cashier.
# One handler turns them into JSON so none of them crash
# the application.
# =========================================================

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger("app")


class PosError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "POS_ERROR"
    detail = "Request could not be processed"

    def __init__(self, detail: str | None = None):
        if detail is not None:
            self.detail = detail
        super().__init__(self.detail)


class NotAuthenticated(PosError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "NOT_AUTHENTICATED"
    detail = "You must be logged in to make a sale"


# ---------------- VALIDATION (no writes attempted) ----------------

class SaleValidationError(PosError):
    code = "SALE_INVALID"


class EmptyCart(SaleValidationError):
    code = "EMPTY_CART"
    detail = "Cart is empty"


class InsufficientPayment(SaleValidationError):
    code = "INSUFFICIENT_PAYMENT"
    detail = "Cash tendered is less than the total"


class TotalMismatch(SaleValidationError):
    code = "TOTAL_MISMATCH"
    detail = "Submitted total does not match the cart"


class InvalidPayment(SaleValidationError):
    code = "INVALID_PAYMENT"
    detail = "Invalid payment details"


class InvalidCartItem(SaleValidationError):
    code = "INVALID_CART_ITEM"
    detail = "Invalid cart item"


class CartLineNotFound(PosError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "CART_LINE_NOT_FOUND"
    detail = "Cart item not found"


# ---------------- STOCK / FLOW ----------------

class CatalogItemNotFound(PosError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "CATALOG_ITEM_NOT_FOUND"
    detail = "Item is no longer in the catalog"


class OutOfStock(PosError):
    status_code = status.HTTP_409_CONFLICT
    code = "OUT_OF_STOCK"
    detail = "Insufficient stock"


class CheckoutInProgress(PosError):
    status_code = status.HTTP_409_CONFLICT
    code = "CHECKOUT_IN_PROGRESS"
    detail = "A payment for this cart is already being processed"


# ---------------- COMMIT ----------------

class CommitFailed(PosError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "COMMIT_FAILED"
    detail = "Unable to save the sale. Stock was not changed, please try again."


async def pos_error_handler(request: Request, exc: PosError):
    if exc.status_code >= 500:
        logger.warning(f"{request.method} {request.url.path} failed: {exc.code}")

    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "code": exc.code},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PosError, pos_error_handler)
