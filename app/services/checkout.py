# =========================================================
# CHECKOUT FLOW
#
# One CheckoutSession per cashier:
#
#   idle -> method_selected -> (cash_amount_entry if cash)
#        -> committing -> success
#
# A failed commit goes back to method_selected /
# cash_amount_entry with the cart untouched, so the cashier
# can simply pay again. Only one commit may be in flight.
# =========================================================

import threading
from decimal import Decimal
from enum import Enum
from typing import Callable

from app.core.errors import CheckoutInProgress, EmptyCart, InvalidPayment, PosError
from app.schemas.sale import PaymentMethod
from app.services.cart import (
    Cart,
    cart_total,
    change_due,
    merge_or_add,
    remove_line,
    set_quantity,
)


class CheckoutState(str, Enum):
    IDLE = "idle"
    METHOD_SELECTED = "method_selected"
    CASH_AMOUNT_ENTRY = "cash_amount_entry"
    COMMITTING = "committing"
    SUCCESS = "success"


# commit(cart, payment_method, total, cash_tendered) -> sale
CommitFn = Callable[[Cart, PaymentMethod, Decimal, Decimal | None], object]


class CheckoutSession:
    def __init__(self, cashier_id: int):
        self.cashier_id = cashier_id
        self.cart: Cart = ()
        self.state = CheckoutState.IDLE
        self.payment_method: PaymentMethod | None = None
        self.cash_tendered: Decimal | None = None
        self.last_sale = None
        self.last_error: str | None = None
        self._lock = threading.Lock()

    @property
    def total(self) -> Decimal:
        return cart_total(self.cart)

    @property
    def change_due(self) -> Decimal:
        if self.payment_method is PaymentMethod.CASH and self.cash_tendered is not None:
            return change_due(self.total, self.cash_tendered)
        return Decimal("0")

    # ---------------- CART ----------------

    def _edit(self, new_cart: Cart):
        # Any edit starts over: the payment step must be redone for the new total
        self.cart = new_cart
        self.state = CheckoutState.IDLE
        self.payment_method = None
        self.cash_tendered = None
        self.last_error = None

    def _ensure_not_committing(self):
        if self.state is CheckoutState.COMMITTING:
            raise CheckoutInProgress()

    def add_item(self, base, add_ons=(), note=None, quantity: int = 1):
        with self._lock:
            self._ensure_not_committing()
            self._edit(merge_or_add(self.cart, base, add_ons, note, quantity))

    def set_quantity(self, line_id: str, quantity: int):
        with self._lock:
            self._ensure_not_committing()
            self._edit(set_quantity(self.cart, line_id, quantity))

    def remove_line(self, line_id: str):
        with self._lock:
            self._ensure_not_committing()
            self._edit(remove_line(self.cart, line_id))

    def clear(self):
        with self._lock:
            self._ensure_not_committing()
            self._edit(())

    # ---------------- PAYMENT ----------------

    def select_method(self, method):
        method = PaymentMethod(method)

        with self._lock:
            self._ensure_not_committing()

            if not self.cart:
                raise EmptyCart()

            self.payment_method = method
            self.cash_tendered = None
            self.state = (
                CheckoutState.CASH_AMOUNT_ENTRY
                if method is PaymentMethod.CASH
                else CheckoutState.METHOD_SELECTED
            )

    def enter_cash(self, amount):
        with self._lock:
            if self.state is not CheckoutState.CASH_AMOUNT_ENTRY:
                raise InvalidPayment("Select cash payment before entering an amount")

            self.cash_tendered = Decimal(str(amount))

    def pay(self, commit: CommitFn):
        with self._lock:
            if self.state is CheckoutState.COMMITTING:
                raise CheckoutInProgress()

            if not self.cart:
                raise EmptyCart()

            if self.payment_method is None:
                raise InvalidPayment("Select a payment method first")

            resume_state = self.state
            self.state = CheckoutState.COMMITTING
            cart = self.cart

        # The commit runs without the lock; COMMITTING blocks every other change
        try:
            sale = commit(cart, self.payment_method, cart_total(cart), self.cash_tendered)
        except PosError as exc:
            with self._lock:
                self.state = resume_state
                self.last_error = exc.detail
            raise
        except Exception:
            with self._lock:
                self.state = resume_state
                self.last_error = "Unexpected error while saving the sale"
            raise

        with self._lock:
            self.cart = ()
            self.state = CheckoutState.SUCCESS
            self.payment_method = None
            self.cash_tendered = None
            self.last_sale = sale
            self.last_error = None

        return sale


class CheckoutRegistry:
    """Holds the open checkout of every cashier for the lifetime of the process."""

    def __init__(self):
        self._sessions: dict[int, CheckoutSession] = {}
        self._lock = threading.Lock()

    def get(self, cashier_id: int) -> CheckoutSession:
        with self._lock:
            session = self._sessions.get(cashier_id)
            if session is None:
                session = CheckoutSession(cashier_id)
                self._sessions[cashier_id] = session
            return session

    def discard(self, cashier_id: int) -> None:
        with self._lock:
            self._sessions.pop(cashier_id, None)

    def reset(self) -> None:
        with self._lock:
            self._sessions.clear()


checkout_registry = CheckoutRegistry()


def get_checkout_registry() -> CheckoutRegistry:
    return checkout_registry
