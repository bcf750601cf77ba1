import threading
from decimal import Decimal

import pytest

from app.core.errors import (
    CheckoutInProgress,
    CommitFailed,
    EmptyCart,
    InvalidPayment,
)
from app.schemas.sale import PaymentMethod
from app.services.cart import AddOn, BaseItem
from app.services.checkout import CheckoutRegistry, CheckoutSession, CheckoutState

LATTE = BaseItem.product(1, "Latte", "20000")
BOBA = AddOn(10, "Boba", Decimal("3000"))


class FakeSale:
    def __init__(self, sale_id):
        self.id = sale_id


def _session_with_latte():
    session = CheckoutSession(cashier_id=1)
    session.add_item(LATTE, [BOBA], quantity=2)
    return session


def test_cash_flow_reaches_success_and_clears_cart():
    session = _session_with_latte()
    calls = []

    session.select_method("cash")
    assert session.state is CheckoutState.CASH_AMOUNT_ENTRY

    session.enter_cash(Decimal("50000"))
    assert session.change_due == Decimal("4000")

    def commit(cart, method, total, cash):
        calls.append((len(cart), method, total, cash))
        assert session.state is CheckoutState.COMMITTING
        return FakeSale(7)

    sale = session.pay(commit)

    assert sale.id == 7
    assert calls == [(1, PaymentMethod.CASH, Decimal("46000"), Decimal("50000"))]
    assert session.state is CheckoutState.SUCCESS
    assert session.cart == ()
    assert session.last_sale is sale


def test_non_cash_method_skips_amount_entry():
    session = _session_with_latte()

    session.select_method(PaymentMethod.QRIS)

    assert session.state is CheckoutState.METHOD_SELECTED
    with pytest.raises(InvalidPayment):
        session.enter_cash(Decimal("50000"))


def test_select_method_on_empty_cart_fails():
    session = CheckoutSession(cashier_id=1)

    with pytest.raises(EmptyCart):
        session.select_method("cash")


def test_pay_without_method_fails():
    session = _session_with_latte()

    with pytest.raises(InvalidPayment):
        session.pay(lambda *args: FakeSale(1))

    assert session.state is CheckoutState.IDLE


def test_editing_cart_resets_payment_step():
    session = _session_with_latte()
    session.select_method("cash")
    session.enter_cash(Decimal("50000"))

    session.set_quantity(session.cart[0].line_id, 3)

    assert session.state is CheckoutState.IDLE
    assert session.payment_method is None
    assert session.cash_tendered is None
    assert session.total == Decimal("69000")


def test_failed_commit_keeps_cart_and_payment_step():
    session = _session_with_latte()
    session.select_method("cash")
    session.enter_cash(Decimal("50000"))

    def failing_commit(cart, method, total, cash):
        raise CommitFailed()

    with pytest.raises(CommitFailed):
        session.pay(failing_commit)

    assert session.state is CheckoutState.CASH_AMOUNT_ENTRY
    assert len(session.cart) == 1
    assert session.cash_tendered == Decimal("50000")
    assert "Stock was not changed" in session.last_error

    # Retry without re-entering anything
    sale = session.pay(lambda *args: FakeSale(8))
    assert sale.id == 8
    assert session.last_error is None


def test_only_one_commit_in_flight():
    session = _session_with_latte()
    session.select_method("qris")

    started = threading.Event()
    release = threading.Event()
    errors = []

    def slow_commit(cart, method, total, cash):
        started.set()
        release.wait(timeout=5)
        return FakeSale(1)

    worker = threading.Thread(target=session.pay, args=(slow_commit,))
    worker.start()
    assert started.wait(timeout=5)

    try:
        session.pay(lambda *args: FakeSale(2))
    except CheckoutInProgress as exc:
        errors.append(exc)

    try:
        session.add_item(LATTE)
    except CheckoutInProgress as exc:
        errors.append(exc)

    release.set()
    worker.join(timeout=5)

    assert len(errors) == 2
    assert session.state is CheckoutState.SUCCESS
    assert session.last_sale.id == 1


def test_registry_keeps_one_session_per_cashier():
    registry = CheckoutRegistry()

    first = registry.get(1)
    assert registry.get(1) is first
    assert registry.get(2) is not first

    registry.discard(1)
    assert registry.get(1) is not first

    registry.reset()
    assert registry.get(2).cart == ()
