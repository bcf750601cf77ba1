from decimal import Decimal

import pytest

from app.core.errors import CartLineNotFound, InvalidCartItem
from app.services.cart import (
    PRODUCT,
    TOPPING,
    AddOn,
    BaseItem,
    cart_total,
    change_due,
    clamp_stock,
    consumption,
    merge_or_add,
    remove_line,
    set_quantity,
)

LATTE = BaseItem.product(1, "Latte", "20000")
MOCHA = BaseItem.product(2, "Mocha", "25000")
BOBA = AddOn(10, "Boba", Decimal("3000"))
CHEESE = AddOn(11, "Cheese Foam", Decimal("5000"))


def test_latte_with_boba_totals_46000():
    cart = merge_or_add((), LATTE, [BOBA], quantity=2)

    assert len(cart) == 1
    assert cart[0].unit_price == Decimal("23000")
    assert cart_total(cart) == Decimal("46000")
    assert change_due(cart_total(cart), Decimal("50000")) == Decimal("4000")


def test_total_is_sum_of_base_plus_add_ons_times_quantity():
    cart = ()
    cart = merge_or_add(cart, LATTE, [BOBA, CHEESE], quantity=3)
    cart = merge_or_add(cart, MOCHA, quantity=1)
    cart = merge_or_add(cart, LATTE, note="less ice", quantity=2)

    expected = sum(
        (
            (line.base.unit_price + sum((a.unit_price for a in line.add_ons), Decimal("0")))
            * line.quantity
            for line in cart
        ),
        Decimal("0"),
    )

    assert cart_total(cart) == expected == Decimal("149000")


def test_empty_cart_totals_zero():
    assert cart_total(()) == Decimal("0")


@pytest.mark.parametrize("times", [2, 3, 5])
def test_same_item_merges_into_one_line(times):
    cart = ()
    for _ in range(times):
        cart = merge_or_add(cart, LATTE)

    assert len(cart) == 1
    assert cart[0].quantity == times


def test_add_on_order_and_note_whitespace_do_not_split_lines():
    cart = merge_or_add((), LATTE, [BOBA, CHEESE], note="hot")
    cart = merge_or_add(cart, LATTE, [CHEESE, BOBA], note="  hot ")

    assert len(cart) == 1
    assert cart[0].quantity == 2


@pytest.mark.parametrize(
    "add_ons, note",
    [
        ([BOBA], None),
        ([], "no sugar"),
        ([BOBA, CHEESE], None),
    ],
)
def test_different_add_ons_or_note_make_distinct_lines(add_ons, note):
    cart = merge_or_add((), LATTE)
    cart = merge_or_add(cart, LATTE, add_ons, note)

    assert len(cart) == 2
    assert cart[0].line_id != cart[1].line_id


def test_product_and_topping_with_same_id_are_distinct():
    cart = merge_or_add((), BaseItem.product(10, "Latte", "20000"))
    cart = merge_or_add(cart, BaseItem.topping(10, "Boba", "3000"))

    assert len(cart) == 2


def test_duplicate_add_on_counts_once():
    cart = merge_or_add((), LATTE, [BOBA, BOBA])

    assert cart[0].add_ons == (BOBA,)
    assert cart[0].unit_price == Decimal("23000")


def test_merge_returns_new_cart():
    original = merge_or_add((), LATTE)
    updated = merge_or_add(original, LATTE)

    assert original[0].quantity == 1
    assert updated[0].quantity == 2


def test_merge_rejects_non_positive_quantity():
    with pytest.raises(ValueError):
        merge_or_add((), LATTE, quantity=0)


def test_standalone_topping_cannot_carry_toppings():
    boba_alone = BaseItem.topping(10, "Boba", "3000")

    with pytest.raises(InvalidCartItem):
        merge_or_add((), boba_alone, [CHEESE])

    assert merge_or_add((), boba_alone)[0].add_ons == ()


@pytest.mark.parametrize("new_qty", [0, -1, -10])
def test_set_quantity_to_zero_or_less_removes_line(new_qty):
    cart = merge_or_add((), LATTE)
    cart = merge_or_add(cart, MOCHA)

    cart = set_quantity(cart, cart[0].line_id, new_qty)

    assert len(cart) == 1
    assert cart[0].base == MOCHA
    assert all(line.quantity > 0 for line in cart)


def test_set_quantity_updates_line_total():
    cart = merge_or_add((), LATTE, [BOBA])
    cart = set_quantity(cart, cart[0].line_id, 4)

    assert cart[0].quantity == 4
    assert cart[0].line_total == Decimal("92000")


def test_unknown_line_raises():
    cart = merge_or_add((), LATTE)

    with pytest.raises(CartLineNotFound):
        set_quantity(cart, "missing", 2)

    with pytest.raises(CartLineNotFound):
        remove_line(cart, "missing")


def test_remove_line():
    cart = merge_or_add((), LATTE)
    cart = merge_or_add(cart, MOCHA)

    cart = remove_line(cart, cart[1].line_id)

    assert [line.base for line in cart] == [LATTE]


@pytest.mark.parametrize(
    "total, cash, expected",
    [
        ("46000", "50000", "4000"),
        ("46000", "46000", "0"),
        ("46000", "40000", "0"),
        ("0", "1000", "1000"),
    ],
)
def test_change_due(total, cash, expected):
    assert change_due(Decimal(total), Decimal(cash)) == Decimal(expected)


@pytest.mark.parametrize(
    "current, used, expected",
    [
        (10, 2, 8),
        (2, 2, 0),
        (1, 5, 0),
        (0, 3, 0),
    ],
)
def test_stock_never_goes_negative(current, used, expected):
    assert clamp_stock(current, used) == expected


def test_add_on_consumed_per_unit_of_line():
    cart = merge_or_add((), LATTE, [BOBA], quantity=2)

    assert consumption(cart) == {
        (PRODUCT, 1): 2,
        (TOPPING, 10): 2,
    }


def test_topping_sold_alone_and_as_add_on_adds_up():
    cart = merge_or_add((), LATTE, [BOBA], quantity=2)
    cart = merge_or_add(cart, BaseItem.topping(10, "Boba", "3000"), quantity=1)

    assert consumption(cart)[(TOPPING, 10)] == 3


def test_base_item_rejects_unknown_kind():
    with pytest.raises(ValueError):
        BaseItem("service", 1, "Delivery", Decimal("5000"))
