# app/services/receipt.py
#
# Fixed width text receipt for a committed sale, ready for a
# 58mm thermal printer (32 columns).

from decimal import Decimal

RECEIPT_WIDTH = 32

PAYMENT_METHOD_LABELS = {
    "cash": "Cash",
    "qris": "QRIS",
    "e_wallet": "E-Wallet",
    "bank_transfer": "Bank Transfer",
    "delivery_courier": "Delivery Courier",
}


def format_money(amount) -> str:
    # 46000 -> "46.000", matching how prices are printed in store
    value = Decimal(amount).quantize(Decimal("1"))
    return f"{value:,}".replace(",", ".")


def _row(left: str, right: str) -> str:
    space = RECEIPT_WIDTH - len(left) - len(right)
    if space < 1:
        return f"{left}\n{right.rjust(RECEIPT_WIDTH)}"
    return f"{left}{' ' * space}{right}"


def render_receipt(sale, store=None) -> str:
    separator = "-" * RECEIPT_WIDTH
    lines = []

    if store is not None:
        lines.append(store.store_name.center(RECEIPT_WIDTH).rstrip())
        if store.address:
            lines.append(store.address.center(RECEIPT_WIDTH).rstrip())
        if store.phone:
            lines.append(store.phone.center(RECEIPT_WIDTH).rstrip())
        lines.append(separator)

    lines.append(f"No: {str(sale.id).zfill(8)[:8]}")
    lines.append(f"Cashier: {sale.cashier_name}")
    if sale.created_at is not None:
        lines.append(f"Date: {sale.created_at.strftime('%d/%m/%y %H:%M')}")
    lines.append(separator)

    for item in sale.items:
        lines.append(item.item_name)
        lines.append(
            _row(
                f"{item.quantity} x {format_money(item.unit_price)}",
                format_money(item.unit_price * item.quantity),
            )
        )
        for add_on in item.add_ons:
            lines.append(
                _row(
                    f"  + {add_on.name}",
                    format_money(add_on.price * item.quantity),
                )
            )
        if item.note:
            lines.append(f"  Note: {item.note}")

    lines.append(separator)
    lines.append(_row("TOTAL", f"Rp {format_money(sale.total)}"))

    method_label = PAYMENT_METHOD_LABELS.get(sale.payment_method, sale.payment_method)
    paid = sale.cash_amount if sale.cash_amount is not None else sale.total
    lines.append(_row(f"PAID ({method_label})", f"Rp {format_money(paid)}"))

    if sale.change_due > 0:
        lines.append(_row("CHANGE", f"Rp {format_money(sale.change_due)}"))

    lines.append(separator)
    lines.append("Thank you!".center(RECEIPT_WIDTH).rstrip())

    return "\n".join(lines) + "\n"
