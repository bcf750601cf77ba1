# =========================================================
# REPORT CALCULATIONS
#
# Period handling shared by sales / purchases listings and
# the sales + profit reports. Aggregation is done on rows
# already filtered to the period.
# =========================================================

from calendar import monthrange
from collections import OrderedDict
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Iterable

PERIODS = ("today", "this_month", "all", "custom")


def resolve_period(
    period: str,
    start_date: date | None = None,
    end_date: date | None = None,
    today: date | None = None,
):
    """
    Returns (start, end) datetimes covering whole days, or (None, None)
    for "all". Raises ValueError on an unusable range.
    """
    today = today or datetime.now(timezone.utc).date()

    if period == "today":
        start_date = end_date = today

    elif period == "this_month":
        start_date = today.replace(day=1)
        end_date = today.replace(day=monthrange(today.year, today.month)[1])

    elif period == "all":
        return None, None

    elif period == "custom":
        if start_date is None:
            raise ValueError("start_date is required for a custom period")
        end_date = end_date or start_date

    else:
        raise ValueError(f"Unknown period: {period}")

    if start_date > end_date:
        raise ValueError("start_date must not be after end_date")

    return (
        datetime.combine(start_date, datetime.min.time()),
        datetime.combine(end_date, datetime.max.time()),
    )


def apply_period(query, column, start_dt, end_dt):
    if start_dt is None:
        return query
    return query.filter(column.between(start_dt, end_dt))


def _day(value: datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def sales_summary(sales: Iterable) -> dict:
    total_revenue = Decimal("0.00")
    total_orders = 0
    total_items_sold = 0
    by_method: dict[str, dict] = {}

    for sale in sales:
        total_orders += 1
        total_revenue += sale.total
        total_items_sold += sum(item.quantity for item in sale.items)

        bucket = by_method.setdefault(
            sale.payment_method,
            {"payment_method": sale.payment_method, "orders": 0, "revenue": Decimal("0.00")},
        )
        bucket["orders"] += 1
        bucket["revenue"] += sale.total

    return {
        "total_orders": total_orders,
        "total_revenue": total_revenue,
        "total_items_sold": total_items_sold,
        "by_payment_method": sorted(by_method.values(), key=lambda b: b["payment_method"]),
    }


def profit_report(sales: Iterable, purchases: Iterable, profit_percentage) -> dict:
    """
    Daily revenue (sale totals) against expense (purchase prices).
    gross = revenue - expense, net = gross * profit_percentage / 100.
    """
    daily: dict[date, dict] = {}

    for sale in sales:
        day = daily.setdefault(_day(sale.created_at), {"revenue": Decimal("0.00"), "expense": Decimal("0.00")})
        day["revenue"] += sale.total

    for purchase in purchases:
        day = daily.setdefault(_day(purchase.created_at), {"revenue": Decimal("0.00"), "expense": Decimal("0.00")})
        day["expense"] += purchase.price

    rate = Decimal(profit_percentage) / Decimal(100)

    days = OrderedDict()
    totals = {
        "total_revenue": Decimal("0.00"),
        "total_expense": Decimal("0.00"),
        "gross_profit": Decimal("0.00"),
        "net_profit": Decimal("0.00"),
    }

    # Newest day first
    for day in sorted(daily, reverse=True):
        revenue = daily[day]["revenue"]
        expense = daily[day]["expense"]
        gross = revenue - expense
        net = (gross * rate).quantize(Decimal("0.01"))

        days[day] = {
            "date": day,
            "total_revenue": revenue,
            "total_expense": expense,
            "gross_profit": gross,
            "net_profit": net,
        }

        totals["total_revenue"] += revenue
        totals["total_expense"] += expense
        totals["gross_profit"] += gross
        totals["net_profit"] += net

    return {
        "profit_percentage": int(profit_percentage),
        "days": list(days.values()),
        **totals,
    }
