# schemas/report.py

from pydantic import BaseModel
from datetime import date, datetime
from decimal import Decimal
from typing import List


class PaymentMethodBreakdown(BaseModel):
    payment_method: str
    orders: int
    revenue: Decimal


class SalesReportResponse(BaseModel):
    start: datetime | None
    end: datetime | None
    total_orders: int
    total_revenue: Decimal
    total_items_sold: int
    by_payment_method: List[PaymentMethodBreakdown]


class DailyProfit(BaseModel):
    date: date
    total_revenue: Decimal
    total_expense: Decimal
    gross_profit: Decimal
    net_profit: Decimal


class ProfitReportResponse(BaseModel):
    start: datetime | None
    end: datetime | None
    profit_percentage: int
    total_revenue: Decimal
    total_expense: Decimal
    gross_profit: Decimal
    net_profit: Decimal
    days: List[DailyProfit]
