# =========================================================
# REPORTS ROUTER
#
# SALES SUMMARY:
# - Any logged-in user
# - Employees only see the sales they rang up
#
# PROFIT (ADMIN):
# - Daily revenue (sales) vs expense (purchases)
# - Net profit = gross profit * store profit percentage
# =========================================================

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session, selectinload

from app.database import get_db
from app.core.auth import get_admin_user, get_current_user
from app.models.purchases import Purchase
from app.models.sales import Sale
from app.routers.settings import get_profit_percentage
from app.schemas.report import ProfitReportResponse, SalesReportResponse
from app.services.reports import (
    apply_period,
    profit_report,
    resolve_period,
    sales_summary,
)

router = APIRouter(prefix="/reports", tags=["Reports"])

PERIOD_PATTERN = "^(today|this_month|all|custom)$"


def _period_or_400(period: str, start_date: date | None, end_date: date | None):
    try:
        return resolve_period(period, start_date, end_date)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


# =========================================================
# SALES SUMMARY
# =========================================================
@router.get("/sales", response_model=SalesReportResponse)
def sales_report(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
    period: str = Query("today", pattern=PERIOD_PATTERN),
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
):
    start_dt, end_dt = _period_or_400(period, start_date, end_date)

    query = apply_period(
        db.query(Sale).options(selectinload(Sale.items)),
        Sale.created_at,
        start_dt,
        end_dt,
    )

    if current_user.role != "admin":
        query = query.filter(Sale.cashier_id == current_user.id)

    return {
        "start": start_dt,
        "end": end_dt,
        **sales_summary(query.all()),
    }


# =========================================================
# PROFIT (ADMIN)
# =========================================================
@router.get("/profit", response_model=ProfitReportResponse)
def profit(
    db: Session = Depends(get_db),
    admin=Depends(get_admin_user),
    period: str = Query("this_month", pattern=PERIOD_PATTERN),
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
):
    start_dt, end_dt = _period_or_400(period, start_date, end_date)

    sales = apply_period(db.query(Sale), Sale.created_at, start_dt, end_dt).all()
    purchases = apply_period(
        db.query(Purchase), Purchase.created_at, start_dt, end_dt
    ).all()

    return {
        "start": start_dt,
        "end": end_dt,
        **profit_report(sales, purchases, get_profit_percentage(db)),
    }
