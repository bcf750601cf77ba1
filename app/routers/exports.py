from datetime import date
from decimal import Decimal
from io import BytesIO

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import StreamingResponse
from openpyxl import Workbook
from sqlalchemy.orm import Session, selectinload

from app.database import get_db
from app.core.auth import get_admin_user
from app.core.rate_limiter import limiter
from app.models.sales import Sale
from app.models.sale_items import SaleItem
from app.services.reports import apply_period, resolve_period, sales_summary

router = APIRouter(prefix="/exports", tags=["Exports"])


# =========================================================
# EXPORT ROUTE
# =========================================================

@router.get("/sales")
@limiter.limit("10/minute")
def export_sales(
    request: Request,
    db: Session = Depends(get_db),
    admin=Depends(get_admin_user),
    period: str = Query("this_month", pattern="^(today|this_month|all|custom)$"),
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
):
    try:
        start_dt, end_dt = resolve_period(period, start_date, end_date)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    sales = (
        apply_period(
            db.query(Sale).options(
                selectinload(Sale.items).selectinload(SaleItem.add_ons)
            ),
            Sale.created_at,
            start_dt,
            end_dt,
        )
        .order_by(Sale.created_at.asc(), Sale.id.asc())
        .all()
    )

    if start_dt is None:
        label = "all"
    else:
        label = f"{start_dt.date()}_to_{end_dt.date()}"

    return _build_excel(
        sales=sales,
        period_label=label.replace("_to_", " to ") if start_dt else "All time",
        filename=f"sales_{label}.xlsx",
    )


# =========================================================
# EXCEL BUILDER
# =========================================================
def _build_excel(sales: list[Sale], period_label: str, filename: str):

    workbook = Workbook()

    # =======================
    # SHEET 1 - SALE LINES
    # =======================
    sheet = workbook.active
    sheet.title = "Sales Data"

    sheet.append([
        "Date",
        "Sale ID",
        "Cashier",
        "Payment Method",
        "Item",
        "Toppings",
        "Note",
        "Quantity",
        "Unit Price",
        "Line Total",
        "Total Sale Amount",
    ])

    for sale in sales:
        for item in sale.items:
            sheet.append([
                sale.created_at.strftime("%Y-%m-%d %H:%M"),
                sale.id,
                sale.cashier_name,
                sale.payment_method,
                item.item_name,
                ", ".join(a.name for a in item.add_ons),
                item.note,
                item.quantity,
                float(item.unit_price),
                float(item.line_total),
                float(sale.total),
            ])

    # =======================
    # SHEET 2 - SUMMARY
    # =======================
    summary_data = sales_summary(sales)
    summary = workbook.create_sheet(title="Summary")

    summary.append(["Period", period_label])
    summary.append([])
    summary.append(["Total Orders", summary_data["total_orders"]])
    summary.append(["Total Revenue", float(summary_data["total_revenue"])])
    summary.append(["Items Sold", summary_data["total_items_sold"]])
    summary.append([])
    summary.append(["Payment Method", "Orders", "Revenue"])

    for bucket in summary_data["by_payment_method"]:
        summary.append([
            bucket["payment_method"],
            bucket["orders"],
            float(Decimal(bucket["revenue"])),
        ])

    # =======================
    # RETURN FILE
    # =======================
    output = BytesIO()
    workbook.save(output)
    output.seek(0)

    return StreamingResponse(
        output,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
