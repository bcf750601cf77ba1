# =========================================================
# SALES ROUTER
#
# CASHIERS (EMPLOYEE):
# - Can create sales
# - See only the sales they rang up
#
# ADMIN:
# - Sees every sale, can search by cashier name
# - Can delete a sale (administrative correction)
#
# A sale is immutable once created.
# =========================================================

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status, Request
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session, selectinload

from app.database import get_db
from app.core.auth import get_admin_user, get_current_user
from app.core.changes import change_feed
from app.core.rate_limiter import limiter
from app.models.sales import Sale
from app.models.sale_items import SaleItem
from app.models.users import User
from app.routers.settings import get_store_settings
from app.schemas.sale import SaleCreate, SaleItemCreate, SaleResponse
from app.services.cart import AddOn, BaseItem, merge_or_add
from app.services.receipt import render_receipt
from app.services.reports import apply_period, resolve_period
from app.services.sales import commit_sale

router = APIRouter(prefix="/sales", tags=["Sales"])


def _to_cart(items: list[SaleItemCreate]):
    cart = ()

    for item in items:
        base = BaseItem(item.item_kind, item.item_id, item.item_name, item.unit_price)
        add_ons = [AddOn(a.add_on_id, a.name, a.unit_price) for a in item.add_ons]
        cart = merge_or_add(cart, base, add_ons, item.note, item.quantity)

    return cart


def _sale_query(db: Session):
    return db.query(Sale).options(
        selectinload(Sale.items).selectinload(SaleItem.add_ons)
    )


def _get_visible_sale(db: Session, sale_id: int, user: User) -> Sale:
    sale = _sale_query(db).filter(Sale.id == sale_id).first()

    if not sale or (user.role != "admin" and sale.cashier_id != user.id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Sale not found",
        )

    return sale


# =========================================================
# CREATE SALE
# =========================================================
@router.post("", response_model=SaleResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_sale(
    request: Request,
    sale_data: SaleCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return commit_sale(
        db,
        cashier=current_user,
        lines=_to_cart(sale_data.items),
        payment_method=sale_data.payment_method,
        total=sale_data.total,
        cash_tendered=sale_data.cash_amount,
        request_id=sale_data.request_id,
    )


# =========================================================
# LIST SALES
# =========================================================
@router.get("", response_model=list[SaleResponse])
def list_sales(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    period: str = Query("today", pattern="^(today|this_month|all|custom)$"),
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    search: str | None = Query(None, description="Cashier name, admin only"),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
):
    try:
        start_dt, end_dt = resolve_period(period, start_date, end_date)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    query = apply_period(_sale_query(db), Sale.created_at, start_dt, end_dt)

    #  EMPLOYEES -> ONLY THEIR OWN SALES
    if current_user.role != "admin":
        query = query.filter(Sale.cashier_id == current_user.id)
    elif search:
        query = query.filter(Sale.cashier_name.ilike(f"%{search}%"))

    return (
        query
        .order_by(Sale.created_at.desc(), Sale.id.desc())
        .limit(limit)
        .offset(offset)
        .all()
    )


# =========================================================
# GET SINGLE SALE
# =========================================================
@router.get("/{sale_id}", response_model=SaleResponse)
def get_sale(
    sale_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return _get_visible_sale(db, sale_id, current_user)


# =========================================================
# RECEIPT
# =========================================================
@router.get("/{sale_id}/receipt", response_class=PlainTextResponse)
def get_receipt(
    sale_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    sale = _get_visible_sale(db, sale_id, current_user)
    return render_receipt(sale, get_store_settings(db))


# =========================================================
# DELETE SALE (ADMIN)
# =========================================================
@router.delete("/{sale_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_sale(
    sale_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(get_admin_user),
):
    sale = _get_visible_sale(db, sale_id, admin)

    # Stock is not restored: deleting only removes the record
    db.delete(sale)
    db.commit()

    change_feed.publish("sales", "deleted", sale_id)

    return None
