# =========================================================
# PURCHASES (STOCK-IN EXPENSES)
#
# ADMIN:
# - Sees every purchase, searches item / supplier / user
#
# EMPLOYEE:
# - Sees and edits only the purchases they recorded
#
# Purchases feed the profit report as expenses. They do not
# change product or topping stock.
# =========================================================

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.database import get_db
from app.core.auth import get_current_user
from app.core.changes import change_feed
from app.models.purchases import Purchase
from app.models.users import User
from app.schemas.purchase import PurchaseCreate, PurchaseUpdate, PurchaseResponse
from app.services.reports import apply_period, resolve_period

router = APIRouter(prefix="/purchases", tags=["Purchases"])


def _get_visible_purchase(db: Session, purchase_id: int, user: User) -> Purchase:
    purchase = db.query(Purchase).filter(Purchase.id == purchase_id).first()

    # Employees cannot tell apart someone else's purchase from a missing one
    if not purchase or (user.role != "admin" and purchase.user_id != user.id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Purchase not found",
        )

    return purchase


@router.post("", response_model=PurchaseResponse, status_code=status.HTTP_201_CREATED)
def create_purchase(
    purchase_data: PurchaseCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    purchase = Purchase(
        item_name=purchase_data.item_name,
        supplier=purchase_data.supplier,
        quantity=purchase_data.quantity,
        price=purchase_data.price,
        description=purchase_data.description,
        user_id=current_user.id,
        user_name=current_user.name,
    )

    db.add(purchase)
    db.commit()
    db.refresh(purchase)

    change_feed.publish("purchases", "created", purchase.id)

    return purchase


@router.get("", response_model=list[PurchaseResponse])
def list_purchases(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    period: str = Query("all", pattern="^(today|this_month|all|custom)$"),
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    search: str | None = Query(None),
):
    try:
        start_dt, end_dt = resolve_period(period, start_date, end_date)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    query = apply_period(db.query(Purchase), Purchase.created_at, start_dt, end_dt)

    if current_user.role != "admin":
        query = query.filter(Purchase.user_id == current_user.id)

    if search:
        pattern = f"%{search}%"
        if current_user.role == "admin":
            query = query.filter(
                or_(
                    Purchase.item_name.ilike(pattern),
                    Purchase.supplier.ilike(pattern),
                    Purchase.user_name.ilike(pattern),
                )
            )
        else:
            query = query.filter(Purchase.item_name.ilike(pattern))

    return query.order_by(Purchase.created_at.desc(), Purchase.id.desc()).all()


@router.get("/{purchase_id}", response_model=PurchaseResponse)
def get_purchase(
    purchase_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return _get_visible_purchase(db, purchase_id, current_user)


@router.put("/{purchase_id}", response_model=PurchaseResponse)
def update_purchase(
    purchase_id: int,
    purchase_data: PurchaseUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    purchase = _get_visible_purchase(db, purchase_id, current_user)

    for field, value in purchase_data.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(purchase, field, value)

    db.commit()
    db.refresh(purchase)

    change_feed.publish("purchases", "updated", purchase.id)

    return purchase


@router.delete("/{purchase_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_purchase(
    purchase_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    purchase = _get_visible_purchase(db, purchase_id, current_user)

    db.delete(purchase)
    db.commit()

    change_feed.publish("purchases", "deleted", purchase_id)

    return None
