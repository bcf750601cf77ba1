# app/routers/toppings.py

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.core.auth import get_admin_user, get_current_user
from app.core.changes import change_feed
from app.models.toppings import Topping
from app.schemas.product import StockHighlightsResponse
from app.schemas.topping import (
    ToppingCreate,
    ToppingUpdate,
    ToppingResponse,
)

router = APIRouter(
    prefix="/toppings",
    tags=["Toppings"],
)


def _get_topping_or_404(db: Session, topping_id: int) -> Topping:
    topping = db.query(Topping).filter(Topping.id == topping_id).first()

    if not topping:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Topping not found",
        )

    return topping


@router.post(
    "",
    response_model=ToppingResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_topping(
    topping_data: ToppingCreate,
    db: Session = Depends(get_db),
    admin=Depends(get_admin_user),
):
    topping = Topping(
        name=topping_data.name,
        price=topping_data.price,
        stock=topping_data.stock,
        image_url=str(topping_data.image_url) if topping_data.image_url else "",
        description=topping_data.description,
    )

    db.add(topping)
    db.commit()
    db.refresh(topping)

    change_feed.publish("toppings", "created", topping.id)

    return topping


@router.get("", response_model=list[ToppingResponse])
def list_toppings(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
    search: str | None = Query(None),
):
    query = db.query(Topping)

    if search:
        query = query.filter(Topping.name.ilike(f"%{search}%"))

    return query.order_by(Topping.name.asc()).all()


@router.get("/stock-highlights", response_model=StockHighlightsResponse)
def topping_stock_highlights(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return {
        "most_stock": db.query(Topping).order_by(Topping.stock.desc(), Topping.name.asc()).limit(2).all(),
        "least_stock": db.query(Topping).order_by(Topping.stock.asc(), Topping.name.asc()).limit(2).all(),
    }


@router.get("/{topping_id}", response_model=ToppingResponse)
def get_topping(
    topping_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return _get_topping_or_404(db, topping_id)


@router.put("/{topping_id}", response_model=ToppingResponse)
def update_topping(
    topping_id: int,
    topping_data: ToppingUpdate,
    db: Session = Depends(get_db),
    admin=Depends(get_admin_user),
):
    topping = _get_topping_or_404(db, topping_id)

    if topping_data.name is not None:
        topping.name = topping_data.name

    if topping_data.price is not None:
        topping.price = topping_data.price

    if topping_data.stock is not None:
        topping.stock = topping_data.stock

    if "image_url" in topping_data.model_fields_set:
        topping.image_url = str(topping_data.image_url) if topping_data.image_url else ""

    if topping_data.description is not None:
        topping.description = topping_data.description

    db.commit()
    db.refresh(topping)

    change_feed.publish("toppings", "updated", topping.id)

    return topping


@router.delete("/{topping_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_topping(
    topping_id: int,
    db: Session = Depends(get_db),
    admin=Depends(get_admin_user),
):
    topping = _get_topping_or_404(db, topping_id)

    db.delete(topping)
    db.commit()

    change_feed.publish("toppings", "deleted", topping_id)

    return None
