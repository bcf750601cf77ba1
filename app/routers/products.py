# app/routers/products.py

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session, joinedload

from app.database import get_db
from app.core.auth import get_admin_user, get_current_user
from app.core.changes import change_feed
from app.models.categories import Category
from app.models.products import Product
from app.schemas.product import (
    ProductCreate,
    ProductUpdate,
    ProductResponse,
    StockHighlightsResponse,
)

router = APIRouter(
    prefix="/products",
    tags=["Products"],
)


def _ensure_category_exists(db: Session, category_id: int):
    if not db.query(Category.id).filter(Category.id == category_id).first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Category does not exist",
        )


def _get_product_or_404(db: Session, product_id: int) -> Product:
    product = (
        db.query(Product)
        .options(joinedload(Product.category))
        .filter(Product.id == product_id)
        .first()
    )

    if not product:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Product not found",
        )

    return product


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_product(
    product_data: ProductCreate,
    db: Session = Depends(get_db),
    admin=Depends(get_admin_user),
):
    _ensure_category_exists(db, product_data.category_id)

    product = Product(
        name=product_data.name,
        category_id=product_data.category_id,
        price=product_data.price,
        stock=product_data.stock,
        image_url=str(product_data.image_url) if product_data.image_url else "",
        description=product_data.description,
    )

    db.add(product)
    db.commit()
    db.refresh(product)

    change_feed.publish("products", "created", product.id)

    return product


@router.get("", response_model=list[ProductResponse])
def list_products(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
    search: str | None = Query(None),
    category_id: int | None = Query(None),
):
    query = db.query(Product).options(joinedload(Product.category))

    if category_id is not None:
        query = query.filter(Product.category_id == category_id)

    if search:
        query = query.filter(Product.name.ilike(f"%{search}%"))

    return query.order_by(Product.name.asc()).all()


@router.get("/stock-highlights", response_model=StockHighlightsResponse)
def product_stock_highlights(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return {
        "most_stock": db.query(Product).order_by(Product.stock.desc(), Product.name.asc()).limit(2).all(),
        "least_stock": db.query(Product).order_by(Product.stock.asc(), Product.name.asc()).limit(2).all(),
    }


@router.get("/{product_id}", response_model=ProductResponse)
def get_product(
    product_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return _get_product_or_404(db, product_id)


@router.put("/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: int,
    product_data: ProductUpdate,
    db: Session = Depends(get_db),
    admin=Depends(get_admin_user),
):
    product = _get_product_or_404(db, product_id)

    if product_data.category_id is not None:
        _ensure_category_exists(db, product_data.category_id)
        product.category_id = product_data.category_id

    if product_data.name is not None:
        product.name = product_data.name

    # Price edits never reach sales already recorded: sale lines keep their own snapshot
    if product_data.price is not None:
        product.price = product_data.price

    if product_data.stock is not None:
        product.stock = product_data.stock

    if "image_url" in product_data.model_fields_set:
        product.image_url = str(product_data.image_url) if product_data.image_url else ""

    if product_data.description is not None:
        product.description = product_data.description

    db.commit()
    db.refresh(product)

    change_feed.publish("products", "updated", product.id)

    return product


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(
    product_id: int,
    db: Session = Depends(get_db),
    admin=Depends(get_admin_user),
):
    product = _get_product_or_404(db, product_id)

    db.delete(product)
    db.commit()

    change_feed.publish("products", "deleted", product_id)

    return None
