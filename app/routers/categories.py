# app/routers/categories.py

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.core.auth import get_admin_user, get_current_user
from app.core.changes import change_feed
from app.models.categories import Category
from app.models.products import Product
from app.schemas.category import (
    CategoryCreate,
    CategoryUpdate,
    CategoryResponse,
)

router = APIRouter(
    prefix="/categories",
    tags=["Categories"],
)


def _get_category_or_404(db: Session, category_id: int) -> Category:
    category = db.query(Category).filter(Category.id == category_id).first()

    if not category:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Category not found",
        )

    return category


def _ensure_name_free(db: Session, name: str, exclude_id: int | None = None):
    query = db.query(Category).filter(Category.name == name)
    if exclude_id is not None:
        query = query.filter(Category.id != exclude_id)

    if query.first():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Category with this name already exists",
        )


@router.post(
    "",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_category(
    category_data: CategoryCreate,
    db: Session = Depends(get_db),
    admin=Depends(get_admin_user),
):
    _ensure_name_free(db, category_data.name)

    category = Category(
        name=category_data.name,
        description=category_data.description,
    )

    db.add(category)
    db.commit()
    db.refresh(category)

    change_feed.publish("categories", "created", category.id)

    return category


@router.get("", response_model=list[CategoryResponse])
def list_categories(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
    search: str | None = Query(None),
):
    query = db.query(Category)

    if search:
        query = query.filter(Category.name.ilike(f"%{search}%"))

    return query.order_by(Category.name.asc()).all()


@router.put("/{category_id}", response_model=CategoryResponse)
def update_category(
    category_id: int,
    category_data: CategoryUpdate,
    db: Session = Depends(get_db),
    admin=Depends(get_admin_user),
):
    category = _get_category_or_404(db, category_id)

    if category_data.name is not None and category_data.name != category.name:
        _ensure_name_free(db, category_data.name, exclude_id=category.id)
        category.name = category_data.name

    if category_data.description is not None:
        category.description = category_data.description

    db.commit()
    db.refresh(category)

    change_feed.publish("categories", "updated", category.id)

    return category


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(
    category_id: int,
    db: Session = Depends(get_db),
    admin=Depends(get_admin_user),
):
    category = _get_category_or_404(db, category_id)

    in_use = db.query(Product.id).filter(Product.category_id == category.id).first()
    if in_use:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Category still has products",
        )

    db.delete(category)
    db.commit()

    change_feed.publish("categories", "deleted", category_id)

    return None
