# =========================================================
# FIRST TIME SETUP + FACTORY RESET
#
# A fresh database has no users. The first call to
# POST /setup creates the admin account and the store
# settings; afterwards it is locked.
# =========================================================

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from app.database import get_db
from app.core.auth import get_admin_user
from app.core.changes import change_feed
from app.core.config import settings
from app.core.hashing import hash_password
from app.core.jwt import create_user_token
from app.models.categories import Category
from app.models.products import Product
from app.models.purchases import Purchase
from app.models.sale_items import SaleItem, SaleItemAddOn
from app.models.sales import Sale
from app.models.store_settings import StoreSettings, STORE_SETTINGS_ID
from app.models.toppings import Topping
from app.models.users import User
from app.schemas.settings import FirstTimeSetup, SetupStatusResponse
from app.schemas.user import TokenResponse
from app.services.checkout import CheckoutRegistry, get_checkout_registry

router = APIRouter(prefix="/setup", tags=["Setup"])

logger = logging.getLogger("app")

# Children first so foreign keys never dangle mid-transaction
RESET_ORDER = (
    SaleItemAddOn,
    SaleItem,
    Sale,
    Purchase,
    Product,
    Topping,
    Category,
    User,
    StoreSettings,
)


def _is_first_time(db: Session) -> bool:
    return db.query(User.id).first() is None


@router.get("/status", response_model=SetupStatusResponse)
def setup_status(db: Session = Depends(get_db)):
    return {"first_time": _is_first_time(db)}


@router.post("", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def first_time_setup(
    data: FirstTimeSetup,
    db: Session = Depends(get_db),
):
    if not _is_first_time(db):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Store is already set up",
        )

    try:
        admin = User(
            name=data.name,
            username=data.username,
            password_hash=hash_password(data.password),
            role="admin",
        )
        db.add(admin)

        store = db.get(StoreSettings, STORE_SETTINGS_ID) or StoreSettings(id=STORE_SETTINGS_ID)
        store.store_name = data.store_name
        store.address = data.address
        store.phone = data.phone
        store.owner = data.owner
        store.logo_url = str(data.logo_url) if data.logo_url else ""
        store.profit_percentage = settings.DEFAULT_PROFIT_PERCENTAGE
        db.add(store)

        db.commit()
        db.refresh(admin)

    except SQLAlchemyError:
        db.rollback()
        logger.exception("First time setup failed")
        raise HTTPException(status_code=500, detail="Unable to complete setup")

    logger.info(f"Store '{data.store_name}' set up with admin {admin.username}")
    change_feed.publish("users", "created", admin.id)
    change_feed.publish("settings", "updated")

    return {
        "access_token": create_user_token(admin),
        "token_type": "bearer",
        "user": admin,
    }


@router.post("/factory-reset", status_code=status.HTTP_204_NO_CONTENT)
def factory_reset(
    db: Session = Depends(get_db),
    admin: User = Depends(get_admin_user),
    registry: CheckoutRegistry = Depends(get_checkout_registry),
):
    admin_name = admin.username

    try:
        for model in RESET_ORDER:
            db.query(model).delete(synchronize_session=False)
        db.commit()

    except SQLAlchemyError:
        db.rollback()
        logger.exception("Factory reset failed")
        raise HTTPException(status_code=500, detail="Unable to reset data")

    registry.reset()

    logger.warning(f"Factory reset performed by {admin_name}")
    change_feed.publish("all", "reset")

    return None
