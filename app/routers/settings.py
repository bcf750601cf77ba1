# app/routers/settings.py

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.core.auth import get_admin_user, get_current_user
from app.core.changes import change_feed
from app.core.config import settings
from app.models.store_settings import StoreSettings, STORE_SETTINGS_ID
from app.schemas.settings import StoreSettingsUpdate, StoreSettingsResponse

router = APIRouter(
    prefix="/settings",
    tags=["Settings"],
)


def get_store_settings(db: Session) -> StoreSettings | None:
    return db.get(StoreSettings, STORE_SETTINGS_ID)


def get_profit_percentage(db: Session) -> int:
    store = get_store_settings(db)
    if store is None:
        return settings.DEFAULT_PROFIT_PERCENTAGE
    return store.profit_percentage


def _default_settings() -> StoreSettings:
    return StoreSettings(
        id=STORE_SETTINGS_ID,
        store_name="My Store",
        address="",
        phone="",
        owner="",
        logo_url="",
        profit_percentage=settings.DEFAULT_PROFIT_PERCENTAGE,
    )


@router.get("", response_model=StoreSettingsResponse)
def read_settings(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return get_store_settings(db) or _default_settings()


@router.put("", response_model=StoreSettingsResponse)
def update_settings(
    settings_data: StoreSettingsUpdate,
    db: Session = Depends(get_db),
    admin=Depends(get_admin_user),
):
    store = get_store_settings(db)

    # Create on first save, merge afterwards
    if store is None:
        store = _default_settings()
        db.add(store)

    changes = settings_data.model_dump(exclude_unset=True)

    if "logo_url" in changes:
        changes["logo_url"] = str(changes["logo_url"]) if changes["logo_url"] else ""

    for field, value in changes.items():
        if value is not None:
            setattr(store, field, value)

    db.commit()
    db.refresh(store)

    change_feed.publish("settings", "updated")

    return store
