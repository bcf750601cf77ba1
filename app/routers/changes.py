# app/routers/changes.py

from fastapi import APIRouter, Depends, Query

from app.core.auth import get_current_user
from app.core.changes import change_feed
from app.schemas.change import ChangeFeedResponse

router = APIRouter(
    prefix="/changes",
    tags=["Changes"],
)


@router.get("", response_model=ChangeFeedResponse)
def list_changes(
    current_user=Depends(get_current_user),
    since: int = Query(0, ge=0),
    collection: str | None = Query(None),
):
    return {
        "version": change_feed.version,
        "oldest_version": change_feed.oldest_version(),
        "events": [e.to_dict() for e in change_feed.since(since, collection)],
    }
