# schemas/change.py

from pydantic import BaseModel
from datetime import datetime
from typing import List


class ChangeEventResponse(BaseModel):
    version: int
    collection: str
    action: str
    document_id: str | None
    at: datetime

    class Config:
        from_attributes = True

class ChangeFeedResponse(BaseModel):
    version: int
    # Polling from before this version may have missed events: reload everything
    oldest_version: int
    events: List[ChangeEventResponse]
