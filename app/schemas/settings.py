from pydantic import BaseModel, Field, HttpUrl
from typing import Literal


class StoreSettingsUpdate(BaseModel):
    store_name: str | None = Field(None, min_length=2)
    address: str | None = Field(None, min_length=5)
    phone: str | None = Field(None, min_length=10)
    owner: str | None = Field(None, min_length=2)
    logo_url: HttpUrl | Literal[""] | None = None
    profit_percentage: int | None = Field(None, ge=0, le=100)

class StoreSettingsResponse(BaseModel):
    store_name: str
    address: str
    phone: str
    owner: str
    logo_url: str
    profit_percentage: int

    class Config:
        from_attributes = True

class FirstTimeSetup(BaseModel):
    # First admin account
    name: str = Field(..., min_length=2)
    username: str = Field(..., min_length=4, max_length=50)
    password: str = Field(..., min_length=6, max_length=72)

    # Store
    store_name: str = Field(..., min_length=2)
    address: str = Field(..., min_length=5)
    phone: str = Field(..., min_length=10)
    owner: str = Field(..., min_length=2)
    logo_url: HttpUrl | Literal[""] | None = None

class SetupStatusResponse(BaseModel):
    first_time: bool
