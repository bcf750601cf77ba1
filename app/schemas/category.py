from pydantic import BaseModel, Field


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=2)
    description: str = ""

class CategoryUpdate(BaseModel):
    name: str | None = Field(None, min_length=2)
    description: str | None = None

class CategoryResponse(BaseModel):
    id: int
    name: str
    description: str

    class Config:
        from_attributes = True
