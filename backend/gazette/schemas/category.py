from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional
from gazette.schemas.common import ActionResult


class CategoryBase(BaseModel):
    name: str = Field(max_length=100)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name must not be empty")
        return v


class CategoryCreate(CategoryBase):
    pass


class CategoryUpdate(CategoryBase):
    pass


class Category(BaseModel):
    id: int
    name: str
    alias: str
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CategoryActionResult(ActionResult):
    category: Optional[Category] = None
