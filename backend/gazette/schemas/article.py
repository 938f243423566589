from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional, List
from gazette.schemas.common import ActionResult
from gazette.schemas.category import Category


class ArticleForm(BaseModel):
    """Fields an administrator submits when writing an article."""

    title: str = Field(max_length=255)
    content: str
    category_id: int = Field(gt=0)

    @field_validator("title", "content")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("This field must not be empty")
        return v


class Article(BaseModel):
    id: int
    title: str
    alias: str
    content: str
    photo: Optional[str] = None
    category_id: int
    author_id: int
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ArticleView(Article):
    """Article plus what a page needs to link to it."""

    category_alias: str
    path: str
    photo_url: Optional[str] = None


class ArticleActionResult(ActionResult):
    article: Optional[Article] = None


class CategoryArticles(BaseModel):
    category: Category
    articles: List[ArticleView]


class Dashboard(BaseModel):
    articles: List[ArticleView]
    categories: List[Category]
    archived_categories: List[Category]
