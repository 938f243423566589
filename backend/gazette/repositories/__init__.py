from .base import Repository
from .users import UserRepository
from .categories import CategoryRepository
from .articles import ArticleRepository

__all__ = [
    "Repository",
    "UserRepository",
    "CategoryRepository",
    "ArticleRepository",
]
