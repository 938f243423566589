from .user import User
from .category import Category
from .article import Article

__all__ = [
    "User",
    "Category",
    "Article",
]
