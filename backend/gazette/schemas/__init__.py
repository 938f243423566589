from gazette.schemas.common import ActionResult
from gazette.schemas.category import (
    Category,
    CategoryCreate,
    CategoryUpdate,
    CategoryActionResult,
)
from gazette.schemas.article import (
    Article,
    ArticleForm,
    ArticleView,
    ArticleActionResult,
    CategoryArticles,
    Dashboard,
)
from gazette.schemas.user import (
    User,
    UserRegister,
    UserLogin,
    PasswordChange,
    UserActionResult,
)

__all__ = [
    "ActionResult",
    "Category",
    "CategoryCreate",
    "CategoryUpdate",
    "CategoryActionResult",
    "Article",
    "ArticleForm",
    "ArticleView",
    "ArticleActionResult",
    "CategoryArticles",
    "Dashboard",
    "User",
    "UserRegister",
    "UserLogin",
    "PasswordChange",
    "UserActionResult",
]
