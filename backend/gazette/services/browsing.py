"""Read-only queries behind the public pages, the profile page and the admin lists."""

from typing import Iterable, List, Union
from sqlalchemy.orm import Session

from gazette.core.access import AccessDenied, Role, Principal, require_role
from gazette.core.errors import NotFound
from gazette.models.article import Article
from gazette.repositories import ArticleRepository, CategoryRepository
from gazette.schemas.article import ArticleView, CategoryArticles, Dashboard
from gazette.schemas.category import Category as CategorySchema
from gazette.services.media import media_url


def article_path(category_alias: str, article_alias: str, article_id: int) -> str:
    return f"/{category_alias}/{article_alias}_{article_id}"


class BrowsingService:
    def __init__(self, db: Session):
        self.articles = ArticleRepository(db)
        self.categories = CategoryRepository(db)

    def home(self) -> List[ArticleView]:
        return self._views(self.articles.find_active())

    def by_category(self, alias: str) -> CategoryArticles:
        category = self.categories.find_by_alias(alias)
        # An archived category has no listing page; its articles stay on the
        # home page and at their own URLs
        if category is None or category.deleted_at is not None:
            raise NotFound("Category", alias)
        return CategoryArticles(
            category=CategorySchema.model_validate(category),
            articles=self._views(self.articles.find_active(category_id=category.id)),
        )

    def by_author(self, author_id: int) -> List[ArticleView]:
        return self._views(self.articles.find_active(author_id=author_id))

    def article(self, article_id: int) -> ArticleView:
        """Single article by id. Archived articles stay reachable by direct link."""
        article = self.articles.find_one_by_id(article_id)
        if article is None:
            raise NotFound("Article", article_id)
        return self._views([article])[0]

    def navigation_categories(self) -> List[CategorySchema]:
        return [CategorySchema.model_validate(c) for c in self.categories.find_active()]

    def trash(self, actor: Principal) -> Union[List[ArticleView], AccessDenied]:
        gate = require_role(actor, Role.ADMIN)
        if isinstance(gate, AccessDenied):
            return gate
        return self._views(self.articles.find_trashed())

    def dashboard(self, actor: Principal) -> Union[Dashboard, AccessDenied]:
        gate = require_role(actor, Role.ADMIN)
        if isinstance(gate, AccessDenied):
            return gate
        return Dashboard(
            articles=self.home(),
            categories=self.navigation_categories(),
            archived_categories=[
                CategorySchema.model_validate(c) for c in self.categories.find_trashed()
            ],
        )

    def _views(self, articles: Iterable[Article]) -> List[ArticleView]:
        articles = list(articles)
        aliases = self.categories.aliases_for(a.category_id for a in articles)
        views = []
        for article in articles:
            category_alias = aliases[article.category_id]
            views.append(
                ArticleView(
                    id=article.id,
                    title=article.title,
                    alias=article.alias,
                    content=article.content,
                    photo=article.photo,
                    category_id=article.category_id,
                    author_id=article.author_id,
                    created_at=article.created_at,
                    updated_at=article.updated_at,
                    deleted_at=article.deleted_at,
                    category_alias=category_alias,
                    path=article_path(category_alias, article.alias, article.id),
                    photo_url=media_url(article.photo),
                )
            )
        return views
