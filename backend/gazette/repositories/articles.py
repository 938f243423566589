from typing import List, Optional
from sqlalchemy import desc
from gazette.models.article import Article
from gazette.repositories.base import Repository


class ArticleRepository(Repository[Article]):
    model = Article

    def find_active(self, **filters) -> List[Article]:
        """Visible (not archived) articles, newest first."""
        return (
            self.query()
            .filter_by(deleted_at=None, **filters)
            .order_by(desc(Article.created_at), desc(Article.id))
            .all()
        )

    def alias_taken(
        self, category_id: int, alias: str, exclude_id: Optional[int] = None
    ) -> bool:
        query = self.query().filter(
            Article.category_id == category_id, Article.alias == alias
        )
        if exclude_id is not None:
            query = query.filter(Article.id != exclude_id)
        return query.first() is not None

    def count_in_category(self, category_id: int, archived: bool) -> int:
        query = self.query().filter(Article.category_id == category_id)
        if archived:
            query = query.filter(Article.deleted_at.isnot(None))
        else:
            query = query.filter(Article.deleted_at.is_(None))
        return query.count()
