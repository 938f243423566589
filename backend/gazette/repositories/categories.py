from typing import Dict, Iterable, List, Optional
from gazette.models.category import Category
from gazette.repositories.base import Repository


class CategoryRepository(Repository[Category]):
    model = Category

    def find_active(self) -> List[Category]:
        return self.find_by(order_by=Category.name, deleted_at=None)

    def find_by_alias(self, alias: str) -> Optional[Category]:
        return self.find_one_by(alias=alias)

    def aliases_for(self, category_ids: Iterable[int]) -> Dict[int, str]:
        ids = set(category_ids)
        if not ids:
            return {}
        rows = (
            self.db.query(Category.id, Category.alias)
            .filter(Category.id.in_(ids))
            .all()
        )
        return {row.id: row.alias for row in rows}
