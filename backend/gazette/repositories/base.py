"""
Repository base: the only place that talks to the SQLAlchemy session.

``persist`` and ``remove`` stage changes; ``flush`` commits them, rolling
back the session if the commit fails.
"""

import logging
from typing import Any, Generic, List, Optional, Type, TypeVar
from sqlalchemy import desc
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")


class Repository(Generic[ModelT]):
    model: Type[ModelT]

    def __init__(self, db: Session):
        self.db = db

    def query(self):
        return self.db.query(self.model)

    def find_one_by_id(self, entity_id: int) -> Optional[ModelT]:
        return self.db.get(self.model, entity_id)

    def find_one_by(self, **filters: Any) -> Optional[ModelT]:
        return self.query().filter_by(**filters).first()

    def find_by(self, order_by=None, **filters: Any) -> List[ModelT]:
        """Rows matching every ``column=value`` filter (``None`` means IS NULL)."""
        query = self.query().filter_by(**filters)
        if order_by is not None:
            query = query.order_by(order_by)
        return query.all()

    def find_trashed(self) -> List[ModelT]:
        return (
            self.query()
            .filter(self.model.deleted_at.isnot(None))
            .order_by(desc(self.model.deleted_at))
            .all()
        )

    def persist(self, entity: ModelT) -> ModelT:
        self.db.add(entity)
        return entity

    def remove(self, entity: ModelT) -> None:
        self.db.delete(entity)

    def flush(self) -> None:
        try:
            self.db.commit()
        except Exception:
            logger.exception(f"Commit failed for {self.model.__name__}, rolling back")
            self.db.rollback()
            raise

    def refresh(self, entity: ModelT) -> ModelT:
        self.db.refresh(entity)
        return entity
