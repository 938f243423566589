"""
Category lifecycle: create, rename, archive, restore and purge.

Every operation takes the acting principal first and returns the
``AccessDenied`` value untouched when the principal is not an administrator.
"""

import logging
from typing import List, Union
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from gazette.core.access import AccessDenied, Role, Principal, require_role
from gazette.core.aliases import make_alias
from gazette.core.database import utcnow
from gazette.core.errors import ConstraintViolation, NotFound, ValidationError
from gazette.core.logging_config import log_security_event
from gazette.models.category import Category
from gazette.repositories import ArticleRepository, CategoryRepository
from gazette.schemas.category import Category as CategorySchema

logger = logging.getLogger(__name__)

CategoryResult = Union[CategorySchema, AccessDenied]

ALIAS_TAKEN = "A category with the alias '{alias}' already exists"


class CategoryService:
    def __init__(self, db: Session):
        self.categories = CategoryRepository(db)
        self.articles = ArticleRepository(db)

    def create(self, actor: Principal, name: str) -> CategoryResult:
        """
        Create a category from its display name.

        If an archived category already owns the derived alias it is brought
        back under the new name instead of inserting a second row.
        """
        gate = require_role(actor, Role.ADMIN)
        if isinstance(gate, AccessDenied):
            return gate

        name, alias = self._clean(name)
        existing = self.categories.find_by_alias(alias)
        now = utcnow()

        if existing is not None and existing.deleted_at is None:
            raise ValidationError.for_field("name", ALIAS_TAKEN.format(alias=alias))

        if existing is not None:
            existing.name = name
            existing.deleted_at = None
            existing.updated_at = now
            category = existing
            logger.info(f"Reinstated archived category {category.id} ({alias})")
        else:
            category = Category(name=name, alias=alias, created_at=now, updated_at=now)
            logger.info(f"Creating category {alias}")

        self.categories.persist(category)
        self._commit(alias)
        return CategorySchema.model_validate(self.categories.refresh(category))

    def update(self, actor: Principal, category_id: int, name: str) -> CategoryResult:
        gate = require_role(actor, Role.ADMIN)
        if isinstance(gate, AccessDenied):
            return gate

        category = self._get(category_id)
        name, alias = self._clean(name)

        owner = self.categories.find_by_alias(alias)
        if owner is not None and owner.id != category.id:
            raise ValidationError.for_field("name", ALIAS_TAKEN.format(alias=alias))

        category.name = name
        category.alias = alias
        category.updated_at = utcnow()

        self.categories.persist(category)
        self._commit(alias)
        return CategorySchema.model_validate(self.categories.refresh(category))

    def soft_delete(self, actor: Principal, category_id: int) -> CategoryResult:
        """Archive a category. Its articles stay visible and keep the reference."""
        gate = require_role(actor, Role.ADMIN)
        if isinstance(gate, AccessDenied):
            return gate

        category = self._get(category_id)
        if category.deleted_at is None:
            category.deleted_at = utcnow()
            self.categories.persist(category)
            self.categories.flush()
            logger.info(f"Archived category {category.id}")

        return CategorySchema.model_validate(self.categories.refresh(category))

    def restore(self, actor: Principal, category_id: int) -> CategoryResult:
        gate = require_role(actor, Role.ADMIN)
        if isinstance(gate, AccessDenied):
            return gate

        category = self._get(category_id)
        if category.deleted_at is not None:
            category.deleted_at = None
            self.categories.persist(category)
            self.categories.flush()
            logger.info(f"Restored category {category.id}")

        return CategorySchema.model_validate(self.categories.refresh(category))

    def hard_delete(self, actor: Principal, category_id: int) -> CategoryResult:
        """
        Permanently remove a category.

        Refused while any article, visible or archived, still points at it.

        Raises:
            NotFound: unknown category
            ConstraintViolation: the category is still referenced
        """
        gate = require_role(actor, Role.ADMIN)
        if isinstance(gate, AccessDenied):
            return gate

        category = self._get(category_id)

        active = self.articles.count_in_category(category.id, archived=False)
        if active:
            raise ConstraintViolation(
                f"Category '{category.name}' still has {active} published "
                f"article(s); move or archive them first"
            )
        archived = self.articles.count_in_category(category.id, archived=True)
        if archived:
            raise ConstraintViolation(
                f"Category '{category.name}' still has {archived} archived "
                f"article(s); delete them from the trash first"
            )

        snapshot = CategorySchema.model_validate(category)
        self.categories.remove(category)
        self.categories.flush()

        log_security_event(
            event_type="content.category.deleted",
            message=f"Category {snapshot.id} ({snapshot.alias}) permanently deleted",
            user_id=actor.user_id,
            username=actor.email,
            event_category="content",
        )
        return snapshot

    def list_active(self) -> List[CategorySchema]:
        return [CategorySchema.model_validate(c) for c in self.categories.find_active()]

    def list_archived(
        self, actor: Principal
    ) -> Union[List[CategorySchema], AccessDenied]:
        gate = require_role(actor, Role.ADMIN)
        if isinstance(gate, AccessDenied):
            return gate
        return [CategorySchema.model_validate(c) for c in self.categories.find_trashed()]

    def _get(self, category_id: int) -> Category:
        category = self.categories.find_one_by_id(category_id)
        if category is None:
            raise NotFound("Category", category_id)
        return category

    def _commit(self, alias: str) -> None:
        try:
            self.categories.flush()
        except IntegrityError:
            # Alias claimed by a concurrent request after the lookup
            raise ValidationError.for_field("name", ALIAS_TAKEN.format(alias=alias))

    @staticmethod
    def _clean(name: str):
        name = (name or "").strip()
        if not name:
            raise ValidationError.for_field("name", "Name must not be empty")
        alias = make_alias(name)
        if not alias:
            raise ValidationError.for_field(
                "name", "Name must contain at least one letter or digit"
            )
        return name, alias
