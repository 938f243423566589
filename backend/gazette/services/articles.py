"""
Article lifecycle: write, archive, restore and purge, plus the photo attached
to each article.

A photo that cannot be stored never blocks the article itself: the article is
saved without it and the outcome carries a warning for the caller to show.
Database writes are committed before any file is removed, so a failure can at
worst leave an orphaned file behind, never a row pointing at a missing one.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Union
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from gazette.core.access import AccessDenied, Role, Principal, require_role
from gazette.core.aliases import make_alias
from gazette.core.database import utcnow
from gazette.core.errors import (
    ConstraintViolation,
    MediaError,
    NotFound,
    ValidationError,
)
from gazette.core.logging_config import log_security_event
from gazette.models.article import Article
from gazette.repositories import ArticleRepository, CategoryRepository
from gazette.schemas.article import Article as ArticleSchema, ArticleForm
from gazette.services.media import MediaStore, UploadedPhoto

logger = logging.getLogger(__name__)

PHOTO_NOT_SAVED = "The article was saved without its photo: {reason}"
ALIAS_TAKEN = "Another article in this category already uses the alias '{alias}'"


@dataclass
class ArticleOutcome:
    article: ArticleSchema
    warnings: List[str] = field(default_factory=list)


ArticleResult = Union[ArticleOutcome, AccessDenied]


class ArticleService:
    def __init__(self, db: Session, media: MediaStore):
        self.articles = ArticleRepository(db)
        self.categories = CategoryRepository(db)
        self.media = media

    def create(
        self,
        actor: Principal,
        form: ArticleForm,
        photo: Optional[UploadedPhoto] = None,
    ) -> ArticleResult:
        gate = require_role(actor, Role.ADMIN)
        if isinstance(gate, AccessDenied):
            return gate

        self._check_category(form.category_id)
        alias = self._alias_for(form.title, form.category_id)

        warnings: List[str] = []
        filename = self._store_photo(photo, warnings)

        now = utcnow()
        article = Article(
            title=form.title,
            alias=alias,
            content=form.content,
            category_id=form.category_id,
            # Authorship always comes from the session, never from the form
            author_id=actor.user_id,
            photo=filename,
            created_at=now,
            updated_at=now,
        )
        self.articles.persist(article)
        self._commit_or_discard(filename, alias)

        logger.info(f"Article {article.id} ({alias}) created by user {actor.user_id}")
        return ArticleOutcome(self._snapshot(article), warnings)

    def update(
        self,
        actor: Principal,
        article_id: int,
        form: ArticleForm,
        photo: Optional[UploadedPhoto] = None,
    ) -> ArticleResult:
        """
        Rewrite an article's fields.

        The original author and creation date are kept. Without a new photo
        the current one stays attached; with one, the previous file is
        deleted once the new reference is committed.
        """
        gate = require_role(actor, Role.ADMIN)
        if isinstance(gate, AccessDenied):
            return gate

        article = self._get(article_id)
        if form.category_id != article.category_id:
            self._check_category(form.category_id)
        alias = self._alias_for(form.title, form.category_id, exclude_id=article.id)

        warnings: List[str] = []
        new_filename = self._store_photo(photo, warnings)
        previous_photo = article.photo

        article.title = form.title
        article.alias = alias
        article.content = form.content
        article.category_id = form.category_id
        article.updated_at = utcnow()
        if new_filename:
            article.photo = new_filename

        self.articles.persist(article)
        self._commit_or_discard(new_filename, alias)

        if new_filename and previous_photo:
            self._delete_photo(previous_photo, warnings)

        logger.info(f"Article {article.id} updated by user {actor.user_id}")
        return ArticleOutcome(self._snapshot(article), warnings)

    def soft_delete(self, actor: Principal, article_id: int) -> ArticleResult:
        """Archive an article: hidden from every listing, kept in the trash."""
        gate = require_role(actor, Role.ADMIN)
        if isinstance(gate, AccessDenied):
            return gate

        article = self._get(article_id)
        if article.deleted_at is None:
            article.deleted_at = utcnow()
            self.articles.persist(article)
            self.articles.flush()
            logger.info(f"Archived article {article.id}")
        return ArticleOutcome(self._snapshot(article))

    def restore(self, actor: Principal, article_id: int) -> ArticleResult:
        gate = require_role(actor, Role.ADMIN)
        if isinstance(gate, AccessDenied):
            return gate

        article = self._get(article_id)
        if article.deleted_at is not None:
            article.deleted_at = None
            self.articles.persist(article)
            self.articles.flush()
            logger.info(f"Restored article {article.id}")
        return ArticleOutcome(self._snapshot(article))

    def hard_delete(self, actor: Principal, article_id: int) -> ArticleResult:
        """
        Permanently remove an archived article and its photo.

        Raises:
            NotFound: unknown article
            ConstraintViolation: the article has not been archived first
        """
        gate = require_role(actor, Role.ADMIN)
        if isinstance(gate, AccessDenied):
            return gate

        article = self._get(article_id)
        if article.deleted_at is None:
            raise ConstraintViolation(
                "Only archived articles can be deleted permanently; archive it first"
            )

        snapshot = self._snapshot(article)
        self.articles.remove(article)
        self.articles.flush()

        warnings: List[str] = []
        self._delete_photo(snapshot.photo, warnings)

        log_security_event(
            event_type="content.article.deleted",
            message=f"Article {snapshot.id} ({snapshot.alias}) permanently deleted",
            user_id=actor.user_id,
            username=actor.email,
            event_category="content",
            photo=snapshot.photo,
        )
        return ArticleOutcome(snapshot, warnings)

    def _get(self, article_id: int) -> Article:
        article = self.articles.find_one_by_id(article_id)
        if article is None:
            raise NotFound("Article", article_id)
        return article

    def _check_category(self, category_id: int) -> None:
        category = self.categories.find_one_by_id(category_id)
        if category is None:
            raise ValidationError.for_field("category_id", "Unknown category")
        if category.deleted_at is not None:
            raise ValidationError.for_field(
                "category_id", f"Category '{category.name}' is archived"
            )

    def _alias_for(
        self, title: str, category_id: int, exclude_id: Optional[int] = None
    ) -> str:
        alias = make_alias(title)
        if not alias:
            raise ValidationError.for_field(
                "title", "Title must contain at least one letter or digit"
            )
        if self.articles.alias_taken(category_id, alias, exclude_id=exclude_id):
            raise ValidationError.for_field("title", ALIAS_TAKEN.format(alias=alias))
        return alias

    def _store_photo(
        self, photo: Optional[UploadedPhoto], warnings: List[str]
    ) -> Optional[str]:
        if photo is None:
            return None
        try:
            return self.media.store(photo.filename, photo.content)
        except MediaError as e:
            logger.warning(f"Photo {photo.filename!r} rejected: {e.message}")
            warnings.append(PHOTO_NOT_SAVED.format(reason=e.message))
            return None

    def _delete_photo(self, filename: Optional[str], warnings: List[str]) -> None:
        try:
            self.media.delete(filename)
        except MediaError as e:
            # The row is already gone or updated; only the file is left over
            logger.error(f"Orphaned photo {filename}: {e.message}")
            warnings.append(f"The file {filename} could not be removed")

    def _commit_or_discard(self, stored_filename: Optional[str], alias: str) -> None:
        """Commit pending changes; on failure drop the file written for them."""
        try:
            self.articles.flush()
        except Exception as e:
            if stored_filename:
                self.media.delete(stored_filename)
            if isinstance(e, IntegrityError):
                # Alias claimed by a concurrent request after the check
                raise ValidationError.for_field("title", ALIAS_TAKEN.format(alias=alias))
            raise

    def _snapshot(self, article: Article) -> ArticleSchema:
        return ArticleSchema.model_validate(article)
