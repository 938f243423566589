"""Tests for the article lifecycle service."""

import pytest
from sqlalchemy.exc import OperationalError
from gazette.core.access import AccessDenied, Principal
from gazette.core.database import utcnow
from gazette.core.errors import ConstraintViolation, NotFound, ValidationError
from gazette.models.article import Article
from gazette.schemas.article import ArticleForm
from gazette.services.articles import ArticleService
from gazette.services.media import UploadedPhoto


def form(title="Match du jour", content="Le compte rendu.", category_id=1):
    return ArticleForm(title=title, content=content, category_id=category_id)


@pytest.fixture
def service(db_session, media_store):
    return ArticleService(db_session, media_store)


@pytest.mark.unit
class TestCreateArticle:
    """Test publishing articles."""

    def test_create(self, service, admin, admin_user, test_category):
        outcome = service.create(admin, form(category_id=test_category.id))
        article = outcome.article

        assert outcome.warnings == []
        assert article.alias == "match-du-jour"
        assert article.author_id == admin_user.id
        assert article.category_id == test_category.id
        assert article.created_at == article.updated_at
        assert article.deleted_at is None
        assert article.photo is None

    def test_create_with_photo(self, service, admin, test_category, media_store, png_bytes):
        outcome = service.create(
            admin,
            form(category_id=test_category.id),
            UploadedPhoto("Stade.png", png_bytes),
        )

        assert outcome.warnings == []
        assert outcome.article.photo.startswith("stade_")
        assert media_store.path_for(outcome.article.photo).is_file()

    def test_rejected_photo_still_saves_article(self, service, admin, db_session, test_category):
        outcome = service.create(
            admin,
            form(category_id=test_category.id),
            UploadedPhoto("virus.png", b"MZ definitely not an image" * 10),
        )

        assert outcome.article.id is not None
        assert outcome.article.photo is None
        assert len(outcome.warnings) == 1
        assert outcome.warnings[0].startswith("The article was saved without its photo")
        assert db_session.query(Article).count() == 1

    def test_unknown_category(self, service, admin, db_session):
        with pytest.raises(ValidationError) as exc_info:
            service.create(admin, form(category_id=42))

        assert "category_id" in exc_info.value.errors
        assert db_session.query(Article).count() == 0

    def test_archived_category(self, service, admin, db_session, test_category):
        test_category.deleted_at = utcnow()
        db_session.commit()

        with pytest.raises(ValidationError) as exc_info:
            service.create(admin, form(category_id=test_category.id))

        assert "archived" in exc_info.value.errors["category_id"][0]

    def test_duplicate_alias_in_same_category(self, service, admin, test_category, test_article):
        with pytest.raises(ValidationError) as exc_info:
            service.create(admin, form(title="Match du JOUR!", category_id=test_category.id))

        assert "title" in exc_info.value.errors

    def test_same_alias_in_other_category(
        self, service, admin, test_article, other_category
    ):
        outcome = service.create(admin, form(category_id=other_category.id))

        assert outcome.article.alias == test_article.alias
        assert outcome.article.id != test_article.id

    def test_title_without_letters(self, service, admin, test_category):
        with pytest.raises(ValidationError):
            service.create(admin, form(title="???", category_id=test_category.id))


@pytest.mark.unit
class TestUpdateArticle:
    """Test rewriting articles."""

    def test_update_fields(self, service, admin, test_article, other_category):
        created_at = test_article.created_at

        outcome = service.update(
            admin,
            test_article.id,
            form(title="Finale", content="Nouveau texte", category_id=other_category.id),
        )
        article = outcome.article

        assert article.id == test_article.id
        assert article.alias == "finale"
        assert article.content == "Nouveau texte"
        assert article.category_id == other_category.id
        assert article.created_at == created_at
        assert article.updated_at >= created_at

    def test_update_keeps_original_author(
        self, db_session, media_store, test_article, admin_user, other_admin
    ):
        chief = Principal.from_role_names(other_admin.id, other_admin.email, other_admin.roles)

        outcome = ArticleService(db_session, media_store).update(
            chief, test_article.id, form(category_id=test_article.category_id)
        )

        assert outcome.article.author_id == admin_user.id

    def test_update_keeps_own_alias(self, service, admin, test_article):
        """Saving an unchanged title is not an alias collision with itself."""
        outcome = service.update(
            admin, test_article.id, form(category_id=test_article.category_id)
        )

        assert outcome.article.alias == "match-du-jour"

    def test_update_without_photo_keeps_photo(
        self, service, admin, test_category, media_store, png_bytes
    ):
        created = service.create(
            admin, form(category_id=test_category.id), UploadedPhoto("a.png", png_bytes)
        ).article

        outcome = service.update(admin, created.id, form(title="Autre", category_id=test_category.id))

        assert outcome.article.photo == created.photo
        assert media_store.path_for(created.photo).is_file()

    def test_replace_photo_deletes_previous(
        self, service, admin, test_category, media_store, png_bytes
    ):
        created = service.create(
            admin, form(category_id=test_category.id), UploadedPhoto("a.png", png_bytes)
        ).article

        outcome = service.update(
            admin,
            created.id,
            form(category_id=test_category.id),
            UploadedPhoto("b.png", png_bytes),
        )

        assert outcome.article.photo.startswith("b_")
        assert media_store.path_for(outcome.article.photo).is_file()
        assert not media_store.path_for(created.photo).is_file()

    def test_update_keeps_archived_current_category(
        self, service, admin, db_session, test_category, test_article
    ):
        test_category.deleted_at = utcnow()
        db_session.commit()

        outcome = service.update(
            admin, test_article.id, form(title="Retouche", category_id=test_category.id)
        )

        assert outcome.article.alias == "retouche"

    def test_move_into_archived_category(
        self, service, admin, db_session, test_article, other_category
    ):
        other_category.deleted_at = utcnow()
        db_session.commit()

        with pytest.raises(ValidationError):
            service.update(admin, test_article.id, form(category_id=other_category.id))

    def test_update_unknown(self, service, admin, test_category):
        with pytest.raises(NotFound):
            service.update(admin, 999, form(category_id=test_category.id))


@pytest.mark.unit
class TestArticleLifecycle:
    """Test archiving, restoring and purging."""

    def test_soft_delete_and_restore(self, service, admin, test_article):
        archived = service.soft_delete(admin, test_article.id).article
        assert archived.deleted_at is not None

        restored = service.restore(admin, test_article.id).article
        assert restored.deleted_at is None
        assert restored.alias == test_article.alias

    def test_restore_active_is_noop(self, service, admin, test_article):
        outcome = service.restore(admin, test_article.id)

        assert outcome.article.deleted_at is None

    def test_hard_delete_requires_archive(self, service, admin, db_session, test_article):
        with pytest.raises(ConstraintViolation):
            service.hard_delete(admin, test_article.id)

        assert db_session.query(Article).count() == 1

    def test_hard_delete_removes_row_and_photo(
        self, service, admin, db_session, test_category, media_store, png_bytes
    ):
        created = service.create(
            admin, form(category_id=test_category.id), UploadedPhoto("a.png", png_bytes)
        ).article
        service.soft_delete(admin, created.id)

        outcome = service.hard_delete(admin, created.id)

        assert outcome.article.id == created.id
        assert outcome.warnings == []
        assert db_session.query(Article).count() == 0
        assert not media_store.path_for(created.photo).is_file()

    def test_hard_delete_with_missing_photo(
        self, service, admin, db_session, archived_article
    ):
        archived_article.photo = "gone_0123456789abc.png"
        db_session.commit()

        outcome = service.hard_delete(admin, archived_article.id)

        assert outcome.warnings == []
        assert db_session.query(Article).count() == 0

    def test_hard_delete_unknown(self, service, admin):
        with pytest.raises(NotFound):
            service.hard_delete(admin, 999)


@pytest.mark.unit
class TestArticleAccess:
    """Non-administrators get AccessDenied and nothing changes."""

    @pytest.mark.parametrize("who", ["anonymous", "reader"])
    def test_denied_without_mutation(
        self, who, request, service, db_session, media_store, test_category, archived_article, png_bytes
    ):
        actor = request.getfixturevalue(who)
        photo = UploadedPhoto("a.png", png_bytes)

        assert isinstance(service.create(actor, form(category_id=test_category.id), photo), AccessDenied)
        assert isinstance(
            service.update(actor, archived_article.id, form(category_id=test_category.id), photo),
            AccessDenied,
        )
        assert isinstance(service.soft_delete(actor, archived_article.id), AccessDenied)
        assert isinstance(service.restore(actor, archived_article.id), AccessDenied)
        assert isinstance(service.hard_delete(actor, archived_article.id), AccessDenied)

        db_session.refresh(archived_article)
        assert db_session.query(Article).count() == 1
        assert archived_article.title == "Vieux résultat"
        assert archived_article.deleted_at is not None
        assert not media_store.upload_dir.exists()


@pytest.mark.unit
class TestCommitFailures:
    """A commit that fails after the photo was written leaves no file behind."""

    def test_alias_conflict_at_commit(
        self, service, admin, db_session, test_article, media_store, png_bytes, monkeypatch
    ):
        category_id = test_article.category_id
        # Same alias committed by another request after the check ran
        monkeypatch.setattr(service.articles, "alias_taken", lambda *args, **kwargs: False)

        with pytest.raises(ValidationError) as exc_info:
            service.create(admin, form(category_id=category_id), UploadedPhoto("a.png", png_bytes))

        assert "already uses the alias 'match-du-jour'" in exc_info.value.errors["title"][0]
        assert db_session.query(Article).count() == 1
        assert list(media_store.upload_dir.iterdir()) == []

    def test_other_commit_error_propagates(
        self, service, admin, test_category, media_store, png_bytes, monkeypatch
    ):
        def failing_flush():
            raise OperationalError("COMMIT", {}, Exception("database is locked"))

        monkeypatch.setattr(service.articles, "flush", failing_flush)

        with pytest.raises(OperationalError):
            service.create(
                admin, form(category_id=test_category.id), UploadedPhoto("a.png", png_bytes)
            )

        assert list(media_store.upload_dir.iterdir()) == []
