from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from sqlalchemy.orm import Session
from typing import List, Optional

from gazette.api.outcomes import DASHBOARD, TRASH, deny, notify
from gazette.api.validation import read_photo, validate_form
from gazette.core.access import AccessDenied, Principal, Role, require_role
from gazette.core.auth import get_principal
from gazette.core.database import get_db
from gazette.schemas.article import (
    ArticleActionResult,
    ArticleForm,
    ArticleView,
    Dashboard,
)
from gazette.services.articles import ArticleService
from gazette.services.browsing import BrowsingService
from gazette.services.media import MediaStore, get_media_store

router = APIRouter()


def get_article_service(
    db: Session = Depends(get_db), media: MediaStore = Depends(get_media_store)
) -> ArticleService:
    return ArticleService(db, media)


@router.get("/tableau-de-bord", response_model=Dashboard)
def show_dashboard(
    request: Request,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    """Visible articles with active and archived categories."""
    result = BrowsingService(db).dashboard(principal)
    if isinstance(result, AccessDenied):
        return deny(request, result)
    return result


@router.post("/ajouter-un-article", response_model=ArticleActionResult, status_code=201)
async def create_article(
    request: Request,
    title: Optional[str] = Form(None),
    content: Optional[str] = Form(None),
    category_id: Optional[str] = Form(None),
    photo: Optional[UploadFile] = File(None),
    service: ArticleService = Depends(get_article_service),
    principal: Principal = Depends(get_principal),
):
    """Publish a new article written by the signed-in administrator."""
    # Gate before validating so visitors get the redirect, not form errors
    gate = require_role(principal, Role.ADMIN)
    if isinstance(gate, AccessDenied):
        return deny(request, gate)

    form = validate_form(
        ArticleForm, {"title": title, "content": content, "category_id": category_id}
    )
    photo_upload = await read_photo(photo, service.media.max_size)
    result = service.create(principal, form, photo_upload)

    message = "The article is now online"
    notify(request, message, result.warnings)
    return ArticleActionResult(
        message=message,
        redirect=DASHBOARD,
        warnings=result.warnings,
        article=result.article,
    )


@router.post("/modifier-un-article_{article_id:int}", response_model=ArticleActionResult)
async def update_article(
    request: Request,
    article_id: int,
    title: Optional[str] = Form(None),
    content: Optional[str] = Form(None),
    category_id: Optional[str] = Form(None),
    photo: Optional[UploadFile] = File(None),
    service: ArticleService = Depends(get_article_service),
    principal: Principal = Depends(get_principal),
):
    """Rewrite an article. Leaving the photo field empty keeps the current photo."""
    gate = require_role(principal, Role.ADMIN)
    if isinstance(gate, AccessDenied):
        return deny(request, gate)

    form = validate_form(
        ArticleForm, {"title": title, "content": content, "category_id": category_id}
    )
    photo_upload = await read_photo(photo, service.media.max_size)
    result = service.update(principal, article_id, form, photo_upload)

    message = "The article has been updated"
    notify(request, message, result.warnings)
    return ArticleActionResult(
        message=message,
        redirect=DASHBOARD,
        warnings=result.warnings,
        article=result.article,
    )


@router.post("/archiver-un-article_{article_id:int}", response_model=ArticleActionResult)
def soft_delete_article(
    request: Request,
    article_id: int,
    service: ArticleService = Depends(get_article_service),
    principal: Principal = Depends(get_principal),
):
    result = service.soft_delete(principal, article_id)
    if isinstance(result, AccessDenied):
        return deny(request, result)

    message = "The article has been archived"
    notify(request, message)
    return ArticleActionResult(message=message, redirect=DASHBOARD, article=result.article)


@router.post("/restaurer-un-article_{article_id:int}", response_model=ArticleActionResult)
def restore_article(
    request: Request,
    article_id: int,
    service: ArticleService = Depends(get_article_service),
    principal: Principal = Depends(get_principal),
):
    result = service.restore(principal, article_id)
    if isinstance(result, AccessDenied):
        return deny(request, result)

    message = "The article has been restored"
    notify(request, message)
    return ArticleActionResult(message=message, redirect=DASHBOARD, article=result.article)


@router.get("/voir-les-articles-archives", response_model=List[ArticleView])
def show_trash(
    request: Request,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    result = BrowsingService(db).trash(principal)
    if isinstance(result, AccessDenied):
        return deny(request, result)
    return result


@router.delete("/supprimer-un-article_{article_id:int}", response_model=ArticleActionResult)
def hard_delete_article(
    request: Request,
    article_id: int,
    service: ArticleService = Depends(get_article_service),
    principal: Principal = Depends(get_principal),
):
    """Permanently delete an archived article together with its photo."""
    result = service.hard_delete(principal, article_id)
    if isinstance(result, AccessDenied):
        return deny(request, result)

    message = "The article has been permanently deleted"
    notify(request, message, result.warnings)
    return ArticleActionResult(
        message=message,
        redirect=TRASH,
        warnings=result.warnings,
        article=result.article,
    )
