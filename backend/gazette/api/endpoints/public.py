from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session
from typing import Dict, List

from gazette.core import flash
from gazette.core.database import get_db
from gazette.core.errors import NotFound
from gazette.schemas.article import ArticleView, CategoryArticles
from gazette.schemas.category import Category as CategorySchema
from gazette.services.browsing import BrowsingService

router = APIRouter()

# Kept separate so it can be mounted after every other router: its path
# pattern would otherwise shadow two-segment routes.
article_router = APIRouter()


@router.get("/", response_model=List[ArticleView])
def home(db: Session = Depends(get_db)):
    """Every published (non-archived) article, newest first."""
    return BrowsingService(db).home()


@router.get("/categories", response_model=List[CategorySchema])
def navigation_categories(db: Session = Depends(get_db)):
    """Active categories, for the navigation menu."""
    return BrowsingService(db).navigation_categories()


@router.get("/voir-articles/{alias}", response_model=CategoryArticles)
def show_articles_from_category(alias: str, db: Session = Depends(get_db)):
    return BrowsingService(db).by_category(alias)


@router.get("/flashes", response_model=List[Dict[str, str]])
def read_flashes(request: Request):
    """Pending notices; each one is returned once."""
    return flash.pop_flashes(request)


@article_router.get(
    "/{category_alias}/{article_alias}_{article_id:int}", response_model=ArticleView
)
def show_article(
    category_alias: str,
    article_alias: str,
    article_id: int,
    db: Session = Depends(get_db),
):
    """
    Show one article.

    The id selects the article and the category alias must be its own, so the
    pattern cannot answer for other two-segment paths such as /admin/... .
    A stale article alias redirects to the current URL. Archived articles
    remain reachable through their direct link.
    """
    view = BrowsingService(db).article(article_id)
    if category_alias != view.category_alias:
        raise NotFound("Article", article_id)
    if article_alias != view.alias:
        return RedirectResponse(url=view.path, status_code=status.HTTP_301_MOVED_PERMANENTLY)
    return view
