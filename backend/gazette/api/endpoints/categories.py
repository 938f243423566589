from fastapi import APIRouter, Depends, Form, Request
from sqlalchemy.orm import Session
from typing import List, Optional

from gazette.api.outcomes import DASHBOARD, deny, notify
from gazette.api.validation import validate_form
from gazette.core.access import AccessDenied, Principal, Role, require_role
from gazette.core.auth import get_principal
from gazette.core.database import get_db
from gazette.schemas.category import (
    Category as CategorySchema,
    CategoryActionResult,
    CategoryCreate,
    CategoryUpdate,
)
from gazette.services.categories import CategoryService

router = APIRouter()


@router.post("/ajouter-une-categorie", response_model=CategoryActionResult, status_code=201)
def create_category(
    request: Request,
    name: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    """
    Create a category.

    If an archived category already uses the same alias it is restored under
    the submitted name instead of creating a new one.
    """
    gate = require_role(principal, Role.ADMIN)
    if isinstance(gate, AccessDenied):
        return deny(request, gate)

    form = validate_form(CategoryCreate, {"name": name})
    category = CategoryService(db).create(principal, form.name)

    message = "The category has been added"
    notify(request, message)
    return CategoryActionResult(message=message, redirect=DASHBOARD, category=category)


@router.post("/modifier-une-categorie/{category_id}", response_model=CategoryActionResult)
def update_category(
    request: Request,
    category_id: int,
    name: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    """Rename a category; its alias follows the new name."""
    gate = require_role(principal, Role.ADMIN)
    if isinstance(gate, AccessDenied):
        return deny(request, gate)

    form = validate_form(CategoryUpdate, {"name": name})
    category = CategoryService(db).update(principal, category_id, form.name)

    message = "The category has been updated"
    notify(request, message)
    return CategoryActionResult(message=message, redirect=DASHBOARD, category=category)


@router.post("/archiver-une-categorie/{category_id}", response_model=CategoryActionResult)
def soft_delete_category(
    request: Request,
    category_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    """
    Archive a category.

    The category stays in the database and its articles stay online; it just
    disappears from the category listings.
    """
    result = CategoryService(db).soft_delete(principal, category_id)
    if isinstance(result, AccessDenied):
        return deny(request, result)

    message = "The category has been archived"
    notify(request, message)
    return CategoryActionResult(message=message, redirect=DASHBOARD, category=result)


@router.post("/restaurer-une-categorie/{category_id}", response_model=CategoryActionResult)
def restore_category(
    request: Request,
    category_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    result = CategoryService(db).restore(principal, category_id)
    if isinstance(result, AccessDenied):
        return deny(request, result)

    message = "The category has been restored"
    notify(request, message)
    return CategoryActionResult(message=message, redirect=DASHBOARD, category=result)


@router.get("/voir-les-categories-archivees", response_model=List[CategorySchema])
def show_archived_categories(
    request: Request,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    result = CategoryService(db).list_archived(principal)
    if isinstance(result, AccessDenied):
        return deny(request, result)
    return result


@router.delete("/supprimer-une-categorie/{category_id}", response_model=CategoryActionResult)
def hard_delete_category(
    request: Request,
    category_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    """Permanently delete a category no article refers to any more."""
    result = CategoryService(db).hard_delete(principal, category_id)
    if isinstance(result, AccessDenied):
        return deny(request, result)

    message = "The category has been permanently deleted"
    notify(request, message)
    return CategoryActionResult(message=message, redirect=DASHBOARD, category=result)
