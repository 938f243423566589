from fastapi import APIRouter, Depends, Form, HTTPException, Request, Response, status
from sqlalchemy.orm import Session
from typing import List, Optional
from slowapi import Limiter
from slowapi.util import get_remote_address
import logging

from gazette.api.outcomes import DASHBOARD, HOME, PROFILE, deny, notify
from gazette.api.validation import validate_form
from gazette.core.access import AccessDenied, Principal, Role, require_role
from gazette.core.auth import (
    clear_auth_cookie,
    create_access_token,
    get_principal,
    set_auth_cookie,
)
from gazette.core.config import settings
from gazette.core.database import get_db
from gazette.core.logging_config import get_client_ip, log_security_event
from gazette.schemas.article import ArticleView
from gazette.schemas.common import ActionResult
from gazette.schemas.user import (
    PasswordChange,
    UserActionResult,
    UserLogin,
    UserRegister,
)
from gazette.services.accounts import AccountService
from gazette.services.browsing import BrowsingService

logger = logging.getLogger(__name__)

router = APIRouter()
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)

LOGIN = "/connexion"


@router.post("/inscritpion", response_model=UserActionResult, status_code=201)
@limiter.limit(settings.RATE_LIMIT_AUTH)
def register(
    request: Request,
    email: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    db: Session = Depends(get_db),
):
    """Open a regular user account."""
    form = validate_form(UserRegister, {"email": email, "password": password})
    user = AccountService(db).register(form.email, form.password)

    log_security_event(
        event_type="auth.user.created",
        message="New user account registered",
        user_id=user.id,
        username=user.email,
        ip_address=get_client_ip(request),
        event_category="authentication",
    )

    message = "Your account has been created, you can now sign in"
    notify(request, message)
    return UserActionResult(message=message, redirect=LOGIN, user=user)


@router.post(LOGIN, response_model=UserActionResult)
@limiter.limit(settings.RATE_LIMIT_AUTH)
def login(
    request: Request,
    response: Response,
    email: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    db: Session = Depends(get_db),
):
    """Check credentials and set the ``auth_token`` cookie."""
    form = validate_form(UserLogin, {"email": email, "password": password})
    user = AccountService(db).authenticate(form.email, form.password)
    client_ip = get_client_ip(request)

    if user is None:
        log_security_event(
            event_type="auth.login.failure",
            message="Invalid credentials",
            level=logging.WARNING,
            username=form.email,
            ip_address=client_ip,
            request_method="POST",
            request_path=LOGIN,
            event_category="authentication",
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    set_auth_cookie(response, create_access_token(data={"sub": user.id}))

    log_security_event(
        event_type="auth.login.success",
        message="User logged in successfully",
        user_id=user.id,
        username=user.email,
        ip_address=client_ip,
        request_method="POST",
        request_path=LOGIN,
        event_category="authentication",
    )

    redirect = DASHBOARD if Role.ADMIN.value in user.roles else HOME
    message = "Welcome back"
    notify(request, message)
    return UserActionResult(message=message, redirect=redirect, user=user)


@router.post("/deconnexion", response_model=ActionResult)
def logout(
    request: Request,
    response: Response,
    principal: Principal = Depends(get_principal),
):
    """Clear the auth cookie."""
    if principal.is_authenticated:
        log_security_event(
            event_type="auth.logout.success",
            message="User logged out successfully",
            user_id=principal.user_id,
            username=principal.email,
            ip_address=get_client_ip(request),
            event_category="authentication",
        )
    clear_auth_cookie(response)
    return ActionResult(message="You have been signed out", redirect=HOME)


@router.get("/profile/mon-espace-perso", response_model=List[ArticleView])
def show_profile(
    request: Request,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    """Published articles written by the signed-in user."""
    gate = require_role(principal, Role.USER)
    if isinstance(gate, AccessDenied):
        return deny(request, gate)
    return BrowsingService(db).by_author(principal.user_id)


@router.post("/profile/changer-mon-mot-de-passe", response_model=UserActionResult)
def change_password(
    request: Request,
    current_password: Optional[str] = Form(None),
    new_password: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    gate = require_role(principal, Role.USER)
    if isinstance(gate, AccessDenied):
        return deny(request, gate)

    form = validate_form(
        PasswordChange,
        {"current_password": current_password, "new_password": new_password},
    )
    user = AccountService(db).change_password(
        principal, form.current_password, form.new_password
    )

    log_security_event(
        event_type="auth.password.changed",
        message="Password changed",
        user_id=principal.user_id,
        username=principal.email,
        ip_address=get_client_ip(request),
        event_category="authentication",
    )

    message = "Your password has been changed"
    notify(request, message)
    return UserActionResult(message=message, redirect=PROFILE, user=user)
