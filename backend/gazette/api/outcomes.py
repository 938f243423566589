"""
Turning service results into HTTP responses.

Successful writes answer with the message, the page to go to next and any
warnings, and push the same text as flash notices. ``AccessDenied`` becomes a
redirect to the home page with a warning notice. Domain exceptions are mapped
by the handlers registered in ``register_exception_handlers``.
"""

import logging
from typing import Iterable
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse

from gazette.core import flash
from gazette.core.access import AccessDenied
from gazette.core.errors import ConstraintViolation, GazetteError, ValidationError
from gazette.core.logging_config import get_client_ip, log_security_event
from gazette.api.validation import field_errors

logger = logging.getLogger(__name__)

HOME = "/"
DASHBOARD = "/admin/tableau-de-bord"
TRASH = "/admin/voir-les-articles-archives"
PROFILE = "/profile/mon-espace-perso"


def deny(request: Request, denied: AccessDenied) -> RedirectResponse:
    """Send the visitor back to the home page with a warning notice."""
    principal = denied.principal
    log_security_event(
        event_type="access.denied",
        message=f"Access denied to {request.url.path}: {denied.required.value} required",
        level=logging.WARNING,
        user_id=principal.user_id,
        username=principal.email,
        ip_address=get_client_ip(request),
        request_method=request.method,
        request_path=request.url.path,
        event_category="authorization",
        required_role=denied.required.value,
    )
    flash.flash(request, flash.WARNING, denied.message)
    return RedirectResponse(url=HOME, status_code=status.HTTP_303_SEE_OTHER)


def notify(request: Request, message: str, warnings: Iterable[str] = ()) -> None:
    flash.flash(request, flash.SUCCESS, message)
    for warning in warnings:
        flash.flash(request, flash.WARNING, warning)


async def gazette_error_handler(request: Request, exc: GazetteError) -> JSONResponse:
    body = {"detail": exc.message}
    if isinstance(exc, ValidationError):
        body["errors"] = exc.errors
    if isinstance(exc, ConstraintViolation):
        flash.flash(request, flash.DANGER, exc.message)
    logger.info(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=body)


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": "Validation failed", "errors": field_errors(exc.errors())},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(GazetteError, gazette_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
