from __future__ import annotations

import logging

from fastapi import APIRouter, Body, HTTPException, Request, Response
from fastapi.responses import JSONResponse

from account_api.core.rate_limiter import rate_limit_ip
from account_api.core.utils import absolute_url
from account_api.domain.errors import (
    AccountError,
    InvalidCredentialsError,
    UniquenessError,
    UserNotFoundError,
    ValidationError,
)
from account_api.domain.users import serialize_user
from account_api.services.account_service import AccountService

router = APIRouter(tags=["account"])
logger = logging.getLogger(__name__)


def _get_account_service(request: Request) -> AccountService:
    svc = getattr(getattr(request.app, "state", None), "account_service", None)
    if not svc:
        raise RuntimeError("AccountService not configured")
    return svc


def _rate_limit(request: Request, scope: str) -> None:
    settings = request.app.state.settings
    rate_limit_ip(
        request,
        scope,
        limit=settings.auth_rate_limit,
        window_seconds=settings.auth_rate_window_seconds,
    )


def _write_error(exc: AccountError) -> HTTPException:
    if isinstance(exc, ValidationError):
        return HTTPException(400, {"message": str(exc), "errors": exc.errors})
    if isinstance(exc, UniquenessError):
        return HTTPException(409, {"message": exc.message, "errors": {exc.field: exc.message}})
    return HTTPException(404, {"message": "User not found."})


@router.post("/register", status_code=201)
def register(request: Request, payload: dict = Body(...)):
    _rate_limit(request, "account:register")
    svc = _get_account_service(request)
    try:
        user = svc.register(payload)
    except (ValidationError, UniquenessError) as exc:
        raise _write_error(exc)
    logger.info("Registered user %s (%s)", user.username, user.id)
    base = request.app.state.settings.public_base_url
    location = absolute_url(request.url_for("get_user", user_id=user.id).path, base=base)
    return JSONResponse({"id": user.id}, status_code=201, headers={"Location": location})


@router.post("/login")
def login(request: Request, payload: dict = Body(...)):
    _rate_limit(request, "account:login")
    svc = _get_account_service(request)
    username = payload.get("username")
    try:
        user = svc.authenticate(username, payload.get("password"))
    except InvalidCredentialsError as exc:
        logger.warning("Failed login attempt for username %r", username)
        raise HTTPException(401, exc.message)
    return serialize_user(user)


@router.get("/users")
def list_users(request: Request):
    svc = _get_account_service(request)
    return [serialize_user(user) for user in svc.list_users()]


@router.get("/users/{user_id}", name="get_user")
def get_user(user_id: str, request: Request):
    svc = _get_account_service(request)
    try:
        user = svc.get_user(user_id)
    except UserNotFoundError as exc:
        raise _write_error(exc)
    return serialize_user(user)


@router.put("/users/{user_id}", status_code=204)
def replace_user(user_id: str, request: Request, payload: dict = Body(...)):
    svc = _get_account_service(request)
    try:
        svc.update_user(user_id, payload)
    except (ValidationError, UniquenessError, UserNotFoundError) as exc:
        raise _write_error(exc)
    return Response(status_code=204)


@router.patch("/users/{user_id}", status_code=204)
def patch_user(user_id: str, request: Request, payload: dict = Body(...)):
    svc = _get_account_service(request)
    try:
        svc.patch_user(user_id, payload)
    except (ValidationError, UniquenessError, UserNotFoundError) as exc:
        raise _write_error(exc)
    return Response(status_code=204)


@router.delete("/users/{user_id}", status_code=204)
def delete_user(user_id: str, request: Request):
    svc = _get_account_service(request)
    try:
        svc.delete_user(user_id)
    except UserNotFoundError as exc:
        raise _write_error(exc)
    logger.info("Deleted user %s", user_id)
    return Response(status_code=204)
