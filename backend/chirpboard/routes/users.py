"""
Chirpboard Backend: Account Route Handlers
==========================================

What:  Registration, login, logout and the cookie-protected probe route.
How:   Request bodies pass the Field-Shape Validator; protected routes pass
       the Session-Cookie Gate; the handlers then delegate to
       AccountService / SessionService and only deal with the cookie.

Routes:
    GET  /requiredCookieRoute   gate → session lookup → handle (text)
    POST /user                  register
    POST /user/isValid          login, sets the signed sessionID cookie
    POST /user/logout           gate → revoke session, clears the cookie
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession

from chirpboard.database import get_db_session
from chirpboard.exceptions import ValidationError
from chirpboard.middleware.session_cookie import (
    clear_session_cookie,
    require_session_token,
    set_session_cookie,
)
from chirpboard.middleware.strong_params import FieldKind, strong_params
from chirpboard.schemas.board import ErrorResponse, LoginResponse, RegisteredUserResponse
from chirpboard.services.account_service import AccountService, get_account_service
from chirpboard.services.session_service import session_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Users"])

REGISTER_FIELDS = {
    "username": FieldKind.STRING,
    "password": FieldKind.STRING,
    "email": FieldKind.STRING,
    "firstName": FieldKind.STRING,
    "lastName": FieldKind.STRING,
}

LOGIN_FIELDS = {
    "email": FieldKind.STRING,
    "password": FieldKind.STRING,
}


@router.get(
    "/requiredCookieRoute",
    response_class=PlainTextResponse,
    responses={
        200: {"description": "Handle of the logged-in account", "content": {"text/plain": {}}},
        400: {"description": "Session or account no longer exists", "model": ErrorResponse},
        403: {"description": "Missing or malformed session cookie", "model": ErrorResponse},
    },
    summary="Probe a cookie-protected route",
)
async def required_cookie_route(
    token: str = Depends(require_session_token),
    db: AsyncSession = Depends(get_db_session),
) -> PlainTextResponse:
    user = await session_service.resolve_user(db, token)
    if user is None:
        raise ValidationError(message="Session could not be resolved")
    return PlainTextResponse(user.username)


@router.post(
    "/user",
    response_model=RegisteredUserResponse,
    responses={
        400: {"description": "Bad type, empty field, duplicate or rule violation", "model": ErrorResponse},
        429: {"description": "Too many attempts", "model": ErrorResponse},
    },
    summary="Register an account",
)
async def register(
    params: Dict[str, Any] = Depends(strong_params(REGISTER_FIELDS)),
    db: AsyncSession = Depends(get_db_session),
    accounts: AccountService = Depends(get_account_service),
) -> RegisteredUserResponse:
    registered = await accounts.register(
        db,
        username=params["username"],
        password=params["password"],
        email=params["email"],
        first_name=params["firstName"],
        last_name=params["lastName"],
    )
    await db.commit()
    return registered


@router.post(
    "/user/isValid",
    response_model=LoginResponse,
    responses={
        400: {"description": "Bad type or invalid credentials", "model": ErrorResponse},
        429: {"description": "Too many attempts", "model": ErrorResponse},
    },
    summary="Log in and receive a session cookie",
)
async def login(
    request: Request,
    response: Response,
    params: Dict[str, Any] = Depends(strong_params(LOGIN_FIELDS)),
    db: AsyncSession = Depends(get_db_session),
    accounts: AccountService = Depends(get_account_service),
) -> LoginResponse:
    user = await accounts.authenticate(db, params["email"], params["password"])
    token = await session_service.create_session(db, user)
    # The cookie is only handed out once its session row is stored.
    await db.commit()
    set_session_cookie(response, token, request.app.state.settings)
    return LoginResponse(name=user.full_name, username=user.username)


@router.post(
    "/user/logout",
    responses={403: {"description": "Missing or malformed session cookie", "model": ErrorResponse}},
    summary="Log out and clear the session cookie",
)
async def logout(
    request: Request,
    response: Response,
    token: str = Depends(require_session_token),
    db: AsyncSession = Depends(get_db_session),
) -> Dict[str, str]:
    await session_service.revoke(db, token)
    await db.commit()
    clear_session_cookie(response, request.app.state.settings)
    return {"message": "Logged out"}
