"""
Chirpboard Backend: Session-Cookie Gate
=======================================

What:  Guards protected routes by checking the signed `sessionID` cookie.
How:   The cookie value is "<token>.<signature>", signed with itsdangerous
       using COOKIE_SECRET. A missing cookie, a bad signature or a token that
       fails `is_well_formed_token()` is rejected with 403 before the route
       or the session lookup runs. On success the token is stored on
       `request.state.session_id` and returned to the route.
Who:   GET /requiredCookieRoute and POST /user/logout (via Depends), and the
       login/logout routes for writing and clearing the cookie.

Token shape (see validators.is_well_formed_token):
    exactly 64 chars, no space, not letters-only, not digits-only.
    This is a sanity check on top of the signature, not a lookup; whether
    the token belongs to a live session is decided by SessionService.
"""

import logging
from typing import Optional

from fastapi import Request, Response
from itsdangerous import BadSignature, Signer

from chirpboard.config import Settings
from chirpboard.exceptions import MissingSessionCookieError
from chirpboard.validators import is_well_formed_token

logger = logging.getLogger(__name__)

_SIGNER_SALT = "chirpboard.session-cookie"


def _signer(secret: str) -> Signer:
    return Signer(secret, salt=_SIGNER_SALT)


def sign_token(token: str, secret: str) -> str:
    """Cookie value for `token`: the token followed by its signature."""
    return _signer(secret).sign(token).decode("utf-8")


def unsign_token(value: Optional[str], secret: str) -> Optional[str]:
    """The token inside a signed cookie value, or None when absent or forged."""
    if not value:
        return None
    try:
        return _signer(secret).unsign(value).decode("utf-8")
    except BadSignature:
        return None


def set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        settings.cookie_name,
        sign_token(token, settings.cookie_secret),
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
        path="/",
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        settings.cookie_name,
        path="/",
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )


async def require_session_token(request: Request) -> str:
    """
    FastAPI dependency: the session token from a valid signed cookie.

    Raises:
        MissingSessionCookieError: cookie absent, signature invalid, or the
                                   token fails the shape rule (→ 403)
    """
    settings: Settings = request.app.state.settings
    raw = request.cookies.get(settings.cookie_name)
    token = unsign_token(raw, settings.cookie_secret)

    if not is_well_formed_token(token):
        reason = "absent" if not raw else ("bad signature" if token is None else "malformed token")
        logger.info("%s %s: session cookie rejected (%s)", request.method, request.url.path, reason)
        raise MissingSessionCookieError(context={"reason": reason})

    request.state.session_id = token
    return token
