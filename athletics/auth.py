from __future__ import annotations

import base64
import hashlib
import hmac
import os
from typing import Optional

from fastapi import Request, Depends
from sqlalchemy.orm import Session
from starlette.middleware.sessions import SessionMiddleware

from .settings import settings
from .club_gate import SessionContext, validate_club_selection
from .errors import Unauthenticated

USER_KEY = "user_id"
CLUB_KEY = "selected_club_id"

_PBKDF2_ITERS = 200_000

def hash_password(password: str) -> str:
    salt = os.urandom(16)
    dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, _PBKDF2_ITERS)
    return "pbkdf2_sha256$%d$%s$%s" % (
        _PBKDF2_ITERS,
        base64.b64encode(salt).decode("ascii"),
        base64.b64encode(dk).decode("ascii"),
    )

def verify_password(password: str, stored: str) -> bool:
    try:
        algo, iters_s, salt_b64, dk_b64 = stored.split("$", 3)
        if algo != "pbkdf2_sha256":
            return False
        iters = int(iters_s)
        salt = base64.b64decode(salt_b64.encode("ascii"))
        dk_expected = base64.b64decode(dk_b64.encode("ascii"))
    except ValueError:
        return False
    dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iters)
    return hmac.compare_digest(dk, dk_expected)

def install_session_middleware(app) -> None:
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.ATHLETICS_SECRET_KEY,
        session_cookie=settings.ATHLETICS_SESSION_COOKIE,
        max_age=settings.ATHLETICS_SESSION_MAX_AGE,
        same_site="lax",
        https_only=settings.ATHLETICS_HTTPS_ONLY,
    )

def get_session_context(request: Request) -> SessionContext:
    return SessionContext(
        user_id=request.session.get(USER_KEY),
        selected_club_id=request.session.get(CLUB_KEY),
    )

def login_required(ctx: SessionContext = Depends(get_session_context)) -> SessionContext:
    if not ctx.user_id:
        raise Unauthenticated()
    return ctx

def login(request: Request, user_id: str, selected_club_id: Optional[str] = None) -> None:
    request.session.clear()
    request.session[USER_KEY] = user_id
    if selected_club_id:
        request.session[CLUB_KEY] = selected_club_id

def logout(request: Request) -> None:
    request.session.clear()

def update_selected_club(request: Request, db: Session, club_id: Optional[str]) -> SessionContext:
    """Second half of club selection: the only place the selected club is written.

    Access is checked again here; the earlier ``POST /clubs/select`` answer is
    not trusted as proof.
    """
    ctx = get_session_context(request)
    if not ctx.user_id:
        raise Unauthenticated()
    if club_id:
        validate_club_selection(db, ctx, club_id)
        request.session[CLUB_KEY] = club_id
    else:
        request.session.pop(CLUB_KEY, None)
    return get_session_context(request)
