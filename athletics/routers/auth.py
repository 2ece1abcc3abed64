from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ..auth import get_session_context, login, login_required, logout, update_selected_club
from ..club_gate import SessionContext, list_user_clubs
from ..db import get_session
from ..errors import Unauthenticated
from ..responses import created, dump, ok
from ..schemas import LoginRequest, RegisterRequest, SessionUpdate, UserOut
from .. import services

router = APIRouter(prefix="/auth", tags=["auth"])


def _session_body(session: Session, ctx: SessionContext) -> dict:
    u = services.get_user(session, ctx.user_id)
    if u is None:
        raise Unauthenticated()
    return {"user": dump(UserOut, u), "selectedClubId": ctx.selected_club_id}


@router.post("/register")
def register(payload: RegisterRequest, session: Session = Depends(get_session)):
    u = services.register_user(session, payload)
    return created(dump(UserOut, u), "User registered successfully")


@router.post("/login")
def login_submit(request: Request, payload: LoginRequest, session: Session = Depends(get_session)):
    u = services.authenticate_user(session, payload.email, payload.password)
    if not u:
        raise Unauthenticated("Invalid email or password")
    # a single active club is selected straight away
    clubs = list_user_clubs(session, u.id)
    login(request, u.id, clubs[0].club_id if len(clubs) == 1 else None)
    return ok(_session_body(session, get_session_context(request)), "Logged in")


@router.post("/logout")
def logout_submit(request: Request):
    logout(request)
    return ok(message="Logged out")


@router.get("/session")
def read_session(ctx: SessionContext = Depends(login_required), session: Session = Depends(get_session)):
    return ok(_session_body(session, ctx))


@router.patch("/session")
def patch_session(request: Request, payload: SessionUpdate, session: Session = Depends(get_session)):
    ctx = update_selected_club(request, session, payload.selected_club_id)
    return ok(_session_body(session, ctx), "Session updated")
