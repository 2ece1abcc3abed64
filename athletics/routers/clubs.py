from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends
from loguru import logger
from sqlalchemy.orm import Session

from ..auth import get_session_context, login_required
from ..club_gate import SessionContext, authorize_club, list_user_clubs, validate_club_selection
from ..db import get_session
from ..errors import InsufficientPermissions, ValidationFailed
from ..responses import created, dump, ok
from ..roles import MANAGE_ROLE, ClubRole
from ..schemas import ClubCreate, ClubOut, ClubUpdate, MemberAdd, MembershipOut
from .. import services

router = APIRouter(prefix="/clubs", tags=["clubs"])


@router.get("")
def list_clubs(ctx: SessionContext = Depends(login_required), session: Session = Depends(get_session)):
    memberships = list_user_clubs(session, ctx.user_id)
    return ok(dump(MembershipOut, memberships), selectedClubId=ctx.selected_club_id)


@router.post("")
def create_club(payload: ClubCreate, ctx: SessionContext = Depends(login_required), session: Session = Depends(get_session)):
    club = services.create_club(session, ctx.user_id, payload)
    return created(dump(ClubOut, club), "Club created successfully")


@router.post("/select")
def select_club(
    payload: Optional[dict[str, Any]] = Body(default=None),
    ctx: SessionContext = Depends(get_session_context),
    session: Session = Depends(get_session),
):
    """Check that the user may switch to a club. The session is left untouched;
    the client follows up with ``PATCH /api/auth/session``."""
    club_id = (payload or {}).get("clubId")
    if not club_id or not isinstance(club_id, str):
        raise ValidationFailed("Club ID is required and must be a string", path="clubId")
    club_ctx = validate_club_selection(session, ctx, club_id)
    logger.info("User {} may select club {}", club_ctx.user_id, club_id)
    return ok(
        {"clubId": club_ctx.club_id, "role": club_ctx.role.value},
        "Club selection processed successfully",
    )


@router.patch("/{club_id}")
def update_club(
    club_id: str,
    payload: ClubUpdate,
    ctx: SessionContext = Depends(get_session_context),
    session: Session = Depends(get_session),
):
    authorize_club(session, ctx, club_id=club_id, minimum_role=ClubRole.OWNER)
    club = services.update_club(session, club_id, payload)
    return ok(dump(ClubOut, club), "Club updated successfully")


@router.post("/{club_id}/members")
def add_member(
    club_id: str,
    payload: MemberAdd,
    ctx: SessionContext = Depends(get_session_context),
    session: Session = Depends(get_session),
):
    club_ctx = authorize_club(session, ctx, club_id=club_id, minimum_role=MANAGE_ROLE)
    # only an owner hands out ownership
    if payload.role is ClubRole.OWNER and club_ctx.role is not ClubRole.OWNER:
        raise InsufficientPermissions("Only an owner can add another owner")
    membership = services.add_member(session, club_id, payload)
    return created(dump(MembershipOut, membership), "Member added successfully")
