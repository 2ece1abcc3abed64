from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import login_required
from ..club_gate import SessionContext, authorize_club, authorize_row
from ..db import get_session
from ..errors import NotFound
from ..responses import created, dump, ok
from ..roles import MANAGE_ROLE, READ_ROLE
from ..schemas import AgeGroupCreate, AgeGroupOut, AgeGroupUpdate
from .. import models, services

router = APIRouter(prefix="/age-groups", tags=["age-groups"])


def _load(session: Session, ctx: SessionContext, age_group_id: str, minimum_role) -> models.AgeGroup:
    ag = session.get(models.AgeGroup, age_group_id)
    authorize_row(session, ctx, ag.club_id if ag else None, minimum_role, NotFound("Age group not found"))
    return ag


@router.get("")
def list_age_groups(
    clubId: Optional[str] = None,
    ctx: SessionContext = Depends(login_required),
    session: Session = Depends(get_session),
):
    club_ctx = authorize_club(session, ctx, club_id=clubId, minimum_role=READ_ROLE)
    return ok(dump(AgeGroupOut, services.list_age_groups(session, club_ctx.club_id)))


@router.post("")
def create_age_group(
    payload: AgeGroupCreate,
    ctx: SessionContext = Depends(login_required),
    session: Session = Depends(get_session),
):
    club_ctx = authorize_club(session, ctx, club_id=payload.club_id, minimum_role=MANAGE_ROLE)
    ag = services.create_age_group(session, club_ctx.club_id, payload)
    return created(dump(AgeGroupOut, ag), "Age group created successfully")


@router.get("/{age_group_id}")
def get_age_group(age_group_id: str, ctx: SessionContext = Depends(login_required), session: Session = Depends(get_session)):
    ag = _load(session, ctx, age_group_id, READ_ROLE)
    return ok(dump(AgeGroupOut, ag))


@router.put("/{age_group_id}")
def update_age_group(
    age_group_id: str,
    payload: AgeGroupUpdate,
    ctx: SessionContext = Depends(login_required),
    session: Session = Depends(get_session),
):
    _load(session, ctx, age_group_id, MANAGE_ROLE)
    ag = services.update_age_group(session, age_group_id, payload)
    return ok(dump(AgeGroupOut, ag), "Age group updated successfully")


@router.delete("/{age_group_id}")
def delete_age_group(age_group_id: str, ctx: SessionContext = Depends(login_required), session: Session = Depends(get_session)):
    _load(session, ctx, age_group_id, MANAGE_ROLE)
    services.delete_age_group(session, age_group_id)
    return ok(message="Age group deleted successfully")
