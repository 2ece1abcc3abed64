from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import get_session_context, login_required
from ..club_gate import SessionContext, authorize_global
from ..db import get_session
from ..responses import created, dump, ok
from ..roles import MANAGE_ROLE
from ..schemas import SeasonCreate, SeasonOut, SeasonUpdate
from .. import services

router = APIRouter(prefix="/seasons", tags=["seasons"])


@router.get("", dependencies=[Depends(login_required)])
def list_seasons(session: Session = Depends(get_session)):
    return ok(dump(SeasonOut, services.list_seasons(session)))


@router.post("")
def create_season(payload: SeasonCreate, ctx: SessionContext = Depends(get_session_context), session: Session = Depends(get_session)):
    authorize_global(session, ctx, MANAGE_ROLE)
    season = services.create_season(session, payload)
    return created(dump(SeasonOut, season), "Season created successfully")


@router.get("/{season_id}", dependencies=[Depends(login_required)])
def get_season(season_id: str, session: Session = Depends(get_session)):
    return ok(dump(SeasonOut, services.get_season(session, season_id)))


@router.put("/{season_id}")
def update_season(
    season_id: str,
    payload: SeasonUpdate,
    ctx: SessionContext = Depends(get_session_context),
    session: Session = Depends(get_session),
):
    authorize_global(session, ctx, MANAGE_ROLE)
    season = services.update_season(session, season_id, payload)
    return ok(dump(SeasonOut, season), "Season updated successfully")


@router.delete("/{season_id}")
def delete_season(season_id: str, ctx: SessionContext = Depends(get_session_context), session: Session = Depends(get_session)):
    authorize_global(session, ctx, MANAGE_ROLE)
    services.delete_season(session, season_id)
    return ok(message="Season deleted successfully")
