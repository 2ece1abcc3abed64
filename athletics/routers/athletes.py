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
from ..schemas import AthleteCreate, AthleteOut, AthleteUpdate
from .. import models, services

router = APIRouter(prefix="/athletes", tags=["athletes"])


def _load(session: Session, ctx: SessionContext, athlete_id: str, minimum_role) -> models.Athlete:
    a = session.get(models.Athlete, athlete_id)
    authorize_row(session, ctx, a.club_id if a else None, minimum_role, NotFound("Athlete not found"))
    return a


@router.get("")
def list_athletes(
    clubId: Optional[str] = None,
    search: str = "",
    genderId: str = "",
    ageGroupId: str = "",
    page: int = 1,
    limit: int = services.DEFAULT_PAGE_SIZE,
    ctx: SessionContext = Depends(login_required),
    session: Session = Depends(get_session),
):
    club_ctx = authorize_club(session, ctx, club_id=clubId, minimum_role=READ_ROLE)
    rows, total = services.list_athletes(
        session, club_ctx.club_id, search=search, gender_id=genderId, age_group_id=ageGroupId, page=page, limit=limit,
    )
    return ok(dump(AthleteOut, rows), pagination=services.pagination(total, max(page, 1), max(limit, 1)))


@router.get("/search")
def search_athletes(
    q: str = "",
    clubId: Optional[str] = None,
    limit: int = services.DEFAULT_PAGE_SIZE,
    ctx: SessionContext = Depends(login_required),
    session: Session = Depends(get_session),
):
    club_ctx = authorize_club(session, ctx, club_id=clubId, minimum_role=READ_ROLE)
    rows = services.search_athletes(session, club_ctx.club_id, q.strip(), limit)
    data = [
        {
            "id": a.id,
            "firstName": a.first_name,
            "lastName": a.last_name,
            "fullName": f"{a.first_name} {a.last_name}",
            "gender": {"id": a.gender.id, "name": a.gender.name, "initial": a.gender.initial},
            "ageGroup": {"id": a.age_group.id, "name": a.age_group.name} if a.age_group else None,
        }
        for a in rows
    ]
    return ok(data)


@router.post("")
def create_athlete(payload: AthleteCreate, ctx: SessionContext = Depends(login_required), session: Session = Depends(get_session)):
    club_ctx = authorize_club(session, ctx, club_id=payload.club_id, minimum_role=READ_ROLE)
    a = services.create_athlete(session, club_ctx.club_id, payload)
    return created(dump(AthleteOut, a), "Athlete created successfully")


@router.get("/{athlete_id}")
def get_athlete(athlete_id: str, ctx: SessionContext = Depends(login_required), session: Session = Depends(get_session)):
    a = _load(session, ctx, athlete_id, READ_ROLE)
    return ok(dump(AthleteOut, a))


@router.put("/{athlete_id}")
def update_athlete(
    athlete_id: str,
    payload: AthleteUpdate,
    ctx: SessionContext = Depends(login_required),
    session: Session = Depends(get_session),
):
    _load(session, ctx, athlete_id, READ_ROLE)
    a = services.update_athlete(session, athlete_id, payload)
    return ok(dump(AthleteOut, a), "Athlete updated successfully")


@router.delete("/{athlete_id}")
def delete_athlete(athlete_id: str, ctx: SessionContext = Depends(login_required), session: Session = Depends(get_session)):
    # removes the athlete's performances as well
    _load(session, ctx, athlete_id, MANAGE_ROLE)
    services.delete_athlete(session, athlete_id)
    return ok(message="Athlete deleted successfully")
