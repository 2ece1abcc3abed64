from __future__ import annotations

import datetime as dt
from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session

from ..auth import login_required
from ..club_gate import SessionContext, authorize_club, authorize_row
from ..db import get_session
from ..errors import NotFound
from ..responses import created, dump, ok
from ..roles import READ_ROLE
from ..schemas import PerformanceCreate, PerformanceOut, PerformanceUpdate
from .. import models, services

router = APIRouter(prefix="/performances", tags=["performances"])


def _load(session: Session, ctx: SessionContext, performance_id: str) -> models.Performance:
    p = session.get(models.Performance, performance_id)
    authorize_row(session, ctx, p.athlete.club_id if p else None, READ_ROLE, NotFound("Performance not found"))
    return p


@router.get("")
def list_performances(
    clubId: Optional[str] = None,
    athleteId: str = "",
    disciplineId: str = "",
    ageGroupId: str = "",
    genderId: str = "",
    medalId: str = "",
    seasonId: str = "",
    dateFrom: Optional[dt.date] = None,
    dateTo: Optional[dt.date] = None,
    isPersonalBest: bool = False,
    isClubRecord: bool = False,
    hasProofFile: bool = False,
    search: str = "",
    page: int = 1,
    limit: int = services.DEFAULT_PAGE_SIZE,
    ctx: SessionContext = Depends(login_required),
    session: Session = Depends(get_session),
):
    club_ctx = authorize_club(session, ctx, club_id=clubId, minimum_role=READ_ROLE)
    rows, total = services.list_performances(
        session,
        club_ctx.club_id,
        athlete_id=athleteId,
        discipline_id=disciplineId,
        age_group_id=ageGroupId,
        gender_id=genderId,
        medal_id=medalId,
        season_id=seasonId,
        date_from=dateFrom,
        date_to=dateTo,
        is_personal_best=isPersonalBest,
        is_club_record=isClubRecord,
        has_proof_file=hasProofFile,
        search=search.strip(),
        page=page,
        limit=limit,
    )
    return ok(dump(PerformanceOut, rows), pagination=services.pagination(total, max(page, 1), max(limit, 1)))


@router.post("/proof", dependencies=[Depends(login_required)])
async def upload_proof(file: UploadFile = File(...)):
    content = await file.read()
    stored = services.store_proof_file(content, file.filename, file.content_type)
    return created(stored, "Proof file uploaded successfully")


@router.post("")
def create_performance(
    payload: PerformanceCreate,
    ctx: SessionContext = Depends(login_required),
    session: Session = Depends(get_session),
):
    athlete = session.get(models.Athlete, payload.athlete_id)
    authorize_row(session, ctx, athlete.club_id if athlete else None, READ_ROLE, NotFound("Athlete not found"))
    p, warnings = services.create_performance(session, athlete, payload)
    return created(dump(PerformanceOut, p), "Performance recorded successfully", warnings=warnings)


@router.get("/{performance_id}")
def get_performance(performance_id: str, ctx: SessionContext = Depends(login_required), session: Session = Depends(get_session)):
    p = _load(session, ctx, performance_id)
    return ok(dump(PerformanceOut, p))


@router.put("/{performance_id}")
def update_performance(
    performance_id: str,
    payload: PerformanceUpdate,
    ctx: SessionContext = Depends(login_required),
    session: Session = Depends(get_session),
):
    p = _load(session, ctx, performance_id)
    p, warnings = services.update_performance(session, p, payload)
    return ok(dump(PerformanceOut, p), "Performance updated successfully", warnings=warnings)


@router.delete("/{performance_id}")
def delete_performance(performance_id: str, ctx: SessionContext = Depends(login_required), session: Session = Depends(get_session)):
    p = _load(session, ctx, performance_id)
    message = f"Performance for {p.athlete.first_name} {p.athlete.last_name} in {p.discipline.name} deleted successfully"
    services.delete_performance(session, p)
    return ok(message=message)
