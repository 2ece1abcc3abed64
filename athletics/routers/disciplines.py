from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import get_session_context, login_required
from ..club_gate import SessionContext, authorize_global
from ..db import get_session
from ..errors import ValidationFailed
from ..responses import created, dump, ok
from ..roles import MANAGE_ROLE
from ..schemas import DisciplineCreate, DisciplineOut, DisciplineUpdate
from .. import services

router = APIRouter(prefix="/disciplines", tags=["disciplines"])


@router.get("", dependencies=[Depends(login_required)])
def list_disciplines(season: Optional[str] = None, session: Session = Depends(get_session)):
    return ok(dump(DisciplineOut, services.list_disciplines(session, season)))


@router.get("/search", dependencies=[Depends(login_required)])
def search_disciplines(q: Optional[str] = None, season: Optional[str] = None, session: Session = Depends(get_session)):
    if not q or not q.strip():
        raise ValidationFailed("Search term (q) is required", path="q")
    return ok(dump(DisciplineOut, services.search_disciplines(session, q.strip(), season)))


@router.post("")
def create_discipline(
    payload: DisciplineCreate,
    ctx: SessionContext = Depends(get_session_context),
    session: Session = Depends(get_session),
):
    authorize_global(session, ctx, MANAGE_ROLE)
    d = services.create_discipline(session, payload)
    return created(dump(DisciplineOut, d), f'Discipline "{d.name}" created successfully')


@router.get("/{discipline_id}", dependencies=[Depends(login_required)])
def get_discipline(discipline_id: str, session: Session = Depends(get_session)):
    return ok(dump(DisciplineOut, services.get_discipline(session, discipline_id)))


@router.put("/{discipline_id}")
def update_discipline(
    discipline_id: str,
    payload: DisciplineUpdate,
    ctx: SessionContext = Depends(get_session_context),
    session: Session = Depends(get_session),
):
    authorize_global(session, ctx, MANAGE_ROLE)
    d = services.update_discipline(session, discipline_id, payload)
    return ok(dump(DisciplineOut, d), "Discipline updated successfully")


@router.delete("/{discipline_id}")
def delete_discipline(
    discipline_id: str,
    ctx: SessionContext = Depends(get_session_context),
    session: Session = Depends(get_session),
):
    authorize_global(session, ctx, MANAGE_ROLE)
    d = services.delete_discipline(session, discipline_id)
    return ok(message=f'Discipline "{d.name}" deleted successfully')
