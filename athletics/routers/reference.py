from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from ..db import get_session
from ..errors import InvalidMedalName, InvalidMedalPosition
from ..responses import dump, ok
from ..schemas import GenderOut, MedalCreate, MedalOut
from .. import medals
from .. import services

router = APIRouter(tags=["reference"])


@router.get("/genders")
def list_genders(session: Session = Depends(get_session)):
    return ok(dump(GenderOut, services.list_genders(session)))


@router.get("/medals")
def list_medals(session: Session = Depends(get_session)):
    return ok(dump(MedalOut, services.list_medals(session)), "Medals retrieved successfully")


@router.post("/medals")
def check_medal(payload: Optional[MedalCreate] = Body(default=None)):
    """Dry run against the fixed catalog; nothing is stored."""
    payload = payload or MedalCreate()
    if not medals.validate_position(payload.position):
        raise InvalidMedalPosition()
    name = medals.name_for_position(payload.position)
    if payload.name is not None and payload.position not in medals.positions_for_name(payload.name):
        raise InvalidMedalName("Medal name does not match position")
    return ok(
        {"position": payload.position, "name": name, "display": medals.format_display(payload.position)},
        "Medal validation successful",
    )
