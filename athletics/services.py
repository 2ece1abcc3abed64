from __future__ import annotations

import datetime as dt
import uuid
from pathlib import Path
from typing import Optional

from loguru import logger
from sqlalchemy import select, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from . import models
from . import medals
from .auth import hash_password, verify_password
from .disciplines import (
    DisciplineShape,
    prepare_for_creation,
    resolve_update,
    validate_age_group_input,
    validate_athlete_names,
    validate_season_input,
)
from .errors import Conflict, NotFound, PerformanceValidationFailed, ValidationFailed
from .performance import validate_performance, validate_proof_file
from .records import apply_record_flags, detect_records, is_duplicate
from .roles import ClubRole
from .settings import settings
from .schemas import (
    AgeGroupCreate,
    AgeGroupUpdate,
    AthleteCreate,
    AthleteUpdate,
    ClubCreate,
    ClubUpdate,
    DisciplineCreate,
    DisciplineUpdate,
    MemberAdd,
    PerformanceCreate,
    PerformanceUpdate,
    RegisterRequest,
    SeasonCreate,
    SeasonUpdate,
)

GENDERS = (("Male", "M"), ("Female", "F"))

SEARCH_LIMIT = 20
DEFAULT_PAGE_SIZE = 10


def _commit(session: Session, conflict_message: str) -> None:
    """Commit, turning a uniqueness violation raised by the store into a 409."""
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        logger.warning("Integrity error on commit: {}", conflict_message)
        raise Conflict(conflict_message)


def _page(page: int, limit: int) -> tuple[int, int]:
    page = max(page, 1)
    limit = max(limit, 1)
    return page, limit


def pagination(total: int, page: int, limit: int) -> dict:
    return {"total": total, "page": page, "limit": limit, "totalPages": (total + limit - 1) // limit}

# ---------------------------
# Reference data
# ---------------------------

def ensure_reference_data(session: Session) -> None:
    """Make sure the fixed gender list and the medal catalog exist."""
    changed = False
    for name, initial in GENDERS:
        if not session.execute(select(models.Gender).where(models.Gender.name == name)).scalar_one_or_none():
            session.add(models.Gender(name=name, initial=initial))
            changed = True
    for entry in medals.all_medals_by_position():
        existing = session.execute(
            select(models.Medal).where(models.Medal.position == entry["position"])
        ).scalar_one_or_none()
        if existing is None:
            session.add(models.Medal(position=entry["position"], name=entry["name"]))
            changed = True
        elif existing.name != entry["name"]:
            existing.name = entry["name"]
            changed = True
    if changed:
        session.commit()
        logger.info("Reference data (genders, medals) ensured")

def list_genders(session: Session) -> list[models.Gender]:
    return session.execute(select(models.Gender).order_by(models.Gender.name.asc())).scalars().all()

def list_medals(session: Session) -> list[models.Medal]:
    return session.execute(select(models.Medal).order_by(models.Medal.position.asc())).scalars().all()

# ---------------------------
# Users / auth
# ---------------------------

def register_user(session: Session, payload: RegisterRequest) -> models.User:
    email = payload.email.strip().lower()
    if session.execute(select(models.User).where(models.User.email == email)).scalar_one_or_none():
        raise Conflict("User with this email already exists")
    u = models.User(email=email, name=payload.name.strip(), password_hash=hash_password(payload.password))
    session.add(u)
    _commit(session, "User with this email already exists")
    logger.info("Registered user {}", u.id)
    return u

def authenticate_user(session: Session, email: str, password: str) -> Optional[models.User]:
    u = session.execute(
        select(models.User).where(models.User.email == email.strip().lower())
    ).scalar_one_or_none()
    if u and verify_password(password, u.password_hash):
        return u
    return None

def get_user(session: Session, user_id: str) -> Optional[models.User]:
    return session.get(models.User, user_id)

# ---------------------------
# Clubs
# ---------------------------

def get_club(session: Session, club_id: str) -> models.Club:
    club = session.get(models.Club, club_id)
    if club is None:
        raise NotFound("Club not found")
    return club

def create_club(session: Session, user_id: str, payload: ClubCreate) -> models.Club:
    club = models.Club(name=payload.name.strip(), description=payload.description)
    club.memberships.append(models.UserClub(user_id=user_id, role=ClubRole.OWNER.value))
    session.add(club)
    _commit(session, "Club could not be created")
    logger.info("User {} created club {}", user_id, club.id)
    return club

def update_club(session: Session, club_id: str, payload: ClubUpdate) -> models.Club:
    club = get_club(session, club_id)
    changes = payload.model_dump(exclude_unset=True)
    if "name" in changes and changes["name"] is not None:
        club.name = changes["name"].strip()
    if "description" in changes:
        club.description = changes["description"]
    if changes.get("is_active") is not None:
        club.is_active = changes["is_active"]
    _commit(session, "Club could not be updated")
    logger.info("Updated club {}", club.id)
    return club

def add_member(session: Session, club_id: str, payload: MemberAdd) -> models.UserClub:
    """Add a user to a club, or re-activate and re-role an existing membership."""
    get_club(session, club_id)
    u = session.execute(
        select(models.User).where(models.User.email == payload.email.strip().lower())
    ).scalar_one_or_none()
    if u is None:
        raise NotFound("User not found")
    membership = session.execute(
        select(models.UserClub).where(models.UserClub.user_id == u.id, models.UserClub.club_id == club_id)
    ).scalar_one_or_none()
    if membership is None:
        membership = models.UserClub(user_id=u.id, club_id=club_id)
        session.add(membership)
    membership.role = payload.role.value
    membership.is_active = True
    _commit(session, "User is already a member of this club")
    session.refresh(membership)
    logger.info("User {} is now {} in club {}", u.id, membership.role, club_id)
    return membership

# ---------------------------
# Seasons
# ---------------------------

def list_seasons(session: Session) -> list[models.Season]:
    return session.execute(select(models.Season).order_by(models.Season.name.asc())).scalars().all()

def get_season(session: Session, season_id: str) -> models.Season:
    season = session.get(models.Season, season_id)
    if season is None:
        raise NotFound("Season not found")
    return season

def _season_name_taken(session: Session, name: str, exclude_id: Optional[str] = None) -> bool:
    q = select(models.Season.id).where(models.Season.name == name)
    if exclude_id:
        q = q.where(models.Season.id != exclude_id)
    return session.execute(q).first() is not None

def create_season(session: Session, payload: SeasonCreate) -> models.Season:
    validate_season_input(payload.name)
    name = payload.name.strip()
    if _season_name_taken(session, name):
        raise Conflict("Season with this name already exists")
    season = models.Season(name=name, description=payload.description)
    session.add(season)
    _commit(session, "Season with this name already exists")
    logger.info("Created season {} ({})", season.id, season.name)
    return season

def update_season(session: Session, season_id: str, payload: SeasonUpdate) -> models.Season:
    season = get_season(session, season_id)
    changes = payload.model_dump(exclude_unset=True)
    if "name" in changes:
        validate_season_input(changes["name"])
        name = changes["name"].strip()
        if _season_name_taken(session, name, exclude_id=season.id):
            raise Conflict("Season with this name already exists")
        season.name = name
    if "description" in changes:
        season.description = changes["description"]
    _commit(session, "Season with this name already exists")
    logger.info("Updated season {}", season.id)
    return season

def delete_season(session: Session, season_id: str) -> models.Season:
    season = get_season(session, season_id)
    if season.discipline_count > 0:
        raise Conflict("Cannot delete season with existing disciplines")
    session.delete(season)
    session.commit()
    logger.info("Deleted season {}", season_id)
    return season

# ---------------------------
# Disciplines
# ---------------------------

def list_disciplines(session: Session, season_id: Optional[str] = None) -> list[models.Discipline]:
    q = (
        select(models.Discipline)
        .join(models.Season, models.Season.id == models.Discipline.season_id)
        .order_by(models.Season.name.asc(), models.Discipline.name.asc())
    )
    if season_id:
        q = q.where(models.Discipline.season_id == season_id)
    return session.execute(q).scalars().all()

def search_disciplines(session: Session, term: str, season_id: Optional[str] = None) -> list[models.Discipline]:
    q = (
        select(models.Discipline)
        .join(models.Season, models.Season.id == models.Discipline.season_id)
        .where(func.lower(models.Discipline.name).contains(term.lower()))
        .order_by(models.Season.name.asc(), models.Discipline.name.asc())
        .limit(SEARCH_LIMIT)
    )
    if season_id:
        q = q.where(models.Discipline.season_id == season_id)
    return session.execute(q).scalars().all()

def get_discipline(session: Session, discipline_id: str) -> models.Discipline:
    d = session.get(models.Discipline, discipline_id)
    if d is None:
        raise NotFound("Discipline not found")
    return d

def _discipline_conflict(name: str, season: models.Season) -> Conflict:
    return Conflict(f'Discipline "{name}" already exists in {season.name} season')

def _discipline_name_taken(session: Session, season_id: str, name: str, exclude_id: Optional[str] = None) -> bool:
    q = select(models.Discipline.id).where(
        models.Discipline.season_id == season_id,
        models.Discipline.name == name,
    )
    if exclude_id:
        q = q.where(models.Discipline.id != exclude_id)
    return session.execute(q).first() is not None

def create_discipline(session: Session, payload: DisciplineCreate) -> models.Discipline:
    fields = prepare_for_creation(payload)
    fields["name"] = fields["name"].strip()
    season = session.get(models.Season, fields["season_id"])
    if season is None:
        raise ValidationFailed("Invalid season ID", path="seasonId")
    if _discipline_name_taken(session, season.id, fields["name"]):
        raise _discipline_conflict(fields["name"], season)
    d = models.Discipline(**fields)
    session.add(d)
    _commit(session, f'Discipline "{fields["name"]}" already exists in {season.name} season')
    logger.info("Created discipline {} ({}) in season {}", d.id, d.name, season.id)
    return d

def update_discipline(session: Session, discipline_id: str, payload: DisciplineUpdate) -> models.Discipline:
    d = get_discipline(session, discipline_id)
    changes = resolve_update(d, payload.model_dump(exclude_unset=True))
    if "name" in changes:
        changes["name"] = changes["name"].strip()
        if _discipline_name_taken(session, d.season_id, changes["name"], exclude_id=d.id):
            raise _discipline_conflict(changes["name"], d.season)
    for key, value in changes.items():
        setattr(d, key, value)
    _commit(session, f'Discipline "{d.name}" already exists in {d.season.name} season')
    logger.info("Updated discipline {}", d.id)
    return d

def delete_discipline(session: Session, discipline_id: str) -> models.Discipline:
    d = get_discipline(session, discipline_id)
    in_use = session.execute(
        select(func.count(models.Performance.id)).where(models.Performance.discipline_id == d.id)
    ).scalar_one()
    if in_use:
        raise Conflict("Cannot delete discipline with recorded performances")
    session.delete(d)
    session.commit()
    logger.info("Deleted discipline {}", discipline_id)
    return d

# ---------------------------
# Age groups
# ---------------------------

def list_age_groups(session: Session, club_id: str) -> list[models.AgeGroup]:
    return session.execute(
        select(models.AgeGroup).where(models.AgeGroup.club_id == club_id).order_by(models.AgeGroup.ordinal.asc())
    ).scalars().all()

def get_age_group(session: Session, age_group_id: str) -> models.AgeGroup:
    ag = session.get(models.AgeGroup, age_group_id)
    if ag is None:
        raise NotFound("Age group not found")
    return ag

def _age_group_name_taken(session: Session, club_id: str, name: str, exclude_id: Optional[str] = None) -> bool:
    q = select(models.AgeGroup.id).where(models.AgeGroup.club_id == club_id, models.AgeGroup.name == name)
    if exclude_id:
        q = q.where(models.AgeGroup.id != exclude_id)
    return session.execute(q).first() is not None

def create_age_group(session: Session, club_id: str, payload: AgeGroupCreate) -> models.AgeGroup:
    validate_age_group_input(payload.name, payload.ordinal)
    name = payload.name.strip()
    if _age_group_name_taken(session, club_id, name):
        raise Conflict("Age group with this name already exists in this club")
    ag = models.AgeGroup(club_id=club_id, name=name, ordinal=payload.ordinal)
    session.add(ag)
    _commit(session, "Age group with this name already exists in this club")
    logger.info("Created age group {} in club {}", ag.id, club_id)
    return ag

def update_age_group(session: Session, age_group_id: str, payload: AgeGroupUpdate) -> models.AgeGroup:
    ag = get_age_group(session, age_group_id)
    changes = payload.model_dump(exclude_unset=True)
    validate_age_group_input(changes.get("name"), changes.get("ordinal"), partial=True)
    if changes.get("name") is not None:
        name = changes["name"].strip()
        if _age_group_name_taken(session, ag.club_id, name, exclude_id=ag.id):
            raise Conflict("Age group with this name already exists in this club")
        ag.name = name
    if changes.get("ordinal") is not None:
        ag.ordinal = changes["ordinal"]
    _commit(session, "Age group with this name already exists in this club")
    logger.info("Updated age group {}", ag.id)
    return ag

def delete_age_group(session: Session, age_group_id: str) -> models.AgeGroup:
    ag = get_age_group(session, age_group_id)
    if ag.athlete_count > 0:
        raise Conflict("Cannot delete age group with assigned athletes")
    in_use = session.execute(
        select(func.count(models.Performance.id)).where(models.Performance.age_group_id == ag.id)
    ).scalar_one()
    if in_use:
        raise Conflict("Cannot delete age group with recorded performances")
    session.delete(ag)
    session.commit()
    logger.info("Deleted age group {}", age_group_id)
    return ag

# ---------------------------
# Athletes
# ---------------------------

def _athlete_filter(q, search: str):
    pattern = f"%{search.lower()}%"
    return q.where(or_(
        func.lower(models.Athlete.first_name).like(pattern),
        func.lower(models.Athlete.last_name).like(pattern),
    ))

def list_athletes(
    session: Session,
    club_id: str,
    search: str = "",
    gender_id: str = "",
    age_group_id: str = "",
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
) -> tuple[list[models.Athlete], int]:
    page, limit = _page(page, limit)
    q = select(models.Athlete).where(models.Athlete.club_id == club_id)
    if search:
        q = _athlete_filter(q, search)
    if gender_id:
        q = q.where(models.Athlete.gender_id == gender_id)
    if age_group_id:
        q = q.where(models.Athlete.age_group_id == age_group_id)
    total = session.execute(select(func.count()).select_from(q.subquery())).scalar_one()
    rows = session.execute(
        q.order_by(models.Athlete.last_name.asc(), models.Athlete.first_name.asc())
        .offset((page - 1) * limit)
        .limit(limit)
    ).scalars().all()
    return rows, total

def search_athletes(session: Session, club_id: str, term: str = "", limit: int = DEFAULT_PAGE_SIZE) -> list[models.Athlete]:
    # terms shorter than two characters list the club without filtering
    q = select(models.Athlete).where(models.Athlete.club_id == club_id)
    if len(term) >= 2:
        q = _athlete_filter(q, term)
    q = q.order_by(models.Athlete.last_name.asc(), models.Athlete.first_name.asc())
    return session.execute(q.limit(min(max(limit, 1), SEARCH_LIMIT))).scalars().all()

def get_athlete(session: Session, athlete_id: str) -> models.Athlete:
    a = session.get(models.Athlete, athlete_id)
    if a is None:
        raise NotFound("Athlete not found")
    return a

def _athlete_name_taken(session: Session, club_id: str, first: str, last: str, exclude_id: Optional[str] = None) -> bool:
    q = select(models.Athlete.id).where(
        models.Athlete.club_id == club_id,
        func.lower(models.Athlete.first_name) == first.lower(),
        func.lower(models.Athlete.last_name) == last.lower(),
    )
    if exclude_id:
        q = q.where(models.Athlete.id != exclude_id)
    return session.execute(q).first() is not None

def _check_gender(session: Session, gender_id: str) -> None:
    if session.get(models.Gender, gender_id) is None:
        raise ValidationFailed("Invalid gender selected", path="genderId")

def _check_age_group(session: Session, club_id: str, age_group_id: Optional[str]) -> None:
    if not age_group_id:
        return
    ag = session.get(models.AgeGroup, age_group_id)
    if ag is None or ag.club_id != club_id:
        raise ValidationFailed("Invalid age group selected", path="ageGroupId")

def create_athlete(session: Session, club_id: str, payload: AthleteCreate) -> models.Athlete:
    validate_athlete_names(payload.first_name, payload.last_name)
    first, last = payload.first_name.strip(), payload.last_name.strip()
    _check_gender(session, payload.gender_id)
    _check_age_group(session, club_id, payload.age_group_id)
    if _athlete_name_taken(session, club_id, first, last):
        raise Conflict("Athlete with this name already exists in this club")
    a = models.Athlete(
        club_id=club_id,
        gender_id=payload.gender_id,
        age_group_id=payload.age_group_id or None,
        first_name=first,
        last_name=last,
    )
    session.add(a)
    _commit(session, "Athlete with this name already exists in this club")
    logger.info("Created athlete {} in club {}", a.id, club_id)
    return a

def update_athlete(session: Session, athlete_id: str, payload: AthleteUpdate) -> models.Athlete:
    a = get_athlete(session, athlete_id)
    changes = payload.model_dump(exclude_unset=True)
    validate_athlete_names(changes.get("first_name"), changes.get("last_name"), partial=True)
    first = (changes.get("first_name") or a.first_name).strip()
    last = (changes.get("last_name") or a.last_name).strip()
    if (first, last) != (a.first_name, a.last_name) and _athlete_name_taken(session, a.club_id, first, last, exclude_id=a.id):
        raise Conflict("Athlete with this name already exists in this club")
    if changes.get("gender_id"):
        _check_gender(session, changes["gender_id"])
        a.gender_id = changes["gender_id"]
    if "age_group_id" in changes:
        _check_age_group(session, a.club_id, changes["age_group_id"])
        a.age_group_id = changes["age_group_id"] or None
    a.first_name, a.last_name = first, last
    _commit(session, "Athlete with this name already exists in this club")
    logger.info("Updated athlete {}", a.id)
    return a

def delete_athlete(session: Session, athlete_id: str) -> models.Athlete:
    a = get_athlete(session, athlete_id)
    session.delete(a)
    session.commit()
    logger.info("Deleted athlete {}", athlete_id)
    return a

# ---------------------------
# Performances
# ---------------------------

def list_performances(
    session: Session,
    club_id: str,
    athlete_id: str = "",
    discipline_id: str = "",
    age_group_id: str = "",
    gender_id: str = "",
    medal_id: str = "",
    season_id: str = "",
    date_from: Optional[dt.date] = None,
    date_to: Optional[dt.date] = None,
    is_personal_best: bool = False,
    is_club_record: bool = False,
    has_proof_file: bool = False,
    search: str = "",
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
) -> tuple[list[models.Performance], int]:
    page, limit = _page(page, limit)
    P = models.Performance
    q = (
        select(P)
        .join(models.Athlete, models.Athlete.id == P.athlete_id)
        .join(models.Discipline, models.Discipline.id == P.discipline_id)
        .where(models.Athlete.club_id == club_id)
    )
    for column, value in (
        (P.athlete_id, athlete_id),
        (P.discipline_id, discipline_id),
        (P.age_group_id, age_group_id),
        (P.gender_id, gender_id),
        (P.medal_id, medal_id),
        (models.Discipline.season_id, season_id),
    ):
        if value:
            q = q.where(column == value)
    if date_from:
        q = q.where(P.date >= date_from)
    if date_to:
        q = q.where(P.date <= date_to)
    if is_personal_best:
        q = q.where(P.is_personal_best.is_(True))
    if is_club_record:
        q = q.where(P.is_club_record.is_(True))
    if has_proof_file:
        q = q.where(P.proof_file_url.is_not(None))
    if search:
        pattern = f"%{search.lower()}%"
        q = q.where(or_(
            func.lower(models.Athlete.first_name).like(pattern),
            func.lower(models.Athlete.last_name).like(pattern),
            func.lower(models.Discipline.name).like(pattern),
            func.lower(P.event_details).like(pattern),
        ))
    total = session.execute(select(func.count()).select_from(q.subquery())).scalar_one()
    rows = session.execute(
        q.order_by(P.date.desc(), P.created_at.desc()).offset((page - 1) * limit).limit(limit)
    ).scalars().all()
    return rows, total

def _check_team_members(session: Session, club_id: str, team_members: Optional[list[str]]) -> None:
    if not team_members:
        return
    found = session.execute(
        select(func.count(models.Athlete.id)).where(
            models.Athlete.id.in_(set(team_members)),
            models.Athlete.club_id == club_id,
        )
    ).scalar_one()
    if found != len(set(team_members)):
        raise ValidationFailed("Team members must be athletes of the same club", path="teamMembers")

def _check_medal(session: Session, medal_id: Optional[str]) -> None:
    if medal_id and session.get(models.Medal, medal_id) is None:
        raise ValidationFailed("Invalid medal selected", path="medalId")

def _validate(discipline: Optional[models.Discipline], values: dict, now: Optional[dt.datetime]) -> list[str]:
    shape = DisciplineShape.of(discipline) if discipline is not None else None
    result = validate_performance(
        shape,
        performance_date=values.get("date"),
        event_details=values.get("event_details"),
        time_seconds=values.get("time_seconds"),
        distance_meters=values.get("distance_meters"),
        medal_id=values.get("medal_id"),
        team_members=values.get("team_members"),
        discipline_name=discipline.name if discipline is not None else "",
        now=now,
    )
    if not result.is_valid:
        raise PerformanceValidationFailed(result.details(), result.warnings)
    return result.warnings

def create_performance(
    session: Session,
    athlete: models.Athlete,
    payload: PerformanceCreate,
    now: Optional[dt.datetime] = None,
) -> tuple[models.Performance, list[str]]:
    """Validate, de-duplicate and store a performance, then update record flags.

    Returns the stored row and the non-blocking warnings raised by validation.
    """
    values = payload.model_dump()
    discipline = session.get(models.Discipline, payload.discipline_id)
    warnings = _validate(discipline, values, now)

    if is_duplicate(
        session,
        athlete_id=athlete.id,
        discipline_id=payload.discipline_id,
        age_group_id=payload.age_group_id,
        gender_id=payload.gender_id,
        date=payload.date,
        event_details=payload.event_details,
    ):
        raise Conflict("A performance with these details already exists for this athlete")

    _check_age_group(session, athlete.club_id, payload.age_group_id)
    _check_gender(session, payload.gender_id)
    _check_medal(session, payload.medal_id)
    _check_team_members(session, athlete.club_id, payload.team_members)

    p = models.Performance(
        athlete_id=athlete.id,
        discipline_id=discipline.id,
        age_group_id=payload.age_group_id,
        gender_id=payload.gender_id,
        medal_id=payload.medal_id or None,
        time_seconds=payload.time_seconds,
        distance_meters=payload.distance_meters,
        date=payload.date,
        event_details=payload.event_details.strip(),
        proof_file_url=payload.proof_file_url or None,
        proof_file_name=payload.proof_file_name or None,
        team_members=payload.team_members or None,
    )
    # compare against stored results before the new row joins the session
    detection = detect_records(session, p, DisciplineShape.of(discipline), athlete.club_id)
    session.add(p)
    apply_record_flags(session, p, detection)
    _commit(session, "A performance with these details already exists for this athlete")
    logger.info("Recorded performance {} for athlete {}", p.id, athlete.id)
    return p, warnings

def update_performance(
    session: Session,
    performance: models.Performance,
    payload: PerformanceUpdate,
    now: Optional[dt.datetime] = None,
) -> tuple[models.Performance, list[str]]:
    """Apply a partial update; the merged record is validated as a whole."""
    changes = payload.model_dump(exclude_unset=True)
    for key in ("date", "event_details"):
        if changes.get(key) is None:
            changes.pop(key, None)

    merged = {
        key: changes.get(key, getattr(performance, key))
        for key in ("medal_id", "time_seconds", "distance_meters", "date", "event_details", "team_members")
    }
    discipline = performance.discipline
    warnings = _validate(discipline, merged, now)

    if ("date" in changes or "event_details" in changes) and is_duplicate(
        session,
        athlete_id=performance.athlete_id,
        discipline_id=performance.discipline_id,
        age_group_id=performance.age_group_id,
        gender_id=performance.gender_id,
        date=merged["date"],
        event_details=merged["event_details"],
        exclude_id=performance.id,
    ):
        raise Conflict("A performance with these details already exists for this athlete")

    club_id = performance.athlete.club_id
    if "medal_id" in changes:
        _check_medal(session, changes["medal_id"])
    if "team_members" in changes:
        _check_team_members(session, club_id, changes["team_members"])

    for key, value in changes.items():
        if key in ("medal_id", "proof_file_url", "proof_file_name", "team_members"):
            value = value or None
        if key == "event_details":
            value = value.strip()
        setattr(performance, key, value)

    if "time_seconds" in changes or "distance_meters" in changes:
        detection = detect_records(session, performance, DisciplineShape.of(discipline), club_id)
        apply_record_flags(session, performance, detection)

    _commit(session, "A performance with these details already exists for this athlete")
    logger.info("Updated performance {}", performance.id)
    return performance, warnings

def delete_performance(session: Session, performance: models.Performance) -> None:
    pid = performance.id
    if performance.is_personal_best or performance.is_club_record:
        # hand the flags back to the best remaining results
        performance.time_seconds = None
        performance.distance_meters = None
        detection = detect_records(session, performance, DisciplineShape.of(performance.discipline), performance.athlete.club_id)
        apply_record_flags(session, performance, detection)
    session.delete(performance)
    session.commit()
    logger.info("Deleted performance {}", pid)

# ---------------------------
# Proof files
# ---------------------------

_EXTENSIONS = {"image/jpeg": ".jpg", "image/png": ".png", "image/gif": ".gif", "image/webp": ".webp"}

def store_proof_file(content: bytes, filename: Optional[str], content_type: Optional[str]) -> dict:
    result = validate_proof_file(len(content), content_type)
    if not result.is_valid:
        raise ValidationFailed(result.errors[0], details=result.details())
    upload_dir = Path(settings.ATHLETICS_UPLOAD_DIR)
    upload_dir.mkdir(parents=True, exist_ok=True)
    stored_name = uuid.uuid4().hex + _EXTENSIONS[content_type]
    (upload_dir / stored_name).write_bytes(content)
    logger.info("Stored proof file {} ({} bytes)", stored_name, len(content))
    return {
        "proofFileUrl": f"{settings.ATHLETICS_UPLOAD_URL_PREFIX.rstrip('/')}/{stored_name}",
        "proofFileName": filename or stored_name,
    }
