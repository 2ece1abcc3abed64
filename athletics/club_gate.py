"""Club authorization gate.

Every club-scoped request goes through ``authorize_club`` before any domain
logic runs. The session is passed in explicitly as a ``SessionContext`` so the
gate can be exercised without a web framework, and nothing is cached between
requests: membership and role are read from the store on every call.

Order of checks:

1. no user in the session            -> Unauthenticated
2. no explicit club and none selected -> ClubContextRequired
3. required club != selected club     -> ClubMismatch
4. no active membership in the club   -> AccessDenied
5. role below the requested minimum   -> InsufficientPermissions
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from loguru import logger
from sqlalchemy import select
from sqlalchemy.orm import Session

from . import models
from .errors import (
    AccessDenied,
    ClubContextRequired,
    ClubMismatch,
    InsufficientPermissions,
    NotFound,
    Unauthenticated,
)
from .roles import ClubRole


@dataclass(frozen=True)
class SessionContext:
    user_id: Optional[str] = None
    selected_club_id: Optional[str] = None


@dataclass(frozen=True)
class ClubContext:
    club_id: str
    user_id: str
    role: ClubRole


def require_user(session_ctx: SessionContext) -> str:
    if not session_ctx.user_id:
        raise Unauthenticated()
    return session_ctx.user_id


def active_membership(db: Session, user_id: str, club_id: str) -> Optional[models.UserClub]:
    return db.execute(
        select(models.UserClub)
        .join(models.Club, models.Club.id == models.UserClub.club_id)
        .where(
            models.UserClub.user_id == user_id,
            models.UserClub.club_id == club_id,
            models.UserClub.is_active.is_(True),
            models.Club.is_active.is_(True),
        )
    ).scalar_one_or_none()


def list_user_clubs(db: Session, user_id: str) -> list[models.UserClub]:
    return db.execute(
        select(models.UserClub)
        .join(models.Club, models.Club.id == models.UserClub.club_id)
        .where(
            models.UserClub.user_id == user_id,
            models.UserClub.is_active.is_(True),
            models.Club.is_active.is_(True),
        )
        .order_by(models.Club.name.asc())
    ).scalars().all()


def authorize_club(
    db: Session,
    session_ctx: SessionContext,
    club_id: Optional[str] = None,
    required_club_id: Optional[str] = None,
    minimum_role: Optional[ClubRole] = None,
) -> ClubContext:
    """Resolve and check the club a request acts on.

    ``club_id`` is an explicit request parameter that takes precedence over the
    session's selected club. ``required_club_id`` is a club the caller insists
    on and which must also be the selected club.
    """
    user_id = require_user(session_ctx)

    if required_club_id:
        if not session_ctx.selected_club_id:
            raise ClubContextRequired()
        if required_club_id != session_ctx.selected_club_id:
            logger.warning(
                "Club mismatch for user {}: requested {} but selected {}",
                user_id, required_club_id, session_ctx.selected_club_id,
            )
            raise ClubMismatch()
        target = required_club_id
    else:
        target = club_id or session_ctx.selected_club_id
    if not target:
        raise ClubContextRequired()

    membership = active_membership(db, user_id, target)
    if membership is None:
        logger.warning("User {} denied access to club {}", user_id, target)
        raise AccessDenied()

    role = ClubRole(membership.role)
    if minimum_role is not None and not role.meets(minimum_role):
        logger.warning("User {} has role {} in club {}, needs {}", user_id, role.value, target, minimum_role.value)
        raise InsufficientPermissions()

    return ClubContext(club_id=target, user_id=user_id, role=role)


def authorize_global(db: Session, session_ctx: SessionContext, minimum_role: ClubRole) -> str:
    """Gate for resources shared by all clubs (seasons, disciplines).

    The user qualifies when any of their active memberships meets ``minimum_role``.
    """
    user_id = require_user(session_ctx)
    for membership in list_user_clubs(db, user_id):
        if ClubRole(membership.role).meets(minimum_role):
            return user_id
    logger.warning("User {} lacks {} role in every club", user_id, minimum_role.value)
    raise InsufficientPermissions()


def validate_club_selection(db: Session, session_ctx: SessionContext, club_id: str) -> ClubContext:
    """First half of club selection: check access, change nothing.

    The session itself is only updated by the session provider once the client
    asks it to (see ``auth.update_selected_club``).
    """
    user_id = require_user(session_ctx)
    membership = active_membership(db, user_id, club_id)
    if membership is None:
        raise AccessDenied("Access denied to the specified club")
    return ClubContext(club_id=club_id, user_id=user_id, role=ClubRole(membership.role))


def authorize_row(
    db: Session,
    session_ctx: SessionContext,
    owner_club_id: Optional[str],
    minimum_role: Optional[ClubRole] = None,
    not_found: Optional[NotFound] = None,
) -> ClubContext:
    """Gate for one club-owned row addressed by id.

    ``owner_club_id`` is the club of the loaded row, or None when no row has
    that id. A missing row and a row in a club the user is no active member of
    both raise ``not_found``, so ids of other clubs cannot be told apart from
    unknown ones.
    """
    user_id = require_user(session_ctx)
    if owner_club_id is None:
        raise not_found or NotFound()
    if active_membership(db, user_id, owner_club_id) is None:
        logger.warning("User {} asked for a row of club {} without access", user_id, owner_club_id)
        raise not_found or NotFound()
    return authorize_club(db, session_ctx, club_id=owner_club_id, minimum_role=minimum_role)
