"""Duplicate detection and personal-best / club-record bookkeeping.

A personal best is scoped to (athlete, discipline); a club record to
(club, discipline, age group, gender). Only performances carrying a value
take part: medal-only results never hold a record. The discipline's
comparison direction decides which value wins, and a newcomer must be
strictly better than every other result in scope.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Optional

from loguru import logger
from sqlalchemy import select
from sqlalchemy.orm import Session

from . import models
from .disciplines import DisciplineShape


def is_duplicate(
    db: Session,
    athlete_id: str,
    discipline_id: str,
    age_group_id: str,
    gender_id: str,
    date: dt.date,
    event_details: str,
    exclude_id: Optional[str] = None,
) -> bool:
    stmt = select(models.Performance.id).where(
        models.Performance.athlete_id == athlete_id,
        models.Performance.discipline_id == discipline_id,
        models.Performance.age_group_id == age_group_id,
        models.Performance.gender_id == gender_id,
        models.Performance.date == date,
        models.Performance.event_details == event_details,
    )
    if exclude_id:
        stmt = stmt.where(models.Performance.id != exclude_id)
    return db.execute(stmt.limit(1)).first() is not None


@dataclass
class RecordDetection:
    is_new_personal_best: bool = False
    is_new_club_record: bool = False
    previous_personal_bests: list[models.Performance] = field(default_factory=list)
    previous_club_records: list[models.Performance] = field(default_factory=list)
    best_other_personal: Optional[models.Performance] = None
    best_other_club: Optional[models.Performance] = None
    notifications: list[str] = field(default_factory=list)

    @property
    def previous_personal_best(self) -> Optional[models.Performance]:
        return self.previous_personal_bests[0] if self.previous_personal_bests else None

    @property
    def previous_club_record(self) -> Optional[models.Performance]:
        return self.previous_club_records[0] if self.previous_club_records else None


def performance_value(performance, shape: DisciplineShape) -> Optional[float]:
    return performance.time_seconds if shape.is_timed else performance.distance_meters


def _value_column(shape: DisciplineShape):
    return models.Performance.time_seconds if shape.is_timed else models.Performance.distance_meters


def _beats(value: float, other: float, shape: DisciplineShape) -> bool:
    return value < other if shape.is_smaller_better else value > other


def _best_other(db: Session, stmt, shape: DisciplineShape) -> Optional[models.Performance]:
    column = _value_column(shape)
    order = column.asc() if shape.is_smaller_better else column.desc()
    return db.execute(
        stmt.where(column.is_not(None)).order_by(order, models.Performance.date.asc()).limit(1)
    ).scalar_one_or_none()


def detect_records(db: Session, candidate, shape: DisciplineShape, club_id: str) -> RecordDetection:
    """Work out which records ``candidate`` holds among the stored results.

    ``candidate`` may be unsaved; when it already has an id it is left out of
    the comparison so an updated result is judged against the others only.
    """
    detection = RecordDetection()
    column = _value_column(shape)

    personal = select(models.Performance).where(
        models.Performance.athlete_id == candidate.athlete_id,
        models.Performance.discipline_id == candidate.discipline_id,
    )
    club = (
        select(models.Performance)
        .join(models.Athlete, models.Athlete.id == models.Performance.athlete_id)
        .where(
            models.Athlete.club_id == club_id,
            models.Performance.discipline_id == candidate.discipline_id,
            models.Performance.age_group_id == candidate.age_group_id,
            models.Performance.gender_id == candidate.gender_id,
        )
    )
    if candidate.id:
        personal = personal.where(models.Performance.id != candidate.id)
        club = club.where(models.Performance.id != candidate.id)

    detection.best_other_personal = _best_other(db, personal, shape)
    detection.best_other_club = _best_other(db, club, shape)
    detection.previous_personal_bests = list(
        db.execute(personal.where(models.Performance.is_personal_best.is_(True))).scalars()
    )
    detection.previous_club_records = list(
        db.execute(club.where(models.Performance.is_club_record.is_(True))).scalars()
    )

    value = performance_value(candidate, shape)
    if value is None:
        return detection

    best = detection.best_other_personal
    if best is None or _beats(value, performance_value(best, shape), shape):
        detection.is_new_personal_best = True
        detection.notifications.append("New personal best!")
    best = detection.best_other_club
    if best is None or _beats(value, performance_value(best, shape), shape):
        detection.is_new_club_record = True
        detection.notifications.append("New club record!")
    return detection


def apply_record_flags(db: Session, performance: models.Performance, detection: RecordDetection) -> None:
    """Write the detection back: flag the new holder, demote the old ones.

    A result that held a record but lost it through an update hands the flag
    back to the best remaining result in scope.
    """
    if detection.is_new_personal_best:
        for previous in detection.previous_personal_bests:
            previous.is_personal_best = False
            previous.was_personal_best = True
        performance.is_personal_best = True
    elif performance.is_personal_best:
        performance.is_personal_best = False
        if detection.best_other_personal is not None:
            detection.best_other_personal.is_personal_best = True
            detection.best_other_personal.was_personal_best = False

    if detection.is_new_club_record:
        for previous in detection.previous_club_records:
            previous.is_club_record = False
            previous.was_club_record = True
        performance.is_club_record = True
    elif performance.is_club_record:
        performance.is_club_record = False
        if detection.best_other_club is not None:
            detection.best_other_club.is_club_record = True
            detection.best_other_club.was_club_record = False

    if detection.notifications:
        logger.info("Athlete {} in discipline {}: {}", performance.athlete_id, performance.discipline_id, " ".join(detection.notifications))
