"""Business rules for seasons, disciplines and the other club-managed lists.

A discipline is either timed or measured, never both, and is either an
individual event or a team event of 1-10 athletes. ``DisciplineShape`` holds
that pair so the rest of the code never has to look at the two raw flags.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from .errors import (
    DisciplineTypeConflict,
    DisciplineTypeMissing,
    NameRequired,
    NameTooLong,
    SeasonIdRequired,
    TeamSizeTooLarge,
    TeamSizeTooSmall,
    ValidationFailed,
)

MIN_TEAM_SIZE = 1
MAX_TEAM_SIZE = 10
MAX_DISCIPLINE_NAME = 128
MAX_SEASON_NAME = 64
MAX_AGE_GROUP_NAME = 32
MAX_ATHLETE_NAME = 64


class Measure(str, Enum):
    TIMED = "timed"
    MEASURED = "measured"


@dataclass(frozen=True)
class DisciplineShape:
    measure: Measure
    team_size: Optional[int] = None  # None => individual event

    @classmethod
    def from_flags(cls, is_timed: bool, is_measured: bool, team_size: Optional[int] = None) -> "DisciplineShape":
        validate_type_exclusivity(is_timed, is_measured)
        validate_team_size(team_size)
        return cls(Measure.TIMED if is_timed else Measure.MEASURED, team_size)

    @classmethod
    def of(cls, discipline: Any) -> "DisciplineShape":
        return cls.from_flags(discipline.is_timed, discipline.is_measured, discipline.team_size)

    @property
    def is_timed(self) -> bool:
        return self.measure is Measure.TIMED

    @property
    def is_measured(self) -> bool:
        return self.measure is Measure.MEASURED

    @property
    def is_team(self) -> bool:
        return bool(self.team_size)

    @property
    def is_smaller_better(self) -> bool:
        return self.is_timed


def validate_type_exclusivity(is_timed: bool, is_measured: bool) -> None:
    if is_timed and is_measured:
        raise DisciplineTypeConflict()
    if not is_timed and not is_measured:
        raise DisciplineTypeMissing()


def validate_team_size(team_size: Optional[int]) -> None:
    if team_size is None:
        return
    if team_size < MIN_TEAM_SIZE:
        raise TeamSizeTooSmall()
    if team_size > MAX_TEAM_SIZE:
        raise TeamSizeTooLarge()


def comparison_direction(is_timed: bool, is_measured: bool) -> bool:
    """True when a smaller value wins (timed), False when a larger one does."""
    validate_type_exclusivity(is_timed, is_measured)
    return bool(is_timed)


def _require_text(value: Optional[str], max_length: int, label: str, path: str = "name") -> None:
    if not value or not value.strip():
        raise NameRequired(f"{label} is required", path=path)
    if len(value) > max_length:
        raise NameTooLong(f"{label} cannot exceed {max_length} characters", path=path)


def validate_discipline_input(data: Any) -> None:
    if not (data.season_id or "").strip():
        raise SeasonIdRequired()
    _require_text(data.name, MAX_DISCIPLINE_NAME, "Discipline name")
    validate_type_exclusivity(data.is_timed, data.is_measured)
    validate_team_size(data.team_size)


def prepare_for_creation(data: Any) -> dict:
    validate_discipline_input(data)
    return {
        "season_id": data.season_id,
        "name": data.name,
        "description": data.description,
        "is_timed": data.is_timed,
        "is_measured": data.is_measured,
        "team_size": data.team_size,
        "is_smaller_better": comparison_direction(data.is_timed, data.is_measured),
    }


def resolve_update(existing: Any, changes: dict) -> dict:
    """Merge a partial discipline update with the stored row and re-check it.

    ``changes`` only holds the fields the caller sent. The merged type flags must
    still describe a valid discipline; ``is_smaller_better`` is recomputed
    whenever one of them was part of the update.
    """
    changes = dict(changes)
    if "name" in changes:
        _require_text(changes["name"], MAX_DISCIPLINE_NAME, "Discipline name")

    is_timed = changes.get("is_timed")
    is_measured = changes.get("is_measured")
    final_timed = existing.is_timed if is_timed is None else is_timed
    final_measured = existing.is_measured if is_measured is None else is_measured
    validate_type_exclusivity(final_timed, final_measured)

    for key in ("is_timed", "is_measured"):
        if changes.get(key) is None:
            changes.pop(key, None)
    if "is_timed" in changes or "is_measured" in changes:
        changes["is_timed"] = final_timed
        changes["is_measured"] = final_measured
        changes["is_smaller_better"] = comparison_direction(final_timed, final_measured)

    if "team_size" in changes:
        validate_team_size(changes["team_size"])
    return changes


def validate_season_input(name: Optional[str]) -> None:
    _require_text(name, MAX_SEASON_NAME, "Season name")


def validate_age_group_input(name: Optional[str], ordinal: Optional[int], partial: bool = False) -> None:
    if name is not None or not partial:
        _require_text(name, MAX_AGE_GROUP_NAME, "Age group name")
    if ordinal is None and not partial:
        raise ValidationFailed("Ordinal is required", path="ordinal")
    if ordinal is not None and ordinal < 1:
        raise ValidationFailed("Ordinal must be a positive integer", path="ordinal")


def validate_athlete_names(first_name: Optional[str], last_name: Optional[str], partial: bool = False) -> None:
    if first_name is not None or not partial:
        _require_text(first_name, MAX_ATHLETE_NAME, "First name", path="firstName")
    if last_name is not None or not partial:
        _require_text(last_name, MAX_ATHLETE_NAME, "Last name", path="lastName")
