"""Validation of submitted performance records.

Nothing here stops at the first problem: every check appends to a
``ValidationResult`` so the caller gets the full list of errors plus any
non-blocking warnings (suspiciously fast times, very long throws) in one go.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Optional, Sequence, Union

from .disciplines import DisciplineShape

MIN_TIME_SECONDS = 0.01
MAX_TIME_SECONDS = 86400
MIN_DISTANCE_METERS = 0.01
MAX_DISTANCE_METERS = 10000
FAST_TIME_WARNING_SECONDS = 1.0
LONG_DISTANCE_WARNING_METERS = 1000
MAX_EVENT_DETAILS_LENGTH = 255
MAX_PROOF_FILE_SIZE = 10 * 1024 * 1024
ALLOWED_PROOF_FILE_TYPES = ("image/jpeg", "image/png", "image/gif", "image/webp")

END_OF_DAY = time(23, 59, 59, 999000)


@dataclass
class ValidationResult:
    issues: list[tuple[str, str]] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def errors(self) -> list[str]:
        return [message for _, message in self.issues]

    @property
    def is_valid(self) -> bool:
        return not self.issues

    def add_error(self, message: str, path: str = "") -> None:
        self.issues.append((path, message))

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        self.issues.extend(other.issues)
        self.warnings.extend(other.warnings)
        return self

    def details(self) -> list[dict]:
        return [{"path": path, "message": message} for path, message in self.issues]


@dataclass
class TeamValidation:
    required_team_size: int
    provided_team_size: int
    errors: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def discipline_type(shape: Optional[DisciplineShape]) -> str:
    if shape is None:
        return "unknown"
    return shape.measure.value


def validate_performance_value(
    shape: Optional[DisciplineShape],
    time_seconds: Optional[float] = None,
    distance_meters: Optional[float] = None,
    medal_id: Optional[str] = None,
) -> ValidationResult:
    result = ValidationResult()
    if shape is None:
        result.add_error("Invalid discipline selected", "disciplineId")
        return result

    has_time = time_seconds is not None
    has_distance = distance_meters is not None
    has_medal = medal_id is not None and medal_id != ""

    if not has_time and not has_distance and not has_medal:
        result.add_error("Must provide either a performance value or a medal", "timeSeconds")
    if shape.is_timed and has_distance:
        result.add_error("Timed disciplines cannot have distance values", "distanceMeters")
    if shape.is_measured and has_time:
        result.add_error("Measured disciplines cannot have time values", "timeSeconds")
    if shape.is_timed and not has_time and not has_medal:
        result.add_error("Timed disciplines require a time value or medal", "timeSeconds")
    if shape.is_measured and not has_distance and not has_medal:
        result.add_error("Measured disciplines require a distance value or medal", "distanceMeters")
    return result


def validate_time(time_seconds: float) -> ValidationResult:
    result = ValidationResult()
    if not math.isfinite(time_seconds):
        result.add_error("Time must be a finite number of seconds", "timeSeconds")
        return result
    if time_seconds <= MIN_TIME_SECONDS:
        result.add_error("Time must be greater than 0.01 seconds", "timeSeconds")
    if time_seconds > MAX_TIME_SECONDS:
        result.add_error("Time cannot exceed 24 hours", "timeSeconds")
    if time_seconds < FAST_TIME_WARNING_SECONDS:
        result.add_warning("This time seems very fast. Please confirm it is correct.")
    return result


def validate_distance(distance_meters: float) -> ValidationResult:
    result = ValidationResult()
    if not math.isfinite(distance_meters):
        result.add_error("Distance must be a finite number of meters", "distanceMeters")
        return result
    if distance_meters <= MIN_DISTANCE_METERS:
        result.add_error("Distance must be greater than 0.01 meters", "distanceMeters")
    if distance_meters > MAX_DISTANCE_METERS:
        result.add_error("Distance cannot exceed 10,000 meters", "distanceMeters")
    if distance_meters > LONG_DISTANCE_WARNING_METERS:
        result.add_warning("This distance seems very large. Please confirm it is correct.")
    return result


def end_of_today(now: Optional[datetime] = None) -> datetime:
    now = now or datetime.now()
    return datetime.combine(now.date(), END_OF_DAY)


def is_future(value: Union[date, datetime], now: Optional[datetime] = None) -> bool:
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone().replace(tzinfo=None)
    else:
        value = datetime.combine(value, time.min)
    return value > end_of_today(now)


def validate_event_details(event_details: Optional[str]) -> ValidationResult:
    result = ValidationResult()
    if not event_details or not event_details.strip():
        result.add_error("Event details are required", "eventDetails")
    elif len(event_details) > MAX_EVENT_DETAILS_LENGTH:
        result.add_error("Event details are too long", "eventDetails")
    return result


def validate_team_members(
    team_size: Optional[int],
    team_members: Optional[Sequence[str]],
    discipline_name: str = "",
) -> TeamValidation:
    required = team_size or 0
    provided = len(team_members) if team_members else 0
    check = TeamValidation(required_team_size=required, provided_team_size=provided)

    if required > 0:
        if not team_members:
            check.errors.append(f'Team discipline "{discipline_name}" requires {required} team members')
        elif provided != required:
            check.errors.append(
                f'Team discipline "{discipline_name}" requires exactly {required} team members, '
                f"but {provided} were provided"
            )
        if team_members and len(set(team_members)) != provided:
            check.errors.append("Team members must be unique")
    elif provided:
        check.errors.append(f'Individual discipline "{discipline_name}" cannot have team members')
    return check


def validate_performance(
    shape: Optional[DisciplineShape],
    *,
    performance_date: Union[date, datetime, None],
    event_details: Optional[str],
    time_seconds: Optional[float] = None,
    distance_meters: Optional[float] = None,
    medal_id: Optional[str] = None,
    team_members: Optional[Sequence[str]] = None,
    discipline_name: str = "",
    now: Optional[datetime] = None,
) -> ValidationResult:
    """Run every performance rule and collect all errors and warnings."""
    result = validate_performance_value(shape, time_seconds, distance_meters, medal_id)

    if shape is not None:
        team = validate_team_members(shape.team_size, team_members, discipline_name)
        for message in team.errors:
            result.add_error(message, "teamMembers")

    if time_seconds is not None:
        result.merge(validate_time(time_seconds))
    if distance_meters is not None:
        result.merge(validate_distance(distance_meters))

    if performance_date is None:
        result.add_error("Performance date is required", "date")
    elif is_future(performance_date, now):
        result.add_error("Performance date cannot be in the future", "date")

    result.merge(validate_event_details(event_details))
    return result


def validate_proof_file(size: int, content_type: Optional[str]) -> ValidationResult:
    result = ValidationResult()
    if size > MAX_PROOF_FILE_SIZE:
        result.add_error("Proof file size cannot exceed 10MB", "file")
    if content_type not in ALLOWED_PROOF_FILE_TYPES:
        result.add_error("Proof file must be an image (JPEG, PNG, GIF, or WebP)", "file")
    return result
