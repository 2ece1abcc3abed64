from __future__ import annotations

import datetime as dt
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .roles import ClubRole


class ApiModel(BaseModel):
    # camelCase on the wire, snake_case in Python
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# ---------------------------
# Auth / clubs
# ---------------------------

class RegisterRequest(ApiModel):
    name: str = Field(min_length=2)
    email: str
    password: str = Field(min_length=8)

    @field_validator("email")
    @classmethod
    def _email(cls, value: str) -> str:
        value = value.strip().lower()
        local, _, domain = value.partition("@")
        if not local or "." not in domain:
            raise ValueError("Invalid email address")
        return value

class LoginRequest(ApiModel):
    email: str
    password: str

class SessionUpdate(ApiModel):
    selected_club_id: Optional[str] = None

class ClubCreate(ApiModel):
    name: str = Field(min_length=1, max_length=128)
    description: Optional[str] = None

class ClubUpdate(ApiModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=128)
    description: Optional[str] = None
    is_active: Optional[bool] = None

class MemberAdd(ApiModel):
    email: str
    role: ClubRole = ClubRole.MEMBER


# ---------------------------
# Seasons / disciplines / age groups
# ---------------------------

class SeasonCreate(ApiModel):
    name: str
    description: Optional[str] = None

class SeasonUpdate(ApiModel):
    name: Optional[str] = None
    description: Optional[str] = None

class DisciplineCreate(ApiModel):
    season_id: str
    name: str
    description: Optional[str] = None
    is_timed: bool
    is_measured: bool
    team_size: Optional[int] = None

class DisciplineUpdate(ApiModel):
    name: Optional[str] = None
    description: Optional[str] = None
    is_timed: Optional[bool] = None
    is_measured: Optional[bool] = None
    team_size: Optional[int] = None

class AgeGroupCreate(ApiModel):
    name: str
    ordinal: int
    club_id: Optional[str] = None

class AgeGroupUpdate(ApiModel):
    name: Optional[str] = None
    ordinal: Optional[int] = None


# ---------------------------
# Athletes / medals / performances
# ---------------------------

class AthleteCreate(ApiModel):
    first_name: str
    last_name: str
    gender_id: str = Field(min_length=1)
    club_id: Optional[str] = None
    age_group_id: Optional[str] = None

class AthleteUpdate(ApiModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    gender_id: Optional[str] = None
    age_group_id: Optional[str] = None

class MedalCreate(ApiModel):
    # checked by the medal rules, not coerced
    position: Any = None
    name: Any = None

class PerformanceCreate(ApiModel):
    athlete_id: str = Field(min_length=1)
    discipline_id: str = Field(min_length=1)
    age_group_id: str = Field(min_length=1)
    gender_id: str = Field(min_length=1)
    medal_id: Optional[str] = None
    time_seconds: Optional[float] = Field(default=None, allow_inf_nan=False)
    distance_meters: Optional[float] = Field(default=None, allow_inf_nan=False)
    date: dt.date
    event_details: str
    proof_file_url: Optional[str] = None
    proof_file_name: Optional[str] = None
    team_members: Optional[list[str]] = None

class PerformanceUpdate(ApiModel):
    medal_id: Optional[str] = None
    time_seconds: Optional[float] = Field(default=None, allow_inf_nan=False)
    distance_meters: Optional[float] = Field(default=None, allow_inf_nan=False)
    date: Optional[dt.date] = None
    event_details: Optional[str] = None
    proof_file_url: Optional[str] = None
    proof_file_name: Optional[str] = None
    team_members: Optional[list[str]] = None


# ---------------------------
# Responses
# ---------------------------

class UserOut(ApiModel):
    id: str
    email: str
    name: str

class ClubSummary(ApiModel):
    id: str
    name: str

class ClubOut(ApiModel):
    id: str
    name: str
    description: Optional[str] = None
    is_active: bool

class MembershipOut(ApiModel):
    id: str
    user_id: str
    club_id: str
    role: ClubRole
    is_active: bool
    club: ClubOut

class SeasonSummary(ApiModel):
    id: str
    name: str
    description: Optional[str] = None

class SeasonOut(ApiModel):
    id: str
    name: str
    description: Optional[str] = None
    discipline_count: int = 0
    created_at: dt.datetime
    updated_at: dt.datetime

class DisciplineOut(ApiModel):
    id: str
    season_id: str
    name: str
    description: Optional[str] = None
    is_timed: bool
    is_measured: bool
    is_smaller_better: bool
    team_size: Optional[int] = None
    season: SeasonSummary

class GenderOut(ApiModel):
    id: str
    name: str
    initial: str

class AgeGroupSummary(ApiModel):
    id: str
    name: str
    ordinal: int

class AgeGroupOut(ApiModel):
    id: str
    club_id: str
    name: str
    ordinal: int
    athlete_count: int = 0
    club: ClubSummary

class AthleteOut(ApiModel):
    id: str
    club_id: str
    gender_id: str
    age_group_id: Optional[str] = None
    first_name: str
    last_name: str
    club: ClubSummary
    gender: GenderOut
    age_group: Optional[AgeGroupSummary] = None

class MedalOut(ApiModel):
    id: str
    position: int
    name: str

class PerformanceAthlete(ApiModel):
    id: str
    first_name: str
    last_name: str
    club: ClubSummary

class PerformanceDiscipline(ApiModel):
    id: str
    name: str
    is_timed: bool
    is_measured: bool
    team_size: Optional[int] = None
    season: SeasonSummary

class PerformanceOut(ApiModel):
    id: str
    athlete_id: str
    discipline_id: str
    age_group_id: str
    gender_id: str
    medal_id: Optional[str] = None
    time_seconds: Optional[float] = None
    distance_meters: Optional[float] = None
    date: dt.date
    event_details: str
    is_personal_best: bool
    is_club_record: bool
    was_personal_best: bool
    was_club_record: bool
    proof_file_url: Optional[str] = None
    proof_file_name: Optional[str] = None
    team_members: Optional[list[str]] = None
    athlete: PerformanceAthlete
    discipline: PerformanceDiscipline
    age_group: AgeGroupSummary
    gender: GenderOut
    medal: Optional[MedalOut] = None
