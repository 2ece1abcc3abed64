from __future__ import annotations

import uuid
import datetime as dt
from sqlalchemy import String, Integer, Float, Boolean, Date, DateTime, JSON, ForeignKey, UniqueConstraint, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .db import Base


def _new_id() -> str:
    return uuid.uuid4().hex


class TimestampMixin:
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, nullable=False, default=dt.datetime.utcnow)
    updated_at: Mapped[dt.datetime] = mapped_column(DateTime, nullable=False, default=dt.datetime.utcnow, onupdate=dt.datetime.utcnow)


class User(TimestampMixin, Base):
    __tablename__ = "users"
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    email: Mapped[str] = mapped_column(String, nullable=False, unique=True, index=True)
    name: Mapped[str] = mapped_column(String, nullable=False, default="")
    password_hash: Mapped[str] = mapped_column(String, nullable=False)

    memberships: Mapped[list["UserClub"]] = relationship(back_populates="user", cascade="all, delete-orphan")


class Club(TimestampMixin, Base):
    __tablename__ = "clubs"
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    description: Mapped[str | None] = mapped_column(String, nullable=True)
    # soft deactivation only; clubs are never hard-deleted
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    memberships: Mapped[list["UserClub"]] = relationship(back_populates="club", cascade="all, delete-orphan")
    age_groups: Mapped[list["AgeGroup"]] = relationship(back_populates="club", cascade="all, delete-orphan")
    athletes: Mapped[list["Athlete"]] = relationship(back_populates="club", cascade="all, delete-orphan")


class UserClub(TimestampMixin, Base):
    __tablename__ = "user_clubs"
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    club_id: Mapped[str] = mapped_column(ForeignKey("clubs.id", ondelete="CASCADE"), nullable=False)
    role: Mapped[str] = mapped_column(String(16), nullable=False, default="MEMBER")  # OWNER | ADMIN | COACH | MEMBER
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    user: Mapped["User"] = relationship(back_populates="memberships")
    club: Mapped["Club"] = relationship(back_populates="memberships")

    __table_args__ = (
        UniqueConstraint("user_id", "club_id", name="uq_user_club"),
        Index("ix_user_clubs_user", "user_id"),
    )


class Gender(Base):
    __tablename__ = "genders"
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(16), nullable=False, unique=True)
    initial: Mapped[str] = mapped_column(String(1), nullable=False)


class Season(TimestampMixin, Base):
    __tablename__ = "seasons"
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(String, nullable=True)

    disciplines: Mapped[list["Discipline"]] = relationship(back_populates="season")

    @property
    def discipline_count(self) -> int:
        return len(self.disciplines)


class Discipline(TimestampMixin, Base):
    __tablename__ = "disciplines"
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    season_id: Mapped[str] = mapped_column(ForeignKey("seasons.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    description: Mapped[str | None] = mapped_column(String, nullable=True)
    is_timed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_measured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_smaller_better: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # null => individual event
    team_size: Mapped[int | None] = mapped_column(Integer, nullable=True)

    season: Mapped["Season"] = relationship(back_populates="disciplines")

    __table_args__ = (
        UniqueConstraint("season_id", "name", name="uq_discipline_per_season"),
        Index("ix_disciplines_season", "season_id"),
    )


class AgeGroup(TimestampMixin, Base):
    __tablename__ = "age_groups"
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    club_id: Mapped[str] = mapped_column(ForeignKey("clubs.id", ondelete="CASCADE"), nullable=False)
    name: Mapped[str] = mapped_column(String(32), nullable=False)
    ordinal: Mapped[int] = mapped_column(Integer, nullable=False)

    club: Mapped["Club"] = relationship(back_populates="age_groups")
    athletes: Mapped[list["Athlete"]] = relationship(back_populates="age_group")

    @property
    def athlete_count(self) -> int:
        return len(self.athletes)

    __table_args__ = (
        UniqueConstraint("club_id", "name", name="uq_age_group_per_club"),
        Index("ix_age_groups_club", "club_id"),
    )


class Athlete(TimestampMixin, Base):
    __tablename__ = "athletes"
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    club_id: Mapped[str] = mapped_column(ForeignKey("clubs.id", ondelete="CASCADE"), nullable=False)
    gender_id: Mapped[str] = mapped_column(ForeignKey("genders.id"), nullable=False)
    age_group_id: Mapped[str | None] = mapped_column(ForeignKey("age_groups.id"), nullable=True)
    first_name: Mapped[str] = mapped_column(String(64), nullable=False)
    last_name: Mapped[str] = mapped_column(String(64), nullable=False)

    club: Mapped["Club"] = relationship(back_populates="athletes")
    gender: Mapped["Gender"] = relationship()
    age_group: Mapped["AgeGroup | None"] = relationship(back_populates="athletes")
    performances: Mapped[list["Performance"]] = relationship(back_populates="athlete", cascade="all, delete-orphan")

    __table_args__ = (
        Index("ix_athletes_club", "club_id"),
    )


class Medal(Base):
    __tablename__ = "medals"
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    position: Mapped[int] = mapped_column(Integer, nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(16), nullable=False)


class Performance(TimestampMixin, Base):
    __tablename__ = "performances"
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    athlete_id: Mapped[str] = mapped_column(ForeignKey("athletes.id", ondelete="CASCADE"), nullable=False)
    discipline_id: Mapped[str] = mapped_column(ForeignKey("disciplines.id"), nullable=False)
    age_group_id: Mapped[str] = mapped_column(ForeignKey("age_groups.id"), nullable=False)
    gender_id: Mapped[str] = mapped_column(ForeignKey("genders.id"), nullable=False)
    medal_id: Mapped[str | None] = mapped_column(ForeignKey("medals.id"), nullable=True)

    # exactly one of these matches the discipline type; both null for medal-only results
    time_seconds: Mapped[float | None] = mapped_column(Float, nullable=True)
    distance_meters: Mapped[float | None] = mapped_column(Float, nullable=True)

    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    event_details: Mapped[str] = mapped_column(String(255), nullable=False)

    is_personal_best: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_club_record: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    was_personal_best: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    was_club_record: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    proof_file_url: Mapped[str | None] = mapped_column(String, nullable=True)
    proof_file_name: Mapped[str | None] = mapped_column(String, nullable=True)
    team_members: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)

    athlete: Mapped["Athlete"] = relationship(back_populates="performances")
    discipline: Mapped["Discipline"] = relationship()
    age_group: Mapped["AgeGroup"] = relationship()
    gender: Mapped["Gender"] = relationship()
    medal: Mapped["Medal | None"] = relationship()

    __table_args__ = (
        UniqueConstraint(
            "athlete_id", "discipline_id", "age_group_id", "gender_id", "date", "event_details",
            name="uq_performance_dedupe",
        ),
        Index("ix_performances_discipline", "discipline_id"),
    )
