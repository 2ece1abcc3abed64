"""
Duplicate detection and record flag tests
"""
from datetime import date

import pytest
from sqlalchemy.exc import IntegrityError

from athletics import models
from athletics.disciplines import DisciplineShape
from athletics.records import apply_record_flags, detect_records, is_duplicate

from conftest import gender_id, medal_id


@pytest.fixture
def setup(session, club):
    season = models.Season(name="Track 2024")
    sprint = models.Discipline(season=season, name="100m", is_timed=True, is_measured=False, is_smaller_better=True)
    jump = models.Discipline(season=season, name="Long Jump", is_timed=False, is_measured=True, is_smaller_better=False)
    u13 = models.AgeGroup(club_id=club.id, name="U13", ordinal=1)
    female = gender_id(session)
    ada = models.Athlete(club_id=club.id, gender_id=female, first_name="Ada", last_name="Lovelace", age_group=u13)
    mary = models.Athlete(club_id=club.id, gender_id=female, first_name="Mary", last_name="Somerville", age_group=u13)
    session.add_all([season, sprint, jump, u13, ada, mary])
    session.commit()
    return {"club": club, "sprint": sprint, "jump": jump, "u13": u13, "gender": female, "ada": ada, "mary": mary}


def record(session, setup, athlete, discipline, day, time_seconds=None, distance_meters=None, medal=None, event="League"):
    p = models.Performance(
        athlete_id=athlete.id,
        discipline_id=discipline.id,
        age_group_id=setup["u13"].id,
        gender_id=setup["gender"],
        date=day,
        event_details=event,
        time_seconds=time_seconds,
        distance_meters=distance_meters,
        medal_id=medal,
    )
    detection = detect_records(session, p, DisciplineShape.of(discipline), setup["club"].id)
    session.add(p)
    apply_record_flags(session, p, detection)
    session.commit()
    return p, detection


class TestDuplicates:
    """Exact tuple matching"""

    def test_duplicate_and_exclusion(self, session, setup):
        p, _ = record(session, setup, setup["ada"], setup["sprint"], date(2024, 5, 1), time_seconds=14.1)
        args = dict(
            athlete_id=setup["ada"].id,
            discipline_id=setup["sprint"].id,
            age_group_id=setup["u13"].id,
            gender_id=setup["gender"],
            date=date(2024, 5, 1),
            event_details="League",
        )
        assert is_duplicate(session, **args)
        assert not is_duplicate(session, **args, exclude_id=p.id)
        assert not is_duplicate(session, **dict(args, event_details="League Round 2"))
        assert not is_duplicate(session, **dict(args, date=date(2024, 5, 2)))

    def test_each_identity_field_counts(self, session, setup):
        """Changing any one field of the tuple makes a distinct result"""
        record(session, setup, setup["ada"], setup["sprint"], date(2024, 5, 1), time_seconds=14.1)
        u15 = models.AgeGroup(club_id=setup["club"].id, name="U15", ordinal=2)
        session.add(u15)
        session.commit()
        args = dict(
            athlete_id=setup["ada"].id,
            discipline_id=setup["sprint"].id,
            age_group_id=setup["u13"].id,
            gender_id=setup["gender"],
            date=date(2024, 5, 1),
            event_details="League",
        )
        assert is_duplicate(session, **args)
        assert not is_duplicate(session, **dict(args, athlete_id=setup["mary"].id))
        assert not is_duplicate(session, **dict(args, discipline_id=setup["jump"].id))
        assert not is_duplicate(session, **dict(args, age_group_id=u15.id))
        assert not is_duplicate(session, **dict(args, gender_id=gender_id(session, "Male")))


class TestStoreConstraints:
    """What the database itself refuses"""

    def test_identical_rows_rejected(self, session, setup):
        row = dict(
            athlete_id=setup["ada"].id,
            discipline_id=setup["sprint"].id,
            age_group_id=setup["u13"].id,
            gender_id=setup["gender"],
            date=date(2024, 5, 1),
            event_details="League",
            time_seconds=14.1,
        )
        session.add_all([models.Performance(**row), models.Performance(**dict(row, time_seconds=14.3))])
        with pytest.raises(IntegrityError):
            session.commit()
        session.rollback()
        assert session.query(models.Performance).count() == 0

    def test_foreign_keys_enforced(self, session, setup):
        session.add(models.Performance(
            athlete_id=setup["ada"].id,
            discipline_id=setup["sprint"].id,
            age_group_id="no-such-group",
            gender_id=setup["gender"],
            date=date(2024, 5, 1),
            event_details="League",
            time_seconds=14.1,
        ))
        with pytest.raises(IntegrityError):
            session.commit()
        session.rollback()


class TestRecords:
    """Personal bests and club records"""

    def test_first_result_holds_both(self, session, setup):
        p, detection = record(session, setup, setup["ada"], setup["sprint"], date(2024, 5, 1), time_seconds=14.1)
        assert detection.is_new_personal_best and detection.is_new_club_record
        assert p.is_personal_best and p.is_club_record

    def test_faster_time_demotes(self, session, setup):
        first, _ = record(session, setup, setup["ada"], setup["sprint"], date(2024, 5, 1), time_seconds=14.1)
        second, detection = record(session, setup, setup["ada"], setup["sprint"], date(2024, 5, 8), time_seconds=13.9)
        assert detection.previous_personal_best is first
        assert second.is_personal_best and second.is_club_record
        assert not first.is_personal_best and first.was_personal_best
        assert not first.is_club_record and first.was_club_record

    def test_slower_time_is_not_a_record(self, session, setup):
        first, _ = record(session, setup, setup["ada"], setup["sprint"], date(2024, 5, 1), time_seconds=14.1)
        second, detection = record(session, setup, setup["ada"], setup["sprint"], date(2024, 5, 8), time_seconds=14.5)
        assert not detection.is_new_personal_best
        assert not second.is_personal_best
        assert first.is_personal_best

    def test_longer_jump_wins(self, session, setup):
        first, _ = record(session, setup, setup["ada"], setup["jump"], date(2024, 5, 1), distance_meters=3.9)
        second, _ = record(session, setup, setup["ada"], setup["jump"], date(2024, 5, 8), distance_meters=4.2)
        assert second.is_personal_best and not first.is_personal_best

    def test_personal_best_without_club_record(self, session, setup):
        record(session, setup, setup["mary"], setup["sprint"], date(2024, 5, 1), time_seconds=13.0)
        p, detection = record(session, setup, setup["ada"], setup["sprint"], date(2024, 5, 8), time_seconds=13.5)
        assert detection.is_new_personal_best
        assert not detection.is_new_club_record
        assert p.is_personal_best and not p.is_club_record

    def test_medal_only_never_a_record(self, session, setup):
        p, detection = record(session, setup, setup["ada"], setup["sprint"], date(2024, 5, 1), medal=medal_id(session))
        assert not detection.is_new_personal_best
        assert not p.is_personal_best and not p.is_club_record


def retime(session, setup, p, discipline, time_seconds):
    p.time_seconds = time_seconds
    detection = detect_records(session, p, DisciplineShape.of(discipline), setup["club"].id)
    apply_record_flags(session, p, detection)
    session.commit()
    return detection


class TestHandBack:
    """A holder that loses its value passes the flags on"""

    def test_slowed_holder_hands_back(self, session, setup):
        first, _ = record(session, setup, setup["ada"], setup["sprint"], date(2024, 5, 1), time_seconds=14.1)
        second, _ = record(session, setup, setup["ada"], setup["sprint"], date(2024, 5, 8), time_seconds=13.9)
        detection = retime(session, setup, second, setup["sprint"], 14.5)
        assert not detection.is_new_personal_best
        assert detection.best_other_personal is first
        assert not second.is_personal_best and not second.is_club_record
        assert first.is_personal_best and not first.was_personal_best
        assert first.is_club_record and not first.was_club_record

    def test_club_record_goes_to_teammate(self, session, setup):
        ada, _ = record(session, setup, setup["ada"], setup["sprint"], date(2024, 5, 1), time_seconds=13.5)
        mary, _ = record(session, setup, setup["mary"], setup["sprint"], date(2024, 5, 1), time_seconds=13.8)
        assert ada.is_club_record and not mary.is_club_record
        retime(session, setup, ada, setup["sprint"], 14.0)
        assert mary.is_club_record
        # ada is still her own best
        assert ada.is_personal_best and not ada.is_club_record

    def test_faster_update_keeps_flags(self, session, setup):
        first, _ = record(session, setup, setup["ada"], setup["sprint"], date(2024, 5, 1), time_seconds=14.1)
        second, _ = record(session, setup, setup["ada"], setup["sprint"], date(2024, 5, 8), time_seconds=13.9)
        retime(session, setup, second, setup["sprint"], 13.7)
        assert second.is_personal_best and second.is_club_record
        assert not first.is_personal_best
