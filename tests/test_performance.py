"""
Performance and team validation tests
"""
from datetime import date, datetime, timedelta

import pytest

from athletics import performance as perf
from athletics.disciplines import DisciplineShape

TIMED = DisciplineShape.from_flags(True, False)
MEASURED = DisciplineShape.from_flags(False, True)
RELAY = DisciplineShape.from_flags(True, False, 4)
NOW = datetime(2024, 6, 15, 12, 0, 0)


class TestValueRules:
    """Value presence against discipline type"""

    def test_unknown_discipline(self):
        """No shape means an invalid discipline"""
        result = perf.validate_performance_value(None, time_seconds=10.0)
        assert result.errors == ["Invalid discipline selected"]

    def test_nothing_provided(self):
        """Neither value nor medal"""
        result = perf.validate_performance_value(TIMED)
        assert "Must provide either a performance value or a medal" in result.errors
        assert "Timed disciplines require a time value or medal" in result.errors

    def test_timed_with_distance(self):
        """Distance on a timed discipline"""
        result = perf.validate_performance_value(TIMED, distance_meters=5.0)
        assert result.errors == [
            "Timed disciplines cannot have distance values",
            "Timed disciplines require a time value or medal",
        ]

    def test_measured_with_time(self):
        """Time on a measured discipline"""
        result = perf.validate_performance_value(MEASURED, time_seconds=12.0)
        assert "Measured disciplines cannot have time values" in result.errors
        assert "Measured disciplines require a distance value or medal" in result.errors

    def test_medal_only(self):
        """A medal replaces the value"""
        assert perf.validate_performance_value(TIMED, medal_id="m1").is_valid
        assert perf.validate_performance_value(MEASURED, medal_id="m1").is_valid

    def test_matching_value(self):
        """Time on timed, distance on measured"""
        assert perf.validate_performance_value(TIMED, time_seconds=12.5).is_valid
        assert perf.validate_performance_value(MEASURED, distance_meters=6.2).is_valid


class TestBounds:
    """Numeric bounds and warnings"""

    def test_time_bounds(self):
        """Lower bound exclusive, upper inclusive"""
        assert not perf.validate_time(0.01).is_valid
        assert perf.validate_time(0.02).is_valid
        assert perf.validate_time(86400).is_valid
        assert perf.validate_time(86400.5).errors == ["Time cannot exceed 24 hours"]

    def test_fast_time_warning(self):
        """Under a second warns but passes"""
        result = perf.validate_time(0.5)
        assert result.is_valid
        assert len(result.warnings) == 1

    def test_distance_bounds(self):
        """Same shape for distances"""
        assert perf.validate_distance(0.01).errors == ["Distance must be greater than 0.01 meters"]
        assert perf.validate_distance(10000).is_valid
        assert not perf.validate_distance(10000.1).is_valid

    def test_long_distance_warning(self):
        """Over 1000 m warns but passes"""
        result = perf.validate_distance(1500)
        assert result.is_valid
        assert result.warnings

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_rejected(self, value):
        """NaN and infinity fail without warnings"""
        time_check = perf.validate_time(value)
        assert time_check.errors == ["Time must be a finite number of seconds"]
        assert time_check.warnings == []
        distance_check = perf.validate_distance(value)
        assert distance_check.errors == ["Distance must be a finite number of meters"]
        assert distance_check.warnings == []


class TestDates:
    """Future date rule"""

    def test_today_allowed(self):
        """Any time today is fine"""
        assert not perf.is_future(NOW.date(), NOW)
        assert not perf.is_future(NOW.replace(hour=23, minute=59), NOW)

    def test_tomorrow_rejected(self):
        """Tomorrow is in the future"""
        assert perf.is_future(NOW.date() + timedelta(days=1), NOW)


class TestTeamMembers:
    """Team member rules"""

    def test_wrong_count(self):
        """3 of 4"""
        check = perf.validate_team_members(4, ["a", "b", "c"], "4x100m")
        assert not check.is_valid
        assert check.required_team_size == 4
        assert check.provided_team_size == 3
        assert check.errors == ['Team discipline "4x100m" requires exactly 4 team members, but 3 were provided']

    def test_missing(self):
        """No members for a team event"""
        check = perf.validate_team_members(4, None, "4x100m")
        assert check.errors == ['Team discipline "4x100m" requires 4 team members']

    def test_exact_unique(self):
        """4 distinct ids pass"""
        assert perf.validate_team_members(4, ["a", "b", "c", "d"], "4x100m").is_valid

    def test_duplicates(self):
        """Repeated id"""
        check = perf.validate_team_members(4, ["a", "b", "c", "a"], "4x100m")
        assert check.errors == ["Team members must be unique"]

    def test_individual_with_members(self):
        """Members on an individual event"""
        check = perf.validate_team_members(None, ["a"], "100m")
        assert check.errors == ['Individual discipline "100m" cannot have team members']

    def test_individual_empty(self):
        """Empty list is fine for individual events"""
        assert perf.validate_team_members(0, [], "100m").is_valid


class TestCombined:
    """validate_performance collects everything"""

    def test_accumulates(self):
        """All errors reported together, with paths"""
        result = perf.validate_performance(
            MEASURED,
            performance_date=date(2024, 6, 16),
            event_details="",
            time_seconds=0.001,
            now=NOW,
        )
        assert not result.is_valid
        paths = {d["path"] for d in result.details()}
        assert {"timeSeconds", "date", "eventDetails"} <= paths
        assert "Performance date cannot be in the future" in result.errors
        assert "Event details are required" in result.errors
        # the fast-time warning is still reported next to the errors
        assert result.warnings

    def test_relay(self):
        """Team rules run for team disciplines"""
        result = perf.validate_performance(
            RELAY,
            performance_date=date(2024, 6, 1),
            event_details="County Relays",
            time_seconds=48.2,
            team_members=["a", "b"],
            discipline_name="4x100m",
            now=NOW,
        )
        assert result.details() == [{
            "path": "teamMembers",
            "message": 'Team discipline "4x100m" requires exactly 4 team members, but 2 were provided',
        }]

    def test_valid_with_warning(self):
        """Warnings never block"""
        result = perf.validate_performance(
            MEASURED,
            performance_date=date(2024, 6, 1),
            event_details="Open meeting",
            distance_meters=1200,
            now=NOW,
        )
        assert result.is_valid
        assert result.warnings

    def test_event_details_length(self):
        """At most 255 characters"""
        assert perf.validate_event_details("x" * 255).is_valid
        assert not perf.validate_event_details("x" * 256).is_valid


class TestProofFile:
    """Upload checks"""

    def test_accepts_image(self):
        assert perf.validate_proof_file(1024, "image/png").is_valid

    def test_rejects_large_and_wrong_type(self):
        result = perf.validate_proof_file(11 * 1024 * 1024, "application/pdf")
        assert len(result.errors) == 2
