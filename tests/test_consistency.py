"""Unit tests for the check-in consistency calculator."""

import pytest
import pytz
from datetime import date, datetime, timedelta, timezone
from bson import ObjectId

from moodmentor.services.checkin.consistency import (
    CheckIn,
    ConsistencyMetrics,
    InvalidCheckInInput,
    calculate_consistency,
    calculate_streak,
    calculate_trend,
    consistency_score,
    to_calendar_day,
)


TODAY = date(2024, 3, 15)


def checkin(days_back: int, value: float = 5, hour: int = 12) -> CheckIn:
    day = TODAY - timedelta(days=days_back)
    return CheckIn(
        subject_id="patient-1",
        timestamp=datetime(day.year, day.month, day.day, hour, tzinfo=timezone.utc),
        value=value,
    )


# ─────────────────────────────────────────────────────────────────
# Empty and invalid input
# ─────────────────────────────────────────────────────────────────


class TestEmptyAndInvalidInput:
    def test_empty_sequence_returns_zero_metrics(self):
        metrics = calculate_consistency([], today=TODAY)

        assert metrics == ConsistencyMetrics()
        assert metrics.to_dict() == {
            "totalEntries": 0,
            "averageScore": 0,
            "lastEntryTimestamp": None,
            "streakDays": 0,
            "trend": "stable",
        }

    def test_tuple_is_accepted(self):
        metrics = calculate_consistency((checkin(0),), today=TODAY)
        assert metrics.total_entries == 1

    @pytest.mark.parametrize("value", [None, 42, "abc", b"abc", {"timestamp": None}])
    def test_non_sequence_raises(self, value):
        with pytest.raises(InvalidCheckInInput):
            calculate_consistency(value, today=TODAY)

    def test_generator_is_rejected(self):
        with pytest.raises(InvalidCheckInInput):
            calculate_consistency((c for c in [checkin(0)]), today=TODAY)

    def test_invalid_input_is_a_type_error(self):
        assert issubclass(InvalidCheckInInput, TypeError)

    def test_undated_entries_are_ignored(self):
        metrics = calculate_consistency(
            [checkin(0, 4), CheckIn("patient-1", None, 10)],
            today=TODAY,
        )

        assert metrics.total_entries == 1
        assert metrics.average_score == 4

    def test_only_undated_entries_gives_zero_metrics(self):
        metrics = calculate_consistency([CheckIn("patient-1", None, 10)], today=TODAY)
        assert metrics == ConsistencyMetrics()

    def test_missing_value_counts_as_zero(self):
        metrics = calculate_consistency(
            [checkin(0, None), checkin(1, 4)],
            today=TODAY,
        )

        assert metrics.total_entries == 2
        assert metrics.average_score == 2.0

    def test_non_numeric_value_counts_as_zero(self):
        metrics = calculate_consistency(
            [{"timestamp": "2024-03-15T09:00:00Z", "value": "n/a"}],
            today=TODAY,
        )
        assert metrics.average_score == 0


# ─────────────────────────────────────────────────────────────────
# Worked example and basic figures
# ─────────────────────────────────────────────────────────────────


class TestCalculateConsistency:
    def test_worked_example(self):
        checkins = [checkin(0, 5), checkin(1, 6), checkin(2, 7), checkin(4, 2)]

        metrics = calculate_consistency(checkins, today=TODAY)

        assert metrics.total_entries == 4
        assert metrics.average_score == 5.0
        assert metrics.streak_days == 3
        assert metrics.trend == "declining"
        assert metrics.last_entry_timestamp == checkins[0].timestamp

    def test_does_not_mutate_input(self):
        checkins = [checkin(2, 7), checkin(0, 5), checkin(1, 6)]
        snapshot = list(checkins)

        calculate_consistency(checkins, today=TODAY)

        assert checkins == snapshot

    def test_is_idempotent(self):
        checkins = [checkin(0, 5), checkin(1, 6), checkin(3, 1)]

        first = calculate_consistency(checkins, today=TODAY)
        second = calculate_consistency(checkins, today=TODAY)

        assert first == second

    def test_order_independent(self):
        checkins = [checkin(0, 5), checkin(1, 6), checkin(2, 7), checkin(4, 2)]
        shuffled = [checkins[2], checkins[0], checkins[3], checkins[1]]

        assert calculate_consistency(shuffled, today=TODAY) == calculate_consistency(
            list(reversed(checkins)), today=TODAY
        )
        assert calculate_consistency(shuffled, today=TODAY) == calculate_consistency(
            checkins, today=TODAY
        )

    def test_same_timestamp_ties_are_order_independent(self):
        a = checkin(0, 3)
        b = checkin(0, 8)

        assert calculate_consistency([a, b], today=TODAY) == calculate_consistency(
            [b, a], today=TODAY
        )

    def test_last_entry_is_newest_not_first(self):
        checkins = [checkin(3), checkin(0, hour=18), checkin(0, hour=8)]

        metrics = calculate_consistency(checkins, today=TODAY)

        assert metrics.last_entry_timestamp == checkins[1].timestamp

    def test_accepts_mappings_and_iso_strings(self):
        metrics = calculate_consistency(
            [
                {"timestamp": "2024-03-15T10:00:00Z", "value": 8},
                {"timestamp": "2024-03-14T10:00:00+00:00", "value": 6},
            ],
            today=TODAY,
        )

        assert metrics.total_entries == 2
        assert metrics.average_score == 7.0
        assert metrics.streak_days == 2
        assert metrics.trend == "improving"

    def test_naive_timestamps_are_utc(self):
        metrics = calculate_consistency(
            [CheckIn("patient-1", datetime(2024, 3, 15, 23, 30), 5)],
            today=TODAY,
        )

        assert metrics.last_entry_timestamp.tzinfo is not None
        assert metrics.streak_days == 1

    def test_today_as_datetime(self):
        metrics = calculate_consistency(
            [checkin(0)],
            today=datetime(2024, 3, 15, 8, tzinfo=timezone.utc),
        )
        assert metrics.streak_days == 1


# ─────────────────────────────────────────────────────────────────
# Streak
# ─────────────────────────────────────────────────────────────────


class TestStreak:
    def test_single_entry_today(self):
        assert calculate_consistency([checkin(0)], today=TODAY).streak_days == 1

    def test_single_entry_yesterday_still_counts(self):
        assert calculate_consistency([checkin(1)], today=TODAY).streak_days == 1

    def test_single_entry_two_days_ago_breaks_streak(self):
        assert calculate_consistency([checkin(2)], today=TODAY).streak_days == 0

    def test_multiple_entries_on_one_day_count_once(self):
        checkins = [checkin(0, hour=8), checkin(0, hour=20), checkin(1)]

        metrics = calculate_consistency(checkins, today=TODAY)

        assert metrics.total_entries == 3
        assert metrics.streak_days == 2

    def test_gap_ends_streak(self):
        checkins = [checkin(0), checkin(1), checkin(3), checkin(4), checkin(5)]
        assert calculate_consistency(checkins, today=TODAY).streak_days == 2

    def test_streak_starting_yesterday(self):
        checkins = [checkin(1), checkin(2), checkin(3)]
        assert calculate_consistency(checkins, today=TODAY).streak_days == 3

    def test_future_days_are_ignored(self):
        checkins = [checkin(-1), checkin(0)]

        metrics = calculate_consistency(checkins, today=TODAY)

        assert metrics.streak_days == 1
        assert metrics.total_entries == 2

    def test_streak_bounded_by_distinct_days(self):
        checkins = [checkin(n) for n in range(10)] + [checkin(n, hour=6) for n in range(10)]

        metrics = calculate_consistency(checkins, today=TODAY)

        assert metrics.streak_days == 10
        assert metrics.streak_days <= metrics.total_entries

    def test_calculate_streak_directly(self):
        days = [TODAY, TODAY - timedelta(days=1), TODAY - timedelta(days=1)]
        assert calculate_streak(days, TODAY) == 2
        assert calculate_streak([], TODAY) == 0


# ─────────────────────────────────────────────────────────────────
# Time zones
# ─────────────────────────────────────────────────────────────────


class TestTimezone:
    def test_calendar_day_depends_on_zone(self):
        late = CheckIn("patient-1", datetime(2024, 3, 14, 23, 30, tzinfo=timezone.utc), 5)
        early = CheckIn("patient-1", datetime(2024, 3, 15, 0, 30, tzinfo=timezone.utc), 5)

        utc = calculate_consistency([late, early], today=TODAY, tz="UTC")
        tokyo = calculate_consistency([late, early], today=TODAY, tz="Asia/Tokyo")

        assert utc.streak_days == 2
        assert tokyo.streak_days == 1

    def test_to_calendar_day(self):
        stamp = datetime(2024, 3, 15, 2, 30, tzinfo=timezone.utc)

        assert to_calendar_day(stamp) == date(2024, 3, 15)
        assert to_calendar_day(stamp, "America/New_York") == date(2024, 3, 14)

    def test_unknown_zone_raises(self):
        with pytest.raises(pytz.UnknownTimeZoneError):
            calculate_consistency([checkin(0)], today=TODAY, tz="Mars/Olympus_Mons")


# ─────────────────────────────────────────────────────────────────
# Trend
# ─────────────────────────────────────────────────────────────────


class TestTrend:
    def test_single_entry_is_stable(self):
        assert calculate_consistency([checkin(0, 9)], today=TODAY).trend == "stable"

    def test_rising_value_is_improving(self):
        checkins = [checkin(0, 8), checkin(1, 3)]
        assert calculate_consistency(checkins, today=TODAY).trend == "improving"

    def test_tie_is_improving(self):
        checkins = [checkin(0, 5), checkin(1, 5)]
        assert calculate_consistency(checkins, today=TODAY).trend == "improving"

    def test_only_two_newest_values_matter(self):
        checkins = [checkin(0, 4), checkin(1, 5), checkin(2, 1), checkin(3, 1)]
        assert calculate_consistency(checkins, today=TODAY).trend == "declining"

    def test_lower_is_better_flips_trend(self):
        checkins = [checkin(0, 3), checkin(1, 6)]

        metrics = calculate_consistency(checkins, today=TODAY, higher_is_better=False)

        assert metrics.trend == "improving"

    def test_lower_is_better_rising_is_declining(self):
        checkins = [checkin(0, 7), checkin(1, 6)]

        metrics = calculate_consistency(checkins, today=TODAY, higher_is_better=False)

        assert metrics.trend == "declining"

    def test_calculate_trend_directly(self):
        assert calculate_trend([]) == "stable"
        assert calculate_trend([2, 1]) == "improving"
        assert calculate_trend([1, 2]) == "declining"


# ─────────────────────────────────────────────────────────────────
# Consistency score and document adapter
# ─────────────────────────────────────────────────────────────────


class TestConsistencyScore:
    @pytest.mark.parametrize(
        "entries,expected",
        [(0, 0), (-3, 0), (1, 5), (3, 15), (19, 95), (20, 100), (50, 100)],
    )
    def test_points_per_entry_capped(self, entries, expected):
        assert consistency_score(entries) == expected


class TestCheckInFromDocument:
    def test_reads_stored_fields(self):
        user_id = ObjectId()
        created = datetime(2024, 3, 15, 9, tzinfo=timezone.utc)

        result = CheckIn.from_document({"userId": user_id, "createdAt": created, "score": 7})

        assert result == CheckIn(subject_id=str(user_id), timestamp=created, value=7.0)

    def test_missing_fields(self):
        result = CheckIn.from_document({})

        assert result.subject_id is None
        assert result.timestamp is None
        assert result.value == 0.0

    def test_custom_value_field(self):
        result = CheckIn.from_document(
            {"createdAt": "2024-03-15T09:00:00Z", "level": 4},
            value_field="level",
        )

        assert result.value == 4.0
        assert result.timestamp == datetime(2024, 3, 15, 9, tzinfo=timezone.utc)
