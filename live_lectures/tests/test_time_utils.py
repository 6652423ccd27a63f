"""
Tests for wall-clock parsing and live/upcoming classification
"""
from datetime import datetime, timedelta, timezone

import pytest

from live_lectures.time_utils import (
    CAMPUS_TZ,
    InvalidTimeToken,
    classify_lecture,
    clock_minutes,
    expand_days,
    format_clock,
    format_duration,
    format_time,
    format_time_range,
    is_live_now,
    is_recurring_on_day,
    is_upcoming_within,
    minutes_elapsed,
    minutes_remaining,
    minutes_until_start,
    parse_time_instant,
    split_time_range,
    time_of_day_bucket,
)

# Week of Monday 2024-10-14
MONDAY = datetime(2024, 10, 14, 9, 0, tzinfo=CAMPUS_TZ)


def at(day_offset, hour, minute=0):
    return MONDAY.replace(hour=hour, minute=minute) + timedelta(days=day_offset)


WEDNESDAY_6_30PM = at(2, 18, 30)


class TestParseTime:

    def test_noon_and_midnight_fixed_points(self):
        assert clock_minutes("12:00a") == 0
        assert clock_minutes("12:00p") == 720

    def test_every_valid_token_maps_to_distinct_minute(self):
        seen = set()
        for hour in range(1, 13):
            for minute in range(60):
                for period in "ap":
                    seen.add(clock_minutes(f"{hour}:{minute:02d}{period}"))
        assert seen == set(range(24 * 60))

    def test_pm_offsets(self):
        assert clock_minutes("6:00p") == 18 * 60
        assert clock_minutes("7:20p") == 19 * 60 + 20
        assert clock_minutes("11:59a") == 11 * 60 + 59

    def test_instant_lands_on_reference_date(self):
        instant = parse_time_instant("6:00p", WEDNESDAY_6_30PM)
        assert instant == WEDNESDAY_6_30PM.replace(hour=18, minute=0)
        assert instant.tzinfo is not None

    def test_uppercase_and_whitespace_accepted(self):
        assert parse_time_instant(" 9:30A ", MONDAY).hour == 9

    @pytest.mark.parametrize("token", ["", "6pm", "6:00", "13:00p", "6:75a", "TBA"])
    def test_malformed_token_raises(self, token):
        with pytest.raises(InvalidTimeToken):
            parse_time_instant(token, MONDAY)

    def test_utc_reference_is_converted_to_campus_time(self):
        utc_ref = WEDNESDAY_6_30PM.astimezone(timezone.utc)
        assert parse_time_instant("6:00p", utc_ref).day == 16

    def test_split_time_range(self):
        assert split_time_range("6:00p-7:20p") == ("6:00p", "7:20p")
        with pytest.raises(InvalidTimeToken):
            split_time_range("TBA")


class TestRecurringDays:

    def test_mwf(self):
        hits = [is_recurring_on_day("MWF", at(offset, 12)) for offset in range(7)]
        assert hits == [True, False, True, False, True, False, False]

    def test_tuth(self):
        hits = [is_recurring_on_day("TuTh", at(offset, 12)) for offset in range(7)]
        assert hits == [False, True, False, True, False, False, False]

    def test_th_is_not_t_or_h(self):
        assert not is_recurring_on_day("Th", at(1, 12))
        assert is_recurring_on_day("Th", at(3, 12))

    def test_unknown_days_never_recur(self):
        assert not any(is_recurring_on_day("TBA", at(offset, 12)) for offset in range(7))

    def test_expand_days(self):
        assert expand_days("MWF") == ["Monday", "Wednesday", "Friday"]
        assert expand_days("TuTh") == ["Tuesday", "Thursday"]


class TestLiveAndUpcoming:

    def test_live_during_class(self):
        assert is_live_now("6:00p", "7:20p", "MWF", WEDNESDAY_6_30PM)

    def test_not_live_after_class(self):
        assert not is_live_now("6:00p", "7:20p", "MWF", at(2, 19, 30))

    def test_not_live_on_off_day(self):
        assert not is_live_now("6:00p", "7:20p", "MWF", at(1, 18, 30))

    def test_bounds_are_inclusive(self):
        assert is_live_now("6:00p", "7:20p", "MWF", at(2, 18, 0))
        assert is_live_now("6:00p", "7:20p", "MWF", at(2, 19, 20))

    def test_bad_token_is_not_live(self):
        assert not is_live_now("TBA", "7:20p", "MWF", WEDNESDAY_6_30PM)

    def test_upcoming_within_window(self):
        now = at(2, 17, 0)
        assert is_upcoming_within("6:00p", "MWF", 120, now)
        assert not is_upcoming_within("6:00p", "MWF", 30, now)

    def test_started_class_is_not_upcoming(self):
        assert not is_upcoming_within("6:00p", "MWF", 120, at(2, 18, 0))

    def test_classify_lecture(self):
        assert classify_lecture("6:00p-7:20p", "MWF", WEDNESDAY_6_30PM) == "live"
        assert classify_lecture("8:00p-9:20p", "MWF", WEDNESDAY_6_30PM) == "upcoming"
        assert classify_lecture("8:00a-9:20a", "MWF", WEDNESDAY_6_30PM) == "other"
        assert classify_lecture("TBA", "MWF", WEDNESDAY_6_30PM) == "other"


class TestMinuteDiffs:

    def test_minutes_remaining(self):
        assert minutes_remaining("7:20p", WEDNESDAY_6_30PM) == 50

    def test_minutes_remaining_clamped(self):
        assert minutes_remaining("6:00p", WEDNESDAY_6_30PM) == 0

    def test_minutes_are_floored(self):
        now = WEDNESDAY_6_30PM.replace(second=30)
        assert minutes_remaining("7:20p", now) == 49
        assert minutes_elapsed("6:00p", now) == 30

    def test_minutes_elapsed_clamped_before_start(self):
        assert minutes_elapsed("8:00p", WEDNESDAY_6_30PM) == 0

    def test_minutes_until_start(self):
        assert minutes_until_start("8:05p", WEDNESDAY_6_30PM) == 95


class TestFormatting:

    def test_format_time(self):
        assert format_time("6:00p") == "6:00 PM"
        assert format_time("9:30a") == "9:30 AM"
        assert format_time("TBA") == "TBA"

    def test_format_time_range(self):
        assert format_time_range("6:00p-7:20p") == "6:00 PM - 7:20 PM"

    def test_format_duration(self):
        assert format_duration(45) == "45m"
        assert format_duration(65) == "1h 5m"

    def test_format_clock(self):
        assert format_clock(WEDNESDAY_6_30PM) == "6:30 PM"
        assert format_clock(at(0, 0, 5)) == "12:05 AM"

    def test_time_of_day_bucket(self):
        assert time_of_day_bucket(9 * 60) == "morning"
        assert time_of_day_bucket(13 * 60) == "afternoon"
        assert time_of_day_bucket(18 * 60) == "evening"
