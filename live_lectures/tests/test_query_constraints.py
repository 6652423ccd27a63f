"""
Tests for pulling filter constraints out of free-text queries
"""
from live_lectures.models import QueryConstraints, SizePreference, TimeConstraint
from live_lectures.query_constraints import (
    build_enriched_query,
    build_vector_filter,
    extract_constraints,
    extract_day_of_week,
    extract_size_preference,
    extract_time_constraints,
    extract_time_of_day,
    size_sort_direction,
    spoken_clock_minutes,
)


class TestTimeConstraints:

    def test_ends_before(self):
        tc = extract_time_constraints("classes that end before 2pm")
        assert tc.before == 840
        assert tc.after is None

    def test_after_and_before(self):
        tc = extract_time_constraints("something after 10am and before 2pm")
        assert tc.after == 600
        assert tc.before == 840

    def test_earlier_and_later_than(self):
        assert extract_time_constraints("earlier than 9:30 am").before == 570
        assert extract_time_constraints("later than 4 PM").after == 960

    def test_conflicting_bounds_pass_through(self):
        tc = extract_time_constraints("before 9am but after 5pm")
        assert tc.before == 540
        assert tc.after == 1020

    def test_no_time_phrase(self):
        assert extract_time_constraints("intro to biology") == TimeConstraint()

    def test_spoken_clock_edges(self):
        assert spoken_clock_minutes("12am") == 0
        assert spoken_clock_minutes("12pm") == 720
        assert spoken_clock_minutes("noonish") is None


class TestKeywords:

    def test_large(self):
        assert extract_size_preference("Find large psychology lectures") == SizePreference(min=100)

    def test_small(self):
        assert extract_size_preference("small seminar") == SizePreference(max=30)

    def test_no_size_keyword_leaves_fields_unset(self):
        pref = extract_size_preference("music history")
        assert pref.model_dump(exclude_none=True) == {}

    def test_small_wins_over_big(self):
        assert extract_size_preference("small or big") == SizePreference(max=30)

    def test_time_of_day(self):
        assert extract_time_of_day("Afternoon chemistry") == "afternoon"
        assert extract_time_of_day("anything") is None

    def test_day_of_week(self):
        assert extract_day_of_week("biology on FRIDAYS") == "Friday"
        assert extract_day_of_week("weekend") is None

    def test_size_sort_direction(self):
        assert size_sort_direction("What is the biggest music class?") == "desc"
        assert size_sort_direction("tiny classes") == "asc"
        assert size_sort_direction("art history") is None


class TestEnrichedQuery:

    def test_only_present_constraints_are_listed(self):
        constraints = extract_constraints("large biology classes on Monday morning")
        text = build_enriched_query("large biology classes on Monday morning", constraints)
        assert "Query: large biology classes on Monday morning" in text
        assert "Time of day: morning" in text
        assert "Day of week: Monday" in text
        assert "Minimum class size: 100" in text
        assert "Maximum class size" not in text
        assert "Ends before" not in text

    def test_midnight_bound_is_not_dropped(self):
        constraints = QueryConstraints(time=TimeConstraint(after=0))
        assert "Starts after: 0:00" in build_enriched_query("q", constraints)


class TestVectorFilter:

    def test_no_constraints_no_filter(self):
        assert build_vector_filter(QueryConstraints()) is None

    def test_all_clauses(self):
        constraints = extract_constraints("small friday afternoon classes after 1pm before 5pm")
        assert build_vector_filter(constraints) == {
            "expandedDays": {"$in": ["Friday"]},
            "timeOfDay": {"$eq": "afternoon"},
            "timeEnd": {"$lte": 1020},
            "timeStart": {"$gte": 780},
            "seatLimit": {"$lte": 30},
        }

    def test_large_only(self):
        constraints = extract_constraints("Find large psychology lectures")
        assert build_vector_filter(constraints) == {"seatLimit": {"$gte": 100}}
