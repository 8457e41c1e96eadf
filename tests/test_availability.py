"""Tests für Verfügbarkeitsfenster und deren Mengenoperationen."""

import pytest
from pydantic import ValidationError

from models.availability import AvailabilityWindow, format_time, parse_time
from matching.availability import (
    choose_meeting_window,
    intersect,
    intersect_all,
    intersect_merged,
    overlap_minutes,
    overlap_minutes_merged,
    total_minutes,
    union,
    windows_overlap,
)
from matching.errors import InvalidInputError


# ─── Hilfsfunktionen ──────────────────────────────────────────────────────────

def w(text: str) -> AvailabilityWindow:
    """Kurzform: w("Mo 14:00-16:00")."""
    return AvailabilityWindow.parse(text)


# ─── MODELL ───────────────────────────────────────────────────────────────────

class TestAvailabilityWindow:
    def test_parse_and_str(self):
        win = w("Mo 14:00-16:00")
        assert (win.day, win.start, win.end) == (0, 14 * 60, 16 * 60)
        assert str(win) == "Mo 14:00-16:00"
        assert win.duration_minutes == 120

    def test_parse_numeric_day(self):
        assert w("4 08:00-09:30").day_name == "Fr"

    def test_clock_strings_accepted(self):
        win = AvailabilityWindow(day=2, start="10:00", end="24:00")
        assert win.end == 1440

    def test_start_must_be_before_end(self):
        with pytest.raises(ValidationError):
            AvailabilityWindow(day=0, start="16:00", end="14:00")
        with pytest.raises(ValidationError):
            AvailabilityWindow(day=0, start=600, end=600)

    def test_day_out_of_range(self):
        with pytest.raises(ValidationError):
            AvailabilityWindow(day=7, start=0, end=60)

    def test_unknown_day_name(self):
        with pytest.raises(ValueError):
            w("Xy 10:00-11:00")

    def test_frozen_and_hashable(self):
        a = w("Di 10:00-12:00")
        assert {a, w("Di 10:00-12:00")} == {a}
        with pytest.raises(ValidationError):
            a.start = 0

    def test_time_helpers(self):
        assert parse_time("07:05") == 425
        assert format_time(425) == "07:05"
        with pytest.raises(ValueError):
            parse_time("25:00")


# ─── MENGENOPERATIONEN ────────────────────────────────────────────────────────

class TestUnion:
    def test_empty(self):
        assert union([]) == []

    def test_merges_overlapping_and_adjacent(self):
        merged = union([w("Mo 10:00-12:00"), w("Mo 11:00-13:00"), w("Mo 13:00-14:00")])
        assert merged == [w("Mo 10:00-14:00")]

    def test_keeps_gaps_and_sorts(self):
        merged = union([w("Mi 10:00-11:00"), w("Mo 15:00-16:00"), w("Mo 10:00-11:00")])
        assert [str(x) for x in merged] == [
            "Mo 10:00-11:00", "Mo 15:00-16:00", "Mi 10:00-11:00",
        ]


class TestIntersect:
    def test_same_day_overlap(self):
        assert intersect([w("Mo 10:00-14:00")], [w("Mo 12:00-16:00")]) == [w("Mo 12:00-14:00")]

    def test_different_days(self):
        assert intersect([w("Mo 10:00-14:00")], [w("Di 10:00-14:00")]) == []

    def test_touching_windows_do_not_intersect(self):
        assert intersect([w("Mo 10:00-12:00")], [w("Mo 12:00-14:00")]) == []

    def test_multiple_pieces(self):
        a = [w("Mo 08:00-18:00")]
        b = [w("Mo 09:00-10:00"), w("Mo 12:00-13:00"), w("Di 09:00-10:00")]
        assert intersect(a, b) == [w("Mo 09:00-10:00"), w("Mo 12:00-13:00")]

    def test_intersect_all(self):
        common = intersect_all([
            [w("Mo 10:00-16:00")],
            [w("Mo 12:00-18:00")],
            [w("Mo 08:00-14:00"), w("Fr 10:00-12:00")],
        ])
        assert common == [w("Mo 12:00-14:00")]

    def test_intersect_all_single_member_is_unioned(self):
        assert intersect_all([[w("Mo 10:00-11:00"), w("Mo 11:00-12:00")]]) == [w("Mo 10:00-12:00")]

    def test_intersect_all_empty_raises(self):
        with pytest.raises(InvalidInputError):
            intersect_all([])


class TestOverlapHelpers:
    def test_windows_overlap_half_open(self):
        assert windows_overlap(w("Mo 10:00-12:00"), w("Mo 11:59-13:00"))
        assert not windows_overlap(w("Mo 10:00-12:00"), w("Mo 12:00-13:00"))
        assert not windows_overlap(w("Mo 10:00-12:00"), w("Di 10:00-12:00"))

    def test_minutes(self):
        assert total_minutes([w("Mo 10:00-12:00"), w("Mo 11:00-12:00")]) == 120
        assert overlap_minutes([w("Mo 10:00-12:00")], [w("Mo 11:00-13:00")]) == 60

    def test_merged_variants_match_general_ones(self):
        a = union([w("Mo 08:00-12:00"), w("Mo 14:00-18:00"), w("Mi 09:00-11:00")])
        b = union([w("Mo 11:00-15:00"), w("Di 10:00-12:00"), w("Mi 10:00-13:00")])
        assert intersect_merged(a, b) == [w("Mo 11:00-12:00"), w("Mo 14:00-15:00"), w("Mi 10:00-11:00")]
        assert overlap_minutes_merged(a, b) == 180
        assert overlap_minutes_merged(a, b) == overlap_minutes(a, b)

    def test_merged_variants_with_empty_side(self):
        a = [w("Mo 10:00-12:00")]
        assert intersect_merged(a, []) == []
        assert overlap_minutes_merged([], a) == 0


class TestChooseMeetingWindow:
    def test_none_when_empty(self):
        assert choose_meeting_window([]) is None

    def test_longest_wins(self):
        common = [w("Mo 10:00-11:00"), w("Mi 10:00-13:00")]
        assert choose_meeting_window(common) == w("Mi 10:00-13:00")

    def test_tie_goes_to_earliest(self):
        common = [w("Mi 10:00-12:00"), w("Di 14:00-16:00")]
        assert choose_meeting_window(common) == w("Di 14:00-16:00")

    def test_duration_truncates(self):
        common = [w("Mo 10:00-11:00"), w("Mi 10:00-13:00")]
        assert choose_meeting_window(common, 90) == w("Mi 10:00-11:30")

    def test_duration_too_long(self):
        assert choose_meeting_window([w("Mo 10:00-11:00")], 90) is None
