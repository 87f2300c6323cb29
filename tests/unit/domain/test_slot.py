"""Tests for the half-open time slot value object."""

from datetime import date, time

import pytest

from campus_reservations.core.exceptions import ValidationException
from campus_reservations.domain.slot import (
    TimeSlot,
    format_hhmm,
    intervals_overlap,
    merge_windows,
    parse_hhmm,
    parse_iso_date,
)

MONDAY = date(2024, 6, 10)


def slot(start: str, end: str, day: date = MONDAY) -> TimeSlot:
    return TimeSlot(day, parse_hhmm(start), parse_hhmm(end))


@pytest.mark.unit
class TestParsing:
    def test_parse_hhmm(self):
        assert parse_hhmm("09:30") == time(9, 30)
        assert parse_hhmm(" 23:59 ") == time(23, 59)

    @pytest.mark.parametrize("value", ["9:30", "0930", "24:00", "12:60", "", "noon"])
    def test_parse_hhmm_rejects_bad_values(self, value):
        with pytest.raises(ValidationException) as exc_info:
            parse_hhmm(value, "start_time")
        assert "Use HH:MM" in exc_info.value.message

    def test_parse_iso_date(self):
        assert parse_iso_date("2024-06-10") == MONDAY

    @pytest.mark.parametrize("value", ["2024-6-10", "2024-06-10T10:00", "2024-02-30", "tomorrow"])
    def test_parse_iso_date_rejects_bad_values(self, value):
        with pytest.raises(ValidationException):
            parse_iso_date(value)

    def test_format_hhmm(self):
        assert format_hhmm(time(7, 5)) == "07:05"

    def test_from_strings(self):
        assert TimeSlot.from_strings("2024-06-10", "10:00", "11:00") == slot("10:00", "11:00")


@pytest.mark.unit
class TestTimeSlot:
    def test_end_must_follow_start(self):
        with pytest.raises(ValidationException) as exc_info:
            slot("11:00", "10:00")
        assert exc_info.value.message == "End time must be after start time"

    def test_empty_slot_is_rejected(self):
        with pytest.raises(ValidationException):
            slot("10:00", "10:00")

    def test_day_of_week_counts_from_sunday(self):
        assert TimeSlot(date(2024, 6, 9), time(9), time(10)).day_of_week == 0
        assert slot("09:00", "10:00").day_of_week == 1
        assert TimeSlot(date(2024, 6, 15), time(9), time(10)).day_of_week == 6

    def test_touching_slots_do_not_overlap(self):
        assert not slot("10:00", "11:00").overlaps(slot("11:00", "12:00"))
        assert not slot("11:00", "12:00").overlaps(slot("10:00", "11:00"))

    def test_partial_overlap(self):
        assert slot("10:00", "11:00").overlaps(slot("10:30", "11:30"))
        assert slot("10:30", "11:30").overlaps(slot("10:00", "11:00"))

    def test_containment_overlaps(self):
        assert slot("09:00", "12:00").overlaps(slot("10:00", "10:15"))

    def test_different_dates_never_overlap(self):
        assert not slot("10:00", "11:00").overlaps(slot("10:00", "11:00", date(2024, 6, 11)))

    def test_within(self):
        assert slot("16:00", "16:30").within(time(9), time(17))
        assert slot("09:00", "17:00").within(time(9), time(17))
        assert not slot("16:30", "17:30").within(time(9), time(17))

    def test_within_any_uses_merged_windows(self):
        windows = [(time(9), time(12)), (time(12), time(15))]
        assert slot("11:00", "13:00").within_any(windows)
        assert not slot("14:00", "16:00").within_any(windows)
        assert not slot("10:00", "11:00").within_any([])

    def test_with_changes(self):
        moved = slot("09:00", "10:00").with_changes(end_time=time(9, 30))
        assert moved == slot("09:00", "09:30")
        assert slot("09:00", "10:00").with_changes() == slot("09:00", "10:00")

    def test_with_changes_validates_result(self):
        with pytest.raises(ValidationException):
            slot("09:00", "10:00").with_changes(start_time=time(10, 30))

    def test_str(self):
        assert str(slot("09:00", "10:00")) == "2024-06-10 09:00-10:00"


@pytest.mark.unit
class TestIntervals:
    def test_intervals_overlap_is_symmetric(self):
        a = (time(10), time(11))
        b = (time(10, 30), time(11, 30))
        assert intervals_overlap(*a, *b) == intervals_overlap(*b, *a) is True

    def test_merge_windows(self):
        merged = merge_windows(
            [(time(13), time(14)), (time(9), time(10)), (time(9, 30), time(11)), (time(11), time(12))]
        )
        assert merged == [(time(9), time(12)), (time(13), time(14))]

    def test_merge_windows_keeps_contained_window(self):
        assert merge_windows([(time(9), time(17)), (time(10), time(11))]) == [(time(9), time(17))]
