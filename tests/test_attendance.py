"""Tests for attendance.py — per-subject counters, percentages and shortfall projection."""

import pytest
from datetime import date, timedelta
from fractions import Fraction

from attendance import (
    aggregate_attendance,
    attendance_band,
    attendance_percentage,
    classes_needed,
    filter_subject,
    round_half_up,
)
from entries import DailyEntry, HourRecord
from roster import Semester
from sample_data import IN_SEMESTER, SEMESTER_3

COLLEGE_HOURS = ["08:00", "08:45", "09:50", "10:35", "11:20", "13:05", "13:50", "14:35"]


def _day(day, records, day_type="college"):
    hours = [
        HourRecord(time=COLLEGE_HOURS[i], subject=code, attendance=status)
        for i, (code, status) in enumerate(records)
    ]
    return DailyEntry(user_id=1, date=day, day_type=day_type, hours=hours)


@pytest.fixture
def semester():
    return Semester.from_dict(SEMESTER_3)


class TestRounding:
    @pytest.mark.parametrize("value,expected", [
        (Fraction(25, 2), 13),
        (Fraction(5, 2), 3),
        (Fraction(200, 3), 67),
        (Fraction(0), 0),
        (74.4, 74),
    ])
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected

    def test_percentage(self):
        assert attendance_percentage(1, 8) == 13
        assert attendance_percentage(2, 3) == 67
        assert attendance_percentage(0, 0) == 0
        assert attendance_percentage(5, 5) == 100


class TestShortfall:
    def test_seven_of_ten(self):
        assert attendance_percentage(7, 10) == 70
        assert classes_needed(7, 10) == 2

    @pytest.mark.parametrize("attended,total", [(0, 1), (6, 10), (3, 7), (10, 20), (1, 8)])
    def test_needed_reaches_threshold(self, attended, total):
        x = classes_needed(attended, total)
        assert 4 * (attended + x) >= 3 * (total + x)
        if x:
            assert 4 * (attended + x - 1) < 3 * (total + x - 1)

    def test_never_negative(self):
        assert classes_needed(9, 10) == 0

    @pytest.mark.parametrize("pct,band", [(100, "good"), (75, "good"), (74, "warning"), (65, "warning"), (64, "critical")])
    def test_band(self, pct, band):
        assert attendance_band(pct) == band


class TestAggregate:
    def test_counts_and_percentage(self, semester):
        entries = [
            _day(IN_SEMESTER, [("CS301", "present"), ("CS301", "onduty"), ("CS302", "absent")]),
            _day(IN_SEMESTER + timedelta(days=1), [("CS301", "cancelled"), ("CS302", "present")]),
        ]
        stats = aggregate_attendance(semester, entries)
        ds = stats["CS301"]
        assert (ds.present, ds.onduty, ds.absent, ds.cancelled, ds.total) == (1, 1, 0, 1, 3)
        assert ds.percentage == 67
        assert ds.classes_needed == 1
        assert ds.band == "warning"

        os_ = stats["CS302"]
        assert os_.total == 2
        assert os_.percentage == 50
        assert os_.classes_needed == 2

    def test_total_is_sum_of_counters(self, semester):
        entries = [_day(IN_SEMESTER, [("CS301", s) for s in ("present", "absent", "onduty", "cancelled")])]
        s = aggregate_attendance(semester, entries)["CS301"]
        assert s.total == s.present + s.absent + s.onduty + s.cancelled == 4

    def test_every_roster_subject_seeded(self, semester):
        stats = aggregate_attendance(semester, [])
        assert list(stats) == ["CS301", "CS302", "CS303L"]
        lab = stats["CS303L"]
        assert lab.total == 0
        assert lab.percentage == 0
        assert lab.classes_needed == 0
        assert lab.course_type == "practical"
        assert lab.faculty == "PV"

    def test_no_projection_at_or_above_threshold(self, semester):
        entries = [_day(IN_SEMESTER, [("CS301", "present"), ("CS301", "present"), ("CS301", "present"), ("CS301", "absent")])]
        s = aggregate_attendance(semester, entries)["CS301"]
        assert s.percentage == 75
        assert s.classes_needed is None

    def test_missing_attendance_counts_as_present(self, semester):
        entries = [_day(IN_SEMESTER, [("CS301", None)])]
        s = aggregate_attendance(semester, entries)["CS301"]
        assert s.present == 1
        assert s.classes[0].attendance == "present"

    def test_subject_code_trimmed(self, semester):
        entries = [_day(IN_SEMESTER, [(" CS301 ", "present")])]
        assert aggregate_attendance(semester, entries)["CS301"].total == 1

    def test_outside_window_ignored(self, semester):
        entries = [
            _day(date(2025, 1, 5), [("CS301", "present")]),
            _day(date(2025, 1, 6), [("CS301", "present")]),
            _day(date(2025, 5, 30), [("CS301", "absent")]),
            _day(date(2025, 5, 31), [("CS301", "absent")]),
        ]
        s = aggregate_attendance(semester, entries)["CS301"]
        assert s.total == 2

    def test_non_college_days_ignored(self, semester):
        entries = [_day(IN_SEMESTER, [("CS301", "present")], day_type="non-college")]
        assert aggregate_attendance(semester, entries)["CS301"].total == 0

    def test_removed_subject_history_excluded(self, semester):
        entries = [_day(IN_SEMESTER, [("EE999", "present"), ("CS301", "absent")])]
        stats = aggregate_attendance(semester, entries)
        assert "EE999" not in stats
        assert stats["CS301"].total == 1

    def test_class_history_newest_first(self, semester):
        entries = [
            _day(IN_SEMESTER, [("CS302", "present")]),
            _day(IN_SEMESTER + timedelta(days=7), [("CS302", "absent")]),
            _day(IN_SEMESTER - timedelta(days=7), [("CS302", "onduty")]),
        ]
        classes = aggregate_attendance(semester, entries)["CS302"].classes
        assert [c.date for c in classes] == [
            IN_SEMESTER + timedelta(days=7), IN_SEMESTER, IN_SEMESTER - timedelta(days=7),
        ]

    def test_class_record_keeps_unit_and_notes(self, semester):
        entry = DailyEntry(user_id=1, date=IN_SEMESTER, hours=[
            HourRecord(time="08:00", subject="CS301", attendance="present", unit=3, notes="Trees"),
        ])
        c = aggregate_attendance(semester, [entry])["CS301"].classes[0]
        assert c.to_dict() == {
            "date": "2025-02-12", "time": "08:00", "attendance": "present", "unit": 3, "notes": "Trees",
        }

    def test_filter_subject(self, semester):
        stats = aggregate_attendance(semester, [])
        assert len(filter_subject(stats)) == 3
        assert [s.code for s in filter_subject(stats, "CS302")] == ["CS302"]
        assert filter_subject(stats, "NOPE") == []
