"""Tests for roster.py — semester parsing, active-semester lookup and roster validation."""

import pytest
from datetime import date

from roster import (
    RosterValidationError,
    Semester,
    Subject,
    is_duplicate_code,
    resolve_semester,
    roster_error_message,
    semester_for_date,
    validate_roster,
)
from sample_data import IN_SEMESTER, SEMESTER_3, SEMESTER_4


def _semester(number, codes, names=None, start="", end=""):
    names = names or [f"Subject {c}" for c in codes]
    return Semester.from_dict({
        "semesterNumber": number,
        "startDate": start,
        "endDate": end,
        "subjects": [{"code": c, "name": n} for c, n in zip(codes, names)],
    })


@pytest.fixture
def semesters():
    return [Semester.from_dict(SEMESTER_3), Semester.from_dict(SEMESTER_4)]


class TestSemesterParsing:
    def test_from_dict(self):
        sem = Semester.from_dict(SEMESTER_3)
        assert sem.semester_number == 3
        assert sem.start_date == date(2025, 1, 6)
        assert len(sem.subjects) == 3
        assert sem.subject("CS302").course_type == "tcp"
        assert sem.to_dict()["subjects"][0]["facultyInitials"] == "RK"

    @pytest.mark.parametrize("number", [0, 9, "x"])
    def test_number_out_of_range(self, number):
        with pytest.raises(ValueError):
            Semester.from_dict({"semesterNumber": number})

    def test_bad_date(self):
        with pytest.raises(ValueError, match="Invalid date"):
            Semester.from_dict({"semesterNumber": 1, "startDate": "31/01/2025"})

    def test_unknown_course_type(self):
        with pytest.raises(ValueError, match="course type"):
            Subject.from_dict({"code": "X", "name": "Y", "courseType": "seminar"})

    def test_blank_subject_has_five_units(self):
        s = Subject.blank()
        assert [u.number for u in s.units] == [1, 2, 3, 4, 5]
        assert s.course_type == "theory"

    def test_contains_is_inclusive(self):
        sem = Semester.from_dict(SEMESTER_3)
        assert sem.contains(date(2025, 1, 6))
        assert sem.contains(date(2025, 5, 30))
        assert not sem.contains(date(2025, 5, 31))

    def test_missing_bound(self):
        sem = _semester(1, ["A"], start="2025-01-01")
        assert not sem.contains(date(2025, 3, 1))
        assert sem.in_window(date(2025, 3, 1))
        assert not sem.in_window(date(2024, 12, 31))


class TestResolveSemester:
    def test_current_contains_today(self, semesters):
        assert resolve_semester("current", semesters, date(2025, 8, 1)).semester_number == 4

    def test_current_falls_back_to_first(self, semesters):
        # Between semesters: first in list order, not the nearest one
        assert resolve_semester("current", semesters, date(2025, 6, 15)).semester_number == 3

    def test_current_empty(self):
        assert resolve_semester("current", [], IN_SEMESTER) is None

    def test_by_number(self, semesters):
        assert resolve_semester(4, semesters, IN_SEMESTER).semester_number == 4
        assert resolve_semester("3", semesters, IN_SEMESTER).semester_number == 3

    def test_unknown_number(self, semesters):
        assert resolve_semester("7", semesters, IN_SEMESTER) is None
        assert resolve_semester("latest", semesters, IN_SEMESTER) is None

    def test_overlap_uses_list_order(self):
        a = _semester(1, ["A"], start="2025-01-01", end="2025-06-30")
        b = _semester(2, ["B"], start="2025-03-01", end="2025-09-30")
        assert resolve_semester("current", [a, b], date(2025, 4, 1)) is a
        assert semester_for_date([b, a], date(2025, 4, 1)) is b

    def test_semester_for_date_has_no_fallback(self, semesters):
        assert semester_for_date(semesters, IN_SEMESTER).semester_number == 3
        assert semester_for_date(semesters, date(2025, 6, 15)) is None


class TestValidateRoster:
    def test_valid(self, semesters):
        assert validate_roster(semesters) == []

    def test_duplicate_codes_case_and_space_insensitive(self):
        sem = _semester(2, ["CS101", " cs101", "MA201", "ma201 "])
        violations = validate_roster([sem])
        assert len(violations) == 1
        v = violations[0]
        assert v.kind == "duplicate_code"
        assert v.codes == ["CS101", "MA201"]
        assert v.message == "Error in Semester 2: Duplicate subject codes: CS101, MA201"

    def test_empty_code_and_name(self):
        sem = _semester(5, ["", "EC501"], names=["Signals", " "])
        kinds = {(v.kind, v.subject_index) for v in validate_roster([sem])}
        assert kinds == {("empty_code", 0), ("empty_name", 1)}

    def test_empty_codes_are_not_duplicates(self):
        sem = _semester(1, ["", ""])
        assert all(v.kind != "duplicate_code" for v in validate_roster([sem]))

    def test_same_code_in_different_semesters(self):
        assert validate_roster([_semester(1, ["X1"]), _semester(2, ["X1"])]) == []

    def test_error_message_dedupes(self):
        sem = _semester(1, ["", ""])
        message = roster_error_message(validate_roster([sem]))
        assert message == "Error in Semester 1: All subjects must have a code"

    def test_validation_error_carries_violations(self):
        violations = validate_roster([_semester(1, ["A", "a"])])
        err = RosterValidationError(violations)
        assert isinstance(err, ValueError)
        assert err.violations == violations
        assert "Duplicate subject codes: A" in str(err)


class TestDuplicateField:
    def test_flags_other_subject(self):
        sem = _semester(1, ["CS101", "MA201"])
        assert is_duplicate_code(sem, 1, "cs101 ")
        assert not is_duplicate_code(sem, 0, "CS101")

    def test_empty_code_never_duplicate(self):
        sem = _semester(1, ["", "MA201"])
        assert not is_duplicate_code(sem, 1, "")

    def test_trailing_space_duplicate(self):
        assert validate_roster([_semester(1, ["uit101 ", "UIT101"])])[0].codes == ["UIT101"]
