"""Semester / subject roster: dataclasses, validation and active-semester lookup."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional, Union

COURSE_TYPES = ("theory", "tcp", "practical")
DEFAULT_UNIT_COUNT = 5


@dataclass
class Unit:
    number: int
    name: str = ""


@dataclass
class Subject:
    code: str
    name: str
    faculty_initials: str = ""
    course_type: str = "theory"  # theory | tcp | practical
    units: list[Unit] = field(default_factory=list)

    @property
    def normalized_code(self) -> str:
        return (self.code or "").strip().upper()

    @staticmethod
    def blank() -> Subject:
        return Subject(
            code="",
            name="",
            units=[Unit(number=n) for n in range(1, DEFAULT_UNIT_COUNT + 1)],
        )

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "name": self.name,
            "facultyInitials": self.faculty_initials,
            "courseType": self.course_type,
            "units": [{"number": u.number, "name": u.name} for u in self.units],
        }

    @classmethod
    def from_dict(cls, data: dict) -> Subject:
        course_type = data.get("courseType") or data.get("course_type") or "theory"
        if course_type not in COURSE_TYPES:
            raise ValueError(f"Unknown course type: {course_type!r}")
        units = []
        for u in data.get("units") or []:
            try:
                number = int(u.get("number"))
            except (TypeError, ValueError):
                raise ValueError(f"Invalid unit number: {u.get('number')!r}")
            units.append(Unit(number=number, name=u.get("name") or ""))
        return cls(
            code=data.get("code") or "",
            name=data.get("name") or "",
            faculty_initials=data.get("facultyInitials") or data.get("faculty_initials") or "",
            course_type=course_type,
            units=units,
        )


@dataclass
class Semester:
    semester_number: int
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    subjects: list[Subject] = field(default_factory=list)

    def contains(self, day: date) -> bool:
        """Inclusive window check; False when either bound is unset."""
        if self.start_date is None or self.end_date is None:
            return False
        return self.start_date <= day <= self.end_date

    def in_window(self, day: date) -> bool:
        """Aggregation window check: a missing bound does not filter."""
        if self.start_date is not None and day < self.start_date:
            return False
        if self.end_date is not None and day > self.end_date:
            return False
        return True

    def subject(self, code: str) -> Optional[Subject]:
        for s in self.subjects:
            if s.code == code:
                return s
        return None

    def to_dict(self) -> dict:
        return {
            "semesterNumber": self.semester_number,
            "startDate": self.start_date.isoformat() if self.start_date else "",
            "endDate": self.end_date.isoformat() if self.end_date else "",
            "subjects": [s.to_dict() for s in self.subjects],
        }

    @classmethod
    def from_dict(cls, data: dict) -> Semester:
        raw_number = data.get("semesterNumber", data.get("semester_number"))
        try:
            number = int(raw_number)
        except (TypeError, ValueError):
            raise ValueError(f"Invalid semester number: {raw_number!r}")
        if not 1 <= number <= 8:
            raise ValueError(f"Semester number must be between 1 and 8, got {number}")
        return cls(
            semester_number=number,
            start_date=_parse_date(data.get("startDate", data.get("start_date"))),
            end_date=_parse_date(data.get("endDate", data.get("end_date"))),
            subjects=[Subject.from_dict(s) for s in data.get("subjects") or []],
        )


def _parse_date(value) -> Optional[date]:
    if not value:
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise ValueError(f"Invalid date: {value!r}")


# ── Active semester ─────────────────────────────────────────────────


def resolve_semester(
    selector: Union[str, int],
    semesters: list[Semester],
    today: date,
) -> Optional[Semester]:
    """Pick the semester for the attendance view.

    "current" returns the first semester containing ``today``, falling back to
    the first semester in list order (not the nearest one). A number selects by
    semester_number.
    """
    if selector == "current":
        for sem in semesters:
            if sem.contains(today):
                return sem
        return semesters[0] if semesters else None

    try:
        number = int(selector)
    except (TypeError, ValueError):
        return None
    for sem in semesters:
        if sem.semester_number == number:
            return sem
    return None


def semester_for_date(semesters: list[Semester], day: date) -> Optional[Semester]:
    """Semester active on ``day`` for the daily tracker. No fallback."""
    for sem in semesters:
        if sem.contains(day):
            return sem
    return None


# ── Validation ──────────────────────────────────────────────────────


@dataclass
class RosterViolation:
    semester_number: int
    kind: str  # duplicate_code | empty_code | empty_name
    message: str
    codes: list[str] = field(default_factory=list)
    subject_index: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "semesterNumber": self.semester_number,
            "kind": self.kind,
            "message": self.message,
            "codes": self.codes,
            "subjectIndex": self.subject_index,
        }


class RosterValidationError(ValueError):
    """Raised when persisting a roster that still has violations."""

    def __init__(self, violations: list[RosterViolation]):
        self.violations = violations
        super().__init__(roster_error_message(violations))


def _duplicate_codes(semester: Semester) -> list[str]:
    seen: set[str] = set()
    duplicates: list[str] = []
    for s in semester.subjects:
        code = s.normalized_code
        if not code:
            continue
        if code in seen and code not in duplicates:
            duplicates.append(code)
        seen.add(code)
    return duplicates


def validate_roster(semesters: list[Semester]) -> list[RosterViolation]:
    violations: list[RosterViolation] = []
    for sem in semesters:
        duplicates = _duplicate_codes(sem)
        if duplicates:
            violations.append(RosterViolation(
                semester_number=sem.semester_number,
                kind="duplicate_code",
                message=f"Error in Semester {sem.semester_number}: "
                        f"Duplicate subject codes: {', '.join(duplicates)}",
                codes=duplicates,
            ))

        for idx, s in enumerate(sem.subjects):
            if not (s.code or "").strip():
                violations.append(RosterViolation(
                    semester_number=sem.semester_number,
                    kind="empty_code",
                    message=f"Error in Semester {sem.semester_number}: All subjects must have a code",
                    subject_index=idx,
                ))
            if not (s.name or "").strip():
                violations.append(RosterViolation(
                    semester_number=sem.semester_number,
                    kind="empty_name",
                    message=f"Error in Semester {sem.semester_number}: All subjects must have a name",
                    subject_index=idx,
                ))
    return violations


def is_duplicate_code(semester: Semester, subject_index: int, code: str) -> bool:
    """Live per-field check: does ``code`` clash with another subject in the semester?"""
    normalized = (code or "").strip().upper()
    if not normalized:
        return False
    return any(
        idx != subject_index and s.normalized_code == normalized
        for idx, s in enumerate(semester.subjects)
    )


def roster_error_message(violations: list[RosterViolation]) -> str:
    """Aggregate message for a refused save; one line per distinct message."""
    lines: list[str] = []
    for v in violations:
        if v.message not in lines:
            lines.append(v.message)
    return "\n".join(lines)
