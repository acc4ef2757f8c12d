"""Tests for health.py and reminders.py."""

import pytest
from datetime import date, timedelta

from health import HealthMetricEntry, health_averages, recent_history
from reminders import (
    Reminder,
    deadline_status,
    filter_reminders,
    parse_reminder_fields,
    reminder_counts,
)

TODAY = date(2025, 2, 12)


def _metrics(day, weight="", water="", steps="", calories=""):
    return HealthMetricEntry(
        user_id=1, date=day, morning_weight=weight, glasses_of_water=water,
        steps=steps, calories_burnt=calories,
    )


class TestHealth:
    def test_round_trip(self):
        entry = HealthMetricEntry.from_dict(1, TODAY, {"morningWeight": 61.5, "steps": "8000"})
        assert entry.morning_weight == "61.5"
        assert entry.glasses_of_water == ""
        assert entry.to_dict()["steps"] == "8000"

    def test_recent_history_newest_first(self):
        entries = [_metrics(TODAY - timedelta(days=d)) for d in range(10)]
        history = recent_history(list(reversed(entries)))
        assert len(history) == 7
        assert history[0].date == TODAY
        assert history[-1].date == TODAY - timedelta(days=6)

    def test_averages_empty(self):
        assert health_averages([]) is None

    def test_averages(self):
        history = [
            _metrics(TODAY, weight="60", water="8", steps="10000", calories="500"),
            _metrics(TODAY - timedelta(days=1), weight="61.5", water="7", steps="9001", calories="301"),
        ]
        assert health_averages(history) == {
            "weight": "60.8",
            "water": 8,
            "steps": 9501,
            "calories": 401,
        }

    def test_unparsable_values_count_as_zero(self):
        history = [
            _metrics(TODAY, weight="abc", water="", steps="4000", calories="n/a"),
            _metrics(TODAY - timedelta(days=1), weight="70", water="3", steps="", calories="200"),
        ]
        averages = health_averages(history)
        assert averages["weight"] == "35.0"
        assert averages["water"] == 2
        assert averages["steps"] == 2000
        assert averages["calories"] == 100

    def test_counts_use_leading_integer(self):
        history = [_metrics(TODAY, water="12abc", steps="1e3", calories=" -40kcal")]
        averages = health_averages(history)
        assert averages["water"] == 12
        assert averages["steps"] == 1
        assert averages["calories"] == -40

    @pytest.mark.parametrize("value,steps", [
        ("1e999", 501),
        ("inf", 500),
        ("-inf", 500),
        ("nan", 500),
        ("9" * 5000, 500),  # over the int digit limit
    ])
    def test_huge_or_non_finite_values(self, value, steps):
        history = [
            _metrics(TODAY, weight=value, water=value, steps=value, calories=value),
            _metrics(TODAY - timedelta(days=1), weight="60", water="4", steps="1000", calories="100"),
        ]
        averages = health_averages(history)
        assert averages["weight"] == "30.0"
        assert averages["steps"] == steps


class TestReminderFields:
    def test_parse(self):
        fields = parse_reminder_fields({
            "name": " Submit lab record ",
            "deadline": "2025-02-20",
            "duration": 2,
            "reminderPeriod": "3",
        })
        assert fields == {
            "name": "Submit lab record",
            "description": "",
            "duration": "2",
            "deadline": date(2025, 2, 20),
            "reminder_period": 3,
        }

    def test_name_required(self):
        with pytest.raises(ValueError, match="name"):
            parse_reminder_fields({"deadline": "2025-02-20"})

    @pytest.mark.parametrize("deadline", [None, "", "tomorrow"])
    def test_bad_deadline(self, deadline):
        with pytest.raises(ValueError, match="deadline"):
            parse_reminder_fields({"name": "X", "deadline": deadline})

    @pytest.mark.parametrize("period", [4, "soon", -1])
    def test_bad_period(self, period):
        with pytest.raises(ValueError):
            parse_reminder_fields({"name": "X", "deadline": "2025-02-20", "reminderPeriod": period})


class TestReminderStatus:
    def test_deadline_status(self):
        assert deadline_status(TODAY - timedelta(days=1), TODAY) == "overdue"
        assert deadline_status(TODAY, TODAY) == "today"
        assert deadline_status(TODAY + timedelta(days=1), TODAY) == "upcoming"

    def test_to_dict_status_only_with_today(self):
        r = Reminder(id="r1", user_id=1, name="Exam", deadline=TODAY)
        assert "status" not in r.to_dict()
        assert r.to_dict(TODAY)["status"] == "today"

    def test_filters_and_counts(self):
        reminders = [
            Reminder(id="a", user_id=1, name="A", deadline=TODAY),
            Reminder(id="b", user_id=1, name="B", deadline=TODAY, completed=True),
            Reminder(id="c", user_id=1, name="C", deadline=TODAY),
        ]
        assert [r.id for r in filter_reminders(reminders, "active")] == ["a", "c"]
        assert [r.id for r in filter_reminders(reminders, "completed")] == ["b"]
        assert len(filter_reminders(reminders)) == 3
        assert reminder_counts(reminders) == {"all": 3, "active": 2, "completed": 1}
