"""Daily health metrics (weight, water, steps, calories) and their rolling averages."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import date
from fractions import Fraction
from typing import Optional

from attendance import round_half_up

HISTORY_DAYS = 7

_LEADING_INT = re.compile(r"\s*[+-]?\d+")


@dataclass
class HealthMetricEntry:
    user_id: int
    date: date
    morning_weight: str = ""
    glasses_of_water: str = ""
    steps: str = ""
    calories_burnt: str = ""
    updated_at: str = ""

    def to_dict(self) -> dict:
        return {
            "userId": self.user_id,
            "date": self.date.isoformat(),
            "morningWeight": self.morning_weight,
            "glassesOfWater": self.glasses_of_water,
            "steps": self.steps,
            "caloriesBurnt": self.calories_burnt,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, user_id: int, day: date, data: dict) -> HealthMetricEntry:
        def text(key: str) -> str:
            value = data.get(key)
            return "" if value is None else str(value)

        return cls(
            user_id=user_id,
            date=day,
            morning_weight=text("morningWeight"),
            glasses_of_water=text("glassesOfWater"),
            steps=text("steps"),
            calories_burnt=text("caloriesBurnt"),
            updated_at=data.get("updatedAt") or "",
        )


def _as_float(value: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def _as_int(value: str) -> int:
    # Leading integer digits only: "12abc" is 12, "1e3" is 1
    match = _LEADING_INT.match(value or "")
    if not match:
        return 0
    try:
        return int(match.group())
    except ValueError:
        # past the interpreter's int digit limit
        return 0


def recent_history(entries: list[HealthMetricEntry], limit: int = HISTORY_DAYS) -> list[HealthMetricEntry]:
    return sorted(entries, key=lambda e: e.date, reverse=True)[:limit]


def health_averages(history: list[HealthMetricEntry]) -> Optional[dict]:
    """Averages over the given history; None when there is nothing to average."""
    if not history:
        return None

    count = len(history)
    weight = sum(_as_float(e.morning_weight) for e in history)
    water = sum(_as_int(e.glasses_of_water) for e in history)
    steps = sum(_as_int(e.steps) for e in history)
    calories = sum(_as_int(e.calories_burnt) for e in history)

    return {
        "weight": f"{weight / count:.1f}",
        "water": round_half_up(Fraction(water, count)),
        "steps": round_half_up(Fraction(steps, count)),
        "calories": round_half_up(Fraction(calories, count)),
    }
