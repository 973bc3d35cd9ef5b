"""Time-of-day and day-of-week load multiplier.

Scales simulated latency to emulate server load: slower during business
hours and the lunch spike, faster at night and on weekends. Factors are
multiplied together, so their order does not matter.
"""

from __future__ import annotations

from datetime import datetime

WEEKEND_FACTOR = 0.7
BUSINESS_HOURS_FACTOR = 1.3
LUNCH_FACTOR = 1.2
LATE_NIGHT_FACTOR = 0.8

BUSINESS_HOURS = range(9, 19)  # 09:00-18:59
LUNCH_HOURS = range(12, 15)  # 12:00-14:59

SEASONAL_MULTIPLIER_MIN = WEEKEND_FACTOR * LATE_NIGHT_FACTOR
SEASONAL_MULTIPLIER_MAX = BUSINESS_HOURS_FACTOR * LUNCH_FACTOR


def _is_late_night(hour: int) -> bool:
    return hour >= 23 or hour <= 6


def seasonal_multiplier(now: datetime) -> float:
    """Compute the load multiplier for a wall-clock instant."""
    multiplier = 1.0
    if now.weekday() >= 5:
        multiplier *= WEEKEND_FACTOR
    if now.hour in BUSINESS_HOURS:
        multiplier *= BUSINESS_HOURS_FACTOR
    if now.hour in LUNCH_HOURS:
        multiplier *= LUNCH_FACTOR
    if _is_late_night(now.hour):
        multiplier *= LATE_NIGHT_FACTOR
    return multiplier
