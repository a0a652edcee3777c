"""
Daily schedule helpers shared by light, CO2 generator, doser and feeder.
"""

from .constants import HOURS_PER_DAY
from .data_types import DailySchedule


def is_schedule_active(hour_of_day: int, schedule: DailySchedule) -> bool:
    """
    Check whether hour_of_day falls in the schedule's on-window.

    The window is [start, start + duration) modulo 24, so a schedule
    starting at 22 with duration 4 is active at 22, 23, 0 and 1. A duration
    of 0 is never active; 24 is always active.
    """
    if schedule.duration <= 0:
        return False
    if schedule.duration >= HOURS_PER_DAY:
        return True

    end_hour = (schedule.start_hour + schedule.duration) % HOURS_PER_DAY
    if end_hour <= schedule.start_hour:
        # Wraps past midnight
        return hour_of_day >= schedule.start_hour or hour_of_day < end_hour
    return schedule.start_hour <= hour_of_day < end_hour


def is_valid_schedule(schedule: DailySchedule) -> bool:
    return (
        isinstance(schedule.start_hour, int)
        and 0 <= schedule.start_hour <= 23
        and 0 <= schedule.duration <= HOURS_PER_DAY
    )


def format_schedule(schedule: DailySchedule) -> str:
    """Human-readable window, e.g. '8:00 - 18:00 (10h)'"""
    end_hour = (schedule.start_hour + schedule.duration) % HOURS_PER_DAY
    return f"{schedule.start_hour}:00 - {end_hour}:00 ({schedule.duration}h)"
