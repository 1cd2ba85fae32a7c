from __future__ import annotations
from datetime import date
from typing import Optional
from priority import Obligation
from timeutils import is_weekend

MIN_SESSION_MINUTES = 25
INTENSIVE_MINUTES = 90
PREPARATION_MINUTES = 75
HARD_SUBJECT_MINUTES = 60
DEFAULT_MINUTES = 45
WEEKEND_REDUCTION = 15
WEEKEND_FLOOR = 30
HARD_SUBJECT_DIFFICULTY = 8


def base_minutes(obligation: Obligation, days_to_exam: Optional[int], day: date) -> int:
    # first matching rule wins
    if days_to_exam is not None and days_to_exam <= 3:
        return INTENSIVE_MINUTES
    if days_to_exam is not None and days_to_exam <= 7:
        return PREPARATION_MINUTES
    if obligation.difficulty >= HARD_SUBJECT_DIFFICULTY:
        return HARD_SUBJECT_MINUTES
    if is_weekend(day):
        return max(WEEKEND_FLOOR, DEFAULT_MINUTES - WEEKEND_REDUCTION)
    return DEFAULT_MINUTES


def size_session(
    obligation: Obligation,
    days_to_exam: Optional[int],
    day: date,
    adaptation_factor: float = 1.0,
    remaining_budget: Optional[int] = None,
    remaining_time: Optional[int] = None,
) -> int:
    """
    Session length in minutes: the base rule scaled by the adaptation factor,
    then cut to whatever budget and free time are left. A result below
    MIN_SESSION_MINUTES means the session does not fit today.
    """
    minutes = int(round(base_minutes(obligation, days_to_exam, day) * adaptation_factor))
    if remaining_budget is not None:
        minutes = min(minutes, remaining_budget)
    if remaining_time is not None:
        minutes = min(minutes, remaining_time)
    return max(0, minutes)


def fits(minutes: int) -> bool:
    return minutes >= MIN_SESSION_MINUTES


def break_minutes(session_minutes: int) -> int:
    if session_minutes >= 90:
        return 20
    if session_minutes >= 60:
        return 15
    return 10


def study_type_label(obligation: Obligation, days_to_exam: Optional[int]) -> str:
    if days_to_exam is not None and days_to_exam <= 3:
        return "intensive"
    if days_to_exam is not None and days_to_exam <= 7:
        return "preparation"
    if obligation.difficulty >= 7:
        return "exercises"
    return "review"


def priority_label(days_to_exam: Optional[int]) -> str:
    if days_to_exam is not None and days_to_exam <= 3:
        return "high"
    if days_to_exam is not None and days_to_exam <= 7:
        return "medium"
    return "low"
