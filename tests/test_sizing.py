"""Tests for session length rules."""

import pytest

from builders import MONDAY, SATURDAY, SUNDAY, exam, subject
from priority import ExamObligation
from sizing import (
    base_minutes,
    break_minutes,
    fits,
    priority_label,
    size_session,
    study_type_label,
)


def _ob(difficulty=5):
    return ExamObligation(event=exam("e1"), subject=subject("Math", difficulty=difficulty))


@pytest.mark.parametrize("days,difficulty,day,expected", [
    (2, 9, SATURDAY, 90),   # deadline rule wins over difficulty and weekend
    (3, 5, MONDAY, 90),
    (4, 5, MONDAY, 75),
    (7, 9, SUNDAY, 75),
    (10, 8, MONDAY, 60),
    (10, 8, SATURDAY, 60),
    (10, 5, SATURDAY, 30),
    (10, 5, SUNDAY, 30),
    (10, 5, MONDAY, 45),
    (None, 5, MONDAY, 45),
])
def test_base_minutes(days, difficulty, day, expected):
    assert base_minutes(_ob(difficulty), days, day) == expected


def test_adaptation_factor_scales_and_rounds():
    assert size_session(_ob(), 10, MONDAY, 1.265) == 57
    assert size_session(_ob(), 2, MONDAY, 0.9) == 81


def test_clamped_to_budget_and_free_time():
    assert size_session(_ob(), 2, MONDAY, remaining_budget=30) == 30
    assert size_session(_ob(), 2, MONDAY, remaining_budget=200, remaining_time=40) == 40
    short = size_session(_ob(), 2, MONDAY, remaining_time=20)
    assert short == 20
    assert not fits(short)
    assert fits(25)
    assert size_session(_ob(), 2, MONDAY, remaining_time=-5) == 0


@pytest.mark.parametrize("minutes,expected", [(90, 20), (114, 20), (75, 15), (60, 15), (59, 10), (30, 10)])
def test_break_minutes(minutes, expected):
    assert break_minutes(minutes) == expected


def test_labels():
    assert study_type_label(_ob(), 2) == "intensive"
    assert study_type_label(_ob(), 6) == "preparation"
    assert study_type_label(_ob(7), 12) == "exercises"
    assert study_type_label(_ob(3), 12) == "review"
    assert priority_label(1) == "high"
    assert priority_label(5) == "medium"
    assert priority_label(None) == "low"
