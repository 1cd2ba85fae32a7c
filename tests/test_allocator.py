"""Tests for filling a single day around fixed blocks."""

from datetime import time

import pytest

from allocator import allocate_day, day_window, should_show_break
from builders import MONDAY, SATURDAY, SUNDAY, activity, exam, subject
from commitments import activity_block
from models import PlannerSettings
from priority import rank


def _hm(entry):
    return (entry.start_time.strftime("%H:%M"), entry.end_time.strftime("%H:%M"))


def _assert_no_overlap(plan):
    entries = sorted(plan.sessions, key=lambda e: e.start_time)
    for a, b in zip(entries, entries[1:]):
        assert a.end_time <= b.start_time, f"{a.id} overlaps {b.id}"


def _exams(count, days, from_date=MONDAY):
    subjects = [subject(f"S{i}", priority=10 - i) for i in range(count)]
    events = [exam(f"e{i}", f"S{i}", days=days, from_date=from_date) for i in range(count)]
    return rank(events, subjects, from_date)


@pytest.mark.parametrize("index,cumulative,duration,expected", [
    (1, 45, 45, False),
    (2, 90, 45, True),
    (1, 90, 90, False),
    (3, 225, 75, False),
    (3, 240, 60, True),
    (1, 125, 125, True),
    (1, 0, 0, False),
])
def test_should_show_break(index, cumulative, duration, expected):
    assert should_show_break(index, cumulative, duration) is expected


def test_day_windows():
    settings = PlannerSettings()
    weekday = day_window(MONDAY, settings)
    assert (weekday.start, weekday.end, weekday.max_minutes) == (15 * 60, 20 * 60 + 30, 240)

    after_school = day_window(MONDAY, settings, school_end=13 * 60)
    assert after_school.start == 14 * 60 + 30

    saturday = day_window(SATURDAY, settings, school_end=12 * 60)
    assert (saturday.start, saturday.end, saturday.max_minutes) == (10 * 60, 18 * 60, 240)

    sunday = day_window(SUNDAY, settings)
    assert (sunday.start, sunday.end, sunday.max_minutes) == (10 * 60, 18 * 60, 180)


def test_saturday_routes_around_calcio():
    block = activity_block(activity())
    assert (block.start, block.end) == (17 * 60, 18 * 60 + 30)

    window = day_window(SATURDAY, PlannerSettings())
    plan = allocate_day(SATURDAY, _exams(4, 5, SATURDAY), [block], window.start, window.end, window.max_minutes)

    study = plan.study_sessions
    assert [_hm(s) for s in study] == [("10:00", "11:15"), ("11:30", "12:45"), ("13:00", "14:15")]
    assert [s.duration_minutes for s in study] == [75, 75, 75]
    assert plan.total_study_minutes == 225

    kinds = [(e.kind, _hm(e)) for e in plan.sessions]
    assert kinds == [
        ("study", ("10:00", "11:15")),
        ("study", ("11:30", "12:45")),
        ("break", ("12:45", "13:00")),
        ("study", ("13:00", "14:15")),
        ("review", ("14:30", "14:45")),
        ("fixed", ("17:00", "18:30")),
    ]
    for s in study:
        assert not block.overlaps(s.start_time.hour * 60 + s.start_time.minute,
                                  s.end_time.hour * 60 + s.end_time.minute)
        assert s.end_time <= time(18, 0)
    _assert_no_overlap(plan)


def test_gap_too_short_jumps_past_block():
    block = activity_block(activity("Piano", day_of_week=0, start="16:00", duration=60, buffer=0))
    window = day_window(MONDAY, PlannerSettings())
    plan = allocate_day(MONDAY, _exams(2, 10), [block], window.start, window.end, window.max_minutes)

    assert [_hm(s) for s in plan.study_sessions] == [("15:00", "15:45"), ("17:00", "17:45")]
    breaks = [e for e in plan.sessions if e.kind == "break"]
    assert [_hm(b) for b in breaks] == [("17:45", "17:55")]
    review = [e for e in plan.sessions if e.kind == "review"]
    assert [_hm(r) for r in review] == [("17:55", "18:10")]
    _assert_no_overlap(plan)


def test_session_is_cut_at_block_start_and_break_hidden():
    block = activity_block(activity("Piano", day_of_week=0, start="16:40", duration=60, buffer=0))
    window = day_window(MONDAY, PlannerSettings())
    plan = allocate_day(MONDAY, _exams(2, 10), [block], window.start, window.end, window.max_minutes)

    assert [_hm(s) for s in plan.study_sessions] == [("15:00", "15:45"), ("15:55", "16:40")]
    # the listed break would have run into the block
    assert not [e for e in plan.sessions if e.kind == "break"]
    assert [_hm(e) for e in plan.sessions if e.kind == "review"] == [("17:50", "18:05")]
    _assert_no_overlap(plan)


def test_daily_budget_caps_study_minutes():
    window = day_window(MONDAY, PlannerSettings())
    plan = allocate_day(MONDAY, _exams(6, 2), [], window.start, window.end, window.max_minutes)

    assert [s.duration_minutes for s in plan.study_sessions] == [90, 90, 60]
    assert plan.total_study_minutes == 240
    assert [_hm(e) for e in plan.sessions if e.kind == "break"] == [("18:20", "18:40"), ("19:40", "19:55")]
    assert [_hm(e) for e in plan.sessions if e.kind == "review"] == [("19:55", "20:10")]
    for s in plan.study_sessions:
        assert s.duration_minutes >= 25
        assert s.start_time >= time(15, 0)
        assert s.end_time <= time(20, 30)
    _assert_no_overlap(plan)


def test_at_most_four_subjects_per_day():
    plan = allocate_day(MONDAY, _exams(6, 10), [], 8 * 60, 23 * 60, 1000)
    assert len(plan.study_sessions) == 4
    assert [s.subject_or_event_id for s in plan.study_sessions] == ["e0", "e1", "e2", "e3"]


def test_remaining_minutes_are_drawn_down():
    ranked = _exams(2, 10)
    remaining = {"e0": 0, "e1": 100}
    window = day_window(MONDAY, PlannerSettings())
    plan = allocate_day(MONDAY, ranked, [], window.start, window.end, window.max_minutes, remaining=remaining)

    assert [s.subject_or_event_id for s in plan.study_sessions] == ["e1"]
    assert remaining == {"e0": 0, "e1": 55}


def test_short_day_has_no_review():
    window = day_window(MONDAY, PlannerSettings())
    plan = allocate_day(MONDAY, _exams(1, 10), [], window.start, window.end, window.max_minutes)
    assert [e.kind for e in plan.sessions] == ["study"]
    session = plan.sessions[0]
    assert session.study_type == "review"
    assert session.priority_label == "low"
    assert session.days_to_exam == 10
    assert session.id == "2026-10-19-study-e0"
    assert plan.day_name == "Monday"


def test_empty_window_gives_empty_plan():
    plan = allocate_day(MONDAY, _exams(2, 10), [], 20 * 60 + 30, 20 * 60 + 30, 240)
    assert plan.sessions == []
    assert plan.total_study_minutes == 0
