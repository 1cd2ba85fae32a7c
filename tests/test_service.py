"""Tests for planning from a record store and writing session outcomes back."""

import pytest

from builders import MONDAY, exam, records, subject
from models import AppState, PlannerSettings
from record_store import InMemoryRecordStore, load_snapshot
from service import (
    PlanCache,
    plan_for_store,
    record_session_outcome,
    skip_session,
    snapshot_hash,
)


def _store():
    return InMemoryRecordStore(AppState(
        subjects=[subject("math", "Math")],
        events=[exam("e1", "Math", days=10)],
        settings=PlannerSettings(horizon_days=3),
    ))


def test_plan_for_store_uses_stored_settings():
    result = plan_for_store(_store(), MONDAY)
    assert len(result.plans) == 3
    assert result.plans[0].study_sessions[0].subject_id == "math"


def test_plan_for_store_with_empty_store():
    result = plan_for_store(InMemoryRecordStore(), MONDAY)
    assert result.plans == []


def test_record_session_outcome_appends_history():
    store = _store()
    session = plan_for_store(store, MONDAY).plans[0].study_sessions[0]

    record = record_session_outcome(store, session, actual_minutes=52, productivity_rating=7, difficulty_rating=4)
    assert record.subject_id == "math"
    assert record.planned_minutes == session.duration_minutes
    assert record.actual_minutes == 52
    assert record.date == MONDAY
    assert record.completed
    assert store.state.history == [record]


def test_skipped_session_is_recorded_as_incomplete():
    store = _store()
    session = plan_for_store(store, MONDAY).plans[0].study_sessions[0]
    record = skip_session(store, session)
    assert not record.completed
    assert record.actual_minutes == 0


def test_only_study_sessions_can_be_recorded():
    store = _store()
    settings = PlannerSettings(horizon_days=1)
    store.state.events = [exam("e1", "Math", days=2)]
    plan = plan_for_store(store, MONDAY, settings=settings).plans[0]
    review = [e for e in plan.sessions if e.kind == "review"][0]
    with pytest.raises(ValueError):
        record_session_outcome(store, review, actual_minutes=15)
    with pytest.raises(ValueError):
        record_session_outcome(store, plan.study_sessions[0], actual_minutes=-1)


def test_history_feeds_the_next_plan():
    store = _store()
    for r in records("math", 5, planned=100, actual=130, productivity=3):
        store.append_history(r)
    session = plan_for_store(store, MONDAY).plans[0].study_sessions[0]
    assert session.duration_minutes == 57
    assert session.is_adapted


def test_plan_cache_replaces_results_when_inputs_change():
    store = _store()
    cache = PlanCache()

    snapshot = load_snapshot(store, MONDAY)
    first = cache.get_or_plan("alice", snapshot, MONDAY)
    assert cache.get_or_plan("alice", load_snapshot(store, MONDAY), MONDAY) is first
    assert len(cache) == 1

    store.append_history(records("math", 1, planned=45, actual=45, productivity=5)[0])
    changed = load_snapshot(store, MONDAY)
    assert snapshot_hash(changed) != snapshot_hash(snapshot)
    refreshed = cache.get_or_plan("alice", changed, MONDAY)
    assert refreshed is not first
    # the stale result for the same day and horizon is replaced, not kept
    assert len(cache) == 1
    assert cache.get_or_plan("alice", changed, MONDAY) is refreshed

    cache.get_or_plan("alice", changed, MONDAY, horizon_days=3)
    cache.get_or_plan("bob", changed, MONDAY)
    assert len(cache) == 3

    cache.invalidate("alice")
    assert len(cache) == 1
