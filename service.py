from __future__ import annotations
import hashlib
import json
import logging
from datetime import date
from typing import Dict, Optional, Tuple
from models import HistoricalRecord, PlannerSettings, StudySession
from planner import PlanningResult, plan_with_report
from record_store import PlanningSnapshot, RecordStore, load_snapshot

logger = logging.getLogger(__name__)


def snapshot_hash(snapshot: PlanningSnapshot) -> str:
    """SHA-256 over every planning input, used as a cache key component."""
    payload = {
        "events": [e.model_dump(mode="json") for e in snapshot.events],
        "subjects": [s.model_dump(mode="json") for s in snapshot.subjects],
        "activities": [a.model_dump(mode="json") for a in snapshot.commitments.activities],
        "school_periods": [p.model_dump(mode="json") for p in snapshot.commitments.school_periods],
        "commute": snapshot.commitments.commute.model_dump(mode="json") if snapshot.commitments.commute else None,
        "history": [h.model_dump(mode="json") for h in snapshot.history],
        "settings": snapshot.settings.model_dump(mode="json"),
    }
    raw = json.dumps(payload, sort_keys=True, ensure_ascii=False)
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


def plan_snapshot(
    snapshot: PlanningSnapshot,
    from_date: date,
    horizon_days: Optional[int] = None,
) -> PlanningResult:
    return plan_with_report(
        snapshot.events,
        snapshot.subjects,
        snapshot.commitments,
        snapshot.history,
        from_date=from_date,
        horizon_days=horizon_days,
        settings=snapshot.settings,
    )


class PlanCache:
    """
    Results keyed by (profile, from_date, horizon), each remembering the hash
    of the inputs it was planned from. Any write to the inputs changes the
    hash and the stale result is replaced; invalidate() drops a profile.
    """

    def __init__(self):
        self._entries: Dict[Tuple[str, date, Optional[int]], Tuple[str, PlanningResult]] = {}

    def get_or_plan(
        self,
        profile: str,
        snapshot: PlanningSnapshot,
        from_date: date,
        horizon_days: Optional[int] = None,
    ) -> PlanningResult:
        key = (profile, from_date, horizon_days)
        digest = snapshot_hash(snapshot)
        cached = self._entries.get(key)
        if cached is not None and cached[0] == digest:
            logger.debug("Plan cache hit for %s from %s", profile, from_date)
            return cached[1]
        result = plan_snapshot(snapshot, from_date, horizon_days)
        self._entries[key] = (digest, result)
        return result

    def invalidate(self, profile: str) -> None:
        for key in [k for k in self._entries if k[0] == profile]:
            del self._entries[key]

    def __len__(self) -> int:
        return len(self._entries)


def plan_for_store(
    store: RecordStore,
    from_date: date,
    horizon_days: Optional[int] = None,
    settings: Optional[PlannerSettings] = None,
) -> PlanningResult:
    snapshot = load_snapshot(store, from_date, settings)
    return plan_snapshot(snapshot, from_date, horizon_days)


def record_session_outcome(
    store: RecordStore,
    session: StudySession,
    actual_minutes: int,
    productivity_rating: Optional[int] = None,
    difficulty_rating: Optional[int] = None,
    completed: bool = True,
    on: Optional[date] = None,
) -> HistoricalRecord:
    """
    Turn a finished (or skipped) planned session into a history record and
    append it to the store. Only study entries tied to a subject qualify.
    """
    if session.kind != "study" or not session.subject_id:
        raise ValueError("Only study sessions with a subject can be recorded.")
    if actual_minutes < 0:
        raise ValueError("actual_minutes cannot be negative.")

    record = HistoricalRecord(
        subject_id=session.subject_id,
        date=on or session.date,
        planned_minutes=session.duration_minutes,
        actual_minutes=actual_minutes,
        productivity_rating=productivity_rating,
        difficulty_rating=difficulty_rating,
        completed=completed,
    )
    store.append_history(record)
    return record


def skip_session(store: RecordStore, session: StudySession, on: Optional[date] = None) -> HistoricalRecord:
    return record_session_outcome(store, session, actual_minutes=0, completed=False, on=on)
