from __future__ import annotations
import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from pathlib import Path
from typing import List, Optional, Protocol
from commitments import WeeklyCommitments
from models import AppState, Event, HistoricalRecord, PlannerSettings, Subject
from profiles import ProfileRepository

logger = logging.getLogger(__name__)


class RecordStore(Protocol):
    """
    Read side: everything the planner needs, as of one moment. Write side:
    append-only session history. The planner itself never writes.
    """

    def events(self) -> List[Event]: ...

    def subjects(self) -> List[Subject]: ...

    def commitments(self) -> WeeklyCommitments: ...

    def history_since(self, since: date) -> List[HistoricalRecord]: ...

    def settings(self) -> PlannerSettings: ...

    def append_history(self, record: HistoricalRecord) -> None: ...


@dataclass
class PlanningSnapshot:
    events: List[Event] = field(default_factory=list)
    subjects: List[Subject] = field(default_factory=list)
    commitments: WeeklyCommitments = field(default_factory=WeeklyCommitments)
    history: List[HistoricalRecord] = field(default_factory=list)
    settings: PlannerSettings = field(default_factory=PlannerSettings)


def load_snapshot(store: RecordStore, as_of: date, settings: Optional[PlannerSettings] = None) -> PlanningSnapshot:
    settings = settings or store.settings()
    since = as_of - timedelta(days=settings.history_window_days)
    return PlanningSnapshot(
        events=store.events(),
        subjects=store.subjects(),
        commitments=store.commitments(),
        history=store.history_since(since),
        settings=settings,
    )


class InMemoryRecordStore:
    """RecordStore over an AppState already held by the caller."""

    def __init__(self, state: Optional[AppState] = None):
        self.state = state or AppState()

    def events(self) -> List[Event]:
        return list(self.state.events)

    def subjects(self) -> List[Subject]:
        return list(self.state.subjects)

    def commitments(self) -> WeeklyCommitments:
        return WeeklyCommitments.build(
            self.state.activities,
            self.state.school_periods,
            self.state.commute,
        )

    def history_since(self, since: date) -> List[HistoricalRecord]:
        return [r for r in self.state.history if r.date >= since]

    def settings(self) -> PlannerSettings:
        return self.state.settings

    def append_history(self, record: HistoricalRecord) -> None:
        self.state.history.append(record)


class ProfileRecordStore(InMemoryRecordStore):
    """RecordStore persisted as one JSON state file per profile."""

    def __init__(self, profile: str = "default", base_dir: Optional[Path] = None):
        self.profile = profile
        self.repo = ProfileRepository(base_dir)
        super().__init__(self.repo.load(profile))

    def reload(self) -> None:
        self.state = self.repo.load(self.profile)

    def save(self) -> None:
        self.repo.save(self.profile, self.state)

    def append_history(self, record: HistoricalRecord) -> None:
        super().append_history(record)
        self.save()
        logger.debug("Appended history for %s on %s to profile %s", record.subject_id, record.date, self.profile)
