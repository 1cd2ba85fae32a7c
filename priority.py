from __future__ import annotations
import math
from dataclasses import dataclass, field
from datetime import date
from typing import ClassVar, Dict, Iterable, List, Mapping, Optional, Union
from history import NEUTRAL, Adaptation
from models import Event, Subject
from timeutils import days_until

DEFAULT_PRIORITY = 5
DIFFICULTY_BONUS_THRESHOLD = 4
DIFFICULTY_BONUS = 0.2


def urgency_for(days_to_exam: Optional[int]) -> int:
    """Coarse urgency tier; obligations without a deadline sit in the lowest tier."""
    if days_to_exam is None:
        return 1
    if days_to_exam <= 3:
        return 20
    if days_to_exam <= 7:
        return 10
    if days_to_exam <= 14:
        return 5
    return 1


@dataclass(frozen=True)
class ExamObligation:
    """Study owed to an exam or oral test; has a deadline and a minutes budget."""
    kind: ClassVar[str] = "exam"
    event: Event
    subject: Optional[Subject] = None

    @property
    def id(self) -> str:
        return self.event.id

    @property
    def subject_id(self) -> str:
        return self.subject.id if self.subject else self.event.subject

    @property
    def title(self) -> str:
        return self.event.title

    @property
    def subject_name(self) -> str:
        return self.subject.name if self.subject else self.event.subject

    @property
    def difficulty(self) -> int:
        # subject difficulty is on a 1-10 scale, event difficulty on 1-5
        if self.subject:
            return self.subject.difficulty
        return self.event.difficulty * 2

    @property
    def priority(self) -> int:
        return self.subject.priority if self.subject else DEFAULT_PRIORITY

    @property
    def target_date(self) -> Optional[date]:
        return self.event.target_date

    def days_to_exam(self, as_of: date) -> Optional[int]:
        return days_until(self.event.target_date, as_of)

    def required_minutes(self) -> Optional[int]:
        minutes = int(round(self.event.estimated_study_hours * 60))
        if self.event.difficulty >= DIFFICULTY_BONUS_THRESHOLD:
            minutes += math.ceil(minutes * DIFFICULTY_BONUS)
        return minutes


@dataclass(frozen=True)
class SubjectObligation:
    """Open-ended review of a subject with no pending exam."""
    kind: ClassVar[str] = "subject"
    subject: Subject

    @property
    def id(self) -> str:
        return f"subject:{self.subject.id}"

    @property
    def subject_id(self) -> str:
        return self.subject.id

    @property
    def title(self) -> str:
        return self.subject.name

    @property
    def subject_name(self) -> str:
        return self.subject.name

    @property
    def difficulty(self) -> int:
        return self.subject.difficulty

    @property
    def priority(self) -> int:
        return self.subject.priority

    @property
    def target_date(self) -> Optional[date]:
        return None

    def days_to_exam(self, as_of: date) -> Optional[int]:
        return None

    def required_minutes(self) -> Optional[int]:
        return None


Obligation = Union[ExamObligation, SubjectObligation]


@dataclass(frozen=True)
class RankedObligation:
    obligation: Obligation
    days_to_exam: Optional[int]
    urgency: int
    adapted_priority: float
    adaptation: Adaptation = field(default=NEUTRAL)

    @property
    def priority_score(self) -> float:
        return float(self.obligation.priority + self.urgency)


def _match_subject(event: Event, subjects: List[Subject]) -> Optional[Subject]:
    key = event.subject.strip().lower()
    for s in subjects:
        if s.id == event.subject or s.name.strip().lower() == key:
            return s
    return None


def derive_obligations(
    events: Iterable[Event],
    subjects: Iterable[Subject],
    include_subject_review: bool = False,
) -> List[Obligation]:
    """
    Only exams and orals owe study time. With subject review enabled, every
    subject that has no pending exam also gets an open-ended obligation.
    """
    subjects = list(subjects)
    out: List[Obligation] = []
    covered = set()
    for ev in events:
        if not ev.is_study_event or ev.completed:
            continue
        subject = _match_subject(ev, subjects)
        out.append(ExamObligation(event=ev, subject=subject))
        if subject:
            covered.add(subject.id)

    if include_subject_review:
        for s in subjects:
            if s.id not in covered:
                out.append(SubjectObligation(subject=s))
    return out


def _sort_key(r: RankedObligation):
    days = r.days_to_exam if r.days_to_exam is not None else math.inf
    return (-r.urgency, -r.adapted_priority, -r.obligation.difficulty, days, r.obligation.id)


def rank_obligations(
    obligations: Iterable[Obligation],
    as_of: date,
    adaptations: Optional[Mapping[str, Adaptation]] = None,
) -> List[RankedObligation]:
    """
    Two-tier ordering: urgency tier first, then priority weighted by
    historical efficiency. Difficulty, nearer deadline and id break any
    remaining ties so the order is fully deterministic.
    """
    adaptations = adaptations or {}
    ranked: List[RankedObligation] = []
    for ob in obligations:
        days = ob.days_to_exam(as_of)
        if days is not None and days <= 0:
            continue
        adaptation = adaptations.get(ob.subject_id, NEUTRAL)
        efficiency = min(2.0, max(0.0, adaptation.efficiency_score))
        ranked.append(RankedObligation(
            obligation=ob,
            days_to_exam=days,
            urgency=urgency_for(days),
            adapted_priority=ob.priority * (2 - efficiency),
            adaptation=adaptation,
        ))
    ranked.sort(key=_sort_key)
    return ranked


def rank(
    events: Iterable[Event],
    subjects: Iterable[Subject],
    as_of: date,
    adaptations: Optional[Dict[str, Adaptation]] = None,
    include_subject_review: bool = False,
) -> List[RankedObligation]:
    obligations = derive_obligations(events, subjects, include_subject_review)
    return rank_obligations(obligations, as_of, adaptations)
