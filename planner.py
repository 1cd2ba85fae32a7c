from __future__ import annotations
import logging
from dataclasses import dataclass, field, replace
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional
from allocator import allocate_day, day_window
from commitments import WeeklyCommitments
from history import adaptations_by_subject
from models import DailyPlan, Event, HistoricalRecord, PlannerSettings, Subject
from priority import (
    ExamObligation,
    Obligation,
    RankedObligation,
    derive_obligations,
    rank_obligations,
)
from timeutils import days_until

logger = logging.getLogger(__name__)

DEFAULT_HORIZON_DAYS = 7


@dataclass(frozen=True)
class Shortfall:
    obligation_id: str
    title: str
    target_date: date
    remaining_minutes: int
    days_left: int
    suggested_extra_minutes_per_day: int
    level: str


@dataclass
class PlanningResult:
    plans: List[DailyPlan] = field(default_factory=list)
    remaining_minutes: Dict[str, int] = field(default_factory=dict)
    shortfalls: List[Shortfall] = field(default_factory=list)

    @property
    def behind_schedule(self) -> bool:
        return bool(self.shortfalls)


def _horizon(
    horizon_days: Optional[int],
    settings: PlannerSettings,
    obligations: List[Obligation],
    from_date: date,
) -> int:
    if horizon_days is None:
        horizon_days = settings.horizon_days
    if horizon_days is None:
        # plan up to the furthest deadline; open-ended review alone gets a week
        targets = [ob.target_date for ob in obligations if ob.target_date is not None]
        if not targets:
            return DEFAULT_HORIZON_DAYS
        return max([days_until(t, from_date) for t in targets] + [0])
    if horizon_days < 0:
        raise ValueError("horizon_days cannot be negative.")
    return horizon_days


def _ranked_for_day(
    day: date,
    obligations: List[Obligation],
    initial: List[RankedObligation],
    adaptations,
    settings: PlannerSettings,
) -> List[RankedObligation]:
    if settings.rerank_daily:
        return rank_obligations(obligations, day, adaptations)

    # fixed order from the first day, with deadlines counted from today
    out: List[RankedObligation] = []
    for r in initial:
        days = r.obligation.days_to_exam(day)
        if days is not None and days <= 0:
            continue
        out.append(replace(r, days_to_exam=days))
    return out


def _shortfall_level(remaining: int) -> str:
    if remaining >= 240:
        return "HIGH"
    if remaining >= 90:
        return "MED"
    return "LOW"


def build_shortfalls(
    obligations: Iterable[Obligation],
    remaining: Dict[str, int],
    from_date: date,
    horizon_end: date,
) -> List[Shortfall]:
    """Obligations whose deadline falls inside the horizon but still owe minutes."""
    out: List[Shortfall] = []
    for ob in obligations:
        left = remaining.get(ob.id, 0)
        if left <= 0 or ob.target_date is None:
            continue
        if not from_date < ob.target_date <= horizon_end:
            continue
        days_left = max(1, days_until(ob.target_date, from_date))
        out.append(Shortfall(
            obligation_id=ob.id,
            title=ob.title,
            target_date=ob.target_date,
            remaining_minutes=left,
            days_left=days_left,
            suggested_extra_minutes_per_day=int(round(left / days_left)),
            level=_shortfall_level(left),
        ))
    out.sort(key=lambda s: (-s.remaining_minutes, s.target_date, s.obligation_id))
    return out


def plan_with_report(
    events: Iterable[Event],
    subjects: Iterable[Subject],
    commitments: Optional[WeeklyCommitments] = None,
    history: Iterable[HistoricalRecord] = (),
    from_date: Optional[date] = None,
    horizon_days: Optional[int] = None,
    settings: Optional[PlannerSettings] = None,
) -> PlanningResult:
    """
    Plan study sessions day by day from ``from_date``.

    Each exam or oral owes ``estimated_study_hours`` (plus 20% when its
    difficulty is 4 or more); the owed minutes are drawn down as sessions are
    placed and an obligation stops receiving time once it reaches zero.
    Minutes still owed at a deadline inside the horizon are reported as
    shortfalls rather than raised.

    Raises ParseError for malformed commitment or event times.
    """
    if from_date is None:
        raise ValueError("from_date is required; the planner never reads the clock.")
    settings = settings or PlannerSettings()
    commitments = commitments or WeeklyCommitments()
    events = list(events)
    subjects = list(subjects)

    commitments.validate(events)

    obligations = derive_obligations(events, subjects, settings.include_subject_review)
    adaptations = adaptations_by_subject(
        {ob.subject_id for ob in obligations},
        history,
        from_date,
        settings.history_window_days,
    )
    initial = rank_obligations(obligations, from_date, adaptations)
    if not initial:
        logger.info("No pending study obligations as of %s; nothing to plan.", from_date)
        return PlanningResult()

    # exams due today or earlier are no longer owed anything
    remaining: Dict[str, int] = {
        ob.id: ob.required_minutes()
        for ob in obligations
        if isinstance(ob, ExamObligation) and ob.days_to_exam(from_date) > 0
    }
    num_days = _horizon(horizon_days, settings, obligations, from_date)

    plans: List[DailyPlan] = []
    for offset in range(num_days):
        day = from_date + timedelta(days=offset)
        active = [ob for ob in obligations if ob.id not in remaining or remaining[ob.id] > 0]
        ranked = _ranked_for_day(day, active, initial, adaptations, settings)
        ranked = [r for r in ranked if r.obligation.id not in remaining or remaining[r.obligation.id] > 0]
        if not ranked:
            logger.debug("No obligations left after %s", day - timedelta(days=1))
            break

        school_end = commitments.school_end(day)
        window = day_window(day, settings, school_end)
        daily = allocate_day(
            day,
            ranked,
            commitments.blocks_for(day, events),
            window.start,
            window.end,
            window.max_minutes,
            remaining=remaining,
            max_subjects=settings.max_subjects_per_day,
            school_end=school_end,
        )
        if daily.study_sessions:
            plans.append(daily)
        logger.debug("%s: %d study minutes placed", day, daily.total_study_minutes)

    horizon_end = from_date + timedelta(days=num_days)
    shortfalls = build_shortfalls(obligations, remaining, from_date, horizon_end)
    for s in shortfalls:
        logger.info(
            "Behind schedule on %s: %d minutes still needed before %s.",
            s.title, s.remaining_minutes, s.target_date,
        )

    return PlanningResult(plans=plans, remaining_minutes=dict(remaining), shortfalls=shortfalls)


def plan(
    events: Iterable[Event],
    subjects: Iterable[Subject],
    commitments: Optional[WeeklyCommitments] = None,
    history: Iterable[HistoricalRecord] = (),
    from_date: Optional[date] = None,
    horizon_days: Optional[int] = None,
    settings: Optional[PlannerSettings] = None,
) -> List[DailyPlan]:
    return plan_with_report(events, subjects, commitments, history, from_date, horizon_days, settings).plans


def plan_for_day(plans: Iterable[DailyPlan], day: date) -> Optional[DailyPlan]:
    for p in plans:
        if p.date == day:
            return p
    return None


def plan_stats(plans: List[DailyPlan]) -> dict:
    total_minutes = sum(p.total_study_minutes for p in plans)
    sessions = sum(len(p.study_sessions) for p in plans)
    return {
        "total_days": len(plans),
        "total_sessions": sessions,
        "total_minutes": total_minutes,
        "total_hours": round(total_minutes / 60, 1),
        "avg_minutes_per_day": round(total_minutes / len(plans), 1) if plans else 0.0,
    }
