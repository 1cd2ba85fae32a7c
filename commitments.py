from __future__ import annotations
import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple
from errors import ParseError
from models import CommuteInfo, Event, RecurringActivity, SchoolPeriod
from timeutils import DAY_NAMES, MINUTES_PER_DAY, parse_hhmm

logger = logging.getLogger(__name__)

DEFAULT_EVENT_BLOCK_MINUTES = 60


@dataclass(frozen=True)
class FixedBlock:
    """An immovable interval on one day, in minutes after midnight."""
    title: str
    start: int
    end: int
    source: str  # "activity", "school", "commute" or "event"
    ref: str = ""

    @property
    def duration(self) -> int:
        return self.end - self.start

    def contains(self, minute: int) -> bool:
        return self.start <= minute < self.end

    def overlaps(self, start: int, end: int) -> bool:
        return start < self.end and self.start < end


def activity_block(activity: RecurringActivity) -> FixedBlock:
    start = parse_hhmm(activity.start_time, f"start_time of activity {activity.name!r}")
    # commute buffer is one way, so the round trip counts twice
    total = activity.duration_minutes + 2 * activity.commute_buffer_minutes
    return FixedBlock(
        title=activity.name,
        start=start,
        end=min(MINUTES_PER_DAY, start + total),
        source="activity",
        ref=activity.name,
    )


def _school_periods_on(periods: Iterable[SchoolPeriod], weekday: int) -> List[SchoolPeriod]:
    return [p for p in periods if p.day_of_week == weekday]


def period_span(period: SchoolPeriod) -> Tuple[int, int]:
    """(start, end) in minutes; an end at or before the start raises ParseError."""
    start = parse_hhmm(period.start_time, "school start_time")
    end = parse_hhmm(period.end_time, "school end_time")
    if end <= start:
        raise ParseError(
            f"{period.start_time}-{period.end_time}",
            f"school period on {DAY_NAMES[period.day_of_week]}",
            "an end time after the start time",
        )
    return start, end


def school_end_minutes(periods: Iterable[SchoolPeriod], weekday: int) -> Optional[int]:
    ends = [period_span(p)[1] for p in _school_periods_on(periods, weekday) if not p.is_break]
    return max(ends) if ends else None


def _school_blocks(periods: List[SchoolPeriod], commute: Optional[CommuteInfo]) -> List[FixedBlock]:
    blocks: List[FixedBlock] = []
    for p in periods:
        start, end = period_span(p)
        label = "Break" if p.is_break else (p.subject_name or "School")
        blocks.append(FixedBlock(title=label, start=start, end=end, source="school", ref=p.subject_name))

    if commute and blocks:
        first = min(b.start for b in blocks)
        last = max(b.end for b in blocks)
        if commute.morning_minutes:
            blocks.append(FixedBlock(
                title="Commute to school",
                start=max(0, first - commute.morning_minutes),
                end=first,
                source="commute",
            ))
        if commute.afternoon_minutes:
            blocks.append(FixedBlock(
                title="Commute home",
                start=last,
                end=min(MINUTES_PER_DAY, last + commute.afternoon_minutes),
                source="commute",
            ))
    return blocks


def _event_blocks(events: Iterable[Event], day: date) -> List[FixedBlock]:
    blocks: List[FixedBlock] = []
    for ev in events:
        if ev.is_study_event or ev.target_date != day or ev.start_time is None:
            continue
        start = parse_hhmm(ev.start_time, f"start_time of event {ev.title!r}")
        duration = DEFAULT_EVENT_BLOCK_MINUTES if ev.duration_minutes is None else ev.duration_minutes
        if duration <= 0:
            logger.warning("Event %r on %s has no duration; it blocks no time.", ev.title, day)
            continue
        blocks.append(FixedBlock(
            title=ev.title,
            start=start,
            end=min(MINUTES_PER_DAY, start + duration),
            source="event",
            ref=ev.id,
        ))
    return blocks


def fixed_blocks_for(
    day: date,
    activities: Iterable[RecurringActivity] = (),
    school_periods: Iterable[SchoolPeriod] = (),
    commute: Optional[CommuteInfo] = None,
    events: Iterable[Event] = (),
) -> List[FixedBlock]:
    """
    All immovable blocks for one date: that weekday's recurring activities
    (with the round-trip commute buffer), school periods and the school
    commute, plus timed non-study events on that exact date.

    Malformed times raise ParseError instead of being skipped.
    """
    weekday = day.weekday()
    blocks = [activity_block(a) for a in activities if a.day_of_week == weekday]
    blocks.extend(_school_blocks(_school_periods_on(school_periods, weekday), commute))
    blocks.extend(_event_blocks(events, day))
    blocks.sort(key=lambda b: (b.start, b.end, b.title))
    return blocks


def validate_commitments(
    activities: Iterable[RecurringActivity] = (),
    school_periods: Iterable[SchoolPeriod] = (),
    events: Iterable[Event] = (),
) -> None:
    """Parse every time string up front so a bad record fails the whole run."""
    for a in activities:
        activity_block(a)
    for p in school_periods:
        period_span(p)
    for ev in events:
        if ev.start_time is not None:
            parse_hhmm(ev.start_time, f"start_time of event {ev.title!r}")


def weekly_hours_at_school(periods: Iterable[SchoolPeriod]) -> Dict[str, float]:
    hours: Dict[str, float] = {}
    for p in periods:
        if p.is_break:
            continue
        start, end = period_span(p)
        minutes = end - start
        name = p.subject_name or "School"
        hours[name] = hours.get(name, 0.0) + minutes / 60
    return {k: round(v, 2) for k, v in hours.items()}


@dataclass(frozen=True)
class WeeklyCommitments:
    """The recurring weekly skeleton the scheduler has to route around."""
    activities: tuple = ()
    school_periods: tuple = ()
    commute: Optional[CommuteInfo] = None

    @classmethod
    def build(
        cls,
        activities: Iterable[RecurringActivity] = (),
        school_periods: Iterable[SchoolPeriod] = (),
        commute: Optional[CommuteInfo] = None,
    ) -> "WeeklyCommitments":
        return cls(tuple(activities), tuple(school_periods), commute)

    def school_end(self, day: date) -> Optional[int]:
        return school_end_minutes(self.school_periods, day.weekday())

    def blocks_for(self, day: date, events: Iterable[Event] = ()) -> List[FixedBlock]:
        return fixed_blocks_for(day, self.activities, self.school_periods, self.commute, events)

    def validate(self, events: Iterable[Event] = ()) -> None:
        validate_commitments(self.activities, self.school_periods, events)

    def school_hours(self) -> Dict[str, float]:
        return weekly_hours_at_school(self.school_periods)
