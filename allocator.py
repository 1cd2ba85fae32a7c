from __future__ import annotations
import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional
from commitments import FixedBlock
from models import DailyPlan, PlannerSettings, StudySession
from priority import RankedObligation
from sizing import (
    break_minutes,
    fits,
    priority_label,
    size_session,
    study_type_label,
)
from timeutils import format_hhmm, minutes_to_time, parse_hhmm, weekday_name

logger = logging.getLogger(__name__)

CURSOR_STEP = 15
BREAK_EVERY_SESSIONS = 2
BREAK_EVERY_MINUTES = 120
LONG_BREAK_MINUTES = 20
REVIEW_MINUTES = 15
REVIEW_AFTER_MINUTES = 60
LISTED_BLOCK_SOURCES = ("activity", "event")


@dataclass(frozen=True)
class DayWindow:
    start: int
    end: int
    max_minutes: int


def day_window(day: date, settings: PlannerSettings, school_end: Optional[int] = None) -> DayWindow:
    """
    Study window for a date. Weekdays start after school plus a lunch buffer
    (or at the default start when the school day is unknown); weekends use a
    fixed daytime window with a smaller budget on Sunday.
    """
    weekday = day.weekday()
    if weekday == 5:
        return DayWindow(
            start=parse_hhmm(settings.weekend_window_start, "weekend_window_start"),
            end=parse_hhmm(settings.weekend_window_end, "weekend_window_end"),
            max_minutes=settings.saturday_max_minutes,
        )
    if weekday == 6:
        return DayWindow(
            start=parse_hhmm(settings.weekend_window_start, "weekend_window_start"),
            end=parse_hhmm(settings.weekend_window_end, "weekend_window_end"),
            max_minutes=settings.sunday_max_minutes,
        )
    if school_end is not None:
        start = school_end + settings.lunch_buffer_minutes
    else:
        start = parse_hhmm(settings.weekday_default_start, "weekday_default_start")
    return DayWindow(
        start=start,
        end=parse_hhmm(settings.weekday_window_end, "weekday_window_end"),
        max_minutes=settings.weekday_max_minutes,
    )


def should_show_break(session_index: int, cumulative_minutes: int, session_duration: int) -> bool:
    """
    Whether the break after a study session is listed as its own entry.

    Listed after every second session, or when the running study total has
    just crossed a 120-minute boundary (the total modulo 120 is smaller than
    the session that was just added). Unlisted breaks still take up time.
    session_index counts study sessions placed today, starting at 1.
    """
    if session_index % BREAK_EVERY_SESSIONS == 0:
        return True
    return cumulative_minutes > 0 and cumulative_minutes % BREAK_EVERY_MINUTES < session_duration


def _inside_block(minute: int, blocks: List[FixedBlock]) -> bool:
    return any(b.contains(minute) for b in blocks)


def _collides(start: int, end: int, blocks: List[FixedBlock]) -> bool:
    return any(b.overlaps(start, end) for b in blocks)


def _advance(cursor: int, blocks: List[FixedBlock], window_end: int) -> int:
    while cursor < window_end and _inside_block(cursor, blocks):
        cursor += CURSOR_STEP
    return cursor


def _free_until(cursor: int, blocks: List[FixedBlock], window_end: int) -> int:
    starts = [b.start for b in blocks if cursor < b.start < window_end]
    return min(starts) if starts else window_end


def _entry(
    day: date,
    entry_id: str,
    kind: str,
    title: str,
    start: int,
    end: int,
    duration: Optional[int] = None,
) -> StudySession:
    return StudySession(
        id=entry_id,
        kind=kind,
        title=title,
        date=day,
        start_time=minutes_to_time(start),
        end_time=minutes_to_time(end),
        duration_minutes=end - start if duration is None else duration,
    )


def allocate_day(
    day: date,
    ranked: Iterable[RankedObligation],
    fixed_blocks: Iterable[FixedBlock],
    window_start: int,
    window_end: int,
    max_daily_minutes: int,
    remaining: Optional[Dict[str, int]] = None,
    max_subjects: int = 4,
    school_end: Optional[int] = None,
) -> DailyPlan:
    """
    Fill one day's window with study sessions around the fixed blocks.

    ``remaining`` maps obligation ids to minutes still owed and is decremented
    in place; obligations already at zero are skipped. Obligations missing
    from it (open-ended subject review) are never exhausted.
    """
    blocks = sorted(fixed_blocks, key=lambda b: (b.start, b.end))
    entries: List[StudySession] = []

    for i, block in enumerate(blocks):
        if block.source not in LISTED_BLOCK_SOURCES:
            continue
        entries.append(_entry(
            day, f"{day.isoformat()}-fixed-{i}", "fixed", block.title,
            block.start, block.end, duration=block.duration,
        ))

    candidates = [
        r for r in ranked
        if remaining is None or r.obligation.id not in remaining or remaining[r.obligation.id] > 0
    ]

    cursor = window_start
    used = 0
    study_count = 0

    for r in candidates[:max_subjects]:
        if cursor >= window_end or used >= max_daily_minutes:
            break
        ob = r.obligation
        factor = r.adaptation.adaptation_factor

        minutes = 0
        while True:
            cursor = _advance(cursor, blocks, window_end)
            if cursor >= window_end:
                break
            limit = _free_until(cursor, blocks, window_end)
            minutes = size_session(ob, r.days_to_exam, day, factor, max_daily_minutes - used, limit - cursor)
            if fits(minutes) or limit >= window_end or not fits(max_daily_minutes - used):
                break
            # gap before the next fixed block is too short, look past it
            cursor = limit

        if cursor >= window_end:
            logger.debug("%s: window exhausted before %s", day, ob.id)
            break
        if not fits(minutes):
            logger.debug("%s: %s skipped, only %d minutes fit", day, ob.id, minutes)
            continue

        start, end = cursor, cursor + minutes
        entries.append(StudySession(
            id=f"{day.isoformat()}-study-{ob.id}",
            kind="study",
            title=ob.title,
            subject_or_event_id=ob.id,
            subject_id=ob.subject_id,
            date=day,
            start_time=minutes_to_time(start),
            end_time=minutes_to_time(end),
            duration_minutes=minutes,
            priority_score=r.priority_score,
            days_to_exam=r.days_to_exam,
            is_adapted=r.adaptation.is_adapted,
            adaptation_factor=factor,
            study_type=study_type_label(ob, r.days_to_exam),
            priority_label=priority_label(r.days_to_exam),
        ))
        cursor = end
        used += minutes
        study_count += 1
        if remaining is not None and ob.id in remaining:
            remaining[ob.id] -= minutes

        pause = break_minutes(minutes)
        if should_show_break(study_count, used, minutes):
            pause_end = cursor + pause
            if pause_end < window_end and not _collides(cursor, pause_end, blocks):
                title = "Long break" if pause >= LONG_BREAK_MINUTES else "Break"
                entries.append(_entry(day, f"{day.isoformat()}-break-{study_count}", "break", title, cursor, pause_end))
        cursor += pause

    if used > REVIEW_AFTER_MINUTES:
        cursor = _advance(cursor, blocks, window_end)
        review_end = cursor + REVIEW_MINUTES
        if review_end <= window_end and not _collides(cursor, review_end, blocks):
            entries.append(_entry(day, f"{day.isoformat()}-review", "review", "Daily review", cursor, review_end))

    entries.sort(key=lambda e: (e.start_time, e.end_time, e.id))
    return DailyPlan(
        date=day,
        day_name=weekday_name(day),
        sessions=entries,
        total_study_minutes=used,
        school_end_time=format_hhmm(school_end) if school_end is not None else None,
    )
