from __future__ import annotations
from datetime import datetime, timedelta, tzinfo
from typing import Iterable, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
from icalendar import Calendar, Event as IcsEvent
from models import DailyPlan, StudySession

EXPORTED_KINDS = ("study", "break", "review")


def _get_timezone(tz_name: Optional[str] = None) -> tzinfo:
    if tz_name:
        try:
            return ZoneInfo(tz_name)
        except ZoneInfoNotFoundError:
            raise ValueError(f"Unknown timezone {tz_name!r}.") from None
    local = datetime.now().astimezone().tzinfo
    return local if local is not None else ZoneInfo("UTC")


def _summary(entry: StudySession) -> str:
    if entry.kind == "study":
        return f"Study: {entry.title}"
    return entry.title


def _description(entry: StudySession) -> str:
    if entry.kind != "study":
        return f"{entry.duration_minutes} minutes."
    parts = [f"{entry.duration_minutes} minutes planned"]
    if entry.study_type:
        parts.append(entry.study_type)
    if entry.days_to_exam is not None:
        parts.append(f"{entry.days_to_exam} days to exam")
    if entry.is_adapted:
        parts.append(f"adapted x{entry.adaptation_factor:.2f} from history")
    return ", ".join(parts) + "."


def plans_to_ics(
    plans: Iterable[DailyPlan],
    tz_name: Optional[str] = None,
    include_breaks: bool = True,
) -> bytes:
    """
    Export planned entries as VEVENTs. Fixed blocks are left out since they
    already live in the user's own calendar.
    """
    cal = Calendar()
    cal.add("PRODID", "-//Study Scheduler//Local//")
    cal.add("version", "2.0")
    cal.add("X-WR-CALNAME", "Study Plan")

    tz = _get_timezone(tz_name)
    for plan in plans:
        for entry in plan.sessions:
            if entry.kind not in EXPORTED_KINDS:
                continue
            if entry.kind == "break" and not include_breaks:
                continue
            event = IcsEvent()
            event.add("uid", f"{entry.id}@study-scheduler")
            event.add("summary", _summary(entry))
            start = datetime.combine(entry.date, entry.start_time, tzinfo=tz)
            event.add("dtstart", start)
            event.add("dtend", start + timedelta(minutes=entry.duration_minutes))
            event.add("description", _description(entry))
            if entry.kind == "study":
                event.add("categories", [entry.priority_label or "low"])
            cal.add_component(event)

    return cal.to_ical()
