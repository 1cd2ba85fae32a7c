"""Small factories shared by the test modules."""

from datetime import date, timedelta

from models import Event, HistoricalRecord, RecurringActivity, Subject

MONDAY = date(2026, 10, 19)
SATURDAY = date(2026, 10, 24)
SUNDAY = date(2026, 10, 25)


def exam(id, subject="Math", days=10, from_date=MONDAY, hours=10.0, difficulty=3, **kw):
    kw.setdefault("title", f"{subject} exam")
    kw.setdefault("event_type", "exam")
    return Event(
        id=id,
        subject=subject,
        target_date=from_date + timedelta(days=days),
        difficulty=difficulty,
        estimated_study_hours=hours,
        **kw,
    )


def subject(id, name=None, difficulty=5, priority=5):
    return Subject(id=id, name=name or id, difficulty=difficulty, priority=priority)


def activity(name="Calcio", day_of_week=5, start="17:00", duration=60, buffer=15):
    return RecurringActivity(
        name=name,
        type="sport",
        day_of_week=day_of_week,
        start_time=start,
        duration_minutes=duration,
        commute_buffer_minutes=buffer,
    )


def records(subject_id, count, planned, actual, productivity, as_of=MONDAY, **kw):
    return [
        HistoricalRecord(
            subject_id=subject_id,
            date=as_of - timedelta(days=i + 1),
            planned_minutes=planned,
            actual_minutes=actual,
            productivity_rating=productivity,
            **kw,
        )
        for i in range(count)
    ]
