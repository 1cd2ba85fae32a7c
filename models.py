from __future__ import annotations
from pydantic import BaseModel, Field
from datetime import date, time
from typing import List, Literal, Optional


EventType = Literal["exam", "oral", "sport", "commute-trip", "other"]
SubjectType = Literal["theoretical", "practical", "mixed"]
ActivityType = Literal["sport", "music", "course", "other"]
Transport = Literal["walk", "bike", "bus", "car", "train"]
EntryKind = Literal["study", "break", "review", "fixed"]

STUDY_EVENT_TYPES = ("exam", "oral")


class Event(BaseModel):
    id: str
    title: str
    subject: str
    target_date: date
    difficulty: int = Field(ge=1, le=5, default=3)
    estimated_study_hours: float = Field(ge=0, default=0)
    event_type: EventType = "exam"
    # only meaningful for non-study events; HH:MM, validated when planning
    start_time: Optional[str] = None
    duration_minutes: Optional[int] = Field(default=None, ge=0)
    completed: bool = False

    @property
    def is_study_event(self) -> bool:
        return self.event_type in STUDY_EVENT_TYPES


class Subject(BaseModel):
    id: str
    name: str
    color: str = ""
    type: SubjectType = "mixed"
    difficulty: int = Field(ge=1, le=10, default=5)
    priority: int = Field(ge=1, le=10, default=5)
    weekly_hours_at_school: Optional[float] = Field(default=None, ge=0)


class RecurringActivity(BaseModel):
    name: str
    type: ActivityType = "sport"
    day_of_week: int = Field(ge=0, le=6)  # 0=Mon ... 6=Sun
    start_time: str
    duration_minutes: int = Field(gt=0)
    commute_buffer_minutes: int = Field(default=0, ge=0)  # one way


class SchoolPeriod(BaseModel):
    day_of_week: int = Field(ge=0, le=6)
    start_time: str
    end_time: str
    subject_name: str = ""
    is_break: bool = False


class CommuteInfo(BaseModel):
    morning_minutes: int = Field(default=15, ge=0, le=240)
    afternoon_minutes: int = Field(default=15, ge=0, le=240)
    transport: Transport = "bus"


class HistoricalRecord(BaseModel):
    subject_id: str
    date: date
    planned_minutes: int = Field(ge=0)
    actual_minutes: int = Field(ge=0)
    productivity_rating: Optional[int] = Field(default=None, ge=1, le=10)
    difficulty_rating: Optional[int] = Field(default=None, ge=1, le=10)
    completed: bool = True


class StudySession(BaseModel):
    id: str
    kind: EntryKind = "study"
    title: str = ""
    subject_or_event_id: Optional[str] = None
    subject_id: Optional[str] = None
    date: date
    start_time: time
    end_time: time
    duration_minutes: int = Field(ge=0)
    priority_score: float = 0.0
    days_to_exam: Optional[int] = None
    is_adapted: bool = False
    adaptation_factor: float = 1.0
    study_type: str = ""
    priority_label: str = ""


class DailyPlan(BaseModel):
    date: date
    day_name: str = ""
    sessions: List[StudySession] = Field(default_factory=list)
    total_study_minutes: int = 0
    school_end_time: Optional[str] = None

    @property
    def study_sessions(self) -> List[StudySession]:
        return [s for s in self.sessions if s.kind == "study"]


class PlannerSettings(BaseModel):
    weekday_default_start: str = "15:00"
    weekday_window_end: str = "20:30"
    lunch_buffer_minutes: int = Field(default=90, ge=0, le=300)
    weekend_window_start: str = "10:00"
    weekend_window_end: str = "18:00"
    weekday_max_minutes: int = Field(default=240, ge=0, le=960)
    saturday_max_minutes: int = Field(default=240, ge=0, le=960)
    sunday_max_minutes: int = Field(default=180, ge=0, le=960)
    max_subjects_per_day: int = Field(default=4, ge=1, le=12)
    history_window_days: int = Field(default=30, ge=1, le=365)
    horizon_days: Optional[int] = Field(default=7, ge=1, le=366)  # None = until last exam
    rerank_daily: bool = True
    include_subject_review: bool = False


class AppState(BaseModel):
    subjects: List[Subject] = Field(default_factory=list)
    events: List[Event] = Field(default_factory=list)
    activities: List[RecurringActivity] = Field(default_factory=list)
    school_periods: List[SchoolPeriod] = Field(default_factory=list)
    commute: Optional[CommuteInfo] = None
    history: List[HistoricalRecord] = Field(default_factory=list)
    settings: PlannerSettings = Field(default_factory=PlannerSettings)
    profile: str = "default"
