from __future__ import annotations
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, Iterable, List
from models import HistoricalRecord

DEFAULT_WINDOW_DAYS = 30
DEFAULT_RATING = 5
MIN_CONFIDENT_SAMPLES = 3
ADAPTED_DRIFT = 0.05


@dataclass(frozen=True)
class Adaptation:
    adaptation_factor: float = 1.0
    efficiency_score: float = 1.0
    sample_count: int = 0
    avg_efficiency: float = 1.0
    avg_productivity: float = float(DEFAULT_RATING)
    avg_perceived_difficulty: float = float(DEFAULT_RATING)

    @property
    def is_adapted(self) -> bool:
        # needs more than two samples and a visible drift from neutral
        return (
            self.sample_count >= MIN_CONFIDENT_SAMPLES
            and abs(self.adaptation_factor - 1.0) > ADAPTED_DRIFT
        )


NEUTRAL = Adaptation()


def recent_records(
    history: Iterable[HistoricalRecord],
    as_of: date,
    window_days: int = DEFAULT_WINDOW_DAYS,
) -> List[HistoricalRecord]:
    since = as_of - timedelta(days=window_days)
    return [r for r in history if r.completed and since <= r.date <= as_of]


def _mean(values: List[float]) -> float:
    return sum(values) / len(values)


def adaptation_for(
    subject_id: str,
    history: Iterable[HistoricalRecord],
    as_of: date,
    window_days: int = DEFAULT_WINDOW_DAYS,
) -> Adaptation:
    """
    Derive the duration multiplier and efficiency score for one subject from
    its completed sessions in the trailing window.

    Sessions that historically run long (actual/planned > 1.2) get 15% more
    time, short ones (< 0.8) 10% less; low average productivity (< 4) adds a
    further 10%, high (> 7) removes 5%.
    """
    records = [r for r in recent_records(history, as_of, window_days) if r.subject_id == subject_id]
    if not records:
        return NEUTRAL

    avg_efficiency = _mean([r.actual_minutes / max(r.planned_minutes, 1) for r in records])
    avg_productivity = _mean([
        r.productivity_rating if r.productivity_rating is not None else DEFAULT_RATING
        for r in records
    ])
    avg_difficulty = _mean([
        r.difficulty_rating if r.difficulty_rating is not None else DEFAULT_RATING
        for r in records
    ])

    factor = 1.0
    if avg_efficiency > 1.2:
        factor = 1.15
    elif avg_efficiency < 0.8:
        factor = 0.9

    if avg_productivity < 4:
        factor *= 1.1
    elif avg_productivity > 7:
        factor *= 0.95

    return Adaptation(
        adaptation_factor=factor,
        efficiency_score=min(avg_productivity / 5, 2.0),
        sample_count=len(records),
        avg_efficiency=avg_efficiency,
        avg_productivity=avg_productivity,
        avg_perceived_difficulty=avg_difficulty,
    )


def adaptations_by_subject(
    subject_ids: Iterable[str],
    history: Iterable[HistoricalRecord],
    as_of: date,
    window_days: int = DEFAULT_WINDOW_DAYS,
) -> Dict[str, Adaptation]:
    history = list(history)
    return {sid: adaptation_for(sid, history, as_of, window_days) for sid in subject_ids}
