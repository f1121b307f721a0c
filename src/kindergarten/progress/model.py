from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

SKILL_FIELDS = (
    "active_speech",
    "games",
    "art_activity",
    "constructive_activity",
    "sensory_development",
    "naming_skills",
    "movement_skills",
)


@dataclass(frozen=True)
class ProgressReport:
    report_id: int
    child_id: int
    report_date: date
    active_speech: Optional[int] = None
    games: Optional[int] = None
    art_activity: Optional[int] = None
    constructive_activity: Optional[int] = None
    sensory_development: Optional[int] = None
    naming_skills: Optional[int] = None
    movement_skills: Optional[int] = None
    height_cm: Optional[float] = None
    weight_kg: Optional[float] = None
    details: Optional[str] = None
    child_name: Optional[str] = None

    @property
    def average_score(self) -> Optional[float]:
        scores = [getattr(self, f) for f in SKILL_FIELDS if getattr(self, f) is not None]
        if not scores:
            return None
        return round(sum(scores) / len(scores), 2)

    def to_dict(self) -> dict:
        out = {
            "report_id": self.report_id,
            "child_id": self.child_id,
            "child_name": self.child_name,
            "report_date": self.report_date,
            "height_cm": self.height_cm,
            "weight_kg": self.weight_kg,
            "details": self.details,
            "average_score": self.average_score,
        }
        for f in SKILL_FIELDS:
            out[f] = getattr(self, f)
        return out
