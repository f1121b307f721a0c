from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass(frozen=True)
class Recommendation:
    recommendation_id: int
    child_id: int
    user_id: int
    recommendation_text: str
    date: date
    is_sent: bool = False
    sent_at: Optional[datetime] = None
    parent_id: Optional[int] = None
    child_name: Optional[str] = None
    author_name: Optional[str] = None
    author_role: Optional[str] = None


@dataclass(frozen=True)
class SendDetails:
    """Everything the notification needs about one recommendation."""

    recommendation: Recommendation
    parent_email: Optional[str]
    parent_name: Optional[str]
