from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from .model import Recommendation, SendDetails


class RecommendationRepository(Protocol):
    def list_all(self) -> Sequence[Recommendation]:
        """Every recommendation joined with its child's parent (None when the child is gone)."""

        raise NotImplementedError

    def list_for_child(self, child_id: int) -> Sequence[Recommendation]:
        raise NotImplementedError

    def get_by_id(self, recommendation_id: int) -> Optional[Recommendation]:
        raise NotImplementedError

    def create(self, *, child_id: int, user_id: int, text: str, day: date) -> int:
        raise NotImplementedError

    def update(self, recommendation_id: int, *, text: str, day: date) -> bool:
        raise NotImplementedError

    def delete(self, recommendation_id: int) -> bool:
        raise NotImplementedError

    def delete_for_child(self, child_id: int) -> int:
        raise NotImplementedError

    def get_send_details(self, recommendation_id: int) -> Optional[SendDetails]:
        raise NotImplementedError

    def mark_sent(self, recommendation_id: int, *, sent_at: datetime) -> bool:
        raise NotImplementedError
