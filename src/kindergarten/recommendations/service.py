from __future__ import annotations

import logging

from ..children.access import ChildAccessPolicy
from ..children.repository import ChildRepository
from ..common.datetime_utils import now_local
from ..common.validators import FieldErrors, require_date, require_int, require_non_empty
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..groups.repository import GroupRepository
from ..notifications.mailer import Mailer
from ..users.model import CurrentUser
from .model import Recommendation
from .repository import RecommendationRepository
from .tree import build_recommendation_tree, filter_for_viewer, sort_newest_first

logger = logging.getLogger(__name__)

_AUTHORS = (Role.ADMIN, Role.TEACHER, Role.PSYCHOLOGIST)


class RecommendationService:
    def __init__(
        self,
        recommendations: RecommendationRepository,
        children: ChildRepository,
        groups: GroupRepository,
        access: ChildAccessPolicy,
        mailer: Mailer,
        *,
        clock=now_local,
    ):
        self._recommendations = recommendations
        self._children = children
        self._groups = groups
        self._access = access
        self._mailer = mailer
        self._clock = clock

    def list_for_viewer(self, current: CurrentUser) -> list[Recommendation]:
        return sort_newest_first(filter_for_viewer(current, self._recommendations.list_all()))

    def tree(self, current: CurrentUser):
        """Hierarchy for staff; parents get their flat, newest-first list."""

        if current.role == Role.PARENT:
            return self.list_for_viewer(current)
        return build_recommendation_tree(
            current,
            self._groups.list_groups(),
            self._children.list_children(),
            self._recommendations.list_all(),
        )

    def _visible(self, current: CurrentUser, rec: Recommendation) -> bool:
        return bool(filter_for_viewer(current, [rec]))

    def get(self, current: CurrentUser, recommendation_id: int) -> Recommendation:
        rec = self._recommendations.get_by_id(int(recommendation_id))
        if not rec:
            raise NotFoundError("Recommendation not found")
        if not self._visible(current, rec):
            raise AuthorizationError("You do not have access to this recommendation")
        return rec

    def for_child(self, current: CurrentUser, child_id: int) -> list[Recommendation]:
        child = self._access.child_for(current, child_id)
        items = self._recommendations.list_for_child(child.child_id)
        if current.role in (Role.ADMIN, Role.PARENT):
            return sort_newest_first(items)
        return sort_newest_first(filter_for_viewer(current, items))

    def _fields(self, data: dict):
        errors = FieldErrors()
        text = errors.check(require_non_empty, data.get("recommendation_text"), "recommendation_text")
        day = data.get("date")
        day = errors.check(require_date, day, "date") if day else self._clock().date()
        errors.raise_if_any()
        return text, day

    def create(self, current: CurrentUser, data: dict) -> Recommendation:
        if current.role not in _AUTHORS:
            raise AuthorizationError("Only staff can write recommendations")

        child_id = require_int(data.get("child_id"), "child_id", min_value=1)
        text, day = self._fields(data)
        child = self._access.child_for(current, child_id)

        rec_id = self._recommendations.create(child_id=child.child_id, user_id=current.user_id, text=text, day=day)
        logger.info("recommendation %s written by %s for child %s", rec_id, current.user_id, child.child_id)
        return self._recommendations.get_by_id(rec_id)

    def _owned(self, current: CurrentUser, recommendation_id: int) -> Recommendation:
        rec = self._recommendations.get_by_id(int(recommendation_id))
        if not rec:
            raise NotFoundError("Recommendation not found")
        if not current.is_admin and rec.user_id != current.user_id:
            raise AuthorizationError("Only the author or an administrator can change this recommendation")
        return rec

    def update(self, current: CurrentUser, recommendation_id: int, data: dict) -> Recommendation:
        rec = self._owned(current, recommendation_id)
        text, day = self._fields({"date": rec.date, **data})
        self._recommendations.update(rec.recommendation_id, text=text, day=day)
        return self._recommendations.get_by_id(rec.recommendation_id)

    def delete(self, current: CurrentUser, recommendation_id: int) -> None:
        rec = self._owned(current, recommendation_id)
        self._recommendations.delete(rec.recommendation_id)

    def delete_for_child(self, current: CurrentUser, child_id: int) -> int:
        if not current.is_admin:
            raise AuthorizationError("Only administrators can clear a child's recommendations")
        child = self._access.child_for(current, child_id)
        removed = self._recommendations.delete_for_child(child.child_id)
        logger.info("removed %d recommendation(s) of child %s", removed, child.child_id)
        return removed

    def send(self, current: CurrentUser, recommendation_id: int) -> dict:
        if current.role not in _AUTHORS:
            raise AuthorizationError("Only staff can send recommendations")

        details = self._recommendations.get_send_details(int(recommendation_id))
        if not details:
            raise NotFoundError("Recommendation not found")
        if not details.parent_email:
            raise ValidationError("The child's parent has no email address")

        rec = details.recommendation
        body = (
            f"Dear {details.parent_name or 'parent'},\n\n"
            f"A new recommendation for {rec.child_name} from {rec.author_name} ({rec.author_role}):\n\n"
            f"{rec.recommendation_text}\n\n"
            f"Date: {rec.date.isoformat()}\n"
        )
        self._mailer.send(to=details.parent_email, subject=f"Recommendation for {rec.child_name}", text=body)

        sent_at = self._clock()
        self._recommendations.mark_sent(rec.recommendation_id, sent_at=sent_at)
        return {
            "message": "Recommendation sent",
            "recommendation_id": rec.recommendation_id,
            "parent": {"name": details.parent_name, "email": details.parent_email},
            "sent_at": sent_at,
        }
