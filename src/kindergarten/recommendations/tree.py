"""Hierarchy builder: groups -> children -> recommendations.

Pure functions over rows that were already fetched; nothing here touches
the database or raises on dangling references.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from ..children.model import Child
from ..core.enums import Role
from ..groups.model import Group
from ..users.model import CurrentUser
from .model import Recommendation

logger = logging.getLogger(__name__)

UNKNOWN_GROUP_NAME = "Unknown group"


@dataclass(frozen=True)
class UnresolvedReference:
    recommendation_id: int
    child_id: int
    reason: str


@dataclass
class RecommendationTree:
    groups: list[dict] = field(default_factory=list)
    unresolved: list[UnresolvedReference] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "groups": self.groups,
            "unresolved": [
                {"recommendation_id": u.recommendation_id, "child_id": u.child_id, "reason": u.reason}
                for u in self.unresolved
            ],
        }


def filter_for_viewer(viewer: CurrentUser, recommendations: Iterable[Recommendation]) -> list[Recommendation]:
    """Admins see everything, staff their own authored items, parents their children's."""

    if viewer.role == Role.ADMIN:
        return list(recommendations)
    if viewer.role == Role.PARENT:
        return [r for r in recommendations if r.parent_id == viewer.user_id]
    return [r for r in recommendations if r.user_id == viewer.user_id]


def sort_newest_first(recommendations: Iterable[Recommendation]) -> list[Recommendation]:
    return sorted(recommendations, key=lambda r: (r.date, r.recommendation_id), reverse=True)


def _rec_dict(r: Recommendation) -> dict:
    return {
        "recommendation_id": r.recommendation_id,
        "child_id": r.child_id,
        "user_id": r.user_id,
        "author_name": r.author_name,
        "author_role": r.author_role,
        "recommendation_text": r.recommendation_text,
        "date": r.date,
        "is_sent": r.is_sent,
        "sent_at": r.sent_at,
    }


def build_recommendation_tree(
    viewer: CurrentUser,
    groups: Sequence[Group],
    children: Sequence[Child],
    recommendations: Sequence[Recommendation],
) -> RecommendationTree:
    visible = filter_for_viewer(viewer, recommendations)

    buckets: dict[Optional[int], dict] = {}
    for g in groups:
        buckets[g.group_id] = {"group_id": g.group_id, "group_name": g.group_name, "children": {}}

    child_nodes: dict[int, dict] = {}
    for child in children:
        key = child.group_id if child.group_id in buckets else None
        if key is None and None not in buckets:
            buckets[None] = {"group_id": None, "group_name": UNKNOWN_GROUP_NAME, "children": {}}
        node = {"child_id": child.child_id, "name": child.name, "recommendations": []}
        buckets[key]["children"][child.child_id] = node
        child_nodes[child.child_id] = node

    tree = RecommendationTree()
    for rec in visible:
        node = child_nodes.get(rec.child_id)
        if node is None:
            tree.unresolved.append(
                UnresolvedReference(rec.recommendation_id, rec.child_id, "child not found")
            )
            continue
        node["recommendations"].append(rec)

    for bucket in buckets.values():
        for node in bucket["children"].values():
            node["recommendations"] = [_rec_dict(r) for r in sort_newest_first(node["recommendations"])]
        bucket["children"] = list(bucket["children"].values())
        tree.groups.append(bucket)

    if tree.unresolved:
        logger.warning(
            "%d recommendation(s) reference unknown children: %s",
            len(tree.unresolved),
            [u.recommendation_id for u in tree.unresolved],
        )
    return tree
