from __future__ import annotations

from typing import Mapping, Optional, Sequence


class ContactService:
    """Static facility information configured in settings."""

    def __init__(self, contact_info: Optional[Mapping] = None, staff: Optional[Sequence[Mapping]] = None):
        self._contact_info = dict(contact_info or {})
        self._staff = [dict(s) for s in staff or ()]

    def contact_info(self) -> dict:
        return dict(self._contact_info)

    def staff(self, *, role: Optional[str] = None) -> list[dict]:
        if role:
            return [s for s in self._staff if s.get("role") == role]
        return list(self._staff)
