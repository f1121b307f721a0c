from __future__ import annotations

import base64
import binascii
import logging
import re
from pathlib import Path
from typing import Callable, Optional

from ..core.constants import PHOTO_MAX_BYTES, PHOTO_MIME_TYPES
from ..core.exceptions import ValidationError
from .datetime_utils import now_local

logger = logging.getLogger(__name__)

_DATA_URL_RE = re.compile(r"^data:(?P<mime>image/[\w.+-]+);base64,(?P<data>.*)$", re.DOTALL)


class PhotoStorage:
    """Stores base64 photos under `<upload_dir>/photos`.

    Paths handed back (and stored in the database) are relative to
    `upload_dir`, e.g. `photos/child_12_20260105093000123456.png`.
    """

    SUBDIR = "photos"

    def __init__(self, upload_dir: str | Path, *, clock: Callable = now_local):
        self._root = Path(upload_dir)
        self._clock = clock

    @property
    def root(self) -> Path:
        return self._root

    def decode(self, data: str, mime_type: Optional[str]) -> tuple[bytes, str]:
        """Validate and decode a photo payload; returns (bytes, extension)."""

        if not data or not isinstance(data, str):
            raise ValidationError("Photo is required", details=[{"field": "photo", "message": "photo is required"}])

        match = _DATA_URL_RE.match(data)
        if match:
            mime_type = mime_type or match.group("mime")
            data = match.group("data")

        ext = PHOTO_MIME_TYPES.get((mime_type or "").lower())
        if not ext:
            allowed = ", ".join(PHOTO_MIME_TYPES)
            raise ValidationError(
                "Unsupported photo format",
                details=[{"field": "photo_mime_type", "message": f"photo_mime_type must be one of: {allowed}"}],
            )

        try:
            raw = base64.b64decode(data, validate=True)
        except (binascii.Error, ValueError):
            raise ValidationError("Photo is not valid base64", details=[{"field": "photo", "message": "invalid base64"}])

        if len(raw) > PHOTO_MAX_BYTES:
            raise ValidationError(
                "Photo is too large",
                details=[{"field": "photo", "message": f"photo must be at most {PHOTO_MAX_BYTES // (1024 * 1024)} MB"}],
            )
        return raw, ext

    def save(self, *, prefix: str, entity_id: int, data: str, mime_type: Optional[str]) -> str:
        raw, ext = self.decode(data, mime_type)

        folder = self._root / self.SUBDIR
        folder.mkdir(parents=True, exist_ok=True)

        stamp = self._clock().strftime("%Y%m%d%H%M%S%f")
        name = f"{prefix}_{int(entity_id)}_{stamp}.{ext}"
        (folder / name).write_bytes(raw)

        logger.info("stored photo %s (%d bytes)", name, len(raw))
        return f"{self.SUBDIR}/{name}"

    def delete(self, relative_path: Optional[str]) -> None:
        if not relative_path:
            return

        target = (self._root / relative_path).resolve()
        if self._root.resolve() not in target.parents:
            logger.warning("refusing to delete photo outside upload dir: %s", relative_path)
            return
        try:
            target.unlink()
        except FileNotFoundError:
            logger.debug("photo already gone: %s", relative_path)

    def replace(
        self,
        *,
        old_path: Optional[str],
        prefix: str,
        entity_id: int,
        data: str,
        mime_type: Optional[str],
        commit: Callable[[str], object],
    ) -> str:
        """Store the new photo, record it with `commit`, then drop the old file.

        If `commit` raises, the new file is removed and the old one is kept.
        """

        new_path = self.save(prefix=prefix, entity_id=entity_id, data=data, mime_type=mime_type)
        try:
            commit(new_path)
        except Exception:
            self.delete(new_path)
            raise
        if old_path and old_path != new_path:
            self.delete(old_path)
        return new_path
