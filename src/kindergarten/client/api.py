"""Thin httpx client for the kindergarten API.

Every GET goes through the same retry policy: transport errors and 5xx
responses are retried `retries` times with linear backoff. Writes are sent
once.
"""

from __future__ import annotations

import logging
import time
from datetime import date
from typing import Any, Callable, Optional

import httpx

from .errors import ApiServerError, error_for_status

logger = logging.getLogger(__name__)


class KindergartenClient:
    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        retries: int = 3,
        backoff: float = 1.0,
        *,
        timeout: float = 20.0,
        transport: Optional[httpx.BaseTransport] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.token = token
        self._retries = max(0, int(retries))
        self._backoff = backoff
        self._sleep = sleep
        self._http = httpx.Client(
            base_url=base_url.rstrip("/"),
            headers={"Accept": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "KindergartenClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _headers(self) -> dict:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    @staticmethod
    def _handle(r: httpx.Response) -> Any:
        ctype = (r.headers.get("content-type") or "").split(";")[0].strip()
        data = r.text
        if ctype == "application/json":
            try:
                data = r.json()
            except ValueError:
                logger.warning("malformed JSON body from %s %s", r.request.method, r.request.url)
        if r.is_success:
            return data
        if isinstance(data, dict):
            raise error_for_status(r.status_code, str(data.get("message") or r.reason_phrase), data.get("details"))
        raise error_for_status(r.status_code, data or r.reason_phrase)

    def _send(self, method: str, path: str, **kwargs) -> httpx.Response:
        return self._http.request(method, path, headers=self._headers(), **kwargs)

    def get(self, path: str, params: Optional[dict] = None) -> Any:
        params = {k: v for k, v in (params or {}).items() if v is not None}
        attempt = 0
        while True:
            try:
                response = self._send("GET", path, params=params)
            except httpx.TransportError as e:
                if attempt >= self._retries:
                    raise ApiServerError(f"GET {path} failed: {e}") from e
                logger.warning("GET %s failed (%s), retry %d/%d", path, e, attempt + 1, self._retries)
            else:
                if response.status_code < 500 or attempt >= self._retries:
                    return self._handle(response)
                logger.warning(
                    "GET %s returned %d, retry %d/%d", path, response.status_code, attempt + 1, self._retries
                )
            attempt += 1
            self._sleep(self._backoff * attempt)

    def post(self, path: str, json: Any = None) -> Any:
        return self._handle(self._send("POST", path, json=json))

    def put(self, path: str, json: Any = None) -> Any:
        return self._handle(self._send("PUT", path, json=json))

    def delete(self, path: str) -> Any:
        return self._handle(self._send("DELETE", path))

    # auth

    def login(self, email: str, password: str) -> dict:
        data = self.post("/api/auth/login", {"email": email, "password": password})
        self.token = data["token"]
        return data["user"]

    def me(self) -> dict:
        return self.get("/api/auth/me")

    # reads used by dashboards

    def children(self) -> list:
        return self.get("/api/children")

    def child(self, child_id: int) -> dict:
        return self.get(f"/api/children/{child_id}")

    def group_attendance(self, group_id: int, start: date, end: date) -> list:
        return self.get(
            f"/api/attendance/group/{group_id}",
            {"start_date": start.isoformat(), "end_date": end.isoformat()},
        )

    def mark_attendance(self, child_id: int, day: date, is_present: bool) -> dict:
        return self.post(
            "/api/attendance/mark", {"child_id": child_id, "date": day.isoformat(), "is_present": is_present}
        )

    def billing(self, year: int, month: int) -> dict:
        return self.get("/api/finance/billing", {"year": year, "month": month})

    def recommendation_tree(self) -> Any:
        return self.get("/api/recommendations/tree")

    def menu_grid(self, group_id: int, week: int = 1) -> dict:
        return self.get(f"/api/menu/weekly/{group_id}/grid", {"week": week})

    def progress(self, child_id: int) -> dict:
        return self.get(f"/api/progress/child/{child_id}")
