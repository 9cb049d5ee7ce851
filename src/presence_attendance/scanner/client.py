from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from ..attendance.model import MarkResult
from ..core.enums import AttendanceStatus
from ..core.exceptions import RemoteServiceError
from ..roster.model import RosterEntry

logger = logging.getLogger(__name__)


class AttendanceApiClient:
    """Operator-device client for the attendance API.

    A mark only counts as done when the response says ``success: true``;
    anything else raises ``RemoteServiceError``.
    """

    def __init__(self, base_url: str, *, session: Optional[requests.Session] = None, timeout: float = 10.0):
        self._base_url = base_url.rstrip("/")
        self._http = session or requests.Session()
        self._timeout = timeout

    def _url(self, path: str) -> str:
        return f"{self._base_url}{path}"

    def _json(self, response: requests.Response) -> dict[str, Any]:
        try:
            body = response.json()
        except ValueError:
            raise RemoteServiceError(f"Unexpected response from server (HTTP {response.status_code})", response.status_code)
        if not isinstance(body, dict) or body.get("success") is not True:
            message = body.get("message") if isinstance(body, dict) else None
            raise RemoteServiceError(message or "Request failed", response.status_code)
        return body

    def login(self, username: str, password: str) -> dict[str, Any]:
        try:
            resp = self._http.post(
                self._url("/api/auth/login"),
                json={"username": username, "password": password},
                timeout=self._timeout,
            )
        except requests.exceptions.RequestException as e:
            raise RemoteServiceError(f"Login failed: {e}")
        return self._json(resp).get("user") or {}

    def fetch_roster(self, section_id: int, year_level: Optional[int] = None) -> list[RosterEntry]:
        params: dict[str, Any] = {"section_id": section_id}
        if year_level is not None:
            params["year_level"] = year_level
        try:
            resp = self._http.get(self._url("/api/roster"), params=params, timeout=self._timeout)
        except requests.exceptions.RequestException as e:
            raise RemoteServiceError(f"Roster request failed: {e}")
        return [RosterEntry.from_dict(row) for row in self._json(resp).get("data") or []]

    def mark(self, body: dict[str, Any]) -> MarkResult:
        try:
            resp = self._http.post(self._url("/api/attendance/mark"), json=body, timeout=self._timeout)
        except requests.exceptions.RequestException as e:
            raise RemoteServiceError(f"Failed to mark attendance: {e}")

        data = self._json(resp)
        status = data.get("status")
        result = MarkResult(
            success=True,
            attendance_id=data.get("attendance_id"),
            status=AttendanceStatus(status) if status else None,
            timestamp=data.get("timestamp"),
            message=data.get("message") or "",
        )
        logger.info("marked %s as %s (id=%s)", body.get("student_id"), status, result.attendance_id)
        return result

    def today(self, *, teacher_id: int, course_id: int, section_id: Optional[int] = None) -> list[dict[str, Any]]:
        params: dict[str, Any] = {"teacher_id": teacher_id, "course_id": course_id}
        if section_id is not None:
            params["section_id"] = section_id
        try:
            resp = self._http.get(self._url("/api/attendance/today"), params=params, timeout=self._timeout)
        except requests.exceptions.RequestException as e:
            raise RemoteServiceError(f"Attendance request failed: {e}")
        return list(self._json(resp).get("data") or [])
