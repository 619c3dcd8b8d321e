from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests


class ApiClientError(Exception):
    def __init__(self, status: int, code: str, message: str) -> None:
        super().__init__(f"{code} ({status}): {message}")
        self.status = status
        self.code = code
        self.message = message


@dataclass
class SavedSummary:
    id: str
    created_at: str


@dataclass
class RemoteSummary:
    id: str
    original_text: str
    summary: str
    created_at: str


@dataclass
class RemoteHistoryPage:
    items: List[RemoteSummary] = field(default_factory=list)
    next_cursor: Optional[str] = None
    has_next: bool = False
    has_prev: bool = False
    prev_cursor: Optional[str] = None
    degraded: bool = False


class SummaryNotesClient:
    """Thin HTTP client for the summarize, save-summary and history endpoints."""

    def __init__(
        self,
        base_url: str = "http://127.0.0.1:8000",
        timeout_s: float = 30.0,
        http: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self.http = http or requests.Session()

    def _check(self, resp: requests.Response) -> Dict[str, Any]:
        try:
            payload = resp.json()
        except ValueError:
            payload = {}
        if not resp.ok:
            err = payload.get("error") if isinstance(payload, dict) else None
            if isinstance(err, dict):
                raise ApiClientError(resp.status_code, str(err.get("code")), str(err.get("message")))
            raise ApiClientError(resp.status_code, "HTTP_ERROR", resp.reason or "Request failed")
        return payload if isinstance(payload, dict) else {}

    def summarize(self, text: str) -> str:
        resp = self.http.post(f"{self.base_url}/summarize", json={"text": text}, timeout=self.timeout_s)
        return str(self._check(resp).get("summary", ""))

    def save(self, original_text: str, summary: str) -> SavedSummary:
        resp = self.http.post(
            f"{self.base_url}/save-summary",
            json={"originalText": original_text, "summary": summary},
            timeout=self.timeout_s,
        )
        data = self._check(resp)
        return SavedSummary(id=str(data["id"]), created_at=str(data["createdAt"]))

    def history(
        self,
        q: Optional[str] = None,
        take: Optional[int] = None,
        cursor: Optional[str] = None,
        direction: str = "next",
    ) -> RemoteHistoryPage:
        params: Dict[str, Any] = {"direction": direction}
        if q:
            params["q"] = q
        if take is not None:
            params["take"] = take
        if cursor:
            params["cursor"] = cursor
        resp = self.http.get(f"{self.base_url}/history", params=params, timeout=self.timeout_s)
        data = self._check(resp)
        items = [
            RemoteSummary(
                id=str(i["id"]),
                original_text=str(i["originalText"]),
                summary=str(i["summary"]),
                created_at=str(i["createdAt"]),
            )
            for i in data.get("items", [])
        ]
        return RemoteHistoryPage(
            items=items,
            next_cursor=data.get("nextCursor"),
            has_next=bool(data.get("hasNext")),
            has_prev=bool(data.get("hasPrev")),
            prev_cursor=data.get("prevCursor"),
            degraded=bool(data.get("degraded")),
        )
