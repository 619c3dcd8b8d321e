from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional, Union
import logging

import requests

from app.client.api_client import ApiClientError, RemoteSummary, SummaryNotesClient
from app.client.local_history import LocalHistoryEntry, LocalHistoryStore

logger = logging.getLogger("app.client")


def _iso_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def summarize_and_store(
    client: SummaryNotesClient,
    store: LocalHistoryStore,
    text: str,
    save: bool = False,
    now: Optional[str] = None,
) -> LocalHistoryEntry:
    """Summarize ``text``, mirror it locally and optionally save it.

    The local entry is written right after summarizing. When saving, the
    server id is attached by ``created_at``; a failed save leaves the entry
    unsaved and the error propagates.
    """
    summary = client.summarize(text)
    entry = LocalHistoryEntry(original_text=text, summary=summary, created_at=now or _iso_now())
    store.add(entry)
    if not save:
        return entry

    saved = client.save(text, summary)
    store.attach_id(entry.created_at, saved.id)
    return LocalHistoryEntry(
        original_text=entry.original_text,
        summary=entry.summary,
        created_at=entry.created_at,
        id=saved.id,
    )


@dataclass
class HistoryView:
    items: List[Union[RemoteSummary, LocalHistoryEntry]] = field(default_factory=list)
    next_cursor: Optional[str] = None
    has_next: bool = False
    has_prev: bool = False
    prev_cursor: Optional[str] = None
    degraded: bool = False


def _local_view(store: LocalHistoryStore, q: Optional[str]) -> HistoryView:
    return HistoryView(items=list(store.search(q)), degraded=True)


def browse_history(
    client: SummaryNotesClient,
    store: LocalHistoryStore,
    q: Optional[str] = None,
    take: Optional[int] = None,
    cursor: Optional[str] = None,
    direction: str = "next",
) -> HistoryView:
    try:
        page = client.history(q=q, take=take, cursor=cursor, direction=direction)
    except (requests.RequestException, ApiClientError) as exc:
        logger.warning("History unavailable, showing local data: %s", exc)
        return _local_view(store, q)

    if page.degraded:
        return _local_view(store, q)
    return HistoryView(
        items=list(page.items),
        next_cursor=page.next_cursor,
        has_next=page.has_next,
        has_prev=page.has_prev,
        prev_cursor=page.prev_cursor,
    )
