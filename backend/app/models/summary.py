from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4
from sqlmodel import SQLModel, Field


def new_record_id() -> str:
    return uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    # Some drivers hand back naive values; they are always UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class SummaryRecord(SQLModel, table=True):
    id: str = Field(default_factory=new_record_id, primary_key=True)
    original_text: str
    summary: str
    created_at: datetime = Field(default_factory=utcnow, index=True)
