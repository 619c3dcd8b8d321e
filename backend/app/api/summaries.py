from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session
import logging

from app.deps import get_session, get_summarizer
from app.errors import internal_error
from app.models.summary import SummaryRecord, as_utc
from app.repositories.summaries import SummariesRepository, clamp_take
from app.services.summarization_service import Summarizer

logger = logging.getLogger("app.api")

MIN_TEXT_CHARS = 20


router = APIRouter(tags=["summaries"])


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class SummarizeRequest(CamelModel):
    text: str

    @field_validator("text")
    @classmethod
    def _long_enough(cls, v: str) -> str:
        if len(v.strip()) < MIN_TEXT_CHARS:
            raise ValueError(f"Text must be at least {MIN_TEXT_CHARS} characters")
        return v


class SummarizeResponse(CamelModel):
    summary: str


class SaveSummaryRequest(CamelModel):
    original_text: str = Field(alias="originalText")
    summary: str

    @field_validator("original_text")
    @classmethod
    def _original_long_enough(cls, v: str) -> str:
        if len(v) < MIN_TEXT_CHARS:
            raise ValueError(f"Original text must be at least {MIN_TEXT_CHARS} characters")
        return v

    @field_validator("summary")
    @classmethod
    def _summary_present(cls, v: str) -> str:
        if len(v) < 1:
            raise ValueError("Summary is required")
        return v


class SaveSummaryResponse(CamelModel):
    id: str
    created_at: datetime = Field(alias="createdAt")


class SummaryOut(CamelModel):
    id: str
    original_text: str = Field(alias="originalText")
    summary: str
    created_at: datetime = Field(alias="createdAt")

    @classmethod
    def from_record(cls, record: SummaryRecord) -> "SummaryOut":
        return cls(
            id=record.id,
            original_text=record.original_text,
            summary=record.summary,
            created_at=as_utc(record.created_at),
        )


class HistoryPageOut(CamelModel):
    items: List[SummaryOut] = Field(default_factory=list)
    next_cursor: Optional[str] = Field(default=None, alias="nextCursor")
    has_next: bool = Field(default=False, alias="hasNext")
    has_prev: bool = Field(default=False, alias="hasPrev")
    prev_cursor: Optional[str] = Field(default=None, alias="prevCursor")
    degraded: bool = False


@router.post("/summarize")
def summarize_endpoint(
    body: SummarizeRequest,
    summarizer: Summarizer = Depends(get_summarizer),
) -> SummarizeResponse:
    return SummarizeResponse(summary=summarizer.summarize(body.text))


@router.post(
    "/save-summary",
    status_code=status.HTTP_201_CREATED,
    response_model=SaveSummaryResponse,
)
def save_summary(body: SaveSummaryRequest, session: Session = Depends(get_session)) -> SaveSummaryResponse:
    try:
        record = SummariesRepository(session).create(body.original_text, body.summary)
    except SQLAlchemyError as exc:
        logger.exception("Failed to persist summary")
        raise internal_error("Failed to save summary") from exc
    return SaveSummaryResponse(id=record.id, created_at=as_utc(record.created_at))


@router.get("/history", response_model=HistoryPageOut)
def history(
    q: Optional[str] = None,
    take: Optional[str] = None,
    cursor: Optional[str] = None,
    direction: Optional[str] = Query(default="next"),
    session: Session = Depends(get_session),
) -> HistoryPageOut:
    page_size = clamp_take(take)
    cursor = cursor or None
    walk = "prev" if direction == "prev" else "next"
    try:
        page = SummariesRepository(session).page(q=q, take=page_size, cursor=cursor, direction=walk)
    except SQLAlchemyError:
        logger.exception("History store unavailable, reporting degraded page")
        return HistoryPageOut(has_prev=cursor is not None, degraded=True)

    return HistoryPageOut(
        items=[SummaryOut.from_record(r) for r in page.items],
        next_cursor=page.next_cursor,
        has_next=page.has_next,
        has_prev=page.has_prev,
        prev_cursor=page.prev_cursor,
    )
