from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional
from sqlalchemy import and_, func, or_
from sqlmodel import Session, col, select

from app.models.summary import SummaryRecord, as_utc

TAKE_DEFAULT = 10
TAKE_MAX = 50


@dataclass
class SummaryPage:
    items: List[SummaryRecord] = field(default_factory=list)
    next_cursor: Optional[str] = None
    has_next: bool = False
    prev_cursor: Optional[str] = None
    has_prev: bool = False


def clamp_take(raw: object) -> int:
    """Parse a requested page size into [1, TAKE_MAX].

    Missing or non-numeric input means the default; fractional input is
    truncated toward zero ("2.5" -> 2) and then clamped.
    """
    if raw is None or str(raw).strip() == "":
        return TAKE_DEFAULT
    try:
        value = int(float(str(raw).strip()))
    except (ValueError, OverflowError):
        value = TAKE_DEFAULT
    return min(TAKE_MAX, max(1, value))


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SummariesRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def create(self, original_text: str, summary: str) -> SummaryRecord:
        record = SummaryRecord(original_text=original_text, summary=summary)
        self.session.add(record)
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        self.session.refresh(record)
        return record

    def get(self, record_id: str) -> Optional[SummaryRecord]:
        return self.session.get(SummaryRecord, record_id)

    def page(
        self,
        q: Optional[str] = None,
        take: int = TAKE_DEFAULT,
        cursor: Optional[str] = None,
        direction: str = "next",
    ) -> SummaryPage:
        """Fetch one page ordered newest first.

        Ordering is (created_at, id) so equal timestamps still give a total
        order. One extra row is fetched to detect whether more data exists
        in the walking direction; it is never returned.

        ``direction="next"`` walks older from the cursor: the extra row sets
        ``has_next`` and any cursor means a newer page exists. ``"prev"``
        walks newer from the cursor and the slice is reversed back to newest
        first: the extra row sets ``has_prev``, and the page the cursor came
        from is always reachable through ``next_cursor``.
        """
        backward = direction == "prev"
        created = col(SummaryRecord.created_at)
        rid = col(SummaryRecord.id)

        statement = select(SummaryRecord)
        term = (q or "").strip()
        if term:
            statement = statement.where(self._matches(term))

        if cursor:
            anchor = self.get(cursor)
            if anchor is None:
                return SummaryPage()
            anchor_at = as_utc(anchor.created_at)
            if backward:
                statement = statement.where(
                    or_(
                        created > anchor_at,
                        and_(created == anchor_at, rid > anchor.id),
                    )
                )
            else:
                statement = statement.where(
                    or_(
                        created < anchor_at,
                        and_(created == anchor_at, rid < anchor.id),
                    )
                )

        if backward:
            statement = statement.order_by(created.asc(), rid.asc())
        else:
            statement = statement.order_by(created.desc(), rid.desc())
        statement = statement.limit(take + 1)

        rows = list(self.session.exec(statement))
        more = len(rows) > take
        if more:
            rows = rows[:take]
        first_id = rows[0].id if rows else None
        last_id = rows[-1].id if rows else None

        if backward:
            rows.reverse()
            first_id, last_id = last_id, first_id
            return SummaryPage(
                items=rows,
                next_cursor=last_id,
                has_next=bool(rows),
                prev_cursor=first_id if more else None,
                has_prev=more,
            )

        has_prev = cursor is not None
        return SummaryPage(
            items=rows,
            next_cursor=last_id if more else None,
            has_next=more,
            prev_cursor=first_id if has_prev else None,
            has_prev=has_prev,
        )

    def _matches(self, term: str):
        pattern = f"%{_escape_like(term.casefold())}%"
        original = col(SummaryRecord.original_text)
        summary = col(SummaryRecord.summary)
        if self.session.get_bind().dialect.name == "sqlite":
            return or_(
                func.casefold(original).like(pattern, escape="\\"),
                func.casefold(summary).like(pattern, escape="\\"),
            )
        return or_(
            original.ilike(pattern, escape="\\"),
            summary.ilike(pattern, escape="\\"),
        )
