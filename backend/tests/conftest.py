from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Iterator, List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session

from app.deps import get_session, get_summarizer
from app.main import create_app
from app.models.base import init_db, make_engine
from app.models.summary import SummaryRecord
from app.services.summarization_service import Summarizer


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, json_error: bool = False) -> None:
        self.status_code = status_code
        self.payload = payload
        self.json_error = json_error
        self.reason = "OK" if self.ok else "Error"

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        if self.json_error:
            raise ValueError("Expecting value")
        return self.payload


class FakeHttp:
    """Stands in for requests.Session; records calls."""

    def __init__(self, response: Optional[FakeResponse] = None, exc: Optional[Exception] = None) -> None:
        self.response = response or FakeResponse(200, {})
        self.exc = exc
        self.calls: List[tuple[str, str, dict]] = []

    def _do(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append((method, url, kwargs))
        if self.exc is not None:
            raise self.exc
        return self.response

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        return self._do("POST", url, **kwargs)

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        return self._do("GET", url, **kwargs)


def _memory_engine():
    return make_engine("sqlite://", poolclass=StaticPool)


@pytest.fixture
def engine():
    eng = _memory_engine()
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def broken_engine():
    # No tables: every query fails like an unreachable store
    eng = _memory_engine()
    yield eng
    eng.dispose()


@pytest.fixture
def session(engine) -> Iterator[Session]:
    with Session(engine) as s:
        yield s


def _make_app(eng, summarizer: Summarizer):
    app = create_app()

    def _session() -> Iterator[Session]:
        with Session(eng) as s:
            yield s

    app.dependency_overrides[get_session] = _session
    app.dependency_overrides[get_summarizer] = lambda: summarizer
    return app


@pytest.fixture
def summarizer() -> Summarizer:
    return Summarizer(None)


@pytest.fixture
def client(engine, summarizer) -> TestClient:
    return TestClient(_make_app(engine, summarizer))


@pytest.fixture
def broken_client(broken_engine, summarizer) -> TestClient:
    return TestClient(_make_app(broken_engine, summarizer), raise_server_exceptions=False)


@pytest.fixture
def add_records(session):
    """Insert records one second apart; the last one is the newest."""

    def _add(texts: List[tuple[str, str]], base: Optional[datetime] = None) -> List[SummaryRecord]:
        start = base or datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
        records = []
        for i, (original, summary) in enumerate(texts):
            rec = SummaryRecord(original_text=original, summary=summary, created_at=start + timedelta(seconds=i))
            session.add(rec)
            records.append(rec)
        session.commit()
        for rec in records:
            session.refresh(rec)
        return records

    return _add
