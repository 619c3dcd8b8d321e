from __future__ import annotations

from functools import lru_cache
from typing import Iterator

from sqlmodel import Session

from app.config import Settings
from app.models.base import engine
from app.services.summarization_service import Summarizer, build_summarizer


def get_session() -> Iterator[Session]:
    with Session(engine) as session:
        yield session


@lru_cache(maxsize=1)
def get_summarizer() -> Summarizer:
    return build_summarizer(Settings())
