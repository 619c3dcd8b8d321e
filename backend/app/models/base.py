from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import event
from sqlmodel import SQLModel, create_engine
from sqlalchemy.engine import Engine
from app.config import Settings

_settings = Settings()


def _casefold(value: Optional[str]) -> Optional[str]:
    return value.casefold() if value is not None else None


def make_engine(url: str, **kwargs: Any) -> Engine:
    is_sqlite = url.startswith("sqlite")
    connect_args = {"check_same_thread": False} if is_sqlite else {}
    target = create_engine(url, connect_args=connect_args, **kwargs)
    if is_sqlite:
        # SQLite's lower() only folds ASCII; search compares casefold() on both sides
        @event.listens_for(target, "connect")
        def _register_functions(dbapi_conn, _record) -> None:
            dbapi_conn.create_function("casefold", 1, _casefold, deterministic=True)

    return target


engine: Engine = make_engine(_settings.resolved_database_url())


def init_db(target: Engine | None = None) -> None:
    target = target or engine
    if target.dialect.name == "sqlite":
        # Enable WAL
        with target.begin() as conn:
            conn.exec_driver_sql("PRAGMA journal_mode=WAL;")
            conn.exec_driver_sql("PRAGMA synchronous=NORMAL;")
    # Register tables before create_all
    import app.models.summary  # noqa: F401

    SQLModel.metadata.create_all(target)
