from __future__ import annotations

from pathlib import Path
from typing import List, Optional
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings


def _home() -> Path:
    return Path.home() / ".summary-notes"


class Settings(BaseSettings):
    app_name: str = "Summary Notes"

    # Base data dir (e.g., ~/.summary-notes)
    appdata_dir: Path = Field(default_factory=_home)
    data_dir: Path = Field(default_factory=lambda: _home() / "data")
    logs_dir: Path = Field(default_factory=lambda: _home() / "logs")

    # Empty means SQLite under data_dir
    database_url: Optional[str] = None

    # Summarization provider; no key means local summaries only
    openai_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("SN_OPENAI_API_KEY", "OPENAI_API_KEY"),
    )
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-4o-mini"
    openai_timeout_s: float = 30.0

    cors_origins: List[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"]
    )

    # Client side
    api_base_url: str = "http://127.0.0.1:8000"
    local_history_path: Path = Field(default_factory=lambda: _home() / "local_history.json")

    class Config:
        env_prefix = "SN_"
        case_sensitive = False
        populate_by_name = True

    def resolved_database_url(self) -> str:
        if self.database_url:
            return self.database_url
        return f"sqlite:///{self.data_dir / 'summary_notes.db'}"

    def ensure_dirs(self) -> None:
        for d in [self.appdata_dir, self.data_dir, self.logs_dir]:
            d.mkdir(parents=True, exist_ok=True)
