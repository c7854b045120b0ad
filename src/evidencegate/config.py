"""Environment-based configuration."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Any

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from evidencegate.constants import (
    HIGH_CONFIDENCE_THRESHOLD,
    MEDIUM_CONFIDENCE_THRESHOLD,
    NEVER_AUTOFILL_CATEGORIES,
    SNIPPET_MAX_LENGTH,
)

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Reads from .env file and environment variables."""

    # Autofill policy
    high_confidence_threshold: float = HIGH_CONFIDENCE_THRESHOLD
    medium_confidence_threshold: float = MEDIUM_CONFIDENCE_THRESHOLD
    # Organization additions to the never-autofill set
    extra_blocked_categories: Annotated[list[str], NoDecode] = []

    # Evidence
    snippet_max_length: int = SNIPPET_MAX_LENGTH

    # Database
    database_url: str = "sqlite:///data/evidencegate.db"

    # Directories
    data_dir: Path = Path("data")

    # Logging
    log_level: str = "INFO"
    debug_mode: bool = False

    # API
    cors_origins: str = "http://localhost:3000"

    @field_validator("extra_blocked_categories", mode="before")
    @classmethod
    def _parse_categories(cls, v: Any) -> Any:
        """Accept comma-separated string or JSON array."""
        if isinstance(v, str):
            return [s.strip() for s in v.split(",") if s.strip()]
        return v

    @field_validator("extra_blocked_categories")
    @classmethod
    def _normalize_categories(cls, v: list[str]) -> list[str]:
        normalized = [c.strip().lower() for c in v if c.strip()]
        redundant = sorted(
            c for c in set(normalized) if c in NEVER_AUTOFILL_CATEGORIES
        )
        if redundant:
            logger.warning(
                "Blocked categories already in default set: %s",
                ", ".join(redundant),
            )
        return normalized

    @field_validator(
        "high_confidence_threshold", "medium_confidence_threshold"
    )
    @classmethod
    def _validate_threshold(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError("confidence thresholds must be within [0, 1]")
        return v

    @model_validator(mode="after")
    def _check_threshold_order(self) -> Settings:
        if self.medium_confidence_threshold > self.high_confidence_threshold:
            raise ValueError(
                "medium_confidence_threshold must not exceed"
                " high_confidence_threshold"
            )
        return self

    @property
    def blocked_categories(self) -> frozenset[str]:
        """Default never-autofill set plus organization additions."""
        return NEVER_AUTOFILL_CATEGORIES | frozenset(
            self.extra_blocked_categories
        )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "",
        "extra": "ignore",
    }


def create_app_engine(
    url: str, *, echo: bool = False
) -> AsyncEngine:
    """Create async SQLite engine with WAL journal mode.

    Handles URL conversion (sqlite:/// → sqlite+aiosqlite:///)
    and sets WAL mode via a pool-connect event listener so it
    fires once per raw DBAPI connection, not per ORM session.
    """
    if url.startswith("sqlite:///"):
        db_url = "sqlite+aiosqlite:///" + url[len("sqlite:///"):]
    else:
        db_url = url
    engine = create_async_engine(db_url, echo=echo)

    if db_url.startswith("sqlite+aiosqlite:///"):

        @event.listens_for(engine.sync_engine, "connect")
        def _set_wal_mode(
            dbapi_conn: object,
            _connection_record: object,
        ) -> None:
            cursor = dbapi_conn.cursor()  # type: ignore[union-attr]
            cursor.execute("PRAGMA journal_mode=WAL")  # pyright: ignore[reportUnknownMemberType]
            cursor.close()  # pyright: ignore[reportUnknownMemberType]

    return engine
