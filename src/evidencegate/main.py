"""FastAPI application with lifespan startup."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.ext.asyncio import async_sessionmaker

from evidencegate import __version__
from evidencegate.api.routes import autofill, evidence, health
from evidencegate.config import Settings, create_app_engine
from evidencegate.logging_config import setup_logging
from evidencegate.models import Base

_settings = Settings()
setup_logging(_settings.log_level)

_logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    # 1. Use module-level settings (single source of truth)
    settings = _settings
    settings.data_dir.mkdir(parents=True, exist_ok=True)

    # 2. Create async SQLite engine (WAL set via pool-connect listener)
    engine = create_app_engine(
        settings.database_url, echo=settings.debug_mode
    )

    # 3. Create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    # 4. Create session factory
    session_factory = async_sessionmaker(engine, expire_on_commit=False)

    # 5. Store in app.state
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = session_factory

    _logger.info(
        "event=startup version=%s strict_tiers=%s",
        __version__,
        settings.debug_mode,
    )
    if settings.extra_blocked_categories:
        _logger.info(
            "event=blocked_categories_extended categories=%s",
            ",".join(settings.extra_blocked_categories),
        )

    yield

    # Cleanup
    await engine.dispose()


app = FastAPI(
    title="EvidenceGate",
    description=(
        "Evidence provenance and gated auto-fill --"
        " every extracted value traced back to its source"
    ),
    version=__version__,
    openapi_url="/api/openapi.json",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    lifespan=lifespan,
)

_cors_origins = [
    o.strip()
    for o in _settings.cors_origins.split(",")
    if o.strip()
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
    allow_headers=["Content-Type"],
    allow_credentials=False,
)

# Routes
app.include_router(health.router)
app.include_router(evidence.router)
app.include_router(autofill.router)
