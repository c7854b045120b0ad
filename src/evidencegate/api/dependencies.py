"""FastAPI dependency injection for repository and service access."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass

from fastapi import Depends, Request

from evidencegate.config import Settings
from evidencegate.repositories.protocols import (
    AutofillDecisionRepository,
    EvidenceRepository,
    ViewEventRepository,
)
from evidencegate.services.evidence_service import EvidenceService

logger = logging.getLogger(__name__)


@dataclass
class Repos:
    """Repository container resolved per-request via Depends."""

    evidence: EvidenceRepository
    views: ViewEventRepository
    decisions: AutofillDecisionRepository


async def get_repos(
    request: Request,
) -> AsyncIterator[Repos]:
    """Generator dep: session lives for entire request, committed after."""
    from evidencegate.repositories.audit_repo import (
        SqlAutofillDecisionRepository,
        SqlViewEventRepository,
    )
    from evidencegate.repositories.evidence_repo import (
        SqlEvidenceRepository,
    )

    session_factory = request.app.state.session_factory
    async with session_factory() as session:
        yield Repos(
            evidence=SqlEvidenceRepository(session),
            views=SqlViewEventRepository(session),
            decisions=SqlAutofillDecisionRepository(session),
        )
        await session.commit()


def get_settings(request: Request) -> Settings:
    """Get Settings from app.state."""
    return request.app.state.settings  # type: ignore[no-any-return]


def get_evidence_service(
    repos: Repos = Depends(get_repos),
    settings: Settings = Depends(get_settings),
) -> EvidenceService:
    return EvidenceService(
        repos.evidence,
        repos.views,
        repos.decisions,
        strict=settings.debug_mode,
        snippet_max_length=settings.snippet_max_length,
    )
