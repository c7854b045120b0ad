"""Shared test fixtures: in-memory SQLite, fakes, evidence builders."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    create_async_engine,
)

from evidencegate.api.dependencies import Repos, get_repos
from evidencegate.config import Settings
from evidencegate.constants import (
    DecisionKind,
    FieldRecordType,
    SourceType,
    StorageTier,
)
from evidencegate.evidence.schemas import RawEvidenceRecord
from evidencegate.evidence.tiers import Precision, storage_tier_for
from evidencegate.evidence.value_objects import BBox, EvidenceRef, TextAnchor
from evidencegate.main import app
from evidencegate.models.base import Base
from evidencegate.overlay.layers import appears_on_page
from evidencegate.repositories.fakes import (
    FakeAutofillDecisionRepository,
    FakeEvidenceRepository,
    FakeViewEventRepository,
)
from evidencegate.services.evidence_service import EvidenceService


def make_ref(
    ref_id: str = "ev-1",
    *,
    tier: Precision = Precision.DOCUMENT,
    confidence: float = 0.9,
    value: Any | None = "ACME Corp",
    page: int | None = None,
    bbox: BBox | None = None,
    anchor: TextAnchor | None = None,
    field_id: str = "field-1",
    document_id: str | None = "doc-1",
    **kwargs: Any,
) -> EvidenceRef:
    """Canonical ref with sensible defaults for unit tests."""
    return EvidenceRef(
        id=ref_id,
        field_id=field_id,
        field_record_type=kwargs.pop(
            "field_record_type", FieldRecordType.AI_EXTRACTION
        ),
        source_type=kwargs.pop("source_type", SourceType.EXTRACTION),
        source_id=kwargs.pop("source_id", "src-1"),
        document_id=document_id,
        tier=tier,
        storage_tier=kwargs.pop("storage_tier", storage_tier_for(tier)),
        confidence=confidence,
        value=value,
        page=page,
        bbox=bbox,
        anchor=anchor,
        **kwargs,
    )


def exact_ref(
    ref_id: str = "ev-exact",
    *,
    page: int = 2,
    confidence: float = 0.9,
    **kwargs: Any,
) -> EvidenceRef:
    return make_ref(
        ref_id,
        tier=Precision.EXACT,
        confidence=confidence,
        page=page,
        bbox=BBox(page=page, x=10, y=20, width=30, height=5),
        **kwargs,
    )


def make_raw(
    raw_id: str = "ev-1",
    *,
    tier: str = StorageTier.T1_TEXT,
    **kwargs: Any,
) -> RawEvidenceRecord:
    """Stored-shape record; T1 with a page-2 box unless overridden."""
    data: dict[str, Any] = {
        "id": raw_id,
        "field_id": "field-1",
        "document_id": "doc-1",
        "source_id": "src-1",
        "value": "ACME Corp",
        "page_number": 2,
        "tier": str(tier),
        "confidence": "0.9",
        "bbox_json": {"x": 0.1, "y": 0.2, "w": 0.3, "h": 0.05},
    }
    data.update(kwargs)
    return RawEvidenceRecord.model_validate(data)


def make_fake_repos() -> Repos:
    return Repos(
        evidence=FakeEvidenceRepository(),
        views=FakeViewEventRepository(),
        decisions=FakeAutofillDecisionRepository(),
    )


def setup_test_app(settings: Settings | None = None) -> Repos:
    """Common app-state setup for API test fixtures.

    Installs fake repos and settings on the shared app. Returns the
    repos so tests can seed and inspect them.
    """
    fake_repos = make_fake_repos()
    app.state.settings = settings or Settings(
        database_url="sqlite:///:memory:"
    )
    app.dependency_overrides[get_repos] = lambda: fake_repos
    return fake_repos


@pytest.fixture
def repos() -> Repos:
    return make_fake_repos()


@pytest.fixture
def service(repos: Repos) -> EvidenceService:
    """EvidenceService over in-memory fakes."""
    return EvidenceService(repos.evidence, repos.views, repos.decisions)


@pytest.fixture
async def engine():
    """In-memory engine with all tables created."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def session(engine):
    """Function-scoped session with connection-level rollback.

    Wraps each test in a connection-level transaction so that
    even ``session.commit()`` calls inside tests are rolled
    back at teardown.
    """
    async with engine.connect() as connection:
        transaction = await connection.begin()
        session = AsyncSession(
            bind=connection, expire_on_commit=False
        )
        yield session
        await session.close()
        await transaction.rollback()


class FakeQueryService:
    """In-memory EvidenceQueryService that records audit calls.

    ``page_delays`` lets tests make one page resolve after another.
    ``fail_with`` makes every call raise the given exception.
    """

    def __init__(
        self,
        refs: list[EvidenceRef] | None = None,
        *,
        page_delays: dict[int, float] | None = None,
        fail_with: Exception | None = None,
        fail_audit_with: Exception | None = None,
    ) -> None:
        self.refs = list(refs or [])
        self.page_delays = page_delays or {}
        self.fail_with = fail_with
        self.fail_audit_with = fail_audit_with
        self.views: list[dict[str, Any]] = []
        self.decisions: list[dict[str, Any]] = []
        self.page_calls: list[int] = []

    async def get_evidence_for_document_page(
        self, document_id: str, page_number: int
    ) -> list[EvidenceRef]:
        self.page_calls.append(page_number)
        delay = self.page_delays.get(page_number, 0)
        if delay:
            await asyncio.sleep(delay)
        if self.fail_with is not None:
            raise self.fail_with
        return [
            r
            for r in self.refs
            if r.document_id == document_id
            and appears_on_page(r, page_number)
        ]

    async def get_evidence_for_field(
        self, field_id: str, field_record_type: FieldRecordType
    ) -> list[EvidenceRef]:
        if self.fail_with is not None:
            raise self.fail_with
        return [
            r
            for r in self.refs
            if r.field_id == field_id
            and r.field_record_type == field_record_type
        ]

    async def log_view(
        self,
        field_id: str,
        field_record_type: FieldRecordType,
        evidence_ref_id: str,
        document_id: str | None,
        page_number: int | None,
        tier_used: StorageTier,
    ) -> None:
        if self.fail_audit_with is not None:
            raise self.fail_audit_with
        self.views.append(
            {
                "field_id": field_id,
                "field_record_type": field_record_type,
                "evidence_ref_id": evidence_ref_id,
                "document_id": document_id,
                "page_number": page_number,
                "tier_used": tier_used,
            }
        )

    async def record_autofill_decision(
        self,
        template_id: str,
        field_id: str,
        predicate_id: str | None,
        decision: DecisionKind,
        confidence: float,
    ) -> None:
        if self.fail_audit_with is not None:
            raise self.fail_audit_with
        self.decisions.append(
            {
                "template_id": template_id,
                "field_id": field_id,
                "predicate_id": predicate_id,
                "decision": decision,
                "confidence": confidence,
            }
        )
