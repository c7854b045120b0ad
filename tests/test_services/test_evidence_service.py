"""Tests for EvidenceService over in-memory fake repositories."""

from __future__ import annotations

import pytest

from evidencegate.api.dependencies import Repos
from evidencegate.constants import (
    DecisionKind,
    FieldRecordType,
    ProvenanceStatus,
    StorageTier,
)
from evidencegate.evidence.tiers import Precision
from evidencegate.models.evidence_ref import EvidenceRecord
from evidencegate.resilience.errors import UnknownStorageTierError
from evidencegate.services.evidence_service import EvidenceService
from tests.conftest import make_raw

AI = FieldRecordType.AI_EXTRACTION


class TestCreateAndRead:
    async def test_create_returns_canonical_ref(
        self, service: EvidenceService
    ) -> None:
        ref = await service.create(make_raw("ev-1"))
        assert ref.tier is Precision.EXACT
        assert ref.bbox is not None
        assert ref.confidence == 0.9

    async def test_field_evidence(self, service: EvidenceService) -> None:
        await service.create(make_raw("ev-1"))
        await service.create(make_raw("ev-2", field_id="other"))
        refs = await service.get_evidence_for_field("field-1", AI)
        assert [r.id for r in refs] == ["ev-1"]

    async def test_field_record_type_is_part_of_key(
        self, service: EvidenceService
    ) -> None:
        await service.create(make_raw("ev-1"))
        refs = await service.get_evidence_for_field(
            "field-1", FieldRecordType.ASSET_ATTRIBUTE
        )
        assert refs == []

    async def test_page_evidence_uses_bbox_page(
        self, service: EvidenceService
    ) -> None:
        await service.create(
            make_raw(
                "split",
                page_number=5,
                bbox_json={"x": 0.1, "y": 0.1, "w": 0.1, "h": 0.1, "page": 3},
            )
        )
        await service.create(make_raw("doc-level", tier="T3_ANCHOR"))

        on_3 = await service.get_evidence_for_document_page("doc-1", 3)
        on_5 = await service.get_evidence_for_document_page("doc-1", 5)
        assert sorted(r.id for r in on_3) == ["doc-level", "split"]
        assert [r.id for r in on_5] == ["doc-level"]

    async def test_best_prefers_precision(
        self, service: EvidenceService
    ) -> None:
        await service.create(make_raw("ocr", tier="T2_OCR", confidence=0.99))
        await service.create(make_raw("text", confidence=0.7))
        best = await service.get_best("field-1", AI)
        assert best is not None
        assert best.id == "text"

    async def test_best_without_evidence(
        self, service: EvidenceService
    ) -> None:
        assert await service.get_best("field-1", AI) is None

    async def test_get_by_id(self, service: EvidenceService) -> None:
        await service.create(make_raw("ev-1"))
        ref = await service.get_by_id("ev-1")
        assert ref is not None
        assert await service.get_by_id("missing") is None

    async def test_invalid_location_json_lists_as_document(
        self, service: EvidenceService, repos: Repos
    ) -> None:
        record = EvidenceRecord.from_raw(make_raw("broken"))
        record.bbox_json = {"x": "left"}
        await repos.evidence.put(record)

        ref = await service.get_by_id("broken")
        assert ref is not None
        assert ref.tier is Precision.DOCUMENT
        assert ref.degraded is True

    async def test_strict_service_rejects_unknown_tier(
        self, repos: Repos
    ) -> None:
        strict = EvidenceService(
            repos.evidence, repos.views, repos.decisions, strict=True
        )
        with pytest.raises(UnknownStorageTierError):
            await strict.create(make_raw("odd", tier="T7"))


class TestSupersede:
    async def test_superseded_ref_drops_out(
        self, service: EvidenceService
    ) -> None:
        await service.create(make_raw("v1", value="ACME"))
        new = await service.supersede("v1", make_raw("v2", value="ACME Corp"))

        assert new is not None
        assert new.value == "ACME Corp"
        refs = await service.get_evidence_for_field("field-1", AI)
        assert [r.id for r in refs] == ["v2"]
        assert await service.get_by_id("v1") is None

    async def test_cannot_supersede_twice(
        self, service: EvidenceService
    ) -> None:
        await service.create(make_raw("v1"))
        await service.supersede("v1", make_raw("v2"))
        assert await service.supersede("v1", make_raw("v3")) is None

    async def test_unknown_id(self, service: EvidenceService) -> None:
        assert await service.supersede("nope", make_raw("v2")) is None


class TestProvenanceReview:
    async def test_unresolved_listing(self, service: EvidenceService) -> None:
        await service.create(
            make_raw("a", provenance_status=ProvenanceStatus.UNRESOLVED)
        )
        await service.create(
            make_raw("b", provenance_status=ProvenanceStatus.NEEDS_REVIEW)
        )
        await service.create(
            make_raw("c", provenance_status=ProvenanceStatus.RESOLVED)
        )
        refs = await service.list_unresolved()
        assert sorted(r.id for r in refs) == ["a", "b"]

    async def test_resolving_removes_from_listing(
        self, service: EvidenceService
    ) -> None:
        await service.create(
            make_raw("a", provenance_status=ProvenanceStatus.UNRESOLVED)
        )
        assert await service.update_provenance_status(
            "a", ProvenanceStatus.RESOLVED
        )
        assert await service.list_unresolved() == []

    async def test_status_update_unknown_id(
        self, service: EvidenceService
    ) -> None:
        assert not await service.update_provenance_status(
            "missing", ProvenanceStatus.RESOLVED
        )


class TestAuditTrail:
    async def test_log_view(
        self, service: EvidenceService, repos: Repos
    ) -> None:
        await service.log_view(
            "field-1", AI, "ev-1", "doc-1", 2, StorageTier.T1_TEXT
        )
        events = await service.view_log_for_field("field-1")
        assert len(events) == 1
        assert events[0].tier_used == "T1_TEXT"
        assert events[0].page_number == 2

    async def test_record_decision(self, service: EvidenceService) -> None:
        await service.record_autofill_decision(
            "tpl-1", "field-1", "contract.party", DecisionKind.ACCEPTED, 0.9
        )
        decisions = await service.decisions_for_field("field-1")
        assert decisions[0].decision == "accepted"
        assert decisions[0].template_id == "tpl-1"
