"""Evidence query service over the injected repositories.

Reads return canonical ``EvidenceRef`` values: every stored row passes
through the tier & location model on the way out, so callers never see
storage labels or raw bbox units. Audit methods append only.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from evidencegate.constants import (
    AUDIT_LOG_LIMIT,
    SNIPPET_MAX_LENGTH,
    UNRESOLVED_LIST_LIMIT,
    DecisionKind,
    FieldRecordType,
    ProvenanceStatus,
    StorageTier,
)
from evidencegate.evidence.canonical import to_evidence_ref
from evidencegate.evidence.ranking import best_for_highlight
from evidencegate.evidence.schemas import RawEvidenceRecord
from evidencegate.evidence.value_objects import EvidenceRef
from evidencegate.models.autofill_decision import AutofillDecisionRecord
from evidencegate.models.evidence_ref import EvidenceRecord
from evidencegate.models.view_event import EvidenceViewEvent
from evidencegate.overlay.layers import appears_on_page
from evidencegate.repositories.protocols import (
    AutofillDecisionRepository,
    EvidenceRepository,
    ViewEventRepository,
)

logger = logging.getLogger(__name__)


class EvidenceService:
    """Implements the evidence query protocol for one unit of work."""

    def __init__(
        self,
        evidence: EvidenceRepository,
        views: ViewEventRepository,
        decisions: AutofillDecisionRepository,
        *,
        strict: bool = False,
        snippet_max_length: int = SNIPPET_MAX_LENGTH,
    ) -> None:
        self._evidence = evidence
        self._views = views
        self._decisions = decisions
        self._strict = strict
        self._snippet_max_length = snippet_max_length

    # ── Canonicalization ─────────────────────────────────

    def _canonical(self, record: EvidenceRecord) -> EvidenceRef | None:
        try:
            raw = record.to_raw()
        except ValidationError:
            logger.warning(
                "event=evidence_location_invalid evidence_id=%s",
                record.id,
            )
            try:
                raw = record.to_raw(include_location=False)
            except ValidationError:
                logger.warning(
                    "event=evidence_row_invalid evidence_id=%s", record.id
                )
                return None
        return to_evidence_ref(
            raw,
            strict=self._strict,
            snippet_max_length=self._snippet_max_length,
        )

    def _canonical_all(
        self, records: list[EvidenceRecord]
    ) -> list[EvidenceRef]:
        refs: list[EvidenceRef] = []
        for record in records:
            ref = self._canonical(record)
            if ref is not None:
                refs.append(ref)
        return refs

    # ── Queries ──────────────────────────────────────────

    async def get_evidence_for_document_page(
        self, document_id: str, page_number: int
    ) -> list[EvidenceRef]:
        records = await self._evidence.list_for_document_page(
            document_id, page_number
        )
        return [
            ref
            for ref in self._canonical_all(records)
            if appears_on_page(ref, page_number)
        ]

    async def get_evidence_for_field(
        self, field_id: str, field_record_type: FieldRecordType
    ) -> list[EvidenceRef]:
        records = await self._evidence.list_for_field(
            field_id, str(field_record_type)
        )
        return self._canonical_all(records)

    async def get_by_id(self, evidence_id: str) -> EvidenceRef | None:
        record = await self._evidence.get(evidence_id)
        if record is None or record.superseded_by is not None:
            return None
        return self._canonical(record)

    async def get_best(
        self, field_id: str, field_record_type: FieldRecordType
    ) -> EvidenceRef | None:
        """Canonical ref to highlight for a field."""
        refs = await self.get_evidence_for_field(field_id, field_record_type)
        return best_for_highlight(refs)

    async def list_unresolved(
        self,
        document_id: str | None = None,
        limit: int = UNRESOLVED_LIST_LIMIT,
    ) -> list[EvidenceRef]:
        records = await self._evidence.list_unresolved(document_id, limit)
        return self._canonical_all(records)

    # ── Writes ───────────────────────────────────────────

    async def create(self, raw: RawEvidenceRecord) -> EvidenceRef:
        record = await self._evidence.put(EvidenceRecord.from_raw(raw))
        ref = self._canonical(record)
        if ref is None:
            raise ValueError(f"stored evidence {record.id} is not readable")
        logger.info(
            "event=evidence_created evidence_id=%s field_id=%s tier=%s",
            ref.id,
            ref.field_id,
            ref.tier.label,
        )
        return ref

    async def supersede(
        self, old_id: str, raw: RawEvidenceRecord
    ) -> EvidenceRef | None:
        """Replace *old_id* with a re-extracted ref; None if not live."""
        record = await self._evidence.supersede(
            old_id, EvidenceRecord.from_raw(raw)
        )
        if record is None:
            return None
        logger.info(
            "event=evidence_superseded old_id=%s new_id=%s",
            old_id,
            record.id,
        )
        return self._canonical(record)

    async def update_provenance_status(
        self, evidence_id: str, status: ProvenanceStatus
    ) -> bool:
        return await self._evidence.set_provenance_status(
            evidence_id, str(status)
        )

    # ── Audit ────────────────────────────────────────────

    async def log_view(
        self,
        field_id: str,
        field_record_type: FieldRecordType,
        evidence_ref_id: str,
        document_id: str | None,
        page_number: int | None,
        tier_used: StorageTier,
    ) -> None:
        await self._views.append(
            EvidenceViewEvent(
                field_id=field_id,
                field_record_type=str(field_record_type),
                evidence_ref_id=evidence_ref_id,
                document_id=document_id,
                page_number=page_number,
                tier_used=str(tier_used),
            )
        )

    async def record_autofill_decision(
        self,
        template_id: str,
        field_id: str,
        predicate_id: str | None,
        decision: DecisionKind,
        confidence: float,
    ) -> None:
        await self._decisions.append(
            AutofillDecisionRecord(
                template_id=template_id,
                field_id=field_id,
                predicate_id=predicate_id,
                decision=str(decision),
                confidence=confidence,
            )
        )

    async def view_log_for_field(
        self, field_id: str, limit: int = AUDIT_LOG_LIMIT
    ) -> list[EvidenceViewEvent]:
        return await self._views.list_for_field(field_id, limit)

    async def decisions_for_field(
        self, field_id: str, limit: int = AUDIT_LOG_LIMIT
    ) -> list[AutofillDecisionRecord]:
        return await self._decisions.list_for_field(field_id, limit)
