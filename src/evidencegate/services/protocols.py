"""Protocol for the evidence query collaborator.

``EvidenceService`` satisfies it over the SQL repositories; the
navigator and autofill engine depend only on this shape, so any
client (HTTP, in-memory) can stand in.
"""

from typing import Protocol

from evidencegate.constants import DecisionKind, FieldRecordType, StorageTier
from evidencegate.evidence.value_objects import EvidenceRef


class EvidenceQueryService(Protocol):
    async def get_evidence_for_document_page(
        self, document_id: str, page_number: int
    ) -> list[EvidenceRef]: ...
    async def get_evidence_for_field(
        self, field_id: str, field_record_type: FieldRecordType
    ) -> list[EvidenceRef]: ...
    async def log_view(
        self,
        field_id: str,
        field_record_type: FieldRecordType,
        evidence_ref_id: str,
        document_id: str | None,
        page_number: int | None,
        tier_used: StorageTier,
    ) -> None: ...
    async def record_autofill_decision(
        self,
        template_id: str,
        field_id: str,
        predicate_id: str | None,
        decision: DecisionKind,
        confidence: float,
    ) -> None: ...
