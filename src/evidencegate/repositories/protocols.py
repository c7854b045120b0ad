"""Protocol-based repository interfaces.

SQL implementations satisfy these protocols structurally (no inheritance).
Test doubles can be plain classes or mocks matching the same signature.
Audit repositories are append-only: there is no update or delete.
"""

from typing import Protocol

from evidencegate.models.autofill_decision import AutofillDecisionRecord
from evidencegate.models.evidence_ref import EvidenceRecord
from evidencegate.models.view_event import EvidenceViewEvent


class EvidenceRepository(Protocol):
    async def get(self, evidence_id: str) -> EvidenceRecord | None: ...
    async def put(self, record: EvidenceRecord) -> EvidenceRecord: ...
    async def list_for_field(
        self, field_id: str, field_record_type: str
    ) -> list[EvidenceRecord]: ...
    async def list_for_document_page(
        self, document_id: str, page_number: int
    ) -> list[EvidenceRecord]: ...
    async def list_unresolved(
        self, document_id: str | None = None, limit: int = 50
    ) -> list[EvidenceRecord]: ...
    async def supersede(
        self, old_id: str, replacement: EvidenceRecord
    ) -> EvidenceRecord | None: ...
    async def set_provenance_status(
        self, evidence_id: str, status: str
    ) -> bool: ...


class ViewEventRepository(Protocol):
    async def append(self, event: EvidenceViewEvent) -> EvidenceViewEvent: ...
    async def list_for_field(
        self, field_id: str, limit: int = 100
    ) -> list[EvidenceViewEvent]: ...


class AutofillDecisionRepository(Protocol):
    async def append(
        self, decision: AutofillDecisionRecord
    ) -> AutofillDecisionRecord: ...
    async def list_for_field(
        self, field_id: str, limit: int = 100
    ) -> list[AutofillDecisionRecord]: ...
