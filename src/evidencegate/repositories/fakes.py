"""In-memory fake repositories for testing.

Dict- and list-backed implementations of the repository protocols.
No SQLAlchemy session, no I/O: instant operations for unit tests.
"""

# pyright: reportUnusedFunction=false

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from evidencegate.constants import ProvenanceStatus
from evidencegate.models.autofill_decision import AutofillDecisionRecord
from evidencegate.models.evidence_ref import EvidenceRecord
from evidencegate.models.view_event import EvidenceViewEvent


def _ensure_identity(record: EvidenceRecord) -> None:
    if not record.id:
        record.id = str(uuid.uuid4())
    if record.created_at is None:
        record.created_at = datetime.now(UTC)


class FakeEvidenceRepository:
    """Dict-backed EvidenceRepository for testing."""

    def __init__(self) -> None:
        self._store: dict[str, EvidenceRecord] = {}

    async def get(self, evidence_id: str) -> EvidenceRecord | None:
        return self._store.get(evidence_id)

    async def put(self, record: EvidenceRecord) -> EvidenceRecord:
        _ensure_identity(record)
        self._store[record.id] = record
        return record

    def _live(self) -> list[EvidenceRecord]:
        return [r for r in self._store.values() if r.superseded_by is None]

    async def list_for_field(
        self, field_id: str, field_record_type: str
    ) -> list[EvidenceRecord]:
        return [
            r
            for r in self._live()
            if r.field_id == field_id
            and r.field_record_type == field_record_type
        ]

    async def list_for_document_page(
        self, document_id: str, page_number: int
    ) -> list[EvidenceRecord]:
        return [
            r
            for r in self._live()
            if r.document_id == document_id
            and (
                r.page_number == page_number
                or r.page_number is None
                or r.bbox_json is not None
            )
        ]

    async def list_unresolved(
        self, document_id: str | None = None, limit: int = 50
    ) -> list[EvidenceRecord]:
        pending = {ProvenanceStatus.UNRESOLVED, ProvenanceStatus.NEEDS_REVIEW}
        results = [
            r
            for r in self._live()
            if r.provenance_status in pending
            and (document_id is None or r.document_id == document_id)
        ]
        return results[:limit]

    async def supersede(
        self, old_id: str, replacement: EvidenceRecord
    ) -> EvidenceRecord | None:
        old = self._store.get(old_id)
        if old is None or old.superseded_by is not None:
            return None
        await self.put(replacement)
        old.superseded_by = replacement.id
        return replacement

    async def set_provenance_status(
        self, evidence_id: str, status: str
    ) -> bool:
        record = self._store.get(evidence_id)
        if record is None:
            return False
        record.provenance_status = status
        return True


class FakeViewEventRepository:
    """List-backed ViewEventRepository for testing."""

    def __init__(self) -> None:
        self.events: list[EvidenceViewEvent] = []

    async def append(self, event: EvidenceViewEvent) -> EvidenceViewEvent:
        if not event.id:
            event.id = str(uuid.uuid4())
        if event.created_at is None:
            event.created_at = datetime.now(UTC)
        self.events.append(event)
        return event

    async def list_for_field(
        self, field_id: str, limit: int = 100
    ) -> list[EvidenceViewEvent]:
        matching = [e for e in self.events if e.field_id == field_id]
        return list(reversed(matching))[:limit]


class FakeAutofillDecisionRepository:
    """List-backed AutofillDecisionRepository for testing."""

    def __init__(self) -> None:
        self.decisions: list[AutofillDecisionRecord] = []

    async def append(
        self, decision: AutofillDecisionRecord
    ) -> AutofillDecisionRecord:
        if not decision.id:
            decision.id = str(uuid.uuid4())
        if decision.created_at is None:
            decision.created_at = datetime.now(UTC)
        self.decisions.append(decision)
        return decision

    async def list_for_field(
        self, field_id: str, limit: int = 100
    ) -> list[AutofillDecisionRecord]:
        matching = [d for d in self.decisions if d.field_id == field_id]
        return list(reversed(matching))[:limit]
