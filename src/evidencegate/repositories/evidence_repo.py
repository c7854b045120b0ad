"""SQL implementation of EvidenceRepository."""

from sqlalchemy import or_, select
from sqlalchemy import update as sa_update
from sqlalchemy.ext.asyncio import AsyncSession

from evidencegate.constants import ProvenanceStatus
from evidencegate.models.evidence_ref import EvidenceRecord


class SqlEvidenceRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, evidence_id: str) -> EvidenceRecord | None:
        return await self._session.get(EvidenceRecord, evidence_id)

    async def put(self, record: EvidenceRecord) -> EvidenceRecord:
        self._session.add(record)
        await self._session.flush()
        return record

    async def list_for_field(
        self, field_id: str, field_record_type: str
    ) -> list[EvidenceRecord]:
        result = await self._session.execute(
            select(EvidenceRecord)
            .where(
                EvidenceRecord.field_id == field_id,
                EvidenceRecord.field_record_type == field_record_type,
                EvidenceRecord.superseded_by.is_(None),
            )
            .order_by(EvidenceRecord.created_at, EvidenceRecord.id)
        )
        return list(result.scalars().all())

    async def list_for_document_page(
        self, document_id: str, page_number: int
    ) -> list[EvidenceRecord]:
        """Rows that may belong on the page, plus page-less rows.

        The bbox page lives inside JSON, so rows are narrowed by the
        page column here and the final placement is decided after
        canonicalization.
        """
        result = await self._session.execute(
            select(EvidenceRecord)
            .where(
                EvidenceRecord.document_id == document_id,
                EvidenceRecord.superseded_by.is_(None),
                or_(
                    EvidenceRecord.page_number == page_number,
                    EvidenceRecord.page_number.is_(None),
                    EvidenceRecord.bbox_json.is_not(None),
                ),
            )
            .order_by(EvidenceRecord.created_at, EvidenceRecord.id)
        )
        return list(result.scalars().all())

    async def list_unresolved(
        self, document_id: str | None = None, limit: int = 50
    ) -> list[EvidenceRecord]:
        stmt = select(EvidenceRecord).where(
            EvidenceRecord.superseded_by.is_(None),
            EvidenceRecord.provenance_status.in_(
                [
                    ProvenanceStatus.UNRESOLVED,
                    ProvenanceStatus.NEEDS_REVIEW,
                ]
            ),
        )
        if document_id is not None:
            stmt = stmt.where(EvidenceRecord.document_id == document_id)
        result = await self._session.execute(
            stmt.order_by(EvidenceRecord.created_at).limit(limit)
        )
        return list(result.scalars().all())

    async def supersede(
        self, old_id: str, replacement: EvidenceRecord
    ) -> EvidenceRecord | None:
        old = await self.get(old_id)
        if old is None or old.superseded_by is not None:
            return None
        self._session.add(replacement)
        await self._session.flush()
        old.superseded_by = replacement.id
        await self._session.flush()
        return replacement

    async def set_provenance_status(
        self, evidence_id: str, status: str
    ) -> bool:
        result = await self._session.execute(
            sa_update(EvidenceRecord)
            .where(EvidenceRecord.id == evidence_id)
            .values(provenance_status=status)
        )
        await self._session.flush()
        return bool(result.rowcount)
