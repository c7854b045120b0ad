"""SQL implementations of the append-only audit repositories."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from evidencegate.models.autofill_decision import AutofillDecisionRecord
from evidencegate.models.view_event import EvidenceViewEvent


class SqlViewEventRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def append(self, event: EvidenceViewEvent) -> EvidenceViewEvent:
        self._session.add(event)
        await self._session.flush()
        return event

    async def list_for_field(
        self, field_id: str, limit: int = 100
    ) -> list[EvidenceViewEvent]:
        result = await self._session.execute(
            select(EvidenceViewEvent)
            .where(EvidenceViewEvent.field_id == field_id)
            .order_by(EvidenceViewEvent.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())


class SqlAutofillDecisionRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def append(
        self, decision: AutofillDecisionRecord
    ) -> AutofillDecisionRecord:
        self._session.add(decision)
        await self._session.flush()
        return decision

    async def list_for_field(
        self, field_id: str, limit: int = 100
    ) -> list[AutofillDecisionRecord]:
        result = await self._session.execute(
            select(AutofillDecisionRecord)
            .where(AutofillDecisionRecord.field_id == field_id)
            .order_by(AutofillDecisionRecord.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())
