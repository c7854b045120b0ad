"""Fire-and-forget audit writes.

View events and autofill decisions are handed to the query service on
a background task. The triggering UI action never waits for the write
and is never rolled back by its failure; failures are logged for
operators and dropped. Durability belongs to the logging backend, so
there is no retry here.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from evidencegate.evidence.value_objects import AutofillDecision, ViewEvent
from evidencegate.resilience.errors import classify_error
from evidencegate.services.protocols import EvidenceQueryService

logger = logging.getLogger(__name__)


class AuditWriter:
    """Schedules audit writes without blocking the caller.

    Best-effort delivery: errors are logged, never raised.
    """

    def __init__(self, query: EvidenceQueryService) -> None:
        self._query = query
        self._tasks: set[asyncio.Task[None]] = set()

    def log_view(self, event: ViewEvent) -> asyncio.Task[None] | None:
        return self._submit(
            "view",
            lambda: self._query.log_view(
                event.field_id,
                event.field_record_type,
                event.evidence_ref_id,
                event.document_id,
                event.page,
                event.tier_used,
            ),
        )

    def record_decision(
        self, decision: AutofillDecision
    ) -> asyncio.Task[None] | None:
        return self._submit(
            "decision",
            lambda: self._query.record_autofill_decision(
                decision.template_id,
                decision.field_id,
                decision.predicate_id,
                decision.decision,
                decision.confidence,
            ),
        )

    def _submit(
        self,
        kind: str,
        write: Callable[[], Awaitable[None]],
    ) -> asyncio.Task[None] | None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("event=audit_write_skipped kind=%s reason=no_loop", kind)
            return None
        task = loop.create_task(self._guarded(kind, write))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _guarded(
        self,
        kind: str,
        write: Callable[[], Awaitable[None]],
    ) -> None:
        try:
            await write()
        except Exception as exc:
            logger.warning(
                "event=audit_write_failed kind=%s error_class=%s",
                kind,
                classify_error(exc).value,
            )

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for in-flight writes (shutdown and tests)."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks))
