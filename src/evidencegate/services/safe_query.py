"""Degrade-to-empty wrappers around the evidence query service.

An unreachable or failing evidence store means "no suggestions", never
an error dialog. Failures are logged with their error class.
"""

from __future__ import annotations

import logging

from evidencegate.constants import FieldRecordType
from evidencegate.evidence.value_objects import EvidenceRef
from evidencegate.resilience.errors import classify_error
from evidencegate.services.protocols import EvidenceQueryService

logger = logging.getLogger(__name__)


async def fetch_field_evidence(
    query: EvidenceQueryService,
    field_id: str,
    field_record_type: FieldRecordType,
) -> list[EvidenceRef]:
    try:
        return list(
            await query.get_evidence_for_field(field_id, field_record_type)
        )
    except Exception as exc:
        logger.warning(
            "event=evidence_query_failed scope=field field_id=%s"
            " error_class=%s",
            field_id,
            classify_error(exc).value,
        )
        return []


async def fetch_page_evidence(
    query: EvidenceQueryService,
    document_id: str,
    page_number: int,
) -> list[EvidenceRef]:
    try:
        return list(
            await query.get_evidence_for_document_page(
                document_id, page_number
            )
        )
    except Exception as exc:
        logger.warning(
            "event=evidence_query_failed scope=page document_id=%s"
            " page=%d error_class=%s",
            document_id,
            page_number,
            classify_error(exc).value,
        )
        return []
