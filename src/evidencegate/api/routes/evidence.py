"""Evidence lookup, creation and view-audit routes."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query

from evidencegate.api.dependencies import get_evidence_service
from evidencegate.api.schemas import (
    APIResponse,
    StatusUpdateRequest,
    ViewLogRequest,
)
from evidencegate.constants import UNRESOLVED_LIST_LIMIT, FieldRecordType
from evidencegate.evidence.schemas import RawEvidenceRecord
from evidencegate.services.evidence_service import EvidenceService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/evidence", tags=["evidence"])


@router.get("/fields/{field_id}")
async def get_field_evidence(
    field_id: str,
    field_record_type: FieldRecordType = FieldRecordType.AI_EXTRACTION,
    service: EvidenceService = Depends(get_evidence_service),
) -> APIResponse:
    """All live evidence for a field, in canonical form."""
    refs = await service.get_evidence_for_field(field_id, field_record_type)
    return APIResponse(
        success=True,
        data=[r.to_dict() for r in refs],
        metadata={"count": len(refs)},
    )


@router.get("/fields/{field_id}/best")
async def get_best_evidence(
    field_id: str,
    field_record_type: FieldRecordType = FieldRecordType.AI_EXTRACTION,
    service: EvidenceService = Depends(get_evidence_service),
) -> APIResponse:
    """The evidence the viewer should highlight first for a field."""
    ref = await service.get_best(field_id, field_record_type)
    if ref is None:
        return APIResponse(success=False, error="No evidence for field")
    return APIResponse(success=True, data=ref.to_dict())


@router.get("/documents/{document_id}/pages/{page}")
async def get_page_evidence(
    document_id: str,
    page: int,
    service: EvidenceService = Depends(get_evidence_service),
) -> APIResponse:
    if page < 1:
        return APIResponse(success=False, error="Page numbers start at 1")
    refs = await service.get_evidence_for_document_page(document_id, page)
    return APIResponse(
        success=True,
        data=[r.to_dict() for r in refs],
        metadata={"count": len(refs), "page": page},
    )


@router.get("/unresolved")
async def list_unresolved(
    document_id: str | None = None,
    limit: int = Query(default=UNRESOLVED_LIST_LIMIT, ge=1, le=500),
    service: EvidenceService = Depends(get_evidence_service),
) -> APIResponse:
    """Evidence whose provenance still needs a reviewer."""
    refs = await service.list_unresolved(document_id, limit)
    return APIResponse(
        success=True,
        data=[r.to_dict() for r in refs],
        metadata={"count": len(refs)},
    )


@router.post("")
async def create_evidence(
    body: RawEvidenceRecord,
    supersedes: str | None = None,
    service: EvidenceService = Depends(get_evidence_service),
) -> APIResponse:
    """Store a new evidence ref, optionally replacing an older one."""
    if supersedes is None:
        ref = await service.create(body)
        return APIResponse(success=True, data=ref.to_dict())
    replaced = await service.supersede(supersedes, body)
    if replaced is None:
        return APIResponse(
            success=False, error="Superseded evidence not found"
        )
    return APIResponse(
        success=True,
        data=replaced.to_dict(),
        metadata={"superseded": supersedes},
    )


@router.post("/views")
async def log_view(
    body: ViewLogRequest,
    service: EvidenceService = Depends(get_evidence_service),
) -> APIResponse:
    """Append one evidence view to the audit trail."""
    await service.log_view(
        field_id=body.field_id,
        field_record_type=body.field_record_type,
        evidence_ref_id=body.evidence_ref_id,
        document_id=body.document_id,
        page_number=body.page_number,
        tier_used=body.tier_used,
    )
    return APIResponse(success=True)


@router.patch("/{evidence_id}/status")
async def update_status(
    evidence_id: str,
    body: StatusUpdateRequest,
    service: EvidenceService = Depends(get_evidence_service),
) -> APIResponse:
    updated = await service.update_provenance_status(evidence_id, body.status)
    if not updated:
        return APIResponse(success=False, error="Evidence not found")
    return APIResponse(
        success=True,
        data={"id": evidence_id, "provenance_status": str(body.status)},
    )
