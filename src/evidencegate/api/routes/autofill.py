"""Template auto-fill proposal and decision routes."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from evidencegate.api.dependencies import get_evidence_service, get_settings
from evidencegate.api.schemas import (
    APIResponse,
    DecisionRequest,
    ProposalRequest,
    TemplateFieldRequest,
)
from evidencegate.autofill.engine import AutofillEngine, TemplateField
from evidencegate.config import Settings
from evidencegate.constants import DecisionKind
from evidencegate.services.audit import AuditWriter
from evidencegate.services.evidence_service import EvidenceService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/autofill", tags=["autofill"])


def _template_field(body: TemplateFieldRequest) -> TemplateField:
    return TemplateField(
        field_id=body.field_id,
        label=body.label,
        field_record_type=body.field_record_type,
        sensitivity_category=body.sensitivity_category,
        confidence_threshold=body.confidence_threshold,
    )


@router.post("/proposals")
async def propose(
    body: ProposalRequest,
    service: EvidenceService = Depends(get_evidence_service),
    settings: Settings = Depends(get_settings),
) -> APIResponse:
    """Decide auto-fill, suggestion or manual entry for each field."""
    engine = AutofillEngine.from_settings(settings, query=service)
    proposals = await engine.propose_all(
        [_template_field(f) for f in body.fields], body.current_values
    )
    return APIResponse(
        success=True,
        data=[p.to_dict() for p in proposals],
        metadata={
            "auto_filled": sum(1 for p in proposals if p.should_auto_fill)
        },
    )


@router.post("/decisions")
async def record_decision(
    body: DecisionRequest,
    service: EvidenceService = Depends(get_evidence_service),
    settings: Settings = Depends(get_settings),
) -> APIResponse:
    """Record a reviewer's accept/reject of a candidate."""
    ref = await service.get_by_id(body.evidence_id)
    if ref is None:
        return APIResponse(success=False, error="Evidence not found")
    if ref.field_id != body.field.field_id:
        logger.warning(
            "event=decision_field_mismatch evidence_id=%s field_id=%s",
            ref.id,
            body.field.field_id,
        )
        return APIResponse(
            success=False, error="Evidence does not belong to field"
        )

    audit = AuditWriter(service)
    engine = AutofillEngine.from_settings(settings, audit=audit)
    template_field = _template_field(body.field)
    value = None
    if body.decision == DecisionKind.ACCEPTED:
        value = engine.accept(body.template_id, template_field, ref)
    else:
        engine.reject(body.template_id, template_field, ref)
    # Session closes with the request
    await audit.drain()

    return APIResponse(
        success=True,
        data={
            "field_id": template_field.field_id,
            "decision": str(body.decision),
            "value": value,
        },
    )
