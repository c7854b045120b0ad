"""Request/response schemas for the HTTP API."""

from typing import Any

from pydantic import BaseModel, Field

from evidencegate.constants import (
    DecisionKind,
    FieldRecordType,
    ProvenanceStatus,
    StorageTier,
)


class APIResponse(BaseModel):
    """Standard response envelope for all API endpoints."""

    success: bool
    data: Any | None = None
    error: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class ViewLogRequest(BaseModel):
    """Request body for POST /api/evidence/views."""

    field_id: str
    field_record_type: FieldRecordType = FieldRecordType.AI_EXTRACTION
    evidence_ref_id: str
    document_id: str | None = None
    page_number: int | None = Field(default=None, ge=1)
    tier_used: StorageTier


class StatusUpdateRequest(BaseModel):
    """Request body for PATCH /api/evidence/{id}/status."""

    status: ProvenanceStatus


class TemplateFieldRequest(BaseModel):
    field_id: str
    label: str
    field_record_type: FieldRecordType = FieldRecordType.AI_EXTRACTION
    sensitivity_category: str | None = None
    confidence_threshold: float | None = Field(default=None, ge=0, le=1)


class ProposalRequest(BaseModel):
    """Request body for POST /api/autofill/proposals."""

    fields: list[TemplateFieldRequest] = Field(min_length=1)
    current_values: dict[str, Any] = Field(default_factory=dict)


class DecisionRequest(BaseModel):
    """Request body for POST /api/autofill/decisions."""

    template_id: str
    field: TemplateFieldRequest
    evidence_id: str
    decision: DecisionKind
