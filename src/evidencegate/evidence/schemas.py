"""Pydantic models for evidence as the extraction pipeline stores it."""

from __future__ import annotations

import math
from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from evidencegate.constants import (
    DEFAULT_CONFIDENCE,
    AnchorMatchType,
    BBoxOrigin,
    BBoxUnits,
    FieldRecordType,
    ProvenanceStatus,
    SourceType,
)


class RawBoundingBox(BaseModel):
    """Bounding box in whatever units the extractor produced."""

    units: BBoxUnits = BBoxUnits.PAGE_NORMALIZED
    origin: BBoxOrigin = BBoxOrigin.TOP_LEFT
    rotation: Literal[0, 90, 180, 270] = 0
    x: float
    y: float
    w: float
    h: float
    page: int | None = Field(default=None, ge=1)
    # Page extent in the same units; needed for pdf_points and pixels
    page_width: float | None = Field(default=None, gt=0)
    page_height: float | None = Field(default=None, gt=0)


class RawTextAnchor(BaseModel):
    """Text-match locator written by the fallback anchor pass."""

    match_type: AnchorMatchType = AnchorMatchType.EXACT
    query: str
    context_before: str | None = None
    context_after: str | None = None
    occurrence_hint: int | None = None
    start_offset: int = Field(default=0, ge=0)


class RawEvidenceRecord(BaseModel):
    """One evidence row before tier/location canonicalization."""

    id: str
    field_id: str
    field_record_type: FieldRecordType = FieldRecordType.AI_EXTRACTION
    source_type: SourceType = SourceType.EXTRACTION
    source_id: str = ""
    document_id: str | None = None
    predicate_id: str | None = None
    label: str | None = None
    value: Any | None = None
    page_number: int | None = Field(default=None, ge=1)
    # Kept as a plain string so unknown labels reach the tier mapping
    tier: str
    snippet: str | None = None
    bbox_json: RawBoundingBox | None = None
    anchor_json: RawTextAnchor | None = None
    confidence: float = DEFAULT_CONFIDENCE
    provenance_status: ProvenanceStatus | None = None
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC)
    )

    @field_validator("confidence", mode="before")
    @classmethod
    def _parse_confidence(cls, v: Any) -> Any:
        """Stored as a decimal string; missing or non-finite means default."""
        if v is None or v == "":
            return DEFAULT_CONFIDENCE
        if isinstance(v, str):
            v = float(v.strip())
        if isinstance(v, float) and not math.isfinite(v):
            return DEFAULT_CONFIDENCE
        return v
