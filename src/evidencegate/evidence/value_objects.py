"""Frozen, identity-less evidence types shared across all layers.

An EvidenceRef is immutable once created; re-extraction supersedes it
with a new ref rather than editing it. Location fields follow the
precision tier: DOCUMENT carries none, PAGE carries ``page`` only,
EXACT carries ``page`` plus a ``bbox`` and/or an ``anchor``. Code
downstream may branch on presence of these fields.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from evidencegate.constants import (
    DecisionKind,
    FieldRecordType,
    ProvenanceStatus,
    SourceType,
    StorageTier,
)
from evidencegate.evidence.tiers import Precision


@dataclass(frozen=True)
class BBox:
    """Highlight rectangle in percentages (0-100) of the page, top-left origin."""

    page: int
    x: float
    y: float
    width: float
    height: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "page": self.page,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
        }


@dataclass(frozen=True)
class TextAnchor:
    """Position-independent locator within a page's text content."""

    start_offset: int
    end_offset: int
    context_before: str | None = None
    context_after: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "start_offset": self.start_offset,
            "end_offset": self.end_offset,
            "context_before": self.context_before,
            "context_after": self.context_after,
        }


@dataclass(frozen=True)
class EvidenceRef:
    """One piece of evidence backing one field value."""

    id: str
    field_id: str
    field_record_type: FieldRecordType
    source_type: SourceType
    source_id: str
    document_id: str | None
    tier: Precision
    storage_tier: StorageTier | str
    confidence: float
    created_at: datetime = field(
        default_factory=lambda: datetime.now(UTC)
    )
    value: Any | None = None
    snippet: str | None = None
    page: int | None = None
    bbox: BBox | None = None
    anchor: TextAnchor | None = None
    predicate_id: str | None = None
    label: str | None = None
    provenance_status: ProvenanceStatus = ProvenanceStatus.NONE
    # True when the stored tier promised more location than was usable
    degraded: bool = False

    @property
    def target_page(self) -> int | None:
        """Page the evidence lives on; bbox page wins over ``page``."""
        if self.bbox is not None:
            return self.bbox.page
        return self.page

    def to_dict(self, *, include_value: bool = True) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "field_id": self.field_id,
            "field_record_type": str(self.field_record_type),
            "source_type": str(self.source_type),
            "source_id": self.source_id,
            "document_id": self.document_id,
            "tier": int(self.tier),
            "tier_label": self.tier.label,
            "storage_tier": str(self.storage_tier),
            "confidence": self.confidence,
            "snippet": self.snippet,
            "page": self.page,
            "bbox": self.bbox.to_dict() if self.bbox else None,
            "anchor": self.anchor.to_dict() if self.anchor else None,
            "predicate_id": self.predicate_id,
            "label": self.label,
            "provenance_status": str(self.provenance_status),
            "degraded": self.degraded,
            "created_at": self.created_at.isoformat(),
        }
        if include_value:
            data["value"] = self.value
        return data


@dataclass(frozen=True)
class ViewEvent:
    """Audit record: a reviewer navigated to a piece of evidence."""

    field_id: str
    field_record_type: FieldRecordType
    evidence_ref_id: str
    document_id: str | None
    page: int | None
    tier_used: StorageTier
    timestamp: datetime = field(
        default_factory=lambda: datetime.now(UTC)
    )


@dataclass(frozen=True)
class AutofillDecision:
    """Audit record: a reviewer accepted or rejected a suggestion."""

    template_id: str
    field_id: str
    predicate_id: str | None
    decision: DecisionKind
    confidence: float
    timestamp: datetime = field(
        default_factory=lambda: datetime.now(UTC)
    )
