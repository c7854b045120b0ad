"""EvidenceRecord ORM model: evidence rows as the pipeline writes them.

Rows are never edited after insert except for the review status. A
re-extraction inserts a new row and points ``superseded_by`` of the
old row at it; superseded rows drop out of every query.
"""

import uuid
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import JSON, Float, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from evidencegate.constants import (
    DEFAULT_CONFIDENCE,
    FieldRecordType,
    SourceType,
)
from evidencegate.evidence.schemas import RawEvidenceRecord
from evidencegate.models.base import Base


class EvidenceRecord(Base):
    __tablename__ = "evidence_refs"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    field_id: Mapped[str] = mapped_column(String(100), index=True)
    field_record_type: Mapped[str] = mapped_column(
        String(50), default=FieldRecordType.AI_EXTRACTION
    )
    source_type: Mapped[str] = mapped_column(
        String(50), default=SourceType.EXTRACTION
    )
    source_id: Mapped[str] = mapped_column(String(100), default="")
    document_id: Mapped[str | None] = mapped_column(
        String(36), nullable=True, index=True
    )
    predicate_id: Mapped[str | None] = mapped_column(
        String(200), nullable=True
    )
    label: Mapped[str | None] = mapped_column(String(200), nullable=True)
    value_json: Mapped[Any | None] = mapped_column(
        JSON(none_as_null=True), nullable=True
    )
    page_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    tier: Mapped[str] = mapped_column(String(20))
    snippet: Mapped[str | None] = mapped_column(Text, nullable=True)
    bbox_json: Mapped[dict[str, Any] | None] = mapped_column(
        JSON(none_as_null=True), nullable=True
    )
    anchor_json: Mapped[dict[str, Any] | None] = mapped_column(
        JSON(none_as_null=True), nullable=True
    )
    confidence: Mapped[float] = mapped_column(
        Float, default=DEFAULT_CONFIDENCE
    )
    provenance_status: Mapped[str | None] = mapped_column(
        String(20), nullable=True
    )
    superseded_by: Mapped[str | None] = mapped_column(
        String(36), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        default=lambda: datetime.now(UTC),
        server_default=func.now(),
    )

    @classmethod
    def from_raw(cls, raw: RawEvidenceRecord) -> "EvidenceRecord":
        return cls(
            id=raw.id,
            field_id=raw.field_id,
            field_record_type=str(raw.field_record_type),
            source_type=str(raw.source_type),
            source_id=raw.source_id,
            document_id=raw.document_id,
            predicate_id=raw.predicate_id,
            label=raw.label,
            value_json=raw.value,
            page_number=raw.page_number,
            tier=raw.tier,
            snippet=raw.snippet,
            bbox_json=(
                raw.bbox_json.model_dump(mode="json")
                if raw.bbox_json
                else None
            ),
            anchor_json=(
                raw.anchor_json.model_dump(mode="json")
                if raw.anchor_json
                else None
            ),
            confidence=raw.confidence,
            provenance_status=(
                str(raw.provenance_status)
                if raw.provenance_status
                else None
            ),
            created_at=raw.created_at,
        )

    def to_raw(self, *, include_location: bool = True) -> RawEvidenceRecord:
        """Storage shape for canonicalization.

        *include_location* False drops bbox and anchor, for rows whose
        location JSON does not validate.
        """
        return RawEvidenceRecord.model_validate(
            {
                "id": self.id,
                "field_id": self.field_id,
                "field_record_type": self.field_record_type,
                "source_type": self.source_type,
                "source_id": self.source_id,
                "document_id": self.document_id,
                "predicate_id": self.predicate_id,
                "label": self.label,
                "value": self.value_json,
                "page_number": self.page_number,
                "tier": self.tier,
                "snippet": self.snippet,
                "bbox_json": self.bbox_json if include_location else None,
                "anchor_json": (
                    self.anchor_json if include_location else None
                ),
                "confidence": self.confidence,
                "provenance_status": self.provenance_status,
                "created_at": self.created_at,
            }
        )
