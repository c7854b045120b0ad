"""EvidenceViewEvent ORM model: append-only evidence view audit log."""

import uuid
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from evidencegate.models.base import Base


class EvidenceViewEvent(Base):
    __tablename__ = "evidence_view_events"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    field_id: Mapped[str] = mapped_column(String(100), index=True)
    field_record_type: Mapped[str] = mapped_column(String(50))
    evidence_ref_id: Mapped[str] = mapped_column(String(36))
    document_id: Mapped[str | None] = mapped_column(
        String(36), nullable=True
    )
    page_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    tier_used: Mapped[str] = mapped_column(String(20))
    created_at: Mapped[datetime] = mapped_column(
        default=lambda: datetime.now(UTC),
        server_default=func.now(),
    )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "field_id": self.field_id,
            "field_record_type": self.field_record_type,
            "evidence_ref_id": self.evidence_ref_id,
            "document_id": self.document_id,
            "page_number": self.page_number,
            "tier_used": self.tier_used,
            "created_at": self.created_at.isoformat(),
        }
