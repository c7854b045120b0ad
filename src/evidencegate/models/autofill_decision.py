"""AutofillDecisionRecord ORM model: append-only reviewer verdicts."""

import uuid
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import Float, String, func
from sqlalchemy.orm import Mapped, mapped_column

from evidencegate.models.base import Base


class AutofillDecisionRecord(Base):
    __tablename__ = "autofill_decisions"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    template_id: Mapped[str] = mapped_column(String(100), index=True)
    field_id: Mapped[str] = mapped_column(String(100), index=True)
    predicate_id: Mapped[str | None] = mapped_column(
        String(200), nullable=True
    )
    decision: Mapped[str] = mapped_column(String(20))
    confidence: Mapped[float] = mapped_column(Float)
    created_at: Mapped[datetime] = mapped_column(
        default=lambda: datetime.now(UTC),
        server_default=func.now(),
    )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "template_id": self.template_id,
            "field_id": self.field_id,
            "predicate_id": self.predicate_id,
            "decision": self.decision,
            "confidence": self.confidence,
            "created_at": self.created_at.isoformat(),
        }
