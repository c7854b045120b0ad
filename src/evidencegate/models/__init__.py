"""SQLAlchemy ORM models."""

from evidencegate.models.autofill_decision import AutofillDecisionRecord
from evidencegate.models.base import Base
from evidencegate.models.evidence_ref import EvidenceRecord
from evidencegate.models.view_event import EvidenceViewEvent

__all__ = [
    "AutofillDecisionRecord",
    "Base",
    "EvidenceRecord",
    "EvidenceViewEvent",
]
