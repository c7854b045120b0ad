"""Autofill orchestrator: composes the three field policies.

Order per field:
  1. Sensitivity: a blocked category ends the decision; no value is
     ever shown, only a manual-entry notice.
  2. Confidence: best candidate and auto-fill eligibility.
  3. Ambiguity: several credible candidates hide values and, unless
     one candidate dominates, turn auto-fill into a selection prompt.

Each policy stays a standalone pure function; this module only wires
them together and hands accept/reject verdicts to the audit writer.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from evidencegate.autofill.ambiguity import (
    CandidateView,
    candidate_views,
    dominant_ref,
    is_ambiguous,
)
from evidencegate.autofill.confidence import resolve
from evidencegate.autofill.sensitivity import DEFAULT_POLICY, SensitivityPolicy
from evidencegate.config import Settings
from evidencegate.constants import (
    HIGH_CONFIDENCE_THRESHOLD,
    MANUAL_ENTRY_NOTICE,
    MEDIUM_CONFIDENCE_THRESHOLD,
    DecisionKind,
    FieldRecordType,
    ProposalStatus,
)
from evidencegate.evidence.value_objects import AutofillDecision, EvidenceRef
from evidencegate.services.audit import AuditWriter
from evidencegate.services.protocols import EvidenceQueryService
from evidencegate.services.safe_query import fetch_field_evidence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TemplateField:
    """A template field that may be populated from evidence."""

    field_id: str
    label: str
    field_record_type: FieldRecordType = FieldRecordType.AI_EXTRACTION
    sensitivity_category: str | None = None
    # Overrides the engine's high threshold for this field only
    confidence_threshold: float | None = None


@dataclass(frozen=True)
class FieldProposal:
    """Decision for one field, ready to render."""

    field_id: str
    label: str
    status: ProposalStatus
    threshold: float
    highest_confidence: float = 0.0
    ambiguous: bool = False
    best: EvidenceRef | None = None
    value: Any | None = None
    candidates: list[CandidateView] = field(
        default_factory=lambda: list[CandidateView]()
    )
    notice: str | None = None

    @property
    def should_auto_fill(self) -> bool:
        return self.status == ProposalStatus.AUTO_FILLED

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "field_id": self.field_id,
            "label": self.label,
            "status": str(self.status),
            "should_auto_fill": self.should_auto_fill,
            "threshold": self.threshold,
            "highest_confidence": self.highest_confidence,
            "ambiguous": self.ambiguous,
            "best_evidence_id": self.best.id if self.best else None,
            "candidates": [c.to_dict() for c in self.candidates],
            "notice": self.notice,
        }
        if self.status == ProposalStatus.AUTO_FILLED:
            data["value"] = self.value
        return data


class AutofillEngine:
    """Decides auto-fill / suggest / block per template field."""

    def __init__(
        self,
        *,
        policy: SensitivityPolicy = DEFAULT_POLICY,
        high_threshold: float = HIGH_CONFIDENCE_THRESHOLD,
        medium_threshold: float = MEDIUM_CONFIDENCE_THRESHOLD,
        query: EvidenceQueryService | None = None,
        audit: AuditWriter | None = None,
    ) -> None:
        self._policy = policy
        self._high = high_threshold
        self._medium = medium_threshold
        self._query = query
        self._audit = audit

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        query: EvidenceQueryService | None = None,
        audit: AuditWriter | None = None,
    ) -> AutofillEngine:
        return cls(
            policy=SensitivityPolicy(settings.extra_blocked_categories),
            high_threshold=settings.high_confidence_threshold,
            medium_threshold=settings.medium_confidence_threshold,
            query=query,
            audit=audit,
        )

    @property
    def policy(self) -> SensitivityPolicy:
        return self._policy

    def threshold_for(self, template_field: TemplateField) -> float:
        if template_field.confidence_threshold is not None:
            return template_field.confidence_threshold
        return self._high

    def decide(
        self,
        template_field: TemplateField,
        refs: Sequence[EvidenceRef],
        current_value: Any | None = None,
    ) -> FieldProposal:
        """Pure decision for one field given its evidence."""
        threshold = self.threshold_for(template_field)

        if self._policy.is_blocked(template_field.sensitivity_category):
            return FieldProposal(
                field_id=template_field.field_id,
                label=template_field.label,
                status=ProposalStatus.SENSITIVE_BLOCKED,
                threshold=threshold,
                notice=MANUAL_ENTRY_NOTICE,
            )

        resolution = resolve(
            refs,
            sensitivity_category=template_field.sensitivity_category,
            current_value=current_value,
            threshold=threshold,
            policy=self._policy,
        )
        best = resolution.best
        if best is None:
            return FieldProposal(
                field_id=template_field.field_id,
                label=template_field.label,
                status=ProposalStatus.NO_MATCH,
                threshold=threshold,
            )

        ambiguous = is_ambiguous(refs, self._medium)
        dominant = dominant_ref(refs, threshold) if ambiguous else None
        candidates = candidate_views(
            refs, ambiguous=ambiguous, dominant=dominant
        )

        if ambiguous and dominant is None:
            status = ProposalStatus.NEEDS_SELECTION
        elif resolution.should_auto_fill and best.value is not None:
            status = ProposalStatus.AUTO_FILLED
        else:
            if resolution.should_auto_fill:
                logger.debug(
                    "event=autofill_without_value field_id=%s evidence_id=%s",
                    template_field.field_id,
                    best.id,
                )
            status = ProposalStatus.SUGGESTED

        return FieldProposal(
            field_id=template_field.field_id,
            label=template_field.label,
            status=status,
            threshold=threshold,
            highest_confidence=best.confidence,
            ambiguous=ambiguous,
            best=best,
            value=best.value if status == ProposalStatus.AUTO_FILLED else None,
            candidates=candidates,
        )

    async def propose(
        self,
        template_field: TemplateField,
        current_value: Any | None = None,
    ) -> FieldProposal:
        """Fetch evidence for the field and decide.

        Blocked fields skip the fetch. Query failures read as no match.
        """
        refs: list[EvidenceRef] = []
        if (
            self._query is not None
            and not self._policy.is_blocked(template_field.sensitivity_category)
        ):
            refs = await fetch_field_evidence(
                self._query,
                template_field.field_id,
                template_field.field_record_type,
            )
        return self.decide(template_field, refs, current_value)

    async def propose_all(
        self,
        fields: Sequence[TemplateField],
        current_values: Mapping[str, Any] | None = None,
    ) -> list[FieldProposal]:
        values = current_values or {}
        proposals: list[FieldProposal] = []
        for template_field in fields:
            proposals.append(
                await self.propose(
                    template_field, values.get(template_field.field_id)
                )
            )
        auto = sum(1 for p in proposals if p.should_auto_fill)
        logger.info(
            "event=autofill_proposed fields=%d auto_filled=%d",
            len(proposals),
            auto,
        )
        return proposals

    def accept(
        self,
        template_id: str,
        template_field: TemplateField,
        ref: EvidenceRef,
    ) -> Any | None:
        """Record acceptance and return the value to apply.

        Blocked fields return None: their value is entered by hand.
        """
        self._record(template_id, template_field, ref, DecisionKind.ACCEPTED)
        if self._policy.is_blocked(template_field.sensitivity_category):
            return None
        return ref.value

    def reject(
        self,
        template_id: str,
        template_field: TemplateField,
        ref: EvidenceRef,
    ) -> None:
        self._record(template_id, template_field, ref, DecisionKind.REJECTED)

    def _record(
        self,
        template_id: str,
        template_field: TemplateField,
        ref: EvidenceRef,
        decision: DecisionKind,
    ) -> AutofillDecision:
        record = AutofillDecision(
            template_id=template_id,
            field_id=template_field.field_id,
            predicate_id=ref.predicate_id,
            decision=decision,
            confidence=ref.confidence,
        )
        if self._audit is not None:
            self._audit.record_decision(record)
        return record
