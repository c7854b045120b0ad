"""Ambiguity detection and the value-hiding rule for candidate lists.

Several credible candidates mean no single value should be shown as
"the" answer. Candidates then expose only their label and metadata so
the reviewer opens the source before trusting a value. The one
exception is a dominant best: the only ref at or above the high
threshold keeps its value.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from evidencegate.constants import (
    HIGH_CONFIDENCE_THRESHOLD,
    MEDIUM_CONFIDENCE_THRESHOLD,
)
from evidencegate.evidence.tiers import Precision
from evidencegate.evidence.value_objects import EvidenceRef


def credible_count(
    refs: Sequence[EvidenceRef],
    threshold: float = MEDIUM_CONFIDENCE_THRESHOLD,
) -> int:
    return sum(1 for ref in refs if ref.confidence >= threshold)


def is_ambiguous(
    refs: Sequence[EvidenceRef],
    threshold: float = MEDIUM_CONFIDENCE_THRESHOLD,
) -> bool:
    """True iff more than one ref reaches *threshold*."""
    return credible_count(refs, threshold) > 1


def dominant_ref(
    refs: Sequence[EvidenceRef],
    high_threshold: float = HIGH_CONFIDENCE_THRESHOLD,
) -> EvidenceRef | None:
    """The single ref at or above *high_threshold*, if exactly one."""
    strong = [ref for ref in refs if ref.confidence >= high_threshold]
    if len(strong) == 1:
        return strong[0]
    return None


@dataclass(frozen=True)
class CandidateView:
    """What the reviewer sees for one suggestion."""

    evidence_id: str
    header: str
    predicate_id: str | None
    tier: Precision
    confidence: float
    source_type: str
    page: int | None
    tooltip: str
    value_hidden: bool
    value: Any | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "evidence_id": self.evidence_id,
            "header": self.header,
            "predicate_id": self.predicate_id,
            "tier": int(self.tier),
            "tier_label": self.tier.label,
            "confidence": self.confidence,
            "source_type": self.source_type,
            "page": self.page,
            "tooltip": self.tooltip,
            "value_hidden": self.value_hidden,
        }
        if not self.value_hidden:
            data["value"] = self.value
        return data


def _header(ref: EvidenceRef) -> str:
    if ref.label:
        return ref.label
    if ref.predicate_id:
        return ref.predicate_id.replace(".", " ").replace("_", " ").strip()
    return ref.field_id


def _tooltip(ref: EvidenceRef) -> str:
    text = (
        f"Source: {ref.source_type} "
        f"({round(ref.confidence * 100)}% confidence)"
    )
    if ref.target_page is not None:
        text += f", page {ref.target_page}"
    return text


def candidate_views(
    refs: Sequence[EvidenceRef],
    *,
    ambiguous: bool,
    dominant: EvidenceRef | None = None,
) -> list[CandidateView]:
    """Present *refs* in descending confidence, hiding values if ambiguous.

    Sensitivity blocking is decided by the caller before this is
    reached; blocked fields get no candidate list at all.
    """
    ordered = sorted(refs, key=lambda r: -r.confidence)
    views: list[CandidateView] = []
    for ref in ordered:
        hidden = ref.value is None or (
            ambiguous and (dominant is None or ref.id != dominant.id)
        )
        views.append(
            CandidateView(
                evidence_id=ref.id,
                header=_header(ref),
                predicate_id=ref.predicate_id,
                tier=ref.tier,
                confidence=ref.confidence,
                source_type=str(ref.source_type),
                page=ref.target_page,
                tooltip=_tooltip(ref),
                value_hidden=hidden,
                value=None if hidden else ref.value,
            )
        )
    return views
