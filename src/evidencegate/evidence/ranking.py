"""Canonical ordering for choosing which evidence to highlight."""

from __future__ import annotations

from collections.abc import Sequence

from evidencegate.evidence.value_objects import EvidenceRef


def highlight_order_key(ref: EvidenceRef) -> tuple[int, float, str]:
    """Most precise first, then most confident, then lowest id."""
    return (-int(ref.tier), -ref.confidence, ref.id)


def rank_for_highlight(refs: Sequence[EvidenceRef]) -> list[EvidenceRef]:
    return sorted(refs, key=highlight_order_key)


def best_for_highlight(refs: Sequence[EvidenceRef]) -> EvidenceRef | None:
    """Deterministic canonical ref for a field: precision, confidence, id."""
    if not refs:
        return None
    return min(refs, key=highlight_order_key)
