"""Confidence resolver: picks the best candidate, decides eligibility.

Pure and synchronous. Callers trigger the actual fill and record the
decision.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from evidencegate.autofill.sensitivity import DEFAULT_POLICY, SensitivityPolicy
from evidencegate.constants import HIGH_CONFIDENCE_THRESHOLD
from evidencegate.evidence.value_objects import EvidenceRef


@dataclass(frozen=True)
class Resolution:
    best: EvidenceRef | None
    should_auto_fill: bool


def has_value(current_value: Any | None) -> bool:
    """True when the field already holds something a person entered."""
    if current_value is None:
        return False
    if isinstance(current_value, str):
        return bool(current_value.strip())
    return True


def pick_best(refs: Sequence[EvidenceRef]) -> EvidenceRef | None:
    """Highest confidence; ties go to the earliest ref."""
    best: EvidenceRef | None = None
    for ref in refs:
        if best is None or ref.confidence > best.confidence:
            best = ref
    return best


def resolve(
    refs: Sequence[EvidenceRef],
    *,
    sensitivity_category: str | None = None,
    current_value: Any | None = None,
    threshold: float = HIGH_CONFIDENCE_THRESHOLD,
    policy: SensitivityPolicy = DEFAULT_POLICY,
) -> Resolution:
    """Select the best ref and whether it may fill the field unattended.

    Auto-fill requires all of: best confidence >= *threshold*, the
    category not blocked by *policy*, and an empty current value.
    """
    best = pick_best(refs)
    if best is None:
        return Resolution(best=None, should_auto_fill=False)

    should_auto_fill = (
        best.confidence >= threshold
        and not policy.is_blocked(sensitivity_category)
        and not has_value(current_value)
    )
    return Resolution(best=best, should_auto_fill=should_auto_fill)
