"""Sensitivity policy: absolute veto on automatic population.

The check runs before any confidence logic. A blocked field never
auto-fills and never displays a suggested value, even at confidence
1.0; the reviewer gets a manual-entry notice instead.

Organizations may add categories. The default set cannot be removed.
"""

from __future__ import annotations

from collections.abc import Iterable

from evidencegate.constants import NEVER_AUTOFILL_CATEGORIES


def _normalize(category: str) -> str:
    return category.strip().lower()


class SensitivityPolicy:
    """Never-autofill registry: mandatory defaults plus org additions."""

    def __init__(self, extra_categories: Iterable[str] = ()) -> None:
        extra = {_normalize(c) for c in extra_categories if c.strip()}
        self._blocked = NEVER_AUTOFILL_CATEGORIES | frozenset(extra)

    @property
    def blocked_categories(self) -> frozenset[str]:
        return self._blocked

    def is_blocked(self, category: str | None) -> bool:
        if not category:
            return False
        return _normalize(category) in self._blocked

    def with_additions(
        self, categories: Iterable[str]
    ) -> SensitivityPolicy:
        """Return a policy that also blocks *categories*."""
        return SensitivityPolicy(
            (self._blocked - NEVER_AUTOFILL_CATEGORIES) | set(categories)
        )


DEFAULT_POLICY = SensitivityPolicy()


def is_blocked(
    category: str | None,
    policy: SensitivityPolicy = DEFAULT_POLICY,
) -> bool:
    """True iff *category* is in the never-autofill set."""
    return policy.is_blocked(category)
