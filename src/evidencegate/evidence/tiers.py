"""Canonical precision ordering for evidence tiers.

The pipeline writes storage labels (T1_TEXT, T2_OCR, T3_ANCHOR) whose
numbers count *down* as precision goes up, while the viewer needs an
order where a larger value means a more precise location. This module
is the only place the two vocabularies meet:

    T1_TEXT   -> Precision.EXACT     (bbox and/or text anchor)
    T2_OCR    -> Precision.PAGE      (page only)
    T3_ANCHOR -> Precision.DOCUMENT  (no position)

Everything downstream branches on ``Precision``; storage labels are
only translated back when writing audit records.
"""

from __future__ import annotations

import logging
from enum import IntEnum

from evidencegate.constants import StorageTier
from evidencegate.resilience.errors import UnknownStorageTierError

logger = logging.getLogger(__name__)


class Precision(IntEnum):
    """Display tier. Ordered: DOCUMENT < PAGE < EXACT."""

    DOCUMENT = 1
    PAGE = 2
    EXACT = 3

    @property
    def label(self) -> str:
        return self.name.capitalize()


_STORAGE_TO_PRECISION: dict[StorageTier, Precision] = {
    StorageTier.T1_TEXT: Precision.EXACT,
    StorageTier.T2_OCR: Precision.PAGE,
    StorageTier.T3_ANCHOR: Precision.DOCUMENT,
}

_PRECISION_TO_STORAGE: dict[Precision, StorageTier] = {
    precision: storage
    for storage, precision in _STORAGE_TO_PRECISION.items()
}


def precision_for(label: str, *, strict: bool = False) -> Precision:
    """Translate a storage tier label into the canonical precision.

    Unknown labels raise ``UnknownStorageTierError`` when *strict*
    (debug builds) and otherwise degrade to DOCUMENT, which renders
    no highlight.
    """
    try:
        storage = StorageTier(label)
    except ValueError:
        if strict:
            raise UnknownStorageTierError(label) from None
        logger.warning(
            "event=unknown_storage_tier label=%s fallback=document",
            label,
        )
        return Precision.DOCUMENT
    return _STORAGE_TO_PRECISION[storage]


def storage_tier_for(precision: Precision) -> StorageTier:
    """Inverse of ``precision_for`` for audit records."""
    return _PRECISION_TO_STORAGE[precision]
