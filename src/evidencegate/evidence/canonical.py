"""Raw evidence record → canonical EvidenceRef.

Assigns the precision tier from the storage label, normalizes the
bounding box into top-left percentage space, and strips location
fields the tier does not use. A record whose tier promises more
location than it carries is degraded to DOCUMENT precision instead of
failing; the ref is still listed, just never highlighted.
"""

from __future__ import annotations

import logging
import math

from evidencegate.constants import (
    COORDINATE_TOLERANCE,
    DEFAULT_CONFIDENCE,
    SNIPPET_MAX_LENGTH,
    BBoxOrigin,
    BBoxUnits,
    ProvenanceStatus,
    StorageTier,
)
from evidencegate.evidence.schemas import (
    RawBoundingBox,
    RawEvidenceRecord,
    RawTextAnchor,
)
from evidencegate.evidence.tiers import Precision, precision_for
from evidencegate.evidence.value_objects import BBox, EvidenceRef, TextAnchor

logger = logging.getLogger(__name__)

_PERCENT = 100.0


def normalize_bbox(
    raw: RawBoundingBox, page: int
) -> BBox | None:
    """Convert a stored bbox to percentages of the rendered page.

    Returns None when the box cannot be placed: unknown page extent
    for absolute units, non-positive size, or coordinates that fall
    outside the page.
    """
    match raw.units:
        case BBoxUnits.PAGE_PERCENT:
            sx = sy = 1.0
        case BBoxUnits.PAGE_NORMALIZED:
            sx = sy = _PERCENT
        case BBoxUnits.PDF_POINTS | BBoxUnits.PIXELS:
            if raw.page_width is None or raw.page_height is None:
                return None
            sx = _PERCENT / raw.page_width
            sy = _PERCENT / raw.page_height

    x, y = raw.x * sx, raw.y * sy
    w, h = raw.w * sx, raw.h * sy
    if w <= 0 or h <= 0:
        return None

    if raw.origin == BBoxOrigin.BOTTOM_LEFT:
        y = _PERCENT - y - h

    # Rotation is the clockwise turn applied when the page is rendered.
    match raw.rotation:
        case 90:
            x, y, w, h = _PERCENT - y - h, x, h, w
        case 180:
            x, y = _PERCENT - x - w, _PERCENT - y - h
        case 270:
            x, y, w, h = y, _PERCENT - x - w, h, w
        case _:
            pass

    slack = COORDINATE_TOLERANCE * _PERCENT
    if (
        x < -slack
        or y < -slack
        or x + w > _PERCENT + slack
        or y + h > _PERCENT + slack
    ):
        return None

    x = min(max(x, 0.0), _PERCENT)
    y = min(max(y, 0.0), _PERCENT)
    return BBox(
        page=page,
        x=x,
        y=y,
        width=min(w, _PERCENT - x),
        height=min(h, _PERCENT - y),
    )


def anchor_from_raw(raw: RawTextAnchor) -> TextAnchor | None:
    if not raw.query:
        return None
    return TextAnchor(
        start_offset=raw.start_offset,
        end_offset=raw.start_offset + len(raw.query),
        context_before=raw.context_before,
        context_after=raw.context_after,
    )


def _truncate(snippet: str | None, limit: int) -> str | None:
    if snippet is None:
        return None
    return snippet[:limit]


def _clamp_confidence(value: float) -> float:
    if not math.isfinite(value):
        return DEFAULT_CONFIDENCE
    return min(max(value, 0.0), 1.0)


def to_evidence_ref(
    raw: RawEvidenceRecord,
    *,
    strict: bool = False,
    snippet_max_length: int = SNIPPET_MAX_LENGTH,
) -> EvidenceRef:
    """Build the canonical ref for *raw*.

    *strict* makes unknown tier labels raise instead of degrading.
    """
    precision = precision_for(raw.tier, strict=strict)
    try:
        storage_tier: StorageTier | str = StorageTier(raw.tier)
    except ValueError:
        storage_tier = raw.tier

    page: int | None = None
    bbox: BBox | None = None
    anchor: TextAnchor | None = None
    degraded = False

    if precision == Precision.EXACT:
        bbox_page = raw.bbox_json.page if raw.bbox_json else None
        target = bbox_page or raw.page_number
        if target is not None:
            if raw.bbox_json is not None:
                bbox = normalize_bbox(raw.bbox_json, target)
                if bbox is None:
                    logger.debug(
                        "event=bbox_unusable evidence_id=%s", raw.id
                    )
            if raw.anchor_json is not None:
                anchor = anchor_from_raw(raw.anchor_json)
        if bbox is None and anchor is None:
            precision = Precision.DOCUMENT
            degraded = True
        else:
            page = raw.page_number if raw.page_number is not None else target
    elif precision == Precision.PAGE:
        if raw.page_number is None:
            precision = Precision.DOCUMENT
            degraded = True
        else:
            page = raw.page_number

    if degraded:
        logger.info(
            "event=evidence_degraded evidence_id=%s storage_tier=%s",
            raw.id,
            raw.tier,
        )

    return EvidenceRef(
        id=raw.id,
        field_id=raw.field_id,
        field_record_type=raw.field_record_type,
        source_type=raw.source_type,
        source_id=raw.source_id,
        document_id=raw.document_id,
        tier=precision,
        storage_tier=storage_tier,
        confidence=_clamp_confidence(raw.confidence),
        created_at=raw.created_at,
        value=raw.value,
        snippet=_truncate(raw.snippet, snippet_max_length),
        page=page,
        bbox=bbox,
        anchor=anchor,
        predicate_id=raw.predicate_id,
        label=raw.label,
        provenance_status=raw.provenance_status or ProvenanceStatus.NONE,
        degraded=degraded,
    )
