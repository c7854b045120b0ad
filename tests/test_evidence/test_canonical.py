"""Tests for raw record canonicalization and bbox normalization."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from evidencegate.constants import BBoxOrigin, BBoxUnits, ProvenanceStatus
from evidencegate.evidence.canonical import (
    anchor_from_raw,
    normalize_bbox,
    to_evidence_ref,
)
from evidencegate.evidence.schemas import RawBoundingBox, RawTextAnchor
from evidencegate.evidence.ranking import best_for_highlight
from evidencegate.evidence.tiers import Precision
from evidencegate.resilience.errors import UnknownStorageTierError
from tests.conftest import exact_ref, make_raw


def _box(**kwargs: object) -> RawBoundingBox:
    return RawBoundingBox.model_validate(kwargs)


class TestNormalizeBBox:
    def test_page_normalized_scales_to_percent(self) -> None:
        bbox = normalize_bbox(_box(x=0.1, y=0.2, w=0.3, h=0.05), page=2)
        assert bbox is not None
        assert bbox.page == 2
        assert bbox.x == pytest.approx(10)
        assert bbox.y == pytest.approx(20)
        assert bbox.width == pytest.approx(30)
        assert bbox.height == pytest.approx(5)

    def test_page_percent_passes_through(self) -> None:
        bbox = normalize_bbox(
            _box(units="page_percent", x=10, y=20, w=30, h=5), page=1
        )
        assert bbox is not None
        assert (bbox.x, bbox.y, bbox.width, bbox.height) == (10, 20, 30, 5)

    def test_pdf_points_need_page_extent(self) -> None:
        assert (
            normalize_bbox(
                _box(units=BBoxUnits.PDF_POINTS, x=72, y=72, w=144, h=36),
                page=1,
            )
            is None
        )

    def test_pdf_points_with_extent(self) -> None:
        bbox = normalize_bbox(
            _box(
                units=BBoxUnits.PDF_POINTS,
                x=61.2,
                y=79.2,
                w=306,
                h=39.6,
                page_width=612,
                page_height=792,
            ),
            page=1,
        )
        assert bbox is not None
        assert bbox.x == pytest.approx(10)
        assert bbox.y == pytest.approx(10)
        assert bbox.width == pytest.approx(50)
        assert bbox.height == pytest.approx(5)

    def test_bottom_left_origin_is_flipped(self) -> None:
        bbox = normalize_bbox(
            _box(
                units="page_percent",
                origin=BBoxOrigin.BOTTOM_LEFT,
                x=10,
                y=10,
                w=20,
                h=5,
            ),
            page=1,
        )
        assert bbox is not None
        assert bbox.y == pytest.approx(85)

    @pytest.mark.parametrize(
        ("rotation", "expected"),
        [
            (90, (75, 10, 5, 20)),
            (180, (70, 75, 20, 5)),
            (270, (20, 70, 5, 20)),
        ],
    )
    def test_rotation(
        self, rotation: int, expected: tuple[float, ...]
    ) -> None:
        bbox = normalize_bbox(
            _box(
                units="page_percent",
                rotation=rotation,
                x=10,
                y=20,
                w=20,
                h=5,
            ),
            page=1,
        )
        assert bbox is not None
        assert (bbox.x, bbox.y, bbox.width, bbox.height) == pytest.approx(
            expected
        )

    def test_out_of_page_is_unusable(self) -> None:
        assert (
            normalize_bbox(
                _box(units="page_percent", x=90, y=10, w=20, h=5), page=1
            )
            is None
        )

    def test_zero_size_is_unusable(self) -> None:
        assert normalize_bbox(_box(x=0.1, y=0.1, w=0, h=0.1), page=1) is None

    def test_invalid_rotation_rejected_by_schema(self) -> None:
        with pytest.raises(ValidationError):
            _box(x=0, y=0, w=1, h=1, rotation=45)


class TestAnchorFromRaw:
    def test_offsets_span_the_query(self) -> None:
        anchor = anchor_from_raw(
            RawTextAnchor(query="ACME Corp", start_offset=120)
        )
        assert anchor is not None
        assert (anchor.start_offset, anchor.end_offset) == (120, 129)

    def test_empty_query_is_unusable(self) -> None:
        assert anchor_from_raw(RawTextAnchor(query="")) is None


class TestToEvidenceRef:
    def test_t1_with_bbox_is_exact(self) -> None:
        ref = to_evidence_ref(make_raw())
        assert ref.tier is Precision.EXACT
        assert ref.storage_tier == "T1_TEXT"
        assert ref.page == 2
        assert ref.bbox is not None
        assert ref.bbox.page == 2
        assert ref.degraded is False

    def test_bbox_page_wins_over_page_number(self) -> None:
        raw = make_raw(
            page_number=3,
            bbox_json={"x": 0.1, "y": 0.1, "w": 0.1, "h": 0.1, "page": 5},
        )
        ref = to_evidence_ref(raw)
        assert ref.bbox is not None
        assert ref.bbox.page == 5
        assert ref.target_page == 5

    def test_t1_with_anchor_only_stays_exact(self) -> None:
        raw = make_raw(
            bbox_json=None,
            anchor_json={"query": "ACME Corp", "start_offset": 4},
        )
        ref = to_evidence_ref(raw)
        assert ref.tier is Precision.EXACT
        assert ref.bbox is None
        assert ref.anchor is not None

    def test_t1_without_location_degrades(self) -> None:
        ref = to_evidence_ref(make_raw(bbox_json=None))
        assert ref.tier is Precision.DOCUMENT
        assert ref.degraded is True
        assert ref.page is None
        assert ref.storage_tier == "T1_TEXT"

    def test_t1_without_page_degrades(self) -> None:
        ref = to_evidence_ref(make_raw(page_number=None))
        assert ref.tier is Precision.DOCUMENT
        assert ref.degraded is True

    def test_t2_keeps_page_only(self) -> None:
        ref = to_evidence_ref(make_raw(tier="T2_OCR", page_number=4))
        assert ref.tier is Precision.PAGE
        assert ref.page == 4
        assert ref.bbox is None

    def test_t2_without_page_degrades(self) -> None:
        ref = to_evidence_ref(
            make_raw(tier="T2_OCR", page_number=None, bbox_json=None)
        )
        assert ref.tier is Precision.DOCUMENT
        assert ref.degraded is True

    def test_t3_drops_location(self) -> None:
        ref = to_evidence_ref(
            make_raw(
                tier="T3_ANCHOR",
                anchor_json={"query": "ACME"},
            )
        )
        assert ref.tier is Precision.DOCUMENT
        assert ref.page is None
        assert ref.bbox is None
        assert ref.anchor is None
        assert ref.degraded is False

    def test_unknown_tier_degrades(self) -> None:
        ref = to_evidence_ref(make_raw(tier="T4_VISION"))
        assert ref.tier is Precision.DOCUMENT
        assert ref.storage_tier == "T4_VISION"

    def test_unknown_tier_strict_raises(self) -> None:
        with pytest.raises(UnknownStorageTierError):
            to_evidence_ref(make_raw(tier="T4_VISION"), strict=True)

    def test_confidence_parsed_and_clamped(self) -> None:
        assert to_evidence_ref(make_raw(confidence="1.7")).confidence == 1.0
        assert to_evidence_ref(make_raw(confidence=None)).confidence == 0.5

    @pytest.mark.parametrize("stored", ["NaN", "inf", "-Infinity", float("nan")])
    def test_non_finite_confidence_falls_back_to_default(
        self, stored: object
    ) -> None:
        assert to_evidence_ref(make_raw(confidence=stored)).confidence == 0.5

    def test_unvalidated_nan_confidence_is_not_clamped_through(self) -> None:
        raw = make_raw().model_copy(update={"confidence": float("nan")})
        assert to_evidence_ref(raw).confidence == 0.5

    def test_non_finite_confidence_does_not_outrank_real_evidence(
        self,
    ) -> None:
        broken = to_evidence_ref(make_raw("a", confidence="NaN"))
        solid = exact_ref("g", confidence=0.95)
        best = best_for_highlight([broken, solid])
        assert best is not None
        assert best.id == "g"

    def test_snippet_truncated(self) -> None:
        ref = to_evidence_ref(
            make_raw(snippet="x" * 500), snippet_max_length=240
        )
        assert ref.snippet is not None
        assert len(ref.snippet) == 240

    def test_provenance_status_defaults_to_none(self) -> None:
        ref = to_evidence_ref(make_raw())
        assert ref.provenance_status is ProvenanceStatus.NONE
