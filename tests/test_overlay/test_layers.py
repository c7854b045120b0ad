"""Tests for page filtering and the tier-dependent overlay plan."""

from __future__ import annotations

import pytest

from evidencegate.evidence.tiers import Precision
from evidencegate.evidence.value_objects import BBox, TextAnchor
from evidencegate.overlay.layers import (
    FRAME_LAYER,
    RECT_LAYER,
    TIER_DISPLAY,
    BuiltinIcon,
    CustomIcon,
    appears_on_page,
    build_page_overlay,
    filter_for_page,
    render_icon,
)
from tests.conftest import exact_ref, make_ref


class TestPageFiltering:
    def test_document_tier_on_every_page(self) -> None:
        ref = make_ref()
        assert appears_on_page(ref, 1)
        assert appears_on_page(ref, 99)

    def test_page_tier_only_on_its_page(self) -> None:
        ref = make_ref(tier=Precision.PAGE, page=4)
        assert appears_on_page(ref, 4)
        assert not appears_on_page(ref, 3)

    def test_bbox_page_wins_when_pages_disagree(self) -> None:
        ref = make_ref(
            tier=Precision.EXACT,
            page=5,
            bbox=BBox(page=3, x=1, y=1, width=1, height=1),
        )
        assert appears_on_page(ref, 3)
        assert not appears_on_page(ref, 5)

    def test_anchor_only_exact_uses_page(self) -> None:
        ref = make_ref(
            tier=Precision.EXACT,
            page=2,
            anchor=TextAnchor(start_offset=0, end_offset=4),
        )
        assert appears_on_page(ref, 2)

    def test_filter_is_exclusive(self) -> None:
        refs = [
            make_ref("doc"),
            make_ref("p1", tier=Precision.PAGE, page=1),
            make_ref("p2", tier=Precision.PAGE, page=2),
            exact_ref("e2", page=2),
        ]
        assert [r.id for r in filter_for_page(refs, 2)] == [
            "doc",
            "p2",
            "e2",
        ]


class TestBuildPageOverlay:
    def test_tiers_map_to_layers(self) -> None:
        refs = [
            make_ref("doc"),
            make_ref("page", tier=Precision.PAGE, page=2),
            exact_ref("exact", page=2),
        ]
        overlay = build_page_overlay(refs, 2, 800, 1000)
        assert overlay.frame is True
        assert overlay.frame_evidence_ids == ["page"]
        assert [r.evidence_id for r in overlay.rects] == ["exact"]
        assert overlay.rects[0].layer == RECT_LAYER > FRAME_LAYER
        assert [r.id for r in overlay.metadata_only] == ["doc"]

    def test_rect_pixels(self) -> None:
        overlay = build_page_overlay([exact_ref(page=2)], 2, 800, 1000)
        rect = overlay.rects[0].rect
        assert (rect.left, rect.top, rect.width, rect.height) == (
            pytest.approx((80, 200, 240, 50))
        )

    def test_selected_and_hovered_flags(self) -> None:
        refs = [exact_ref("a"), exact_ref("b")]
        overlay = build_page_overlay(
            refs, 2, 800, 1000, selected_id="a", hovered_id="b"
        )
        flags = {r.evidence_id: (r.selected, r.hovered) for r in overlay.rects}
        assert flags == {"a": (True, False), "b": (False, True)}

    def test_unmeasured_page_lists_exact_as_metadata(self) -> None:
        overlay = build_page_overlay([exact_ref(page=2)], 2, 0, 0)
        assert overlay.rects == []
        assert [r.id for r in overlay.metadata_only] == ["ev-exact"]

    def test_anchor_only_goes_to_text_layer(self) -> None:
        ref = make_ref(
            "anchored",
            tier=Precision.EXACT,
            page=2,
            anchor=TextAnchor(start_offset=10, end_offset=19),
        )
        overlay = build_page_overlay([ref], 2, 800, 1000)
        assert [a.evidence_id for a in overlay.anchors] == ["anchored"]
        assert overlay.rects == []

    def test_other_pages_excluded(self) -> None:
        overlay = build_page_overlay(
            [make_ref("p", tier=Precision.PAGE, page=1)], 2, 800, 1000
        )
        assert overlay.frame is False

    def test_to_dict_omits_values(self) -> None:
        overlay = build_page_overlay([make_ref()], 1, 800, 1000)
        data = overlay.to_dict()
        assert "value" not in data["metadata_only"][0]


class TestIcons:
    def test_builtin_renders_name(self) -> None:
        assert render_icon(BuiltinIcon("target")) == "target"

    def test_custom_renders_itself(self) -> None:
        assert render_icon(CustomIcon(render=lambda: "<svg/>")) == "<svg/>"

    def test_every_tier_has_display(self) -> None:
        assert set(TIER_DISPLAY) == set(Precision)
        assert render_icon(TIER_DISPLAY[Precision.EXACT].icon) == "target"
