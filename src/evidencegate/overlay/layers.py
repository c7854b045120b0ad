"""Tier-dependent overlay plan for one rendered page.

  DOCUMENT  metadata only, never highlighted
  PAGE      full-page frame (layer 0), position ignored
  EXACT     bbox rectangle (layer 1, above the frame); anchor-only
            refs are handed to the text layer instead

Refs that cannot be drawn are still listed under ``metadata_only``.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from evidencegate.evidence.tiers import Precision
from evidencegate.evidence.value_objects import EvidenceRef, TextAnchor
from evidencegate.overlay.coordinates import ScreenRect, to_screen_rect

FRAME_LAYER = 0
RECT_LAYER = 1


# ── Tier badges ──────────────────────────────────────────


@dataclass(frozen=True)
class BuiltinIcon:
    name: str


@dataclass(frozen=True)
class CustomIcon:
    render: Callable[[], Any]


TierIcon = BuiltinIcon | CustomIcon


@dataclass(frozen=True)
class TierDisplay:
    label: str
    color: str
    description: str
    icon: TierIcon


TIER_DISPLAY: dict[Precision, TierDisplay] = {
    Precision.DOCUMENT: TierDisplay(
        label="Document",
        color="blue",
        description="Document-level evidence",
        icon=BuiltinIcon("file-text"),
    ),
    Precision.PAGE: TierDisplay(
        label="Page",
        color="amber",
        description="Page-level evidence",
        icon=BuiltinIcon("layers"),
    ),
    Precision.EXACT: TierDisplay(
        label="Exact",
        color="green",
        description="Exact location evidence",
        icon=BuiltinIcon("target"),
    ),
}


def render_icon(icon: TierIcon) -> Any:
    """Builtins render as their name; custom icons render themselves."""
    match icon:
        case BuiltinIcon(name=name):
            return name
        case CustomIcon(render=render):
            return render()


# ── Page filtering ───────────────────────────────────────


def appears_on_page(ref: EvidenceRef, page: int) -> bool:
    """Whether *ref* belongs on *page* of its document.

    Document-level refs appear everywhere. Located refs appear only on
    their target page; for exact refs the bbox page wins over the
    ref's generic page when the two disagree.
    """
    if ref.tier == Precision.DOCUMENT:
        return True
    return ref.target_page == page


def filter_for_page(
    refs: Sequence[EvidenceRef], page: int
) -> list[EvidenceRef]:
    return [ref for ref in refs if appears_on_page(ref, page)]


# ── Overlay plan ─────────────────────────────────────────


@dataclass(frozen=True)
class HighlightRect:
    evidence_id: str
    rect: ScreenRect
    layer: int = RECT_LAYER
    selected: bool = False
    hovered: bool = False


@dataclass(frozen=True)
class AnchorHighlight:
    evidence_id: str
    anchor: TextAnchor


@dataclass(frozen=True)
class PageOverlay:
    page: int
    frame: bool = False
    frame_evidence_ids: list[str] = field(default_factory=lambda: list[str]())
    rects: list[HighlightRect] = field(
        default_factory=lambda: list[HighlightRect]()
    )
    anchors: list[AnchorHighlight] = field(
        default_factory=lambda: list[AnchorHighlight]()
    )
    metadata_only: list[EvidenceRef] = field(
        default_factory=lambda: list[EvidenceRef]()
    )

    def to_dict(self) -> dict[str, Any]:
        return {
            "page": self.page,
            "frame": self.frame,
            "frame_evidence_ids": self.frame_evidence_ids,
            "rects": [
                {
                    "evidence_id": r.evidence_id,
                    "layer": r.layer,
                    "selected": r.selected,
                    "hovered": r.hovered,
                    **r.rect.to_dict(),
                }
                for r in self.rects
            ],
            "anchors": [
                {"evidence_id": a.evidence_id, **a.anchor.to_dict()}
                for a in self.anchors
            ],
            "metadata_only": [
                ref.to_dict(include_value=False) for ref in self.metadata_only
            ],
        }


def build_page_overlay(
    refs: Sequence[EvidenceRef],
    page: int,
    page_width_px: float,
    page_height_px: float,
    *,
    selected_id: str | None = None,
    hovered_id: str | None = None,
) -> PageOverlay:
    """Lay out highlights for the refs that belong on *page*.

    Rects are skipped (refs go to ``metadata_only``) until the page has
    been measured, i.e. while either dimension is zero.
    """
    measured = page_width_px > 0 and page_height_px > 0
    frame_ids: list[str] = []
    rects: list[HighlightRect] = []
    anchors: list[AnchorHighlight] = []
    metadata_only: list[EvidenceRef] = []

    for ref in filter_for_page(refs, page):
        match ref.tier:
            case Precision.DOCUMENT:
                metadata_only.append(ref)
            case Precision.PAGE:
                frame_ids.append(ref.id)
            case Precision.EXACT:
                if ref.bbox is not None and measured:
                    rects.append(
                        HighlightRect(
                            evidence_id=ref.id,
                            rect=to_screen_rect(
                                ref.bbox, page_width_px, page_height_px
                            ),
                            selected=ref.id == selected_id,
                            hovered=ref.id == hovered_id,
                        )
                    )
                elif ref.bbox is None and ref.anchor is not None:
                    anchors.append(AnchorHighlight(ref.id, ref.anchor))
                else:
                    metadata_only.append(ref)

    return PageOverlay(
        page=page,
        frame=bool(frame_ids),
        frame_evidence_ids=frame_ids,
        rects=rects,
        anchors=anchors,
        metadata_only=metadata_only,
    )
