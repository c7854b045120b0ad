"""Percentage bbox ↔ screen pixel rectangle.

Both directions are plain scalings by the rendered page size, so a
round trip reproduces the input within floating-point tolerance.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from evidencegate.constants import COORDINATE_TOLERANCE
from evidencegate.evidence.value_objects import BBox
from evidencegate.resilience.errors import InvalidBoundingBoxError


@dataclass(frozen=True)
class ScreenRect:
    """Pixel rectangle relative to the rendered page's top-left corner."""

    left: float
    top: float
    width: float
    height: float

    def to_dict(self) -> dict[str, float]:
        return {
            "left": self.left,
            "top": self.top,
            "width": self.width,
            "height": self.height,
        }


def _check_page(page_width_px: float, page_height_px: float) -> None:
    if not (page_width_px > 0 and page_height_px > 0):
        raise InvalidBoundingBoxError(
            f"page dimensions must be positive, got "
            f"{page_width_px}x{page_height_px}"
        )


def to_screen_rect(
    bbox: BBox, page_width_px: float, page_height_px: float
) -> ScreenRect:
    _check_page(page_width_px, page_height_px)
    return ScreenRect(
        left=bbox.x / 100 * page_width_px,
        top=bbox.y / 100 * page_height_px,
        width=bbox.width / 100 * page_width_px,
        height=bbox.height / 100 * page_height_px,
    )


def to_bbox(
    rect: ScreenRect,
    page: int,
    page_width_px: float,
    page_height_px: float,
) -> BBox:
    """Inverse of ``to_screen_rect``."""
    _check_page(page_width_px, page_height_px)
    return BBox(
        page=page,
        x=rect.left / page_width_px * 100,
        y=rect.top / page_height_px * 100,
        width=rect.width / page_width_px * 100,
        height=rect.height / page_height_px * 100,
    )


def bboxes_close(
    a: BBox, b: BBox, rel_tol: float = COORDINATE_TOLERANCE
) -> bool:
    return a.page == b.page and all(
        math.isclose(p, q, rel_tol=rel_tol, abs_tol=rel_tol)
        for p, q in (
            (a.x, b.x),
            (a.y, b.y),
            (a.width, b.width),
            (a.height, b.height),
        )
    )
