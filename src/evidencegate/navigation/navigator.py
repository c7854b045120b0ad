"""Evidence navigator: per-viewer page, selection and hover state.

Lives as long as the document viewer is open; there is no terminal
state. The rendering surface feeds it document-load, page-change and
resize notifications. Evidence loads are asynchronous and
last-request-wins: a response for a page the reviewer already left is
dropped, never rendered.

Selecting evidence moves to its page and, when the viewer was opened
for a specific field, writes one view event per selection. Browsing a
document without a field context is not audited.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from evidencegate.constants import FieldRecordType
from evidencegate.evidence.tiers import storage_tier_for
from evidencegate.evidence.value_objects import EvidenceRef, ViewEvent
from evidencegate.overlay.layers import (
    PageOverlay,
    build_page_overlay,
    filter_for_page,
)
from evidencegate.resilience.latest import LatestRequestGate
from evidencegate.services.audit import AuditWriter
from evidencegate.services.protocols import EvidenceQueryService
from evidencegate.services.safe_query import (
    fetch_field_evidence,
    fetch_page_evidence,
)

logger = logging.getLogger(__name__)

_PAGE_CHANNEL = "page"
_FIELD_CHANNEL = "field"


@dataclass
class PageDimensions:
    width_px: float = 0.0
    height_px: float = 0.0


@dataclass
class NavigatorState:
    current_page: int = 1
    selected_evidence_id: str | None = None
    hovered_evidence_id: str | None = None
    page_dimensions: PageDimensions | None = None
    total_pages: int | None = None


class EvidenceNavigator:
    """Coordinates the interactive evidence viewer for one document."""

    def __init__(
        self,
        query: EvidenceQueryService,
        *,
        document_id: str,
        audit: AuditWriter | None = None,
        field_id: str | None = None,
        field_record_type: FieldRecordType = FieldRecordType.AI_EXTRACTION,
        initial_page: int = 1,
        initial_evidence_id: str | None = None,
    ) -> None:
        self._query = query
        self._audit = audit
        self.document_id = document_id
        self.field_id = field_id
        self.field_record_type = field_record_type
        self.state = NavigatorState(current_page=max(initial_page, 1))
        self._gate = LatestRequestGate()
        self._page_evidence: list[EvidenceRef] = []
        self._field_evidence: list[EvidenceRef] | None = None
        self._pending_selection = initial_evidence_id

    # ── Evidence lists ───────────────────────────────────

    @property
    def field_evidence_loaded(self) -> bool:
        return self._field_evidence is not None

    @property
    def evidence(self) -> list[EvidenceRef]:
        """Field evidence when viewing a field, else the page's evidence."""
        if self.field_id is not None:
            return list(self._field_evidence or [])
        return list(self._page_evidence)

    def visible_evidence(self) -> list[EvidenceRef]:
        """Evidence that belongs on the current page."""
        return filter_for_page(self.evidence, self.state.current_page)

    def find(self, evidence_id: str) -> EvidenceRef | None:
        for ref in self.evidence:
            if ref.id == evidence_id:
                return ref
        return None

    async def load_page_evidence(self) -> list[EvidenceRef] | None:
        """Fetch evidence for the current page.

        Returns None, leaving state untouched, if the page changed (or
        another page load was issued) before this one resolved.
        """
        page = self.state.current_page
        refs = await self._gate.run(
            _PAGE_CHANNEL,
            lambda: fetch_page_evidence(self._query, self.document_id, page),
        )
        if refs is None:
            logger.debug(
                "event=stale_page_evidence document_id=%s page=%d",
                self.document_id,
                page,
            )
            return None
        self._page_evidence = refs
        return refs

    async def load_field_evidence(self) -> list[EvidenceRef] | None:
        """Fetch evidence for the viewer's field and apply any pending selection."""
        field_id = self.field_id
        if field_id is None:
            return None
        refs = await self._gate.run(
            _FIELD_CHANNEL,
            lambda: fetch_field_evidence(
                self._query, field_id, self.field_record_type
            ),
        )
        if refs is None:
            return None
        self._field_evidence = refs
        if self._pending_selection is not None:
            pending = self._pending_selection
            self._pending_selection = None
            ref = self.find(pending)
            if ref is not None:
                self.select(ref)
            else:
                logger.info(
                    "event=pending_selection_missing evidence_id=%s",
                    pending,
                )
        return refs

    # ── Navigation ───────────────────────────────────────

    def set_page(self, page: int) -> int:
        """Move to *page*, clamped to the document. Returns the page used.

        Any page-evidence request still in flight becomes stale.
        """
        page = max(page, 1)
        total = self.state.total_pages
        if total:
            page = min(page, total)
        if page != self.state.current_page:
            self.state.current_page = page
            self._gate.invalidate(_PAGE_CHANNEL)
        return page

    async def go_to_page(self, page: int) -> list[EvidenceRef] | None:
        self.set_page(page)
        return await self.load_page_evidence()

    def select(self, ref: EvidenceRef) -> None:
        """Select *ref*, jump to its page and audit the view.

        Deferred until field evidence has loaded when viewing a field.
        """
        if self.field_id is not None and not self.field_evidence_loaded:
            self._pending_selection = ref.id
            return
        self.state.selected_evidence_id = ref.id
        target = ref.target_page or 1
        self.set_page(target)

        if self.field_id is None or self._audit is None:
            return
        self._audit.log_view(
            ViewEvent(
                field_id=self.field_id,
                field_record_type=self.field_record_type,
                evidence_ref_id=ref.id,
                document_id=ref.document_id or self.document_id,
                page=self.state.current_page,
                tier_used=storage_tier_for(ref.tier),
            )
        )

    def select_by_id(self, evidence_id: str) -> bool:
        """Select by id; deferred until field evidence has loaded.

        Returns True if the selection was applied now.
        """
        if self.field_id is not None and not self.field_evidence_loaded:
            self._pending_selection = evidence_id
            return False
        ref = self.find(evidence_id)
        if ref is None:
            return False
        self.select(ref)
        return True

    def clear_selection(self) -> None:
        self.state.selected_evidence_id = None

    def hover(self, ref: EvidenceRef | None) -> None:
        """Presentational only; never audited."""
        self.state.hovered_evidence_id = ref.id if ref else None

    # ── Rendering surface notifications ──────────────────

    def on_document_load(self, total_pages: int) -> None:
        self.state.total_pages = max(total_pages, 0) or None
        self.set_page(self.state.current_page)

    def on_page_change(self, page_index: int) -> int:
        """Renderer reports zero-based page indexes."""
        return self.set_page(page_index + 1)

    def on_page_resize(self, width_px: float, height_px: float) -> None:
        self.state.page_dimensions = PageDimensions(width_px, height_px)

    # ── Overlay ──────────────────────────────────────────

    def overlay(self) -> PageOverlay:
        dims = self.state.page_dimensions or PageDimensions()
        return build_page_overlay(
            self.evidence,
            self.state.current_page,
            dims.width_px,
            dims.height_px,
            selected_id=self.state.selected_evidence_id,
            hovered_id=self.state.hovered_evidence_id,
        )
