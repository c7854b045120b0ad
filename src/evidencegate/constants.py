"""Shared constants: single source of truth for cross-module values.

All magic strings and numbers that appear in 2+ files belong here.
StrEnum members are str-compatible, so downstream code (JSON, SQL,
API payloads) works unchanged.
"""

from __future__ import annotations

from enum import StrEnum

# ── String Enums ─────────────────────────────────────────


class StorageTier(StrEnum):
    """Tier labels as written by the extraction pipeline.

    The numeric suffix is the pipeline's priority order (T1 is the most
    precise). Use ``evidence.tiers.precision_for`` to compare tiers;
    never compare these labels directly.
    """

    T1_TEXT = "T1_TEXT"
    T2_OCR = "T2_OCR"
    T3_ANCHOR = "T3_ANCHOR"


class SourceType(StrEnum):
    """Kind of record an evidence reference originates from."""

    EXTRACTION = "extraction"
    FACT = "fact"
    DOCUMENT = "document"


class FieldRecordType(StrEnum):
    """Record kinds that can carry evidenced fields."""

    AI_EXTRACTION = "ai_extraction"
    VATR_SOURCE = "vatr_source"
    ASSET_ATTRIBUTE = "asset_attribute"


class ProvenanceStatus(StrEnum):
    """Review status of an evidence reference's provenance."""

    RESOLVED = "resolved"
    UNRESOLVED = "unresolved"
    NEEDS_REVIEW = "needs_review"
    NONE = "none"


class DecisionKind(StrEnum):
    """Reviewer verdict on an autofill suggestion."""

    ACCEPTED = "accepted"
    REJECTED = "rejected"


class ProposalStatus(StrEnum):
    """Outcome of the autofill decision for one template field."""

    AUTO_FILLED = "auto_filled"
    SUGGESTED = "suggested"
    NEEDS_SELECTION = "needs_selection"
    SENSITIVE_BLOCKED = "sensitive_blocked"
    NO_MATCH = "no_match"


class BBoxUnits(StrEnum):
    """Coordinate units used by stored bounding boxes."""

    PDF_POINTS = "pdf_points"
    PAGE_NORMALIZED = "page_normalized"
    PAGE_PERCENT = "page_percent"
    PIXELS = "pixels"


class BBoxOrigin(StrEnum):
    """Corner that stored bounding box coordinates are measured from."""

    TOP_LEFT = "top_left"
    BOTTOM_LEFT = "bottom_left"


class AnchorMatchType(StrEnum):
    """How a text anchor query is matched against page text."""

    EXACT = "exact"
    REGEX = "regex"
    SEMANTIC = "semantic"


# ── Thresholds ───────────────────────────────────────────

HIGH_CONFIDENCE_THRESHOLD = 0.80
MEDIUM_CONFIDENCE_THRESHOLD = 0.60

# Relative tolerance used when checking coordinate round-trips
COORDINATE_TOLERANCE = 1e-6

# ── Sensitivity ──────────────────────────────────────────

# Membership is an absolute veto on automatic population.
NEVER_AUTOFILL_CATEGORIES: frozenset[str] = frozenset({
    "bank_account",
    "personal_id",
    "personal_data",
    "financial_covenant",
    "legal_binding",
    "tax_id",
    "password",
    "ssn",
    "api_key",
    "secret",
    "credit_card",
})

MANUAL_ENTRY_NOTICE = "Manual entry required"

# ── Limits ───────────────────────────────────────────────

SNIPPET_MAX_LENGTH = 240
DEFAULT_CONFIDENCE = 0.5
UNRESOLVED_LIST_LIMIT = 50
AUDIT_LOG_LIMIT = 100
