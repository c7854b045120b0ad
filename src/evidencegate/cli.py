"""CLI entry point: ``evidencegate evaluate``."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter, ValidationError

from evidencegate import __version__
from evidencegate.autofill.engine import AutofillEngine, TemplateField
from evidencegate.config import Settings
from evidencegate.evidence.canonical import to_evidence_ref
from evidencegate.evidence.schemas import RawEvidenceRecord
from evidencegate.logging_config import setup_logging
from evidencegate.resilience.errors import UnknownStorageTierError

_RECORDS = TypeAdapter(list[RawEvidenceRecord])


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f"evidencegate {__version__}")
        return

    if args.command == "evaluate":
        _run_evaluate(args)
    else:
        parser.print_help()


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="evidencegate",
        description=(
            "Evidence provenance and gated auto-fill "
            "for extracted document fields."
        ),
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit",
    )

    sub = parser.add_subparsers(dest="command")

    evaluate = sub.add_parser(
        "evaluate",
        help="Decide auto-fill for one field from stored evidence",
    )
    evaluate.add_argument(
        "records",
        type=str,
        help="JSON file holding a list of evidence records",
    )
    evaluate.add_argument(
        "--field-id",
        default=None,
        help="Only consider records for this field (default: all)",
    )
    evaluate.add_argument(
        "--label",
        default=None,
        help="Display label for the field (default: field id)",
    )
    evaluate.add_argument(
        "--category",
        "-c",
        default=None,
        help="Sensitivity category of the template field",
    )
    evaluate.add_argument(
        "--current-value",
        default=None,
        help="Value already present in the field",
    )
    evaluate.add_argument(
        "--threshold",
        "-t",
        type=float,
        default=None,
        help="Auto-fill threshold override (default: from settings)",
    )
    evaluate.add_argument(
        "--strict",
        action="store_true",
        help="Fail on unknown storage tier labels",
    )

    return parser


def load_records(path: Path) -> list[RawEvidenceRecord]:
    """Read evidence records from a JSON array file."""
    return _RECORDS.validate_json(path.read_bytes())


def evaluate(
    records: list[RawEvidenceRecord],
    args: argparse.Namespace,
    settings: Settings | None = None,
) -> dict[str, Any]:
    """Canonicalize *records* and run the auto-fill decision."""
    settings = settings or Settings()
    if args.field_id is not None:
        records = [r for r in records if r.field_id == args.field_id]
    field_id = args.field_id or (records[0].field_id if records else "")

    refs = [
        to_evidence_ref(
            r,
            strict=args.strict or settings.debug_mode,
            snippet_max_length=settings.snippet_max_length,
        )
        for r in records
    ]
    engine = AutofillEngine.from_settings(settings)
    proposal = engine.decide(
        TemplateField(
            field_id=field_id,
            label=args.label or field_id,
            sensitivity_category=args.category,
            confidence_threshold=args.threshold,
        ),
        refs,
        args.current_value,
    )
    return proposal.to_dict()


def _run_evaluate(args: argparse.Namespace) -> None:
    """Execute the evaluate command."""
    settings = Settings()
    setup_logging(settings.log_level)

    path = Path(args.records)
    if not path.exists():
        print(f"Error: {path} does not exist", file=sys.stderr)
        sys.exit(1)

    if args.threshold is not None and not 0.0 <= args.threshold <= 1.0:
        print("Error: --threshold must be within [0, 1]", file=sys.stderr)
        sys.exit(1)

    try:
        records = load_records(path)
    except ValidationError as exc:
        print(
            f"Error: {path} is not a list of evidence records "
            f"({exc.error_count()} errors)",
            file=sys.stderr,
        )
        sys.exit(1)

    try:
        result = evaluate(records, args, settings)
    except UnknownStorageTierError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    print(json.dumps(result, indent=2, default=str))
