from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, List, Optional, Sequence

from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from .config import Settings
from .diagnostics import Diagnostic
from .errors import SchemaError, StrictCoercionError
from .logging_utils import get_logger, setup_logging
from .marshaler import Marshaler
from .proto import ProtoRecord
from .records import DynamicRecord
from .schema_builder import load_registry

console = Console()
LOGGER = get_logger("cli")

EXIT_CONFIG_ERROR = 1
EXIT_COERCION_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="record-marshaler",
        description="Populate one record from a JSON document using a YAML schema.",
    )
    parser.add_argument("schema", type=Path, help="YAML schema document")
    parser.add_argument("entity", help="Entity to populate")
    parser.add_argument("document", type=Path, help="JSON source document")
    parser.add_argument("--date-format", help="strptime format for date attributes")
    parser.add_argument(
        "--strict",
        action="store_true",
        default=None,
        help="Fail when any attribute cannot be coerced",
    )
    return parser


def _load_document(path: Path) -> Any:
    try:
        with path.open("r", encoding="utf-8") as fh:
            return json.load(fh)
    except (OSError, json.JSONDecodeError) as exc:
        raise SchemaError(f"Could not read document {path}: {exc}") from exc


def render_record(record: DynamicRecord, diagnostics: List[Diagnostic]) -> None:
    table = Table(title=record.entity)
    table.add_column("Field")
    table.add_column("Value")
    for key, value in sorted(record.as_dict().items()):
        table.add_row(key, repr(value))
    console.print(table)

    if diagnostics:
        issues = Table(title="Diagnostics")
        issues.add_column("Field")
        issues.add_column("Kind")
        issues.add_column("Message")
        for diagnostic in diagnostics:
            issues.add_row(diagnostic.field, diagnostic.kind, diagnostic.message)
        console.print(issues)


def main(argv: Optional[Sequence[str]] = None) -> int:
    load_dotenv()
    settings = Settings.from_env()
    setup_logging(settings.log_level)
    args = build_parser().parse_args(argv)

    options = settings.marshal_options(date_format=args.date_format, strict=args.strict)

    try:
        registry = load_registry(args.schema)
        representation = registry.representation_for(args.entity)
        document = _load_document(args.document)
    except SchemaError as exc:
        LOGGER.error("Configuration error: %s", exc)
        print(f"Configuration error: {exc}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    if not isinstance(document, dict):
        print("Configuration error: document root must be an object", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    record = DynamicRecord(representation.entity)
    proto = ProtoRecord(record=record, representation=representation, document=document)
    marshaler = Marshaler(options, registry=registry)
    try:
        diagnostics = marshaler.populate_attributes(proto)
    except StrictCoercionError as exc:
        render_record(record, exc.diagnostics)
        print(f"Coercion failed: {exc}", file=sys.stderr)
        return EXIT_COERCION_ERROR

    render_record(record, diagnostics)
    return 0


if __name__ == "__main__":
    sys.exit(main())
