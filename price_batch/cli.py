"""Command-line entrypoint for managing, validating and exporting price batches."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

from price_batch.application.use_cases import BatchContext, ExportBatchUseCase, ValidateBatchUseCase
from price_batch.config import configure_logging, load_settings
from price_batch.domain import editing
from price_batch.domain.errors import (
    BatchNotFoundError,
    DuplicateBatchNameError,
    ExportRefusedError,
)
from price_batch.domain.models import RECORD_TYPES
from price_batch.domain.services import BatchValidator
from price_batch.domain.upc import canonicalize
from price_batch.infrastructure.storage.batch_store import JsonBatchRepository
from price_batch.infrastructure.storage.catalog_store import CatalogProvider
from price_batch.presentation.issue_report import format_issues

EXIT_OK = 0
EXIT_ISSUES = 1
EXIT_USAGE = 2


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build, validate and export retail price-change batches")
    parser.add_argument("--data-dir", type=str, help="Directory holding batches.json")
    parser.add_argument("--catalog", type=str, help="Master item snapshot (.json, .csv, .xlsx, .xls)")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="List batches, newest first")

    create = sub.add_parser("create", help="Create an empty batch")
    create.add_argument("name")

    for name, text in (("duplicate", "Copy a batch under a new name"), ("delete", "Delete a batch")):
        cmd = sub.add_parser(name, help=text)
        cmd.add_argument("batch_id")

    add = sub.add_parser("add-upcs", help="Add or replace lines by UPC")
    add.add_argument("batch_id")
    add.add_argument("codes", nargs="+")
    add.add_argument("--record-type", choices=RECORD_TYPES, default=editing.DEFAULT_RECORD_TYPE)

    apply = sub.add_parser("apply", help="Set fields on every line of a batch")
    apply.add_argument("batch_id")
    apply.add_argument("--record-type", choices=RECORD_TYPES)
    apply.add_argument("--promo-price")
    apply.add_argument("--promo-qty")
    apply.add_argument("--start-date", help="YYYY-MM-DD")
    apply.add_argument("--end-date", help="YYYY-MM-DD")
    apply.add_argument("--percent-off", help="Derive promo price from the reference price")

    validate = sub.add_parser("validate", help="Report line issues")
    validate.add_argument("batch_id")

    export = sub.add_parser("export", help="Write the import CSV if the batch has no issues")
    export.add_argument("batch_id")
    export.add_argument("-o", "--output-dir", type=str, default=".")

    canon = sub.add_parser("canonicalize", help="Print canonical 13-digit UPCs")
    canon.add_argument("raw", nargs="+")

    search = sub.add_parser("search", help="Search the master item catalog")
    search.add_argument("term")

    return parser.parse_args(argv)


def _print_issues(issues) -> None:
    print("\nIssues detected:")
    for text in format_issues(issues):
        print(text)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    settings = load_settings(data_dir=args.data_dir, catalog_path=args.catalog)
    configure_logging(settings)

    if args.command == "canonicalize":
        for raw in args.raw:
            print(f"{raw}\t{canonicalize(raw)}")
        return EXIT_OK

    repository = JsonBatchRepository(settings.batches_path)
    catalog_provider = CatalogProvider(settings.catalog_path)
    catalog = catalog_provider.load()
    context = BatchContext(
        repository=repository,
        catalog_source=catalog_provider,
        validator=BatchValidator(),
    )

    try:
        if args.command == "list":
            for batch in repository.list_batches():
                print(f"{batch.id}\t{batch.name}\t{len(batch.lines)} lines\t{batch.updated_at}")
        elif args.command == "create":
            batch = repository.create(args.name)
            print(batch.id)
        elif args.command == "duplicate":
            batch = repository.duplicate(args.batch_id)
            print(f"{batch.id}\t{batch.name}")
        elif args.command == "delete":
            repository.delete(args.batch_id)
        elif args.command == "add-upcs":
            batch = repository.get(args.batch_id)
            added = editing.add_upcs(batch, args.codes, record_type=args.record_type, catalog=catalog)
            repository.save(batch)
            print(f"{len(added)} line(s) added or replaced")
        elif args.command == "apply":
            batch = repository.get(args.batch_id)
            editing.apply_to_all(
                batch,
                record_type=args.record_type,
                promo_price=args.promo_price,
                promo_qty=args.promo_qty,
                start_date=args.start_date,
                end_date=args.end_date,
            )
            if args.percent_off:
                editing.apply_percent_off(batch, args.percent_off)
            repository.save(batch)
        elif args.command == "validate":
            report = ValidateBatchUseCase(context).execute(args.batch_id)
            summary = report.summary
            print("Validation Summary")
            print("==================")
            print(f"Lines: {summary.total_lines}")
            print(f"Lines with issues: {summary.invalid_lines}")
            print(f"Catalog loaded: {'yes' if catalog is not None else 'no'}")
            for code, count in summary.issue_counts.items():
                print(f"{code.value}: {count}")
            if report.has_issues():
                _print_issues(report.issues)
                return EXIT_ISSUES
            print("\nNo issues detected.")
        elif args.command == "export":
            result = ExportBatchUseCase(context).execute(args.batch_id)
            target = result.write_to(Path(args.output_dir))
            print(f"{result.row_count} row(s) written to {target}")
        elif args.command == "search":
            if catalog is None:
                print("Catalog not loaded")
                return EXIT_ISSUES
            for item in catalog.search(args.term):
                print(f"{item.upc}\t{item.brand}\t{item.description}\t{item.reference_price}")
    except ExportRefusedError as exc:
        print(exc.message)
        _print_issues(exc.issues)
        return EXIT_ISSUES
    except (BatchNotFoundError, DuplicateBatchNameError, ValueError) as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_USAGE

    return EXIT_OK


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
