"""CLI entry point for the intake module."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path

from dotenv import load_dotenv

from .config import IntakeConfig, load_config
from .db import CatalogDB, ContactDB, UploadSessionDB
from .extraction import create_extractor
from .ocr import create_backend
from .pipeline import IntakePipeline, NothingExtractedError, load_images


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="shopdesk-intake",
        description="Add catalog products and customer contacts from photographed receipts and lists",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="Path to the config file (TOML)",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )

    sub = parser.add_subparsers(dest="command")

    # products / contacts
    for kind, help_text in (
        ("products", "OCR receipts or product tags into the catalog"),
        ("contacts", "OCR customer lists into the contact book"),
    ):
        p = sub.add_parser(kind, help=help_text)
        p.add_argument("images", type=str, nargs="+", help="Image files")
        p.add_argument("--json", action="store_true", help="Output as JSON")
        p.add_argument(
            "--dry-run", action="store_true", help="Extract without storing"
        )

    # parse
    parse_parser = sub.add_parser(
        "parse", help="Extract records from already recognized text"
    )
    parse_parser.add_argument("kind", choices=["products", "contacts"])
    parse_parser.add_argument("text_file", type=str, help="Text file ('-' for stdin)")
    parse_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # list
    list_parser = sub.add_parser("list", help="Show stored products or contacts")
    list_parser.add_argument("kind", choices=["products", "contacts"])
    list_parser.add_argument("--search", type=str, default="", help="Search text")
    list_parser.add_argument(
        "--category", type=str, default=None, help="Product category filter"
    )
    list_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # sessions
    sessions_parser = sub.add_parser("sessions", help="Show recent upload batches")
    sessions_parser.add_argument("--limit", type=int, default=20)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    load_dotenv()
    config = load_config(args.config)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config.logging.level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    match args.command:
        case "products" | "contacts":
            exit_code = asyncio.run(_cmd_intake(config, args))
            if exit_code:
                sys.exit(exit_code)
        case "parse":
            _cmd_parse(config, args)
        case "list":
            _cmd_list(config, args)
        case "sessions":
            _cmd_sessions(config, args)


async def _cmd_intake(config: IntakeConfig, args) -> int:
    try:
        backend = create_backend(config)
        images = load_images(args.images)
    except (ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    extractor = create_extractor(args.command, config)

    store = None
    sessions = None
    if not args.dry_run:
        if args.command == "products":
            store = CatalogDB(config.database.path)
        else:
            store = ContactDB(config.database.path)
        sessions = UploadSessionDB(config.database.path)

    pipeline = IntakePipeline(
        backend,
        extractor,
        store,
        languages=config.ocr.languages,
        max_concurrency=config.ocr.max_concurrency,
        sessions=sessions,
    )

    print(f"🔍 Recognizing {len(images)} image(s)...", file=sys.stderr)
    try:
        result = await pipeline.run(images)
    except NothingExtractedError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        if store is not None:
            store.close()
        if sessions is not None:
            sessions.close()

    if args.json:
        data = {
            "message": result.message,
            "records": result.records,
            "failed_images": result.failed_images,
            "extracted_text": result.extracted_text,
        }
        print(json.dumps(data, ensure_ascii=False, indent=2))
    else:
        print(result.message)
        _print_records(args.command, result.records)
        if result.failed_images:
            print(f"Skipped (OCR failed): {', '.join(result.failed_images)}")
    return 0


def _cmd_parse(config: IntakeConfig, args) -> None:
    if args.text_file == "-":
        text = sys.stdin.read()
        source = "stdin"
    else:
        path = Path(args.text_file)
        text = path.read_text(encoding="utf-8")
        source = path.name

    extractor = create_extractor(args.kind, config)
    records = [asdict(r) for r in extractor.extract(text, source=source)]

    if args.json:
        print(json.dumps(records, ensure_ascii=False, indent=2))
    elif not records:
        print(f"No {args.kind} found.")
    else:
        _print_records(args.kind, records)


def _cmd_list(config: IntakeConfig, args) -> None:
    if args.kind == "products":
        db = CatalogDB(config.database.path)
        try:
            rows = db.search_products(args.search, args.category)
        finally:
            db.close()
    else:
        db = ContactDB(config.database.path)
        try:
            rows = db.search_contacts(args.search)
        finally:
            db.close()

    if args.json:
        print(json.dumps(rows, ensure_ascii=False, indent=2))
    elif not rows:
        print(f"No {args.kind} stored.")
    else:
        _print_records(args.kind, rows)


def _cmd_sessions(config: IntakeConfig, args) -> None:
    db = UploadSessionDB(config.database.path)
    try:
        rows = db.get_recent(args.limit)
    finally:
        db.close()

    if not rows:
        print("No upload sessions yet.")
        return
    for row in rows:
        line = (
            f"  #{row['id']:<4} {row['created_at']}  {row['type']:<10} "
            f"{row['status']:<10} records={row['processed_records'] or 0} "
            f"failed_images={row['failed_images'] or 0}"
        )
        if row["error_message"]:
            line += f"  ({row['error_message']})"
        print(line)


def _print_records(kind: str, records: list[dict]) -> None:
    if kind == "products":
        print(f"\n🛍  Products ({len(records)}):")
        for r in records:
            print(f"  {r['name']:<30} {r['price']:>10}  [{r['category']}]")
    else:
        print(f"\n👤 Contacts ({len(records)}):")
        for r in records:
            phone = r.get("phone") or ""
            print(f"  {r['name']:<25} {r['email']:<30} {phone}")
