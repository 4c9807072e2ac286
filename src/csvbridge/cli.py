"""Command-line interface for csvbridge."""

import argparse
import json
import logging
import sys

import uvicorn

from .config import settings


def main(argv=None):
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="csvbridge - reconcile CSV columns with a target schema"
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Server command
    server_parser = subparsers.add_parser("serve", help="Start the web server")
    server_parser.add_argument(
        "--host", default=settings.host, help=f"Host to bind to (default: {settings.host})"
    )
    server_parser.add_argument(
        "--port", type=int, default=settings.port, help=f"Port to bind to (default: {settings.port})"
    )
    server_parser.add_argument(
        "--reload", action="store_true", help="Enable auto-reload for development"
    )

    # Match command
    match_parser = subparsers.add_parser(
        "match", help="Propose a column mapping for a local CSV file"
    )
    match_parser.add_argument("csv_file", help="Path to the CSV file")
    match_parser.add_argument(
        "--schema",
        "-s",
        required=True,
        help='JSON file with {"fields": [...], "aliases": {...}}',
    )
    match_parser.add_argument(
        "--max-records", type=int, default=None, help="Reject files with more data rows"
    )
    match_parser.add_argument("--json", action="store_true", help="Print the mapping as JSON")

    args = parser.parse_args(argv)

    if args.command == "serve":
        run_server(args.host, args.port, args.reload)
    elif args.command == "match":
        sys.exit(run_match(args.csv_file, args.schema, args.max_records, args.json))
    else:
        parser.print_help()
        sys.exit(1)


def run_server(host: str, port: int, reload: bool):
    """Run the web server."""
    uvicorn.run(
        "csvbridge.api:create_app",
        host=host,
        port=port,
        reload=reload,
        factory=True,
        log_level=settings.log_level.lower(),
    )


def run_match(csv_path: str, schema_path: str, max_records=None, as_json: bool = False) -> int:
    """Tokenize a CSV file and print the auto-match proposal."""
    from .mapping import InputRejectedError, auto_match
    from .parsing import CsvTokenizer
    from .remote import StaticSchemaSource

    logging.basicConfig(level=settings.log_level.upper())

    try:
        source = StaticSchemaSource.from_file(schema_path)
        with open(csv_path, encoding="utf-8-sig") as f:
            text = f.read()
        parsed = CsvTokenizer(max_records=max_records).parse(text)
    except (OSError, ValueError, InputRejectedError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    result = auto_match(source.fields, parsed.headers, source.alias_table)

    if as_json:
        print(json.dumps(result.mapping, indent=2))
        return 0

    print(f"Columns: {len(parsed.headers)}  Rows: {parsed.row_count}")
    print(f"Matched {result.matched_count} of {result.total_fields} fields")
    print()
    for field in source.fields:
        header = result.mapping.get(field.api_name)
        print(f"  {field.label} ({field.api_name}) -> {header or '-- N/A --'}")
    return 0


if __name__ == "__main__":
    main()
