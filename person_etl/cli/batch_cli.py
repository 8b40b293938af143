"""
Command-line interface for the import persons job.

Usage:
    person-etl run [--input <file_path>] [--chunk-size N] [options]
    person-etl init-db [options]
    person-etl serve [--host HOST] [--port PORT]
"""

import argparse
import sys
from typing import Any, Sequence

import psycopg
import uvicorn

from person_etl.batch.job import ImportPersonsJob
from person_etl.config import PipelineSettings, load_settings
from person_etl.observability.logger import get_logger
from person_etl.warehouse.connection import DatabaseConnectionPool
from person_etl.warehouse.person_repository import PersonRepository

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1


def settings_from_args(args: argparse.Namespace) -> PipelineSettings:
    """Resolve settings, with command-line flags taking precedence."""
    overrides: dict[str, Any] = {
        "input_path": getattr(args, "input", None),
        "chunk_size": getattr(args, "chunk_size", None),
        "lines_to_skip": getattr(args, "lines_to_skip", None),
        "tokenizer.delimiter": getattr(args, "delimiter", None),
        "tokenizer.strict": getattr(args, "strict", None),
        "create_table": getattr(args, "create_table", None),
        "database.host": args.db_host,
        "database.port": args.db_port,
        "database.name": args.db_name,
        "database.user": args.db_user,
        "database.password": args.db_password,
        "database.table": args.db_table,
    }
    return load_settings(config_path=args.config, overrides=overrides)


def run_command(args: argparse.Namespace) -> int:
    """
    Execute one import run.

    Returns:
        EXIT_OK if the run completed, EXIT_FAILED otherwise
    """
    try:
        settings = settings_from_args(args)
    except (ValueError, FileNotFoundError) as e:
        logger.error(f"Invalid configuration: {e}")
        return EXIT_FAILED

    logger.info(f"Input file: {settings.input_path}")

    try:
        with DatabaseConnectionPool.from_settings(settings.database) as pool:
            job = ImportPersonsJob.from_settings(settings, pool)
            result = job.launch()
    except (psycopg.Error, ValueError) as e:
        logger.error(f"Error during import: {e}", exc_info=True)
        return EXIT_FAILED

    logger.info("=" * 60)
    logger.info(f"RUN {result.status}")
    logger.info("=" * 60)
    logger.info(f"Run id: {result.run_id}")
    logger.info(f"Records read: {result.total_read}")
    logger.info(f"Records written: {result.total_written}")
    logger.info(f"Chunks committed: {result.chunk_count}")
    logger.info(f"Elapsed: {result.elapsed_seconds:.3f}s")
    if result.error:
        logger.info(f"Error ({result.error.kind}): {result.error.message}")
    logger.info("=" * 60)

    if args.json:
        print(result.model_dump_json(indent=2))

    return EXIT_OK if result.succeeded else EXIT_FAILED


def init_db_command(args: argparse.Namespace) -> int:
    """Create the person table."""
    try:
        settings = settings_from_args(args)
        with DatabaseConnectionPool.from_settings(settings.database) as pool:
            PersonRepository(pool, table=settings.database.table).create_table()
    except (psycopg.Error, ValueError, FileNotFoundError) as e:
        logger.error(f"Error creating table: {e}")
        return EXIT_FAILED

    logger.info(f"Table '{settings.database.table}' is ready")
    return EXIT_OK


def serve_command(args: argparse.Namespace) -> int:
    """Serve the HTTP trigger with uvicorn."""
    uvicorn.run(
        "person_etl.api.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
    )
    return EXIT_OK


def add_database_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", help="Path to pipeline YAML config (default: config/pipeline.yaml)")
    parser.add_argument("--db-host", help="Database host (default: localhost)")
    parser.add_argument("--db-port", type=int, help="Database port (default: 5432)")
    parser.add_argument("--db-name", help="Database name (default: people)")
    parser.add_argument("--db-user", help="Database user (default: pipeline)")
    parser.add_argument("--db-password", help="Database password (default: $DB_PASSWORD)")
    parser.add_argument("--db-table", help="Target table (default: person)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="person-etl",
        description="Chunked import of person records into PostgreSQL",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Import the default people file in chunks of 10
  person-etl run

  # Import another file in chunks of 100 with strict tokenizing
  person-etl run --input data/people.csv --chunk-size 100 --strict

  # Create the person table
  person-etl init-db

  # Serve POST /jobs/import-persons on port 8080
  person-etl serve --port 8080
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    run_parser = subparsers.add_parser("run", help="Run the import once")
    run_parser.add_argument("--input", help="Path to input file")
    run_parser.add_argument("--chunk-size", type=int, help="Records per chunk (default: 10)")
    run_parser.add_argument("--lines-to-skip", type=int, help="Header lines to skip (default: 1)")
    run_parser.add_argument("--delimiter", help="Field delimiter (default: ,)")
    run_parser.add_argument(
        "--strict",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Fail on lines whose token count differs from the field count",
    )
    run_parser.add_argument(
        "--create-table",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Create the target table before importing",
    )
    run_parser.add_argument("--json", action="store_true", help="Print the run result as JSON")
    add_database_arguments(run_parser)

    init_parser = subparsers.add_parser("init-db", help="Create the person table")
    add_database_arguments(init_parser)

    serve_parser = subparsers.add_parser("serve", help="Serve the HTTP trigger")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind host (default: 127.0.0.1)")
    serve_parser.add_argument("--port", type=int, default=8000, help="Bind port (default: 8000)")

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_FAILED

    if args.command == "run":
        return run_command(args)
    if args.command == "init-db":
        return init_db_command(args)
    return serve_command(args)


if __name__ == "__main__":
    sys.exit(main())
