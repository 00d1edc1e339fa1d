"""Database management utility.

Usage:
    propmgr-db init              # Run the bootstrap against the MySQL server
    propmgr-db expand [FILE]     # Print the init file with SOURCE includes inlined
    propmgr-db split [FILE]      # List the statements the bootstrap would execute
    propmgr-db inspect SCHEMA    # Show tables and row counts of a schema
"""
import argparse
import logging
import sys
from pathlib import Path

from sqlalchemy import inspect, text

from propmgr.config import get_settings
from propmgr.database import create_server_engine
from propmgr.db_init import DatabaseInitializer
from propmgr.sql_expander import expand_source_directives
from propmgr.sql_splitter import split_statements

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _resolve_file(file_arg) -> Path:
    if file_arg:
        return Path(file_arg)
    settings = get_settings()
    return Path(settings.DATABASE_DIR) / settings.INIT_FILE


def init_database() -> int:
    """Initialize the database."""
    initializer = DatabaseInitializer()

    logger.info(f"Database directory: {initializer.database_dir}")
    logger.info(f"Init file: {initializer.init_path}")

    report = initializer.initialize()
    for outcome in report.failed:
        logger.info(f"  ✗ [{outcome.source}] {outcome.preview}")
    # Statement failures are reported, not fatal
    return 0


def expand_file(file_arg=None) -> int:
    """Print the expanded document."""
    path = _resolve_file(file_arg)
    sys.stdout.write(expand_source_directives(path))
    return 0


def split_file(file_arg=None) -> int:
    """Print the numbered statement list without connecting."""
    path = _resolve_file(file_arg)
    statements = split_statements(expand_source_directives(path))
    for i, statement in enumerate(statements, 1):
        print(f"-- [{i}/{len(statements)}]")
        print(statement)
        print()
    logger.info(f"✓ {len(statements)} statement(s) in {path}")
    return 0


def inspect_schema(schema: str) -> int:
    """Inspect and display the tables of a schema."""
    engine = create_server_engine()
    try:
        inspector = inspect(engine)
        if schema not in inspector.get_schema_names():
            logger.error(f"✗ Schema does not exist: {schema}")
            logger.error("Run 'propmgr-db init' to create it.")
            return 1

        tables = inspector.get_table_names(schema=schema)
        if not tables:
            print(f"No tables found in schema {schema}.")
            return 0

        print(f"Schema: {schema}")
        print("=" * 60)
        print(f"{'Table':<40} {'Rows':>10}")
        print("-" * 60)
        with engine.connect() as connection:
            for table_name in tables:
                count = connection.execute(
                    text(f"SELECT COUNT(*) FROM `{schema}`.`{table_name}`")
                ).scalar()
                print(f"{table_name:<40} {count:>10}")
        print("=" * 60)
        return 0
    finally:
        engine.dispose()


def main(argv=None) -> int:
    """Main entry point for the database manager."""
    parser = argparse.ArgumentParser(
        description="Database management utility for the property manager",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  propmgr-db init                          # Initialize database
  propmgr-db split database/init.sql       # Dry run: show statements
  propmgr-db inspect property_management   # Inspect a schema
        """
    )
    subparsers = parser.add_subparsers(dest="action", required=True)
    subparsers.add_parser("init", help="Run the bootstrap against the server")
    for name, help_text in (("expand", "Print the expanded init file"),
                            ("split", "List the statements to execute")):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("file", nargs="?", help="SQL file (defaults to the init file)")
    inspect_parser = subparsers.add_parser("inspect", help="Show tables of a schema")
    inspect_parser.add_argument("schema", help="Schema (database) name")

    args = parser.parse_args(argv)
    configure_logging(get_settings().LOG_LEVEL)

    try:
        if args.action == "init":
            return init_database()
        elif args.action == "expand":
            return expand_file(args.file)
        elif args.action == "split":
            return split_file(args.file)
        elif args.action == "inspect":
            return inspect_schema(args.schema)
    except KeyboardInterrupt:
        logger.error("Operation cancelled by user.")
        return 1
    except Exception as e:
        logger.error(f"✗ Error: {e}")
        return 1
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
