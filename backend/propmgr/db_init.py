"""Database initialization from the MySQL script tree in the database directory."""
import logging
from pathlib import Path
from typing import List, Optional

import pymysql
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from propmgr.config import get_settings
from propmgr.database import create_server_engine
from propmgr.schemas import ExecutionOutcome, InitReport, MigrationStep
from propmgr.sql_expander import FILE_ERRORS, expand_source_directives, read_sql_file
from propmgr.sql_splitter import split_statements, starts_with_keyword

logger = logging.getLogger(__name__)

STATEMENT_ERRORS = (pymysql.MySQLError, SQLAlchemyError)

# Used only when the root init file is absent. Order matters: tables first.
SCHEMA_FILE = "schema.sql"
ROUTINE_FILES = [
    "functions.sql",
    "procedures.sql",
    "triggers.sql",
]

# Applied after either strategy; every file is idempotent
FOLLOW_UP_STEPS = [
    MigrationStep(path="update_schema.sql"),
    MigrationStep(path="update_schema_enhanced.sql"),
    MigrationStep(path="add_owner_to_tenant.sql", description="Tenant.Owner_ID migration"),
    MigrationStep(path="link_tenant_to_owner.sql", description="demo tenant to owner links"),
    MigrationStep(path="assign_demo_properties_to_admin.sql", description="demo properties for Admin owner"),
]


class MissingSqlFileError(FileNotFoundError):
    """A follow-up step marked as required has no file."""


def execute_script(connection: Connection, sql: str) -> None:
    """
    Run `sql` on the raw DB-API cursor.

    Every result set is drained so that an error in a later statement of a
    multi-statement script is raised here instead of on the next query.
    """
    cursor = connection.connection.cursor()
    try:
        cursor.execute(sql)
        while cursor.nextset():
            pass
    finally:
        cursor.close()


class DatabaseInitializer:
    """Initialize the MySQL server using SQL files from the database directory."""

    def __init__(
        self,
        engine: Optional[Engine] = None,
        database_dir: Optional[Path] = None,
        init_file: Optional[str] = None,
        follow_up_steps: Optional[List[MigrationStep]] = None
    ):
        settings = get_settings()
        self._engine = engine
        self._owns_engine = engine is None
        self.database_dir = Path(database_dir or settings.DATABASE_DIR)
        self.init_path = self.database_dir / (init_file or settings.INIT_FILE)
        self.schema_file = SCHEMA_FILE
        self.routine_files = list(ROUTINE_FILES)
        self.follow_up_steps = list(FOLLOW_UP_STEPS if follow_up_steps is None else follow_up_steps)

    @property
    def engine(self) -> Engine:
        # Created lazily so dry runs never need a driver or a server
        if self._engine is None:
            self._engine = create_server_engine()
        return self._engine

    def plan(self) -> List[str]:
        """Return the statements the init file would execute, without connecting."""
        if not self.init_path.exists():
            return []
        return split_statements(expand_source_directives(self.init_path))

    def _execute_statement(
        self,
        connection: Connection,
        report: InitReport,
        source: str,
        statement: str
    ) -> ExecutionOutcome:
        """Execute one statement; a failure is recorded and does not stop the run."""
        try:
            execute_script(connection, statement)
        except STATEMENT_ERRORS as e:
            outcome = report.record(
                ExecutionOutcome(source=source, statement=statement, ok=False, error=str(e))
            )
            logger.warning(f"⚠ Statement failed (continuing): {outcome.preview}")
            logger.warning(f"  Reason: {e}")
            return outcome
        return report.record(ExecutionOutcome(source=source, statement=statement, ok=True))

    def _record_file_error(self, report: InitReport, source: str, error: Exception) -> None:
        """Record a file that could not be read; the run moves on to the next file."""
        report.record(ExecutionOutcome(source=source, statement="", ok=False, error=str(error)))
        logger.warning(f"⚠ Warning reading {source}: {error}")

    def _run_init_file(self, connection: Connection, report: InitReport) -> None:
        logger.info(f"→ {self.init_path.name} detected, expanding SOURCE directives and executing...")
        try:
            statements = split_statements(expand_source_directives(self.init_path))
        except FILE_ERRORS as e:
            self._record_file_error(report, self.init_path.name, e)
            return
        for statement in statements:
            self._execute_statement(connection, report, self.init_path.name, statement)
        logger.info(f"✓ {self.init_path.name} executed ({len(statements)} statements)")

    def _run_schema_file(self, connection: Connection, report: InitReport) -> None:
        schema_path = self.database_dir / self.schema_file
        if not schema_path.exists():
            logger.info(f"Schema file not found, skipping: {schema_path}")
            return

        logger.info("→ Executing schema...")
        try:
            schema = read_sql_file(schema_path)
        except FILE_ERRORS as e:
            self._record_file_error(report, self.schema_file, e)
            return
        try:
            execute_script(connection, schema)
        except STATEMENT_ERRORS as e:
            report.record(ExecutionOutcome(source=self.schema_file, statement=schema, ok=False, error=str(e)))
            logger.warning(f"⚠ Warning executing {self.schema_file}: {e}")
            return
        report.record(ExecutionOutcome(source=self.schema_file, statement=schema, ok=True))
        logger.info("✓ Database schema created successfully")

    def _run_routine_file(self, connection: Connection, report: InitReport, file_name: str) -> None:
        routine_path = self.database_dir / file_name
        if not routine_path.exists():
            logger.info(f"Routine file not found, skipping: {routine_path}")
            return

        logger.info(f"→ Applying {file_name}...")
        try:
            statements = split_statements(read_sql_file(routine_path))
        except FILE_ERRORS as e:
            self._record_file_error(report, file_name, e)
            return
        for statement in statements:
            # The schema file already selected the target database
            if starts_with_keyword(statement, "USE"):
                report.record(ExecutionOutcome(source=file_name, statement=statement, ok=True, skipped=True))
                continue
            self._execute_statement(connection, report, file_name, statement)
        logger.info(f"✓ {file_name} applied")

    def _run_fallback_files(self, connection: Connection, report: InitReport) -> None:
        logger.info(f"{self.init_path.name} not found, running individual files in order")
        self._run_schema_file(connection, report)
        for file_name in self.routine_files:
            self._run_routine_file(connection, report, file_name)

    def _apply_follow_up(self, connection: Connection, report: InitReport, step: MigrationStep) -> None:
        step_path = self.database_dir / step.path
        if not step_path.exists():
            if step.required:
                raise MissingSqlFileError(f"Required SQL file not found: {step_path}")
            logger.info(f"Optional file not found, skipping: {step.path}")
            return

        logger.info(f"→ Applying {step.label}...")
        try:
            sql = read_sql_file(step_path)
        except FILE_ERRORS as e:
            self._record_file_error(report, step.path, e)
            return
        try:
            execute_script(connection, sql)
        except STATEMENT_ERRORS as e:
            report.record(ExecutionOutcome(source=step.path, statement=sql, ok=False, error=str(e)))
            logger.warning(f"⚠ Warning applying {step.path}: {e}")
            return
        report.record(ExecutionOutcome(source=step.path, statement=sql, ok=True))
        logger.info(f"✓ {step.label} applied")

    def initialize(self) -> InitReport:
        """
        Run the bootstrap against the server.

        The init file is preferred; without it the schema, functions,
        procedures and triggers files run in that order. Follow-up steps are
        applied afterwards in both cases. Statement and file failures are
        logged and recorded in the returned report. A connection failure
        propagates to the caller.
        """
        strategy = "init" if self.init_path.exists() else "fallback"
        report = InitReport(strategy=strategy)

        try:
            with self.engine.connect() as connection:
                logger.info("✓ Connected to MySQL server")

                if strategy == "init":
                    self._run_init_file(connection, report)
                else:
                    self._run_fallback_files(connection, report)

                for step in self.follow_up_steps:
                    self._apply_follow_up(connection, report, step)
        finally:
            if self._owns_engine and self._engine is not None:
                self._engine.dispose()

        if report.has_failures:
            logger.warning(f"⚠ Database initialization finished with errors: {report.summary()}")
        else:
            logger.info(f"✓ Database initialization completed successfully: {report.summary()}")
        return report


def init_database() -> InitReport:
    """Initialize the database - convenience function for app startup."""
    initializer = DatabaseInitializer()
    return initializer.initialize()
