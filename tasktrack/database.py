"""
Database schema and connection management for the task service.
"""
import os
import time
import sqlite3
import logging
from typing import Tuple

from opentelemetry import trace

from tasktrack.tracing import trace_span, add_span_attribute

logger = logging.getLogger(__name__)

# Queries slower than this many seconds are logged as slow
DEFAULT_SLOW_THRESHOLD = 0.1

SCHEMA_STATEMENTS = (
    """
    CREATE TABLE IF NOT EXISTS tasks (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        title TEXT NOT NULL,
        description TEXT NOT NULL,
        status TEXT NOT NULL DEFAULT 'todo'
            CHECK(status IN ('todo', 'in_progress', 'done', 'archived')),
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        UNIQUE (user_id, title, description)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_tasks_user_created ON tasks(user_id, created_at)",
)


class TaskDatabase:
    """SQLite database holding the tasks table."""

    def __init__(
        self,
        db_path: str,
        slow_threshold: float = DEFAULT_SLOW_THRESHOLD,
        enable_query_logging: bool = True,
    ):
        """
        Initialize database and create schema if needed.

        Args:
            db_path: Path to the sqlite file
            slow_threshold: Seconds after which a query is logged as slow
            enable_query_logging: Log every query at DEBUG level
        """
        self.db_path = db_path
        self.db_type = "sqlite"
        self.slow_threshold = slow_threshold
        self.enable_query_logging = enable_query_logging
        self._ensure_db_directory()
        self._init_schema()

    def _ensure_db_directory(self):
        """Ensure database directory exists."""
        db_dir = os.path.dirname(os.path.abspath(self.db_path))
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

    def _get_connection(self) -> sqlite3.Connection:
        """Open a new connection with dict-like rows."""
        conn = sqlite3.connect(self.db_path, timeout=30, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def close(self, conn: sqlite3.Connection) -> None:
        """Close a connection obtained from _get_connection."""
        conn.close()

    def _execute_with_logging(self, cursor, query: str, params: Tuple = None):
        """
        Execute a query with performance logging and tracing.

        Args:
            cursor: Database cursor
            query: SQL query string
            params: Query parameters

        Returns:
            Cursor after execution
        """
        query_lower = query.strip().upper()
        query_type = query_lower.split(None, 1)[0].lower() if query_lower else "unknown"

        table_name = "unknown"
        for keyword in ["FROM", "INTO", "UPDATE", "TABLE"]:
            if keyword in query_lower:
                parts = query_lower.split(keyword, 1)
                if len(parts) > 1 and parts[1].split():
                    table_name = parts[1].split()[0].strip().lower()
                    break

        start_time = time.time()
        with trace_span(
            f"db.{query_type}",
            attributes={
                "db.system": self.db_type,
                "db.statement.type": query_type,
                "db.sql.table": table_name,
                "db.operation": query_type,
            },
            kind=trace.SpanKind.CLIENT
        ):
            try:
                result = cursor.execute(query, params or ())
            except sqlite3.Error:
                duration = time.time() - start_time
                logger.error(
                    f"Query failed after {duration:.4f}s: {query.strip()[:200]}",
                    exc_info=True
                )
                raise

            duration = time.time() - start_time
            add_span_attribute("db.duration_ms", duration * 1000)

            if duration >= self.slow_threshold:
                query_preview = query.strip()[:200]
                logger.warning(
                    f"Slow query: {duration:.4f}s - {query_preview}",
                    extra={"duration": duration, "params_count": len(params) if params else 0}
                )
                add_span_attribute("db.slow_query", True)
            elif self.enable_query_logging:
                logger.debug(f"Query executed in {duration:.4f}s", extra={"duration": duration})

            return result

    def _init_schema(self):
        """Initialize database schema."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            for statement in SCHEMA_STATEMENTS:
                self._execute_with_logging(cursor, statement)
            conn.commit()
            logger.info(f"Database schema ready at {self.db_path}")
        finally:
            self.close(conn)

    def ping(self) -> None:
        """Run a trivial query; raises sqlite3.Error if the database is unusable."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            self._execute_with_logging(cursor, "SELECT 1")
            cursor.fetchone()
        finally:
            self.close(conn)
