"""
Repository for task operations.

Every statement is scoped by both task id and owning user id. A task that
belongs to another user is reported exactly like a task that does not exist,
so callers cannot probe for ids across tenants.
"""
import uuid
import logging
from datetime import datetime, UTC
from typing import Optional, List, Dict, Any, TYPE_CHECKING

if TYPE_CHECKING:
    from tasktrack.database import TaskDatabase

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("title", "description", "status")


def _now() -> str:
    return datetime.now(UTC).isoformat(timespec="microseconds")


class TaskRepository:
    """Repository for ownership-scoped task persistence."""

    def __init__(self, db: "TaskDatabase"):
        """Initialize repository with TaskDatabase instance.

        Args:
            db: TaskDatabase instance for database access
        """
        self.db = db

    def create(self, user_id: str, title: str, description: str) -> Dict[str, Any]:
        """
        Insert a new task with status 'todo'.

        Args:
            user_id: Owning user
            title: Task title (stored as given)
            description: Task description

        Returns:
            The stored task row

        Raises:
            sqlite3.IntegrityError: If the (user_id, title, description) constraint fails
        """
        task_id = str(uuid.uuid4())
        now = _now()
        conn = self.db._get_connection()
        try:
            cursor = conn.cursor()
            self.db._execute_with_logging(cursor, """
                INSERT INTO tasks (id, user_id, title, description, status, created_at, updated_at)
                VALUES (?, ?, ?, ?, 'todo', ?, ?)
            """, (task_id, user_id, title, description, now, now))
            conn.commit()
            logger.info(f"Created task {task_id} for user {user_id}")
            return self._fetch(cursor, user_id, task_id)
        finally:
            self.db.close(conn)

    def get_by_id(self, user_id: str, task_id: str) -> Optional[Dict[str, Any]]:
        """Get a task by ID if it belongs to user_id, otherwise None."""
        conn = self.db._get_connection()
        try:
            return self._fetch(conn.cursor(), user_id, task_id)
        finally:
            self.db.close(conn)

    def list_by_user(self, user_id: str) -> List[Dict[str, Any]]:
        """List all tasks owned by user_id, newest first."""
        conn = self.db._get_connection()
        try:
            cursor = conn.cursor()
            self.db._execute_with_logging(cursor, """
                SELECT * FROM tasks
                WHERE user_id = ?
                ORDER BY created_at DESC, rowid DESC
            """, (user_id,))
            return [dict(row) for row in cursor.fetchall()]
        finally:
            self.db.close(conn)

    def get_by_title_and_description(
        self, user_id: str, title: str, description: str
    ) -> Optional[Dict[str, Any]]:
        """Exact-match lookup used for duplicate detection."""
        conn = self.db._get_connection()
        try:
            cursor = conn.cursor()
            self.db._execute_with_logging(cursor, """
                SELECT * FROM tasks
                WHERE user_id = ? AND title = ? AND description = ?
                LIMIT 1
            """, (user_id, title, description))
            row = cursor.fetchone()
            return dict(row) if row else None
        finally:
            self.db.close(conn)

    def update(self, user_id: str, task_id: str, /, **fields: Any) -> Optional[Dict[str, Any]]:
        """
        Apply a partial update to a task owned by user_id.

        Args:
            user_id: Owning user
            task_id: Task ID
            **fields: Any subset of title, description, status

        Returns:
            The updated task row, or None if no task matched (id, user_id)

        Raises:
            ValueError: If an unknown field name is passed
        """
        unknown = set(fields) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")

        conn = self.db._get_connection()
        try:
            cursor = conn.cursor()
            if not fields:
                return self._fetch(cursor, user_id, task_id)

            columns = [name for name in UPDATABLE_FIELDS if name in fields]
            assignments = ", ".join(f"{name} = ?" for name in columns)
            params = tuple(fields[name] for name in columns) + (_now(), task_id, user_id)
            self.db._execute_with_logging(cursor, f"""
                UPDATE tasks SET {assignments}, updated_at = ?
                WHERE id = ? AND user_id = ?
            """, params)
            if cursor.rowcount == 0:
                conn.rollback()
                return None
            conn.commit()
            logger.info(f"Updated task {task_id} for user {user_id}: {', '.join(columns)}")
            return self._fetch(cursor, user_id, task_id)
        finally:
            self.db.close(conn)

    def delete(self, user_id: str, task_id: str) -> Optional[Dict[str, Any]]:
        """
        Permanently delete a task owned by user_id.

        Returns:
            The deleted task row, or None if no task matched (id, user_id)
        """
        conn = self.db._get_connection()
        try:
            cursor = conn.cursor()
            existing = self._fetch(cursor, user_id, task_id)
            if existing is None:
                return None
            self.db._execute_with_logging(
                cursor,
                "DELETE FROM tasks WHERE id = ? AND user_id = ?",
                (task_id, user_id)
            )
            if cursor.rowcount == 0:
                # Removed by a concurrent request between the select and the delete
                conn.rollback()
                return None
            conn.commit()
            logger.info(f"Deleted task {task_id} for user {user_id}")
            return existing
        finally:
            self.db.close(conn)

    def _fetch(self, cursor, user_id: str, task_id: str) -> Optional[Dict[str, Any]]:
        self.db._execute_with_logging(
            cursor,
            "SELECT * FROM tasks WHERE id = ? AND user_id = ?",
            (task_id, user_id)
        )
        row = cursor.fetchone()
        return dict(row) if row else None
