"""SQLite store backing the ledger, settings and conversation history."""

from __future__ import annotations

import asyncio
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, List, Optional
from uuid import uuid4

from ledger_assistant.core.errors import SqlExecutionError
from ledger_assistant.schemas import ConversationMessage, ConversationSession, QueryResult

DEFAULT_CATEGORIES: tuple[tuple[str, str, str], ...] = (
    ("income", "Income", "#22c55e"),
    ("housing", "Housing", "#3b82f6"),
    ("utilities", "Utilities", "#6366f1"),
    ("groceries", "Groceries", "#10b981"),
    ("dining", "Dining", "#f59e0b"),
    ("transportation", "Transportation", "#8b5cf6"),
    ("entertainment", "Entertainment", "#ec4899"),
    ("shopping", "Shopping", "#f97316"),
    ("healthcare", "Healthcare", "#ef4444"),
    ("subscriptions", "Subscriptions", "#14b8a6"),
    ("travel", "Travel", "#06b6d4"),
    ("personal", "Personal", "#84cc16"),
    ("education", "Education", "#a855f7"),
    ("gifts", "Gifts", "#f472b6"),
    ("other", "Other", "#71717a"),
)

_SCHEMA: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS categories (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        icon TEXT,
        color TEXT,
        is_default INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS accounts (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        account_type TEXT NOT NULL DEFAULT 'checking',
        institution TEXT,
        currency TEXT NOT NULL DEFAULT 'USD',
        is_default INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS currencies (
        code TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        symbol TEXT NOT NULL,
        conversion_rate REAL NOT NULL DEFAULT 1.0,
        is_primary INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS settings (
        key TEXT PRIMARY KEY,
        value TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS ledger (
        id TEXT PRIMARY KEY,
        document_id TEXT,
        account_id TEXT,
        date TEXT NOT NULL,
        description TEXT NOT NULL,
        amount REAL NOT NULL,
        currency TEXT NOT NULL DEFAULT 'USD',
        category_id TEXT NOT NULL,
        merchant TEXT,
        notes TEXT,
        source TEXT NOT NULL,
        created_at TEXT NOT NULL,
        FOREIGN KEY (account_id) REFERENCES accounts(id),
        FOREIGN KEY (category_id) REFERENCES categories(id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS purchased_items (
        id TEXT PRIMARY KEY,
        receipt_id TEXT,
        ledger_id TEXT,
        name TEXT NOT NULL,
        quantity REAL NOT NULL DEFAULT 1,
        unit TEXT,
        unit_price REAL,
        total_price REAL NOT NULL,
        category TEXT,
        brand TEXT,
        purchased_at TEXT NOT NULL,
        created_at TEXT NOT NULL,
        FOREIGN KEY (ledger_id) REFERENCES ledger(id) ON DELETE CASCADE
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS conversation_sessions (
        id TEXT PRIMARY KEY,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS conversation_messages (
        id TEXT PRIMARY KEY,
        session_id TEXT NOT NULL,
        role TEXT NOT NULL,
        content TEXT NOT NULL,
        created_at TEXT NOT NULL,
        FOREIGN KEY (session_id) REFERENCES conversation_sessions(id) ON DELETE CASCADE
    )
    """,
)


def _ensure_directory(db_path: Path) -> None:
    if db_path.parent and not db_path.parent.exists():
        db_path.parent.mkdir(parents=True, exist_ok=True)


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


def _to_scalar(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return f"<blob {len(value)} bytes>"
    return value


class LedgerStore:
    """Short-lived SQLite connections, with blocking work moved off the event loop."""

    def __init__(self, db_path: str) -> None:
        self._db_path = Path(db_path)
        _ensure_directory(self._db_path)
        self._ensure_schema()

    @property
    def db_path(self) -> Path:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        now = _utcnow()
        with self._connect() as conn:
            for statement in _SCHEMA:
                conn.execute(statement)
            conn.executemany(
                """
                INSERT OR IGNORE INTO categories (id, name, icon, color, is_default, created_at)
                VALUES (?, ?, NULL, ?, 1, ?)
                """,
                [(cid, name, color, now) for cid, name, color in DEFAULT_CATEGORIES],
            )
            conn.execute(
                """
                INSERT OR IGNORE INTO accounts
                    (id, name, account_type, institution, currency, is_default, created_at)
                VALUES ('default', 'Main Account', 'checking', NULL, 'USD', 1, ?)
                """,
                (now,),
            )

    async def execute_select(self, sql: str) -> QueryResult:
        """Run a read statement and return its columns and rows.

        Callers are responsible for gating ``sql`` to SELECT statements.
        """

        def _execute() -> QueryResult:
            try:
                with self._connect() as conn:
                    cursor = conn.execute(sql)
                    columns = [column[0] for column in cursor.description or ()]
                    rows = [[_to_scalar(value) for value in row] for row in cursor.fetchall()]
            except sqlite3.Error as exc:
                raise SqlExecutionError(sql, str(exc)) from exc
            return QueryResult.from_rows(columns, rows)

        return await asyncio.to_thread(_execute)

    async def create_session(self) -> ConversationSession:
        def _execute() -> ConversationSession:
            session_id = str(uuid4())
            now = _utcnow()
            with self._connect() as conn:
                conn.execute(
                    "INSERT INTO conversation_sessions (id, created_at, updated_at) VALUES (?, ?, ?)",
                    (session_id, now, now),
                )
            return ConversationSession(id=session_id, created_at=now, updated_at=now)

        return await asyncio.to_thread(_execute)

    async def add_message(self, session_id: str, role: str, content: str) -> str:
        """Append a message and bump the session's ``updated_at``."""

        def _execute() -> str:
            message_id = str(uuid4())
            now = _utcnow()
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO conversation_messages (id, session_id, role, content, created_at)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (message_id, session_id, role, content, now),
                )
                conn.execute(
                    "UPDATE conversation_sessions SET updated_at = ? WHERE id = ?",
                    (now, session_id),
                )
            return message_id

        return await asyncio.to_thread(_execute)

    async def recent_messages(self, session_id: str, limit: int) -> List[ConversationMessage]:
        """Return the newest ``limit`` messages in chronological order."""

        def _execute() -> List[ConversationMessage]:
            with self._connect() as conn:
                rows = conn.execute(
                    """
                    SELECT role, content, created_at FROM conversation_messages
                    WHERE session_id = ?
                    ORDER BY created_at DESC, rowid DESC
                    LIMIT ?
                    """,
                    (session_id, limit),
                ).fetchall()
            messages = [
                ConversationMessage(
                    role=row["role"],
                    content=row["content"],
                    created_at=row["created_at"],
                )
                for row in rows
            ]
            messages.reverse()
            return messages

        return await asyncio.to_thread(_execute)

    async def get_setting(self, key: str) -> Optional[str]:
        def _execute() -> Optional[str]:
            with self._connect() as conn:
                row = conn.execute("SELECT value FROM settings WHERE key = ?", (key,)).fetchone()
            return row["value"] if row else None

        return await asyncio.to_thread(_execute)

    async def set_setting(self, key: str, value: str) -> None:
        def _execute() -> None:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO settings (key, value) VALUES (?, ?)
                    ON CONFLICT(key) DO UPDATE SET value = excluded.value
                    """,
                    (key, value),
                )

        await asyncio.to_thread(_execute)

    async def category_names(self) -> List[str]:
        def _execute() -> List[str]:
            with self._connect() as conn:
                rows = conn.execute("SELECT name FROM categories ORDER BY name").fetchall()
            return [row["name"] for row in rows]

        return await asyncio.to_thread(_execute)


__all__ = ["DEFAULT_CATEGORIES", "LedgerStore"]
