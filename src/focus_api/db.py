from __future__ import annotations

import logging
import os
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Generator, List, Optional

from .errors import StorageError
from .models import FocusEntry
from .repositories import Repository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Cols:
    table: str = "focus_entries"
    id: str = "id"
    reason: str = "reason"
    status: str = "status"
    category: str = "category"
    created_at: str = "created_at"


_COLS = _Cols()


class SQLiteRepository(Repository):
    """
    Lightweight SQLite repository implementing the Repository interface.

    Every operation opens its own connection; sqlite3 errors are re-raised
    as StorageError.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        try:
            os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        except OSError as exc:
            raise StorageError(f"Cannot create database directory for {db_path}: {exc}") from exc
        self._init_db()
        logger.info("SQLite storage ready at %s", db_path)

    def _now(self) -> datetime:
        return datetime.now()

    @contextmanager
    def _conn(self) -> Generator[sqlite3.Connection, None, None]:
        try:
            conn = sqlite3.connect(self._db_path)
        except sqlite3.Error as exc:
            raise StorageError(f"Cannot open database {self._db_path}: {exc}") from exc
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as exc:
            conn.rollback()
            raise StorageError(str(exc)) from exc
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self._conn() as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_COLS.table} (
                    {_COLS.id} INTEGER PRIMARY KEY AUTOINCREMENT,
                    {_COLS.reason} TEXT NOT NULL,
                    {_COLS.status} INTEGER NOT NULL,
                    {_COLS.category} TEXT NOT NULL,
                    {_COLS.created_at} TEXT NOT NULL
                )
                """
            )
            conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{_COLS.table}_status ON {_COLS.table}({_COLS.status})"
            )

    def _row_to_entity(self, row: sqlite3.Row) -> FocusEntry:
        return FocusEntry(
            id=int(row[_COLS.id]),
            reason=str(row[_COLS.reason]),
            status=bool(row[_COLS.status]),
            category=str(row[_COLS.category]),
            created_at=datetime.fromisoformat(row[_COLS.created_at]),
        )

    def _select_one(self, conn: sqlite3.Connection, entry_id: int) -> Optional[sqlite3.Row]:
        return conn.execute(
            f"SELECT * FROM {_COLS.table} WHERE {_COLS.id} = ?", (entry_id,)
        ).fetchone()

    def save(self, entry: FocusEntry) -> FocusEntry:
        entry.ensure_valid()
        with self._conn() as conn:
            if entry.id is None:
                prepared = entry.on_create(self._now())
                cur = conn.execute(
                    f"""
                    INSERT INTO {_COLS.table} ({_COLS.reason}, {_COLS.status},
                        {_COLS.category}, {_COLS.created_at})
                    VALUES (?, ?, ?, ?)
                    """,
                    (
                        prepared.reason,
                        1 if prepared.status else 0,
                        prepared.category,
                        prepared.created_at.isoformat(),
                    ),
                )
                new_id = cur.lastrowid
            else:
                existing = self._select_one(conn, entry.id)
                if existing is not None and entry.created_at is None:
                    created_at = existing[_COLS.created_at]
                else:
                    created_at = entry.on_create(self._now()).created_at.isoformat()
                conn.execute(
                    f"""
                    INSERT OR REPLACE INTO {_COLS.table} ({_COLS.id}, {_COLS.reason},
                        {_COLS.status}, {_COLS.category}, {_COLS.created_at})
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (entry.id, entry.reason, 1 if entry.status else 0, entry.category, created_at),
                )
                new_id = entry.id
            row = self._select_one(conn, new_id)
            assert row is not None
            return self._row_to_entity(row)

    def find_by_id(self, entry_id: int) -> Optional[FocusEntry]:
        with self._conn() as conn:
            row = self._select_one(conn, entry_id)
            return self._row_to_entity(row) if row else None

    def find_all(self) -> List[FocusEntry]:
        with self._conn() as conn:
            rows = conn.execute(
                f"SELECT * FROM {_COLS.table} ORDER BY {_COLS.id} ASC"
            ).fetchall()
            return [self._row_to_entity(r) for r in rows]

    def count(self) -> int:
        with self._conn() as conn:
            row = conn.execute(f"SELECT COUNT(*) AS cnt FROM {_COLS.table}").fetchone()
            return int(row["cnt"]) if row else 0

    def delete_by_id(self, entry_id: int) -> None:
        with self._conn() as conn:
            conn.execute(f"DELETE FROM {_COLS.table} WHERE {_COLS.id} = ?", (entry_id,))
