# api/services/references/storage.py
"""
SQLite-backed verse store.

Verse rows are written once at import time and only read afterwards.
Each row carries both the plain verse number (`verse`) and the storage
verse id (`verse_id`) computed by the configured id scheme.

Every read opens its own connection, so a VerseStore can be shared by
concurrent requests. Reads accept an optional threading.Event; setting it
aborts the running statement.
"""

import logging
import sqlite3
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterable, Optional

from utils.db import get_db

logger = logging.getLogger(__name__)


SCHEMA = """
CREATE TABLE IF NOT EXISTS bible_verses (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    book TEXT NOT NULL,
    book_index INTEGER NOT NULL,
    chapter INTEGER NOT NULL,
    verse INTEGER NOT NULL,
    verse_id INTEGER NOT NULL,
    text TEXT NOT NULL,
    translation TEXT NOT NULL,
    UNIQUE (book, chapter, verse, translation)
);
CREATE INDEX IF NOT EXISTS idx_bible_verses_book_id
    ON bible_verses (book, chapter, verse_id);
CREATE INDEX IF NOT EXISTS idx_bible_verses_book_index
    ON bible_verses (book_index, chapter, verse);
"""

COLUMNS = "book, book_index, chapter, verse, verse_id, text, translation"

# SQLite nests OR terms one level deep each; keep statements well below
# its expression depth limit.
MAX_CONDITIONS_PER_QUERY = 250

# Virtual machine instructions between cancellation checks
_PROGRESS_INTERVAL = 1000


class VerseStoreError(Exception):
    """Base exception for verse store failures."""
    pass


class StoreQueryError(VerseStoreError):
    """The database rejected or failed a query."""
    pass


class QueryCancelledError(VerseStoreError):
    """The caller cancelled the lookup while a query was pending."""
    pass


@dataclass(frozen=True)
class VerseRecord:
    """One verse row."""
    book: str
    book_index: int
    chapter: int
    verse_number: int
    storage_verse_id: int
    text: str
    translation: str

    @classmethod
    def from_row(cls, row) -> "VerseRecord":
        return cls(
            book=row["book"],
            book_index=row["book_index"],
            chapter=row["chapter"],
            verse_number=row["verse"],
            storage_verse_id=row["verse_id"],
            text=row["text"],
            translation=row["translation"],
        )

    @property
    def reference(self) -> str:
        return f"{self.book} {self.chapter}:{self.verse_number}"


@dataclass(frozen=True)
class QueryCondition:
    """
    One OR-term of a combined lookup.

    Point conditions match (book, chapter, verse). Range conditions match
    (book, chapter, verse_id BETWEEN id_start AND id_end).
    """
    book: str
    chapter: int
    verse: Optional[int] = None
    id_start: Optional[int] = None
    id_end: Optional[int] = None

    @property
    def is_range(self) -> bool:
        return self.id_start is not None

    def to_sql(self) -> tuple[str, list]:
        if self.is_range:
            return (
                "(book = ? AND chapter = ? AND verse_id BETWEEN ? AND ?)",
                [self.book, self.chapter, self.id_start, self.id_end],
            )
        return (
            "(book = ? AND chapter = ? AND verse = ?)",
            [self.book, self.chapter, self.verse],
        )


class VerseStore:
    """
    Read access (plus import-time writes) for the bible_verses table.

    Usage:
        store = VerseStore("data/bible.db", translation="kjv")
        store.ensure_schema()

        record = store.find_one(book="John", chapter=3, verse=16)
        records = store.find_any([
            QueryCondition("John", 3, verse=16),
            QueryCondition("Romans", 8, id_start=44000028, id_end=44000039),
        ])
    """

    def __init__(self, db_path: str = None, translation: Optional[str] = None):
        self.db_path = db_path
        self.translation = translation

    # -------------------------------------------------------------------------
    # Connection handling
    # -------------------------------------------------------------------------

    @contextmanager
    def _connection(self, cancel: Optional[threading.Event] = None):
        if cancel is not None and cancel.is_set():
            raise QueryCancelledError("lookup cancelled before query")

        try:
            conn = get_db(self.db_path)
        except sqlite3.Error as e:
            raise StoreQueryError(f"Cannot open verse database: {e}") from e

        if cancel is not None:
            conn.set_progress_handler(lambda: 1 if cancel.is_set() else 0, _PROGRESS_INTERVAL)

        try:
            yield conn
        except sqlite3.Error as e:
            if cancel is not None and cancel.is_set():
                raise QueryCancelledError("lookup cancelled during query") from e
            raise StoreQueryError(f"Verse query failed: {e}") from e
        finally:
            conn.close()

    def _translation_filter(self) -> tuple[str, list]:
        if self.translation:
            return " AND translation = ?", [self.translation]
        return "", []

    # -------------------------------------------------------------------------
    # Schema and writes
    # -------------------------------------------------------------------------

    def ensure_schema(self):
        """Create the verse table and indexes if missing."""
        with self._connection() as conn:
            conn.executescript(SCHEMA)
            conn.commit()

    def insert_verses(self, records: Iterable[VerseRecord]) -> int:
        """
        Insert verse records, replacing rows with the same book/chapter/verse.

        Returns:
            Number of rows written
        """
        rows = [
            (r.book, r.book_index, r.chapter, r.verse_number, r.storage_verse_id, r.text, r.translation)
            for r in records
        ]
        if not rows:
            return 0

        with self._connection() as conn:
            conn.executemany(
                f"INSERT OR REPLACE INTO bible_verses ({COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?)",
                rows,
            )
            conn.commit()
        return len(rows)

    def clear(self, translation: Optional[str] = None) -> int:
        """Delete verses (all, or one translation). Returns rows deleted."""
        with self._connection() as conn:
            if translation:
                cur = conn.execute("DELETE FROM bible_verses WHERE translation = ?", (translation,))
            else:
                cur = conn.execute("DELETE FROM bible_verses")
            conn.commit()
            return cur.rowcount

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def count(self) -> int:
        extra_sql, extra_params = self._translation_filter()
        with self._connection() as conn:
            row = conn.execute(
                f"SELECT COUNT(*) AS n FROM bible_verses WHERE 1 = 1{extra_sql}",
                extra_params,
            ).fetchone()
        return row["n"]

    def find_one(
        self,
        chapter: int,
        verse: int,
        book: Optional[str] = None,
        book_index: Optional[int] = None,
        cancel: Optional[threading.Event] = None,
    ) -> Optional[VerseRecord]:
        """
        Find one verse by plain chapter/verse and either book name or index.

        Returns:
            VerseRecord or None if no row matches
        """
        key_sql, key_params = self._book_key(book, book_index)
        extra_sql, extra_params = self._translation_filter()

        with self._connection(cancel) as conn:
            row = conn.execute(
                f"SELECT {COLUMNS} FROM bible_verses "
                f"WHERE {key_sql} AND chapter = ? AND verse = ?{extra_sql} LIMIT 1",
                key_params + [chapter, verse] + extra_params,
            ).fetchone()

        return VerseRecord.from_row(row) if row else None

    def find_verses(
        self,
        chapter: int,
        start_verse: int,
        end_verse: int,
        book: Optional[str] = None,
        book_index: Optional[int] = None,
        cancel: Optional[threading.Event] = None,
    ) -> list[VerseRecord]:
        """Find verses by plain verse numbers within one chapter, ordered."""
        key_sql, key_params = self._book_key(book, book_index)
        extra_sql, extra_params = self._translation_filter()

        with self._connection(cancel) as conn:
            rows = conn.execute(
                f"SELECT {COLUMNS} FROM bible_verses "
                f"WHERE {key_sql} AND chapter = ? AND verse BETWEEN ? AND ?{extra_sql} "
                f"ORDER BY verse",
                key_params + [chapter, start_verse, end_verse] + extra_params,
            ).fetchall()

        return [VerseRecord.from_row(r) for r in rows]

    def find_any(
        self,
        conditions: list[QueryCondition],
        cancel: Optional[threading.Event] = None,
    ) -> list[VerseRecord]:
        """
        Run the OR of all conditions as one query.

        Very large batches are split into several statements of at most
        MAX_CONDITIONS_PER_QUERY terms on the same connection.
        """
        if not conditions:
            return []

        extra_sql, extra_params = self._translation_filter()
        records = []

        with self._connection(cancel) as conn:
            for offset in range(0, len(conditions), MAX_CONDITIONS_PER_QUERY):
                chunk = conditions[offset:offset + MAX_CONDITIONS_PER_QUERY]
                clauses, params = [], []
                for condition in chunk:
                    clause, clause_params = condition.to_sql()
                    clauses.append(clause)
                    params.extend(clause_params)

                sql = (
                    f"SELECT {COLUMNS} FROM bible_verses "
                    f"WHERE ({' OR '.join(clauses)}){extra_sql}"
                )
                rows = conn.execute(sql, params + extra_params).fetchall()
                records.extend(VerseRecord.from_row(r) for r in rows)

        return records

    @staticmethod
    def _book_key(book: Optional[str], book_index: Optional[int]) -> tuple[str, list]:
        if book_index is not None:
            return "book_index = ?", [book_index]
        if book is not None:
            return "book = ?", [book]
        raise ValueError("book or book_index is required")
