"""SQLite document store."""

from __future__ import annotations

import json
import logging
import sqlite3
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from ..errors import PersistenceError
from ..models.document import Document, StructuredMeta
from .protocols import UPDATABLE_FIELDS

logger = logging.getLogger(__name__)

COLUMNS = (
    "id",
    "owner",
    "source_url",
    "title",
    "site_name",
    "markdown",
    "content_html",
    "plain_text",
    "byline",
    "excerpt",
    "published_time",
    "structured_meta",
    "needs_transcript",
    "scraped_at",
)


class SqliteDocumentStore:
    """
    Stores documents in a single SQLite table.

    Structured metadata is kept as a JSON column. The connection is opened
    lazily on first use and closed with :meth:`close`.

    Example:
        store = SqliteDocumentStore(Path("./webdistill.db"))
        doc_id = await store.create(document)
        store.close()
    """

    def __init__(self, path: Path) -> None:
        self._db_path = Path(path)
        self._conn: Optional[sqlite3.Connection] = None

    def _ensure_db(self) -> sqlite3.Connection:
        """Open the database and create the table if needed."""
        if self._conn is None:
            if str(self._db_path) != ":memory:":
                try:
                    self._db_path.parent.mkdir(parents=True, exist_ok=True)
                except OSError as e:
                    raise PersistenceError(f"Cannot create database directory: {e}") from e
            self._conn = sqlite3.connect(str(self._db_path), check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            self._conn.execute(
                """
                CREATE TABLE IF NOT EXISTS documents (
                    id TEXT PRIMARY KEY,
                    owner TEXT,
                    source_url TEXT NOT NULL,
                    title TEXT,
                    site_name TEXT,
                    markdown TEXT,
                    content_html TEXT,
                    plain_text TEXT,
                    byline TEXT,
                    excerpt TEXT,
                    published_time TEXT,
                    structured_meta TEXT,
                    needs_transcript INTEGER NOT NULL DEFAULT 0,
                    scraped_at TEXT
                )
            """
            )
            self._conn.execute("CREATE INDEX IF NOT EXISTS idx_owner ON documents(owner)")
            self._conn.commit()
            logger.info(f"Initialized SQLite database at {self._db_path}")
        return self._conn

    @staticmethod
    def _encode(name: str, value: Any) -> Any:
        if name == "structured_meta":
            return json.dumps(value.to_dict(), ensure_ascii=False) if value is not None else None
        if name == "needs_transcript":
            return int(bool(value))
        return value

    @staticmethod
    def _decode(row: sqlite3.Row) -> Document:
        structured = json.loads(row["structured_meta"]) if row["structured_meta"] else None
        return Document(
            id=row["id"],
            owner=row["owner"],
            source_url=row["source_url"],
            title=row["title"] or "",
            site_name=row["site_name"] or "",
            markdown=row["markdown"] or "",
            content_html=row["content_html"] or "",
            plain_text=row["plain_text"] or "",
            byline=row["byline"],
            excerpt=row["excerpt"],
            published_time=row["published_time"],
            structured_meta=StructuredMeta.from_dict(structured) if structured else None,
            needs_transcript=bool(row["needs_transcript"]),
            scraped_at=datetime.fromisoformat(row["scraped_at"]),
        )

    async def create(self, document: Document) -> str:
        doc_id = uuid.uuid4().hex
        values = {
            "id": doc_id,
            "owner": document.owner,
            "source_url": document.source_url,
            "title": document.title,
            "site_name": document.site_name,
            "markdown": document.markdown,
            "content_html": document.content_html,
            "plain_text": document.plain_text,
            "byline": document.byline,
            "excerpt": document.excerpt,
            "published_time": document.published_time,
            "structured_meta": self._encode("structured_meta", document.structured_meta),
            "needs_transcript": self._encode("needs_transcript", document.needs_transcript),
            "scraped_at": document.scraped_at.isoformat(),
        }
        try:
            conn = self._ensure_db()
            conn.execute(
                f"INSERT INTO documents ({', '.join(COLUMNS)}) VALUES ({', '.join('?' for _ in COLUMNS)})",
                tuple(values[column] for column in COLUMNS),
            )
            conn.commit()
        except sqlite3.Error as e:
            logger.error(f"SQLite error saving {document.source_url}: {e}")
            raise PersistenceError(f"SQLite error: {e}") from e
        return doc_id

    async def count(self, owner: Optional[str] = None) -> int:
        try:
            conn = self._ensure_db()
            if owner is None:
                row = conn.execute("SELECT COUNT(*) FROM documents").fetchone()
            else:
                row = conn.execute("SELECT COUNT(*) FROM documents WHERE owner = ?", (owner,)).fetchone()
        except sqlite3.Error as e:
            raise PersistenceError(f"SQLite error: {e}") from e
        return int(row[0])

    async def find_by_id(self, doc_id: str) -> Optional[Document]:
        try:
            row = self._ensure_db().execute("SELECT * FROM documents WHERE id = ?", (doc_id,)).fetchone()
        except sqlite3.Error as e:
            raise PersistenceError(f"SQLite error: {e}") from e
        return self._decode(row) if row is not None else None

    async def update(self, doc_id: str, **fields: Any) -> None:
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise PersistenceError(f"Cannot update fields: {sorted(unknown)}")
        if not fields:
            return

        assignments = ", ".join(f"{name} = ?" for name in fields)
        params = [self._encode(name, value) for name, value in fields.items()]
        try:
            conn = self._ensure_db()
            cursor = conn.execute(f"UPDATE documents SET {assignments} WHERE id = ?", (*params, doc_id))
            conn.commit()
        except sqlite3.Error as e:
            logger.error(f"SQLite error updating {doc_id}: {e}")
            raise PersistenceError(f"SQLite error: {e}") from e
        if cursor.rowcount == 0:
            raise PersistenceError(f"Document {doc_id} not found")

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
