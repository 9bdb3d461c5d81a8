"""SQLite-backed collection of curated book records."""

import json
import logging
import sqlite3
import threading
from typing import List, Optional

from .errors import EmptyCollectionError, ItemNotFoundError
from .models import CollectedItem, ScrapedRecord, new_item_id

logger = logging.getLogger("book_scraper")

DEFAULT_NAMESPACE = "webScraperCollectedItems"


class CollectionStore:
    """Ordered list of CollectedItems, newest first, under one namespace key."""

    def __init__(self, db_path: str = "book_scraper.db", namespace: str = DEFAULT_NAMESPACE):
        self.db_path = db_path
        self.namespace = namespace
        self._local = threading.local()
        self._init_db()

    @property
    def _conn(self) -> sqlite3.Connection:
        if not hasattr(self._local, "conn") or self._local.conn is None:
            self._local.conn = sqlite3.connect(self.db_path)
            self._local.conn.row_factory = sqlite3.Row
            self._local.conn.execute("PRAGMA journal_mode=WAL")
        return self._local.conn

    def _init_db(self):
        conn = self._conn
        conn.executescript("""
            CREATE TABLE IF NOT EXISTS collected_items (
                seq INTEGER PRIMARY KEY AUTOINCREMENT,
                namespace TEXT NOT NULL,
                item_id TEXT NOT NULL,
                data TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                UNIQUE(namespace, item_id)
            );

            CREATE INDEX IF NOT EXISTS idx_items_namespace ON collected_items(namespace);
        """)
        conn.commit()

    def close(self):
        conn = getattr(self._local, "conn", None)
        if conn is not None:
            conn.close()
            self._local.conn = None

    def _row_to_item(self, row: sqlite3.Row) -> Optional[CollectedItem]:
        try:
            data = json.loads(row["data"])
        except ValueError as e:
            logger.error(f"Skipping unreadable item {row['item_id']}: {e}")
            return None
        if not isinstance(data, dict):
            logger.error(f"Skipping malformed item {row['item_id']}")
            return None
        data["id"] = row["item_id"]
        return CollectedItem.from_dict(data)

    def add(self, record: ScrapedRecord) -> CollectedItem:
        item = CollectedItem(id=new_item_id(), record=record)
        self._conn.execute(
            "INSERT INTO collected_items (namespace, item_id, data) VALUES (?, ?, ?)",
            (self.namespace, item.id, json.dumps(record.to_dict())),
        )
        self._conn.commit()
        logger.info(f"Added item {item.id}: {record.title!r}")
        return item

    def update(self, item_id: str, record: ScrapedRecord) -> CollectedItem:
        cur = self._conn.execute(
            """UPDATE collected_items SET data = ?, updated_at = CURRENT_TIMESTAMP
               WHERE namespace = ? AND item_id = ?""",
            (json.dumps(record.to_dict()), self.namespace, item_id),
        )
        self._conn.commit()
        if cur.rowcount == 0:
            raise ItemNotFoundError(item_id)
        logger.info(f"Updated item {item_id}: {record.title!r}")
        return CollectedItem(id=item_id, record=record)

    def remove(self, item_id: str) -> CollectedItem:
        item = self.get(item_id)
        self._conn.execute(
            "DELETE FROM collected_items WHERE namespace = ? AND item_id = ?",
            (self.namespace, item_id),
        )
        self._conn.commit()
        logger.info(f"Removed item {item_id}: {item.record.title!r}")
        return item

    def get(self, item_id: str) -> CollectedItem:
        row = self._conn.execute(
            "SELECT item_id, data FROM collected_items WHERE namespace = ? AND item_id = ?",
            (self.namespace, item_id),
        ).fetchone()
        item = self._row_to_item(row) if row else None
        if item is None:
            raise ItemNotFoundError(item_id)
        return item

    def _fetch_rows(self) -> List[sqlite3.Row]:
        return self._conn.execute(
            "SELECT seq, item_id, data FROM collected_items WHERE namespace = ? ORDER BY seq DESC",
            (self.namespace,),
        ).fetchall()

    def _rows_to_items(self, rows) -> List[CollectedItem]:
        items = (self._row_to_item(r) for r in rows)
        return [i for i in items if i is not None]

    def list_items(self) -> List[CollectedItem]:
        return self._rows_to_items(self._fetch_rows())

    def count(self) -> int:
        row = self._conn.execute(
            "SELECT COUNT(*) AS cnt FROM collected_items WHERE namespace = ?",
            (self.namespace,),
        ).fetchone()
        return row["cnt"]

    def clear(self):
        self._conn.execute("DELETE FROM collected_items WHERE namespace = ?", (self.namespace,))
        self._conn.commit()

    def export_all(self) -> List[dict]:
        """Return every item as a dict (newest first) and empty the collection."""
        rows = self._fetch_rows()
        items = self._rows_to_items(rows)
        if not items:
            raise EmptyCollectionError()
        # only rows read above; later adds survive for the next export
        self._conn.execute(
            "DELETE FROM collected_items WHERE namespace = ? AND seq <= ?",
            (self.namespace, rows[0]["seq"]),
        )
        self._conn.commit()
        logger.info(f"Exported and cleared {len(items)} items")
        return [i.to_dict() for i in items]
