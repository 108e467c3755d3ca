"""
AgentPod Storage Layer

Key-value persistence for the protocol stores. ``MemoryStore`` is the
default; ``SQLiteStore`` keeps the same records on disk so a restarted
process can pick up where it left off.

Values are plain JSON-serializable dicts. Iteration follows insertion
order; overwriting a key keeps its original position.
"""

import json
import re
import sqlite3
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Iterator, Optional, Tuple

_NAMESPACE_RE = re.compile(r"^[a-z_][a-z0-9_]*$")


class KeyValueStore(ABC):
    """Minimal persistence interface used by the protocol stores."""

    @abstractmethod
    def get(self, key: str) -> Optional[dict]:
        """Return the value stored under ``key`` or None."""

    @abstractmethod
    def put(self, key: str, value: dict):
        """Insert or overwrite ``key``."""

    @abstractmethod
    def iterate(self) -> Iterator[Tuple[str, dict]]:
        """Yield ``(key, value)`` pairs in insertion order."""

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        return sum(1 for _ in self.iterate())


class MemoryStore(KeyValueStore):
    """In-process store backed by an insertion-ordered dict."""

    def __init__(self):
        self._data: Dict[str, dict] = {}

    def get(self, key: str) -> Optional[dict]:
        value = self._data.get(key)
        return dict(value) if value is not None else None

    def put(self, key: str, value: dict):
        self._data[key] = dict(value)

    def iterate(self) -> Iterator[Tuple[str, dict]]:
        for key, value in list(self._data.items()):
            yield key, dict(value)

    def __contains__(self, key: str) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)


class SQLiteStore(KeyValueStore):
    """
    SQLite-backed store, one table per namespace.

    Several stores may share a database file as long as their namespaces
    differ.
    """

    def __init__(self, db_path: Optional[str] = None, namespace: str = "records"):
        """
        Initialize the store.

        Args:
            db_path: Path to SQLite database. Defaults to ~/.agentpod/state.db
            namespace: Table name for this store's records
        """
        if not _NAMESPACE_RE.match(namespace):
            raise ValueError(f"Invalid namespace: {namespace!r}")

        if db_path is None:
            db_dir = Path.home() / ".agentpod"
            db_dir.mkdir(exist_ok=True)
            db_path = str(db_dir / "state.db")

        self.db_path = db_path
        self.namespace = namespace
        self._local = threading.local()
        self._init_db()

    @property
    def _conn(self) -> sqlite3.Connection:
        """Thread-local database connection."""
        if not hasattr(self._local, "conn"):
            self._local.conn = sqlite3.connect(self.db_path)
            self._local.conn.row_factory = sqlite3.Row
        return self._local.conn

    def _init_db(self):
        """Initialize database schema."""
        self._conn.execute(f"""
            CREATE TABLE IF NOT EXISTS {self.namespace} (
                seq INTEGER PRIMARY KEY AUTOINCREMENT,
                key TEXT NOT NULL UNIQUE,
                value TEXT NOT NULL
            )
        """)
        self._conn.commit()

    def get(self, key: str) -> Optional[dict]:
        row = self._conn.execute(
            f"SELECT value FROM {self.namespace} WHERE key = ?", (key,)
        ).fetchone()
        if row:
            return json.loads(row["value"])
        return None

    def put(self, key: str, value: dict):
        self._conn.execute(f"""
            INSERT INTO {self.namespace} (key, value) VALUES (?, ?)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value
        """, (key, json.dumps(value)))
        self._conn.commit()

    def iterate(self) -> Iterator[Tuple[str, dict]]:
        rows = self._conn.execute(
            f"SELECT key, value FROM {self.namespace} ORDER BY seq"
        ).fetchall()
        for row in rows:
            yield row["key"], json.loads(row["value"])

    def __len__(self) -> int:
        row = self._conn.execute(f"SELECT COUNT(*) FROM {self.namespace}").fetchone()
        return row[0]

    def close(self):
        if hasattr(self._local, "conn"):
            self._local.conn.close()
            del self._local.conn
