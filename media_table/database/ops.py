import sqlite3
from datetime import datetime, UTC
from pathlib import Path
from typing import Dict, List, Optional

from ..config import COLUMNS
from ..models import MediaRecord

_FIELD_LIST = ", ".join(COLUMNS)


def cache_key(path: Path) -> str:
    return str(Path(path).resolve())


class CacheOperations:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def get(self, path: Path, backend: str, signature: str) -> Optional[MediaRecord]:
        """Returns the cached record, or None if absent or the file changed since."""
        cur = self.conn.cursor()
        cur.execute(
            f"SELECT signature, {_FIELD_LIST} FROM probe_cache WHERE path = ? AND backend = ?",
            (cache_key(path), backend),
        )
        row = cur.fetchone()
        if row is None or row[0] != signature:
            return None
        return MediaRecord.from_fields(Path(path), row[1:])

    def put(self, record: MediaRecord, backend: str, signature: str):
        placeholders = ", ".join("?" for _ in COLUMNS)
        self.conn.execute(
            f"""
            INSERT OR REPLACE INTO probe_cache
            (path, backend, signature, {_FIELD_LIST}, cached_at)
            VALUES (?, ?, ?, {placeholders}, ?)
            """,
            (cache_key(record.path), backend, signature, *record.row(), datetime.now(UTC).isoformat()),
        )

    def all(self, backend: Optional[str] = None) -> List[MediaRecord]:
        """Every cached record, ordered by path."""
        cur = self.conn.cursor()
        if backend:
            cur.execute(f"SELECT path, {_FIELD_LIST} FROM probe_cache WHERE backend = ? ORDER BY path", (backend,))
        else:
            cur.execute(f"SELECT path, {_FIELD_LIST} FROM probe_cache ORDER BY path, backend")
        return [MediaRecord.from_fields(Path(r[0]), r[1:]) for r in cur.fetchall()]

    def missing(self, backend: Optional[str] = None) -> List[str]:
        """Cached paths whose file no longer exists."""
        cur = self.conn.cursor()
        if backend:
            cur.execute("SELECT DISTINCT path FROM probe_cache WHERE backend = ?", (backend,))
        else:
            cur.execute("SELECT DISTINCT path FROM probe_cache")
        return sorted(p for (p,) in cur.fetchall() if not Path(p).is_file())

    def prune(self, backend: Optional[str] = None) -> int:
        """Deletes entries for files that are gone. Returns the number of paths removed."""
        gone = self.missing(backend)
        for path in gone:
            if backend:
                self.conn.execute("DELETE FROM probe_cache WHERE path = ? AND backend = ?", (path, backend))
            else:
                self.conn.execute("DELETE FROM probe_cache WHERE path = ?", (path,))
        return len(gone)

    def clear(self) -> int:
        cur = self.conn.execute("DELETE FROM probe_cache")
        return cur.rowcount

    def stats(self) -> Dict[str, int]:
        """Entry count per backend."""
        cur = self.conn.cursor()
        cur.execute("SELECT backend, COUNT(*) FROM probe_cache GROUP BY backend ORDER BY backend")
        return {backend: count for backend, count in cur.fetchall()}
