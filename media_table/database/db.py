"""
Cache database connection management.
"""
import sqlite3
import logging
from pathlib import Path
from typing import Optional

from ..exceptions import CacheError
from .schema import init_schema


class CacheManager:
    def __init__(self, db_path: Path):
        self.db_path = Path(db_path).expanduser()
        self._conn: Optional[sqlite3.Connection] = None

    def connect(self) -> sqlite3.Connection:
        """
        Opens the cache database, creating it (and its folder) on first use.
        """
        if self._conn:
            return self._conn

        logging.debug(f"Opening probe cache: {self.db_path}")
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(self.db_path)
            self._conn.execute("PRAGMA journal_mode=WAL;")
            self._conn.execute("PRAGMA synchronous=NORMAL;")
            init_schema(self._conn)
        except (OSError, sqlite3.Error) as e:
            self.close()
            raise CacheError(f"Cannot open cache {self.db_path}: {e}") from e

        return self._conn

    def close(self):
        if self._conn:
            self._conn.close()
            self._conn = None

    def __enter__(self):
        return self.connect()

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._conn and exc_type is None:
            self._conn.commit()
        self.close()
