"""
Cache schema definitions.
"""
import sqlite3
import logging

CURRENT_SCHEMA_VERSION = 1


def init_schema(conn: sqlite3.Connection):
    """
    Applies the cache schema to the database.
    Idempotent: safe to run on every startup.
    """
    with conn:
        conn.execute("""
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER PRIMARY KEY
            );
        """)

        cur = conn.cursor()
        cur.execute("SELECT version FROM schema_version")
        if not cur.fetchone():
            conn.execute("INSERT INTO schema_version (version) VALUES (?)", (CURRENT_SCHEMA_VERSION,))

        # One row per (file, backend); the backends format columns differently
        conn.execute("""
        CREATE TABLE IF NOT EXISTS probe_cache (
            path        TEXT NOT NULL,       -- Canonical absolute path
            backend     TEXT NOT NULL,
            signature   TEXT NOT NULL,       -- '<size>-<mtime>' at probe time
            filename    TEXT NOT NULL DEFAULT '',
            size        TEXT NOT NULL DEFAULT '',
            duration    TEXT NOT NULL DEFAULT '',
            fps         TEXT NOT NULL DEFAULT '',
            bitrate     TEXT NOT NULL DEFAULT '',
            resolution  TEXT NOT NULL DEFAULT '',
            format      TEXT NOT NULL DEFAULT '',
            profile     TEXT NOT NULL DEFAULT '',
            depth       TEXT NOT NULL DEFAULT '',
            audio       TEXT NOT NULL DEFAULT '',
            cached_at   TEXT NOT NULL,
            PRIMARY KEY (path, backend)
        );
        """)
        conn.execute("CREATE INDEX IF NOT EXISTS idx_probe_cache_backend ON probe_cache(backend);")

    logging.debug("Cache schema initialized.")
