#!/usr/bin/env python
"""
Query helper for the media-table probe cache (SQLite).

Usage:
  python media_cache_query.py --stats
  python media_cache_query.py --list --backend ffprobe
  python media_cache_query.py --missing
  python media_cache_query.py --show "path/to/video.mkv"
"""

import argparse
import sqlite3
from pathlib import Path
from typing import Optional

from media_table import config
from media_table.database.ops import cache_key


def connect_db(db_path: Path) -> sqlite3.Connection:
    if not db_path.exists():
        raise SystemExit(f"Cache DB not found: {db_path}")
    return sqlite3.connect(db_path)


def show_stats(conn: sqlite3.Connection):
    cur = conn.cursor()
    cur.execute("""
        SELECT backend, COUNT(*), MIN(cached_at), MAX(cached_at)
        FROM probe_cache
        GROUP BY backend
        ORDER BY backend
    """)
    rows = cur.fetchall()
    if not rows:
        print("Cache is empty.")
        return

    print("backend      | entries | oldest                           | newest")
    print("-------------+---------+----------------------------------+---------")
    for backend, count, oldest, newest in rows:
        print(f"{backend.ljust(12)} | {str(count).rjust(7)} | {(oldest or '').ljust(32)} | {newest or ''}")


def list_entries(conn: sqlite3.Connection, backend: Optional[str] = None):
    cur = conn.cursor()
    sql = "SELECT backend, signature, bitrate, resolution, path FROM probe_cache"
    params: tuple = ()
    if backend:
        sql += " WHERE backend = ?"
        params = (backend,)
    cur.execute(sql + " ORDER BY path, backend", params)
    rows = cur.fetchall()
    if not rows:
        print("No cache entries found.")
        return

    print("backend      | signature              | bitrate      | resolution | path")
    print("-------------+------------------------+--------------+------------+-----")
    for b, sig, bitrate, res, path in rows:
        print(f"{b.ljust(12)} | {sig.ljust(22)} | {bitrate.rjust(12)} | {res.ljust(10)} | {path}")


def list_missing(conn: sqlite3.Connection):
    cur = conn.cursor()
    cur.execute("SELECT DISTINCT path FROM probe_cache ORDER BY path")
    missing = [p for (p,) in cur.fetchall() if not Path(p).is_file()]
    if not missing:
        print("All cached files still exist.")
        return

    print(f"{len(missing)} cached files no longer exist:")
    for p in missing:
        print(f"  {p}")


def show_entry(conn: sqlite3.Connection, path: Path):
    cur = conn.cursor()
    cur.execute(
        f"SELECT backend, signature, cached_at, {', '.join(config.COLUMNS)} FROM probe_cache WHERE path = ? ORDER BY backend",
        (cache_key(path),),
    )
    rows = cur.fetchall()
    if not rows:
        print(f"No cache entry for: {path}")
        return

    for backend, sig, cached_at, *values in rows:
        print(f"[{backend}] signature={sig} cached_at={cached_at}")
        for header, value in zip(config.HEADERS, values):
            print(f"  {header.ljust(10)}: {value}")


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Query helper for the media-table cache DB.")
    p.add_argument("--db", type=Path, default=config.DEFAULT_CACHE_DB,
                   help=f"Path to the cache DB (default: {config.DEFAULT_CACHE_DB})")
    p.add_argument("--backend", choices=config.BACKENDS, default=None, help="Restrict --list to one backend")
    group = p.add_mutually_exclusive_group(required=True)
    group.add_argument("--stats", action="store_true", help="Entry counts per backend")
    group.add_argument("--list", action="store_true", help="List cached entries")
    group.add_argument("--missing", action="store_true", help="List cached paths whose file is gone")
    group.add_argument("--show", type=Path, help="Show every cached field for one file")
    return p.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    conn = connect_db(args.db.expanduser().resolve())

    try:
        if args.stats:
            show_stats(conn)
        elif args.list:
            list_entries(conn, args.backend)
        elif args.missing:
            list_missing(conn)
        elif args.show:
            show_entry(conn, args.show)
    finally:
        conn.close()


if __name__ == "__main__":
    main()
