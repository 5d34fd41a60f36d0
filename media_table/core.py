import logging
import sqlite3
from pathlib import Path
from typing import Iterable, List, Optional

from tqdm import tqdm

from .database.db import CacheManager
from .database.ops import CacheOperations
from .exceptions import ProbeError
from .filtering import RowFilter, apply_filters
from .models import MediaRecord
from .probing.factory import Probe
from .scanning.filesystem import MediaScanner
from .scanning.signature import file_signature
from .sorting import sort_records


class MediaTableApp:
    def __init__(self, prober: Optional[Probe], backend: str, cache_path: Optional[Path] = None):
        """
        Args:
            prober: backend used for cache misses; None when only the cache is read
            cache_path: SQLite cache location, or None to always probe
        """
        self.prober = prober
        self.backend = backend
        self.cache_manager = CacheManager(cache_path) if cache_path else None
        self.scanner = MediaScanner()
        self.failed: List[Path] = []
        self.total = 0

    def collect(self, paths: Iterable[Path]) -> List[Path]:
        files = list(self.scanner.scan(paths))
        logging.info(
            f"Scan complete: {self.scanner.scanned} files scanned, {len(files)} to inspect"
            + (f", {len(self.scanner.missing)} not found" if self.scanner.missing else "")
        )
        return files

    def probe(self, files: List[Path]) -> List[MediaRecord]:
        """
        Inspects each file in order, reusing cached results for unchanged files.
        Files that fail to probe are logged and skipped.
        """
        if self.cache_manager is None:
            return self._probe_files(files, None)

        with self.cache_manager as conn:
            return self._probe_files(files, CacheOperations(conn))

    def _probe_files(self, files: List[Path], cache: Optional[CacheOperations]) -> List[MediaRecord]:
        records: List[MediaRecord] = []
        self.failed = []
        hits = 0

        with tqdm(files, desc="Probing", unit="file", disable=None, leave=False) as bar:
            for path in bar:
                signature = None
                if cache is not None:
                    try:
                        signature = file_signature(path)
                    except OSError as e:
                        logging.error(f"Error processing {path}: {e}")
                        self.failed.append(path)
                        continue

                    record = cache.get(path, self.backend, signature)
                    if record is not None:
                        logging.debug(f"Cache hit: {path}")
                        records.append(record)
                        hits += 1
                        bar.set_postfix(cached=hits)
                        continue

                try:
                    record = self.prober.probe(path)
                except ProbeError as e:
                    logging.error(f"Error processing {path}: {e}")
                    self.failed.append(path)
                    continue

                records.append(record)
                if cache is not None:
                    try:
                        cache.put(record, self.backend, signature)
                        cache.conn.commit()
                    except sqlite3.Error as e:
                        logging.warning(f"Could not cache {path}: {e}")

        logging.info(
            f"Probed {len(files)} files ({hits} from cache"
            + (f", {len(self.failed)} failed)" if self.failed else ")")
        )
        return records

    def cached(self) -> List[MediaRecord]:
        """All cached records for the current backend, without probing anything."""
        if self.cache_manager is None:
            return []
        with self.cache_manager as conn:
            records = CacheOperations(conn).all(self.backend)
        logging.info(f"Loaded {len(records)} cached entries")
        return records

    def prune_cache(self) -> int:
        if self.cache_manager is None:
            return 0
        with self.cache_manager as conn:
            removed = CacheOperations(conn).prune(self.backend)
        logging.info(f"Pruned {removed} cache entries for missing files")
        return removed

    def clear_cache(self) -> int:
        if self.cache_manager is None:
            return 0
        with self.cache_manager as conn:
            removed = CacheOperations(conn).clear()
        logging.info(f"Cleared {removed} cache entries")
        return removed

    def run(self,
            paths: Iterable[Path],
            filters: Optional[List[RowFilter]] = None,
            sort: Optional[str] = None,
            descending: bool = False,
            from_cache: bool = False) -> List[MediaRecord]:
        """
        The whole pipeline: collect -> probe (or read cache) -> filter -> sort.
        """
        if from_cache:
            records = self.cached()
        else:
            if self.prober is None:
                raise ValueError("A probe backend is required unless reading from the cache")
            records = self.probe(self.collect(paths))
        self.total = len(records)

        records = apply_filters(records, filters or [])
        return sort_records(records, sort, descending)
