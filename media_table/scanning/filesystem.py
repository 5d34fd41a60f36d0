import logging
import os
from pathlib import Path
from typing import Iterable, Iterator, List, Set

from .. import config


class MediaScanner:
    """
    Turns command line arguments into the list of files to probe.

    Files are taken as given, directories are walked for media extensions,
    and anything else is reported and skipped.
    """

    def __init__(self, extensions: Set[str] = config.MEDIA_EXTS):
        self.extensions = {e.lower() for e in extensions}
        self.missing: List[Path] = []
        self.scanned = 0

    def scan(self, paths: Iterable[Path]) -> Iterator[Path]:
        self.missing = []
        self.scanned = 0

        for path in paths:
            path = Path(path)
            if path.is_file():
                self.scanned += 1
                yield path
            elif path.is_dir():
                for f in self._iter_files(path):
                    self.scanned += 1
                    if self.is_media_file(f):
                        yield f
            else:
                logging.error(f"File not found - {path}")
                self.missing.append(path)

    def is_media_file(self, path: Path) -> bool:
        if path.name.startswith("._"):
            return False
        return path.suffix.lower() in self.extensions

    def _iter_files(self, root: Path) -> Iterator[Path]:
        """Depth-first walker using os.scandir for speed."""
        stack = [root]
        while stack:
            current = stack.pop()

            try:
                with os.scandir(current) as it:
                    entries = list(it)
            except OSError:
                logging.warning(f"Permission denied: {current}")
                continue

            # Sort for stable traversal order
            entries.sort(key=lambda e: e.name.lower())

            dirs = []
            files = []
            for e in entries:
                if e.is_dir(follow_symlinks=False):
                    dirs.append(Path(e.path))
                elif e.is_file():
                    files.append(Path(e.path))

            # Push dirs to stack (reversed so we process A before Z)
            for d in reversed(dirs):
                stack.append(d)

            for f in files:
                yield f
