from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from .config import COLUMNS


@dataclass
class MediaRecord:
    """
    One table row: the ten fields reported for a single media file.
    Values are kept exactly as the inspection tool printed them.
    """
    path: Path
    filename: str = ""
    size: str = ""
    duration: str = ""
    fps: str = ""
    bitrate: str = ""
    resolution: str = ""
    format: str = ""
    profile: str = ""
    depth: str = ""
    audio: str = ""

    @classmethod
    def from_fields(cls, path: Path, values: Sequence[str]) -> "MediaRecord":
        if len(values) != len(COLUMNS):
            raise ValueError(f"Expected {len(COLUMNS)} fields, got {len(values)}")
        return cls(path, *[str(v) for v in values])

    def row(self) -> list[str]:
        return [getattr(self, c) for c in COLUMNS]

    def get(self, column: str) -> Optional[str]:
        if column not in COLUMNS:
            return None
        return getattr(self, column)
