import csv
import logging
import sys
from typing import IO, Iterable, List, Optional

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from . import config
from .models import MediaRecord
from .values import parse_bitrate

ELLIPSIS = "..."

# Column justification; everything else is left aligned
JUSTIFY = {
    "size": "right",
    "duration": "right",
    "fps": "right",
    "bitrate": "right",
    "depth": "center",
}


def truncate_middle(text: str, max_len: int) -> str:
    """'a_very_long_name.mkv' -> 'a_ver...e.mkv' when longer than max_len."""
    if len(text) <= max_len:
        return text
    if max_len <= len(ELLIPSIS):
        return text[:max_len]
    side = (max_len - len(ELLIPSIS)) // 2
    return f"{text[:side]}{ELLIPSIS}{text[len(text) - side:]}"


def bitrate_exceeds(field: str, threshold: Optional[float]) -> bool:
    """True when the bitrate column reads above the threshold (Mbps)."""
    if threshold is None:
        return False
    value = parse_bitrate(field)
    return value is not None and value > threshold


class TableRenderer:
    """
    Lays out records as an aligned table.

    Styles:
      - box:   bordered table with a header row
      - plain: whitespace aligned columns, like 'column -t'
      - csv:   header + rows, no colors
    """

    def __init__(self,
                 style: str = "box",
                 color: bool = True,
                 bitrate_threshold: Optional[float] = config.DEFAULT_BITRATE_THRESHOLD,
                 filename_length: int = config.DEFAULT_FILENAME_LENGTH):
        if style not in config.STYLES:
            raise ValueError(f"Unknown table style: {style}")
        self.style = style
        self.color = color
        self.bitrate_threshold = bitrate_threshold
        self.filename_length = filename_length

    def cells(self, record: MediaRecord) -> List[str]:
        row = record.row()
        row[0] = truncate_middle(row[0], self.filename_length)
        return row

    def build_table(self, records: Iterable[MediaRecord]) -> Table:
        if self.style == "plain":
            table = Table(box=None, show_edge=False, pad_edge=False, padding=(0, 2, 0, 0))
        else:
            table = Table(box=box.SQUARE, header_style="bold", padding=(0, 1))

        for name, header in zip(config.COLUMNS, config.HEADERS):
            table.add_column(header, justify=JUSTIFY.get(name, "left"), no_wrap=True)

        bitrate_idx = config.COLUMN_INDEX["bitrate"]
        highlighted = 0
        for record in records:
            cells = [Text(c) for c in self.cells(record)]
            if bitrate_exceeds(record.bitrate, self.bitrate_threshold):
                cells[bitrate_idx].stylize(config.HIGHLIGHT_STYLE)
                highlighted += 1
            table.add_row(*cells)

        if highlighted:
            logging.debug(f"{highlighted} rows above {self.bitrate_threshold} Mbps")
        return table

    def render(self, records: Iterable[MediaRecord], out: Optional[IO[str]] = None):
        if self.style == "csv":
            self.write_csv(records, out)
            return

        stream = out or sys.stdout
        console = Console(
            file=stream,
            color_system="auto" if self.color else None,
            highlight=False,
            soft_wrap=False,
            # Natural width everywhere; rich would otherwise squeeze cells to the terminal
            width=100_000,
        )
        table = self.build_table(records)
        console.print(table, crop=False)

    def write_csv(self, records: Iterable[MediaRecord], out: Optional[IO[str]] = None):
        writer = csv.writer(out or sys.stdout)
        writer.writerow(config.HEADERS)
        for record in records:
            writer.writerow(record.row())
