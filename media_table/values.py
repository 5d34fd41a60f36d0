"""
Numeric readings of the table's text columns.

Both backends print human-oriented strings ('1.45 GiB', '5 218 kb/s',
'01:02:03.456', '4.20 Mbps'); filtering, sorting and highlighting need
numbers. Every parser returns None for text it cannot read.
"""
import re
from typing import Optional

_NUMBER = re.compile(r"^\s*(\d[\d ]*(?:[.,]\d+)?)\s*([A-Za-z/]*)\s*$")

_SIZE_UNITS = {
    "": 1, "b": 1, "bytes": 1,
    "k": 1024, "kb": 1024, "kib": 1024,
    "m": 1024 ** 2, "mb": 1024 ** 2, "mib": 1024 ** 2,
    "g": 1024 ** 3, "gb": 1024 ** 3, "gib": 1024 ** 3,
    "t": 1024 ** 4, "tb": 1024 ** 4, "tib": 1024 ** 4,
}

# Multiplier to Mbps
_BITRATE_UNITS = {
    "": 1.0, "mb/s": 1.0, "mbps": 1.0, "mbit/s": 1.0,
    "b/s": 1e-6, "bps": 1e-6,
    "kb/s": 1e-3, "kbps": 1e-3, "kbit/s": 1e-3,
    "gb/s": 1e3, "gbps": 1e3,
}

_HUMAN_UNITS = {"h": 3600, "m": 60, "min": 60, "s": 1}


def _split_number(text: str):
    m = _NUMBER.match(text or "")
    if not m:
        return None, None
    # '5 218' is mediainfo's thousands grouping
    number = float(m.group(1).replace(" ", "").replace(",", "."))
    return number, m.group(2).lower()


def parse_size(text: str) -> Optional[int]:
    """'1.45 GiB' -> bytes. A bare number is bytes."""
    number, unit = _split_number(text)
    if number is None or unit not in _SIZE_UNITS:
        return None
    return int(number * _SIZE_UNITS[unit])


def parse_bitrate(text: str) -> Optional[float]:
    """'5 218 kb/s' -> 5.218 (Mbps). A bare number is already Mbps."""
    number, unit = _split_number(text)
    if number is None or unit not in _BITRATE_UNITS:
        return None
    return number * _BITRATE_UNITS[unit]


def parse_fps(text: str) -> Optional[float]:
    number, unit = _split_number(text)
    if number is None or unit not in ("", "fps"):
        return None
    return number


def parse_duration(text: str) -> Optional[float]:
    """'01:02:03.456' or '02:03' -> seconds. A bare number is seconds."""
    text = (text or "").strip()
    if not text:
        return None
    parts = text.split(":")
    if len(parts) > 3:
        return None
    try:
        values = [float(p) for p in parts]
    except ValueError:
        return None
    seconds = 0.0
    for v in values:
        seconds = seconds * 60 + v
    return seconds


def parse_human_duration(text: str) -> Optional[float]:
    """
    '1h30m', '90s', '5min', '1h 5m 3s' -> seconds.
    A trailing number without a unit counts as seconds; '01:30:00' also works.
    """
    text = (text or "").strip().lower()
    if not text:
        return None
    if ":" in text:
        return parse_duration(text)

    total = 0.0
    pos = 0
    for m in re.finditer(r"\s*(\d+(?:\.\d+)?)\s*(min|h|m|s)?", text):
        if m.start() != pos:
            return None
        pos = m.end()
        total += float(m.group(1)) * _HUMAN_UNITS.get(m.group(2) or "s", 1)
    if pos != len(text):
        return None
    return total


NUMERIC_PARSERS = {
    "size": parse_size,
    "duration": parse_duration,
    "fps": parse_fps,
    "bitrate": parse_bitrate,
}
