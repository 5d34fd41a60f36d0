from typing import Any, Iterable, List, Optional

from . import config
from .models import MediaRecord
from .values import NUMERIC_PARSERS


def sort_value(record: MediaRecord, column: str) -> Optional[Any]:
    text = record.get(column) or ""
    if column in NUMERIC_PARSERS:
        return NUMERIC_PARSERS[column](text)
    return text.casefold() if text else None


def sort_records(records: Iterable[MediaRecord],
                 column: Optional[str],
                 descending: bool = False) -> List[MediaRecord]:
    """
    Orders records by a column. Numeric columns compare by value; rows
    without a readable value go last in either direction. Without a column,
    the incoming order is kept.
    """
    records = list(records)
    if not column:
        return records
    if column not in config.COLUMNS:
        raise ValueError(f"Unknown sort column: {column}")

    keyed = [(sort_value(r, column), r) for r in records]
    present = [(v, r) for v, r in keyed if v is not None]
    absent = [r for v, r in keyed if v is None]

    # sorted() is stable, so ties keep their incoming order
    present.sort(key=lambda pair: pair[0], reverse=descending)
    return [r for _, r in present] + absent
