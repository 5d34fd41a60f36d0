import logging
import operator
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

from . import config
from .exceptions import FilterError
from .models import MediaRecord
from .values import NUMERIC_PARSERS, parse_human_duration

OPERATORS = {
    ">": operator.gt,
    "<": operator.lt,
    ">=": operator.ge,
    "<=": operator.le,
    "=": operator.eq,
}


@dataclass(frozen=True)
class RowFilter:
    """
    A parsed filter expression.

    Numeric columns compare values ('bitrate:>:5'), text columns
    match a case-insensitive substring ('format:hevc').
    """
    expr: str
    column: str
    op: Optional[str] = None
    threshold: Optional[float] = None
    needle: str = ""

    def matches(self, record: MediaRecord) -> bool:
        value = record.get(self.column) or ""
        if self.op is None:
            return self.needle in value.lower()

        parsed = NUMERIC_PARSERS[self.column](value)
        if parsed is None:
            return False
        return OPERATORS[self.op](parsed, self.threshold)


def _parse_threshold(column: str, text: str) -> Optional[float]:
    if column == "duration":
        return parse_human_duration(text)
    value = NUMERIC_PARSERS[column](text)
    return None if value is None else float(value)


def parse_filter(expr: str) -> RowFilter:
    """
    Parses 'column:op:value' (numeric columns) or 'column:substring' (text columns).
    """
    column, sep, rest = expr.partition(":")
    column = column.strip().lower()
    if not sep or not rest:
        raise FilterError(f"Invalid filter '{expr}': expected column:value or column:op:value")
    if column not in config.COLUMNS:
        raise FilterError(f"Invalid filter '{expr}': unknown column '{column}'")

    if column in config.TEXT_COLUMNS:
        needle = rest.strip().lower()
        if not needle:
            raise FilterError(f"Invalid filter '{expr}': empty text to match")
        return RowFilter(expr=expr, column=column, needle=needle)

    op, sep, value = rest.partition(":")
    op = op.strip()
    if not sep or op not in OPERATORS:
        raise FilterError(
            f"Invalid filter '{expr}': numeric column '{column}' needs column:op:value "
            f"with op one of {' '.join(OPERATORS)}"
        )
    threshold = _parse_threshold(column, value.strip())
    if threshold is None:
        raise FilterError(f"Invalid filter '{expr}': cannot read '{value}' as a {column}")
    return RowFilter(expr=expr, column=column, op=op, threshold=threshold)


def parse_filters(exprs: Iterable[str]) -> List[RowFilter]:
    return [parse_filter(e) for e in exprs]


def apply_filters(records: Iterable[MediaRecord], filters: List[RowFilter]) -> List[MediaRecord]:
    """Keeps records that match every filter."""
    records = list(records)
    if not filters:
        return records

    kept = [r for r in records if all(f.matches(r) for f in filters)]
    logging.debug(f"Filters kept {len(kept)} of {len(records)} rows")
    return kept
