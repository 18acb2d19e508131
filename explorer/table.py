from __future__ import annotations

import math
import unicodedata
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from functools import cmp_to_key
from typing import Any, List, Literal, Optional, Sequence, Tuple

from explorer.dataset import Record, cell_to_str, format_date, is_date_value, is_missing
from explorer.parsing import is_native_number, to_finite_float

ROWS_PER_PAGE = 100

EPOCH = datetime(1970, 1, 1)

SortDirection = Optional[Literal["asc", "desc"]]


@dataclass(frozen=True)
class TablePage:
    rows: List[Record]
    page: int
    total_pages: int
    total_rows: int
    sort_column: Optional[str]
    sort_direction: SortDirection


def next_sort_state(current_column: Optional[str], current_direction: SortDirection, clicked: str) -> Tuple[Optional[str], SortDirection]:
    """Header click: none -> asc -> desc -> none on one column; a new column starts at asc."""
    if current_column == clicked:
        if current_direction == "asc":
            return clicked, "desc"
        if current_direction == "desc":
            return None, None
    return clicked, "asc"


def _epoch_millis(value: date) -> float:
    if not isinstance(value, datetime):
        value = datetime.combine(value, time())
    epoch = EPOCH if value.tzinfo is None else EPOCH.replace(tzinfo=timezone.utc)
    return (value - epoch).total_seconds() * 1000


def _sort_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return float(value)
    if is_native_number(value):
        number = float(value)
        return number if math.isfinite(number) else None
    if is_date_value(value):
        return _epoch_millis(value)
    if isinstance(value, str):
        return to_finite_float(value)
    return None


def collation_key(text: str) -> Tuple[str, str, str]:
    """Accent- and case-insensitive first, then accents, then lowercase before uppercase."""
    folded = text.casefold()
    base = "".join(ch for ch in unicodedata.normalize("NFKD", folded) if not unicodedata.combining(ch))
    return base, folded, text.swapcase()


def compare_cells(a: Any, b: Any) -> int:
    num_a, num_b = _sort_number(a), _sort_number(b)
    if num_a is not None and num_b is not None:
        return (num_a > num_b) - (num_a < num_b)
    key_a, key_b = collation_key(cell_to_str(a)), collation_key(cell_to_str(b))
    return (key_a > key_b) - (key_a < key_b)


def sort_records(records: Sequence[Record], column: Optional[str], direction: SortDirection) -> List[Record]:
    rows = list(records)
    if not column or direction not in ("asc", "desc"):
        return rows

    present = [r for r in rows if not is_missing(r.get(column))]
    missing = [r for r in rows if is_missing(r.get(column))]
    present.sort(key=cmp_to_key(lambda a, b: compare_cells(a.get(column), b.get(column))), reverse=direction == "desc")
    # Missing cells stay at the bottom in either direction.
    return present + missing


def total_pages(row_count: int, page_size: int = ROWS_PER_PAGE) -> int:
    return math.ceil(row_count / page_size) if page_size > 0 else 0


def clamp_page(page: int, pages: int) -> int:
    return max(1, min(page, max(pages, 1)))


def paginate(records: Sequence[Record], page: int, page_size: int = ROWS_PER_PAGE) -> List[Record]:
    """Slice out a 1-based page."""
    page = clamp_page(page, total_pages(len(records), page_size))
    start = (page - 1) * page_size
    return list(records[start : start + page_size])


def table_page(
    records: Sequence[Record],
    page: int = 1,
    page_size: int = ROWS_PER_PAGE,
    *,
    sort_column: Optional[str] = None,
    sort_direction: SortDirection = None,
) -> TablePage:
    pages = total_pages(len(records), page_size)
    page = clamp_page(page, pages)
    return TablePage(
        rows=paginate(records, page, page_size),
        page=page,
        total_pages=pages,
        total_rows=len(records),
        sort_column=sort_column,
        sort_direction=sort_direction,
    )


def format_cell(value: Any) -> str:
    if is_missing(value):
        return "-"
    if is_date_value(value):
        return format_date(value)
    return cell_to_str(value)
