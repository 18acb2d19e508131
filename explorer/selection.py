from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, Optional

from explorer.projection import CHART_KINDS
from explorer.table import ROWS_PER_PAGE, SortDirection, next_sort_state

MAX_PAGE_SIZE = 1000


@dataclass(frozen=True)
class ExplorerSelection:
    sort_column: Optional[str] = None
    sort_direction: SortDirection = None
    page: int = 1
    page_size: int = ROWS_PER_PAGE
    x_column: Optional[str] = None
    y_column: Optional[str] = None
    chart_kind: str = "line"
    show_trend: bool = False

    def toggle_sort(self, column: str) -> "ExplorerSelection":
        sort_column, sort_direction = next_sort_state(self.sort_column, self.sort_direction, column)
        return replace(self, sort_column=sort_column, sort_direction=sort_direction, page=1)


def _as_int(value: object, default: int) -> int:
    try:
        return int(value)  # type: ignore[arg-type]
    except Exception:
        return default


def _as_column(value: object, columns: Optional[Iterable[str]]) -> Optional[str]:
    if value is None:
        return None
    name = str(value)
    if not name:
        return None
    if columns is not None and name not in set(columns):
        return None
    return name


def normalize_selection(raw: dict, *, columns: Optional[Iterable[str]] = None) -> ExplorerSelection:
    columns = list(columns) if columns is not None else None

    sort_direction = raw.get("sort_direction")
    if sort_direction not in ("asc", "desc"):
        sort_direction = None
    sort_column = _as_column(raw.get("sort_column"), columns) if sort_direction else None
    if sort_column is None:
        sort_direction = None

    page = max(1, _as_int(raw.get("page", 1), 1))
    page_size = max(1, min(MAX_PAGE_SIZE, _as_int(raw.get("page_size", ROWS_PER_PAGE), ROWS_PER_PAGE)))

    chart_kind = str(raw.get("chart_kind") or "line").lower()
    if chart_kind not in CHART_KINDS:
        chart_kind = "line"

    return ExplorerSelection(
        sort_column=sort_column,
        sort_direction=sort_direction,
        page=page,
        page_size=page_size,
        x_column=_as_column(raw.get("x_column"), columns),
        y_column=_as_column(raw.get("y_column"), columns),
        chart_kind=chart_kind,
        show_trend=bool(raw.get("show_trend", False)),
    )
