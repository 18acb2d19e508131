"""Memoized recomputation of derived structures + JSON-serializable page payloads.

Every derived structure is a pure function of the dataset and the part of the
selection it depends on. ``ExplorerSession`` keeps the last result per
structure together with the inputs that produced it and recomputes only when
those inputs change.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import asdict
from typing import Any, Callable, Dict, Hashable, List, Optional, Tuple

from explorer.charts import build_chart, to_vega_spec
from explorer.columns import CATEGORICAL, DATE, NUMERIC, ColumnProfile, classify_columns, columns_of_type
from explorer.dataset import Dataset, Record, dataset_signature
from explorer.projection import ChartProjection, project, valid_x_columns, valid_y_columns
from explorer.quality import QualityReport, score_quality
from explorer.selection import ExplorerSelection
from explorer.stats import compute_column_statistics, detect_trend, format_equation
from explorer.table import SortDirection, format_cell, sort_records, table_page

logger = logging.getLogger(__name__)

SESSION_CACHE_SIZE = 4


class ExplorerSession:
    def __init__(self, dataset: Dataset):
        self.dataset = dataset
        self._memo: Dict[str, Tuple[Hashable, Any]] = {}

    def _memoized(self, name: str, key: Hashable, compute: Callable[[], Any]) -> Any:
        cached = self._memo.get(name)
        if cached is not None and cached[0] == key:
            return cached[1]
        logger.debug("recomputing %s for %r", name, key)
        value = compute()
        self._memo[name] = (key, value)
        return value

    def profiles(self) -> List[ColumnProfile]:
        return self._memoized("profiles", (), lambda: classify_columns(self.dataset))

    def quality(self) -> QualityReport:
        return self._memoized("quality", (), lambda: score_quality(self.dataset, self.profiles()))

    def statistics(self) -> Dict[str, Dict[str, float]]:
        return self._memoized("statistics", (), lambda: compute_column_statistics(self.dataset, self.profiles()))

    def sorted_records(self, column: Optional[str], direction: SortDirection) -> List[Record]:
        return self._memoized(
            "sorted_records",
            (column, direction),
            lambda: sort_records(self.dataset.records, column, direction),
        )

    def projection(self, x_column: Optional[str], y_column: Optional[str], kind: str, show_trend: bool) -> ChartProjection:
        return self._memoized(
            "projection",
            (x_column, y_column, kind, show_trend),
            lambda: project(self.dataset, self.profiles(), x_column, y_column, kind, show_trend=show_trend),
        )


_SESSIONS: "OrderedDict[str, ExplorerSession]" = OrderedDict()


def get_session(dataset: Dataset) -> ExplorerSession:
    """Reuse the session of an identical dataset (same content) seen recently."""
    signature = dataset_signature(dataset)
    session = _SESSIONS.get(signature)
    if session is not None:
        _SESSIONS.move_to_end(signature)
        return session
    session = ExplorerSession(dataset)
    _SESSIONS[signature] = session
    while len(_SESSIONS) > SESSION_CACHE_SIZE:
        _SESSIONS.popitem(last=False)
    return session


def clear_sessions() -> None:
    _SESSIONS.clear()


# ---------------- Page payloads ----------------
def compute_profile(selection: ExplorerSelection, session: ExplorerSession) -> Dict[str, Any]:
    profiles = session.profiles()
    return {
        "selection": asdict(selection),
        "row_count": session.dataset.row_count,
        "column_count": session.dataset.column_count,
        "columns": [asdict(p) for p in profiles],
        "date_columns": columns_of_type(profiles, DATE),
        "numeric_columns": columns_of_type(profiles, NUMERIC),
        "categorical_columns": columns_of_type(profiles, CATEGORICAL),
    }


def compute_table(selection: ExplorerSelection, session: ExplorerSession) -> Dict[str, Any]:
    records = session.sorted_records(selection.sort_column, selection.sort_direction)
    page = table_page(
        records,
        selection.page,
        selection.page_size,
        sort_column=selection.sort_column,
        sort_direction=selection.sort_direction,
    )
    columns = list(session.dataset.columns)
    return {
        "selection": asdict(selection),
        "columns": columns,
        "rows": page.rows,
        "display_rows": [{col: format_cell(row.get(col)) for col in columns} for row in page.rows],
        "page": page.page,
        "total_pages": page.total_pages,
        "total_rows": page.total_rows,
        "sort": {"column": page.sort_column, "direction": page.sort_direction},
    }


def compute_statistics(selection: ExplorerSelection, session: ExplorerSession) -> Dict[str, Any]:
    stats = session.statistics()
    return {"selection": asdict(selection), "numeric_columns": list(stats), "columns": stats}


def compute_chart(selection: ExplorerSelection, session: ExplorerSession, *, include_spec: bool = True) -> Dict[str, Any]:
    profiles = session.profiles()
    projection = session.projection(selection.x_column, selection.y_column, selection.chart_kind, selection.show_trend)

    trend = None
    if projection.trend is not None:
        trend = asdict(projection.trend)
        trend["direction"] = detect_trend(projection.trend.slope)
        trend["equation"] = format_equation(projection.trend.slope, projection.trend.intercept)

    payload: Dict[str, Any] = {
        "selection": asdict(selection),
        "x_column": projection.x_column,
        "y_column": projection.y_column,
        "valid_x_columns": valid_x_columns(profiles, projection.y_column),
        "valid_y_columns": valid_y_columns(profiles, projection.x_column),
        "warnings": list(projection.warnings),
        "points": [asdict(p) for p in projection.points],
        "pie_groups": [asdict(g) for g in projection.pie_groups] if projection.pie_groups is not None else None,
        "trend": trend,
        "chart": None,
    }
    if include_spec and projection.x_column and projection.y_column:
        payload["chart"] = to_vega_spec(build_chart(projection, selection.chart_kind))
    return payload


def compute_quality(selection: ExplorerSelection, session: ExplorerSession) -> Dict[str, Any]:
    report = session.quality()
    return {
        "selection": asdict(selection),
        "score": report.score,
        "row_count": report.row_count,
        "total_cells": report.total_cells,
        "empty_cells": report.empty_cells,
        "empty_ratio": report.empty_ratio,
        "duplicate_row_count": report.duplicate_row_count,
        "duplicate_ratio": report.duplicate_ratio,
        "total_outliers": report.total_outliers,
        "per_column": {col: asdict(stats) for col, stats in report.per_column.items()},
    }
