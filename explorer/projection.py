from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Tuple

import pandas as pd

from explorer.columns import CATEGORICAL, DATE, NUMERIC, ColumnProfile, columns_of_type, profile_map
from explorer.dataset import Dataset, is_date_value, is_missing
from explorer.parsing import format_axis_value, is_excel_serial, parse_number
from explorer.stats import linear_regression

logger = logging.getLogger(__name__)

CHART_KINDS = ("line", "bar", "area", "scatter", "pie")
PIE_TOP_N = 10
MISSING_GROUP_LABEL = "Other"
X_MAX_CATEGORICAL_UNIQUE = 50
X_AUTO_UNIQUE_RATIO = 0.3
Y_DATE_RATIO = 0.5


@dataclass(frozen=True)
class ChartPoint:
    x: Any
    y: float
    label: str


@dataclass(frozen=True)
class PieGroup:
    name: str
    value: float


@dataclass(frozen=True)
class TrendLine:
    slope: float
    intercept: float
    start_y: float
    end_y: float
    r2: float = 0.0


@dataclass(frozen=True)
class AxisSelection:
    x_column: Optional[str]
    y_column: Optional[str]
    warnings: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ChartProjection:
    x_column: Optional[str]
    y_column: Optional[str]
    points: List[ChartPoint]
    pie_groups: Optional[List[PieGroup]] = None
    trend: Optional[TrendLine] = None
    warnings: Tuple[str, ...] = field(default_factory=tuple)


def valid_y_columns(profiles: Sequence[ColumnProfile], x_column: Optional[str]) -> List[str]:
    return [p.name for p in profiles if p.type == NUMERIC and p.name != x_column]


def valid_x_columns(profiles: Sequence[ColumnProfile], y_column: Optional[str]) -> List[str]:
    return [
        p.name
        for p in profiles
        if p.type == DATE
        or (p.type == CATEGORICAL and p.unique_count <= X_MAX_CATEGORICAL_UNIQUE)
        or p.name != y_column
    ]


def default_x_column(dataset: Dataset, profiles: Sequence[ColumnProfile]) -> Optional[str]:
    dates = columns_of_type(profiles, DATE)
    if dates:
        return dates[0]
    for p in profiles:
        if p.type == CATEGORICAL and p.unique_count < dataset.row_count * X_AUTO_UNIQUE_RATIO:
            return p.name
    return dataset.columns[0] if dataset.columns else None


def y_axis_warnings(dataset: Dataset, profiles: Sequence[ColumnProfile], y_column: Optional[str]) -> Tuple[str, ...]:
    if not y_column or dataset.row_count == 0:
        return ()
    profile = profile_map(profiles).get(y_column)
    date_cells = sum(1 for v in dataset.column_values(y_column) if is_date_value(v) or is_excel_serial(v))
    if (profile is not None and profile.type == DATE) or date_cells > dataset.row_count * Y_DATE_RATIO:
        message = f"Column {y_column!r} on the Y axis looks like dates; consider swapping the X and Y axes."
        logger.warning(message)
        return (message,)
    return ()


def select_axes(
    dataset: Dataset,
    profiles: Sequence[ColumnProfile],
    x_column: Optional[str] = None,
    y_column: Optional[str] = None,
) -> AxisSelection:
    """Keep the requested axes when still valid, otherwise fall back to the defaults."""
    x, y = x_column, y_column
    if not x or x not in dataset.columns:
        x = default_x_column(dataset, profiles)
    if not y or y not in dataset.columns:
        numeric = columns_of_type(profiles, NUMERIC)
        y = numeric[0] if numeric else None

    valid_y = valid_y_columns(profiles, x)
    if y and valid_y and y not in valid_y:
        y = valid_y[0]

    if (x, y) != (x_column, y_column):
        logger.debug("axes resolved from (%r, %r) to (%r, %r)", x_column, y_column, x, y)
    return AxisSelection(x_column=x, y_column=y, warnings=y_axis_warnings(dataset, profiles, y))


def build_points(dataset: Dataset, x_column: Optional[str], y_column: Optional[str]) -> List[ChartPoint]:
    if not x_column or not y_column:
        return []
    points: List[ChartPoint] = []
    for index, record in enumerate(dataset.records):
        raw_x = record.get(x_column)
        x_value = index if is_missing(raw_x) else raw_x
        y_value = parse_number(record.get(y_column))
        if not math.isfinite(y_value):
            continue
        points.append(ChartPoint(x=x_value, y=y_value, label=format_axis_value(x_value)))
    return points


def build_pie_groups(
    dataset: Dataset, x_column: Optional[str], y_column: Optional[str], top_n: int = PIE_TOP_N
) -> List[PieGroup]:
    """Sum Y per X label, largest first; groups past ``top_n`` are dropped."""
    if not x_column or not y_column:
        return []
    names = [
        format_axis_value(MISSING_GROUP_LABEL if is_missing(r.get(x_column)) else r.get(x_column))
        for r in dataset.records
    ]
    values = [parse_number(r.get(y_column)) for r in dataset.records]
    frame = pd.DataFrame({"name": names, "value": values}, columns=["name", "value"])
    totals = (
        frame.groupby("name", sort=False)["value"]
        .sum()
        .sort_values(ascending=False, kind="stable")
        .head(top_n)
    )
    return [PieGroup(name=str(name), value=float(value)) for name, value in totals.items()]


def fit_trend(points: Sequence[ChartPoint]) -> Optional[TrendLine]:
    if len(points) < 2:
        return None
    pairs = [(i, p.y) for i, p in enumerate(points) if math.isfinite(p.y) and p.y != 0]
    if len(pairs) < 2:
        return None

    regression = linear_regression([x for x, _ in pairs], [y for _, y in pairs])
    slope, intercept = regression["slope"], regression["intercept"]
    if not (math.isfinite(slope) and math.isfinite(intercept)):
        return None
    return TrendLine(
        slope=slope,
        intercept=intercept,
        start_y=intercept,
        end_y=slope * (len(points) - 1) + intercept,
        r2=regression["r2"],
    )


def project(
    dataset: Dataset,
    profiles: Sequence[ColumnProfile],
    x_column: Optional[str] = None,
    y_column: Optional[str] = None,
    kind: str = "line",
    *,
    show_trend: bool = True,
) -> ChartProjection:
    axes = select_axes(dataset, profiles, x_column, y_column)
    points = build_points(dataset, axes.x_column, axes.y_column)
    pie_groups = build_pie_groups(dataset, axes.x_column, axes.y_column) if kind == "pie" else None
    trend = fit_trend(points) if show_trend else None
    return ChartProjection(
        x_column=axes.x_column,
        y_column=axes.y_column,
        points=points,
        pie_groups=pie_groups,
        trend=trend,
        warnings=axes.warnings,
    )
