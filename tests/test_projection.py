from __future__ import annotations

import math

import pytest

from explorer.columns import classify_columns
from explorer.dataset import Dataset
from explorer.projection import (
    PIE_TOP_N,
    ChartPoint,
    build_pie_groups,
    build_points,
    default_x_column,
    fit_trend,
    project,
    select_axes,
    valid_x_columns,
    valid_y_columns,
)


def _project(dataset, *args, **kwargs):
    return project(dataset, classify_columns(dataset), *args, **kwargs)


def test_sales_end_to_end(sales_dataset):
    projection = _project(sales_dataset, "Data", "Vendas", "line")
    assert [p.y for p in projection.points] == [1500.0, 2000.0]
    assert [p.label for p in projection.points] == ["2024-01-01", "2024-02-01"]
    assert projection.pie_groups is None
    assert projection.trend is not None
    assert projection.trend.slope > 0
    assert projection.trend.slope == pytest.approx(500.0)
    assert projection.trend.start_y == pytest.approx(1500.0)
    assert projection.trend.end_y == pytest.approx(2000.0)
    assert projection.warnings == ()


def test_axes_auto_selection_prefers_dates(mixed_dataset):
    axes = select_axes(mixed_dataset, classify_columns(mixed_dataset))
    assert axes.x_column == "Month"
    assert axes.y_column == "Revenue"


def test_axes_fall_back_to_low_cardinality_categorical():
    rows = [{"Name": f"n{i}", "Region": ["N", "S"][i % 2], "Total": i} for i in range(10)]
    dataset = Dataset.from_records(rows, columns=["Name", "Region", "Total"])
    profiles = classify_columns(dataset)
    assert default_x_column(dataset, profiles) == "Region"


def test_axes_fall_back_to_first_column():
    dataset = Dataset.from_records([{"a": 1, "b": 2}, {"a": 3, "b": 4}])
    profiles = classify_columns(dataset)
    axes = select_axes(dataset, profiles)
    assert axes.x_column == "a"
    assert axes.y_column == "b"


def test_invalid_axes_are_corrected(mixed_dataset):
    profiles = classify_columns(mixed_dataset)
    axes = select_axes(mixed_dataset, profiles, "Gone", "Region")
    assert axes.x_column == "Month"
    assert axes.y_column == "Revenue"

    same = select_axes(mixed_dataset, profiles, "Revenue", "Revenue")
    assert same.x_column == "Revenue"
    assert same.y_column == "Units"


def test_valid_axis_lists(mixed_dataset):
    profiles = classify_columns(mixed_dataset)
    assert valid_y_columns(profiles, "Revenue") == ["Units"]
    assert valid_x_columns(profiles, "Revenue") == ["Region", "Month", "Units", "Note"]


def test_date_y_axis_emits_warning_without_blocking():
    rows = [{"Start": "2024-01-01", "End": "2024-02-01"}, {"Start": "2024-01-05", "End": "2024-03-01"}]
    dataset = Dataset.from_records(rows)
    projection = _project(dataset, "Start", "End")
    assert projection.y_column == "End"
    assert len(projection.warnings) == 1
    assert "swapping" in projection.warnings[0]
    assert len(projection.points) == 2


def test_missing_x_uses_row_index():
    dataset = Dataset.from_records([{"x": None, "y": "5"}, {"x": "b", "y": "7"}], columns=["x", "y"])
    points = build_points(dataset, "x", "y")
    assert [p.x for p in points] == [0, "b"]
    assert [p.label for p in points] == ["0", "b"]


def test_points_are_always_finite():
    values = ["abc", None, float("inf"), "1.234,56", 45000, ""]
    dataset = Dataset.from_records([{"k": i, "v": v} for i, v in enumerate(values)], columns=["k", "v"])
    points = build_points(dataset, "k", "v")
    assert len(points) == len(values)
    assert all(math.isfinite(p.y) for p in points)


def test_no_axes_no_points(sales_dataset):
    assert build_points(sales_dataset, None, "Vendas") == []
    assert build_pie_groups(sales_dataset, "Data", None) == []


def test_pie_groups_sum_sort_and_truncate():
    rows = [{"cat": f"c{i:02d}", "v": i} for i in range(15)]
    rows += [{"cat": "c00", "v": 100}, {"cat": None, "v": 3}]
    dataset = Dataset.from_records(rows, columns=["cat", "v"])
    groups = build_pie_groups(dataset, "cat", "v")
    assert len(groups) == PIE_TOP_N
    assert groups[0].name == "c00"
    assert groups[0].value == 100
    assert [g.value for g in groups] == sorted([g.value for g in groups], reverse=True)
    assert "c01" not in [g.name for g in groups]


def test_pie_only_for_pie_kind(mixed_dataset):
    projection = _project(mixed_dataset, "Region", "Units", "pie")
    assert {g.name: g.value for g in projection.pie_groups} == {"North": 22.0, "South": 26.0, "East": 30.0}


def test_trend_requires_two_nonzero_points():
    assert fit_trend([]) is None
    assert fit_trend([ChartPoint(x=0, y=5.0, label="0")]) is None
    zeros = [ChartPoint(x=i, y=0.0, label=str(i)) for i in range(5)]
    assert fit_trend(zeros) is None
    one_valid = zeros[:4] + [ChartPoint(x=4, y=3.0, label="4")]
    assert fit_trend(one_valid) is None


def test_trend_skips_zeros_but_spans_all_points():
    points = [ChartPoint(x=i, y=y, label=str(i)) for i, y in enumerate([2.0, 0.0, 6.0, 8.0])]
    trend = fit_trend(points)
    assert trend is not None
    assert trend.slope == pytest.approx(2.0)
    assert trend.intercept == pytest.approx(2.0)
    assert trend.end_y == pytest.approx(8.0)


def test_trend_toggle(sales_dataset):
    assert _project(sales_dataset, "Data", "Vendas", show_trend=False).trend is None


def test_single_row_has_no_trend():
    dataset = Dataset.from_records([{"d": "2024-01-01", "v": "10"}])
    assert _project(dataset, "d", "v").trend is None
