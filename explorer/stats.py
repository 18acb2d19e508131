from __future__ import annotations

from typing import Dict, Literal, Sequence

import numpy as np

from explorer.columns import NUMERIC, ColumnProfile, present_values
from explorer.dataset import Dataset
from explorer.parsing import is_numeric_like, parse_number

TREND_THRESHOLD = 0.01

TrendDirection = Literal["up", "down", "stable"]


def summary(values: Sequence[float]) -> Dict[str, float]:
    arr = np.asarray(list(values), dtype=float)
    if arr.size == 0:
        return {"count": 0, "mean": 0.0, "median": 0.0, "std": 0.0, "min": 0.0, "max": 0.0}
    return {
        "count": int(arr.size),
        "mean": float(arr.mean()),
        "median": float(np.median(arr)),
        "std": float(arr.std()),
        "min": float(arr.min()),
        "max": float(arr.max()),
    }


def linear_regression(xs: Sequence[float], ys: Sequence[float]) -> Dict[str, float]:
    """Ordinary least squares. A degenerate x spread yields a non-finite slope."""
    n = min(len(xs), len(ys))
    if n < 2:
        return {"slope": 0.0, "intercept": 0.0, "r2": 0.0}

    x = np.asarray(list(xs)[:n], dtype=float)
    y = np.asarray(list(ys)[:n], dtype=float)
    sum_x, sum_y = x.sum(), y.sum()
    sum_xy, sum_x2 = (x * y).sum(), (x * x).sum()

    with np.errstate(divide="ignore", invalid="ignore"):
        slope = (n * sum_xy - sum_x * sum_y) / (n * sum_x2 - sum_x * sum_x)
        intercept = y.mean() - slope * x.mean()
        predicted = slope * x + intercept
        ss_res = float(((y - predicted) ** 2).sum())
    ss_tot = float(((y - y.mean()) ** 2).sum())
    r2 = 0.0 if ss_tot == 0 else 1 - ss_res / ss_tot

    return {"slope": float(slope), "intercept": float(intercept), "r2": float(r2)}


def detect_trend(slope: float, threshold: float = TREND_THRESHOLD) -> TrendDirection:
    if slope > threshold:
        return "up"
    if slope < -threshold:
        return "down"
    return "stable"


def _format_coefficient(value: float) -> str:
    if abs(value) >= 1000:
        mantissa, exponent = f"{value:.2e}".split("e")
        return f"{mantissa}e{int(exponent):+d}"
    return f"{value:.4f}"


def format_equation(slope: float, intercept: float) -> str:
    return f"y = {_format_coefficient(slope)}x + {_format_coefficient(intercept)}"


def numeric_values(values: Sequence[object]) -> list[float]:
    return [parse_number(v) for v in present_values(values) if is_numeric_like(v)]


def compute_column_statistics(dataset: Dataset, profiles: Sequence[ColumnProfile]) -> Dict[str, Dict[str, float]]:
    return {
        p.name: summary(numeric_values(dataset.column_values(p.name)))
        for p in profiles
        if p.type == NUMERIC
    }
