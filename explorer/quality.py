from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence

import numpy as np
import pandas as pd

from explorer.columns import NUMERIC, ColumnProfile, profile_map
from explorer.dataset import Dataset, Record, cell_to_str, is_empty_cell
from explorer.stats import numeric_values

EMPTY_WEIGHT = 30.0
DUPLICATE_WEIGHT = 30.0
OUTLIER_WEIGHT = 20.0
OUTLIER_PENALTY_CAP = 20.0
OUTLIER_SIGMA = 2.0


@dataclass(frozen=True)
class ColumnQuality:
    empty_count: int
    inferred_type: str
    duplicate_count: int
    outlier_count: int
    empty_ratio: Optional[float]


@dataclass(frozen=True)
class QualityReport:
    row_count: int
    total_cells: int
    empty_cells: int
    duplicate_row_count: int
    per_column: Dict[str, ColumnQuality]
    score: float

    @property
    def total_outliers(self) -> int:
        return sum(c.outlier_count for c in self.per_column.values())

    @property
    def empty_ratio(self) -> Optional[float]:
        return _ratio(self.empty_cells, self.total_cells)

    @property
    def duplicate_ratio(self) -> Optional[float]:
        return _ratio(self.duplicate_row_count, self.row_count)


def _ratio(part: int, whole: int) -> Optional[float]:
    return part / whole if whole else None


def row_key(record: Record) -> str:
    """Canonical JSON form of a row; equal rows give equal keys."""
    return json.dumps(record, sort_keys=True, default=str, ensure_ascii=False)


def count_outliers(values: Sequence[float], sigma: float = OUTLIER_SIGMA) -> int:
    arr = np.asarray(list(values), dtype=float)
    if arr.size <= 2:
        return 0
    mean = arr.mean()
    std = arr.std()
    if not std > 0:
        return 0
    return int((np.abs(arr - mean) > sigma * std).sum())


def quality_score(row_count: int, total_cells: int, empty_cells: int, duplicate_rows: int, outliers: int) -> float:
    if row_count == 0:
        return 0.0
    empty_penalty = (empty_cells / total_cells) * EMPTY_WEIGHT if total_cells else 0.0
    duplicate_penalty = (duplicate_rows / row_count) * DUPLICATE_WEIGHT
    outlier_penalty = min((outliers / row_count) * OUTLIER_WEIGHT, OUTLIER_PENALTY_CAP)
    return float(max(0.0, min(100.0, 100.0 - empty_penalty - duplicate_penalty - outlier_penalty)))


def _column_quality(values: Sequence[Any], profile: Optional[ColumnProfile], row_count: int) -> ColumnQuality:
    series = pd.Series(list(values), dtype=object)
    empty_count = int(series.map(is_empty_cell).astype(bool).sum())
    duplicate_count = row_count - int(series.map(cell_to_str).nunique())
    inferred_type = profile.type if profile is not None else "categorical"

    outlier_count = 0
    if inferred_type == NUMERIC:
        numeric = numeric_values(values)
        if len(numeric) > 2:
            outlier_count = count_outliers(numeric)

    return ColumnQuality(
        empty_count=empty_count,
        inferred_type=inferred_type,
        duplicate_count=duplicate_count,
        outlier_count=outlier_count,
        empty_ratio=_ratio(empty_count, row_count),
    )


def score_quality(dataset: Dataset, profiles: Sequence[ColumnProfile]) -> QualityReport:
    row_count = dataset.row_count
    total_cells = row_count * dataset.column_count
    by_name = profile_map(profiles)

    per_column: Dict[str, ColumnQuality] = {}
    for col in dataset.columns:
        per_column[col] = _column_quality(dataset.column_values(col), by_name.get(col), row_count)

    empty_cells = sum(c.empty_count for c in per_column.values())
    unique_rows = pd.Series([row_key(r) for r in dataset.records], dtype=object).nunique()
    duplicate_rows = row_count - int(unique_rows)
    outliers = sum(c.outlier_count for c in per_column.values())

    return QualityReport(
        row_count=row_count,
        total_cells=total_cells,
        empty_cells=empty_cells,
        duplicate_row_count=duplicate_rows,
        per_column=per_column,
        score=quality_score(row_count, total_cells, empty_cells, duplicate_rows, outliers),
    )
