from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Literal, Sequence

import pandas as pd

from explorer.dataset import Dataset, cell_to_str, is_empty_cell
from explorer.parsing import is_date_like, is_numeric_like

logger = logging.getLogger(__name__)

ColumnType = Literal["date", "numeric", "categorical"]

DATE: ColumnType = "date"
NUMERIC: ColumnType = "numeric"
CATEGORICAL: ColumnType = "categorical"

# Real spreadsheets have blanks and stray text; a simple majority decides.
MAJORITY_THRESHOLD = 0.5


@dataclass(frozen=True)
class ColumnProfile:
    name: str
    type: ColumnType
    unique_count: int


def present_values(values: Sequence[object]) -> pd.Series:
    series = pd.Series(list(values), dtype=object)
    empty = series.map(is_empty_cell).astype(bool)
    return series[~empty]


def classify_column(name: str, values: Sequence[object]) -> ColumnProfile:
    present = present_values(values)
    total = len(present)
    unique_count = int(present.map(cell_to_str).nunique())

    # Date is checked before Numeric and wins a half-and-half split.
    date_count = int(present.map(is_date_like).astype(bool).sum())
    if total and date_count >= total * MAJORITY_THRESHOLD:
        logger.debug("column %r -> date (%d/%d date-like)", name, date_count, total)
        return ColumnProfile(name=name, type=DATE, unique_count=unique_count)

    numeric_count = int(present.map(is_numeric_like).astype(bool).sum())
    if numeric_count > total * MAJORITY_THRESHOLD:
        logger.debug("column %r -> numeric (%d/%d numeric)", name, numeric_count, total)
        return ColumnProfile(name=name, type=NUMERIC, unique_count=unique_count)

    logger.debug("column %r -> categorical", name)
    return ColumnProfile(name=name, type=CATEGORICAL, unique_count=unique_count)


def classify_columns(dataset: Dataset) -> List[ColumnProfile]:
    return [classify_column(col, dataset.column_values(col)) for col in dataset.columns]


def columns_of_type(profiles: Sequence[ColumnProfile], column_type: ColumnType) -> List[str]:
    return [p.name for p in profiles if p.type == column_type]


def profile_map(profiles: Sequence[ColumnProfile]) -> Dict[str, ColumnProfile]:
    return {p.name: p for p in profiles}
