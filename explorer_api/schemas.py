from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from explorer.dataset import Dataset
from explorer.table import ROWS_PER_PAGE


class DatasetModel(BaseModel):
    columns: List[str]
    rows: List[Dict[str, Any]] = Field(default_factory=list)

    def to_dataset(self) -> Dataset:
        return Dataset.from_records(self.rows, columns=self.columns)


class SelectionModel(BaseModel):
    sort_column: Optional[str] = None
    sort_direction: Optional[str] = None
    page: int = 1
    page_size: int = ROWS_PER_PAGE
    x_column: Optional[str] = None
    y_column: Optional[str] = None
    chart_kind: str = "line"
    show_trend: bool = False


class ExplorerRequest(BaseModel):
    dataset: DatasetModel
    selection: SelectionModel = Field(default_factory=SelectionModel)


class SortToggleRequest(ExplorerRequest):
    column: str


class ExportColumnModel(BaseModel):
    key: str
    label: Optional[str] = None


class ExportRequest(BaseModel):
    dataset: DatasetModel
    filename: str = "export.csv"
    format: Literal["csv", "xlsx"] = "csv"
    columns: Optional[List[ExportColumnModel]] = None
