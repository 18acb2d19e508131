from __future__ import annotations

import csv
import hashlib
import io
import json
import logging
import math
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any, BinaryIO, Dict, Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

Record = Dict[str, Any]

CSV_SUFFIXES = {".csv", ".txt"}
EXCEL_SUFFIXES = {".xlsx", ".xlsm"}
CSV_DELIMITERS = "\t;,"
SNIFF_LINES = 50

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class Dataset:
    """Immutable rows + ordered column names. Compared and hashed by identity."""

    columns: Tuple[str, ...]
    records: Tuple[Record, ...]

    @property
    def row_count(self) -> int:
        return len(self.records)

    @property
    def column_count(self) -> int:
        return len(self.columns)

    def column_values(self, column: str) -> List[Any]:
        return [record.get(column) for record in self.records]

    @classmethod
    def from_records(cls, records: Iterable[Record], columns: Optional[Sequence[str]] = None) -> "Dataset":
        rows = tuple({str(k): v for k, v in r.items()} for r in records)
        if columns is None:
            seen: Dict[str, None] = {}
            for row in rows:
                for key in row:
                    seen.setdefault(key, None)
            columns = list(seen)
        return cls(columns=tuple(str(c) for c in columns), records=rows)

    @classmethod
    def from_frame(cls, df: pd.DataFrame) -> "Dataset":
        columns = [str(c) for c in df.columns]
        rows = []
        for values in df.itertuples(index=False, name=None):
            rows.append({col: clean_cell(v) for col, v in zip(columns, values)})
        return cls(columns=tuple(columns), records=tuple(rows))

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(list(self.records), columns=list(self.columns))


def clean_cell(value: Any) -> Any:
    """Map pandas/numpy scalars to plain Python cells (None, number, datetime, str)."""
    if value is None or value is pd.NA or value is pd.NaT:
        return None
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, float) and math.isnan(value):
        return None
    return value


def is_missing(value: Any) -> bool:
    if value is None or value is pd.NA or value is pd.NaT:
        return True
    return isinstance(value, float) and math.isnan(value)


def is_empty_cell(value: Any) -> bool:
    return is_missing(value) or (isinstance(value, str) and value == "")


def is_date_value(value: Any) -> bool:
    return isinstance(value, (datetime, date))


def format_date(value: Union[date, datetime]) -> str:
    return value.strftime("%d/%m/%Y")


def cell_to_str(value: Any) -> str:
    """Stringify a cell the way distinct-value counts and text comparisons see it."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if is_date_value(value):
        return value.isoformat()
    return str(value)


def dataset_signature(dataset: Dataset) -> str:
    payload = json.dumps(
        {"columns": list(dataset.columns), "records": list(dataset.records)},
        sort_keys=True,
        default=str,
    )
    return hashlib.sha1(payload.encode("utf-8")).hexdigest()


# ---------------- Ingestion ----------------
def _detect_delimiter(text: str) -> str:
    sample = "\n".join(text.splitlines()[:SNIFF_LINES])
    try:
        return csv.Sniffer().sniff(sample, delimiters=CSV_DELIMITERS).delimiter
    except csv.Error as exc:
        logger.debug("Delimiter detection failed, defaulting to comma: %s", exc)
        return ","


def _read_bytes(source: Union[bytes, bytearray, str, Path, BinaryIO]) -> bytes:
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    if isinstance(source, (str, Path)):
        return Path(source).read_bytes()
    return source.read()


def load_dataset(source: Union[bytes, bytearray, str, Path, BinaryIO], filename: Optional[str] = None) -> Dataset:
    """Read an uploaded CSV/XLSX file into a Dataset.

    CSV cells are kept as text (empty cells stay ``""``) so that locale-formatted
    numbers reach the parser untouched; spreadsheet cells keep their native
    numbers and dates.
    """
    if filename is None and isinstance(source, (str, Path)):
        filename = str(source)
    suffix = Path(filename or "").suffix.lower()
    raw = _read_bytes(source)

    if suffix in CSV_SUFFIXES:
        text = raw.decode("utf-8-sig")
        df = pd.read_csv(
            io.StringIO(text),
            sep=_detect_delimiter(text),
            dtype=str,
            keep_default_na=False,
        )
    elif suffix in EXCEL_SUFFIXES:
        df = pd.read_excel(io.BytesIO(raw), engine="openpyxl")
    else:
        raise ValueError(f"unsupported file type: {suffix or filename!r}")

    df = df.loc[:, ~df.columns.duplicated()]
    return Dataset.from_frame(df)
