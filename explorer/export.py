from __future__ import annotations

import io
import re
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from explorer.dataset import Dataset

EXPORT_FORMATS: Dict[str, Tuple[str, str]] = {
    "csv": ("text/csv", ".csv"),
    "xlsx": ("application/vnd.openxmlformats-officedocument.spreadsheetml.sheet", ".xlsx"),
}


def export_filename(filename: str, fmt: str) -> str:
    stem = re.sub(r"\.[^/.]+$", "", filename or "") or "export"
    return f"{stem}{EXPORT_FORMATS[fmt][1]}"


def export_frame(data: Dataset, columns: Optional[Sequence[Mapping[str, str]]] = None) -> pd.DataFrame:
    """Select and relabel the raw dataset columns for download."""
    if columns is None:
        columns = [{"key": col, "label": col} for col in data.columns]
    keys: List[str] = [c["key"] for c in columns]
    labels = {c["key"]: c.get("label") or c["key"] for c in columns}
    return pd.DataFrame(list(data.records), columns=keys).rename(columns=labels)


def export_data(
    filename: str,
    data: Dataset,
    fmt: str = "csv",
    columns: Optional[Sequence[Mapping[str, str]]] = None,
) -> Tuple[str, bytes, str]:
    """Serialize the raw dataset; returns ``(download name, content, mime type)``."""
    if fmt not in EXPORT_FORMATS:
        raise ValueError(f"unsupported export format: {fmt!r}")
    frame = export_frame(data, columns)
    if fmt == "csv":
        content = frame.to_csv(index=False).encode("utf-8")
    else:
        buffer = io.BytesIO()
        frame.to_excel(buffer, index=False, engine="openpyxl")
        content = buffer.getvalue()
    return export_filename(filename, fmt), content, EXPORT_FORMATS[fmt][0]
