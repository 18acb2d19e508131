from __future__ import annotations

import pytest

from explorer.dataset import Dataset
from explorer.session import clear_sessions


@pytest.fixture(autouse=True)
def _fresh_sessions():
    clear_sessions()
    yield
    clear_sessions()


@pytest.fixture
def sales_dataset() -> Dataset:
    return Dataset.from_records(
        [
            {"Data": "2024-01-01", "Vendas": "1.500,00"},
            {"Data": "2024-02-01", "Vendas": "2.000,00"},
        ],
        columns=["Data", "Vendas"],
    )


@pytest.fixture
def mixed_dataset() -> Dataset:
    rows = []
    for i in range(12):
        rows.append(
            {
                "Region": ["North", "South", "East"][i % 3],
                "Month": f"2024-{(i % 12) + 1:02d}-01",
                "Revenue": f"{1000 + i * 10},50",
                "Units": i + 1,
                "Note": "" if i % 4 == 0 else f"note {i}",
            }
        )
    return Dataset.from_records(rows, columns=["Region", "Month", "Revenue", "Units", "Note"])
