from __future__ import annotations

from datetime import date, datetime

from explorer.table import (
    ROWS_PER_PAGE,
    format_cell,
    next_sort_state,
    paginate,
    sort_records,
    table_page,
    total_pages,
)


def test_sort_state_cycles_on_same_column():
    column, direction = None, None
    seen = []
    for _ in range(4):
        column, direction = next_sort_state(column, direction, "price")
        seen.append(direction)
    assert seen == ["asc", "desc", None, "asc"]


def test_switching_column_resets_to_ascending():
    assert next_sort_state("price", "desc", "name") == ("name", "asc")
    assert next_sort_state("price", "asc", "name") == ("name", "asc")


def test_numeric_sort_with_text_numbers():
    rows = [{"v": "10"}, {"v": 2}, {"v": "1.5"}, {"v": None}, {"v": -3}]
    asc = [r["v"] for r in sort_records(rows, "v", "asc")]
    assert asc == [-3, "1.5", 2, "10", None]
    desc = [r["v"] for r in sort_records(rows, "v", "desc")]
    assert desc == ["10", 2, "1.5", -3, None]


def test_text_sort_is_case_and_accent_insensitive():
    rows = [{"n": "banana"}, {"n": "Árvore"}, {"n": "abacate"}, {"n": "Cacau"}]
    assert [r["n"] for r in sort_records(rows, "n", "asc")] == ["abacate", "Árvore", "banana", "Cacau"]


def test_unsorted_returns_original_order():
    rows = [{"v": 3}, {"v": 1}]
    assert sort_records(rows, "v", None) == rows
    assert sort_records(rows, None, "asc") == rows


def test_sort_does_not_mutate_input():
    rows = [{"v": 3}, {"v": 1}, {"v": 2}]
    sort_records(rows, "v", "asc")
    assert [r["v"] for r in rows] == [3, 1, 2]


def test_dates_sort_chronologically():
    rows = [{"d": datetime(2024, 3, 1)}, {"d": datetime(2023, 1, 1)}]
    assert sort_records(rows, "d", "asc")[0]["d"] == datetime(2023, 1, 1)


def test_dates_outside_pandas_range_sort():
    rows = [{"d": date(9999, 12, 31)}, {"d": datetime(1500, 1, 1)}, {"d": date(2024, 1, 1)}]
    ordered = [r["d"] for r in sort_records(rows, "d", "asc")]
    assert ordered == [datetime(1500, 1, 1), date(2024, 1, 1), date(9999, 12, 31)]
    assert sort_records(rows, "d", "desc")[0]["d"] == date(9999, 12, 31)


def test_pagination():
    rows = [{"i": i} for i in range(250)]
    assert ROWS_PER_PAGE == 100
    assert total_pages(len(rows)) == 3
    assert [r["i"] for r in paginate(rows, 1)][:2] == [0, 1]
    assert len(paginate(rows, 3)) == 50
    assert paginate(rows, 99) == paginate(rows, 3)
    assert paginate(rows, 0) == paginate(rows, 1)


def test_table_page_on_empty_dataset():
    page = table_page([], 1)
    assert page.total_pages == 0
    assert page.rows == []
    assert page.page == 1


def test_format_cell():
    assert format_cell(None) == "-"
    assert format_cell(datetime(2024, 1, 5)) == "05/01/2024"
    assert format_cell(2.0) == "2"
    assert format_cell("") == ""
