"""Core (UI-agnostic) tabular exploration logic.

This package contains:
- dataset model + ingestion (CSV/XLSX -> Dataset)
- locale-tolerant number parsing and spreadsheet date serials
- column classification, table sorting/pagination, quality scoring
- chart projection (points, pie groups, trend) and Altair -> Vega-Lite specs
- memoized session payloads (JSON-serializable) for the API and Streamlit app
"""
