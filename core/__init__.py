"""Core (UI-agnostic) business-registry logic.

This package contains:
- registry fetching and record normalization (Socrata JSON -> pandas)
- filter normalization and the search/zip filter pass
- aggregation and page compute functions (JSON-serializable payloads)
- selection / view-state transitions
- chart helpers (Altair -> Vega-Lite spec dict)
"""
