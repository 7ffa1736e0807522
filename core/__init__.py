"""Core (UI-agnostic) dashboard logic.

This package contains:
- static fixture data (sales trend, drill-down datasets, seed records)
- drill-down navigation and widget layout state
- in-memory stores for dashboards, reports, schedules and data sources
- dashboard view payloads (JSON-serializable)
- chart helpers (Altair -> Vega-Lite spec dict)
"""
