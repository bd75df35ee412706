"""
Funnel Analytics Backend Package.

Marketing attribution and sales-funnel analytics for insurance agencies:
turns households, quotes, sales and the monthly spend ledger into
lead-source ROI, bucket rollups, producer performance and summary metrics.

Subpackages:
    - api: FastAPI route handlers
    - core: Configuration, database, dependencies and errors
    - models: Pydantic schemas and enums
    - services: Paged fetching, temporal mode selection and aggregations
    - sql: Parameterized Record Store queries
"""

__version__ = "1.0.0"
