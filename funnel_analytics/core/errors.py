"""
Error taxonomy for the funnel analytics engine.

Hierarchy:
    AnalyticsError
    ├── RecordStoreError
    ├── FetchCeilingExceededError
    └── InvalidDateRangeError

Missing reference data and zero denominators are not errors: they render as
"Unknown"/"Unassigned"/"Unattributed" labels and None metrics respectively.
"""

from typing import Any, Dict, Optional


class AnalyticsError(Exception):
    """Base exception for all analytics engine errors."""

    def __init__(self, message: str, code: str = "ANALYTICS_ERROR", details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.details = details or {}
        super().__init__(f"[{code}] {message}")


class RecordStoreError(AnalyticsError):
    """A Record Store query was rejected; the whole collection fetch is aborted."""

    def __init__(self, collection: str, cause: Optional[BaseException] = None, offset: Optional[int] = None):
        self.collection = collection
        self.offset = offset
        reason = str(cause) if cause is not None else "unknown error"
        super().__init__(
            f"Failed to fetch '{collection}': {reason}",
            code="RECORD_STORE_FAILED",
            details={"collection": collection, "offset": offset},
        )


class FetchCeilingExceededError(AnalyticsError):
    """A collection reached the hard fetch ceiling while fail_on_fetch_ceiling is set."""

    def __init__(self, collection: str, max_rows: int):
        self.collection = collection
        self.max_rows = max_rows
        super().__init__(
            f"Collection '{collection}' reached the fetch ceiling of {max_rows} rows",
            code="FETCH_CEILING_EXCEEDED",
            details={"collection": collection, "max_rows": max_rows},
        )


class InvalidDateRangeError(AnalyticsError, ValueError):
    """Date range start falls after its end."""

    def __init__(self, start: Any, end: Any):
        super().__init__(
            f"Date range start {start} is after end {end}",
            code="INVALID_DATE_RANGE",
            details={"start": str(start), "end": str(end)},
        )
