"""
SQL Query Module for the funnel analytics backend.

Provides parameterized SQL queries for paging through Record Store
collections and for the agency commission-rate lookup.

Example usage:
    from funnel_analytics.sql import get_collection_page_query, DATE_FILTER_COLUMNS

    sql = get_collection_page_query(RecordCollection.QUOTES, 'quote_date')
"""

from funnel_analytics.sql.record_queries import (
    get_collection_page_query,
    get_commission_rate_query,
    DATE_FILTER_COLUMNS,
)

__all__ = [
    'get_collection_page_query',
    'get_commission_rate_query',
    'DATE_FILTER_COLUMNS',
]
