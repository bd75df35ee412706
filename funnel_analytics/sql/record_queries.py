"""
Parameterized SQL query module for Record Store collections.

Every collection is read through the same page query shape:

    SELECT <columns> FROM <table> [JOIN ...]
    WHERE agency_id = $1 [AND <date_column> >= $4 AND <date_column> <= $5]
    ORDER BY <stable key>
    LIMIT $2 OFFSET $3

Parameters are positional asyncpg placeholders:
    $1 agency_id, $2 limit, $3 offset, $4 range start, $5 range end.

Identifiers are cast to text so rows validate straight into the record models.
Quotes and sales are joined to their household to expose the household's
lead_source_id; that is the only reason the join exists.

The ORDER BY is required for correctness: OFFSET windows over an unordered
scan may skip or repeat rows between pages.
"""

from typing import Dict, Optional

from funnel_analytics.models.enums import RecordCollection


# Column lists per collection, already aliased to record model field names
COLLECTION_COLUMNS: Dict[RecordCollection, str] = {
    RecordCollection.HOUSEHOLDS: """
        h.id::text AS id,
        h.status,
        h.lead_source_id::text AS lead_source_id,
        h.created_at,
        h.lead_received_date
    """,
    RecordCollection.QUOTES: """
        q.household_id::text AS household_id,
        q.team_member_id::text AS team_member_id,
        q.items_quoted,
        q.premium_cents,
        q.product_type,
        q.quote_date,
        h.lead_source_id::text AS lead_source_id
    """,
    RecordCollection.SALES: """
        s.household_id::text AS household_id,
        s.team_member_id::text AS team_member_id,
        s.items_sold,
        s.policies_sold,
        s.premium_cents,
        s.product_type,
        s.sale_date,
        h.lead_source_id::text AS lead_source_id
    """,
    RecordCollection.LEAD_SOURCES: """
        ls.id::text AS id,
        ls.name,
        ls.bucket_id::text AS bucket_id
    """,
    RecordCollection.MARKETING_BUCKETS: """
        mb.id::text AS id,
        mb.name,
        mb.order_index
    """,
    RecordCollection.SPEND_LEDGER: """
        sp.lead_source_id::text AS lead_source_id,
        sp.month,
        sp.total_spend_cents
    """,
    RecordCollection.TEAM_MEMBERS: """
        tm.id::text AS id,
        tm.name
    """,
}

# FROM clause per collection (table alias matches the column lists above)
COLLECTION_FROM: Dict[RecordCollection, str] = {
    RecordCollection.HOUSEHOLDS: "lqs_households h",
    RecordCollection.QUOTES: "lqs_quotes q LEFT JOIN lqs_households h ON h.id = q.household_id",
    RecordCollection.SALES: "lqs_sales s LEFT JOIN lqs_households h ON h.id = s.household_id",
    RecordCollection.LEAD_SOURCES: "lead_sources ls",
    RecordCollection.MARKETING_BUCKETS: "marketing_buckets mb",
    RecordCollection.SPEND_LEDGER: "lead_source_monthly_spend sp",
    RecordCollection.TEAM_MEMBERS: "team_members tm",
}

# Alias of the collection's own table, used for agency and date filters
COLLECTION_ALIAS: Dict[RecordCollection, str] = {
    RecordCollection.HOUSEHOLDS: "h",
    RecordCollection.QUOTES: "q",
    RecordCollection.SALES: "s",
    RecordCollection.LEAD_SOURCES: "ls",
    RecordCollection.MARKETING_BUCKETS: "mb",
    RecordCollection.SPEND_LEDGER: "sp",
    RecordCollection.TEAM_MEMBERS: "tm",
}

COLLECTION_ORDER: Dict[RecordCollection, str] = {
    RecordCollection.HOUSEHOLDS: "h.id",
    RecordCollection.QUOTES: "q.id",
    RecordCollection.SALES: "s.id",
    RecordCollection.LEAD_SOURCES: "ls.id",
    RecordCollection.MARKETING_BUCKETS: "mb.order_index ASC NULLS LAST, mb.id",
    RecordCollection.SPEND_LEDGER: "sp.month, sp.id",
    RecordCollection.TEAM_MEMBERS: "tm.id",
}

# Columns that accept a server-side date range filter
DATE_FILTER_COLUMNS: Dict[RecordCollection, str] = {
    RecordCollection.QUOTES: "quote_date",
    RecordCollection.SALES: "sale_date",
    RecordCollection.SPEND_LEDGER: "month",
}


def get_collection_page_query(
    collection: RecordCollection,
    date_field: Optional[str] = None,
) -> str:
    """
    Generate the paged SELECT for one collection.

    Args:
        collection: Collection to read.
        date_field: Optional column to range-filter on. Must be the collection's
            entry in DATE_FILTER_COLUMNS; households have no server-side date
            filter because lead_received_date falls back to created_at.

    Returns:
        str: PostgreSQL query using $1 agency_id, $2 limit, $3 offset and,
            when date_field is given, $4 start and $5 end (inclusive).

    Raises:
        ValueError: If date_field is not filterable for this collection.

    Example:
        >>> sql = get_collection_page_query(RecordCollection.SALES, 'sale_date')
        >>> rows = await conn.fetch(sql, agency_id, 1000, 0, start, end)
    """
    alias = COLLECTION_ALIAS[collection]
    where_conditions = [f"{alias}.agency_id = $1"]

    if date_field is not None:
        if DATE_FILTER_COLUMNS.get(collection) != date_field:
            raise ValueError(
                f"Column '{date_field}' is not a date filter for {collection.value}"
            )
        where_conditions.append(f"{alias}.{date_field} >= $4")
        where_conditions.append(f"{alias}.{date_field} <= $5")

    where_clause = " AND ".join(where_conditions)

    return f"""
    SELECT {COLLECTION_COLUMNS[collection]}
    FROM {COLLECTION_FROM[collection]}
    WHERE {where_clause}
    ORDER BY {COLLECTION_ORDER[collection]}
    LIMIT $2 OFFSET $3
    """


def get_commission_rate_query() -> str:
    """
    Generate the agency commission-rate lookup.

    Returns:
        str: PostgreSQL query using $1 agency_id; yields zero or one row with
            a default_commission_rate column.
    """
    return """
    SELECT default_commission_rate
    FROM agencies
    WHERE id = $1
    """
