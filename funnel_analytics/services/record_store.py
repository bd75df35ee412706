"""
Record Store and Settings Provider interfaces for the analytics engine.

The engine never talks to the database directly. It reads through a
RecordStore, which exposes paged, agency-scoped, optionally date-filtered
queries over the Household, Quote, Sale, LeadSource, MarketingBucket,
SpendLedger and TeamMember collections, plus the agency commission rate.

Store Contract:
- fetch_page() returns the rows in [offset, offset + limit) of a stable
  ordering of the filtered collection.
- A page shorter than `limit` is only ever returned for the final page.
  The Paged Fetcher stops on short pages and relies on this precondition.
- Failures propagate as exceptions; the store does not retry.
- The store is read-only and keeps no per-call state, so concurrent
  fetch_page() calls are safe.

Implementations:
- PostgresRecordStore: asyncpg pool + funnel_analytics.sql query builders
- InMemoryRecordStore (tests/conftest.py): list-backed fake for tests
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Optional

from asyncpg import Pool

from funnel_analytics.models.enums import RecordCollection
from funnel_analytics.sql.record_queries import (
    get_collection_page_query,
    get_commission_rate_query,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecordQuery:
    """
    Filters applied to one collection fetch.

    Attributes:
        agency_id: Owning agency; every collection is filtered by it.
        date_field: Optional column for an inclusive server-side range filter.
        start: First day of the range (required with date_field).
        end: Last day of the range (required with date_field).
    """
    agency_id: str
    date_field: Optional[str] = None
    start: Optional[date] = None
    end: Optional[date] = None

    def __post_init__(self) -> None:
        if self.date_field is not None and (self.start is None or self.end is None):
            raise ValueError("date_field requires both start and end")


class RecordStore(ABC):
    """Read-only access to an agency's records."""

    @abstractmethod
    async def fetch_page(
        self,
        collection: RecordCollection,
        query: RecordQuery,
        offset: int,
        limit: int,
    ) -> List[Dict[str, Any]]:
        """Return rows [offset, offset + limit) of the filtered collection."""

    @abstractmethod
    async def fetch_commission_rate(self, agency_id: str) -> Optional[float]:
        """Return the agency's commission percentage, or None when unset."""


class PostgresRecordStore(RecordStore):
    """
    RecordStore backed by the agency database through an asyncpg pool.

    Each call acquires its own pooled connection, so the engine can run the
    collection fetches concurrently.
    """

    def __init__(self, pool: Pool):
        self._pool = pool

    async def fetch_page(
        self,
        collection: RecordCollection,
        query: RecordQuery,
        offset: int,
        limit: int,
    ) -> List[Dict[str, Any]]:
        sql = get_collection_page_query(collection, query.date_field)
        args: List[Any] = [query.agency_id, limit, offset]
        if query.date_field is not None:
            args.extend([query.start, query.end])

        async with self._pool.acquire() as conn:
            rows = await conn.fetch(sql, *args)

        return [dict(row) for row in rows]

    async def fetch_commission_rate(self, agency_id: str) -> Optional[float]:
        async with self._pool.acquire() as conn:
            row = await conn.fetchrow(get_commission_rate_query(), agency_id)

        if row is None or row['default_commission_rate'] is None:
            return None
        return float(row['default_commission_rate'])
