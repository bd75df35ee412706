"""
Bounded pagination over Record Store collections.

The Record Store has no streaming API and collection sizes are unknown in
advance, so each collection is read as a sequence of [offset, offset + limit)
windows until one of:

1. an empty page is returned,
2. a short page (fewer rows than requested) is returned, or
3. the hard fetch ceiling (max_rows) is reached.

Stopping on a short page relies on the RecordStore precondition that only the
final page can be short.

Reaching the ceiling is a capacity condition, not a silent cut-off: the
fetcher probes for one more row and, if the collection continues, either
flags the result as truncated (and logs a warning) or raises
FetchCeilingExceededError when fail_on_ceiling is set.

Any store failure aborts the whole collection and surfaces as a single
RecordStoreError; rows from pages fetched before the failure are discarded.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel

from funnel_analytics.core.errors import FetchCeilingExceededError, RecordStoreError
from funnel_analytics.models.enums import RecordCollection
from funnel_analytics.services.record_store import RecordQuery, RecordStore

logger = logging.getLogger(__name__)

ModelT = TypeVar('ModelT', bound=BaseModel)

DEFAULT_PAGE_SIZE = 1000
DEFAULT_MAX_ROWS = 20000


@dataclass(frozen=True)
class FetchResult(Generic[ModelT]):
    """
    Fully materialized rows of one collection.

    Attributes:
        collection: Collection that was read.
        rows: Parsed rows that passed the optional row filter.
        rows_scanned: Raw rows returned by the store, before filtering.
        pages: Number of page requests that returned rows.
        truncated: True when the collection has rows beyond the fetch ceiling.
    """
    collection: RecordCollection
    rows: List[ModelT]
    rows_scanned: int
    pages: int
    truncated: bool = False


async def fetch_all(
    store: RecordStore,
    collection: RecordCollection,
    query: RecordQuery,
    model: Type[ModelT],
    *,
    page_size: int = DEFAULT_PAGE_SIZE,
    max_rows: int = DEFAULT_MAX_ROWS,
    row_filter: Optional[Callable[[ModelT], bool]] = None,
    fail_on_ceiling: bool = False,
) -> FetchResult[ModelT]:
    """
    Read every row of a collection, page by page.

    Args:
        store: Record Store to read from.
        collection: Collection to read.
        query: Agency and optional server-side date filter.
        model: Record model each raw row is validated into.
        page_size: Rows requested per page.
        max_rows: Hard ceiling on raw rows read from the store.
        row_filter: Optional client-side predicate applied to parsed rows, for
            filters the store cannot express (e.g. date fallbacks).
        fail_on_ceiling: Raise instead of flagging truncation.

    Returns:
        FetchResult with the parsed, filtered rows.

    Raises:
        RecordStoreError: If any page request fails or returns a malformed row.
        FetchCeilingExceededError: If the ceiling is hit and fail_on_ceiling is set.
    """
    if page_size <= 0 or max_rows <= 0:
        raise ValueError("page_size and max_rows must be positive")

    rows: List[ModelT] = []
    offset = 0
    pages = 0
    reached_ceiling = False

    logger.debug(f"Fetching {collection.value} for agency {query.agency_id}")

    while True:
        if offset >= max_rows:
            reached_ceiling = True
            break

        limit = min(page_size, max_rows - offset)
        page = await _fetch_page(store, collection, query, offset, limit)
        if not page:
            break

        pages += 1
        parsed = _parse_page(collection, page, model, offset)
        if row_filter is not None:
            parsed = [row for row in parsed if row_filter(row)]
        rows.extend(parsed)
        offset += len(page)

        if len(page) < limit:
            break

    truncated = False
    if reached_ceiling:
        # A full final page at the ceiling says nothing about what follows
        truncated = bool(await _fetch_page(store, collection, query, offset, 1))
        if truncated:
            if fail_on_ceiling:
                raise FetchCeilingExceededError(collection.value, max_rows)
            logger.warning(
                f"{collection.value} for agency {query.agency_id} exceeds the fetch "
                f"ceiling of {max_rows} rows; results are truncated"
            )

    logger.info(
        f"Fetched {len(rows)} {collection.value} rows "
        f"({offset} scanned, {pages} pages) for agency {query.agency_id}"
    )

    return FetchResult(
        collection=collection,
        rows=rows,
        rows_scanned=offset,
        pages=pages,
        truncated=truncated,
    )


async def _fetch_page(
    store: RecordStore,
    collection: RecordCollection,
    query: RecordQuery,
    offset: int,
    limit: int,
) -> List[Dict[str, Any]]:
    try:
        return await store.fetch_page(collection, query, offset, limit)
    except Exception as e:
        logger.error(
            f"Record Store rejected {collection.value} page at offset {offset}: {e}",
            exc_info=True,
        )
        raise RecordStoreError(collection.value, e, offset=offset) from e


def _parse_page(
    collection: RecordCollection,
    page: List[Dict[str, Any]],
    model: Type[ModelT],
    offset: int,
) -> List[ModelT]:
    try:
        return [model.model_validate(row) for row in page]
    except ValueError as e:
        # pydantic.ValidationError subclasses ValueError
        logger.error(f"Malformed {collection.value} row near offset {offset}: {e}")
        raise RecordStoreError(collection.value, e, offset=offset) from e
