'''
Funnel Analytics Test Suite

Test Modules:
-------------
- test_paged_fetcher.py: Short-page / empty-page stops, fetch ceiling,
  fail-fast store errors, malformed rows
- test_record_store.py: SQL builders and the asyncpg-backed store
- test_temporal_mode.py: Mode selection, date ranges, presets
- test_metrics.py: Null-safe ratios, ROI, cost metrics, rounding
- test_lead_source_aggregator.py: Per-source ROI rows in both modes,
  de-duplication, bundle detection, ordering
- test_producer_aggregator.py: Quoted By / Sold By asymmetry and totals
- test_rollups.py: Bucket rollup and producer cross-tab
- test_performance_trend.py: Monthly per-bucket trend and its month windows
- test_summary.py: Pipeline / Activity summaries
- test_analytics_engine.py: Orchestration, mode consistency, idempotence,
  fail-fast, truncation
- test_api.py: FastAPI endpoint contract and error mapping

Running Tests:
--------------
    pip install -e ".[test]"
    pytest funnel_analytics/tests/ -v

Configuration:
--------------
See conftest.py for the in-memory Record Store and shared row builders.
'''

__all__ = []
