"""
Temporal mode selection for the analytics engine.

A single nullable date range decides how the whole computation reads time:

- No range -> Pipeline mode. Households are classified by their current
  `status` ('lead' / 'quoted' / 'sold'); quote and sale rows are read in full.
- Range present -> Activity mode. `status` is ignored. Leads are households
  whose lead_received_date (falling back to created_at) is in range; quotes and
  sales are the rows whose quote_date / sale_date is in range.

Status is a lagging indicator: a household quoted last month and sold this
month must still count as a quote in last month's window, so windowed
reporting keys off event dates only.

Ranges are inclusive and day-granular. Spend ledger entries are monthly, so
the spend window widens to whole months (first day of the start month through
the last day of the end month).
"""

import calendar
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional, Union

from funnel_analytics.core.errors import InvalidDateRangeError
from funnel_analytics.models.enums import AnalyticsMode, DateRangePreset


@dataclass(frozen=True)
class DateRange:
    """Inclusive [start, end] day range."""
    start: date
    end: date

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise InvalidDateRangeError(self.start, self.end)

    def contains(self, day: Optional[date]) -> bool:
        return day is not None and self.start <= day <= self.end

    @property
    def spend_start(self) -> date:
        """First day of the month containing start."""
        return self.start.replace(day=1)

    @property
    def spend_end(self) -> date:
        """Last day of the month containing end."""
        last_day = calendar.monthrange(self.end.year, self.end.month)[1]
        return self.end.replace(day=last_day)


def select_mode(date_range: Optional[DateRange]) -> AnalyticsMode:
    """
    Decide the temporal mode for a computation.

    This is the only place the engine branches on the presence of a range;
    everything downstream dispatches on the returned mode.
    """
    if date_range is None:
        return AnalyticsMode.PIPELINE
    return AnalyticsMode.ACTIVITY


def date_range_from_preset(
    preset: Union[DateRangePreset, str],
    today: Optional[date] = None,
) -> Optional[DateRange]:
    """
    Resolve a named preset to a date range ending today.

    Args:
        preset: One of last30, last60, last90, quarter, ytd, all.
        today: Reference day (default: date.today()).

    Returns:
        DateRange, or None for 'all' (which selects Pipeline mode).

    Raises:
        ValueError: If preset is not a known preset name.

    Example:
        >>> date_range_from_preset('quarter', today=date(2026, 5, 14))
        DateRange(start=datetime.date(2026, 4, 1), end=datetime.date(2026, 5, 14))
    """
    preset = DateRangePreset(preset)
    if today is None:
        today = date.today()

    if preset == DateRangePreset.LAST_30:
        return DateRange(today - timedelta(days=30), today)
    if preset == DateRangePreset.LAST_60:
        return DateRange(today - timedelta(days=60), today)
    if preset == DateRangePreset.LAST_90:
        return DateRange(today - timedelta(days=90), today)
    if preset == DateRangePreset.QUARTER:
        quarter_month = 3 * ((today.month - 1) // 3) + 1
        return DateRange(date(today.year, quarter_month, 1), today)
    if preset == DateRangePreset.YTD:
        return DateRange(date(today.year, 1, 1), today)
    return None
