"""
Utils Package
=============

Rolling math + calendar helpers for coinstrat.
"""
from .rolling import (
    rolling_mean,
    pct_change,
    diff,
    rolling_fraction,
    meets_persistence,
)
from .timeframe import (
    Duration,
    DAYS_PER_WEEK,
    to_days,
    to_day,
    utc_today,
    daily_calendar,
    week_start_monday,
    month_key,
    weekly_closes,
)

__all__ = [
    'rolling_mean',
    'pct_change',
    'diff',
    'rolling_fraction',
    'meets_persistence',
    'Duration',
    'DAYS_PER_WEEK',
    'to_days',
    'to_day',
    'utc_today',
    'daily_calendar',
    'week_start_monday',
    'month_key',
    'weekly_closes',
]
