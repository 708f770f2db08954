# -*- coding: utf-8 -*-
"""
Timeframe Module Tests
======================

Tests for coinstrat/utils/timeframe.py
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pandas as pd
import pytest

from coinstrat.utils.timeframe import (
    Duration,
    to_days,
    to_day,
    daily_calendar,
    week_start_monday,
    month_key,
    weekly_closes,
)


class TestDuration:
    """Duration 테스트"""

    def test_parse_days(self):
        d = Duration.parse("365d")
        assert d.value == 365
        assert d.unit == "d"
        assert d.days == 365

    def test_parse_weeks(self):
        assert Duration.parse("13w").days == 91

    def test_parse_case_insensitive(self):
        assert Duration.parse(" 30D ").days == 30

    def test_parse_invalid(self):
        with pytest.raises(ValueError):
            Duration.parse("3 months")

    def test_str(self):
        assert str(Duration(13, "w")) == "13w"


class TestToDays:
    """config 값 -> 일수"""

    def test_int(self):
        assert to_days(20) == 20

    def test_string(self):
        assert to_days("13w") == 91

    def test_duration(self):
        assert to_days(Duration(2, "w")) == 14

    def test_non_positive(self):
        with pytest.raises(ValueError):
            to_days(0)


class TestCalendar:
    """일봉 캘린더"""

    def test_inclusive_range(self):
        cal = daily_calendar("2024-01-01", "2024-01-10")
        assert len(cal) == 10
        assert cal[0] == pd.Timestamp("2024-01-01")
        assert cal[-1] == pd.Timestamp("2024-01-10")
        assert cal.name == "date"

    def test_start_after_end_is_empty(self):
        assert len(daily_calendar("2024-02-01", "2024-01-01")) == 0

    def test_to_day_drops_time_and_tz(self):
        ts = to_day(pd.Timestamp("2024-03-05 23:30", tz="America/New_York"))
        # 23:30 EST = 다음날 04:30 UTC
        assert ts == pd.Timestamp("2024-03-06")
        assert ts.tzinfo is None

    def test_week_start_monday(self):
        # 2024-01-03 = 수요일
        assert week_start_monday("2024-01-03") == pd.Timestamp("2024-01-01")
        assert week_start_monday("2024-01-07") == pd.Timestamp("2024-01-01")
        assert week_start_monday("2024-01-08") == pd.Timestamp("2024-01-08")

    def test_month_key(self):
        assert month_key("2024-02-29") == "2024-02"


class TestWeeklyCloses:
    """일요일 마감 주봉"""

    def test_labels_are_sundays(self):
        idx = pd.date_range("2024-01-01", periods=14, freq="D")   # 월 ~ 일 x2
        daily = pd.Series(range(14), index=idx, dtype=float)
        weekly = weekly_closes(daily)
        assert list(weekly.index) == [pd.Timestamp("2024-01-07"), pd.Timestamp("2024-01-14")]
        assert list(weekly) == [6.0, 13.0]

    def test_empty(self):
        assert weekly_closes(pd.Series([], dtype=float)).empty
