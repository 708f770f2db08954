"""
Calendar / Timeframe Helpers
============================

일봉 캘린더 기준의 기간/날짜 유틸리티:
- Duration: "365d", "13w" 같은 기간 표기 -> 일수
- to_days(): config 값(int 또는 문자열)을 일수로 변환하는 단일 진입점
- daily_calendar(): [start, end] 연속 일자 (UTC, 일 단위)
- week_start_monday() / month_key(): DCA 샘플링 키
- weekly_closes(): 일요일 마감 주봉 종가

Usage:
    from coinstrat.utils.timeframe import to_days, daily_calendar

    to_days("13w")   # -> 91
    to_days(365)     # -> 365

    cal = daily_calendar("2024-01-01", "2024-01-10")  # 10 days
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Literal, Union
import re

import pandas as pd


DAYS_PER_WEEK = 7
WEEK_END_RULE = "W-SUN"      # 주봉: 일요일 마감

DateLike = Union[str, date, datetime, pd.Timestamp]


@dataclass(frozen=True)
class Duration:
    """
    일봉 캘린더 기준 기간.

    Examples:
        Duration(13, 'w').days  # -> 91
        Duration(365, 'd').days # -> 365
    """
    value: int
    unit: Literal['d', 'w']

    @property
    def days(self) -> int:
        return self.value * (DAYS_PER_WEEK if self.unit == 'w' else 1)

    @classmethod
    def parse(cls, text: str) -> "Duration":
        """
        Parse duration string like '30d', '13w'.

        Raises:
            ValueError: If the string is not recognized
        """
        m = re.fullmatch(r"\s*(\d+)\s*([dw])\s*", text.lower())
        if not m:
            raise ValueError(f"Invalid duration: '{text}'. Expected e.g. '30d' or '13w'")
        return cls(value=int(m.group(1)), unit=m.group(2))  # type: ignore[arg-type]

    def __str__(self) -> str:
        return f"{self.value}{self.unit}"


def to_days(value: Union[int, str, Duration]) -> int:
    """config 값 -> 일수"""
    if isinstance(value, Duration):
        return value.days
    if isinstance(value, str):
        return Duration.parse(value).days
    days = int(value)
    if days < 1:
        raise ValueError(f"Duration must be >= 1 day, got {value}")
    return days


def to_day(value: DateLike) -> pd.Timestamp:
    """임의 날짜 표현 -> tz-naive 자정 Timestamp (UTC 기준 일자)"""
    ts = pd.Timestamp(value)
    if ts.tzinfo is not None:
        ts = ts.tz_convert("UTC").tz_localize(None)
    return ts.normalize()


def utc_today() -> pd.Timestamp:
    """오늘 (UTC) 자정"""
    return to_day(datetime.now(timezone.utc))


def daily_calendar(start: DateLike, end: DateLike) -> pd.DatetimeIndex:
    """[start, end] 양 끝 포함 연속 일자. start > end 이면 빈 index."""
    start_ts, end_ts = to_day(start), to_day(end)
    if start_ts > end_ts:
        return pd.DatetimeIndex([], name="date")
    return pd.date_range(start_ts, end_ts, freq="D", name="date")


def week_start_monday(ts: DateLike) -> pd.Timestamp:
    """해당 주의 월요일 (월요일 시작 주 키)"""
    day = to_day(ts)
    return day - pd.Timedelta(days=day.dayofweek)


def month_key(ts: DateLike) -> str:
    """YYYY-MM"""
    return to_day(ts).strftime("%Y-%m")


def weekly_closes(daily: pd.Series) -> pd.Series:
    """
    일봉 -> 일요일 마감 주봉 종가.

    라벨은 주의 마지막 날(일요일). 아직 끝나지 않은 마지막 주는
    미래 일요일 라벨을 갖게 되므로 일봉으로 ffill 할 때 자연히 제외된다.
    """
    if daily.empty:
        return daily.copy()
    return daily.resample(WEEK_END_RULE, label="right", closed="right").last()
