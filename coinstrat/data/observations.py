# -*- coding: utf-8 -*-
"""Observation model - `{date, value}` points delivered by the fetch collaborators."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Sequence, Tuple, Union

import pandas as pd

from coinstrat.utils.timeframe import DateLike, to_day


@dataclass(frozen=True)
class Observation:
    """단일 관측치 (UTC 일자, float 값)"""
    date: date
    value: float

    @property
    def is_valid(self) -> bool:
        return self.value is not None and math.isfinite(self.value)

    @classmethod
    def of(cls, day: DateLike, value: Union[float, str, None]) -> "Observation":
        """느슨한 입력 -> Observation. 파싱 불가 값은 NaN."""
        try:
            v = float(value) if value is not None else float("nan")
        except (TypeError, ValueError):
            v = float("nan")
        return cls(date=to_day(day).date(), value=v)


def observations_from_pairs(pairs: Iterable[Tuple[DateLike, Union[float, str, None]]]) -> List[Observation]:
    """[(date, value), ...] -> [Observation, ...]"""
    return [Observation.of(d, v) for d, v in pairs]


def to_series(observations: Sequence[Observation], name: str = None) -> pd.Series:
    """
    Observation 리스트 -> 일자 index Series.

    - 비유한 값(NaN/inf)은 결측으로 보고 제외
    - 같은 날짜가 여러 번 나오면 마지막 값이 우선
    - 결과는 날짜 오름차순

    비유한 값 제외가 중복 제거보다 먼저 적용된다: [(d, 5.0), (d, NaN)] 이면
    뒤의 NaN 은 결측이라 무시되고 5.0 이 남는다 (결측이 유효 관측을 지우지 않음).
    """
    # 1) 비유한 값 제외 -> 2) 날짜 중복 제거 (last wins)
    valid = [o for o in observations if o.is_valid]
    if not valid:
        return pd.Series([], index=pd.DatetimeIndex([], name="date"), dtype=float, name=name)

    s = pd.Series(
        [o.value for o in valid],
        index=pd.DatetimeIndex([pd.Timestamp(o.date) for o in valid], name="date"),
        dtype=float,
        name=name,
    )
    s = s[~s.index.duplicated(keep="last")]
    return s.sort_index()
