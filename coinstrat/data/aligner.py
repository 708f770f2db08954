"""
Observation Aligner
===================

불규칙 샘플링 시계열(주간 WALCL, 월간 신규주문, 일간 가격 ...)을
하나의 연속 일봉 캘린더로 정렬 (forward-fill).

핵심 규칙:
- 캘린더 = [첫 BTC 가격 일자, today] 양 끝 포함, 빈 날 없음
- 각 시계열의 값 = 해당 일자 이전(포함) 가장 최근 유효 관측치
- 첫 관측 이전 = NaN (이후 팩터의 carry-forward 정책이 처리)
- today 이후 관측치는 무시
- 앵커(BTC) 가 비어 있으면 빈 DataFrame

Usage:
```python
from coinstrat.data.aligner import align_observations

table = align_observations(btc_obs, {"WALCL": walcl_obs, "MVRV": mvrv_obs}, today="2024-06-30")
table.index        # DatetimeIndex (freq='D', name='date')
table["WALCL"]     # 주간 값이 일봉으로 ffill
```
"""
from __future__ import annotations

import logging
from typing import Dict, Iterable, Mapping, Optional, Sequence

import numpy as np
import pandas as pd

from coinstrat.data.observations import Observation, to_series
from coinstrat.utils.timeframe import DateLike, daily_calendar, to_day, utc_today

logger = logging.getLogger(__name__)


ANCHOR_COLUMN = "BTCUSD"

# 정렬 테이블의 raw 입력 컬럼 (순서 고정)
RAW_COLUMNS = (
    "BTCUSD",
    "WALCL",
    "WTREGEN",
    "RRPONTSYD",
    "DXY",
    "SAHM",
    "YC_M",
    "NO",
    "MVRV",
    "LTH_SOPR",
    "LTH_NUPL",
)


def forward_fill_onto(series: pd.Series, calendar: pd.DatetimeIndex) -> pd.Series:
    """
    관측 Series 를 캘린더 위로 ffill.

    캘린더 시작 이전 관측치도 시드로 사용한다 (as-of 조인).
    """
    if series.empty or len(calendar) == 0:
        return pd.Series(np.nan, index=calendar, dtype=float, name=series.name)

    s = series[series.index <= calendar[-1]]
    merged = s.reindex(s.index.union(calendar)).ffill()
    return merged.reindex(calendar).rename(series.name)


def align_observations(
    anchor: Sequence[Observation],
    others: Optional[Mapping[str, Sequence[Observation]]] = None,
    today: Optional[DateLike] = None,
    columns: Iterable[str] = RAW_COLUMNS,
) -> pd.DataFrame:
    """
    앵커(BTC 가격) + 기타 시계열 -> 일봉 정렬 테이블

    Args:
        anchor: BTC 일봉 종가 관측치 (캘린더 범위 결정)
        others: 컬럼명 -> 관측치 리스트. 비어있거나 누락된 시계열은 all-NaN 컬럼
        today: 캘린더 끝 (기본: UTC 오늘)
        columns: 항상 포함할 컬럼 (없으면 NaN 컬럼 생성)

    Returns:
        DataFrame (index=date, columns=RAW_COLUMNS + others 의 추가 키)
    """
    others = dict(others or {})
    wanted = list(dict.fromkeys([ANCHOR_COLUMN, *columns, *others.keys()]))

    anchor_s = to_series(anchor, name=ANCHOR_COLUMN)
    if anchor_s.empty:
        logger.warning("Anchor price series is empty; nothing to align")
        return pd.DataFrame(columns=wanted, index=pd.DatetimeIndex([], name="date"), dtype=float)

    end = to_day(today) if today is not None else utc_today()
    calendar = daily_calendar(anchor_s.index[0], end)
    if len(calendar) == 0:
        logger.warning(f"Anchor starts after end date ({anchor_s.index[0].date()} > {end.date()})")
        return pd.DataFrame(columns=wanted, index=pd.DatetimeIndex([], name="date"), dtype=float)

    data: Dict[str, pd.Series] = {ANCHOR_COLUMN: forward_fill_onto(anchor_s, calendar)}
    for col in wanted:
        if col == ANCHOR_COLUMN:
            continue
        obs = others.get(col) or []
        s = to_series(obs, name=col)
        if s.empty:
            logger.info(f"{col}: no observations, column stays NaN")
        data[col] = forward_fill_onto(s, calendar)

    table = pd.DataFrame(data, index=calendar)
    table.index.name = "date"
    return table[wanted]
