"""
Price Regime (40W MA Persistence)
=================================

1. BTC 주봉 종가 (일요일 마감, UTC)
2. 주봉 40주 단순이동평균 -> 일봉으로 ffill
   (해당 주의 MA 는 마감 일요일부터 사용 가능, 진행 중인 주는 직전 주 MA)
3. raw = 일봉 가격 >= 40W MA (MA 없으면 0)
4. PRICE_REGIME_ON = 최근 30일 중 raw 가 1 인 날 >= 20 일

가격은 앵커 시계열이라 결측이 없으므로 carry-forward 대상이 아니다.
"""
from __future__ import annotations

from typing import Optional

import numpy as np
import pandas as pd

from coinstrat.config.loader import PriceRegimeParams
from coinstrat.utils.rolling import meets_persistence, rolling_fraction, rolling_mean
from coinstrat.utils.timeframe import to_days, weekly_closes


def weekly_ma_to_daily(price: pd.Series, ma_weeks: int) -> pd.Series:
    """주봉 N주 이평을 일봉 index 로 ffill"""
    if price.empty:
        return pd.Series(np.nan, index=price.index, dtype=float)
    weekly = weekly_closes(price.dropna())
    ma_weekly = rolling_mean(weekly, ma_weeks)
    merged = ma_weekly.reindex(ma_weekly.index.union(price.index)).ffill()
    return merged.reindex(price.index)


def score_price_regime(table: pd.DataFrame, params: Optional[PriceRegimeParams] = None) -> pd.DataFrame:
    """
    PRICE_REGIME_ON 계산

    Returns:
        DataFrame[BTC_MA40W, PRICE_REGIME_RAW, PRICE_REGIME_PERSIST, PRICE_REGIME_ON]
    """
    params = params or PriceRegimeParams()
    price = table["BTCUSD"].astype(float)
    ma = weekly_ma_to_daily(price, params.ma_weeks)

    with np.errstate(invalid="ignore"):
        raw = (price.to_numpy() >= ma.to_numpy()).astype(int)

    window = to_days(params.persist_window)
    persist = rolling_fraction(raw.astype(float), window)
    regime_on = meets_persistence(persist, window, params.persist_min_days).astype(int)

    return pd.DataFrame(
        {
            "BTC_MA40W": ma.to_numpy(dtype=float),
            "PRICE_REGIME_RAW": raw,
            "PRICE_REGIME_PERSIST": persist,
            "PRICE_REGIME_ON": regime_on,
        },
        index=table.index,
    )
