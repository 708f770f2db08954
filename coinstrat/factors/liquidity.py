"""
Liquidity Score (0~2)
=====================

US 순유동성 = WALCL - WTREGEN - RRPONTSYD x 1000

단위:
- WALCL, WTREGEN: millions USD
- RRPONTSYD: billions USD -> x1000 으로 millions 통일 후 차감

| score | 조건 |
|-------|------|
| 2 | US_LIQ YoY(365일) > 0 |
| 1 | 13주(91일) 변화량 > 0 |
| 0 | 그 외 |

구성요소 중 하나라도 NaN 이면 US_LIQ 도 NaN (0 대체 안 함).
YoY, 13W 둘 다 NaN 인 날만 carry-forward. YoY 만 NaN 이면 YoY 조건 불성립.
"""
from __future__ import annotations

from typing import Optional

import numpy as np
import pandas as pd

from coinstrat.config.loader import LiquidityParams
from coinstrat.factors.carry import NanWarningCounter, apply_carry_forward
from coinstrat.utils.rolling import diff, pct_change
from coinstrat.utils.timeframe import to_days


def net_liquidity(walcl: pd.Series, tga: pd.Series, rrp: pd.Series, rrp_scale: float = 1000.0) -> pd.Series:
    """WALCL - TGA - RRP (millions). NaN 전파."""
    return (walcl - tga - rrp * rrp_scale).rename("US_LIQ")


def score_liquidity(
    table: pd.DataFrame,
    params: Optional[LiquidityParams] = None,
    counter: Optional[NanWarningCounter] = None,
) -> pd.DataFrame:
    """
    LIQ_SCORE 계산

    Returns:
        DataFrame[US_LIQ, US_LIQ_YOY (%), US_LIQ_13W_DELTA, LIQ_SCORE]
    """
    params = params or LiquidityParams()
    us_liq = net_liquidity(table["WALCL"], table["WTREGEN"], table["RRPONTSYD"], params.rrp_scale)
    yoy = pct_change(us_liq, to_days(params.yoy_periods))
    delta = diff(us_liq, to_days(params.delta_periods))

    yoy_v = yoy.to_numpy(dtype=float)
    delta_v = delta.to_numpy(dtype=float)
    with np.errstate(invalid="ignore"):
        raw = np.where(yoy_v > 0, 2, np.where(delta_v > 0, 1, 0))
    missing = np.isnan(yoy_v) & np.isnan(delta_v)

    score = apply_carry_forward(raw, missing, params.initial_score, "LIQ_SCORE", counter, table.index)
    return pd.DataFrame(
        {
            "US_LIQ": us_liq.to_numpy(dtype=float),
            "US_LIQ_YOY": yoy_v * 100.0,
            "US_LIQ_13W_DELTA": delta_v,
            "LIQ_SCORE": score,
        },
        index=table.index,
    )
