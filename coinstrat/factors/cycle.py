"""
Business Cycle Score (0~2)
==========================

입력: Sahm rule 실시간 지표, 10Y-3M 금리차(YC_M), 제조업 신규주문(NO)

| score | 조건 |
|-------|------|
| 0 (침체 위험) | Sahm >= 0.50 OR YC < 0 OR (NO YoY < 0 AND NO 90일 모멘텀 <= 0) |
| 2 (확장) | Sahm < 0.35 AND YC >= 0.75 AND NO YoY >= 0 |
| 1 | 그 외 |

부분 결측 허용: 결측 지표의 조건은 "불성립" 으로 처리.
Sahm, YC, NO YoY 가 모두 결측인 날만 전날 점수 carry-forward.
"""
from __future__ import annotations

from typing import Optional

import numpy as np
import pandas as pd

from coinstrat.config.loader import CycleParams
from coinstrat.factors.carry import NanWarningCounter, apply_carry_forward
from coinstrat.utils.rolling import diff, pct_change
from coinstrat.utils.timeframe import to_days


def cycle_raw_score(
    sahm: np.ndarray,
    yc: np.ndarray,
    no_yoy: np.ndarray,
    no_mom: np.ndarray,
    params: CycleParams,
) -> np.ndarray:
    """침체 판정이 확장 판정보다 우선"""
    sahm, yc = np.asarray(sahm, dtype=float), np.asarray(yc, dtype=float)
    no_yoy, no_mom = np.asarray(no_yoy, dtype=float), np.asarray(no_mom, dtype=float)
    with np.errstate(invalid="ignore"):
        recession = (
            (sahm >= params.sahm_recession)
            | (yc < params.yc_recession)
            | ((no_yoy < 0) & (no_mom <= 0))
        )
        expansion = (sahm < params.sahm_expansion) & (yc >= params.yc_expansion) & (no_yoy >= 0)
    return np.select([recession, expansion], [0, 2], default=1)


def score_cycle(
    table: pd.DataFrame,
    params: Optional[CycleParams] = None,
    counter: Optional[NanWarningCounter] = None,
) -> pd.DataFrame:
    """
    CYCLE_SCORE 계산

    Returns:
        DataFrame[NO_YOY (%), NO_MOM3, CYCLE_SCORE]
    """
    params = params or CycleParams()
    sahm = table["SAHM"].to_numpy(dtype=float)
    yc = table["YC_M"].to_numpy(dtype=float)
    no_yoy = pct_change(table["NO"], to_days(params.yoy_periods)).to_numpy(dtype=float)
    no_mom = diff(table["NO"], to_days(params.momentum_periods)).to_numpy(dtype=float)

    raw = cycle_raw_score(sahm, yc, no_yoy, no_mom, params)
    missing = np.isnan(sahm) & np.isnan(yc) & np.isnan(no_yoy)
    score = apply_carry_forward(raw, missing, params.initial_score, "CYCLE_SCORE", counter, table.index)

    return pd.DataFrame(
        {"NO_YOY": no_yoy * 100.0, "NO_MOM3": no_mom, "CYCLE_SCORE": score},
        index=table.index,
    )
