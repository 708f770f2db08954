"""
Valuation Score (0~3)
=====================

MVRV + LTH-SOPR 기반 온체인 밸류에이션.

| score | 조건 |
|-------|------|
| 3 | MVRV < 1.0 AND SOPR < 1.0 (양쪽 모두 항복 확인) |
| 2 | MVRV < 1.0 단독, 또는 MVRV < 1.8 AND SOPR < 1.0 |
| 1 | MVRV < 3.5 |
| 0 | MVRV >= 3.5 |

- MVRV 결측 -> 전날 점수 carry-forward
- SOPR 결측 -> SOPR 조건만 불성립 처리 (MVRV 만으로 판정)
"""
from __future__ import annotations

from typing import Optional

import numpy as np
import pandas as pd

from coinstrat.config.loader import ValuationParams
from coinstrat.factors.carry import NanWarningCounter, apply_carry_forward


def valuation_raw_score(mvrv: np.ndarray, sopr: np.ndarray, params: ValuationParams) -> np.ndarray:
    """결측 처리 전 점수 (NaN 비교는 False)"""
    mvrv = np.asarray(mvrv, dtype=float)
    sopr = np.asarray(sopr, dtype=float)
    with np.errstate(invalid="ignore"):
        deep = mvrv < params.mvrv_deep
        capitulation = sopr < params.sopr_capitulation
        conditions = [
            deep & capitulation,
            deep | ((mvrv < params.mvrv_fair) & capitulation),
            mvrv < params.mvrv_rich,
        ]
    return np.select(conditions, [3, 2, 1], default=0)


def score_valuation(
    table: pd.DataFrame,
    params: Optional[ValuationParams] = None,
    counter: Optional[NanWarningCounter] = None,
) -> pd.DataFrame:
    """
    VAL_SCORE 계산

    Args:
        table: MVRV, LTH_SOPR 컬럼을 가진 일봉 테이블 (LTH_SOPR 없으면 NaN 취급)

    Returns:
        DataFrame[VAL_SCORE]
    """
    params = params or ValuationParams()
    mvrv = table["MVRV"].to_numpy(dtype=float)
    sopr = table["LTH_SOPR"].to_numpy(dtype=float) if "LTH_SOPR" in table else np.full(len(table), np.nan)

    raw = valuation_raw_score(mvrv, sopr, params)
    score = apply_carry_forward(
        raw, np.isnan(mvrv), params.initial_score, "VAL_SCORE", counter, table.index,
    )
    return pd.DataFrame({"VAL_SCORE": score}, index=table.index)
