"""
USD / DXY Score (0~2, 2-stage)
==============================

1단계 raw (무역가중 달러 인덱스 DTWEXBGS):
- raw 0: ROC20 > +0.5%                   (달러 강세 = 역풍)
- raw 2: ROC20 < -0.5% AND MA50 < MA200  (달러 약세 추세 = 순풍)
- raw 1: 그 외 (중립)
- ROC20 결측 -> 전날 raw carry-forward

2단계 지속성:
- 최근 30일 중 raw >= 1 인 날 비율 >= 20/30 -> effective = raw
- 아니면 effective = 0 (비역풍 상태가 충분히 지속되지 않음 = 역풍 취급)
- 윈도우 미충족(초기 29일) -> effective = 0

raw / 지속성 비율 / 플래그는 진단용으로 함께 반환.
"""
from __future__ import annotations

from typing import Optional

import numpy as np
import pandas as pd

from coinstrat.config.loader import DxyParams
from coinstrat.factors.carry import NanWarningCounter, apply_carry_forward
from coinstrat.utils.rolling import meets_persistence, pct_change, rolling_fraction, rolling_mean
from coinstrat.utils.timeframe import to_days


def dxy_raw_score(roc: np.ndarray, ma_fast: np.ndarray, ma_slow: np.ndarray, threshold: float) -> np.ndarray:
    """ROC + MA 크로스 -> raw 점수 (NaN 비교는 False -> 중립 1)"""
    roc = np.asarray(roc, dtype=float)
    with np.errstate(invalid="ignore"):
        headwind = roc > threshold
        tailwind = (roc < -threshold) & (np.asarray(ma_fast) < np.asarray(ma_slow))
    return np.select([headwind, tailwind], [0, 2], default=1)


def score_dxy(
    table: pd.DataFrame,
    params: Optional[DxyParams] = None,
    counter: Optional[NanWarningCounter] = None,
) -> pd.DataFrame:
    """
    DXY_SCORE 계산

    Returns:
        DataFrame[DXY_MA50, DXY_MA200, DXY_ROC20, DXY_RAW_SCORE,
                  DXY_PERSIST, DXY_PERSIST_OK, DXY_SCORE]
    """
    params = params or DxyParams()
    dxy = table["DXY"]
    ma_fast = rolling_mean(dxy, to_days(params.ma_fast)).to_numpy(dtype=float)
    ma_slow = rolling_mean(dxy, to_days(params.ma_slow)).to_numpy(dtype=float)
    roc = pct_change(dxy, to_days(params.roc_periods)).to_numpy(dtype=float)

    raw = dxy_raw_score(roc, ma_fast, ma_slow, params.roc_threshold)
    raw = apply_carry_forward(raw, np.isnan(roc), params.initial_raw_score, "DXY_SCORE", counter, table.index)

    window = to_days(params.persist_window)
    persist = rolling_fraction((raw >= 1).astype(float), window)
    persist_ok = meets_persistence(persist, window, params.persist_min_days)
    effective = np.where(persist_ok, raw, 0).astype(int)

    return pd.DataFrame(
        {
            "DXY_MA50": ma_fast,
            "DXY_MA200": ma_slow,
            "DXY_ROC20": roc,
            "DXY_RAW_SCORE": raw,
            "DXY_PERSIST": persist,
            "DXY_PERSIST_OK": persist_ok.astype(int),
            "DXY_SCORE": effective,
        },
        index=table.index,
    )
