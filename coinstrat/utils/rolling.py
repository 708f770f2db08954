"""
Rolling Math Library
====================

모든 팩터 계산의 기본 연산 (NaN 전파).

- rolling_mean(x, w): 후행 윈도우 단순이동평균. i < w-1 이면 NaN.
  윈도우 안에 NaN이 하나라도 있으면 결과도 NaN (유효값만 평균내지 않음).
- pct_change(x, p): x[i] / x[i-p] - 1. i < p, x[i-p] == 0, x[i-p] NaN 이면 NaN.
- diff(x, p): x[i] - x[i-p]. i < p, x[i-p] NaN 이면 NaN.

Usage:
    from coinstrat.utils.rolling import rolling_mean

    rolling_mean([1, 2, 3, 4, 5], 3)  # -> [nan, nan, 2.0, 3.0, 4.0]

Series를 넣으면 같은 index의 Series를, 그 외에는 ndarray를 반환한다.
"""
from __future__ import annotations

from typing import Sequence, Union

import numpy as np
import pandas as pd


ArrayLike = Union[Sequence[float], np.ndarray, pd.Series]


def _as_series(x: ArrayLike) -> pd.Series:
    if isinstance(x, pd.Series):
        return x.astype(float)
    return pd.Series(np.asarray(x, dtype=float))


def _like_input(x: ArrayLike, out: pd.Series) -> Union[np.ndarray, pd.Series]:
    if isinstance(x, pd.Series):
        return out.rename(x.name)
    return out.to_numpy(dtype=float)


def _check_window(n: int, name: str) -> None:
    if n < 1:
        raise ValueError(f"{name} must be >= 1, got {n}")


def rolling_mean(x: ArrayLike, window: int) -> Union[np.ndarray, pd.Series]:
    """후행 단순이동평균 (min_periods = window, NaN 전파)"""
    _check_window(window, "window")
    s = _as_series(x)
    out = s.rolling(window, min_periods=window).mean()
    return _like_input(x, out)


def pct_change(x: ArrayLike, periods: int) -> Union[np.ndarray, pd.Series]:
    """p기간 변화율 (fraction, 0.01 = +1%)"""
    _check_window(periods, "periods")
    s = _as_series(x)
    prev = s.shift(periods)
    out = s / prev - 1.0
    # 분모 0 / NaN -> NaN (이전 값 ffill 없음)
    out = out.where(prev.notna() & (prev != 0.0))
    return _like_input(x, out)


def diff(x: ArrayLike, periods: int) -> Union[np.ndarray, pd.Series]:
    """p기간 차분"""
    _check_window(periods, "periods")
    s = _as_series(x)
    prev = s.shift(periods)
    out = (s - prev).where(prev.notna())
    return _like_input(x, out)


def rolling_fraction(flags: ArrayLike, window: int) -> Union[np.ndarray, pd.Series]:
    """0/1 플래그의 후행 비율 (rolling_mean 의 별칭, 지속성 필터용)"""
    return rolling_mean(flags, window)


def meets_persistence(fraction: ArrayLike, window: int, min_days: int) -> np.ndarray:
    """
    rolling fraction >= min_days / window 판정

    fraction * window 로 일수를 복원해서 비교 (허용 오차 1e-9).
    NaN (윈도우 미충족) 은 False.
    """
    frac = np.asarray(fraction, dtype=float)
    days = frac * window
    with np.errstate(invalid="ignore"):
        ok = days >= (min_days - 1e-9)
    return np.where(np.isnan(frac), False, ok)
