"""
Missing-Data / Carry-Forward Policy
===================================

모든 팩터 공통 규칙:
- 필수 입력이 NaN 인 날 -> 전날 점수를 그대로 사용 (NaN 전파/고정값 대체 없음)
- 첫 유효일 이전 -> 팩터별 시드 점수
- 경고 로그는 팩터별로 앞의 몇 건만 출력 (카운트는 전부 누적)

카운터는 모듈 전역이 아니라 호출자가 넘기는 객체다.
같은 프로세스에서 여러 계산을 병렬/반복 실행해도 서로 섞이지 않는다.

Usage:
```python
counter = NanWarningCounter(limit=5)
scores = apply_carry_forward(raw, missing, seed=0, factor="VAL_SCORE", counter=counter)
counter.counts["VAL_SCORE"]   # carry 된 일수
```
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)


@dataclass
class NanWarningCounter:
    """팩터별 carry-forward 발생 카운터 (로그는 limit 건까지만)"""
    limit: int = 5
    counts: Dict[str, int] = field(default_factory=dict)

    def record(self, factor: str, day: Optional[pd.Timestamp] = None) -> None:
        n = self.counts.get(factor, 0) + 1
        self.counts[factor] = n
        if n <= self.limit:
            when = f" on {day.date()}" if day is not None else ""
            logger.warning(f"{factor}: input missing{when}, carrying previous score forward")
            if n == self.limit:
                logger.warning(f"{factor}: further missing-input warnings suppressed")

    def total(self) -> int:
        return sum(self.counts.values())

    def reset(self) -> None:
        self.counts.clear()


def apply_carry_forward(
    scores: Sequence[float],
    missing: Sequence[bool],
    seed: int,
    factor: str,
    counter: Optional[NanWarningCounter] = None,
    index: Optional[pd.DatetimeIndex] = None,
) -> np.ndarray:
    """
    결측일 점수를 전날 점수로 대체.

    Args:
        scores: 입력이 유효한 날의 점수 (결측일 값은 무시됨)
        missing: True = 해당일 필수 입력 결측
        seed: 첫 유효일 이전 점수
        factor: 로그/카운터 키
        counter: NanWarningCounter (None 이면 카운트 안 함)
        index: 로그에 찍을 날짜

    Returns:
        int ndarray (NaN 없음)
    """
    raw = np.asarray(scores, dtype=float)
    miss = np.asarray(missing, dtype=bool)
    if raw.shape != miss.shape:
        raise ValueError(f"scores/missing length mismatch: {raw.shape} vs {miss.shape}")

    filled = pd.Series(np.where(miss, np.nan, raw)).ffill().fillna(seed)

    if counter is not None and miss.any():
        for i in np.flatnonzero(miss):
            counter.record(factor, index[i] if index is not None else None)

    return filled.to_numpy().astype(int)
