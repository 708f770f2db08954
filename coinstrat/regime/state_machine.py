"""
CORE / MACRO Aggregator
=======================

팩터 점수 -> 두 개의 일별 허가 신호.

CORE (2-state, 초기 OFF, hysteresis):
- OFF -> ON: ((VAL >= 3) OR (VAL >= 1 AND PRICE_REGIME_ON)) AND DXY >= 1
- ON -> OFF: (NOT PRICE_REGIME_ON AND VAL <= 2) OR (VAL == 0 AND DXY == 0)
- 그 외: 이전 상태 유지

MACRO (stateless, 매일 새로 계산):
- (LIQ + CYCLE >= 3) AND DXY >= 1
- 포지션 크기 배수로만 사용 (CORE ON 일 때). 독립 진입 신호 아님.

ACCUM_ON = CORE_ON

Usage:
```python
from coinstrat.regime.state_machine import fold_core_states, CoreStateMachine

core_on, transitions = fold_core_states(val, dxy, pr, index=dates)

machine = CoreStateMachine()
state = machine.update(val_score=3, dxy_score=1, price_regime_on=0, day=ts)
state.on               # True
state.days_in_state    # 1
```
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple
import numpy as np
import pandas as pd

from coinstrat.config.loader import CoreParams


# =============================================================================
# State
# =============================================================================

@dataclass
class CoreState:
    """CORE 상태"""
    on: bool = False
    reason: str = "initial"

    # 메타데이터
    last_change: Optional[pd.Timestamp] = None
    days_in_state: int = 0

    def to_dict(self) -> dict:
        """Dictionary 변환"""
        return {
            'on': self.on,
            'reason': self.reason,
            'last_change': self.last_change,
            'days_in_state': self.days_in_state,
        }


@dataclass(frozen=True)
class CoreTransition:
    """CORE 전환 기록 (진단용)"""
    date: Optional[pd.Timestamp]
    entered: bool          # True = OFF->ON, False = ON->OFF
    reason: str


# =============================================================================
# Core Functions
# =============================================================================

def core_entry_reason(val_score: int, dxy_score: int, price_regime_on: int,
                      params: Optional[CoreParams] = None) -> Optional[str]:
    """
    OFF -> ON 진입 조건

    Returns:
        진입 사유 문자열, 조건 불충족이면 None
    """
    p = params or CoreParams()
    if dxy_score < p.dxy_min:
        return None
    if val_score >= p.val_strong:
        return f"VAL {val_score} >= {p.val_strong}, DXY {dxy_score}"
    if val_score >= p.val_min and price_regime_on == 1:
        return f"VAL {val_score} + price regime ON, DXY {dxy_score}"
    return None


def core_exit_reason(val_score: int, dxy_score: int, price_regime_on: int,
                     params: Optional[CoreParams] = None) -> Optional[str]:
    """
    ON -> OFF 이탈 조건

    Returns:
        이탈 사유 문자열, 조건 불충족이면 None
    """
    p = params or CoreParams()
    if price_regime_on == 0 and val_score <= p.val_exit_max:
        return f"price regime OFF, VAL {val_score} <= {p.val_exit_max}"
    if val_score == 0 and dxy_score == 0:
        return "VAL 0 and DXY 0"
    return None


def transition_core(prev_on: bool, val_score: int, dxy_score: int, price_regime_on: int,
                    params: Optional[CoreParams] = None) -> Tuple[bool, Optional[str]]:
    """
    순수 전이 함수: (이전 상태, 오늘 점수) -> (새 상태, 전환 사유 or None)

    OFF 상태에서는 진입 조건만, ON 상태에서는 이탈 조건만 평가한다.
    """
    if not prev_on:
        reason = core_entry_reason(val_score, dxy_score, price_regime_on, params)
        return (True, reason) if reason else (False, None)
    reason = core_exit_reason(val_score, dxy_score, price_regime_on, params)
    return (False, reason) if reason else (True, None)


def fold_core_states(
    val_score: Sequence[int],
    dxy_score: Sequence[int],
    price_regime_on: Sequence[int],
    params: Optional[CoreParams] = None,
    index: Optional[pd.DatetimeIndex] = None,
    initial_on: bool = False,
) -> Tuple[np.ndarray, List[CoreTransition]]:
    """
    일자 순서대로 전이 함수를 fold

    Returns:
        (CORE_ON int ndarray, 전환 기록 리스트)
    """
    val = np.asarray(val_score, dtype=int)
    dxy = np.asarray(dxy_score, dtype=int)
    pr = np.asarray(price_regime_on, dtype=int)
    if not (len(val) == len(dxy) == len(pr)):
        raise ValueError("Score sequences must have equal length")

    out = np.zeros(len(val), dtype=int)
    transitions: List[CoreTransition] = []
    state = initial_on
    for i in range(len(val)):
        new_state, reason = transition_core(state, int(val[i]), int(dxy[i]), int(pr[i]), params)
        if reason is not None:
            day = index[i] if index is not None else None
            transitions.append(CoreTransition(date=day, entered=new_state, reason=reason))
        state = new_state
        out[i] = int(state)
    return out, transitions


def macro_on(
    liq_score: Sequence[int],
    cycle_score: Sequence[int],
    dxy_score: Sequence[int],
    params: Optional[CoreParams] = None,
) -> np.ndarray:
    """MACRO 플래그 (벡터화, 상태 없음)"""
    p = params or CoreParams()
    liq = np.asarray(liq_score, dtype=int)
    cyc = np.asarray(cycle_score, dtype=int)
    dxy = np.asarray(dxy_score, dtype=int)
    return ((liq + cyc >= p.macro_min_score) & (dxy >= p.dxy_min)).astype(int)


# =============================================================================
# Incremental Machine
# =============================================================================

class CoreStateMachine:
    """
    CORE 상태머신 (증분 업데이트용)

    fold_core_states 와 같은 전이 함수를 사용한다.
    """

    def __init__(self, params: Optional[CoreParams] = None):
        self.params = params or CoreParams()
        self.state = CoreState()
        self.transitions: List[CoreTransition] = []

    def reset(self):
        """상태 초기화"""
        self.state = CoreState()
        self.transitions = []

    def update(
        self,
        val_score: int,
        dxy_score: int,
        price_regime_on: int,
        day: Optional[pd.Timestamp] = None,
    ) -> CoreState:
        """
        하루치 점수로 상태 업데이트

        Returns:
            업데이트된 CoreState
        """
        new_on, reason = transition_core(self.state.on, val_score, dxy_score, price_regime_on, self.params)

        if reason is not None:
            self.transitions.append(CoreTransition(date=day, entered=new_on, reason=reason))
            self.state.last_change = day
            self.state.reason = reason
            self.state.days_in_state = 1
        else:
            self.state.days_in_state += 1

        self.state.on = new_on
        return self.state

    def is_on(self) -> bool:
        """CORE ON 여부"""
        return self.state.on
