"""
Signal Engine
=============

raw 시계열 -> 일봉 정렬 테이블 -> 팩터 점수 -> CORE / MACRO / ACCUM 신호.

파이프라인 (단방향, 순수 계산):
1. align_observations: [첫 BTC 일자, today] 연속 캘린더로 ffill
2. 팩터 점수: VAL / LIQ / DXY / CYCLE / PRICE_REGIME (결측은 carry-forward)
3. CORE: hysteresis fold (전날 상태 의존, 순차)
4. MACRO: (LIQ + CYCLE >= 3) AND DXY >= 1
5. ACCUM_ON = CORE_ON

Usage:
```python
from coinstrat.engine import compute_all_signals, compute_signal_records

run = compute_all_signals(series_by_column, today="2024-06-30")
run.frame[["VAL_SCORE", "DXY_SCORE", "CORE_ON", "MACRO_ON"]].tail()
run.nan_warnings.counts      # 팩터별 carry-forward 일수
run.transitions              # CORE 전환 기록

records = compute_signal_records(series_by_column)   # List[DailyRecord]
```
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Optional, Sequence

import pandas as pd

from coinstrat.config.loader import EngineConfig
from coinstrat.data.aligner import ANCHOR_COLUMN, align_observations
from coinstrat.data.observations import Observation
from coinstrat.factors.carry import NanWarningCounter
from coinstrat.factors.cycle import score_cycle
from coinstrat.factors.dxy import score_dxy
from coinstrat.factors.liquidity import score_liquidity
from coinstrat.factors.price_regime import score_price_regime
from coinstrat.factors.valuation import score_valuation
from coinstrat.regime.records import DailyRecord, to_daily_records
from coinstrat.regime.state_machine import CoreTransition, fold_core_states, macro_on
from coinstrat.utils.timeframe import DateLike

logger = logging.getLogger(__name__)


SIGNAL_COLUMNS = ("VAL_SCORE", "LIQ_SCORE", "DXY_SCORE", "CYCLE_SCORE", "PRICE_REGIME_ON",
                  "CORE_ON", "MACRO_ON", "ACCUM_ON")


@dataclass
class SignalRun:
    """한 번의 시그널 계산 결과 (호출자 소유)"""
    frame: pd.DataFrame
    nan_warnings: NanWarningCounter
    transitions: List[CoreTransition] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return self.frame.empty

    def records(self) -> List[DailyRecord]:
        return to_daily_records(self.frame)

    def latest(self) -> Optional[DailyRecord]:
        """마지막 날 레코드 (데이터 없으면 None)"""
        if self.frame.empty:
            return None
        return to_daily_records(self.frame.iloc[[-1]])[0]


def score_table(
    table: pd.DataFrame,
    config: Optional[EngineConfig] = None,
    counter: Optional[NanWarningCounter] = None,
) -> SignalRun:
    """
    정렬된 일봉 테이블 -> 점수/신호 컬럼 추가

    Args:
        table: align_observations 결과 (RAW_COLUMNS 포함)
        config: EngineConfig (None 이면 기본 임계값)
        counter: NanWarningCounter (None 이면 새로 생성)

    Returns:
        SignalRun
    """
    config = config or EngineConfig()
    counter = counter if counter is not None else NanWarningCounter(limit=config.diagnostics.nan_warning_limit)

    if table.empty:
        return SignalRun(frame=table.copy(), nan_warnings=counter)

    parts = [
        table,
        score_valuation(table, config.valuation, counter),
        score_liquidity(table, config.liquidity, counter),
        score_dxy(table, config.dxy, counter),
        score_cycle(table, config.cycle, counter),
        score_price_regime(table, config.price_regime),
    ]
    frame = pd.concat(parts, axis=1)

    core, transitions = fold_core_states(
        frame["VAL_SCORE"], frame["DXY_SCORE"], frame["PRICE_REGIME_ON"],
        params=config.core, index=frame.index,
    )
    frame["CORE_ON"] = core
    frame["MACRO_ON"] = macro_on(frame["LIQ_SCORE"], frame["CYCLE_SCORE"], frame["DXY_SCORE"], config.core)
    frame["ACCUM_ON"] = frame["CORE_ON"]

    if counter.total():
        logger.info(f"Carry-forward applied: {dict(counter.counts)}")
    logger.info(
        f"Signals computed: {len(frame)} days "
        f"({frame.index[0].date()} ~ {frame.index[-1].date()}), "
        f"CORE transitions={len(transitions)}, CORE_ON today={int(frame['CORE_ON'].iloc[-1])}"
    )
    return SignalRun(frame=frame, nan_warnings=counter, transitions=transitions)


def compute_all_signals(
    series: Mapping[str, Sequence[Observation]],
    config: Optional[EngineConfig] = None,
    today: Optional[DateLike] = None,
    counter: Optional[NanWarningCounter] = None,
) -> SignalRun:
    """
    전체 파이프라인

    Args:
        series: 컬럼명 -> 관측치. BTCUSD 가 앵커 (비어있으면 빈 결과)
        today: 캘린더 끝 (기본 UTC 오늘)

    Returns:
        SignalRun (frame 비어있으면 "데이터 없음")
    """
    anchor = series.get(ANCHOR_COLUMN) or []
    others = {k: v for k, v in series.items() if k != ANCHOR_COLUMN}
    table = align_observations(anchor, others, today=today)
    return score_table(table, config, counter)


def compute_signal_records(
    series: Mapping[str, Sequence[Observation]],
    config: Optional[EngineConfig] = None,
    today: Optional[DateLike] = None,
) -> List[DailyRecord]:
    """compute_all_signals -> DailyRecord 리스트"""
    return compute_all_signals(series, config, today).records()


def fetch_and_compute(
    fetch_all: Callable[[], Dict[str, List[Observation]]],
    config: Optional[EngineConfig] = None,
    today: Optional[DateLike] = None,
) -> SignalRun:
    """
    수집(fan-out, 전체 barrier) 후 계산.

    fetch_all 은 실패한 시계열을 [] 로 돌려주는 수집기 (collector.fetch_all_series 등).
    """
    series = fetch_all()
    missing = [k for k, v in series.items() if not v]
    if missing:
        logger.warning(f"Series unavailable, continuing with NaN columns: {missing}")
    return compute_all_signals(series, config, today)
