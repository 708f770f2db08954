# -*- coding: utf-8 -*-
"""
DCA Backtest Engine
===================

일별 시그널 시리즈를 DCA 전략들에 재생.

Equal-funding 모델:
- 모든 action date 에 모든 전략이 같은 금액(dca_amount)을 현금으로 입금받음
  -> 전략 간 total_invested 동일 (공정 비교)
- 전략은 그 현금(과 대기 자금)을 어떻게 쓸지만 결정

action date 실행 순서 (고정):
1. 입금
2. 전략 결정 (TradeDecision)
3. 매도: sell_all (OFF 구간당 1회, 멱등) 또는 sell_usd (보유 BTC 한도)
4. 매수: deploy_reserves (현금 전액) -> buy_usd (min(요청, 현금))
5. prev_signal_on 갱신

non-action day 도 SeriesPoint 를 남긴다 (차트용, 매매 로직 없음).
가격이 유한하지 않거나 0 이하인 날은 건너뜀.

사용법:
```python
from coinstrat.backtest import BacktestConfig, run_backtest

results = run_backtest(run.frame, BacktestConfig(start_date="2020-01-01", frequency="weekly"))
print_report(results)
```
"""
from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Sequence, Union

import numpy as np
import pandas as pd

from coinstrat.backtest.models import (
    BacktestConfig,
    SeriesPoint,
    StrategyResult,
    StrategyState,
    TradeDecision,
)
from coinstrat.backtest.strategies import DecisionFn, build_strategies
from coinstrat.regime.records import DailyRecord, records_to_frame
from coinstrat.utils.timeframe import month_key, week_start_monday

logger = logging.getLogger(__name__)


REQUIRED_COLUMNS = ('BTCUSD', 'ACCUM_ON', 'MACRO_ON')

SignalData = Union[pd.DataFrame, Sequence[DailyRecord]]


# =============================================================================
# Helpers
# =============================================================================

def _as_frame(data: SignalData) -> pd.DataFrame:
    frame = data if isinstance(data, pd.DataFrame) else records_to_frame(list(data))
    missing = [c for c in REQUIRED_COLUMNS if c not in frame.columns]
    if missing and not frame.empty:
        raise ValueError(f"Missing column: {missing}")
    return frame.sort_index()


def sample_by_frequency(index: pd.DatetimeIndex, frequency: str) -> pd.DatetimeIndex:
    """
    DCA action date 샘플링

    - daily: 전부
    - weekly: 월요일 시작 주마다 첫 날 (월요일 또는 그 이후 첫 데이터)
    - monthly: 달마다 첫 데이터 날
    """
    if frequency == 'daily' or len(index) == 0:
        return index
    if frequency == 'weekly':
        keys = index.map(week_start_monday)
    elif frequency == 'monthly':
        keys = index.map(month_key)
    else:
        raise ValueError(f"Unknown frequency: {frequency}")
    first = ~pd.Index(keys).duplicated(keep='first')
    return index[first]


def compute_max_drawdown(values: Sequence[float]) -> float:
    """
    최대 낙폭 (peak-to-trough, 양수 fraction)

    running peak 한 번 스캔. 0.35 = 35% 낙폭.
    """
    peak = -math.inf
    max_dd = 0.0
    for v in values:
        if v > peak:
            peak = v
        if peak > 0:
            dd = (peak - v) / peak
            if dd > max_dd:
                max_dd = dd
    return max_dd


def _apply_decision(state: StrategyState, decision: TradeDecision, price: float) -> None:
    """매도 -> 매수 순서로 결정 반영"""
    # 1. 매도
    if decision.sell_all:
        if not state.sold_all_already and state.btc_held > 0:
            proceeds = state.btc_held * price
            state.total_sell_proceeds += proceeds
            state.cash_balance += proceeds
            state.btc_held = 0.0
            state.sold_all_already = True
    else:
        if decision.sell_usd > 0:
            btc_to_sell = min(decision.sell_usd / price, state.btc_held)
            if btc_to_sell > 0:
                proceeds = btc_to_sell * price
                state.btc_held -= btc_to_sell
                state.total_sell_proceeds += proceeds
                state.cash_balance += proceeds
        state.sold_all_already = False

    # 2. 매수 (대기 자금 일괄 투입 -> 정규 매수)
    if decision.deploy_reserves and state.cash_balance > 0:
        state.btc_held += state.cash_balance / price
        state.cash_balance = 0.0
    if decision.buy_usd > 0:
        spend = min(decision.buy_usd, state.cash_balance)
        if spend > 0:
            state.btc_held += spend / price
            state.cash_balance -= spend


# =============================================================================
# Simulation
# =============================================================================

def run_strategy(
    name: str,
    frame: pd.DataFrame,
    action_dates: pd.DatetimeIndex,
    config: BacktestConfig,
    decide: DecisionFn,
) -> StrategyResult:
    """
    단일 전략 실행

    Args:
        frame: 시작일 이후 일별 시그널 (BTCUSD, ACCUM_ON, MACRO_ON)
        action_dates: 입금/매매 날짜
        decide: (day, state) -> TradeDecision
    """
    state = StrategyState()
    actions = set(action_dates)
    series: List[SeriesPoint] = []

    columns = list(frame.columns)
    for ts, row in zip(frame.index, frame.itertuples(index=False, name=None)):
        day: Dict[str, Any] = dict(zip(columns, row))
        price = float(day['BTCUSD'])
        if not np.isfinite(price) or price <= 0:
            continue

        if ts in actions:
            state.cash_balance += config.dca_amount
            state.total_deposited += config.dca_amount

            decision = decide(day, state)
            _apply_decision(state, decision, price)

            state.prev_signal_on = int(day['ACCUM_ON']) == 1

        series.append(SeriesPoint(
            date=ts.date(),
            portfolio_value=state.btc_held * price + state.cash_balance,
            btc_held=state.btc_held,
            cash_balance=state.cash_balance,
            cash_deployed=state.total_deposited,
            cash_withdrawn=state.total_sell_proceeds,
            btc_price=price,
        ))

    last_price = series[-1].btc_price if series else 0.0
    final_value = state.btc_held * last_price + state.cash_balance
    total_return = (
        (final_value - state.total_deposited) / state.total_deposited
        if state.total_deposited > 0 else 0.0
    )

    return StrategyResult(
        name=name,
        series=tuple(series),
        total_invested=state.total_deposited,
        total_withdrawn=state.total_sell_proceeds,
        net_deployed=state.total_deposited - state.total_sell_proceeds,
        final_btc_held=state.btc_held,
        final_cash_balance=state.cash_balance,
        final_portfolio_value=final_value,
        total_return=total_return,
        max_drawdown=compute_max_drawdown([p.portfolio_value for p in series]),
        btc_accumulated=state.btc_held,
    )


def run_backtest(data: SignalData, config: BacktestConfig) -> List[StrategyResult]:
    """
    전체 전략 백테스트

    Args:
        data: 시그널 DataFrame (engine 출력) 또는 DailyRecord 리스트
        config: BacktestConfig

    Returns:
        [Baseline, CORE, (CORE + MACRO)] 결과. 시작일 이후 데이터가 없으면 [].
    """
    frame = _as_frame(data)
    if frame.empty:
        logger.info("No signal data; nothing to simulate")
        return []

    filtered = frame[frame.index >= config.start][list(REQUIRED_COLUMNS)]
    if filtered.empty:
        logger.info(f"No data on/after {config.start.date()}; nothing to simulate")
        return []

    action_dates = sample_by_frequency(filtered.index, config.frequency)
    logger.info(
        f"Backtest {filtered.index[0].date()} ~ {filtered.index[-1].date()}: "
        f"{len(action_dates)} {config.frequency} action dates x ${config.dca_amount:,.2f}"
    )

    return [
        run_strategy(name, filtered, action_dates, config, decide)
        for name, decide in build_strategies(config)
    ]


# =============================================================================
# Reporting
# =============================================================================

def results_summary(results: Sequence[StrategyResult]) -> pd.DataFrame:
    """전략별 지표 표"""
    rows = [{
        'strategy': r.name,
        'total_invested': r.total_invested,
        'total_withdrawn': r.total_withdrawn,
        'net_deployed': r.net_deployed,
        'final_btc_held': r.final_btc_held,
        'final_cash_balance': r.final_cash_balance,
        'final_portfolio_value': r.final_portfolio_value,
        'total_return_pct': r.total_return * 100,
        'max_drawdown_pct': r.max_drawdown * 100,
    } for r in results]
    return pd.DataFrame(rows).set_index('strategy') if rows else pd.DataFrame()


def print_report(results: Sequence[StrategyResult]) -> None:
    """콘솔 리포트"""
    print("=" * 70)
    print("DCA Backtest Report")
    print("=" * 70)
    if not results:
        print("  No data to simulate.")
        return

    for r in results:
        print(f"\n[{r.name}]")
        print(f"  Invested:       ${r.total_invested:,.2f}")
        print(f"  Sell proceeds:  ${r.total_withdrawn:,.2f}")
        print(f"  BTC held:       {r.final_btc_held:.6f}")
        print(f"  Cash:           ${r.final_cash_balance:,.2f}")
        print(f"  Final value:    ${r.final_portfolio_value:,.2f}")
        print(f"  Total return:   {r.total_return * 100:+.2f}%")
        print(f"  Max drawdown:   {r.max_drawdown * 100:.2f}%")
    print("\n" + "=" * 70)
