"""
DCA Strategy Decision Rules
===========================

action date 마다 (오늘 레코드, 현재 상태) -> TradeDecision.

| 전략 | CORE ON | CORE OFF |
|------|---------|----------|
| Baseline DCA | 항상 DCA 금액 매수 | 항상 DCA 금액 매수 |
| CORE DCA | DCA 매수 (+ OFF->ON 첫날 현금 전액 투입) | off_signal_mode |
| CORE DCA + MACRO Nx | MACRO ON 이면 DCA x N 매수 | off_signal_mode |

off_signal_mode:
- pause: 아무것도 안 함 (입금분은 현금으로 대기)
- sell_matching: DCA 금액만큼 BTC 매도
- sell_all: BTC 전량 매도 (OFF 구간당 1회)
"""
from __future__ import annotations

from typing import Callable, List, Mapping, Tuple, Any

from coinstrat.backtest.models import HOLD, BacktestConfig, StrategyState, TradeDecision


DecisionFn = Callable[[Mapping[str, Any], StrategyState], TradeDecision]

BASELINE_NAME = "Baseline DCA"
CORE_NAME = "CORE DCA"


def accelerated_name(multiplier: float) -> str:
    return f"CORE DCA + MACRO {multiplier:g}x"


def off_signal_decision(config: BacktestConfig) -> TradeDecision:
    """CORE OFF 일 때의 결정"""
    if config.off_signal_mode == 'sell_matching':
        return TradeDecision(sell_usd=config.dca_amount)
    if config.off_signal_mode == 'sell_all':
        return TradeDecision(sell_all=True)
    return HOLD


def baseline_decision(config: BacktestConfig) -> DecisionFn:
    """입금 즉시 전액 매수, 현금 보유 없음"""
    def decide(day: Mapping[str, Any], state: StrategyState) -> TradeDecision:
        return TradeDecision(buy_usd=config.dca_amount)
    return decide


def gated_decision(config: BacktestConfig, accelerated: bool = False) -> DecisionFn:
    """
    CORE 게이트 전략

    Args:
        accelerated: True 면 CORE ON + MACRO ON 에서 accel_multiplier 배 매수
    """
    def decide(day: Mapping[str, Any], state: StrategyState) -> TradeDecision:
        core_on = int(day["ACCUM_ON"]) == 1
        if not core_on:
            return off_signal_decision(config)

        multiplier = 1.0
        if accelerated and int(day["MACRO_ON"]) == 1:
            multiplier = config.accel_multiplier
        return TradeDecision(
            buy_usd=config.dca_amount * multiplier,
            # CORE OFF -> ON 후 첫 매수: 대기 현금 전액 투입
            deploy_reserves=not state.prev_signal_on,
        )
    return decide


def build_strategies(config: BacktestConfig) -> List[Tuple[str, DecisionFn]]:
    """설정 -> [(전략명, 결정 함수), ...]"""
    strategies = [
        (BASELINE_NAME, baseline_decision(config)),
        (CORE_NAME, gated_decision(config)),
    ]
    if config.macro_accel:
        strategies.append((accelerated_name(config.accel_multiplier), gated_decision(config, accelerated=True)))
    return strategies
