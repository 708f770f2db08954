# -*- coding: utf-8 -*-
"""
Backtest Models
===============

DCA 백테스트 설정 / 상태 / 결과 데이터 구조.
"""
from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Literal, Tuple

import pandas as pd

from coinstrat.utils.timeframe import DateLike, to_day


DcaFrequency = Literal['daily', 'weekly', 'monthly']
OffSignalMode = Literal['pause', 'sell_matching', 'sell_all']

FREQUENCIES: Tuple[str, ...] = ('daily', 'weekly', 'monthly')
OFF_SIGNAL_MODES: Tuple[str, ...] = ('pause', 'sell_matching', 'sell_all')


class BacktestConfigError(ValueError):
    pass


@dataclass(frozen=True)
class BacktestConfig:
    """DCA 백테스트 설정"""
    start_date: DateLike = "2018-01-01"
    dca_amount: float = 100.0              # 기간당 입금 USD
    frequency: DcaFrequency = 'weekly'
    off_signal_mode: OffSignalMode = 'pause'
    macro_accel: bool = True               # CORE + MACRO 가속 전략 포함
    accel_multiplier: float = 3.0          # MACRO ON 시 매수 배수

    def __post_init__(self):
        if self.frequency not in FREQUENCIES:
            raise BacktestConfigError(f"frequency must be one of {FREQUENCIES}, got '{self.frequency}'")
        if self.off_signal_mode not in OFF_SIGNAL_MODES:
            raise BacktestConfigError(
                f"off_signal_mode must be one of {OFF_SIGNAL_MODES}, got '{self.off_signal_mode}'"
            )
        if not (math.isfinite(self.dca_amount) and self.dca_amount > 0):
            raise BacktestConfigError(f"dca_amount must be > 0, got {self.dca_amount}")
        if not (math.isfinite(self.accel_multiplier) and self.accel_multiplier >= 1):
            raise BacktestConfigError(f"accel_multiplier must be >= 1, got {self.accel_multiplier}")
        try:
            to_day(self.start_date)
        except (TypeError, ValueError) as e:
            raise BacktestConfigError(f"Invalid start_date: {self.start_date!r}") from e

    @property
    def start(self) -> pd.Timestamp:
        return to_day(self.start_date)


@dataclass
class StrategyState:
    """전략 1회 실행의 가변 상태 (실행 간 공유 금지)"""
    btc_held: float = 0.0
    cash_balance: float = 0.0              # 포트폴리오 내 USD (대기 자금 + 매도 대금)
    total_deposited: float = 0.0           # 누적 입금 (단조 증가)
    total_sell_proceeds: float = 0.0       # 누적 매도 대금 (단조 증가)
    prev_signal_on: bool = False           # 직전 action date 의 CORE 상태
    sold_all_already: bool = False         # 현재 OFF 구간에서 전량 매도 완료 여부


@dataclass(frozen=True)
class TradeDecision:
    """action date 별 전략 결정"""
    buy_usd: float = 0.0                   # 현금에서 매수할 USD
    sell_usd: float = 0.0                  # 매도할 BTC 의 USD 가치
    sell_all: bool = False                 # BTC 전량 매도
    deploy_reserves: bool = False          # 현금 전액 일괄 매수 (CORE OFF->ON 재진입)


HOLD = TradeDecision()


@dataclass(frozen=True)
class SeriesPoint:
    """차트용 일별 포인트"""
    date: date
    portfolio_value: float                 # btc_held * price + cash_balance
    btc_held: float
    cash_balance: float
    cash_deployed: float                   # 누적 입금
    cash_withdrawn: float                  # 누적 매도 대금 (포트폴리오 내 현금으로 남음)
    btc_price: float


@dataclass(frozen=True)
class StrategyResult:
    """전략 실행 결과 (불변)"""
    name: str
    series: Tuple[SeriesPoint, ...] = field(default_factory=tuple)
    total_invested: float = 0.0
    total_withdrawn: float = 0.0
    net_deployed: float = 0.0              # invested - withdrawn
    final_btc_held: float = 0.0
    final_cash_balance: float = 0.0
    final_portfolio_value: float = 0.0
    total_return: float = 0.0              # fraction (0.25 = +25%)
    max_drawdown: float = 0.0              # fraction (0.35 = -35% peak-to-trough)
    btc_accumulated: float = 0.0

    def series_frame(self) -> pd.DataFrame:
        """series -> DataFrame (index=date)"""
        if not self.series:
            return pd.DataFrame(
                columns=['portfolio_value', 'btc_held', 'cash_balance', 'cash_deployed',
                         'cash_withdrawn', 'btc_price'],
                index=pd.DatetimeIndex([], name='date'),
            )
        df = pd.DataFrame([asdict(p) for p in self.series])
        df['date'] = pd.to_datetime(df['date'])
        return df.set_index('date')
