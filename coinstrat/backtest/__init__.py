"""
DCA Backtest Module
===================

시그널 시리즈 재생 -> Baseline / CORE / CORE + MACRO DCA 비교.

- models: BacktestConfig, StrategyState, TradeDecision, StrategyResult
- strategies: action date 별 결정 규칙
- engine: run_backtest, results_summary
"""
from coinstrat.backtest.models import (
    BacktestConfig,
    BacktestConfigError,
    StrategyState,
    TradeDecision,
    SeriesPoint,
    StrategyResult,
    FREQUENCIES,
    OFF_SIGNAL_MODES,
)
from coinstrat.backtest.strategies import (
    BASELINE_NAME,
    CORE_NAME,
    accelerated_name,
    build_strategies,
)
from coinstrat.backtest.engine import (
    sample_by_frequency,
    compute_max_drawdown,
    run_strategy,
    run_backtest,
    results_summary,
    print_report,
)

__all__ = [
    'BacktestConfig',
    'BacktestConfigError',
    'StrategyState',
    'TradeDecision',
    'SeriesPoint',
    'StrategyResult',
    'FREQUENCIES',
    'OFF_SIGNAL_MODES',
    'BASELINE_NAME',
    'CORE_NAME',
    'accelerated_name',
    'build_strategies',
    'sample_by_frequency',
    'compute_max_drawdown',
    'run_strategy',
    'run_backtest',
    'results_summary',
    'print_report',
]
