"""
Config Module
=============

엔진 임계값 / 수집 / 백테스트 기본값 관리.
YAML 파일에서 설정 로드 + 환경변수 오버라이드.
"""

from .loader import (
    load_config,
    load_engine_config,
    load_fetch_params,
    load_backtest_defaults,
    ConfigError,
    EngineConfig,
    ValuationParams,
    LiquidityParams,
    DxyParams,
    CycleParams,
    PriceRegimeParams,
    CoreParams,
    DiagnosticsParams,
    FetchParams,
    BacktestDefaults,
)

__all__ = [
    'load_config',
    'load_engine_config',
    'load_fetch_params',
    'load_backtest_defaults',
    'ConfigError',
    'EngineConfig',
    'ValuationParams',
    'LiquidityParams',
    'DxyParams',
    'CycleParams',
    'PriceRegimeParams',
    'CoreParams',
    'DiagnosticsParams',
    'FetchParams',
    'BacktestDefaults',
]
