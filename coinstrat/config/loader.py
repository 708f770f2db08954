"""
Config Loader
=============

YAML 기반 엔진/백테스트 파라미터 로더.

사용법:
    from coinstrat.config import load_engine_config, load_backtest_defaults

    cfg = load_engine_config()
    print(cfg.valuation.mvrv_rich)       # 3.5
    print(cfg.dxy.persist_min_days)      # 20

    bt = load_backtest_defaults()
    print(bt.dca_amount)                 # 100.0

설정 우선순위:
    config/default.yaml < 사용자 YAML (COINSTRAT_CONFIG 또는 path 인자) < 환경변수

환경변수 오버라이드:
    COINSTRAT_DCA_AMOUNT=250       # DCA 금액
    COINSTRAT_FREQUENCY=monthly    # daily | weekly | monthly
    COINSTRAT_OFF_MODE=sell_all    # pause | sell_matching | sell_all
    COINSTRAT_ACCEL_MULT=2         # MACRO 가속 배수
    FRED_API_KEY=...               # FRED API 키 (.env 지원)
"""

import os
from pathlib import Path
from dataclasses import dataclass, field, fields
from typing import Dict, Any, Optional, Union

import yaml
from dotenv import load_dotenv


ROOT_DIR = Path(__file__).parent.parent.parent
CONFIG_DIR = ROOT_DIR / "config"
DEFAULT_CONFIG_PATH = CONFIG_DIR / "default.yaml"

# .env (레포 루트) -> os.environ, 이미 설정된 환경변수가 우선
_local_env = ROOT_DIR / ".env"
if _local_env.exists():
    load_dotenv(_local_env)


class ConfigError(ValueError):
    """설정 파일/값 오류"""


# =============================================================================
# Factor Parameters
# =============================================================================

@dataclass
class ValuationParams:
    """Valuation (MVRV + LTH-SOPR) 임계값"""
    mvrv_deep: float = 1.0            # MVRV < 1.0 -> 저평가
    mvrv_fair: float = 1.8            # MVRV < 1.8 + SOPR < 1 -> score 2
    mvrv_rich: float = 3.5            # MVRV >= 3.5 -> score 0
    sopr_capitulation: float = 1.0    # LTH-SOPR < 1 -> 손실 매도 (항복)
    initial_score: int = 0            # 첫 유효값 이전 carry-forward 시드


@dataclass
class LiquidityParams:
    """US 순유동성 (WALCL - TGA - RRP)"""
    rrp_scale: float = 1000.0         # RRP (billions) -> millions
    yoy_periods: Union[int, str] = 365
    delta_periods: Union[int, str] = 91   # 13주
    initial_score: int = 0


@dataclass
class DxyParams:
    """달러 인덱스 (ROC20 + MA50/MA200 + 지속성)"""
    roc_periods: Union[int, str] = 20
    roc_threshold: float = 0.005      # +-0.5%
    ma_fast: Union[int, str] = 50
    ma_slow: Union[int, str] = 200
    persist_window: Union[int, str] = 30
    persist_min_days: int = 20        # 30일 중 20일 이상 raw >= 1
    initial_raw_score: int = 1        # 중립


@dataclass
class CycleParams:
    """경기 사이클 (Sahm + 10Y-3M + 제조업 신규주문)"""
    sahm_recession: float = 0.50
    sahm_expansion: float = 0.35
    yc_recession: float = 0.0
    yc_expansion: float = 0.75
    yoy_periods: Union[int, str] = 365
    momentum_periods: Union[int, str] = 90
    initial_score: int = 1


@dataclass
class PriceRegimeParams:
    """40주 이평 가격 레짐"""
    ma_weeks: int = 40
    persist_window: Union[int, str] = 30
    persist_min_days: int = 20


@dataclass
class CoreParams:
    """CORE 상태머신 / MACRO 임계값"""
    val_strong: int = 3               # VAL >= 3 단독 진입
    val_min: int = 1                  # VAL >= 1 + PRICE_REGIME_ON 진입
    dxy_min: int = 1                  # 진입/ MACRO 공통 DXY 조건
    val_exit_max: int = 2             # PR OFF + VAL <= 2 -> 이탈
    macro_min_score: int = 3          # LIQ + CYCLE >= 3


@dataclass
class DiagnosticsParams:
    """진단 로그"""
    nan_warning_limit: int = 5        # 팩터별 NaN 경고 로그 최대 횟수


@dataclass
class EngineConfig:
    """시그널 엔진 통합 설정"""
    valuation: ValuationParams = field(default_factory=ValuationParams)
    liquidity: LiquidityParams = field(default_factory=LiquidityParams)
    dxy: DxyParams = field(default_factory=DxyParams)
    cycle: CycleParams = field(default_factory=CycleParams)
    price_regime: PriceRegimeParams = field(default_factory=PriceRegimeParams)
    core: CoreParams = field(default_factory=CoreParams)
    diagnostics: DiagnosticsParams = field(default_factory=DiagnosticsParams)


# =============================================================================
# Fetch / Backtest Parameters
# =============================================================================

@dataclass
class FetchParams:
    """외부 데이터 수집 설정"""
    fred_url: str = "https://api.stlouisfed.org/fred/series/observations"
    fred_api_key: Optional[str] = None
    binance_url: str = "https://api.binance.com/api/v3/klines"
    binance_symbol: str = "BTCUSDT"
    mvrv_url: str = "https://api.blockchain.info/charts/mvrv"
    bgeometrics_url: str = "https://charts.bgeometrics.com/files"
    btc_history_path: Optional[str] = "data/btc_daily.json"
    timeout: float = 30.0
    max_workers: int = 8
    page_sleep: float = 0.1           # 바이낸스 페이지 간 대기 (초)


@dataclass
class BacktestDefaults:
    """백테스트 기본값"""
    start_date: str = "2018-01-01"
    dca_amount: float = 100.0
    frequency: str = "weekly"
    off_signal_mode: str = "pause"
    macro_accel: bool = True
    accel_multiplier: float = 3.0


# =============================================================================
# Loading
# =============================================================================

def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config root must be a mapping: {path}")
    return data


def _deep_merge(base: Dict, override: Dict) -> Dict:
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _apply_env_overrides(config: Dict) -> Dict:
    bt = config.setdefault("backtest", {})
    try:
        if os.getenv("COINSTRAT_DCA_AMOUNT"):
            bt["dca_amount"] = float(os.getenv("COINSTRAT_DCA_AMOUNT"))
        if os.getenv("COINSTRAT_ACCEL_MULT"):
            bt["accel_multiplier"] = float(os.getenv("COINSTRAT_ACCEL_MULT"))
    except ValueError as e:
        raise ConfigError(f"Invalid numeric environment override: {e}") from e
    if os.getenv("COINSTRAT_FREQUENCY"):
        bt["frequency"] = os.getenv("COINSTRAT_FREQUENCY").strip().lower()
    if os.getenv("COINSTRAT_OFF_MODE"):
        bt["off_signal_mode"] = os.getenv("COINSTRAT_OFF_MODE").strip().lower()
    if os.getenv("FRED_API_KEY"):
        config.setdefault("fetch", {})
        config["fetch"]["fred_api_key"] = os.getenv("FRED_API_KEY")
    return config


def _build(cls, section: Optional[Dict[str, Any]], name: str):
    """dict -> dataclass (알 수 없는 키는 오류)"""
    section = section or {}
    if not isinstance(section, dict):
        raise ConfigError(f"Section '{name}' must be a mapping")
    known = {f.name for f in fields(cls)}
    unknown = set(section) - known
    if unknown:
        raise ConfigError(f"Unknown keys in '{name}': {sorted(unknown)}")
    return cls(**section)


def load_config(path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """default.yaml + 사용자 YAML + 환경변수 병합 결과 (raw dict)"""
    base = _load_yaml(DEFAULT_CONFIG_PATH)
    user_path = path or os.getenv("COINSTRAT_CONFIG")
    if user_path:
        user_path = Path(user_path)
        if not user_path.exists():
            raise ConfigError(f"Config file not found: {user_path}")
        base = _deep_merge(base, _load_yaml(user_path))
    return _apply_env_overrides(base)


def load_engine_config(path: Optional[Union[str, Path]] = None) -> EngineConfig:
    """시그널 엔진 설정 로드"""
    raw = load_config(path)
    return EngineConfig(
        valuation=_build(ValuationParams, raw.get("valuation"), "valuation"),
        liquidity=_build(LiquidityParams, raw.get("liquidity"), "liquidity"),
        dxy=_build(DxyParams, raw.get("dxy"), "dxy"),
        cycle=_build(CycleParams, raw.get("cycle"), "cycle"),
        price_regime=_build(PriceRegimeParams, raw.get("price_regime"), "price_regime"),
        core=_build(CoreParams, raw.get("core"), "core"),
        diagnostics=_build(DiagnosticsParams, raw.get("diagnostics"), "diagnostics"),
    )


def load_fetch_params(path: Optional[Union[str, Path]] = None) -> FetchParams:
    """데이터 수집 설정 로드"""
    return _build(FetchParams, load_config(path).get("fetch"), "fetch")


def load_backtest_defaults(path: Optional[Union[str, Path]] = None) -> BacktestDefaults:
    """백테스트 기본값 로드"""
    return _build(BacktestDefaults, load_config(path).get("backtest"), "backtest")
