# -*- coding: utf-8 -*-
"""
Config Loader Tests
===================

default.yaml + 사용자 YAML + 환경변수 병합.
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from coinstrat.backtest import BacktestConfig
from coinstrat.config import (
    ConfigError,
    EngineConfig,
    load_backtest_defaults,
    load_engine_config,
    load_fetch_params,
)
from coinstrat.utils.timeframe import to_days


ENV_KEYS = (
    "COINSTRAT_CONFIG",
    "COINSTRAT_DCA_AMOUNT",
    "COINSTRAT_FREQUENCY",
    "COINSTRAT_OFF_MODE",
    "COINSTRAT_ACCEL_MULT",
    "FRED_API_KEY",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


class TestDefaults:
    """default.yaml == dataclass 기본값"""

    def test_engine_defaults(self):
        cfg = load_engine_config()
        assert cfg.valuation.mvrv_rich == 3.5
        assert cfg.dxy.persist_min_days == 20
        assert cfg.core.macro_min_score == 3
        assert cfg.diagnostics.nan_warning_limit == 5

    def test_yaml_durations_match_dataclass(self):
        loaded = load_engine_config()
        default = EngineConfig()
        assert to_days(loaded.liquidity.delta_periods) == to_days(default.liquidity.delta_periods) == 91
        assert to_days(loaded.liquidity.yoy_periods) == to_days(default.liquidity.yoy_periods) == 365
        assert to_days(loaded.dxy.ma_slow) == to_days(default.dxy.ma_slow)
        assert to_days(loaded.cycle.momentum_periods) == to_days(default.cycle.momentum_periods)
        assert to_days(loaded.price_regime.persist_window) == 30

    def test_backtest_defaults(self):
        bt = load_backtest_defaults()
        assert bt.dca_amount == 100.0
        assert bt.frequency == "weekly"
        assert bt.off_signal_mode == "pause"
        assert bt.macro_accel is True
        config = BacktestConfig(
            start_date=bt.start_date,
            dca_amount=bt.dca_amount,
            frequency=bt.frequency,
            off_signal_mode=bt.off_signal_mode,
        )
        assert config.start.year == 2018

    def test_fetch_defaults(self):
        params = load_fetch_params()
        assert params.binance_symbol == "BTCUSDT"
        assert params.fred_api_key is None


class TestOverrides:
    """사용자 YAML / 환경변수"""

    def test_user_yaml_deep_merge(self, tmp_path):
        path = tmp_path / "override.yaml"
        path.write_text("core:\n  val_strong: 2\n", encoding="utf-8")
        cfg = load_engine_config(path)
        assert cfg.core.val_strong == 2
        assert cfg.core.val_min == 1

    def test_config_from_env_path(self, tmp_path, monkeypatch):
        path = tmp_path / "override.yaml"
        path.write_text("backtest:\n  dca_amount: 50\n", encoding="utf-8")
        monkeypatch.setenv("COINSTRAT_CONFIG", str(path))
        assert load_backtest_defaults().dca_amount == 50

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("COINSTRAT_DCA_AMOUNT", "250")
        monkeypatch.setenv("COINSTRAT_FREQUENCY", "Monthly")
        monkeypatch.setenv("COINSTRAT_OFF_MODE", "sell_all")
        monkeypatch.setenv("COINSTRAT_ACCEL_MULT", "2")
        bt = load_backtest_defaults()
        assert bt.dca_amount == 250.0
        assert bt.frequency == "monthly"
        assert bt.off_signal_mode == "sell_all"
        assert bt.accel_multiplier == 2.0

    def test_env_beats_yaml(self, tmp_path, monkeypatch):
        path = tmp_path / "override.yaml"
        path.write_text("backtest:\n  dca_amount: 50\n", encoding="utf-8")
        monkeypatch.setenv("COINSTRAT_DCA_AMOUNT", "75")
        assert load_backtest_defaults(path).dca_amount == 75.0

    def test_fred_key_from_env(self, monkeypatch):
        monkeypatch.setenv("FRED_API_KEY", "abc123")
        assert load_fetch_params().fred_api_key == "abc123"


class TestErrors:
    """잘못된 설정 -> ConfigError"""

    def test_unknown_key(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("valuation:\n  mvrv_cheap: 0.8\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_engine_config(path)

    def test_section_not_mapping(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("dxy: 5\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_engine_config(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_engine_config(tmp_path / "nope.yaml")

    def test_bad_numeric_env(self, monkeypatch):
        monkeypatch.setenv("COINSTRAT_DCA_AMOUNT", "lots")
        with pytest.raises(ConfigError):
            load_backtest_defaults()

    def test_config_error_is_value_error(self):
        assert issubclass(ConfigError, ValueError)
