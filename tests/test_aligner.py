# -*- coding: utf-8 -*-
"""
Observation Aligner Tests
=========================

일봉 캘린더 완전성 / forward-fill 규칙.
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import numpy as np
import pandas as pd

from coinstrat.data.aligner import RAW_COLUMNS, align_observations, forward_fill_onto
from coinstrat.data.observations import Observation, observations_from_pairs, to_series


def make_obs(pairs):
    return observations_from_pairs(pairs)


BTC = make_obs([
    ("2024-01-01", 42000),
    ("2024-01-02", 43000),
    # 2024-01-03 누락
    ("2024-01-04", 44000),
    ("2024-01-05", 45000),
])


class TestAlignmentCompleteness:
    """[첫 BTC 일자, today] 연속 캘린더"""

    def test_one_row_per_day(self):
        table = align_observations(BTC, today="2024-01-10")
        assert len(table) == 10
        assert table.index[0] == pd.Timestamp("2024-01-01")
        assert table.index[-1] == pd.Timestamp("2024-01-10")
        assert table.index.is_unique
        assert (table.index.to_series().diff().dropna() == pd.Timedelta(days=1)).all()

    def test_raw_columns_always_present(self):
        table = align_observations(BTC, today="2024-01-05")
        assert list(table.columns) == list(RAW_COLUMNS)
        assert table["MVRV"].isna().all()

    def test_anchor_gap_is_forward_filled(self):
        table = align_observations(BTC, today="2024-01-07")
        assert table.loc["2024-01-03", "BTCUSD"] == 43000
        assert (table.loc["2024-01-06":, "BTCUSD"] == 45000).all()

    def test_empty_anchor(self):
        table = align_observations([], {"MVRV": make_obs([("2024-01-01", 1.2)])}, today="2024-01-05")
        assert table.empty
        assert "BTCUSD" in table.columns
        assert "MVRV" in table.columns


class TestForwardFill:
    """각 값 = 해당 일자 이전(포함) 가장 최근 관측치, 없으면 NaN"""

    def test_weekly_series_filled_daily(self):
        walcl = make_obs([("2024-01-03", 7_700_000), ("2024-01-10", 7_650_000)])
        table = align_observations(BTC, {"WALCL": walcl}, today="2024-01-12")
        assert np.isnan(table.loc["2024-01-02", "WALCL"])
        assert table.loc["2024-01-03", "WALCL"] == 7_700_000
        assert table.loc["2024-01-09", "WALCL"] == 7_700_000
        assert table.loc["2024-01-12", "WALCL"] == 7_650_000

    def test_observation_before_calendar_seeds_value(self):
        walcl = make_obs([("2023-12-27", 7_800_000)])
        table = align_observations(BTC, {"WALCL": walcl}, today="2024-01-03")
        assert (table["WALCL"] == 7_800_000).all()

    def test_future_observations_ignored(self):
        mvrv = make_obs([("2024-01-02", 1.5), ("2024-02-01", 9.9)])
        table = align_observations(BTC, {"MVRV": mvrv}, today="2024-01-05")
        assert table["MVRV"].max() == 1.5

    def test_invalid_values_treated_as_missing(self):
        dxy = make_obs([("2024-01-01", 100.0), ("2024-01-02", "."), ("2024-01-03", float("inf"))])
        table = align_observations(BTC, {"DXY": dxy}, today="2024-01-04")
        assert (table["DXY"] == 100.0).all()

    def test_forward_fill_property(self):
        """임의 컬럼: 값은 최근 관측치 그대로 (NaN 은 첫 관측 이전만)"""
        sahm = make_obs([("2024-01-02", 0.3), ("2024-01-05", 0.4)])
        table = align_observations(BTC, {"SAHM": sahm}, today="2024-01-08")
        obs = to_series(sahm)
        for day, value in table["SAHM"].items():
            prior = obs[obs.index <= day]
            if prior.empty:
                assert np.isnan(value)
            else:
                assert value == prior.iloc[-1]

    def test_forward_fill_onto_empty_series(self):
        cal = pd.date_range("2024-01-01", periods=3, freq="D")
        out = forward_fill_onto(pd.Series([], dtype=float, name="NO"), cal)
        assert len(out) == 3
        assert out.isna().all()


class TestObservations:
    """Observation -> Series"""

    def test_duplicate_dates_last_wins(self):
        s = to_series(make_obs([("2024-01-01", 1.0), ("2024-01-01", 2.0)]))
        assert len(s) == 1
        assert s.iloc[0] == 2.0

    def test_later_nan_does_not_override_valid_value(self):
        """비유한 값은 중복 제거 전에 빠지므로 앞의 유효값 유지"""
        s = to_series(make_obs([("2024-01-01", 5.0), ("2024-01-01", np.nan)]))
        assert len(s) == 1
        assert s.iloc[0] == 5.0

    def test_sorted_output(self):
        s = to_series(make_obs([("2024-01-03", 3.0), ("2024-01-01", 1.0)]))
        assert list(s.index) == [pd.Timestamp("2024-01-01"), pd.Timestamp("2024-01-03")]

    def test_unparseable_value_is_nan(self):
        assert not Observation.of("2024-01-01", "n/a").is_valid
