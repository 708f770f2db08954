# -*- coding: utf-8 -*-
"""
Rolling Math Tests
==================

Tests for coinstrat/utils/rolling.py
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import numpy as np
import pandas as pd
import pytest

from coinstrat.utils.rolling import (
    rolling_mean,
    pct_change,
    diff,
    rolling_fraction,
    meets_persistence,
)


class TestRollingMean:
    """후행 이동평균"""

    def test_basic_window(self):
        out = rolling_mean([1, 2, 3, 4, 5], 3)
        np.testing.assert_allclose(out, [np.nan, np.nan, 2.0, 3.0, 4.0])

    def test_nan_poisons_window(self):
        """윈도우 안 NaN 하나 -> 결과 NaN (유효값만 평균 안 냄)"""
        out = rolling_mean([1, np.nan, 3, 4, 5], 2)
        np.testing.assert_allclose(out, [np.nan, np.nan, np.nan, 3.5, 4.5])

    def test_window_one_is_identity(self):
        np.testing.assert_allclose(rolling_mean([1.5, 2.5], 1), [1.5, 2.5])

    def test_series_keeps_index_and_name(self):
        idx = pd.date_range("2024-01-01", periods=4, freq="D")
        s = pd.Series([2.0, 4.0, 6.0, 8.0], index=idx, name="DXY")
        out = rolling_mean(s, 2)
        assert isinstance(out, pd.Series)
        assert out.name == "DXY"
        assert out.index.equals(idx)
        assert out.iloc[-1] == 7.0

    def test_invalid_window(self):
        with pytest.raises(ValueError):
            rolling_mean([1, 2, 3], 0)


class TestPctChangeAndDiff:
    """변화율 / 차분"""

    def test_pct_change(self):
        out = pct_change([100, 110, 0, 5], 1)
        np.testing.assert_allclose(out, [np.nan, 0.1, -1.0, np.nan])

    def test_pct_change_nan_previous(self):
        out = pct_change([np.nan, 10, 20], 1)
        np.testing.assert_allclose(out, [np.nan, np.nan, 1.0])

    def test_pct_change_does_not_fill_gaps(self):
        """pandas 기본 pct_change 와 달리 이전 NaN 을 건너뛰지 않음"""
        out = pct_change([10, np.nan, 20], 1)
        assert np.isnan(out[2])

    def test_diff(self):
        out = diff([1, 4, 9, 16], 2)
        np.testing.assert_allclose(out, [np.nan, np.nan, 8.0, 12.0])

    def test_diff_periods_longer_than_input(self):
        out = diff([1, 2], 5)
        assert np.isnan(out).all()


class TestPersistence:
    """지속성 판정 (N 일 중 M 일)"""

    def test_exact_threshold_passes(self):
        frac = np.array([20 / 30])
        assert meets_persistence(frac, 30, 20)[0]

    def test_below_threshold_fails(self):
        frac = np.array([19 / 30])
        assert not meets_persistence(frac, 30, 20)[0]

    def test_nan_fraction_is_false(self):
        assert not meets_persistence(np.array([np.nan]), 30, 20)[0]

    def test_rolling_fraction_matches_count(self):
        flags = [1, 1, 0, 1, 0, 0]
        out = rolling_fraction(flags, 3)
        # 윈도우: [1,1,0] [1,0,1] [0,1,0] [1,0,0]
        np.testing.assert_allclose(out, [np.nan, np.nan, 2 / 3, 2 / 3, 1 / 3, 1 / 3])

    def test_rolling_fraction_all_zero_window(self):
        """마지막 윈도우가 전부 0 이면 0.0"""
        out = rolling_fraction([1, 0, 0, 0], 3)
        np.testing.assert_allclose(out, [np.nan, np.nan, 1 / 3, 0.0])
