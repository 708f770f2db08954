# -*- coding: utf-8 -*-
"""
Signal Engine Test
==================

합성 시계열로 전체 파이프라인 (정렬 -> 점수 -> CORE/MACRO) 검증.
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from datetime import date

import numpy as np
import pandas as pd
import pytest

from coinstrat.data.observations import Observation
from coinstrat.engine import (
    SIGNAL_COLUMNS,
    compute_all_signals,
    compute_signal_records,
    fetch_and_compute,
    score_table,
)
from coinstrat.factors.carry import NanWarningCounter
from coinstrat.regime.records import DailyRecord, records_to_frame


START = "2023-01-01"
TODAY = "2023-06-30"


def daily_obs(start: str, end: str, fn) -> list:
    """[start, end] 매일 fn(i) 값의 Observation"""
    days = pd.date_range(start, end, freq="D")
    return [Observation.of(d, fn(i)) for i, d in enumerate(days)]


def make_series(**overrides) -> dict:
    """
    합성 입력:
    - BTC 완만한 상승
    - MVRV 0.9 / LTH-SOPR 0.95 -> VAL 3
    - DXY 일정 -> raw 1, 30일 지속성 충족 후 DXY 1
    - FRED 유동성/경기 시계열 없음
    """
    series = {
        "BTCUSD": daily_obs(START, "2023-06-20", lambda i: 20000 + 10 * i),
        "MVRV": daily_obs(START, TODAY, lambda i: 0.9),
        "LTH_SOPR": daily_obs(START, TODAY, lambda i: 0.95),
        "DXY": daily_obs(START, TODAY, lambda i: 103.0),
    }
    series.update(overrides)
    return series


class TestComputeAllSignals:
    """전체 파이프라인"""

    def test_calendar_spans_first_price_to_today(self):
        run = compute_all_signals(make_series(), today=TODAY)
        frame = run.frame
        assert frame.index[0] == pd.Timestamp(START)
        assert frame.index[-1] == pd.Timestamp(TODAY)
        assert len(frame) == (pd.Timestamp(TODAY) - pd.Timestamp(START)).days + 1
        assert frame.index.is_unique

    def test_signal_columns_complete(self):
        frame = compute_all_signals(make_series(), today=TODAY).frame
        for col in SIGNAL_COLUMNS:
            assert col in frame.columns
            assert not frame[col].isna().any()

    def test_core_turns_on_after_dxy_persistence(self):
        run = compute_all_signals(make_series(), today=TODAY)
        core = run.frame["CORE_ON"]
        # DXY 지속성 창 (30일) 충족 전까지 DXY_SCORE 0 -> 진입 불가
        assert (core.iloc[:29] == 0).all()
        assert core.iloc[29] == 1
        assert (core.iloc[29:] == 1).all()
        assert len(run.transitions) == 1
        assert run.transitions[0].entered

    def test_accum_equals_core(self):
        frame = compute_all_signals(make_series(), today=TODAY).frame
        assert (frame["ACCUM_ON"] == frame["CORE_ON"]).all()

    def test_missing_macro_inputs_use_seeds(self):
        """LIQ 시드 0 + CYCLE 시드 1 -> MACRO OFF"""
        run = compute_all_signals(make_series(), today=TODAY)
        assert (run.frame["LIQ_SCORE"] == 0).all()
        assert (run.frame["CYCLE_SCORE"] == 1).all()
        assert (run.frame["MACRO_ON"] == 0).all()
        assert run.nan_warnings.counts["LIQ_SCORE"] == len(run.frame)

    def test_price_forward_filled_to_today(self):
        frame = compute_all_signals(make_series(), today=TODAY).frame
        last_price = 20000 + 10 * (pd.Timestamp("2023-06-20") - pd.Timestamp(START)).days
        assert (frame.loc["2023-06-20":, "BTCUSD"] == last_price).all()

    def test_empty_anchor(self):
        run = compute_all_signals(make_series(BTCUSD=[]), today=TODAY)
        assert run.empty
        assert run.records() == []
        assert run.latest() is None

    def test_runs_have_independent_counters(self):
        a = compute_all_signals(make_series(), today=TODAY)
        b = compute_all_signals(make_series(), today=TODAY)
        assert a.nan_warnings is not b.nan_warnings
        assert a.nan_warnings.counts == b.nan_warnings.counts

    def test_explicit_counter_accumulates(self):
        counter = NanWarningCounter(limit=1)
        compute_all_signals(make_series(), today=TODAY, counter=counter)
        assert counter.counts["CYCLE_SCORE"] > 0

    def test_score_table_empty(self):
        run = score_table(pd.DataFrame())
        assert run.empty


class TestDailyRecords:
    """DailyRecord 출력"""

    def test_one_record_per_day(self):
        records = compute_signal_records(make_series(), today=TODAY)
        assert len(records) == 181
        assert isinstance(records[0], DailyRecord)
        assert records[0].date == date(2023, 1, 1)

    def test_missing_values_become_none(self):
        latest = compute_all_signals(make_series(), today=TODAY).latest()
        assert latest.walcl is None
        assert latest.us_liq is None
        assert latest.mvrv == pytest.approx(0.9)
        assert latest.val_score == 3
        assert latest.core_on == 1

    def test_records_round_trip_to_frame(self):
        run = compute_all_signals(make_series(), today=TODAY)
        frame = records_to_frame(run.records())
        assert list(frame["CORE_ON"]) == list(run.frame["CORE_ON"])
        assert np.isnan(frame["WALCL"].iloc[0])
        assert frame.index.equals(run.frame.index)


class TestFetchAndCompute:
    """수집기 주입"""

    def test_uses_fetched_series(self):
        run = fetch_and_compute(lambda: make_series(), today=TODAY)
        assert len(run.frame) == 181

    def test_failed_series_degrade(self, caplog):
        run = fetch_and_compute(lambda: make_series(MVRV=[]), today=TODAY)
        assert (run.frame["VAL_SCORE"] == 0).all()
        assert (run.frame["CORE_ON"] == 0).all()
