# -*- coding: utf-8 -*-
"""DailyRecord - fixed per-day output struct for downstream (UI / report) consumers."""

from __future__ import annotations

import math
from dataclasses import dataclass, fields
from datetime import date
from typing import Any, Dict, List, Optional

import pandas as pd


@dataclass(frozen=True)
class DailyRecord:
    """
    하루치 시그널 레코드.

    Load-bearing (aggregator 입력): val_score, liq_score, dxy_score,
    cycle_score, price_regime_on. 출력: core_on, macro_on, accum_on.
    나머지 Optional 필드는 진단/표시용 (값 없으면 None).
    """
    date: date

    # --- raw inputs (forward-filled) ---
    btc_usd: Optional[float] = None
    walcl: Optional[float] = None
    wtregen: Optional[float] = None
    rrp: Optional[float] = None
    dxy: Optional[float] = None
    sahm: Optional[float] = None
    yc_m: Optional[float] = None
    new_orders: Optional[float] = None
    mvrv: Optional[float] = None
    lth_sopr: Optional[float] = None
    lth_nupl: Optional[float] = None

    # --- diagnostics ---
    us_liq: Optional[float] = None
    us_liq_yoy: Optional[float] = None          # %
    us_liq_13w_delta: Optional[float] = None
    dxy_ma50: Optional[float] = None
    dxy_ma200: Optional[float] = None
    dxy_roc20: Optional[float] = None           # fraction
    dxy_persist: Optional[float] = None
    no_yoy: Optional[float] = None              # %
    no_mom3: Optional[float] = None
    btc_ma40w: Optional[float] = None
    price_regime_persist: Optional[float] = None

    # --- scores ---
    val_score: int = 0
    liq_score: int = 0
    dxy_raw_score: int = 1
    dxy_persist_ok: int = 0
    dxy_score: int = 0
    cycle_score: int = 1
    price_regime_raw: int = 0
    price_regime_on: int = 0

    # --- aggregate ---
    core_on: int = 0
    macro_on: int = 0
    accum_on: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


# DataFrame 컬럼 -> DailyRecord 필드
COLUMN_TO_FIELD: Dict[str, str] = {
    "BTCUSD": "btc_usd",
    "WALCL": "walcl",
    "WTREGEN": "wtregen",
    "RRPONTSYD": "rrp",
    "DXY": "dxy",
    "SAHM": "sahm",
    "YC_M": "yc_m",
    "NO": "new_orders",
    "MVRV": "mvrv",
    "LTH_SOPR": "lth_sopr",
    "LTH_NUPL": "lth_nupl",
    "US_LIQ": "us_liq",
    "US_LIQ_YOY": "us_liq_yoy",
    "US_LIQ_13W_DELTA": "us_liq_13w_delta",
    "DXY_MA50": "dxy_ma50",
    "DXY_MA200": "dxy_ma200",
    "DXY_ROC20": "dxy_roc20",
    "DXY_PERSIST": "dxy_persist",
    "NO_YOY": "no_yoy",
    "NO_MOM3": "no_mom3",
    "BTC_MA40W": "btc_ma40w",
    "PRICE_REGIME_PERSIST": "price_regime_persist",
    "VAL_SCORE": "val_score",
    "LIQ_SCORE": "liq_score",
    "DXY_RAW_SCORE": "dxy_raw_score",
    "DXY_PERSIST_OK": "dxy_persist_ok",
    "DXY_SCORE": "dxy_score",
    "CYCLE_SCORE": "cycle_score",
    "PRICE_REGIME_RAW": "price_regime_raw",
    "PRICE_REGIME_ON": "price_regime_on",
    "CORE_ON": "core_on",
    "MACRO_ON": "macro_on",
    "ACCUM_ON": "accum_on",
}
FIELD_TO_COLUMN: Dict[str, str] = {v: k for k, v in COLUMN_TO_FIELD.items()}

_INT_FIELDS = {f.name for f in fields(DailyRecord) if f.type in ("int", int)}


def _clean(name: str, value: Any) -> Any:
    if value is None:
        return None
    if name in _INT_FIELDS:
        return int(value)
    v = float(value)
    return v if math.isfinite(v) else None


def to_daily_records(frame: pd.DataFrame) -> List[DailyRecord]:
    """시그널 DataFrame -> DailyRecord 리스트 (NaN -> None)"""
    cols = [c for c in frame.columns if c in COLUMN_TO_FIELD]
    records: List[DailyRecord] = []
    for ts, row in zip(frame.index, frame[cols].itertuples(index=False, name=None)):
        kwargs = {COLUMN_TO_FIELD[c]: _clean(COLUMN_TO_FIELD[c], v) for c, v in zip(cols, row)}
        records.append(DailyRecord(date=pd.Timestamp(ts).date(), **kwargs))
    return records


def records_to_frame(records: List[DailyRecord]) -> pd.DataFrame:
    """DailyRecord 리스트 -> 시그널 DataFrame (역변환)"""
    if not records:
        return pd.DataFrame(columns=list(COLUMN_TO_FIELD), index=pd.DatetimeIndex([], name="date"))
    rows = [
        {FIELD_TO_COLUMN[k]: (float("nan") if v is None else v) for k, v in r.to_dict().items() if k != "date"}
        for r in records
    ]
    index = pd.DatetimeIndex([pd.Timestamp(r.date) for r in records], name="date")
    return pd.DataFrame(rows, index=index)
