# -*- coding: utf-8 -*-
"""
Crypto Fetchers
===============

BTC 가격 / 온체인 지표 수집.

- fetch_btc_price: 로컬 JSON 히스토리 + 바이낸스 1d klines tail (겹치는 날짜는 바이낸스 우선)
- fetch_mvrv: blockchain.info MVRV
- fetch_bgeometrics: BGeometrics LTH-SOPR / LTH-NUPL

모든 fetcher 는 실패 시 [] 반환.
"""
from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd
import requests

from coinstrat.config.loader import ROOT_DIR, FetchParams, load_fetch_params
from coinstrat.data.observations import Observation

logger = logging.getLogger(__name__)


BINANCE_PAGE_LIMIT = 1000
BINANCE_INTERVAL = "1d"
BINANCE_LISTING_DATE = "2017-08-17"     # 로컬 히스토리 없을 때 시작점

# BGeometrics 허용 파일명 -> 정렬 테이블 컬럼명
BGEOMETRICS_FILES: Dict[str, str] = {
    "lth_sopr": "LTH_SOPR",
    "lth_nupl": "LTH_NUPL",
}


# =============================================================================
# Helpers
# =============================================================================

def _ms_to_day(ms: int) -> pd.Timestamp:
    return pd.Timestamp(int(ms), unit="ms").normalize()


def merge_unique(base: Iterable[Observation], tail: Iterable[Observation]) -> List[Observation]:
    """날짜별 병합 (tail 우선), 날짜 오름차순"""
    merged: Dict[Any, Observation] = {}
    for obs in base:
        merged[obs.date] = obs
    for obs in tail:
        merged[obs.date] = obs
    return [merged[d] for d in sorted(merged)]


def load_btc_history(path: Optional[str]) -> List[Observation]:
    """
    로컬 BTC 일봉 히스토리 로드

    포맷: [{"date": "YYYY-MM-DD", "close": float}, ...]
    상대 경로는 레포 루트 기준. 파일 없음/파싱 실패 -> [].
    """
    if not path:
        return []
    file_path = Path(path)
    if not file_path.is_absolute():
        file_path = ROOT_DIR / file_path
    if not file_path.exists():
        logger.warning(f"BTC history not found: {file_path}")
        return []

    try:
        with open(file_path, "r", encoding="utf-8") as f:
            rows = json.load(f)
        history = [Observation.of(row["date"], row["close"]) for row in rows]
    except (OSError, ValueError, KeyError, TypeError) as e:
        logger.error(f"BTC history unreadable ({file_path}): {e}")
        return []
    return [o for o in history if o.is_valid]


# =============================================================================
# Binance
# =============================================================================

def fetch_klines_page(params: FetchParams, start_ms: int, end_ms: int) -> List[list]:
    """바이낸스 klines 한 페이지 (실패 시 [])"""
    query = {
        "symbol": params.binance_symbol,
        "interval": BINANCE_INTERVAL,
        "startTime": start_ms,
        "endTime": end_ms,
        "limit": BINANCE_PAGE_LIMIT,
    }
    try:
        resp = requests.get(params.binance_url, params=query, timeout=params.timeout)
        resp.raise_for_status()
        data = resp.json()
    except (requests.RequestException, ValueError) as e:
        logger.error(f"Binance klines fetch failed (start={start_ms}): {e}")
        return []
    return data if isinstance(data, list) else []


def fetch_binance_klines(start_ms: int, end_ms: int, params: Optional[FetchParams] = None) -> List[Observation]:
    """
    start_ms ~ end_ms 일봉 종가 (페이지 1000개씩)

    날짜 = open time (UTC), 값 = close.
    """
    params = params or load_fetch_params()
    out: List[Observation] = []
    current = start_ms

    while current < end_ms:
        klines = fetch_klines_page(params, current, end_ms)
        if not klines:
            break

        for candle in klines:
            out.append(Observation.of(_ms_to_day(candle[0]), candle[4]))

        current = int(klines[-1][0]) + 1
        if len(klines) < BINANCE_PAGE_LIMIT:
            break
        time.sleep(params.page_sleep)

    return [o for o in out if o.is_valid]


def fetch_btc_price(params: Optional[FetchParams] = None, now: Optional[pd.Timestamp] = None) -> List[Observation]:
    """
    BTC 일봉 종가: 로컬 히스토리 + 바이낸스 tail

    Args:
        params: FetchParams
        now: tail 끝 시각 (기본 현재 UTC)
    """
    params = params or load_fetch_params()
    history = load_btc_history(params.btc_history_path)

    if history:
        start = pd.Timestamp(history[-1].date) + pd.Timedelta(days=1)
    else:
        start = pd.Timestamp(BINANCE_LISTING_DATE)
    end = now if now is not None else pd.Timestamp.now(tz="UTC").tz_localize(None)

    start_ms = int(start.value // 10**6)
    end_ms = int(pd.Timestamp(end).value // 10**6)
    if start_ms >= end_ms:
        return history

    tail = fetch_binance_klines(start_ms, end_ms, params)
    merged = merge_unique(history, tail)
    logger.debug(f"BTC price: {len(history)} local + {len(tail)} binance -> {len(merged)}")
    return merged


# =============================================================================
# On-chain
# =============================================================================

def fetch_mvrv(params: Optional[FetchParams] = None) -> List[Observation]:
    """blockchain.info MVRV ({"values": [{"x": unix_sec, "y": value}, ...]})"""
    params = params or load_fetch_params()
    query = {
        "timespan": "all",
        "sampled": "true",
        "metadata": "false",
        "daysAverageString": "1d",
        "format": "json",
    }
    try:
        resp = requests.get(params.mvrv_url, params=query, timeout=params.timeout)
        resp.raise_for_status()
        values = resp.json()["values"]
        out = [
            Observation.of(pd.Timestamp(int(v["x"]), unit="s"), v["y"])
            for v in values
        ]
    except (requests.RequestException, ValueError, KeyError, TypeError) as e:
        logger.error(f"MVRV fetch failed: {e}")
        return []
    return [o for o in out if o.is_valid]


def fetch_bgeometrics(file: str, params: Optional[FetchParams] = None) -> List[Observation]:
    """
    BGeometrics 지표 파일 ([[unix_ms, value], ...])

    Args:
        file: "lth_sopr" | "lth_nupl" (그 외는 거부 -> [])
    """
    if file not in BGEOMETRICS_FILES:
        logger.error(f"BGeometrics file not allowed: {file!r} (allowed: {sorted(BGEOMETRICS_FILES)})")
        return []

    params = params or load_fetch_params()
    url = f"{params.bgeometrics_url.rstrip('/')}/{file}.json"
    try:
        resp = requests.get(url, timeout=params.timeout)
        resp.raise_for_status()
        rows = resp.json()
    except (requests.RequestException, ValueError) as e:
        logger.error(f"BGeometrics {file} fetch failed: {e}")
        return []
    if not isinstance(rows, list):
        logger.error(f"BGeometrics {file}: unexpected payload type {type(rows).__name__}")
        return []

    out: List[Observation] = []
    skipped = 0
    for row in rows:
        obs = _bgeometrics_point(row)
        if obs is None:
            skipped += 1
        else:
            out.append(obs)
    if skipped:
        logger.warning(f"BGeometrics {file}: skipped {skipped} malformed rows")
    return out


def _bgeometrics_point(row: Any) -> Optional[Observation]:
    """[unix_ms, value] -> Observation (형식 오류/결측 -> None)"""
    if not isinstance(row, (list, tuple)) or len(row) < 2 or row[0] is None or row[1] is None:
        return None
    try:
        obs = Observation.of(_ms_to_day(row[0]), row[1])
    except (TypeError, ValueError, OverflowError):
        return None
    return obs if obs.is_valid else None
