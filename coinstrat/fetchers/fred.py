# -*- coding: utf-8 -*-
"""
FRED Fetcher
============

FRED (Federal Reserve Economic Data) 시계열 관측치 수집.

- 결측 표기 "." 은 제외
- 실패 시 [] 반환 (예외 전파 안 함)

사용법:
    from coinstrat.fetchers.fred import fetch_fred_series

    walcl = fetch_fred_series("WALCL")          # FRED_API_KEY 필요
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from coinstrat.config.loader import FetchParams, load_fetch_params
from coinstrat.data.observations import Observation

logger = logging.getLogger(__name__)


# FRED series id -> 정렬 테이블 컬럼명
FRED_SERIES: Dict[str, str] = {
    "WALCL": "WALCL",               # Fed 총자산 (millions, weekly)
    "WTREGEN": "WTREGEN",           # TGA (millions, weekly)
    "RRPONTSYD": "RRPONTSYD",       # 역레포 (billions, daily)
    "DTWEXBGS": "DXY",              # Broad dollar index (daily)
    "SAHMREALTIME": "SAHM",         # Sahm rule (monthly)
    "T10Y3M": "YC_M",               # 10Y - 3M 스프레드 (daily)
    "AMTMNO": "NO",                 # 제조업 신규 주문 (monthly)
}

MISSING_VALUE = "."


def parse_fred_observations(payload: Dict[str, Any]) -> List[Observation]:
    """FRED JSON 응답 -> Observation 리스트 ("." / 파싱 불가 값 제외)"""
    out: List[Observation] = []
    for obs in payload.get("observations", []):
        raw = obs.get("value")
        if raw is None or raw == MISSING_VALUE:
            continue
        point = Observation.of(obs["date"], raw)
        if point.is_valid:
            out.append(point)
    return out


def fetch_fred_series(series_id: str, params: Optional[FetchParams] = None) -> List[Observation]:
    """
    FRED 시계열 하나 가져오기

    Args:
        series_id: FRED series id (e.g. "WALCL")
        params: FetchParams (None 이면 load_fetch_params(): YAML + FRED_API_KEY)

    Returns:
        날짜 오름차순 Observation 리스트. 실패 시 [].
    """
    params = params or load_fetch_params()
    if not params.fred_api_key:
        logger.error(f"FRED {series_id}: no API key (set FRED_API_KEY)")
        return []

    query = {
        "series_id": series_id,
        "api_key": params.fred_api_key,
        "file_type": "json",
    }
    try:
        resp = requests.get(params.fred_url, params=query, timeout=params.timeout)
        resp.raise_for_status()
        observations = parse_fred_observations(resp.json())
    except (requests.RequestException, ValueError, KeyError) as e:
        logger.error(f"FRED {series_id} fetch failed: {e}")
        return []

    logger.debug(f"FRED {series_id}: {len(observations)} observations")
    return observations
