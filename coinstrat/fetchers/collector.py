# -*- coding: utf-8 -*-
"""
Series Collector
================

모든 입력 시계열을 병렬 수집 (ThreadPoolExecutor) 후 전체 완료 대기.

- 한 시계열 실패 (예외 또는 []) -> 해당 컬럼만 [] (나머지는 계속)
- 결과: 정렬 테이블 컬럼명 -> Observation 리스트

사용법:
    from coinstrat.fetchers import fetch_all_series
    from coinstrat.engine import fetch_and_compute

    run = fetch_and_compute(fetch_all_series)
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from functools import partial
from typing import Callable, Dict, List, Mapping, Optional

from coinstrat.config.loader import FetchParams, load_fetch_params
from coinstrat.data.observations import Observation
from coinstrat.fetchers.crypto import fetch_bgeometrics, fetch_btc_price, fetch_mvrv
from coinstrat.fetchers.fred import FRED_SERIES, fetch_fred_series

logger = logging.getLogger(__name__)


Fetcher = Callable[[FetchParams], List[Observation]]


def default_sources() -> Dict[str, Fetcher]:
    """컬럼명 -> fetcher(params)"""
    sources: Dict[str, Fetcher] = {
        "BTCUSD": fetch_btc_price,
        "MVRV": fetch_mvrv,
        "LTH_SOPR": partial(_bgeometrics, "lth_sopr"),
        "LTH_NUPL": partial(_bgeometrics, "lth_nupl"),
    }
    for series_id, column in FRED_SERIES.items():
        sources[column] = partial(_fred, series_id)
    return sources


def _fred(series_id: str, params: FetchParams) -> List[Observation]:
    return fetch_fred_series(series_id, params)


def _bgeometrics(file: str, params: FetchParams) -> List[Observation]:
    return fetch_bgeometrics(file, params)


def fetch_all_series(
    params: Optional[FetchParams] = None,
    sources: Optional[Mapping[str, Fetcher]] = None,
) -> Dict[str, List[Observation]]:
    """
    전체 시계열 병렬 수집

    Args:
        params: FetchParams (None 이면 load_fetch_params())
        sources: 컬럼명 -> fetcher (None 이면 default_sources())

    Returns:
        {컬럼명: [Observation, ...]} - 모든 컬럼 포함 (실패는 [])
    """
    params = params or load_fetch_params()
    sources = sources if sources is not None else default_sources()
    results: Dict[str, List[Observation]] = {name: [] for name in sources}
    if not sources:
        return results

    workers = max(1, min(params.max_workers, len(sources)))
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = {executor.submit(fn, params): name for name, fn in sources.items()}
        for future in as_completed(futures):
            name = futures[future]
            try:
                results[name] = list(future.result() or [])
            except Exception as e:
                logger.error(f"{name} fetch raised: {e}")
                results[name] = []

    ok = sum(1 for v in results.values() if v)
    logger.info(f"Fetched {ok}/{len(results)} series")
    return results
