"""
Data Fetchers
=============

외부 데이터 수집 (FRED / Binance / blockchain.info / BGeometrics).
모든 fetcher 는 실패 시 [] 반환, 수집기는 전체 완료까지 대기.
"""
from coinstrat.fetchers.fred import FRED_SERIES, fetch_fred_series, parse_fred_observations
from coinstrat.fetchers.crypto import (
    BGEOMETRICS_FILES,
    fetch_bgeometrics,
    fetch_binance_klines,
    fetch_btc_price,
    fetch_mvrv,
    load_btc_history,
    merge_unique,
)
from coinstrat.fetchers.collector import default_sources, fetch_all_series

__all__ = [
    'FRED_SERIES',
    'fetch_fred_series',
    'parse_fred_observations',
    'BGEOMETRICS_FILES',
    'fetch_bgeometrics',
    'fetch_binance_klines',
    'fetch_btc_price',
    'fetch_mvrv',
    'load_btc_history',
    'merge_unique',
    'default_sources',
    'fetch_all_series',
]
