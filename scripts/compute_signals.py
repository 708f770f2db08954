"""
CoinStrat 시그널 계산 스크립트
==============================

전체 입력 시계열 수집 -> 일봉 정렬 -> 팩터 점수 -> CORE / MACRO 신호.

사용법:
    python scripts/compute_signals.py
    python scripts/compute_signals.py --today 2024-06-30 --tail 14 --csv out/signals.csv

환경변수:
    FRED_API_KEY          (필수, .env 지원)
    COINSTRAT_CONFIG      (선택, 사용자 YAML)
    COINSTRAT_LOG_LEVEL   (선택, 기본 INFO)
"""
from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

# 프로젝트 루트
ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT))

from coinstrat.config import load_engine_config, load_fetch_params
from coinstrat.engine import SIGNAL_COLUMNS, fetch_and_compute
from coinstrat.fetchers import fetch_all_series


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description='CoinStrat BTC signal engine')
    parser.add_argument('--config', type=str, default=None, help='User YAML merged over config/default.yaml')
    parser.add_argument('--today', type=str, default=None, help='Calendar end date (YYYY-MM-DD, default UTC today)')
    parser.add_argument('--tail', type=int, default=10, help='Number of recent days to print')
    parser.add_argument('--csv', type=str, default=None, help='Write the full signal table to CSV')
    parser.add_argument('--log-level', type=str, default=os.getenv('COINSTRAT_LOG_LEVEL', 'INFO'))
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    print("=" * 70)
    print("CoinStrat Signals")
    print("=" * 70)

    engine_cfg = load_engine_config(args.config)
    fetch_params = load_fetch_params(args.config)

    run = fetch_and_compute(lambda: fetch_all_series(fetch_params), engine_cfg, today=args.today)
    if run.empty:
        print("\n  No BTC price data. Nothing to compute.")
        return 1

    latest = run.latest()
    print(f"\n[Latest: {latest.date}]")
    print(f"  BTC:           ${latest.btc_usd:,.2f}" if latest.btc_usd is not None else "  BTC:           n/a")
    print(f"  VAL_SCORE:     {latest.val_score}")
    print(f"  LIQ_SCORE:     {latest.liq_score}")
    print(f"  DXY_SCORE:     {latest.dxy_score} (raw {latest.dxy_raw_score})")
    print(f"  CYCLE_SCORE:   {latest.cycle_score}")
    print(f"  PRICE_REGIME:  {'ON' if latest.price_regime_on else 'OFF'}")
    print(f"  CORE:          {'ON' if latest.core_on else 'OFF'}")
    print(f"  MACRO:         {'ON' if latest.macro_on else 'OFF'}")

    if run.transitions:
        last = run.transitions[-1]
        state = "ON" if last.entered else "OFF"
        print(f"\n  Last CORE transition: {last.date.date() if last.date is not None else '-'} -> {state} ({last.reason})")

    if run.nan_warnings.total():
        print(f"  Carried-forward days: {dict(run.nan_warnings.counts)}")

    print(f"\n[Last {args.tail} days]")
    print(run.frame[list(SIGNAL_COLUMNS)].tail(args.tail).to_string())

    if args.csv:
        out = Path(args.csv)
        out.parent.mkdir(parents=True, exist_ok=True)
        run.frame.to_csv(out)
        print(f"\n  Saved: {out} ({len(run.frame)} rows)")

    print("\n" + "=" * 70)
    return 0


if __name__ == "__main__":
    sys.exit(main())
