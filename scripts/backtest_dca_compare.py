"""
DCA 전략 비교 백테스트
======================

Baseline DCA vs CORE DCA vs CORE DCA + MACRO 가속.
모든 전략은 action date 마다 같은 금액을 입금받는다 (total_invested 동일).

사용법:
    python scripts/backtest_dca_compare.py
    python scripts/backtest_dca_compare.py --start 2020-01-01 --frequency monthly --off-mode sell_all
    python scripts/backtest_dca_compare.py --signals out/signals.csv    # 저장된 시그널 재사용

기본값: config/default.yaml [backtest] + 환경변수
    COINSTRAT_DCA_AMOUNT / COINSTRAT_FREQUENCY / COINSTRAT_OFF_MODE / COINSTRAT_ACCEL_MULT
"""
from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

import pandas as pd

# 프로젝트 루트
ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT))

from coinstrat.backtest import (
    FREQUENCIES,
    OFF_SIGNAL_MODES,
    BacktestConfig,
    print_report,
    results_summary,
    run_backtest,
)
from coinstrat.config import load_backtest_defaults, load_engine_config, load_fetch_params
from coinstrat.engine import fetch_and_compute
from coinstrat.fetchers import fetch_all_series


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description='DCA strategy comparison backtest')
    parser.add_argument('--config', type=str, default=None, help='User YAML merged over config/default.yaml')
    parser.add_argument('--signals', type=str, default=None, help='Signal CSV from compute_signals.py (skip fetching)')
    parser.add_argument('--start', type=str, default=None, help='Start date (YYYY-MM-DD)')
    parser.add_argument('--amount', type=float, default=None, help='DCA amount per action date (USD)')
    parser.add_argument('--frequency', type=str, default=None, choices=FREQUENCIES)
    parser.add_argument('--off-mode', type=str, default=None, choices=OFF_SIGNAL_MODES)
    parser.add_argument('--accel', type=float, default=None, help='MACRO acceleration multiplier')
    parser.add_argument('--no-accel', action='store_true', help='Skip the CORE + MACRO strategy')
    parser.add_argument('--csv', type=str, default=None, help='Write the summary table to CSV')
    parser.add_argument('--log-level', type=str, default=os.getenv('COINSTRAT_LOG_LEVEL', 'INFO'))
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> BacktestConfig:
    """YAML/환경변수 기본값 <- CLI 인자"""
    defaults = load_backtest_defaults(args.config)
    return BacktestConfig(
        start_date=args.start or defaults.start_date,
        dca_amount=args.amount if args.amount is not None else defaults.dca_amount,
        frequency=args.frequency or defaults.frequency,
        off_signal_mode=args.off_mode or defaults.off_signal_mode,
        macro_accel=defaults.macro_accel and not args.no_accel,
        accel_multiplier=args.accel if args.accel is not None else defaults.accel_multiplier,
    )


def load_signals(args: argparse.Namespace) -> pd.DataFrame:
    if args.signals:
        return pd.read_csv(args.signals, index_col='date', parse_dates=['date'])
    run = fetch_and_compute(
        lambda: fetch_all_series(load_fetch_params(args.config)),
        load_engine_config(args.config),
    )
    return run.frame


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    config = build_config(args)
    print(f"Start: {config.start.date()}  Amount: ${config.dca_amount:,.2f}  "
          f"Frequency: {config.frequency}  OFF mode: {config.off_signal_mode}")

    signals = load_signals(args)
    results = run_backtest(signals, config)
    print_report(results)

    if results:
        summary = results_summary(results)
        print(summary.round(2).to_string())
        if args.csv:
            out = Path(args.csv)
            out.parent.mkdir(parents=True, exist_ok=True)
            summary.to_csv(out)
            print(f"\nSaved: {out}")

    return 0 if results else 1


if __name__ == "__main__":
    sys.exit(main())
