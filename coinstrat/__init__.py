"""
CoinStrat - BTC Accumulation Signal Engine
==========================================

Core Components:
- data/: Observation model + daily calendar aligner (forward-fill)
- utils/: Rolling math (mean / pct_change / diff), calendar helpers
- factors/: Valuation, Liquidity, DXY, Business-Cycle, Price-Regime scorers
- regime/: CORE state machine (hysteresis) + MACRO flag, DailyRecord
- engine.py: raw series -> aligned table -> scores -> aggregate signals
- backtest/: DCA strategy simulator (Baseline / CORE / CORE + MACRO)
- fetchers/: FRED, Binance, blockchain.info, BGeometrics collaborators
"""
__version__ = "0.4.0"
