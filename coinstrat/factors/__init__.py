"""
Factor Scorers
==============

정렬된 일봉 테이블 -> 팩터별 이산 점수.

- valuation: MVRV + LTH-SOPR (0~3)
- liquidity: WALCL - TGA - RRP YoY / 13W (0~2)
- dxy: ROC20 + MA50/200 + 30일 지속성 (0~2)
- cycle: Sahm + 10Y-3M + 신규주문 (0~2)
- price_regime: 40W MA + 30일 지속성 (0/1)
"""
from coinstrat.factors.carry import NanWarningCounter, apply_carry_forward
from coinstrat.factors.valuation import score_valuation, valuation_raw_score
from coinstrat.factors.liquidity import score_liquidity, net_liquidity
from coinstrat.factors.dxy import score_dxy, dxy_raw_score
from coinstrat.factors.cycle import score_cycle, cycle_raw_score
from coinstrat.factors.price_regime import score_price_regime, weekly_ma_to_daily

__all__ = [
    'NanWarningCounter',
    'apply_carry_forward',
    'score_valuation',
    'valuation_raw_score',
    'score_liquidity',
    'net_liquidity',
    'score_dxy',
    'dxy_raw_score',
    'score_cycle',
    'cycle_raw_score',
    'score_price_regime',
    'weekly_ma_to_daily',
]
