"""
Regime Aggregation Module
=========================

팩터 점수 -> CORE (hysteresis 상태머신) / MACRO (stateless) 신호.

- CoreStateMachine / fold_core_states: CORE 2-state
- macro_on: 유동성 + 경기 순풍 플래그
- DailyRecord: 일별 출력 레코드
"""
from coinstrat.regime.state_machine import (
    CoreState,
    CoreTransition,
    CoreStateMachine,
    core_entry_reason,
    core_exit_reason,
    transition_core,
    fold_core_states,
    macro_on,
)
from coinstrat.regime.records import (
    DailyRecord,
    to_daily_records,
    records_to_frame,
)

__all__ = [
    'CoreState',
    'CoreTransition',
    'CoreStateMachine',
    'core_entry_reason',
    'core_exit_reason',
    'transition_core',
    'fold_core_states',
    'macro_on',
    'DailyRecord',
    'to_daily_records',
    'records_to_frame',
]
