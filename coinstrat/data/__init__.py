"""Data Layer - observation model + daily aligner"""
from .observations import (
    Observation,
    observations_from_pairs,
    to_series,
)
from .aligner import (
    ANCHOR_COLUMN,
    RAW_COLUMNS,
    align_observations,
    forward_fill_onto,
)

__all__ = [
    'Observation',
    'observations_from_pairs',
    'to_series',
    'ANCHOR_COLUMN',
    'RAW_COLUMNS',
    'align_observations',
    'forward_fill_onto',
]
