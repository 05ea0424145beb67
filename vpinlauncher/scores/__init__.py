"""
High score package for vpinlauncher.

Maps table titles to PinMAME NVRAM store ids and reads the persisted score.
"""

from .score_types import ScoreResult, ScoreStatus
from .store_mapping import (
    DEFAULT_STORE_MAPPING,
    ScoreStoreMapping,
    TitleToStoreResolver,
    unreachable_prefixes,
)
from .nvram import (
    NVRamScoreStore,
    NVRamNotFoundError,
    NVRamReadError,
    ScoreFormatError,
    ScoreLayout,
    ScoreStore,
    ScoreStoreError,
)
from .retriever import ScoreRetriever

__all__ = [
    'ScoreResult',
    'ScoreStatus',
    'DEFAULT_STORE_MAPPING',
    'ScoreStoreMapping',
    'TitleToStoreResolver',
    'unreachable_prefixes',
    'NVRamScoreStore',
    'NVRamNotFoundError',
    'NVRamReadError',
    'ScoreFormatError',
    'ScoreLayout',
    'ScoreStore',
    'ScoreStoreError',
    'ScoreRetriever',
]
