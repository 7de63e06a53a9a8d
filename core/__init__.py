from .models import (
    ExerciseKind, PromptItem, Catalog, AttemptRecord,
    SymbolPerformance, WeightedSymbol, RoundSpec
)
from .interfaces import HistoryStore, DrawingOracle
from .weighting import compute_performance, compute_weights, select_weighted, stats_table
from .rounds import RoundResult, generate_round, default_exercise_kinds
from .session import SessionState, reduce
from .game import GameSession, LetterPosition
from .catalog import build_catalog, load_catalog_dir, available_symbols
from .config import (
    MIN_WEIGHT, INCORRECT_PENALTY_MULTIPLIER,
    LOW_CONFIDENCE_BOOST_THRESHOLD, LOW_CONFIDENCE_BOOST_MULTIPLIER,
    ADVANCE_DELAY_SECONDS, RETRY_DELAY_SECONDS
)

__all__ = [
    'ExerciseKind', 'PromptItem', 'Catalog', 'AttemptRecord',
    'SymbolPerformance', 'WeightedSymbol', 'RoundSpec',
    'HistoryStore', 'DrawingOracle',
    'compute_performance', 'compute_weights', 'select_weighted', 'stats_table',
    'RoundResult', 'generate_round', 'default_exercise_kinds',
    'SessionState', 'reduce',
    'GameSession', 'LetterPosition',
    'build_catalog', 'load_catalog_dir', 'available_symbols',
    'MIN_WEIGHT', 'INCORRECT_PENALTY_MULTIPLIER',
    'LOW_CONFIDENCE_BOOST_THRESHOLD', 'LOW_CONFIDENCE_BOOST_MULTIPLIER',
    'ADVANCE_DELAY_SECONDS', 'RETRY_DELAY_SECONDS'
]
