"""Game session control loop.

GameSession owns the session state and is the only caller of `reduce`. It
performs the side effects the reducer leaves out: generating rounds, writing
attempt records, notifying stats listeners and arming the advance timer.
"""

import logging
import random
import time
from dataclasses import dataclass
from typing import Callable

from .catalog import HEBREW_CHAR_TO_NAME
from .config import ADVANCE_DELAY_SECONDS, RETRY_DELAY_SECONDS
from .interfaces import DrawingOracle, HistoryStore
from .models import AttemptRecord, Catalog, ExerciseKind, PromptItem, SymbolPerformance, WeightedSymbol
from .rounds import ExerciseKindConfig, default_exercise_kinds, generate_round, usable_symbols
from .scheduler import AdvanceTimer
from .session import (
    INITIAL_STATE, SessionState, reduce,
    PlaceLetter, RemoveLetter, ResetFeedback, ResetIncorrectWordAttempt,
    SelectImage, SelectSymbol, SelectWord, SetError, StartRound, SubmitDrawing, SubmitWord
)
from .weighting import compute_performance, compute_weights, stats_table

logger = logging.getLogger(__name__)

EMPTY_CATALOG_ERROR = "No Hebrew letter images found. Please add images and restart."

BANK = 'bank'
SLOT = 'slot'


@dataclass(frozen=True)
class LetterPosition:
    """Where a scramble letter sits: ('bank', index) or ('slot', index)."""

    area: str
    index: int

    @classmethod
    def coerce(cls, value) -> 'LetterPosition':
        if isinstance(value, LetterPosition):
            return value
        area, index = value
        if area not in (BANK, SLOT):
            raise ValueError(f"Unknown letter area: {area}")
        return cls(area, int(index))


class GameSession:
    """One learner's game session."""

    def __init__(self, catalog: Catalog, history_store: HistoryStore,
                 symbols: list[str] = None,
                 kinds: dict[ExerciseKind, ExerciseKindConfig] = None,
                 timer: AdvanceTimer = None,
                 drawing_oracle: DrawingOracle = None,
                 rng: random.Random = None,
                 advance_delay: float = ADVANCE_DELAY_SECONDS,
                 retry_delay: float = RETRY_DELAY_SECONDS,
                 clock: Callable[[], int] = None):
        self.catalog = catalog
        self.symbols = list(symbols) if symbols is not None else list(catalog.keys())
        self.history_store = history_store
        self.kinds = kinds or default_exercise_kinds()
        self.timer = timer or AdvanceTimer()
        self.drawing_oracle = drawing_oracle
        self.rng = rng or random.Random()
        self.advance_delay = advance_delay
        self.retry_delay = retry_delay
        self.clock = clock or (lambda: int(time.time() * 1000))
        self.state: SessionState = INITIAL_STATE
        self.recording_paused = False
        self.stats_version = 0
        self._stats_listeners: list[Callable[[], None]] = []
        self._last_round_id = 0

    # --- state transitions ---

    def start(self) -> SessionState:
        """Start the first round, or enter the error state if nothing is playable."""
        if not usable_symbols(self.catalog, self.symbols):
            logger.error("Catalog has no usable symbols")
            return self.dispatch(SetError(EMPTY_CATALOG_ERROR))
        return self.request_new_round()

    def dispatch(self, event) -> SessionState:
        """Apply one event and run the side effects of an answer, if any."""
        previous = self.state
        self.state = reduce(previous, event)
        if previous.last_outcome is None and self.state.last_outcome is not None:
            self._record_attempt(self.state)
            self._schedule_after_outcome(self.state)
        return self.state

    def request_new_round(self) -> SessionState:
        """Replace the current round with a freshly generated one."""
        if self.state.is_error:
            logger.warning(f"Session is in error state, not starting a round: {self.state.error}")
            return self.state

        self.timer.cancel()
        self.dispatch(ResetFeedback())
        prior_kind = self.state.round.exercise_kind if self.state.round else None
        result = generate_round(
            self.catalog, self.symbols, self.history_store.read_all(),
            prior_kind=prior_kind, kinds=self.kinds, rng=self.rng,
            round_id=self._next_round_id()
        )
        if not result.ok:
            return self.dispatch(SetError(result.error))
        return self.dispatch(StartRound(result.round))

    def _next_round_id(self) -> int:
        round_id = self.clock()
        if round_id <= self._last_round_id:
            round_id = self._last_round_id + 1
        self._last_round_id = round_id
        return round_id

    # --- presentation events ---

    def submit_image_choice(self, item: PromptItem) -> SessionState:
        return self.dispatch(SelectImage(item))

    def submit_symbol_choice(self, symbol: str) -> SessionState:
        return self.dispatch(SelectSymbol(symbol))

    def submit_word_choice(self, word: str) -> SessionState:
        return self.dispatch(SelectWord(word))

    def submit_drawing(self, oracle_result) -> SessionState:
        """Accepts the oracle's {'pass': bool, 'score': float} dict or a plain bool."""
        if isinstance(oracle_result, dict):
            passed = bool(oracle_result.get('pass'))
        else:
            passed = bool(oracle_result)
        return self.dispatch(SubmitDrawing(passed))

    def evaluate_drawing(self, user_raster) -> SessionState:
        """Judge a drawing with the configured oracle and submit the verdict."""
        spec = self.state.round
        if self.drawing_oracle is None or spec is None or spec.exercise_kind != ExerciseKind.DRAWING:
            return self.state
        result = self.drawing_oracle.evaluate(spec.target_symbol, user_raster)
        logger.info(f"Drawing of {spec.target_symbol} scored {result.get('score')}")
        return self.submit_drawing(result)

    def drag_letter(self, source, target) -> SessionState:
        """Move a scramble letter between bank and slots.

        Filling the last empty slot submits the assembled word.
        """
        source = LetterPosition.coerce(source)
        target = LetterPosition.coerce(target)

        if source.area == BANK and target.area == SLOT:
            self.dispatch(PlaceLetter(source.index, target.index))
        elif source.area == SLOT and target.area == BANK:
            self.dispatch(RemoveLetter(source.index))
        elif source.area == SLOT and target.area == SLOT:
            spec = self.state.round
            if (spec is None or source.index == target.index
                    or not 0 <= target.index < len(spec.arrangement)
                    or spec.arrangement[target.index] is not None):
                return self.state
            before = self.state
            self.dispatch(RemoveLetter(source.index))
            if self.state is not before:
                self.dispatch(PlaceLetter(len(self.state.round.shuffled_letters) - 1, target.index))
        else:
            return self.state

        spec = self.state.round
        if spec is not None and spec.is_arrangement_full and self.state.last_outcome is None:
            self.dispatch(SubmitWord())
        return self.state

    def toggle_pause_recording(self) -> bool:
        self.recording_paused = not self.recording_paused
        logger.info(f"Recording {'paused' if self.recording_paused else 'resumed'}")
        return self.recording_paused

    def clear_history(self) -> None:
        """Full reset of the attempt log."""
        self.history_store.clear()
        self._notify_stats()

    # --- stats ---

    def add_stats_listener(self, callback: Callable[[], None]) -> None:
        self._stats_listeners.append(callback)

    def performance(self) -> dict[str, SymbolPerformance]:
        return compute_performance(self.history_store.read_all(), self.symbols)

    def weights(self) -> list[WeightedSymbol]:
        return compute_weights(self.history_store.read_all(), self.symbols)

    def stats(self) -> list[dict]:
        return stats_table(self.history_store.read_all(), self.symbols, HEBREW_CHAR_TO_NAME)

    # --- side effects ---

    def _record_attempt(self, state: SessionState) -> None:
        spec = state.round
        if self.recording_paused or spec is None or spec.exercise_kind == ExerciseKind.DRAWING:
            return
        selected = state.selected_answer
        if isinstance(selected, PromptItem):
            selected = selected.word
        record = AttemptRecord(
            timestamp=self.clock(),
            round_id=spec.round_id,
            target_symbol=spec.target_symbol,
            selected_answer=selected,
            is_correct=bool(state.last_outcome),
            exercise_kind=spec.exercise_kind.value,
            target_word=spec.target_word
        )
        if self.history_store.append(record):
            self._notify_stats()

    def _notify_stats(self) -> None:
        self.stats_version += 1
        for callback in list(self._stats_listeners):
            try:
                callback()
            except Exception:
                logger.exception("Stats listener failed")

    def _schedule_after_outcome(self, state: SessionState) -> None:
        round_id = state.round.round_id
        if state.round.exercise_kind == ExerciseKind.WORD_SCRAMBLE and state.last_outcome is False:
            self.timer.schedule(self.retry_delay, lambda: self._retry_word(round_id))
        else:
            self.timer.schedule(self.advance_delay, lambda: self._advance(round_id))

    def _is_current(self, round_id: int) -> bool:
        return (not self.state.is_error and self.state.round is not None
                and self.state.round.round_id == round_id)

    def _advance(self, round_id: int) -> None:
        if not self._is_current(round_id):
            logger.debug(f"Ignoring stale advance for round {round_id}")
            return
        self.request_new_round()

    def _retry_word(self, round_id: int) -> None:
        if not self._is_current(round_id):
            logger.debug(f"Ignoring stale retry for round {round_id}")
            return
        self.dispatch(ResetIncorrectWordAttempt())
        # Corrected while the retry was pending: nothing went back to the bank
        if self.state.round.is_arrangement_full and self.state.last_outcome is None:
            self.dispatch(SubmitWord())
