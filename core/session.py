"""Session state and its transition function.

`reduce(state, event)` is pure: it never touches storage or timers. Events
that are not valid in the current state return the state unchanged.
"""

from dataclasses import dataclass, replace

from .models import ExerciseKind, PromptItem, RoundSpec


@dataclass(frozen=True)
class SessionState:
    round: RoundSpec | None = None
    last_outcome: bool | None = None
    score: int = 0
    selected_answer: PromptItem | str | None = None
    ready: bool = False
    error: str | None = None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def to_dict(self) -> dict:
        selected = self.selected_answer
        if isinstance(selected, PromptItem):
            selected = selected.to_dict()
        return {
            'round': self.round.to_dict() if self.round else None,
            'last_outcome': self.last_outcome,
            'score': self.score,
            'selected_answer': selected,
            'ready': self.ready,
            'error': self.error
        }


INITIAL_STATE = SessionState()


# Events

@dataclass(frozen=True)
class StartRound:
    spec: RoundSpec


@dataclass(frozen=True)
class SelectImage:
    item: PromptItem


@dataclass(frozen=True)
class SelectSymbol:
    symbol: str


@dataclass(frozen=True)
class SelectWord:
    word: str


@dataclass(frozen=True)
class SubmitDrawing:
    is_correct: bool


@dataclass(frozen=True)
class PlaceLetter:
    bank_index: int
    slot_index: int


@dataclass(frozen=True)
class RemoveLetter:
    slot_index: int


@dataclass(frozen=True)
class SubmitWord:
    pass


@dataclass(frozen=True)
class ResetIncorrectWordAttempt:
    pass


@dataclass(frozen=True)
class ResetFeedback:
    pass


@dataclass(frozen=True)
class SetError:
    message: str


Event = (StartRound | SelectImage | SelectSymbol | SelectWord | SubmitDrawing | PlaceLetter
         | RemoveLetter | SubmitWord | ResetIncorrectWordAttempt | ResetFeedback | SetError)


def _answerable(state: SessionState, kind: ExerciseKind) -> bool:
    return (state.ready and not state.is_error and state.round is not None
            and state.round.exercise_kind == kind and state.last_outcome is None)


def _scored(state: SessionState, is_correct: bool, selected) -> SessionState:
    return replace(
        state,
        selected_answer=selected,
        last_outcome=is_correct,
        score=state.score + 1 if is_correct else state.score
    )


def move_bank_to_slot(spec: RoundSpec, bank_index: int, slot_index: int) -> RoundSpec:
    """Move a bank letter into an empty slot. Invalid moves return `spec` unchanged."""
    if not 0 <= bank_index < len(spec.shuffled_letters):
        return spec
    if not 0 <= slot_index < len(spec.arrangement) or spec.arrangement[slot_index] is not None:
        return spec
    bank = list(spec.shuffled_letters)
    letter = bank.pop(bank_index)
    arrangement = list(spec.arrangement)
    arrangement[slot_index] = letter
    return replace(spec, shuffled_letters=tuple(bank), arrangement=tuple(arrangement))


def move_slot_to_bank(spec: RoundSpec, slot_index: int) -> RoundSpec:
    """Return a slot's letter to the end of the bank. Empty slots are a no-op."""
    if not 0 <= slot_index < len(spec.arrangement) or spec.arrangement[slot_index] is None:
        return spec
    arrangement = list(spec.arrangement)
    letter = arrangement[slot_index]
    arrangement[slot_index] = None
    return replace(spec, shuffled_letters=spec.shuffled_letters + (letter,),
                   arrangement=tuple(arrangement))


def move_slot_to_slot(spec: RoundSpec, from_slot: int, to_slot: int) -> RoundSpec:
    """Remove then place. Occupied targets are a no-op; there is no swap."""
    if from_slot == to_slot:
        return spec
    if not 0 <= to_slot < len(spec.arrangement) or spec.arrangement[to_slot] is not None:
        return spec
    removed = move_slot_to_bank(spec, from_slot)
    if removed is spec:
        return spec
    return move_bank_to_slot(removed, len(removed.shuffled_letters) - 1, to_slot)


def return_misplaced_letters(spec: RoundSpec) -> RoundSpec:
    """Send every letter that differs from the target word back to the bank."""
    target = spec.target_word or ''
    bank = list(spec.shuffled_letters)
    arrangement = list(spec.arrangement)
    for i, letter in enumerate(arrangement):
        if letter is None:
            continue
        if i >= len(target) or letter != target[i]:
            bank.append(letter)
            arrangement[i] = None
    return replace(spec, shuffled_letters=tuple(bank), arrangement=tuple(arrangement))


def reduce(state: SessionState, event: Event) -> SessionState:
    """Compute the next session state for an event."""
    if isinstance(event, SetError):
        return replace(INITIAL_STATE, error=event.message)

    if isinstance(event, StartRound):
        if state.is_error:
            return state
        return replace(state, round=event.spec, last_outcome=None, selected_answer=None,
                       ready=True, error=None)

    if isinstance(event, ResetFeedback):
        if state.last_outcome is None and state.selected_answer is None:
            return state
        return replace(state, last_outcome=None, selected_answer=None)

    if isinstance(event, SelectImage):
        if not _answerable(state, ExerciseKind.LETTER_TO_PICTURE):
            return state
        return _scored(state, event.item == state.round.correct_item, event.item)

    if isinstance(event, SelectSymbol):
        if not _answerable(state, ExerciseKind.PICTURE_TO_LETTER):
            return state
        return _scored(state, event.symbol == state.round.target_symbol, event.symbol)

    if isinstance(event, SelectWord):
        if not _answerable(state, ExerciseKind.PICTURE_TO_WORD):
            return state
        return _scored(state, event.word == state.round.target_word, event.word)

    if isinstance(event, SubmitDrawing):
        if not _answerable(state, ExerciseKind.DRAWING):
            return state
        return _scored(state, bool(event.is_correct), None)

    if isinstance(event, (PlaceLetter, RemoveLetter)):
        if (state.round is None or state.round.exercise_kind != ExerciseKind.WORD_SCRAMBLE
                or state.last_outcome is True or state.is_error):
            return state
        if isinstance(event, PlaceLetter):
            spec = move_bank_to_slot(state.round, event.bank_index, event.slot_index)
        else:
            spec = move_slot_to_bank(state.round, event.slot_index)
        if spec is state.round:
            return state
        return replace(state, round=spec)

    if isinstance(event, SubmitWord):
        if not _answerable(state, ExerciseKind.WORD_SCRAMBLE) or not state.round.is_arrangement_full:
            return state
        attempt = state.round.assembled_word
        return _scored(state, attempt == state.round.target_word, attempt)

    if isinstance(event, ResetIncorrectWordAttempt):
        if (state.round is None or state.round.exercise_kind != ExerciseKind.WORD_SCRAMBLE
                or state.last_outcome is not False):
            return state
        return replace(state, round=return_misplaced_letters(state.round),
                       last_outcome=None, selected_answer=None)

    return state
