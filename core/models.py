"""Domain models for alefbet application."""

from dataclasses import dataclass, field
from enum import Enum


class ExerciseKind(str, Enum):
    """Interaction mode of a round."""

    LETTER_TO_PICTURE = 'letter-to-picture'   # Show a letter, pick its picture
    PICTURE_TO_LETTER = 'picture-to-letter'   # Show a picture, pick its letter
    PICTURE_TO_WORD = 'picture-to-word'       # Show a picture, pick its word
    WORD_SCRAMBLE = 'word-scramble'           # Assemble the word from shuffled letters
    DRAWING = 'drawing'                       # Draw the letter freehand

    @property
    def is_choice(self) -> bool:
        return self in (ExerciseKind.LETTER_TO_PICTURE, ExerciseKind.PICTURE_TO_LETTER,
                        ExerciseKind.PICTURE_TO_WORD)


@dataclass(frozen=True)
class PromptItem:
    """One (word, image) pair teaching a symbol."""

    symbol: str
    word: str
    image_ref: str

    def to_dict(self) -> dict:
        return {
            'symbol': self.symbol,
            'word': self.word,
            'image_ref': self.image_ref
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'PromptItem':
        return cls(data['symbol'], data['word'], data.get('image_ref', ''))


# symbol -> prompt items; lists may be empty
Catalog = dict[str, list[PromptItem]]


def _is_positive_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0


@dataclass(frozen=True)
class AttemptRecord:
    """One logged answer submission.

    Timestamps are epoch milliseconds. `round_id` is the start instant of the
    round the answer belongs to, so repeated answers to one question share it.
    """

    timestamp: int
    round_id: int
    target_symbol: str
    selected_answer: str
    is_correct: bool
    exercise_kind: str
    target_word: str | None = None

    def validation_errors(self) -> list[str]:
        """Return a list of problems; empty when the record is storable."""
        errors = []
        if not _is_positive_number(self.timestamp):
            errors.append('timestamp must be a positive number')
        if not _is_positive_number(self.round_id):
            errors.append('round_id must be a positive number')
        if not isinstance(self.target_symbol, str) or not self.target_symbol:
            errors.append('target_symbol must be a non-empty string')
        if not isinstance(self.selected_answer, str) or not self.selected_answer:
            errors.append('selected_answer must be a non-empty string')
        if not isinstance(self.is_correct, bool):
            errors.append('is_correct must be a boolean')
        if not isinstance(self.exercise_kind, str) or not self.exercise_kind:
            errors.append('exercise_kind must be a non-empty string')
        if self.target_word is not None and not isinstance(self.target_word, str):
            errors.append('target_word must be a string when present')
        return errors

    def to_dict(self) -> dict:
        return {
            'timestamp': self.timestamp,
            'round_id': self.round_id,
            'target_symbol': self.target_symbol,
            'target_word': self.target_word,
            'selected_answer': self.selected_answer,
            'is_correct': self.is_correct,
            'exercise_kind': self.exercise_kind
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'AttemptRecord':
        """Build a record from stored data. Raises ValueError if malformed."""
        if not isinstance(data, dict):
            raise ValueError(f"Attempt record must be an object, got {type(data).__name__}")
        missing = [k for k in ('timestamp', 'round_id', 'target_symbol', 'selected_answer',
                               'is_correct', 'exercise_kind') if k not in data]
        if missing:
            raise ValueError(f"Attempt record missing fields: {', '.join(missing)}")
        record = cls(
            timestamp=data['timestamp'],
            round_id=data['round_id'],
            target_symbol=data['target_symbol'],
            selected_answer=data['selected_answer'],
            is_correct=data['is_correct'],
            exercise_kind=data['exercise_kind'],
            target_word=data.get('target_word')
        )
        errors = record.validation_errors()
        if errors:
            raise ValueError(f"Invalid attempt record: {'; '.join(errors)}")
        return record


@dataclass
class SymbolPerformance:
    """Derived per-symbol counters. Never stored."""

    correct: int = 0
    incorrect: int = 0
    total_attempts: int = 0
    last_attempt_timestamp: int = 0
    last_attempt_correct: bool | None = None

    @property
    def success_rate(self) -> float | None:
        if self.total_attempts == 0:
            return None
        return self.correct / self.total_attempts


@dataclass(frozen=True)
class WeightedSymbol:
    symbol: str
    weight: float


@dataclass(frozen=True)
class RoundSpec:
    """Full specification of one exercise instance.

    For scrambles, `shuffled_letters` is the letter bank still available and
    `arrangement` holds one slot per letter of the target word (None = empty).
    """

    exercise_kind: ExerciseKind
    round_id: int
    target_symbol: str | None = None
    target_word: str | None = None
    correct_item: PromptItem | None = None
    image_options: tuple[PromptItem, ...] = ()
    symbol_options: tuple[str, ...] = ()
    word_options: tuple[str, ...] = ()
    shuffled_letters: tuple[str, ...] = ()
    arrangement: tuple[str | None, ...] = field(default=())

    @property
    def is_arrangement_full(self) -> bool:
        return bool(self.arrangement) and all(ch is not None for ch in self.arrangement)

    @property
    def assembled_word(self) -> str:
        return ''.join(ch for ch in self.arrangement if ch is not None)

    def to_dict(self) -> dict:
        return {
            'exercise_kind': self.exercise_kind.value,
            'round_id': self.round_id,
            'target_symbol': self.target_symbol,
            'target_word': self.target_word,
            'correct_item': self.correct_item.to_dict() if self.correct_item else None,
            'image_options': [item.to_dict() for item in self.image_options],
            'symbol_options': list(self.symbol_options),
            'word_options': list(self.word_options),
            'shuffled_letters': list(self.shuffled_letters),
            'arrangement': list(self.arrangement)
        }
