"""Round generation: exercise kind, target symbol and distractor options."""

import logging
import random
import time
from dataclasses import dataclass
from typing import Callable

from .config import (
    DISTRACTOR_COUNT, DEFAULT_EXERCISE_WEIGHTS, REPEAT_KIND_WEIGHT_FACTOR,
    SCRAMBLE_MIN_WORD_LENGTH, SCRAMBLE_MAX_WORD_LENGTH, SCRAMBLE_SHUFFLE_ATTEMPTS
)
from .models import AttemptRecord, Catalog, ExerciseKind, PromptItem, RoundSpec
from .weighting import compute_weights, select_weighted

logger = logging.getLogger(__name__)

NO_SYMBOLS_ERROR = "No letters with pictures are available to start a round."


@dataclass(frozen=True)
class RoundResult:
    """Outcome of a generation call: either a round or an error message."""

    round: RoundSpec | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.round is not None


@dataclass(frozen=True)
class ExerciseKindConfig:
    """How the generator treats one exercise kind.

    `is_feasible(catalog, candidates)` says whether the data can support the
    kind, `target_pool(catalog, candidates)` narrows the symbols a target may
    be drawn from, and `fallback` names the simpler kind used when infeasible.
    """

    weight: float
    is_feasible: Callable[[Catalog, list[str]], bool]
    target_pool: Callable[[Catalog, list[str]], list[str]]
    fallback: ExerciseKind | None = None
    weighted_target: bool = True


def usable_symbols(catalog: Catalog, symbols: list[str]) -> list[str]:
    """Symbols that have at least one prompt item."""
    return [s for s in symbols if catalog.get(s)]


def scramble_items(items: list[PromptItem]) -> list[PromptItem]:
    """Items whose word has a length suitable for unscrambling."""
    return [item for item in items
            if SCRAMBLE_MIN_WORD_LENGTH <= len(item.word) <= SCRAMBLE_MAX_WORD_LENGTH]


def _has_candidates(catalog: Catalog, candidates: list[str]) -> bool:
    return bool(candidates)


def _has_symbol_distractors(catalog: Catalog, candidates: list[str]) -> bool:
    return len(candidates) >= 2


def _has_word_distractors(catalog: Catalog, candidates: list[str]) -> bool:
    words = {item.word for s in candidates for item in catalog[s]}
    return len(words) >= DISTRACTOR_COUNT + 1


def _has_scramble_word(catalog: Catalog, candidates: list[str]) -> bool:
    return any(scramble_items(catalog[s]) for s in candidates)


def _all_candidates(catalog: Catalog, candidates: list[str]) -> list[str]:
    return list(candidates)


def _scramble_candidates(catalog: Catalog, candidates: list[str]) -> list[str]:
    return [s for s in candidates if scramble_items(catalog[s])]


def default_exercise_kinds(weights: dict[str, float] = None) -> dict[ExerciseKind, ExerciseKindConfig]:
    """Build the exercise kind table. `weights` maps kind values to selection weights."""
    merged = dict(DEFAULT_EXERCISE_WEIGHTS)
    if weights:
        merged.update(weights)

    def weight(kind: ExerciseKind) -> float:
        return max(float(merged.get(kind.value, 0.0)), 0.0)

    return {
        ExerciseKind.LETTER_TO_PICTURE: ExerciseKindConfig(
            weight(ExerciseKind.LETTER_TO_PICTURE), _has_candidates, _all_candidates),
        ExerciseKind.PICTURE_TO_LETTER: ExerciseKindConfig(
            weight(ExerciseKind.PICTURE_TO_LETTER), _has_symbol_distractors, _all_candidates,
            fallback=ExerciseKind.LETTER_TO_PICTURE),
        ExerciseKind.PICTURE_TO_WORD: ExerciseKindConfig(
            weight(ExerciseKind.PICTURE_TO_WORD), _has_word_distractors, _all_candidates,
            fallback=ExerciseKind.LETTER_TO_PICTURE),
        ExerciseKind.WORD_SCRAMBLE: ExerciseKindConfig(
            weight(ExerciseKind.WORD_SCRAMBLE), _has_scramble_word, _scramble_candidates,
            fallback=ExerciseKind.LETTER_TO_PICTURE),
        ExerciseKind.DRAWING: ExerciseKindConfig(
            weight(ExerciseKind.DRAWING), _has_candidates, _all_candidates,
            weighted_target=False),
    }


def choose_exercise_kind(kinds: dict[ExerciseKind, ExerciseKindConfig],
                         prior_kind: ExerciseKind | None = None,
                         rng: random.Random = None) -> ExerciseKind:
    """Weighted random pick of an exercise kind. The prior round's kind is damped."""
    rng = rng or random
    options = list(kinds.keys())
    weights = [kinds[k].weight for k in options]

    positive = [k for k, w in zip(options, weights) if w > 0]
    if prior_kind in positive and len(positive) > 1:
        weights = [w * REPEAT_KIND_WEIGHT_FACTOR if k == prior_kind else w
                   for k, w in zip(options, weights)]

    if all(w <= 0 for w in weights):
        return rng.choice(options)
    return rng.choices(options, weights=weights, k=1)[0]


def resolve_feasible_kind(kind: ExerciseKind, kinds: dict[ExerciseKind, ExerciseKindConfig],
                          catalog: Catalog, candidates: list[str]) -> ExerciseKind | None:
    """Follow the fallback chain from `kind` until a feasible kind is found.

    If the chain runs out, any feasible kind in table order is used. Returns
    None when nothing is feasible.
    """
    visited = set()
    current = kind
    while current is not None and current not in visited:
        visited.add(current)
        config = kinds.get(current)
        if config is None:
            break
        if config.is_feasible(catalog, candidates):
            if current != kind:
                logger.info(f"Exercise {kind.value} not feasible, downgraded to {current.value}")
            return current
        current = config.fallback

    for other, config in kinds.items():
        if other not in visited and config.is_feasible(catalog, candidates):
            logger.info(f"Exercise {kind.value} not feasible, using {other.value}")
            return other
    return None


def pick_target_symbol(pool: list[str], history: list[AttemptRecord], weighted: bool,
                       rng: random.Random = None) -> str | None:
    """Choose the symbol to drill: weighted by history, or uniform."""
    rng = rng or random
    if not pool:
        return None
    if not weighted:
        return rng.choice(pool)
    symbol = select_weighted(compute_weights(history, pool), rng)
    if symbol is None:
        logger.error("Weighted selection failed, falling back to uniform random")
        symbol = rng.choice(pool)
    return symbol


def _shuffled(values: list, rng: random.Random) -> list:
    return rng.sample(values, len(values))


def pick_distractor_items(catalog: Catalog, candidates: list[str], correct_item: PromptItem,
                          rng: random.Random) -> list[PromptItem]:
    """Incorrect picture options: one from each of up to DISTRACTOR_COUNT other
    symbols, padded with other words of the same symbol if needed.

    Padded same-symbol pictures are still wrong answers: a picture choice is
    judged against `correct_item` itself, not its symbol.
    """
    used_words = {correct_item.word}
    distractors = []

    for symbol in _shuffled([s for s in candidates if s != correct_item.symbol], rng):
        if len(distractors) >= DISTRACTOR_COUNT:
            break
        items = [item for item in catalog[symbol] if item.word not in used_words]
        if items:
            choice = rng.choice(items)
            distractors.append(choice)
            used_words.add(choice.word)

    if len(distractors) < DISTRACTOR_COUNT:
        same_symbol = [item for item in catalog.get(correct_item.symbol, [])
                       if item.word not in used_words]
        for item in _shuffled(same_symbol, rng):
            if len(distractors) >= DISTRACTOR_COUNT:
                break
            if item.word in used_words:
                continue
            distractors.append(item)
            used_words.add(item.word)

    return distractors


def pick_distractor_words(catalog: Catalog, candidates: list[str], correct_item: PromptItem,
                          rng: random.Random) -> list[str]:
    """Incorrect word options, chosen like picture distractors."""
    return [item.word for item in pick_distractor_items(catalog, candidates, correct_item, rng)]


def pick_distractor_symbols(candidates: list[str], target_symbol: str, rng: random.Random) -> list[str]:
    """Up to DISTRACTOR_COUNT other symbols, sampled without replacement."""
    others = [s for s in dict.fromkeys(candidates) if s != target_symbol]
    return rng.sample(others, min(DISTRACTOR_COUNT, len(others)))


def scramble_letters(word: str, rng: random.Random) -> list[str]:
    """Shuffle a word's letters, avoiding the solved order when possible."""
    letters = list(word)
    for _ in range(SCRAMBLE_SHUFFLE_ATTEMPTS):
        rng.shuffle(letters)
        if ''.join(letters) != word or len(set(word)) < 2:
            break
    return letters


def generate_round(catalog: Catalog, symbols: list[str], history: list[AttemptRecord],
                   prior_kind: ExerciseKind | None = None,
                   kinds: dict[ExerciseKind, ExerciseKindConfig] = None,
                   rng: random.Random = None, round_id: int = None) -> RoundResult:
    """Produce one fully specified round, or an error result if no symbol has
    any usable prompt. Never returns a partially built round."""
    rng = rng or random
    kinds = kinds or default_exercise_kinds()
    if round_id is None:
        round_id = int(time.time() * 1000)

    candidates = usable_symbols(catalog, symbols)
    if not candidates:
        logger.warning("No usable symbols in catalog, cannot generate a round")
        return RoundResult(error=NO_SYMBOLS_ERROR)

    chosen = choose_exercise_kind(kinds, prior_kind, rng)
    kind = resolve_feasible_kind(chosen, kinds, catalog, candidates)
    if kind is None:
        logger.warning(f"No exercise kind is feasible for {len(candidates)} symbols")
        return RoundResult(error=NO_SYMBOLS_ERROR)
    config = kinds[kind]

    pool = config.target_pool(catalog, candidates)
    target = pick_target_symbol(pool, history, config.weighted_target, rng)
    if target is None:
        return RoundResult(error=NO_SYMBOLS_ERROR)

    if kind == ExerciseKind.DRAWING:
        logger.info(f"Round {round_id}: {kind.value} target={target}")
        return RoundResult(round=RoundSpec(kind, round_id, target_symbol=target))

    if kind == ExerciseKind.WORD_SCRAMBLE:
        correct_item = rng.choice(scramble_items(catalog[target]))
        word = correct_item.word
        spec = RoundSpec(
            kind, round_id,
            target_symbol=target,
            target_word=word,
            correct_item=correct_item,
            shuffled_letters=tuple(scramble_letters(word, rng)),
            arrangement=(None,) * len(word)
        )
        logger.info(f"Round {round_id}: {kind.value} target={target} word={word}")
        return RoundResult(round=spec)

    correct_item = rng.choice(catalog[target])
    image_options = ()
    symbol_options = ()
    word_options = ()
    if kind == ExerciseKind.LETTER_TO_PICTURE:
        distractors = pick_distractor_items(catalog, candidates, correct_item, rng)
        image_options = tuple(_shuffled([correct_item] + distractors, rng))
    elif kind == ExerciseKind.PICTURE_TO_LETTER:
        distractors = pick_distractor_symbols(candidates, target, rng)
        symbol_options = tuple(_shuffled([target] + distractors, rng))
    elif kind == ExerciseKind.PICTURE_TO_WORD:
        distractors = pick_distractor_words(catalog, candidates, correct_item, rng)
        word_options = tuple(_shuffled([correct_item.word] + distractors, rng))

    spec = RoundSpec(
        kind, round_id,
        target_symbol=target,
        target_word=correct_item.word,
        correct_item=correct_item,
        image_options=image_options,
        symbol_options=symbol_options,
        word_options=word_options
    )
    logger.info(f"Round {round_id}: {kind.value} target={target} word={correct_item.word}")
    return RoundResult(round=spec)
