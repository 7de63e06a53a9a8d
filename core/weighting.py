"""Adaptive symbol weighting from answer history."""

import logging
import random

from .config import (
    MIN_WEIGHT, INCORRECT_PENALTY_MULTIPLIER,
    LOW_CONFIDENCE_BOOST_THRESHOLD, LOW_CONFIDENCE_BOOST_MULTIPLIER
)
from .models import AttemptRecord, SymbolPerformance, WeightedSymbol

logger = logging.getLogger(__name__)


def compute_performance(history: list[AttemptRecord], symbols: list[str]) -> dict[str, SymbolPerformance]:
    """Get performance counters for each symbol.

    Every symbol in `symbols` appears in the result, zeroed if it has no
    history. Records for other symbols are ignored. Repeated identical answers
    to the same round (same round_id and selected_answer) count once, while
    different answers in one round each count. Recency fields come from the
    latest record per symbol regardless of deduplication; on equal timestamps
    the earlier record is kept.
    """
    performance = {symbol: SymbolPerformance() for symbol in symbols}
    seen_answers = set()
    latest: dict[str, AttemptRecord] = {}

    for record in history:
        perf = performance.get(record.target_symbol)
        if perf is None:
            continue

        previous = latest.get(record.target_symbol)
        if previous is None or record.timestamp > previous.timestamp:
            latest[record.target_symbol] = record

        answer_key = (record.round_id, record.selected_answer)
        if answer_key in seen_answers:
            continue
        seen_answers.add(answer_key)
        if record.is_correct:
            perf.correct += 1
        else:
            perf.incorrect += 1
        perf.total_attempts += 1

    for symbol, record in latest.items():
        performance[symbol].last_attempt_timestamp = record.timestamp
        performance[symbol].last_attempt_correct = record.is_correct

    return performance


def weight_for(perf: SymbolPerformance) -> float:
    """Selection weight for one symbol's performance. Higher = drilled sooner."""
    weight = 1.0
    if perf.total_attempts > 0:
        # Lower success rate raises the weight, up to 2x at 0% success
        weight *= 1.0 + (1.0 - perf.correct / perf.total_attempts)
        if perf.last_attempt_correct is False:
            weight *= INCORRECT_PENALTY_MULTIPLIER
    else:
        weight *= LOW_CONFIDENCE_BOOST_MULTIPLIER

    if perf.total_attempts < LOW_CONFIDENCE_BOOST_THRESHOLD:
        weight *= LOW_CONFIDENCE_BOOST_MULTIPLIER

    return max(MIN_WEIGHT, weight)


def compute_weights(history: list[AttemptRecord], symbols: list[str]) -> list[WeightedSymbol]:
    """Calculate a selection weight for every symbol, in `symbols` order."""
    performance = compute_performance(history, symbols)
    weighted = [WeightedSymbol(symbol, weight_for(performance[symbol])) for symbol in symbols]
    logger.debug(f"Calculated weights: {[(w.symbol, round(w.weight, 3)) for w in weighted]}")
    return weighted


def select_weighted(weighted: list[WeightedSymbol], rng: random.Random = None) -> str | None:
    """Pick a symbol with probability proportional to its weight.
    Returns None only for an empty list."""
    if not weighted:
        return None
    rng = rng or random

    total_weight = sum(item.weight for item in weighted)
    if total_weight <= 0:
        logger.warning("Total weight is not positive, falling back to uniform random")
        return rng.choice(weighted).symbol

    remaining = rng.random() * total_weight
    for item in weighted:
        if remaining < item.weight:
            return item.symbol
        remaining -= item.weight

    # Floating point leftovers only
    logger.warning("Weighted selection ran past the last item, using it")
    return weighted[-1].symbol


def stats_table(history: list[AttemptRecord], symbols: list[str], names: dict[str, str] = None) -> list[dict]:
    """Rows for a stats view: counts, success rate and selection share per symbol."""
    names = names or {}
    performance = compute_performance(history, symbols)
    weights = {w.symbol: w.weight for w in compute_weights(history, symbols)}
    total_weight = sum(weights.values())

    rows = []
    for symbol in symbols:
        perf = performance[symbol]
        rate = perf.success_rate
        rows.append({
            'symbol': symbol,
            'name': names.get(symbol, ''),
            'correct': perf.correct,
            'incorrect': perf.incorrect,
            'total': perf.total_attempts,
            'success_rate': round(rate * 100, 1) if rate is not None else None,
            'last_attempt_correct': perf.last_attempt_correct,
            'weight': round(weights[symbol], 3),
            'probability': round(weights[symbol] / total_weight * 100, 1) if total_weight > 0 else 0.0
        })
    return rows
