"""Configuration constants for alefbet application."""

# Symbol weighting
MIN_WEIGHT = 0.1                      # Floor so no symbol becomes unselectable
INCORRECT_PENALTY_MULTIPLIER = 3.0    # Applied when the last attempt was wrong
LOW_CONFIDENCE_BOOST_THRESHOLD = 5    # Attempts below this count as under-practiced
LOW_CONFIDENCE_BOOST_MULTIPLIER = 1.5

# Round generation
DISTRACTOR_COUNT = 2                  # Incorrect options shown next to the correct one
SCRAMBLE_MIN_WORD_LENGTH = 2
SCRAMBLE_MAX_WORD_LENGTH = 5
SCRAMBLE_SHUFFLE_ATTEMPTS = 5         # Reshuffles tried to avoid an already-solved bank
REPEAT_KIND_WEIGHT_FACTOR = 0.5       # Damping for the kind used in the previous round

# Exercise kind selection weights (equal by default)
DEFAULT_EXERCISE_WEIGHTS = {
    'letter-to-picture': 1.0,
    'picture-to-letter': 1.0,
    'picture-to-word': 1.0,
    'word-scramble': 1.0,
    'drawing': 1.0,
}

# Round advance timing
ADVANCE_DELAY_SECONDS = 2.0           # Pause after an outcome before the next round
RETRY_DELAY_SECONDS = 1.0             # Pause before a wrong scramble is reopened

# Persistence
HISTORY_KEY = 'alefbet_history'
