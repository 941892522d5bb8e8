"""
Weighted composite mood rating.

A mood score blends four component ratings:
- text_input: sentiment of the free text (0-5)
- number_input: the user's own rating (1-5)
- photo_analysis: facial-expression sentiment of the photo (0-5, 0 = no photo)
- weather: pleasantness of the weather at submission time (0-5)

Each component contributes according to a weight vector whose percentages
must sum to exactly 100.
"""

import math
from typing import Dict, Mapping, Optional

from geomood.core.errors import InvalidRatingError, InvalidWeightError

# ============================================================================
# CONFIGURATION
# ============================================================================

COMPONENTS = ("text_input", "number_input", "photo_analysis", "weather")

MIN_RATING = 0
MAX_RATING = 5
MIN_USER_RATING = 1
NEUTRAL_RATING = 3

# Without a photo, its share is spread over the three other signals
WEIGHTS_WITHOUT_PHOTO: Dict[str, float] = {
    "text_input": 0.33,
    "number_input": 0.34,
    "photo_analysis": 0.0,
    "weather": 0.33,
}

WEIGHTS_WITH_PHOTO: Dict[str, float] = {
    "text_input": 0.25,
    "number_input": 0.25,
    "photo_analysis": 0.25,
    "weather": 0.25,
}


# ============================================================================
# HELPERS
# ============================================================================

def round_half_up(value: float) -> int:
    """Rounds .5 away from zero for positive values (2.5 -> 3)."""
    return int(math.floor(value + 0.5))


def clamp_rating(value: float, low: int = 1, high: int = MAX_RATING) -> int:
    """Clamps to [low, high] first, then rounds half-up."""
    return round_half_up(max(low, min(high, value)))


def _check_rating(name: str, value: object, low: int, high: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidRatingError(f"{name} must be an integer, got {value!r}")
    if not low <= value <= high:
        raise InvalidRatingError(f"{name} must be between {low} and {high}")


def validate_component_ratings(text_input: int, number_input: int, weather: int,
                               photo_analysis: Optional[int] = None) -> None:
    """
    Checks every component is an integer in its legal range.

    Raises:
        InvalidRatingError: On the first out-of-range component.
    """
    _check_rating("User rating", number_input, MIN_USER_RATING, MAX_RATING)
    _check_rating("Text rating", text_input, MIN_RATING, MAX_RATING)
    _check_rating("Weather rating", weather, MIN_RATING, MAX_RATING)
    if photo_analysis is not None:
        _check_rating("Photo rating", photo_analysis, MIN_RATING, MAX_RATING)


def validate_weights(weight: Mapping[str, float]) -> None:
    """
    Validates a weight vector.

    Each weight is converted to an integer percentage (rounded) and the four
    percentages must add up to exactly 100.

    Raises:
        InvalidWeightError: If keys are missing/unknown, a weight is outside
            [0, 1], or the percentages do not sum to 100.
    """
    if set(weight) != set(COMPONENTS):
        raise InvalidWeightError(f"Weight vector must define exactly {', '.join(COMPONENTS)}")

    for name in COMPONENTS:
        value = weight[name]
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not 0 <= value <= 1:
            raise InvalidWeightError(f"Weight '{name}' must be between 0 and 1")

    total = sum(round_half_up(weight[name] * 100) for name in COMPONENTS)
    if total != 100:
        raise InvalidWeightError(f"Weight sum must equal 1.0 (got {total}%)")


# ============================================================================
# MOOD RATING
# ============================================================================

class MoodRating:
    """Composite of four component ratings and their weights."""

    def __init__(self, text_input: int, number_input: int, weather: int,
                 photo_analysis: Optional[int] = None):
        validate_component_ratings(text_input, number_input, weather, photo_analysis)

        self._text_input = text_input
        self._number_input = number_input
        self._weather = weather
        self._photo_analysis = photo_analysis or 0

        # A zero photo score carries no signal, same as no photo at all
        defaults = WEIGHTS_WITH_PHOTO if photo_analysis else WEIGHTS_WITHOUT_PHOTO
        self._weight: Dict[str, float] = dict(defaults)

    @property
    def text_input(self) -> int:
        return self._text_input

    @property
    def number_input(self) -> int:
        return self._number_input

    @property
    def weather(self) -> int:
        return self._weather

    @property
    def photo_analysis(self) -> int:
        return self._photo_analysis

    @property
    def weight(self) -> Dict[str, float]:
        return dict(self._weight)

    def set_weight(self, weight: Mapping[str, float]) -> None:
        """Replaces the whole weight vector after validating it."""
        validate_weights(weight)
        self._weight = {name: float(weight[name]) for name in COMPONENTS}

    def ratings(self) -> Dict[str, int]:
        return {
            "text_input": self._text_input,
            "number_input": self._number_input,
            "photo_analysis": self._photo_analysis,
            "weather": self._weather,
        }

    @property
    def total(self) -> float:
        """Weighted sum, recomputed from the current weights on each access."""
        ratings = self.ratings()
        return sum(ratings[name] * self._weight[name] for name in COMPONENTS)

    def __repr__(self) -> str:
        return (f"MoodRating(text={self._text_input}, number={self._number_input}, "
                f"weather={self._weather}, photo={self._photo_analysis}, total={self.total:.2f})")
