"""
Weather-to-sentiment heuristic.

Turns a weather observation into a 1-5 "how pleasant is this weather" rating.
Starts at neutral (3), applies temperature / cloud / condition / wind
adjustments, then clamps to [1, 5] and rounds.
"""

import logging
from typing import Any, Mapping, Optional

from geomood.core.models import WeatherObservation
from geomood.core.rating import NEUTRAL_RATING, clamp_rating

logger = logging.getLogger(__name__)


# ============================================================================
# CONFIGURATION - THRESHOLDS & ADJUSTMENTS
# ============================================================================

class WeatherScoreConfig:
    """Thresholds for the weather pleasantness rules."""

    # TEMPERATURE (Celsius)
    TEMP_PLEASANT_MIN: float = 18.0
    TEMP_PLEASANT_MAX: float = 25.0
    TEMP_COLD: float = 10.0
    TEMP_HOT: float = 30.0

    # CLOUD COVER (%)
    CLOUDS_LOW: float = 20.0
    CLOUDS_HIGH: float = 80.0

    # WIND (provider units, m/s)
    WIND_STRONG: float = 10.0
    WIND_PENALTY: float = 0.5

    # CONDITION LABELS (lowercase) -> adjustment
    CONDITION_ADJUSTMENTS = {
        "clear": 0.5,
        "rain": -1.0,
        "thunderstorm": -1.5,
        "snow": -0.5,
    }


# ============================================================================
# ESTIMATOR
# ============================================================================

def _temperature_adjustment(celsius: Optional[float]) -> float:
    if celsius is None:
        return 0.0
    if WeatherScoreConfig.TEMP_PLEASANT_MIN <= celsius <= WeatherScoreConfig.TEMP_PLEASANT_MAX:
        return 1.0
    if celsius < WeatherScoreConfig.TEMP_COLD or celsius > WeatherScoreConfig.TEMP_HOT:
        return -1.0
    return 0.0


def _cloud_adjustment(clouds: Optional[float]) -> float:
    if clouds is None:
        return 0.0
    if clouds < WeatherScoreConfig.CLOUDS_LOW:
        return 1.0
    if clouds > WeatherScoreConfig.CLOUDS_HIGH:
        return -1.0
    return 0.0


def estimate_weather_rating(observation: Optional[WeatherObservation]) -> int:
    """
    Rates how pleasant the weather is.

    Args:
        observation: Normalized observation (Celsius), or None when the
            provider returned nothing.

    Returns:
        Integer rating in [1, 5]. Missing data yields exactly 3.
    """
    if observation is None or observation.is_unknown():
        logger.info("No usable weather observation, using neutral rating")
        return NEUTRAL_RATING

    score = float(NEUTRAL_RATING)
    score += _temperature_adjustment(observation.temperature)
    score += _cloud_adjustment(observation.clouds)
    score += WeatherScoreConfig.CONDITION_ADJUSTMENTS.get(observation.condition.lower(), 0.0)

    if observation.wind_speed > WeatherScoreConfig.WIND_STRONG:
        score -= WeatherScoreConfig.WIND_PENALTY

    return clamp_rating(score)


def estimate_weather_rating_from_payload(current: Optional[Mapping[str, Any]]) -> int:
    """
    Same rules, applied to a raw provider ``current`` block (Kelvin).

    A malformed payload is rated neutral.
    """
    if not current:
        return NEUTRAL_RATING

    try:
        observation = WeatherObservation.from_provider(current)
    except (AttributeError, IndexError, KeyError, TypeError, ValueError) as e:
        logger.warning(f"Malformed weather payload, using neutral rating: {e}")
        return NEUTRAL_RATING

    return estimate_weather_rating(observation)
