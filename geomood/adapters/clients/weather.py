"""
Current weather lookup using the OpenWeatherMap One Call API.

Any failure (no API key, HTTP error, unparsable payload) degrades to the
"Unknown" observation, which the weather rating treats as neutral.
"""

import logging
import os
from typing import Any, Dict, Optional

import requests

from geomood.core.models import WeatherObservation

# ============================================================================
# CONSTANTS & CONFIGURATION
# ============================================================================

API_URL = "https://api.openweathermap.org/data/3.0/onecall"
REQUEST_TIMEOUT = 10
EXCLUDED_BLOCKS = "minutely,hourly,daily,alerts"

logger = logging.getLogger(__name__)


# ============================================================================
# API INTERACTION
# ============================================================================

class OpenWeatherClient:
    """Handles OpenWeatherMap API interactions."""

    def __init__(self, api_key: Optional[str] = None, timeout: int = REQUEST_TIMEOUT):
        self.api_key = api_key or os.environ.get("WEATHER_API_KEY")
        self.timeout = timeout

    def fetch_current(self, lat: float, lng: float) -> Dict[str, Any]:
        """
        Fetches the raw One Call payload.

        Raises:
            requests.RequestException: On transport or HTTP errors.
        """
        params = {
            "lat": lat,
            "lon": lng,
            "appid": self.api_key,
            "exclude": EXCLUDED_BLOCKS,
        }
        response = requests.get(API_URL, params=params, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def _parse_current(self, api_data: Dict[str, Any]) -> Optional[WeatherObservation]:
        """Parses the ``current`` block (Kelvin) into an observation."""
        try:
            current = api_data.get("current")
            if not current:
                logger.warning("No current weather in API response")
                return None
            return WeatherObservation.from_provider(current)

        except (AttributeError, IndexError, KeyError, TypeError, ValueError) as e:
            logger.error(f"Failed to parse weather data: {e}")
            return None

    def get_weather(self, lat: float, lng: float) -> WeatherObservation:
        """Returns the current weather, or the Unknown observation on failure."""
        if not self.api_key:
            logger.warning("WEATHER_API_KEY not set. Using Unknown weather.")
            return WeatherObservation.unknown()

        try:
            observation = self._parse_current(self.fetch_current(lat, lng))
        except Exception as e:
            logger.error(f"Unexpected error fetching weather: {e}")
            return WeatherObservation.unknown()

        if observation is None:
            return WeatherObservation.unknown()

        temperature = "n/a" if observation.temperature is None else f"{observation.temperature:.1f}C"
        logger.info(f"Weather at ({lat}, {lng}): {observation.condition}, {temperature}")
        return observation
