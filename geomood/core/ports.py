"""
Collaborator interfaces consumed by the mood use cases.

Production adapters (MongoDB, OpenWeatherMap, Gemini) and test fakes both
satisfy these protocols; the variant is chosen when wiring the application.
"""

from datetime import datetime
from typing import List, Optional, Protocol

from geomood.core.models import MoodEntry, Picture, UserMoodHistory, WeatherObservation


class UserRepository(Protocol):
    """Stores users and their append-only mood history."""

    def find_by_email(self, email: str) -> Optional[UserMoodHistory]:
        ...

    def create_user(self, email: str) -> UserMoodHistory:
        ...

    def append_mood(self, user_id: str, entry: MoodEntry) -> UserMoodHistory:
        ...

    def moods_by_date_range(self, start: datetime, end: datetime) -> List[UserMoodHistory]:
        """Users having moods in [start, end), with only those moods kept."""
        ...


class WeatherProvider(Protocol):
    """Returns the current weather; degrades to an "Unknown" observation."""

    def get_weather(self, lat: float, lng: float) -> WeatherObservation:
        ...


class SentimentAnalyzer(Protocol):
    """Scores text and photos on 1-5. Never raises."""

    def get_text_sentiment_analysis(self, text: str) -> int:
        ...

    def get_picture_sentiment_analysis(self, picture: Picture) -> int:
        ...
