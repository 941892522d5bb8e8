"""
Mood creation use case.

Sequence:
1. Resolve the user by email
2. Reject if a mood was posted in the last hour
3. Fetch weather, text sentiment and (optional) photo sentiment concurrently
4. Compose the weighted MoodRating
5. Persist the new entry and return it
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Callable, Optional

from geomood.core.errors import (
    DuplicateMoodError,
    MoodCreationError,
    MoodError,
    UserNotFoundError,
)
from geomood.core.guard import has_duplicate_within_hour
from geomood.core.models import CreateMoodInput, MoodEntry, UserMoodHistory, WeatherObservation
from geomood.core.ports import SentimentAnalyzer, UserRepository, WeatherProvider
from geomood.core.rating import MoodRating
from geomood.core.weather_score import estimate_weather_rating

logger = logging.getLogger(__name__)

SIGNAL_WORKERS = 3


def create_mood_score(text_rating: int, user_rating: int, weather_rating: int,
                      photo_rating: Optional[int] = None) -> MoodRating:
    """
    Builds the composite from the four component ratings.

    Raises:
        InvalidRatingError: If a component is out of range.
    """
    return MoodRating(text_rating, user_rating, weather_rating, photo_rating)


class CreateMood:
    """Orchestrates the creation of a mood entry."""

    def __init__(self, sentiment_analyzer: SentimentAnalyzer,
                 weather_provider: WeatherProvider,
                 user_repository: UserRepository,
                 auto_register: bool = False,
                 clock: Optional[Callable[[], datetime]] = None):
        self.sentiment_analyzer = sentiment_analyzer
        self.weather_provider = weather_provider
        self.user_repository = user_repository
        self.auto_register = auto_register
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def create_mood(self, request: CreateMoodInput) -> MoodEntry:
        """
        Creates and persists a mood.

        Raises:
            UserNotFoundError: Unknown email (and auto-registration disabled).
            DuplicateMoodError: A mood was already posted in the last hour.
            InvalidRatingError: A component rating is out of range.
            MoodCreationError: Any other collaborator failure.
        """
        try:
            return self._create_mood(request)
        except MoodError:
            raise
        except Exception as e:
            logger.error(f"[CREATE_MOOD] Mood creation failed: {e}")
            raise MoodCreationError(f"Mood creation failed: {e}") from e

    def _create_mood(self, request: CreateMoodInput) -> MoodEntry:
        now = self.clock()

        user = self._lookup_user(request.email)

        if has_duplicate_within_hour(user.mood_timestamps(), now=now):
            logger.warning(f"[CREATE_MOOD] Duplicate mood for {request.email}")
            raise DuplicateMoodError("Mood already posted in the last hour")

        weather, text_rating, photo_rating = self._gather_signals(request)

        weather_rating = estimate_weather_rating(weather)
        mood_rating = create_mood_score(text_rating, request.rating, weather_rating, photo_rating)
        logger.info(f"[CREATE_MOOD] {mood_rating!r}")

        entry = MoodEntry(
            text_content=request.text_content,
            user_rating=request.rating,
            rating=mood_rating.total,
            location=request.location,
            weather=weather.snapshot(),
            picture=request.picture.to_data_uri() if request.picture else None,
            created_at=now,
            updated_at=now,
        )

        updated_user = self.user_repository.append_mood(user.id, entry)
        saved = updated_user.moods[-1] if updated_user.moods else entry
        logger.info(f"[CREATE_MOOD] Mood saved for {request.email} (score {saved.rating:.2f})")
        return saved

    def _lookup_user(self, email: str) -> UserMoodHistory:
        user = self.user_repository.find_by_email(email)
        if user is not None:
            return user

        if self.auto_register:
            logger.info(f"[CREATE_MOOD] Registering new user {email}")
            return self.user_repository.create_user(email)

        raise UserNotFoundError("User not found")

    def _gather_signals(self, request: CreateMoodInput):
        """Runs the independent provider calls concurrently and joins them."""
        with ThreadPoolExecutor(max_workers=SIGNAL_WORKERS) as executor:
            weather_future = executor.submit(
                self.weather_provider.get_weather,
                request.location.lat, request.location.lng
            )
            text_future = executor.submit(
                self.sentiment_analyzer.get_text_sentiment_analysis,
                request.text_content
            )
            photo_future = None
            if request.picture is not None:
                photo_future = executor.submit(
                    self.sentiment_analyzer.get_picture_sentiment_analysis,
                    request.picture
                )

            weather: WeatherObservation = weather_future.result() or WeatherObservation.unknown()
            text_rating: int = text_future.result()
            photo_rating: Optional[int] = photo_future.result() if photo_future else None

        return weather, text_rating, photo_rating
