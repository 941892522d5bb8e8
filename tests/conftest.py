import pytest
import os
import sys
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional
from unittest.mock import MagicMock, patch

# Add project root to Python Path so modules can be imported
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from geomood.core.models import (
    CreateMoodInput, Location, MoodEntry, Picture, UserMoodHistory, WeatherObservation,
    WeatherSnapshot,
)

# ============================================================================
# 1. GLOBAL MOCKS (ENV VARS & APIS)
# ============================================================================

@pytest.fixture(autouse=True)
def mock_env_vars():
    """Sets up fake environment variables for all tests."""
    with patch.dict(os.environ, {
        "GEMINI_API_KEY": "fake_key",
        "WEATHER_API_KEY": "fake_weather_key",
        "MONGODB_URI": "mongodb://localhost:27017",
    }):
        yield


@pytest.fixture
def mock_genai():
    """Mocks Google Generative AI (Gemini)."""
    with patch("geomood.adapters.clients.gemini.genai") as mock:
        mock.configure = MagicMock()

        model_instance = MagicMock()
        mock.GenerativeModel.return_value = model_instance

        # Default happy path response
        response = MagicMock()
        response.text = '{"score": 4}'
        model_instance.generate_content.return_value = response

        yield mock


@pytest.fixture
def mock_requests():
    """Mocks requests.get (OpenWeatherMap)."""
    with patch("requests.get") as mock_get:
        yield mock_get


# ============================================================================
# 2. FAKE COLLABORATORS
# ============================================================================

class InMemoryUserRepository:
    """Dict-backed stand-in for MongoUserRepository."""

    def __init__(self):
        self.users: Dict[str, UserMoodHistory] = {}
        self.fail_on_append = False

    def add_user(self, email: str, moods: Optional[List[MoodEntry]] = None) -> UserMoodHistory:
        user = UserMoodHistory(id=f"user-{len(self.users) + 1}", email=email, moods=list(moods or []))
        self.users[user.id] = user
        return user

    def find_by_email(self, email):
        return next((u for u in self.users.values() if u.email == email), None)

    def create_user(self, email):
        return self.add_user(email)

    def append_mood(self, user_id, entry):
        if self.fail_on_append:
            raise RuntimeError("write failed")
        user = self.users[user_id]
        entry.id = f"mood-{len(user.moods) + 1}"
        user.moods.append(entry)
        return user

    def moods_by_date_range(self, start, end):
        result = []
        for user in self.users.values():
            moods = [m for m in user.moods if start <= m.created_at < end]
            if moods:
                result.append(UserMoodHistory(id=user.id, email=user.email, moods=moods))
        return result


class StubWeatherProvider:
    def __init__(self, observation: Optional[WeatherObservation] = None):
        self.observation = observation or WeatherObservation.unknown()
        self.calls = []

    def get_weather(self, lat, lng):
        self.calls.append((lat, lng))
        return self.observation


class StubSentimentAnalyzer:
    def __init__(self, text_score: int = 3, picture_score: int = 3):
        self.text_score = text_score
        self.picture_score = picture_score
        self.pictures = []

    def get_text_sentiment_analysis(self, text):
        return self.text_score

    def get_picture_sentiment_analysis(self, picture):
        self.pictures.append(picture)
        return self.picture_score


@pytest.fixture
def repository():
    return InMemoryUserRepository()


# ============================================================================
# 3. CONTEXT DATA FIXTURES
# ============================================================================

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def sunny_weather():
    """22C, clear sky, light wind."""
    return WeatherObservation(condition="Clear", temperature=22.0, humidity=40,
                              wind_speed=3, pressure=1015, clouds=10)


@pytest.fixture
def rainy_weather():
    """5C, rain, overcast."""
    return WeatherObservation(condition="Rain", temperature=5.0, humidity=90,
                              wind_speed=8, pressure=1002, clouds=90)


@pytest.fixture
def sample_picture():
    return Picture(data=b"\xff\xd8\xff\xe0fakejpeg", mime_type="image/jpeg")


@pytest.fixture
def sample_request():
    return CreateMoodInput(
        email="alice@example.com",
        text_content="Je me sens bien aujourd'hui",
        rating=5,
        location=Location(lat=44.8404, lng=-0.5805),
    )


def make_entry(created_at: datetime, rating: float = 3.0, text: str = "ok") -> MoodEntry:
    return MoodEntry(
        text_content=text,
        user_rating=3,
        rating=rating,
        location=Location(lat=0.0, lng=0.0),
        weather=WeatherSnapshot("Unknown", 0.0, 0.0, 0.0, 0.0),
        created_at=created_at,
        updated_at=created_at,
    )


@pytest.fixture
def entry_factory():
    return make_entry


@pytest.fixture
def hours_ago():
    return lambda hours: NOW - timedelta(hours=hours)


@pytest.fixture
def weather_provider_factory():
    return StubWeatherProvider


@pytest.fixture
def sentiment_factory():
    return StubSentimentAnalyzer
