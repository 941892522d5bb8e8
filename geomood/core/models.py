"""
Domain records for geolocated mood entries.

- Location / Picture: inbound request parts
- WeatherObservation: what the weather provider reports (Celsius)
- WeatherSnapshot: denormalized weather stored on each entry
- MoodEntry: the persisted, append-only record
- UserMoodHistory: a user and their ordered entries
- CreateMoodInput: the validated request handed to the orchestrator
"""

import base64
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from geomood.core.errors import InvalidInputError

# ============================================================================
# CONSTANTS
# ============================================================================

KELVIN_OFFSET = 273.15
UNKNOWN_CONDITION = "Unknown"

MAX_TEXT_LENGTH = 1000
MAX_PICTURE_BYTES = 50 * 1024 * 1024
ALLOWED_PICTURE_TYPES = frozenset({"image/jpeg", "image/png"})


# ============================================================================
# REQUEST PARTS
# ============================================================================

@dataclass(frozen=True)
class Location:
    """Latitude / longitude pair in decimal degrees."""
    lat: float
    lng: float

    def validate(self) -> None:
        if not -90 <= self.lat <= 90:
            raise InvalidInputError(f"Latitude must be between -90 and 90, got {self.lat}")
        if not -180 <= self.lng <= 180:
            raise InvalidInputError(f"Longitude must be between -180 and 180, got {self.lng}")

    def to_dict(self) -> Dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}


@dataclass(frozen=True)
class Picture:
    """Raw photo bytes plus their MIME type."""
    data: bytes
    mime_type: str

    def validate(self) -> None:
        if self.mime_type not in ALLOWED_PICTURE_TYPES:
            raise InvalidInputError(f"Unsupported picture type: {self.mime_type}")
        if not self.data:
            raise InvalidInputError("Picture is empty")
        if len(self.data) > MAX_PICTURE_BYTES:
            raise InvalidInputError("Picture exceeds 50MB")

    def to_base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    def to_data_uri(self) -> str:
        """Encodes the picture as ``data:<mime>;base64,<payload>``."""
        return f"data:{self.mime_type};base64,{self.to_base64()}"


# ============================================================================
# WEATHER
# ============================================================================

@dataclass(frozen=True)
class WeatherObservation:
    """
    Normalized weather observation.

    Temperature is in Celsius. ``temperature`` and ``clouds`` are None when
    the provider did not report them (the estimator then skips those rules).
    """
    condition: str = UNKNOWN_CONDITION
    temperature: Optional[float] = None
    humidity: float = 0.0
    wind_speed: float = 0.0
    pressure: float = 0.0
    clouds: Optional[float] = None

    @classmethod
    def unknown(cls) -> "WeatherObservation":
        """Neutral observation used when the provider is unavailable."""
        return cls()

    @classmethod
    def from_provider(cls, current: Mapping[str, Any]) -> "WeatherObservation":
        """
        Builds an observation from an OpenWeatherMap ``current`` block.

        The provider reports temperature in Kelvin; it is converted here.

        Raises:
            TypeError, ValueError: If a numeric field is not numeric.
            KeyError, IndexError: If ``weather`` is not a list of conditions.
        """
        conditions = current.get("weather") or [{}]
        condition = conditions[0].get("main") or UNKNOWN_CONDITION

        temp = current.get("temp")
        clouds = current.get("clouds")

        return cls(
            condition=str(condition),
            temperature=float(temp) - KELVIN_OFFSET if temp is not None else None,
            humidity=float(current.get("humidity") or 0),
            wind_speed=float(current.get("wind_speed") or 0),
            pressure=float(current.get("pressure") or 0),
            clouds=float(clouds) if clouds is not None else None,
        )

    def is_unknown(self) -> bool:
        """True when every field still holds its "unknown" default."""
        return (
            self.condition.lower() == UNKNOWN_CONDITION.lower()
            and not self.temperature
            and self.humidity == 0
            and self.wind_speed == 0
            and self.pressure == 0
            and not self.clouds
        )

    def snapshot(self) -> "WeatherSnapshot":
        return WeatherSnapshot(
            condition=self.condition,
            temperature=self.temperature if self.temperature is not None else 0.0,
            humidity=self.humidity,
            wind_speed=self.wind_speed,
            pressure=self.pressure,
        )


@dataclass(frozen=True)
class WeatherSnapshot:
    """Weather at submission time, denormalized onto the entry."""
    condition: str
    temperature: float
    humidity: float
    wind_speed: float
    pressure: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "condition": self.condition,
            "temperature": self.temperature,
            "humidity": self.humidity,
            "wind_speed": self.wind_speed,
            "pressure": self.pressure,
        }


# ============================================================================
# MOOD RECORDS
# ============================================================================

@dataclass
class MoodEntry:
    """A persisted mood. ``rating`` is the composite score in [0, 5]."""
    text_content: str
    user_rating: int
    rating: float
    location: Location
    weather: WeatherSnapshot
    created_at: datetime
    updated_at: datetime
    picture: Optional[str] = None
    id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "text_content": self.text_content,
            "user_rating": self.user_rating,
            "rating": self.rating,
            "location": self.location.to_dict(),
            "weather": self.weather.to_dict(),
            "picture": self.picture,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


@dataclass
class UserMoodHistory:
    """A user and their moods, oldest first."""
    id: str
    email: str
    moods: List[MoodEntry] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def mood_timestamps(self) -> List[datetime]:
        return [mood.created_at for mood in self.moods if mood.created_at is not None]


@dataclass(frozen=True)
class CreateMoodInput:
    """Inbound request for a new mood."""
    email: str
    text_content: str
    rating: int
    location: Location
    picture: Optional[Picture] = None

    def validate(self) -> None:
        """
        Checks the request shape.

        Raises:
            InvalidInputError: On the first violated constraint.
        """
        if not self.email or "@" not in self.email:
            raise InvalidInputError("A valid email is required")
        if not self.text_content or not self.text_content.strip():
            raise InvalidInputError("Text content must not be empty")
        if len(self.text_content) > MAX_TEXT_LENGTH:
            raise InvalidInputError(f"Text content must be at most {MAX_TEXT_LENGTH} characters")
        if isinstance(self.rating, bool) or not isinstance(self.rating, int) or not 1 <= self.rating <= 5:
            raise InvalidInputError("User rating must be between 1 and 5")
        self.location.validate()
        if self.picture is not None:
            self.picture.validate()
