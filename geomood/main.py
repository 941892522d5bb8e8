"""
GeoMood command-line entry point.

Commands:
- post:  submit a mood (text, 1-5 rating, location, optional photo)
- today: list today's moods across all users (shared map view)

Supports:
- --no-ai: skip Gemini, score text with the keyword heuristic
- --dry-run (post): compute the score without reading or writing the database
"""

import argparse
import json
import logging
import mimetypes
import sys
from pathlib import Path
from typing import List, Optional

from pymongo.errors import PyMongoError

from geomood.adapters.clients.gemini import build_sentiment_analyzer
from geomood.adapters.clients.weather import OpenWeatherClient
from geomood.adapters.repositories.mongo import (
    DatabaseConfig, MongoDBConnectionError, MongoDBOperationError, get_user_repository
)
from geomood.core.create_mood import CreateMood, create_mood_score
from geomood.core.errors import ErrorKind, MoodError
from geomood.core.models import CreateMoodInput, Location, Picture
from geomood.core.today import GetTodaysMoods
from geomood.core.weather_score import estimate_weather_rating
from geomood.utils.config import Settings
from geomood.utils.logger import setup_logger

logger = logging.getLogger(__name__)

EXIT_CODES = {
    ErrorKind.FATAL: 1,
    ErrorKind.INVALID_INPUT: 2,
    ErrorKind.NOT_FOUND: 3,
    ErrorKind.CONFLICT: 4,
}


# ============================================================================
# ARGUMENT PARSING
# ============================================================================

def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="GeoMood: geolocated mood journal with composite mood scores",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run.py post --email me@example.com --text "Great day" --rating 5 --lat 44.84 --lng -0.58
  python run.py post ... --picture selfie.jpg
  python run.py --no-ai post ... --dry-run
  python run.py today
        """
    )
    parser.add_argument("--no-ai", action="store_true",
                        help="Skip Gemini, use the keyword sentiment heuristic")

    subparsers = parser.add_subparsers(dest="command", required=True)

    post = subparsers.add_parser("post", help="Submit a mood")
    post.add_argument("--email", required=True)
    post.add_argument("--text", required=True, help="Free text (1-1000 chars)")
    post.add_argument("--rating", required=True, type=int, help="Your own rating, 1-5")
    post.add_argument("--lat", required=True, type=float)
    post.add_argument("--lng", required=True, type=float)
    post.add_argument("--picture", type=Path, help="Optional JPEG/PNG photo")
    post.add_argument("--dry-run", action="store_true",
                      help="Compute the score only, no database access")

    subparsers.add_parser("today", help="List today's moods")

    return parser.parse_args(argv)


# ============================================================================
# COMMANDS
# ============================================================================

def load_picture(path: Path) -> Picture:
    mime_type, _ = mimetypes.guess_type(str(path))
    return Picture(data=path.read_bytes(), mime_type=mime_type or "application/octet-stream")


def build_request(args: argparse.Namespace) -> CreateMoodInput:
    request = CreateMoodInput(
        email=args.email,
        text_content=args.text,
        rating=args.rating,
        location=Location(lat=args.lat, lng=args.lng),
        picture=load_picture(args.picture) if args.picture else None,
    )
    request.validate()
    return request


def run_post(args: argparse.Namespace, settings: Settings) -> dict:
    request = build_request(args)
    sentiment_analyzer = build_sentiment_analyzer(settings.gemini_api_key, no_ai=args.no_ai)
    weather_client = OpenWeatherClient(api_key=settings.weather_api_key)

    if args.dry_run:
        weather = weather_client.get_weather(request.location.lat, request.location.lng)
        text_rating = sentiment_analyzer.get_text_sentiment_analysis(request.text_content)
        photo_rating = (sentiment_analyzer.get_picture_sentiment_analysis(request.picture)
                        if request.picture else None)
        mood_rating = create_mood_score(text_rating, request.rating,
                                        estimate_weather_rating(weather), photo_rating)
        logger.info(f"Dry run: {mood_rating!r}")
        return {"dry_run": True, "ratings": mood_rating.ratings(),
                "weight": mood_rating.weight, "total": mood_rating.total}

    use_case = CreateMood(
        sentiment_analyzer=sentiment_analyzer,
        weather_provider=weather_client,
        user_repository=get_user_repository(DatabaseConfig(settings.mongodb_uri, settings.mongodb_database)),
        auto_register=settings.auto_register_users,
    )
    return use_case.create_mood(request).to_dict()


def run_today(settings: Settings) -> list:
    repository = get_user_repository(DatabaseConfig(settings.mongodb_uri, settings.mongodb_database))
    use_case = GetTodaysMoods(repository, per_user_limit=settings.today_moods_per_user or None)
    return [mood.to_dict() for mood in use_case.get_todays_moods()]


# ============================================================================
# MAIN
# ============================================================================

def main(argv: Optional[List[str]] = None) -> int:
    args = parse_arguments(argv)
    settings = Settings.from_env()
    setup_logger(log_dir=settings.log_dir)

    logger.info(f"--- GeoMood: {args.command} ---")

    try:
        if args.command == "post":
            result = run_post(args, settings)
        else:
            result = run_today(settings)
    except MoodError as e:
        logger.error(f"{e.kind.value}: {e}")
        return EXIT_CODES[e.kind]
    except (MongoDBConnectionError, MongoDBOperationError, PyMongoError, ValueError, OSError) as e:
        logger.error(f"Execution failed: {e}")
        return EXIT_CODES[ErrorKind.FATAL]

    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
