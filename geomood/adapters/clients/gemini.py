"""
Text and photo sentiment analysis using Google Generative AI (Gemini).

Both operations ask the model for a bare JSON object ``{"score": N}`` with
N in 1-5 and never raise:
- TEXT: any failure (no key, API error, malformed JSON, out-of-range score)
  falls back to the keyword heuristic.
- PHOTO: any failure or out-of-range score returns neutral (3). There is no
  visual fallback.
"""

import json
import logging
import os
from typing import Any, List, Optional, Sequence

import google.generativeai as genai

from geomood.core.models import Picture
from geomood.core.rating import MAX_RATING, MIN_USER_RATING, NEUTRAL_RATING
from geomood.core.text_fallback import estimate_text_rating

# ============================================================================
# CONSTANTS - PROMPTS & MODELS
# ============================================================================

TEXT_PROMPT = """You are a sentiment analysis API that returns raw JSON only.
Analyze the sentiment of the text below and respond with a JSON object.
CRITICAL FORMATTING RULES:
- Return ONLY the raw JSON object
- DO NOT wrap in markdown code blocks
- DO NOT use backticks
- DO NOT add any explanation or text
Required format (copy exactly): {"score":4}
Scoring guidelines:
- 1: Very negative (despair, severe sadness, anger)
- 2: Negative (sad, disappointed, frustrated)
- 3: Neutral (neither positive nor negative, calm)
- 4: Positive (happy, content, pleased)
- 5: Very positive (joy, excitement, elation)
Text to analyze: """

VISION_PROMPT = """You are a facial emotion analysis API that returns raw JSON only.
Analyze the facial expression and emotion in this image and respond with a JSON object.
CRITICAL FORMATTING RULES:
- Return ONLY the raw JSON object
- DO NOT wrap in markdown code blocks
- DO NOT use backticks
- DO NOT add any explanation or text
Required format (copy exactly): {"score":4}
Scoring guidelines for facial expressions:
- 1: Very negative emotion (crying, despair, anger, extreme sadness)
- 2: Negative emotion (sad face, frown, disappointed expression, frustration)
- 3: Neutral emotion (calm face, no strong emotion, relaxed, contemplative)
- 4: Positive emotion (smile, content expression, pleasant look, satisfied)
- 5: Very positive emotion (big smile, laughing, joy, excitement, elation)
Focus on the primary facial expression visible in the image."""

# Model preference order for cascade fallback
PREFERRED_MODELS = [
    'gemini-2.5-flash',
    'gemini-2.0-flash',
    'gemini-2.0-flash-lite',
]

logger = logging.getLogger(__name__)


# ============================================================================
# EXCEPTIONS
# ============================================================================

class LlmResponseError(ValueError):
    """Raised when the model reply is not a valid ``{"score": N}`` object."""
    pass


class LlmUnavailableError(Exception):
    """Raised when no model could produce a usable reply."""
    pass


# ============================================================================
# RESPONSE DECODING
# ============================================================================

def _strip_code_fence(text: str) -> str:
    cleaned = text.strip()
    if cleaned.startswith("```"):
        lines = cleaned.splitlines()[1:]
        if lines and lines[-1].strip().startswith("```"):
            lines = lines[:-1]
        cleaned = "\n".join(lines).strip()
    return cleaned


def decode_llm_response(response_text: str) -> int:
    """
    Parses the model reply into an integer score.

    Raises:
        LlmResponseError: Not JSON, not an object, missing/non-integral score.
    """
    try:
        payload = json.loads(_strip_code_fence(response_text or ""))
    except json.JSONDecodeError as e:
        raise LlmResponseError(f"Malformed JSON: {response_text!r}") from e

    if not isinstance(payload, dict) or "score" not in payload:
        raise LlmResponseError(f"Missing 'score' in {response_text!r}")

    score = payload["score"]
    if isinstance(score, bool) or not isinstance(score, (int, float)) or not float(score).is_integer():
        raise LlmResponseError(f"Score is not an integer: {score!r}")

    return int(score)


def _in_bounds(score: int) -> bool:
    return MIN_USER_RATING <= score <= MAX_RATING


# ============================================================================
# ANALYZERS
# ============================================================================

class GeminiSentimentAnalyzer:
    """LLM-backed sentiment analyzer with model cascade."""

    def __init__(self, api_key: Optional[str] = None,
                 models: Optional[Sequence[str]] = None):
        self.api_key = api_key or os.environ.get("GEMINI_API_KEY")
        self.models: List[str] = list(models or PREFERRED_MODELS)

    def _request_score(self, contents: Any) -> int:
        """
        Tries each model in order until one returns a decodable score.

        Raises:
            LlmUnavailableError: No API key, or every model failed.
        """
        if not self.api_key:
            raise LlmUnavailableError("No GEMINI_API_KEY configured")

        genai.configure(api_key=self.api_key)

        for model_name in self.models:
            try:
                model = genai.GenerativeModel(model_name)
                response = model.generate_content(contents)
                score = decode_llm_response(response.text)
                logger.info(f"Model {model_name} scored: {score}")
                return score
            except Exception as e:
                logger.warning(f"Model {model_name} failed: {e}")
                continue

        raise LlmUnavailableError("All models failed")

    def get_text_sentiment_analysis(self, text: str) -> int:
        try:
            score = self._request_score(TEXT_PROMPT + text)
            if not _in_bounds(score):
                raise LlmResponseError(f"Out-of-bounds score: {score}")
            return score
        except Exception as e:
            logger.error(f"Text sentiment analysis failed, using keyword fallback: {e}")
            return estimate_text_rating(text)

    def get_picture_sentiment_analysis(self, picture: Picture) -> int:
        try:
            score = self._request_score([
                VISION_PROMPT,
                {"mime_type": picture.mime_type, "data": picture.data},
            ])
        except Exception as e:
            logger.error(f"Vision sentiment analysis failed, returning neutral score: {e}")
            return NEUTRAL_RATING

        if not _in_bounds(score):
            logger.error(f"Vision API returned out-of-bounds score: {score}")
            return NEUTRAL_RATING

        return score


class KeywordSentimentAnalyzer:
    """Offline variant: keyword heuristic for text, neutral for photos."""

    def get_text_sentiment_analysis(self, text: str) -> int:
        return estimate_text_rating(text)

    def get_picture_sentiment_analysis(self, picture: Picture) -> int:
        return NEUTRAL_RATING


# ============================================================================
# PUBLIC API
# ============================================================================

def build_sentiment_analyzer(api_key: Optional[str] = None, no_ai: bool = False):
    """Picks the Gemini analyzer when a key is available, else the keyword one."""
    api_key = api_key or os.environ.get("GEMINI_API_KEY")
    if no_ai or not api_key:
        logger.warning("Gemini disabled, using keyword sentiment analyzer")
        return KeywordSentimentAnalyzer()
    return GeminiSentimentAnalyzer(api_key=api_key)
