"""
Keyword-based text sentiment, used when the LLM provider is unavailable.

Counts exact (case-insensitive) matches against fixed French/English
positive and negative word lists and maps the positive ratio onto 1-5.
"""

import re
from typing import FrozenSet, List

from geomood.core.rating import NEUTRAL_RATING, clamp_rating

# ============================================================================
# CONFIGURATION - KEYWORDS
# ============================================================================

class SentimentKeywords:
    """Static keyword sets (FR + EN). Never mutated at runtime."""

    POSITIVE: FrozenSet[str] = frozenset([
        # FR
        'bien', 'heureux', 'heureuse', 'content', 'contente', 'joie', 'joyeux',
        'super', 'génial', 'excellent', 'parfait', 'merveilleux', 'ravi',
        # EN
        'good', 'happy', 'great', 'wonderful', 'amazing', 'fantastic',
        'perfect', 'joy', 'love', 'glad', 'pleased',
    ])

    NEGATIVE: FrozenSet[str] = frozenset([
        # FR
        'mal', 'triste', 'malheureux', 'malheureuse', 'déprimé', 'déprimée',
        'horrible', 'terrible', 'mauvais', 'affreux', 'désespéré', 'fâché',
        # EN
        'bad', 'sad', 'unhappy', 'depressed', 'awful', 'miserable', 'angry',
        'frustrated', 'upset', 'hate',
    ])


# Straight and curly quotes included
PUNCTUATION_PATTERN = re.compile(r"""[.,!?;:'"()‘’“”]""")


# ============================================================================
# FALLBACK ESTIMATOR
# ============================================================================

def tokenize(text: str) -> List[str]:
    """Lowercases, replaces punctuation with spaces, splits on whitespace."""
    return PUNCTUATION_PATTERN.sub(" ", text.lower()).split()


def estimate_text_rating(text: str) -> int:
    """
    Scores text from keyword matches.

    Returns:
        3 when no keyword matches, otherwise round(1 + ratio * 4) in [1, 5]
        where ratio = positive / (positive + negative).
    """
    positive_count = 0
    negative_count = 0
    for word in tokenize(text or ""):
        if word in SentimentKeywords.POSITIVE:
            positive_count += 1
        if word in SentimentKeywords.NEGATIVE:
            negative_count += 1

    total_keywords = positive_count + negative_count
    if total_keywords == 0:
        return NEUTRAL_RATING

    positive_ratio = positive_count / total_keywords
    return clamp_rating(1 + positive_ratio * 4)
