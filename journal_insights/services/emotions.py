"""
Emotion Categories

Maps classifier labels onto the three trend categories used by insights:
positive, negative and ambiguous. Labels not listed are ambiguous.
"""

from typing import Any, Dict, List, Optional

POSITIVE = "positive"
NEGATIVE = "negative"
AMBIGUOUS = "ambiguous"

CATEGORIES = (POSITIVE, NEGATIVE, AMBIGUOUS)

POSITIVE_EMOTIONS = frozenset({
    "admiration",
    "amusement",
    "approval",
    "caring",
    "desire",
    "excitement",
    "gratitude",
    "happiness",
    "joy",
    "love",
    "optimism",
    "pride",
    "relief",
})

NEGATIVE_EMOTIONS = frozenset({
    "anger",
    "annoyance",
    "disappointment",
    "disapproval",
    "disgust",
    "embarrassment",
    "fear",
    "grief",
    "nervousness",
    "remorse",
    "sadness",
})


def categorize_emotion(label: str) -> str:
    """Return the trend category for a single emotion label."""
    key = (label or "").strip().lower()
    if key in POSITIVE_EMOTIONS:
        return POSITIVE
    if key in NEGATIVE_EMOTIONS:
        return NEGATIVE
    return AMBIGUOUS


def normalize_emotions(raw: Any) -> Optional[List[Dict[str, Any]]]:
    """
    Coerce classifier output into the stored shape.

    Accepts a list of {"emotion", "confidence"} dicts (or {"label", "score"},
    as some classifiers return), or a dict wrapping such a list under
    "emotions". Confidence is clamped to [0, 1]. Returns None when nothing
    usable remains, which is stored as "no emotions".
    """
    if isinstance(raw, dict):
        raw = raw.get("emotions")
    if not isinstance(raw, list):
        return None

    cleaned = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        label = item.get("emotion") or item.get("label")
        if not label or not isinstance(label, str):
            continue
        try:
            confidence = float(item.get("confidence", item.get("score", 0.0)))
        except (TypeError, ValueError):
            confidence = 0.0
        confidence = min(max(confidence, 0.0), 1.0)
        cleaned.append({"emotion": label.strip().lower(), "confidence": confidence})

    return cleaned or None
