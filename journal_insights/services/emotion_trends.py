"""
Emotion Trend Service

Read-side aggregates over the last 30 days of entries. Computed on every
request; nothing here is cached.

Trend buckets are contiguous and non-overlapping. Bucket k covers
(now - k days, now - previous offset days]:

    "1"  -> (now - 1d,  now]
    "5"  -> (now - 5d,  now - 1d]
    "10" -> (now - 10d, now - 5d]
    ...
    "30" -> (now - 30d, now - 25d]
"""

from collections import Counter
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from journal_insights.models import JournalEntry
from journal_insights.services.clock import server_now
from journal_insights.services.emotions import CATEGORIES, categorize_emotion

TREND_OFFSETS = (1, 5, 10, 15, 20, 25, 30)
TREND_WINDOW_DAYS = TREND_OFFSETS[-1]
TOP_EMOTIONS_LIMIT = 5
NO_ENTRIES_MESSAGE = "No journal entries found in the last 30 days"


def bucket_for_age(age: timedelta) -> Optional[int]:
    """Return the trend bucket offset for an entry of the given age, or None if outside."""
    previous = 0
    for offset in TREND_OFFSETS:
        if timedelta(days=previous) <= age < timedelta(days=offset):
            return offset
        previous = offset
    return None


def _recent_entries(db: Session, user_id: int, now: datetime, days: int):
    return (
        db.query(JournalEntry.created_at, JournalEntry.emotions)
        .filter(
            JournalEntry.user_id == user_id,
            JournalEntry.created_at > now - timedelta(days=days),
            JournalEntry.created_at <= now,
        )
        .all()
    )


def _labels(emotions) -> List[str]:
    return [
        item["emotion"]
        for item in emotions or []
        if isinstance(item, dict) and item.get("emotion")
    ]


def get_emotion_trends(db: Session, user_id: int) -> List[Dict[str, Any]]:
    """
    Count positive/negative/ambiguous emotions per trend bucket.

    Every (entry, emotion) pair adds one to the category of that emotion in
    the entry's bucket. All buckets are returned, zero-filled.
    """
    now = server_now(db)
    counts = {offset: dict.fromkeys(CATEGORIES, 0) for offset in TREND_OFFSETS}

    for created_at, emotions in _recent_entries(db, user_id, now, TREND_WINDOW_DAYS):
        offset = bucket_for_age(now - created_at)
        if offset is None:
            continue
        for label in _labels(emotions):
            counts[offset][categorize_emotion(label)] += 1

    return [{"day": str(offset), **counts[offset]} for offset in TREND_OFFSETS]


def get_top_emotions(db: Session, user_id: int) -> Dict[str, Any]:
    """Most frequent emotion labels over the last 30 days (max 5, ties by label)."""
    now = server_now(db)
    rows = _recent_entries(db, user_id, now, TREND_WINDOW_DAYS)
    if not rows:
        return {"message": NO_ENTRIES_MESSAGE}

    counter = Counter(label for _, emotions in rows for label in _labels(emotions))
    ranked = sorted(counter.items(), key=lambda item: (-item[1], item[0]))[:TOP_EMOTIONS_LIMIT]
    return {"topEmotions": [{"emotion": label, "count": count} for label, count in ranked]}
