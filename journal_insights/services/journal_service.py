"""
Journal Entry Service

Write path for entries (classification at write time) and the windowed
reads the insight generators aggregate over.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from journal_insights.models import JournalEntry
from journal_insights.services.clock import server_now
from journal_insights.services.emotions import normalize_emotions
from journal_insights.services.insights_client import GenerationError, InsightsClient

logger = logging.getLogger(__name__)


def _require_text(value: Optional[str], field: str) -> str:
    if value is None or not value.strip():
        raise ValueError(f"{field} is required")
    return value.strip()


def classify_content(client: InsightsClient, content: str) -> Optional[List[Dict[str, Any]]]:
    """Classify entry text. A classifier failure means "no emotions", never an error."""
    try:
        return normalize_emotions(client.classify_emotions(content))
    except GenerationError as e:
        logger.warning(f"Emotion classification failed, saving entry without emotions: {e}")
        return None


def create_entry(db: Session, user_id: int, title: str, content: str, client: InsightsClient) -> JournalEntry:
    """Create an entry; created_at is assigned by the database."""
    title = _require_text(title, "Title")
    content = _require_text(content, "Content")

    entry = JournalEntry(
        user_id=user_id,
        title=title,
        content=content,
        emotions=classify_content(client, content),
    )
    db.add(entry)
    db.commit()
    db.refresh(entry)
    return entry


def update_entry(
    db: Session,
    entry: JournalEntry,
    client: InsightsClient,
    title: Optional[str] = None,
    content: Optional[str] = None,
) -> JournalEntry:
    """Edit title/content. Emotions are recomputed only when the content changes."""
    if title is not None:
        entry.title = _require_text(title, "Title")

    if content is not None:
        content = _require_text(content, "Content")
        if content != entry.content:
            entry.content = content
            entry.emotions = classify_content(client, content)

    entry.updated_at = server_now(db)
    db.commit()
    db.refresh(entry)
    return entry


def get_entry(db: Session, user_id: int, entry_id: int) -> Optional[JournalEntry]:
    return (
        db.query(JournalEntry)
        .filter(JournalEntry.id == entry_id, JournalEntry.user_id == user_id)
        .first()
    )


def list_entries(db: Session, user_id: int) -> List[JournalEntry]:
    return (
        db.query(JournalEntry)
        .filter(JournalEntry.user_id == user_id)
        .order_by(JournalEntry.created_at.desc(), JournalEntry.id.desc())
        .all()
    )


def entries_in_window(
    db: Session,
    user_id: int,
    start: datetime,
    end: datetime,
    include_end: bool = True,
) -> List[JournalEntry]:
    """Entries with start <= created_at <= end (or < end), newest first."""
    upper = JournalEntry.created_at <= end if include_end else JournalEntry.created_at < end
    return (
        db.query(JournalEntry)
        .filter(
            JournalEntry.user_id == user_id,
            JournalEntry.created_at >= start,
            upper,
        )
        .order_by(JournalEntry.created_at.desc())
        .all()
    )


def has_entries_since(db: Session, user_id: int, start: datetime) -> bool:
    return (
        db.query(JournalEntry.id)
        .filter(JournalEntry.user_id == user_id, JournalEntry.created_at >= start)
        .first()
        is not None
    )


def entry_payload(entry: JournalEntry) -> Dict[str, Any]:
    """Shape sent to the NLP collaborators."""
    return {
        "title": entry.title,
        "content": entry.content,
        "emotions": entry.emotions,
        "created_at": entry.created_at.isoformat() if entry.created_at else None,
    }


def serialize_entry(entry: JournalEntry) -> Dict[str, Any]:
    return {
        "id": entry.id,
        "title": entry.title,
        "content": entry.content,
        "emotions": entry.emotions,
        "is_favorite": entry.is_favorite,
        "created_at": entry.created_at.isoformat() if entry.created_at else None,
        "updated_at": entry.updated_at.isoformat() if entry.updated_at else None,
    }
