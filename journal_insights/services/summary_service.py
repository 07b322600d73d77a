"""
Daily Summary Service

Rolling 7-day reflection summaries. One daily_summaries row per
(user, summary_date); rows are never updated, a new day gets a new row.
Generation runs on demand (first read of the day) and from the nightly job.
"""

import logging
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, Optional

import sqlalchemy as sa
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from journal_insights.models import DailySummary, JournalEntry
from journal_insights.services.clock import server_now, server_today
from journal_insights.services.insights_client import GenerationError, InsightsClient, text_field
from journal_insights.services.journal_service import (
    entries_in_window,
    entry_payload,
    has_entries_since,
)

logger = logging.getLogger(__name__)

SUMMARY_WINDOW_DAYS = 7
NO_SUMMARIES_MESSAGE = "No summaries available yet. Keep journaling and check back tomorrow!"


def serialize_summary(summary: DailySummary) -> Dict[str, Any]:
    return {
        "summary": summary.summary,
        "key_themes": summary.key_themes or [],
        "emotional_trends": summary.emotional_trends or {},
        "entry_count": summary.entry_count,
        "analysis_period": {
            "start": summary.analysis_period_start.isoformat(),
            "end": summary.analysis_period_end.isoformat(),
        },
        "generated_date": summary.summary_date.isoformat(),
    }


def find_summary(db: Session, user_id: int, summary_date: date) -> Optional[DailySummary]:
    return (
        db.query(DailySummary)
        .filter(DailySummary.user_id == user_id, DailySummary.summary_date == summary_date)
        .first()
    )


def latest_summary(db: Session, user_id: int) -> Optional[DailySummary]:
    return (
        db.query(DailySummary)
        .filter(DailySummary.user_id == user_id)
        .order_by(DailySummary.summary_date.desc())
        .first()
    )


def summary_fields(data) -> Dict[str, Any]:
    """Column values for a generated summary. Raises GenerationError when unusable."""
    if not isinstance(data, dict):
        raise GenerationError("Generated summary is not an object")
    summary = text_field(data, "summary")
    if not summary:
        raise GenerationError("Generated summary has no text")

    key_themes = data.get("key_themes")
    if not isinstance(key_themes, (list, tuple)):
        key_themes = []
    emotional_trends = data.get("emotional_trends")
    if not isinstance(emotional_trends, dict):
        emotional_trends = {}
    return {
        "summary": summary,
        "key_themes": [str(theme) for theme in key_themes if isinstance(theme, (str, int, float))],
        "emotional_trends": {
            str(name): value
            for name, value in emotional_trends.items()
            if isinstance(value, (int, float)) and not isinstance(value, bool)
        },
    }


def generate_daily_summary_for_user(
    db: Session,
    user_id: int,
    summary_date: date,
    client: InsightsClient,
) -> Optional[DailySummary]:
    """
    Generate and store the summary for (user, summary_date).

    Returns the existing row when one is already stored, the new row on
    success, or None when there is nothing to summarize or the NLP call failed.
    """
    existing = find_summary(db, user_id, summary_date)
    if existing:
        logger.info(f"Summary already exists for user {user_id} on {summary_date}")
        return existing

    now = server_now(db)
    entries = entries_in_window(
        db, user_id, now - timedelta(days=SUMMARY_WINDOW_DAYS), now, include_end=False
    )
    if not entries:
        logger.info(f"No entries found for user {user_id} in the past {SUMMARY_WINDOW_DAYS} days")
        return None

    try:
        data = client.summarize([entry_payload(e) for e in entries], user_id=user_id)
        fields = summary_fields(data)
    except GenerationError as e:
        logger.warning(f"Error generating summary for user {user_id}: {e}")
        return None

    db.add(DailySummary(
        user_id=user_id,
        **fields,
        entry_count=len(entries),
        analysis_period_start=summary_date - timedelta(days=SUMMARY_WINDOW_DAYS),
        analysis_period_end=summary_date - timedelta(days=1),
        summary_date=summary_date,
    ))
    try:
        db.commit()
        logger.info(f"Generated daily summary for user {user_id}")
    except IntegrityError:
        db.rollback()
        logger.info(f"Summary for user {user_id} on {summary_date} already generated concurrently")
    except SQLAlchemyError:
        db.rollback()
        raise

    return find_summary(db, user_id, summary_date)


def get_or_create_daily_summary(db: Session, user_id: int, client: InsightsClient) -> Dict[str, Any]:
    """
    Return today's summary, generating it if needed.

    Falls back to the most recent stored summary when there is nothing new to
    summarize or generation fails; only a user with no summary at all gets the
    sentinel message.
    """
    today = server_today(db)
    recent = latest_summary(db, user_id)

    if recent is not None and recent.summary_date == today:
        return serialize_summary(recent)

    window_start = server_now(db) - timedelta(days=SUMMARY_WINDOW_DAYS)
    if has_entries_since(db, user_id, window_start):
        generated = generate_daily_summary_for_user(db, user_id, today, client)
        if generated is not None:
            return serialize_summary(generated)

    if recent is None:
        return {"message": NO_SUMMARIES_MESSAGE}

    logger.debug(f"Serving stale summary from {recent.summary_date} for user {user_id}")
    return serialize_summary(recent)


def users_with_entries_on(db: Session, day: date):
    """Distinct owner ids with at least one entry created on the given day."""
    start = datetime.combine(day, time.min)
    end = start + timedelta(days=1)
    rows = (
        db.query(JournalEntry.user_id)
        .filter(JournalEntry.created_at >= start, JournalEntry.created_at < end)
        .distinct()
        .order_by(JournalEntry.user_id)
        .all()
    )
    return [row.user_id for row in rows]


def generate_daily_summaries_for_all_users(
    db: Session,
    client: InsightsClient,
    today: Optional[date] = None,
) -> Dict[str, Any]:
    """
    Generate today's summary for every user who journaled yesterday.

    Each user is handled independently: a failure is logged and the run
    continues with the next user.
    """
    today = today or server_today(db)
    yesterday = today - timedelta(days=1)

    user_ids = users_with_entries_on(db, yesterday)
    logger.info(f"Found {len(user_ids)} users with journal entries from {yesterday}")

    stats = {"date": today.isoformat(), "users": len(user_ids), "generated": 0, "skipped": 0, "errors": []}
    for user_id in user_ids:
        try:
            if generate_daily_summary_for_user(db, user_id, today, client) is not None:
                stats["generated"] += 1
            else:
                stats["skipped"] += 1
        except Exception as e:
            db.rollback()
            logger.exception(f"Failed to generate summary for user {user_id}")
            stats["errors"].append(f"user {user_id}: {e}")

    logger.info(f"Daily summary generation completed: {stats}")
    return stats
