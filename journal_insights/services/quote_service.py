"""
Daily Quote Service

Get-or-create for the per-day inspirational quote. The daily_quotes row for
(user, CURRENT_DATE) is the cache: once it exists it is returned verbatim and
the NLP service is not called again that day.
"""

import logging
from datetime import timedelta
from typing import Any, Dict, Optional

import sqlalchemy as sa
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from journal_insights.models import DailyQuote
from journal_insights.services.clock import server_now
from journal_insights.services.insights_client import GenerationError, InsightsClient, text_field
from journal_insights.services.journal_service import entries_in_window, entry_payload

logger = logging.getLogger(__name__)

QUOTE_WINDOW_DAYS = 7
START_JOURNALING_MESSAGE = "Start journaling to receive personalized daily quotes!"
DEFAULT_QUOTE_TITLE = "Today's Quote"


def find_todays_quote(db: Session, user_id: int) -> Optional[DailyQuote]:
    """Cached quote keyed on the database's CURRENT_DATE."""
    return (
        db.query(DailyQuote)
        .filter(
            DailyQuote.user_id == user_id,
            DailyQuote.quote_date == sa.func.current_date(),
        )
        .first()
    )


def serialize_quote(quote: DailyQuote) -> Dict[str, Any]:
    return {
        "title": quote.title,
        "quote": quote.quote,
        "author": quote.author,
        "citation": quote.citation,
        "explanation": quote.explanation,
        "quote_date": quote.quote_date.isoformat(),
    }


def quote_fields(generated) -> Dict[str, Any]:
    """Column values for a generated quote. Raises GenerationError when unusable."""
    if not isinstance(generated, dict):
        raise GenerationError("Generated quote is not an object")
    quote = text_field(generated, "quote")
    if not quote:
        raise GenerationError("Generated quote has no text")
    return {
        "title": text_field(generated, "title") or DEFAULT_QUOTE_TITLE,
        "quote": quote,
        "author": text_field(generated, "author"),
        "citation": text_field(generated, "citation"),
        "explanation": text_field(generated, "explanation"),
    }


def get_or_create_daily_quote(db: Session, user_id: int, client: InsightsClient) -> Dict[str, Any]:
    """
    Return today's quote for a user, generating it on the first request of the day.

    Flow:
    1. Cache hit on (user, CURRENT_DATE) -> return it
    2. No entries in the last 7 days -> sentinel, nothing stored
    3. NLP failure or unusable reply -> sentinel, nothing stored (next request retries)
    4. Insert with the database's default date, then re-read. A concurrent
       request that inserted first wins; its row is returned.
    """
    existing = find_todays_quote(db, user_id)
    if existing:
        logger.debug(f"Daily quote cache hit for user {user_id}")
        return serialize_quote(existing)

    now = server_now(db)
    entries = entries_in_window(db, user_id, now - timedelta(days=QUOTE_WINDOW_DAYS), now)
    if not entries:
        return {"message": START_JOURNALING_MESSAGE}

    try:
        generated = client.generate_quote([entry_payload(e) for e in entries])
        fields = quote_fields(generated)
    except GenerationError as e:
        logger.warning(f"Daily quote generation failed for user {user_id}: {e}")
        return {"message": START_JOURNALING_MESSAGE}

    db.add(DailyQuote(user_id=user_id, **fields))
    try:
        db.commit()
        logger.info(f"Generated daily quote for user {user_id}")
    except IntegrityError:
        db.rollback()
        logger.info(f"Daily quote for user {user_id} already generated by a concurrent request")
    except SQLAlchemyError:
        db.rollback()
        raise

    stored = find_todays_quote(db, user_id)
    if stored is None:
        # Date rolled over between insert and read-back
        logger.warning(f"Daily quote for user {user_id} not found after insert")
        return {"message": START_JOURNALING_MESSAGE}
    return serialize_quote(stored)
